"""Tests for terminal mode control sequences and frame output.

Verifies raw-mode lifecycle safety and expected escape-command payloads.
These guard the low-level terminal contract used by the runtime loop.
"""

from __future__ import annotations

import termios
import unittest
from unittest import mock

from lazycmd.runtime.terminal import TerminalController


class TerminalBehaviorTests(unittest.TestCase):
    def _controller(self) -> TerminalController:
        with mock.patch("lazycmd.runtime.terminal.termios.tcgetattr", return_value=[0]):
            return TerminalController(stdin_fd=0, stdout_fd=1)

    def test_enable_and_disable_tui_mode_use_alternate_screen_sequences(self) -> None:
        saved_state = [1, 2, 3]

        with mock.patch("lazycmd.runtime.terminal.termios.tcgetattr", return_value=saved_state), mock.patch(
            "lazycmd.runtime.terminal.tty.setraw"
        ) as setraw_mock, mock.patch("lazycmd.runtime.terminal.os.write") as write_mock, mock.patch(
            "lazycmd.runtime.terminal.termios.tcsetattr"
        ) as setattr_mock:
            controller = TerminalController(stdin_fd=0, stdout_fd=1)
            controller.enable_tui_mode()
            controller.disable_tui_mode()

        setraw_mock.assert_called_once_with(0, termios.TCSAFLUSH)
        self.assertEqual(write_mock.call_args_list[0].args, (1, b"\x1b[?1049h\x1b[?25l"))
        self.assertEqual(write_mock.call_args_list[1].args, (1, b"\x1b[?25h\x1b[?1049l"))
        setattr_mock.assert_called_once_with(0, termios.TCSAFLUSH, saved_state)

    def test_raw_mode_restores_terminal_after_exception(self) -> None:
        controller = self._controller()

        with mock.patch.object(controller, "enable_tui_mode") as enable_mock, mock.patch.object(
            controller, "disable_tui_mode"
        ) as disable_mock:
            with self.assertRaises(RuntimeError):
                with controller.raw_mode():
                    raise RuntimeError("boom")

        enable_mock.assert_called_once()
        disable_mock.assert_called_once()

    def test_draw_lines_positions_each_row_in_one_write(self) -> None:
        controller = self._controller()

        with mock.patch("lazycmd.runtime.terminal.os.write") as write_mock:
            controller.draw_lines({2: "two", 0: "zero"})

        write_mock.assert_called_once_with(
            1,
            b"\x1b[1;1H\x1b[2Kzero\x1b[0m\x1b[3;1H\x1b[2Ktwo\x1b[0m",
        )

    def test_draw_lines_without_changes_writes_nothing(self) -> None:
        controller = self._controller()

        with mock.patch("lazycmd.runtime.terminal.os.write") as write_mock:
            controller.draw_lines({})

        write_mock.assert_not_called()


if __name__ == "__main__":
    unittest.main()

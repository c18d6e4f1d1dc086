"""Regression tests for raw-key decoding.

Covers ESC timing, arrow/paging/function-key sequences, and control keys.
"""

import os
import time
import unittest

from lazycmd.runtime import keys as keys_mod


class ReadKeyRegressionTests(unittest.TestCase):
    def setUp(self) -> None:
        keys_mod._PENDING_BYTES.clear()

    def tearDown(self) -> None:
        keys_mod._PENDING_BYTES.clear()

    def _read_all(self, payload: bytes, count: int) -> list[str]:
        read_fd, write_fd = os.pipe()
        try:
            os.write(write_fd, payload)
            return [keys_mod.read_key(read_fd, timeout_ms=20) for _ in range(count)]
        finally:
            os.close(read_fd)
            os.close(write_fd)

    def test_single_escape_returns_esc_without_second_keypress(self) -> None:
        started = time.monotonic()
        keys = self._read_all(b"\x1b", 1)
        elapsed = time.monotonic() - started

        self.assertEqual(keys, ["ESC"])
        # Esc waits briefly for sequence bytes, but should not require another key press.
        self.assertLess(elapsed, 0.2)

    def test_timeout_without_input_returns_empty(self) -> None:
        read_fd, write_fd = os.pipe()
        try:
            self.assertEqual(keys_mod.read_key(read_fd, timeout_ms=10), "")
        finally:
            os.close(read_fd)
            os.close(write_fd)

    def test_arrow_sequences(self) -> None:
        self.assertEqual(self._read_all(b"\x1b[A\x1b[B\x1b[C\x1b[D", 4), ["UP", "DOWN", "RIGHT", "LEFT"])

    def test_paging_and_home_end_sequences(self) -> None:
        payload = b"\x1b[5~\x1b[6~\x1b[H\x1b[F\x1b[1~\x1b[4~\x1b[2~"
        self.assertEqual(
            self._read_all(payload, 7),
            ["PAGE_UP", "PAGE_DOWN", "HOME", "END", "HOME", "END", "INSERT"],
        )

    def test_function_keys_in_both_encodings(self) -> None:
        self.assertEqual(self._read_all(b"\x1bOR\x1b[13~\x1b[21~", 3), ["F3", "F3", "F10"])

    def test_modified_home_reports_plain_key(self) -> None:
        self.assertEqual(self._read_all(b"\x1b[1;5H", 1), ["HOME"])

    def test_escape_does_not_swallow_following_printable_key(self) -> None:
        self.assertEqual(self._read_all(b"\x1ba", 2), ["ESC", "a"])

    def test_control_keys(self) -> None:
        self.assertEqual(
            self._read_all(b"\t\r \x7f\x03\x12", 6),
            ["TAB", "ENTER", "SPACE", "BACKSPACE", "CTRL_C", "CTRL_R"],
        )


if __name__ == "__main__":
    unittest.main()

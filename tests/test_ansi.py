"""Regression tests for ANSI-aware measurement and cell fitting."""

import unittest

from lazycmd import ansi as ansi_mod


class DisplayWidthTests(unittest.TestCase):
    def test_escape_sequences_take_no_columns(self) -> None:
        self.assertEqual(ansi_mod.display_width("\033[1;34mabc\033[0m"), 3)

    def test_wide_characters_take_two_columns(self) -> None:
        self.assertEqual(ansi_mod.display_width("日本"), 4)

    def test_clip_keeps_escapes_and_stops_at_width(self) -> None:
        self.assertEqual(ansi_mod.clip_ansi_line("\033[31mabcdef", 3), "\033[31mabc")
        self.assertEqual(ansi_mod.clip_ansi_line("日本語", 3), "日")


class FitCellTests(unittest.TestCase):
    def test_pads_left_aligned(self) -> None:
        self.assertEqual(ansi_mod.fit_cell("ab", 4), "ab  ")

    def test_pads_right_aligned(self) -> None:
        self.assertEqual(ansi_mod.fit_cell("ab", 4, align="right"), "  ab")

    def test_overlong_text_is_marked(self) -> None:
        self.assertEqual(ansi_mod.fit_cell("abcdef", 4), "abc~")
        self.assertEqual(ansi_mod.fit_cell("abcdef", 1), "~")

    def test_wide_character_truncation_keeps_exact_width(self) -> None:
        fitted = ansi_mod.fit_cell("日本語", 4)

        self.assertEqual(fitted, "日 ~")
        self.assertEqual(ansi_mod.display_width(fitted), 4)

    def test_zero_width(self) -> None:
        self.assertEqual(ansi_mod.fit_cell("abc", 0), "")


if __name__ == "__main__":
    unittest.main()

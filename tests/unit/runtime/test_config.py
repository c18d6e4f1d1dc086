"""Tests for persisted pane state and validated config values."""

from __future__ import annotations

import json
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from lazycmd.listing import DEFAULT_CACHE_CAPACITY, SortKey
from lazycmd.pane.rendering import DEFAULT_COLUMN_WIDTHS
from lazycmd.runtime import config


class ConfigBehaviorTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.config_path = Path(self._tmp.name) / "nested" / "config.json"
        patcher = mock.patch("lazycmd.runtime.config.CONFIG_PATH", self.config_path)
        patcher.start()
        self.addCleanup(patcher.stop)

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def _write(self, data: object) -> None:
        self.config_path.parent.mkdir(parents=True, exist_ok=True)
        self.config_path.write_text(json.dumps(data), encoding="utf-8")

    def test_missing_config_gives_defaults(self) -> None:
        self.assertEqual(config.load_config(), {})
        self.assertEqual(config.load_pane_state("left"), config.PaneState())
        self.assertEqual(config.load_cache_capacity(), DEFAULT_CACHE_CAPACITY)
        self.assertEqual(config.load_column_widths(), DEFAULT_COLUMN_WIDTHS)
        self.assertIsNone(config.load_theme_name())

    def test_malformed_json_is_ignored(self) -> None:
        self.config_path.parent.mkdir(parents=True)
        self.config_path.write_text("{not json", encoding="utf-8")

        self.assertEqual(config.load_config(), {})

    def test_non_object_json_is_ignored(self) -> None:
        self._write([1, 2, 3])

        self.assertEqual(config.load_config(), {})

    def test_pane_states_round_trip(self) -> None:
        left = config.PaneState(path="/tmp/a", active=3, sort_key=SortKey.MODIFIED, ascending=False)
        right = config.PaneState(path="/tmp/b", dir_first=False)

        config.save_pane_states({"left": left, "right": right})

        self.assertEqual(config.load_pane_state("left"), left)
        self.assertEqual(config.load_pane_state("right"), right)
        saved = json.loads(self.config_path.read_text(encoding="utf-8"))
        self.assertEqual(saved["left"]["sort_key"], "date")

    def test_saving_pane_states_keeps_other_keys(self) -> None:
        self._write({"cache_capacity": 9, "theme": "ocean"})

        config.save_pane_states({"left": config.PaneState(path="/x")})

        self.assertEqual(config.load_cache_capacity(), 9)
        self.assertEqual(config.load_theme_name(), "ocean")

    def test_bad_pane_values_are_sanitized(self) -> None:
        self._write(
            {
                "left": {
                    "path": 12,
                    "active": -4,
                    "sort_key": "size",
                    "ascending": "no",
                    "dir_first": None,
                },
                "right": "oops",
            }
        )

        self.assertEqual(config.load_pane_state("left"), config.PaneState())
        self.assertEqual(config.load_pane_state("right"), config.PaneState())

    def test_boolean_active_is_rejected(self) -> None:
        self._write({"left": {"path": "/x", "active": True}})

        self.assertEqual(config.load_pane_state("left").active, 0)

    def test_unknown_side_is_rejected(self) -> None:
        with self.assertRaises(ValueError):
            config.load_pane_state("middle")

    def test_focused_side_round_trip(self) -> None:
        self.assertEqual(config.load_focused_side(), "left")

        config.save_pane_states({"left": config.PaneState(path="/tmp/a")}, focused="right")

        self.assertEqual(config.load_focused_side(), "right")
        self.assertEqual(config.load_pane_state("left").path, "/tmp/a")

    def test_bad_focused_side_falls_back_to_left(self) -> None:
        self._write({"focused": "middle"})
        self.assertEqual(config.load_focused_side(), "left")

        with self.assertRaises(ValueError):
            config.save_pane_states({}, focused="middle")

    def test_cache_capacity_must_be_positive_int(self) -> None:
        for bad in (0, -1, True, "5", 2.5):
            with self.subTest(value=bad):
                self._write({"cache_capacity": bad})
                self.assertEqual(config.load_cache_capacity(), DEFAULT_CACHE_CAPACITY)
        self._write({"cache_capacity": 12})
        self.assertEqual(config.load_cache_capacity(), 12)

    def test_column_widths_validation(self) -> None:
        self._write({"widths": [0, 4, 8, 16, 10]})
        self.assertEqual(config.load_column_widths(), (0, 4, 8, 16, 10))

        for bad in ([0, 4], [0, 4, 8, 16, -1], [0, 4, 8, 16, "x"], "wide"):
            with self.subTest(value=bad):
                self._write({"widths": bad})
                self.assertEqual(config.load_column_widths(), DEFAULT_COLUMN_WIDTHS)

    def test_save_failure_is_not_fatal(self) -> None:
        blocker = Path(self._tmp.name) / "blocker"
        blocker.write_text("file, not a directory", encoding="utf-8")
        with mock.patch("lazycmd.runtime.config.CONFIG_PATH", blocker / "config.json"):
            config.save_config({"theme": "ocean"})


if __name__ == "__main__":
    unittest.main()

"""Tests for lazily resolved entry metadata and folder sizes."""

from __future__ import annotations

import asyncio
import os
import tempfile
import threading
import unittest

from lazycmd.listing import EntryKind, EntryMetadata, EntryStatFailure, MetadataProbe
from lazycmd.listing.errors import DirectorySizeFailure


class _CountingStat:
    """Thread-safe fake ``stat`` returning a bigger size on every call."""

    def __init__(self) -> None:
        self.calls = 0
        self._lock = threading.Lock()

    def __call__(self, path: str) -> EntryMetadata:
        with self._lock:
            self.calls += 1
            return EntryMetadata(size=self.calls, mtime=1000.0 + self.calls, mode=0o100644)


class MetadataProbeTests(unittest.IsolatedAsyncioTestCase):
    async def test_concurrent_resolutions_share_one_stat(self) -> None:
        stat_entry = _CountingStat()
        probe = MetadataProbe("/tmp", "a.txt", EntryKind.FILE, stat_entry=stat_entry)

        results = await asyncio.gather(*(probe.resolve_metadata() for _ in range(5)))

        self.assertEqual(stat_entry.calls, 1)
        self.assertTrue(all(result is results[0] for result in results))
        self.assertEqual(probe.metadata, results[0])
        self.assertFalse(probe.metadata_pending)

    async def test_memoized_metadata_is_not_restatted(self) -> None:
        stat_entry = _CountingStat()
        probe = MetadataProbe("/tmp", "a.txt", EntryKind.FILE, stat_entry=stat_entry)

        await probe.resolve_metadata()
        await probe.resolve_metadata()

        self.assertEqual(stat_entry.calls, 1)

    async def test_refresh_during_inflight_stat_queues_second_stat(self) -> None:
        stat_entry = _CountingStat()
        probe = MetadataProbe("/tmp", "a.txt", EntryKind.FILE, stat_entry=stat_entry)

        first = asyncio.ensure_future(probe.resolve_metadata())
        await asyncio.sleep(0)
        probe.refresh()
        second = await probe.resolve_metadata()
        stale = await first

        self.assertEqual(stat_entry.calls, 2)
        self.assertEqual(stale.size, 1)
        self.assertEqual(second.size, 2)
        self.assertEqual(probe.metadata.size, 2)

    async def test_refresh_after_resolution_drops_memo(self) -> None:
        stat_entry = _CountingStat()
        probe = MetadataProbe("/tmp", "a.txt", EntryKind.FILE, stat_entry=stat_entry)
        await probe.resolve_metadata()

        probe.refresh()

        self.assertIsNone(probe.metadata)
        self.assertTrue(probe.metadata_pending)
        self.assertEqual((await probe.resolve_metadata()).size, 2)

    async def test_stat_failure_is_recorded_not_raised(self) -> None:
        def failing_stat(path: str) -> EntryMetadata:
            raise PermissionError(13, "Permission denied", path)

        probe = MetadataProbe("/tmp", "secret", EntryKind.FILE, stat_entry=failing_stat)

        self.assertIsNone(await probe.resolve_metadata())
        self.assertIsInstance(probe.stat_error, EntryStatFailure)
        self.assertEqual(probe.stat_error.path, os.path.join("/tmp", "secret"))
        self.assertFalse(probe.metadata_pending)
        self.assertIsNone(await probe.resolve_size())

    async def test_file_size_comes_from_metadata(self) -> None:
        stat_entry = _CountingStat()
        probe = MetadataProbe("/tmp", "a.txt", EntryKind.FILE, stat_entry=stat_entry)

        self.assertTrue(probe.size_pending)
        self.assertEqual(await probe.resolve_size(), 1)
        self.assertEqual(probe.size, 1)
        self.assertEqual(stat_entry.calls, 1)

    async def test_directory_size_is_computed_once(self) -> None:
        calls: list[str] = []

        def folder_size(path: str) -> int:
            calls.append(path)
            return 4096

        probe = MetadataProbe("/tmp", "sub", EntryKind.DIRECTORY, folder_size=folder_size)

        sizes = await asyncio.gather(probe.resolve_size(), probe.resolve_size())

        self.assertEqual(sizes, [4096, 4096])
        self.assertEqual(calls, [os.path.join("/tmp", "sub")])
        self.assertEqual(probe.size, 4096)
        self.assertFalse(probe.size_pending)

    async def test_directory_size_failure_is_recorded(self) -> None:
        def folder_size(path: str) -> int:
            raise OSError(2, "No such file or directory", path)

        probe = MetadataProbe("/tmp", "gone", EntryKind.DIRECTORY, folder_size=folder_size)

        self.assertIsNone(await probe.resolve_size())
        self.assertIsInstance(probe.size_error, DirectorySizeFailure)
        self.assertFalse(probe.size_pending)

    async def test_refresh_during_inflight_folder_size_queues_second_walk(self) -> None:
        release = threading.Event()
        started = threading.Event()
        lock = threading.Lock()
        state = {"calls": 0, "running": 0, "overlap": False}

        def folder_size(path: str) -> int:
            with lock:
                state["calls"] += 1
                call = state["calls"]
                state["running"] += 1
                state["overlap"] = state["overlap"] or state["running"] > 1
            started.set()
            if call == 1:
                release.wait(5)
            with lock:
                state["running"] -= 1
            return 100 * call

        probe = MetadataProbe("/tmp", "sub", EntryKind.DIRECTORY, folder_size=folder_size)

        first = asyncio.ensure_future(probe.resolve_size())
        while not started.is_set():
            await asyncio.sleep(0.01)
        probe.refresh()
        second = asyncio.ensure_future(probe.resolve_size())
        await asyncio.sleep(0.05)
        self.assertEqual(state["calls"], 1)
        release.set()

        self.assertEqual(await first, 100)
        self.assertEqual(await second, 200)
        self.assertEqual(state["calls"], 2)
        self.assertFalse(state["overlap"])
        self.assertEqual(probe.size, 200)

    async def test_real_file_metadata(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            with open(os.path.join(tmp, "data.bin"), "wb") as handle:
                handle.write(b"x" * 42)
            probe = MetadataProbe(tmp, "data.bin", EntryKind.FILE)

            metadata = await probe.resolve_metadata()

        self.assertEqual(metadata.size, 42)
        self.assertEqual(probe.size, 42)


class MetadataProbeShapeTests(unittest.TestCase):
    def test_extension_uses_last_suffix_without_dot(self) -> None:
        self.assertEqual(MetadataProbe("/tmp", "archive.tar.gz", EntryKind.FILE).extension, "gz")
        self.assertEqual(MetadataProbe("/tmp", "README", EntryKind.FILE).extension, "")
        self.assertEqual(MetadataProbe("/tmp", ".bashrc", EntryKind.FILE).extension, "")

    def test_synthetic_entries_are_directories_without_extension(self) -> None:
        dot = MetadataProbe.synthetic("/tmp/x", ".")
        parent = MetadataProbe.synthetic("/tmp/x", "..")

        self.assertTrue(dot.is_synthetic)
        self.assertTrue(dot.is_directory)
        self.assertEqual(dot.extension, "")
        self.assertEqual(dot.path, "/tmp/x")
        self.assertEqual(parent.path, "/tmp")

    def test_synthetic_rejects_other_names(self) -> None:
        with self.assertRaises(ValueError):
            MetadataProbe.synthetic("/tmp", "sub")

    def test_selection_is_plain_state(self) -> None:
        probe = MetadataProbe("/tmp", "a.txt", EntryKind.FILE)

        self.assertFalse(probe.is_selected())
        probe.set_selected(True)
        self.assertTrue(probe.is_selected())


if __name__ == "__main__":
    unittest.main()

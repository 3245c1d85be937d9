"""Tests for scratch file management."""

import os
import re
import time

import pytest

from framecast.storage.temp_store import ScratchStore


@pytest.fixture
def store(tmp_path):
    return ScratchStore(tmp_path / "scratch")


class TestAllocate:
    def test_creates_base_dir(self, store):
        assert store.base_dir.is_dir()

    def test_name_format(self, store):
        path = store.allocate("video", ".MP4")
        assert path.parent == store.base_dir
        assert re.fullmatch(r"video-\d{13}-\d{9}\.mp4", path.name)
        assert not path.exists()

    def test_names_are_unique(self, store):
        names = {store.allocate("video", "mp4").name for _ in range(200)}
        assert len(names) == 200

    def test_empty_extension(self, store):
        assert store.allocate("input", "").suffix == ".bin"


class TestDelete:
    def test_deletes_once(self, store):
        path = store.allocate("video", "mp4")
        path.write_bytes(b"data")
        assert store.delete(path) is True
        assert not path.exists()
        assert store.delete(path) is False

    def test_none(self, store):
        assert store.delete(None) is False

    def test_failure_is_logged_not_raised(self, store, caplog):
        directory = store.base_dir / "not-a-file"
        directory.mkdir()
        assert store.delete(directory) is False
        assert "Failed to delete" in caplog.text


class TestSweepExpired:
    def test_removes_old_files_only(self, store):
        old = store.allocate("video", "mp4")
        old.write_bytes(b"old")
        stale = time.time() - 7200
        os.utime(old, (stale, stale))
        fresh = store.allocate("video", "mp4")
        fresh.write_bytes(b"new")

        assert store.sweep_expired(ttl_seconds=3600) == 1
        assert not old.exists()
        assert fresh.exists()

"""
缓存模块单元测试 — 测试磁盘缓存、缓存键和读写锁。

覆盖范围:
- cache/keys.py: 缓存键与 SHA-256 指纹
- cache/disk.py: DiskCache 读写、损坏降级、清空
- cache/lock.py: RWLock 多读单写
"""

from __future__ import annotations

import json
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

import pytest

from token_visualizer.cache import (
    DiskCache,
    LookupStatus,
    RWLock,
    default_cache_dir,
    fingerprint,
    make_cache_key,
)
from token_visualizer.errors import CacheError


# === 缓存键测试 ===


class TestCacheKeys:
    """缓存键与指纹测试。"""

    def test_key_layout(self) -> None:
        assert make_cache_key("claude", "m", "Hello") == "claude:m:Hello"

    def test_key_is_case_and_whitespace_sensitive(self) -> None:
        keys = {
            make_cache_key("claude", "m", "Hello"),
            make_cache_key("claude", "m", "hello"),
            make_cache_key("claude", "m", "Hello "),
        }
        assert len(keys) == 3

    def test_fingerprint_is_sha256_hex(self) -> None:
        digest = fingerprint("claude:m:Hello")
        assert len(digest) == 64
        assert digest == fingerprint("claude:m:Hello")
        assert digest != fingerprint("claude:m:hello")


# === DiskCache 测试 ===


class TestDiskCache:
    """DiskCache 测试。"""

    def test_creates_directory(self, cache_dir: Path) -> None:
        assert not cache_dir.exists()
        DiskCache(cache_dir)
        assert cache_dir.is_dir()

    def test_default_directory(self) -> None:
        assert default_cache_dir() == Path.home() / ".cache" / "token-visualizer"

    def test_unusable_directory_raises(self, tmp_path: Path) -> None:
        blocker = tmp_path / "file"
        blocker.write_text("not a directory")
        with pytest.raises(CacheError):
            DiskCache(blocker / "cache")

    def test_put_then_get(self, disk_cache: DiskCache) -> None:
        assert disk_cache.put("claude:m:Hello", 8)
        assert disk_cache.get("claude:m:Hello") == 8
        assert "claude:m:Hello" in disk_cache

    def test_miss(self, disk_cache: DiskCache) -> None:
        lookup = disk_cache.lookup("claude:m:absent")
        assert lookup.status is LookupStatus.MISS
        assert not lookup.hit
        assert disk_cache.get("claude:m:absent", default=-1) == -1

    def test_file_named_by_fingerprint(self, disk_cache: DiskCache) -> None:
        key = "claude:m:Hello"
        disk_cache.put(key, 8)
        path = disk_cache.path_for(key)
        assert path.name == f"{fingerprint(key)}.json"
        assert json.loads(path.read_text(encoding="utf-8")) == 8
        assert "Hello" not in path.name

    def test_no_temp_files_left_behind(self, disk_cache: DiskCache) -> None:
        disk_cache.put("k", {"input_tokens": 3})
        assert [p.name for p in disk_cache.directory.iterdir()] == [disk_cache.path_for("k").name]

    def test_corrupt_entry_reads_as_error(self, disk_cache: DiskCache, caplog: pytest.LogCaptureFixture) -> None:
        disk_cache.path_for("k").write_text("{not json", encoding="utf-8")
        with caplog.at_level("WARNING"):
            lookup = disk_cache.lookup("k")
        assert lookup.status is LookupStatus.ERROR
        assert lookup.error
        assert disk_cache.get("k") is None
        assert any("损坏" in record.message for record in caplog.records)

    def test_unserializable_value_is_skipped(self, disk_cache: DiskCache) -> None:
        assert disk_cache.put("k", object()) is False
        assert "k" not in disk_cache

    def test_clear_removes_everything_and_is_idempotent(self, disk_cache: DiskCache) -> None:
        disk_cache.put("a", 1)
        disk_cache.put("b", 2)
        disk_cache.clear()
        assert not disk_cache.directory.exists()
        disk_cache.clear()
        assert disk_cache.get("a") is None

    def test_put_after_clear_recreates_directory(self, disk_cache: DiskCache) -> None:
        disk_cache.clear()
        assert disk_cache.put("a", 1)
        assert disk_cache.get("a") == 1

    def test_concurrent_readers_and_writers(self, disk_cache: DiskCache) -> None:
        keys = [f"claude:m:text-{i}" for i in range(20)]

        def work(i: int) -> None:
            key = keys[i % len(keys)]
            disk_cache.put(key, i % len(keys))
            value = disk_cache.get(key)
            assert value is None or value == i % len(keys)

        with ThreadPoolExecutor(max_workers=8) as pool:
            list(pool.map(work, range(200)))

        for i, key in enumerate(keys):
            assert disk_cache.get(key) == i


# === RWLock 测试 ===


class TestRWLock:
    """RWLock 测试。"""

    def test_readers_share_the_lock(self) -> None:
        lock = RWLock()
        inside = threading.Barrier(3, timeout=5)

        def reader() -> None:
            with lock.read():
                inside.wait()

        threads = [threading.Thread(target=reader) for _ in range(3)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=5)
        assert not any(thread.is_alive() for thread in threads)

    def test_writer_is_exclusive(self) -> None:
        lock = RWLock()
        active = 0
        peak = 0
        guard = threading.Lock()

        def writer() -> None:
            nonlocal active, peak
            with lock.write():
                with guard:
                    active += 1
                    peak = max(peak, active)
                time.sleep(0.01)
                with guard:
                    active -= 1

        threads = [threading.Thread(target=writer) for _ in range(5)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=5)
        assert peak == 1

from __future__ import annotations

import os
from pathlib import Path

import pytest

from aware_bundle.runner.cache import Cache, CacheFingerprint


@pytest.fixture
def source(tmp_path: Path) -> Path:
    path = tmp_path / "index.js"
    path.write_text("module.exports = 1;", encoding="utf-8")
    return path


@pytest.mark.parametrize("method", ["stat", "hash"])
def test_stored_output_is_returned_while_file_is_unchanged(tmp_path: Path, source: Path, method: str) -> None:
    cache = Cache(tmp_path / "cache", method=method)
    fingerprint = CacheFingerprint(str(source), "opts")

    cache.store(fingerprint, "wrapped", signature=cache.signature(str(source)))

    assert cache.lookup(fingerprint, signature=cache.signature(str(source))) == "wrapped"


@pytest.mark.parametrize("method", ["stat", "hash"])
def test_edited_file_invalidates_entry(tmp_path: Path, source: Path, method: str) -> None:
    cache = Cache(tmp_path / "cache", method=method)
    fingerprint = CacheFingerprint(str(source), "opts")
    cache.store(fingerprint, "wrapped", signature=cache.signature(str(source)))

    source.write_text("module.exports = 'changed';", encoding="utf-8")

    assert cache.lookup(fingerprint, signature=cache.signature(str(source))) is None


def test_hash_method_ignores_touch(tmp_path: Path, source: Path) -> None:
    cache = Cache(tmp_path / "cache", method="hash")
    fingerprint = CacheFingerprint(str(source), "opts")
    cache.store(fingerprint, "wrapped", signature=cache.signature(str(source)))

    stat = source.stat()
    os.utime(source, ns=(stat.st_atime_ns, stat.st_mtime_ns + 5_000_000_000))

    assert cache.lookup(fingerprint, signature=cache.signature(str(source))) == "wrapped"


def test_option_hash_is_part_of_the_key(source: Path) -> None:
    first = CacheFingerprint(str(source), "a")
    second = CacheFingerprint(str(source), "b")

    assert first.key != second.key
    assert first.key == CacheFingerprint(str(source), "a").key


def test_malformed_entry_is_a_miss(tmp_path: Path, source: Path) -> None:
    cache = Cache(tmp_path / "cache")
    fingerprint = CacheFingerprint(str(source), "opts")
    cache.disk.set(fingerprint.key, "not an entry")

    assert cache.lookup(fingerprint, signature=cache.signature(str(source))) is None


def test_entries_survive_reopening(tmp_path: Path, source: Path) -> None:
    fingerprint = CacheFingerprint(str(source), "opts")
    with Cache(tmp_path / "cache") as cache:
        cache.store(fingerprint, "wrapped", signature=cache.signature(str(source)))

    with Cache(tmp_path / "cache") as reopened:
        assert reopened.lookup(fingerprint, signature=reopened.signature(str(source))) == "wrapped"


def test_size_limit_evicts_old_entries(tmp_path: Path, source: Path) -> None:
    cache = Cache(tmp_path / "cache", size_limit=64 * 1024)
    signature = cache.signature(str(source))
    payload = "x" * 40 * 1024

    for index in range(32):
        cache.store(CacheFingerprint(str(source), f"opts-{index}"), payload, signature=signature)

    assert len(cache.disk) < 32
    cache.close()


def test_unknown_method_is_rejected(tmp_path: Path) -> None:
    with pytest.raises(ValueError):
        Cache(tmp_path, method="mtime")  # type: ignore[arg-type]

"""On-disk cache for transformed module sources."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Literal, Optional

from diskcache import Cache as DiskCache

from ..utils import compute_sha256, hash_text

logger = logging.getLogger(__name__)

CacheMethod = Literal["stat", "hash"]

DEFAULT_CACHE_PATH = Path.home() / ".aware-bundle-cache"
DEFAULT_SIZE_LIMIT = 512 * 1024 * 1024


@dataclass(frozen=True, slots=True)
class CacheFingerprint:
    """Cache identity of one file under one option set."""

    path: str
    options_hash: str

    @property
    def key(self) -> str:
        return hash_text(os.path.abspath(self.path), self.options_hash)


class Cache:
    """Stores one entry per fingerprint, validated against the file on disk.

    ``method="stat"`` compares size and mtime; ``method="hash"`` compares a
    SHA-256 of the file contents. Entries live in a ``diskcache.Cache`` that
    evicts least-recently-used entries beyond ``size_limit`` bytes.
    """

    def __init__(
        self,
        path: Optional[Path] = None,
        *,
        method: CacheMethod = "stat",
        size_limit: int = DEFAULT_SIZE_LIMIT,
    ) -> None:
        if method not in ("stat", "hash"):
            raise ValueError(f"Unknown cache method '{method}'")
        self.path = Path(path) if path else DEFAULT_CACHE_PATH
        self.method = method
        self.disk = DiskCache(
            str(self.path),
            size_limit=size_limit,
            eviction_policy="least-recently-used",
        )

    def signature(self, file_path: str) -> str:
        path = Path(file_path)
        if self.method == "hash":
            return compute_sha256(path)
        stat = path.stat()
        return f"{stat.st_size}:{stat.st_mtime_ns}"

    def lookup(self, fingerprint: CacheFingerprint, *, signature: str) -> Optional[str]:
        """Return cached output, or ``None`` when missing or stale."""

        entry = self.disk.get(fingerprint.key, default=None, retry=True)
        if not isinstance(entry, dict):
            if entry is not None:
                logger.warning("Ignoring malformed cache entry for %s", fingerprint.path)
            return None
        if entry.get("signature") != signature:
            return None
        output = entry.get("output")
        return output if isinstance(output, str) else None

    def store(self, fingerprint: CacheFingerprint, output: str, *, signature: str) -> None:
        self.disk.set(
            fingerprint.key,
            {
                "path": os.path.abspath(fingerprint.path),
                "method": self.method,
                "signature": signature,
                "output": output,
            },
            tag=fingerprint.options_hash,
            retry=True,
        )

    def close(self) -> None:
        self.disk.close()

    def __enter__(self) -> "Cache":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

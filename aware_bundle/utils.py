"""Shared helpers used by bundle tooling."""

from __future__ import annotations

import hashlib
import json
from pathlib import Path
from typing import Any

SOURCE_ENCODING = "utf-8"
# undecodable bytes round-trip to the sink unchanged
SOURCE_ERRORS = "surrogateescape"


def compute_sha256(path: Path) -> str:
    """Return the SHA-256 checksum for a file."""

    digest = hashlib.sha256()
    with path.open("rb") as handle:
        for chunk in iter(lambda: handle.read(1024 * 1024), b""):
            digest.update(chunk)
    return digest.hexdigest()


def hash_text(*parts: str) -> str:
    """Return the SHA-256 hex digest of NUL-joined text parts."""

    return hashlib.sha256("\0".join(parts).encode("utf-8")).hexdigest()


def canonical_json(payload: Any) -> str:
    return json.dumps(payload, sort_keys=True, separators=(",", ":"), default=str)


def read_source(path: str) -> str:
    """Read a source file without newline translation."""

    with open(path, encoding=SOURCE_ENCODING, errors=SOURCE_ERRORS, newline="") as handle:
        return handle.read()

"""Post-build reporting of cache hits and package sizes."""

from __future__ import annotations

import logging
import os
from dataclasses import replace
from typing import List, Optional, Sequence, TextIO

from ..graph.models import BuildRequest, PackageRecord
from ..runner.engine import RunResult
from ..schemas.options import BundleOptions

logger = logging.getLogger(__name__)


def report_cache_hits(
    request: BuildRequest,
    result: RunResult,
    options: BundleOptions,
    stream: TextIO,
) -> Optional[List[PackageRecord]]:
    """Report after the bundle is committed; returns the display-only packages.

    Files served from the cache are left out of the package report. The
    request itself is never modified.
    """

    if not (options.report or options.verbose or options.progress):
        return None

    packages = list(request.packages)
    if result.hits:
        stream.write(
            f"Cache hits ({options.cache_path or 'default cache'}): "
            f"{len(result.hits)} / {len(request.files)} files\n"
        )
        hits = set(result.hits)
        packages = [
            replace(package, files=[record for record in package.files if record.path not in hits])
            for package in packages
        ]

    if options.report:
        stream.write(format_package_report(packages))
    return packages


def format_package_report(packages: Sequence[PackageRecord]) -> str:
    lines: List[str] = []
    grand_total = 0
    for package in packages:
        sizes = []
        for record in package.files:
            try:
                size = os.path.getsize(record.path)
            except OSError:
                logger.debug("Unable to stat %s", record.path)
                size = 0
            name = os.path.relpath(record.path, package.basepath or ".").replace(os.sep, "/")
            sizes.append((size, name))
        total = sum(size for size, _ in sizes)
        grand_total += total
        lines.append(f"{package.label} ({len(sizes)} files, {format_size(total)})")
        for size, name in sorted(sizes, key=lambda item: (-item[0], item[1])):
            lines.append(f"  {format_size(size):>9}  {name}")
    lines.append(f"Total: {format_size(grand_total)}")
    return "\n".join(lines) + "\n"


def format_size(size: int) -> str:
    if size < 1024:
        return f"{size}b"
    if size < 1024 * 1024:
        return f"{size / 1024:.1f}k"
    return f"{size / (1024 * 1024):.1f}M"

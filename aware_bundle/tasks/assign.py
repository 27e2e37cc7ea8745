"""Attach transform pipelines to files and prune non-source assets."""

from __future__ import annotations

import logging
import os
from typing import Callable, List, Mapping, Sequence

from ..errors import MissingFileError
from ..graph.models import BuildRequest, FileRecord, PackageRecord
from .transforms import FileTask, ShellCommand, get_file_tasks

logger = logging.getLogger(__name__)

TaskLookup = Callable[[FileRecord, PackageRecord, Mapping[str, ShellCommand]], Sequence[FileTask]]


def assign_file_tasks(
    request: BuildRequest,
    commands: Mapping[str, ShellCommand],
    *,
    get_tasks: TaskLookup = get_file_tasks,
) -> List[str]:
    """Fill ``FileRecord.tasks`` and drop files without tasks.

    Touches ``FileRecord.tasks``, ``PackageRecord.files`` and
    ``request.files``; returns the removed paths.
    """

    removed: List[str] = []
    for package in request.packages:
        kept: List[FileRecord] = []
        for record in package.files:
            if not os.path.exists(record.path):
                raise MissingFileError(record.path, package.basepath)
            record.tasks = list(get_tasks(record, package, commands))
            if not record.tasks:
                logger.info(
                    "Excluded non-js/non-json file: %s",
                    os.path.relpath(record.path, package.basepath or "."),
                )
                removed.append(record.path)
                continue
            kept.append(record)
        package.files = kept

    # the build-wide list is only rewritten once every package is done
    if removed:
        dropped = set(removed)
        request.files = [record for record in request.files if record.path not in dropped]
    return removed

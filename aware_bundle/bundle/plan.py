"""Ordered emission plan interleaving literal writers with file tasks."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List, Mapping, Optional, Tuple, Union

from ..errors import ExecutionError
from ..graph.models import BuildRequest, FileRecord, PackageRecord
from ..options import NormalizedOptions
from ..runner.cache import Cache, CacheFingerprint
from ..schemas.options import BundleOptions, WrapOptions
from ..tasks.transforms import FileTask
from ..utils import read_source
from . import wrap as wrap_shim
from .registry import REGISTRY_INIT, ModuleSlot, build_package_block, serialize_package

logger = logging.getLogger(__name__)


class Outcome(str, Enum):
    HIT = "hit"
    MISS = "miss"


@dataclass(frozen=True, slots=True)
class TaskResult:
    outcome: Outcome
    output: str


@dataclass(frozen=True, slots=True)
class Writer:
    """Produces literal text; runs on the committing thread."""

    label: str
    render: Callable[[], str]

    @classmethod
    def literal(cls, label: str, text: str) -> "Writer":
        return cls(label=label, render=lambda: text)


@dataclass(frozen=True, slots=True)
class CacheableFileTask:
    """One file's transform pipeline plus the fingerprint of its cached result."""

    path: str
    module_name: str
    tasks: Tuple[FileTask, ...]
    fingerprint: CacheFingerprint

    def execute(self, cache: Optional[Cache] = None) -> TaskResult:
        """Return the transformed source; the file is opened here, not at plan time."""

        try:
            signature: Optional[str] = None
            if cache is not None:
                signature = cache.signature(self.path)
                cached = cache.lookup(self.fingerprint, signature=signature)
                if cached is not None:
                    return TaskResult(Outcome.HIT, cached)

            output = read_source(self.path)
            for task in self.tasks:
                output = task(output)

            if cache is not None and signature is not None:
                cache.store(self.fingerprint, output, signature=signature)
        except ExecutionError as exc:
            if exc.path is None:
                exc.path = self.path
            raise
        except (OSError, ValueError) as exc:
            raise ExecutionError(f"Failed to process {self.path}: {exc}", path=self.path) from exc
        return TaskResult(Outcome.MISS, output)


Step = Union[Writer, CacheableFileTask]


@dataclass(frozen=True, slots=True)
class EmissionPlan:
    """Fixed step order; never reordered once built."""

    steps: Tuple[Step, ...]
    wrap: WrapOptions
    file_tasks: int = field(default=0)

    def __iter__(self):
        return iter(self.steps)

    def __len__(self) -> int:
        return len(self.steps)


def module_name_for(
    record: FileRecord,
    package: PackageRecord,
    *,
    is_root: bool,
    basepath: str,
    rename: Mapping[str, str],
) -> str:
    """Registry key for a file: path relative to its package basepath.

    ``rename`` substitutes the path used for naming only; the file read is
    still ``record.path``.
    """

    naming_path = rename.get(record.path, record.path)
    name = os.path.relpath(naming_path, package.basepath or ".").replace(os.sep, "/")
    # dependency names are already relative to their basepath; the root's are not
    if is_root and basepath and name.startswith(basepath):
        name = name[len(basepath) :]
    return name


def build_plan(
    request: BuildRequest,
    normalized: NormalizedOptions,
    wrap: WrapOptions,
    options: BundleOptions,
) -> EmissionPlan:
    """Build the ordered step list for the whole bundle."""

    steps: List[Step] = [
        Writer.literal("prelude", wrap_shim.prelude(wrap)),
        Writer.literal("registry", REGISTRY_INIT),
    ]
    file_tasks = 0
    packages = request.packages
    for index, package in enumerate(packages):
        module_names = [
            module_name_for(
                record,
                package,
                is_root=index == 0,
                basepath=normalized.basepath,
                rename=options.rename,
            )
            for record in package.files
        ]
        block = build_package_block(
            index,
            package,
            packages,
            module_names,
            replaced_snippet=normalized.replaced_snippet,
            remapped_snippet=normalized.remapped_snippet,
        )
        segments = serialize_package(block)
        header, body, footer = segments[0], segments[1:-1], segments[-1]
        steps.append(Writer(label=f"header:{package.label}", render=_header_renderer(package.label, header)))

        records = iter(package.files)
        for segment in body:
            if isinstance(segment, ModuleSlot):
                record = next(records)
                steps.append(
                    CacheableFileTask(
                        path=record.path,
                        module_name=segment.entry.name,
                        tasks=tuple(record.tasks),
                        fingerprint=CacheFingerprint(record.path, normalized.options_hash),
                    )
                )
                file_tasks += 1
            else:
                steps.append(Writer.literal(f"module:{package.label}", segment))
        steps.append(Writer.literal(f"footer:{package.label}", footer))

    if options.postlude:
        steps.append(Writer(label="postlude-file", render=_file_renderer(options.postlude)))
    steps.append(Writer.literal("postlude", wrap_shim.postlude(wrap)))
    return EmissionPlan(steps=tuple(steps), wrap=wrap, file_tasks=file_tasks)


def _header_renderer(label: str, text: str) -> Callable[[], str]:
    def render() -> str:
        logger.info("Processing package: %s", label)
        return text

    return render


def _file_renderer(path: str) -> Callable[[], str]:
    def render() -> str:
        try:
            return read_source(path) + "\n"
        except OSError as exc:
            raise ExecutionError(f"Unable to read postlude file {path}: {exc}", path=path) from exc

    return render

"""Bundle assembly orchestration."""

from __future__ import annotations

import io
import logging
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Sequence, TextIO

from tqdm import tqdm

from ..graph.classify import classify
from ..graph.finalize import finalize_graph
from ..graph.models import BuildRequest, PackageRecord
from ..options import NormalizedOptions, normalize_options
from ..runner.cache import Cache
from ..runner.engine import RunResult, run_plan
from ..schemas.options import BundleOptions, WrapOptions
from ..tasks.assign import TaskLookup, assign_file_tasks
from ..tasks.transforms import get_commands, get_file_tasks
from ..utils import SOURCE_ENCODING, SOURCE_ERRORS
from .plan import CacheableFileTask, EmissionPlan, Outcome, build_plan
from .report import report_cache_hits

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class BuildResult:
    """Outcome of one bundle run."""

    wrap: WrapOptions
    plan: EmissionPlan
    run: RunResult
    removed: List[str] = field(default_factory=list)
    output_path: Optional[Path] = None
    display_packages: Optional[List[PackageRecord]] = None


class BundleBuilder:
    """Coordinates graph finalization, planning and ordered execution."""

    def __init__(
        self,
        *,
        workspace_root: Optional[Path] = None,
        get_tasks: TaskLookup = get_file_tasks,
        report_stream: Optional[TextIO] = None,
    ) -> None:
        self.workspace_root = workspace_root or Path.cwd()
        self.get_tasks = get_tasks
        self.report_stream = report_stream

    def build_paths(
        self,
        includes: Sequence[Path],
        options: BundleOptions,
        *,
        out: Optional[TextIO] = None,
        output_path: Optional[Path] = None,
    ) -> BuildResult:
        """Classify ``includes`` into packages, then build them."""

        normalized = normalize_options(options)
        request = classify(
            includes,
            exclude_patterns=normalized.exclude_patterns,
            basepath=options.basepath,
            main=options.main,
            root_dir=self.workspace_root,
        )
        return self._build(request, options, normalized, out=out, output_path=output_path)

    def build(
        self,
        request: BuildRequest,
        options: BundleOptions,
        *,
        out: Optional[TextIO] = None,
        output_path: Optional[Path] = None,
    ) -> BuildResult:
        """Build a bundle from an already classified request.

        Writes to ``out`` (default: stdout) unless ``output_path`` is given.
        Only a sink opened here is closed when the run finishes.
        """

        return self._build(request, options, normalize_options(options), out=out, output_path=output_path)

    def _build(
        self,
        request: BuildRequest,
        options: BundleOptions,
        normalized: NormalizedOptions,
        *,
        out: Optional[TextIO],
        output_path: Optional[Path],
    ) -> BuildResult:
        root_file = finalize_graph(request, options.main)
        wrap = normalized.wrap_options(root_file)
        removed = assign_file_tasks(request, get_commands(options.commands), get_tasks=self.get_tasks)
        plan = build_plan(request, normalized, wrap, options)
        logger.info(
            "Planned %d steps for %d packages (root module %s)",
            len(plan),
            len(request.packages),
            root_file,
        )

        cache = None
        if options.cache:
            cache = Cache(Path(options.cache_path) if options.cache_path else None, method=options.cache_method)

        if output_path is not None:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            sink: TextIO = output_path.open("w", encoding=SOURCE_ENCODING, errors=SOURCE_ERRORS, newline="")
            close_on_finish = True
        else:
            sink = out if out is not None else _stdout_sink()
            close_on_finish = False

        progress = tqdm(
            total=plan.file_tasks,
            file=sys.stderr,
            disable=not options.progress,
            bar_format="[{bar:20}] {n_fmt} / {total_fmt} {percentage:3.0f}% {remaining}",
        )

        def on_complete(step: CacheableFileTask, outcome: Outcome) -> None:
            if options.progress:
                progress.update(1)
            elif outcome is Outcome.MISS:
                logger.info("  Processing file %s", step.path)

        try:
            run = run_plan(
                plan,
                output=sink,
                limit=options.jobs,
                cache=cache,
                close_on_finish=close_on_finish,
                on_complete=on_complete,
            )
        finally:
            progress.close()
            if cache is not None:
                cache.close()

        display = report_cache_hits(request, run, options, self.report_stream or sys.stderr)
        return BuildResult(
            wrap=wrap,
            plan=plan,
            run=run,
            removed=removed,
            output_path=output_path,
            display_packages=display,
        )


def _stdout_sink() -> TextIO:
    """Stdout, set to pass undecodable source bytes through unchanged."""

    stream = sys.stdout
    if isinstance(stream, io.TextIOWrapper):
        stream.reconfigure(errors=SOURCE_ERRORS)
    return stream

"""Bounded-parallel plan execution with strictly ordered output."""

from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, TextIO

from ..bundle.plan import CacheableFileTask, EmissionPlan, Outcome, TaskResult, Writer
from ..errors import BundleError, ExecutionError
from .cache import Cache

logger = logging.getLogger(__name__)

CompletionCallback = Callable[[CacheableFileTask, Outcome], None]


@dataclass(slots=True)
class RunResult:
    hits: List[str] = field(default_factory=list)
    misses: List[str] = field(default_factory=list)

    @property
    def file_tasks(self) -> int:
        return len(self.hits) + len(self.misses)


def run_plan(
    plan: EmissionPlan,
    *,
    output: TextIO,
    limit: int = 1,
    cache: Optional[Cache] = None,
    close_on_finish: bool = False,
    on_complete: Optional[CompletionCallback] = None,
) -> RunResult:
    """Execute ``plan`` and write every step to ``output`` in plan order.

    Up to ``limit`` file tasks run at once. Results that finish out of turn
    wait in their slot until every earlier step has been written. The first
    failure aborts the run; text already written stays in ``output``.
    """

    steps = plan.steps
    limit = max(1, limit)
    inflight_limit = limit * 2
    result = RunResult()
    pending: Dict[int, Future[TaskResult]] = {}
    next_to_commit = 0

    def commit_next() -> None:
        nonlocal next_to_commit
        step = steps[next_to_commit]
        if isinstance(step, Writer):
            output.write(step.render())
        else:
            future = pending.pop(next_to_commit)
            try:
                task_result = future.result()
            except BundleError:
                raise
            except Exception as exc:
                raise ExecutionError(f"Failed to process {step.path}: {exc}", path=step.path) from exc
            if task_result.outcome is Outcome.HIT:
                result.hits.append(step.path)
            else:
                result.misses.append(step.path)
            output.write(task_result.output)
        next_to_commit += 1

    def submit(executor: ThreadPoolExecutor, index: int, step: CacheableFileTask) -> None:
        future = executor.submit(step.execute, cache)
        if on_complete is not None:
            future.add_done_callback(lambda done: _notify(on_complete, step, done))
        pending[index] = future

    executor = ThreadPoolExecutor(max_workers=limit, thread_name_prefix="aware-bundle")
    try:
        for index, step in enumerate(steps):
            if isinstance(step, CacheableFileTask):
                submit(executor, index, step)
                while len(pending) >= inflight_limit:
                    commit_next()
            elif not pending and index == next_to_commit:
                commit_next()
        while next_to_commit < len(steps):
            commit_next()
    except BaseException:
        executor.shutdown(wait=True, cancel_futures=True)
        raise
    else:
        executor.shutdown(wait=True)
    finally:
        if close_on_finish:
            output.close()
        else:
            output.flush()

    logger.info("Plan committed: %d steps, %d cache hits", len(steps), len(result.hits))
    return result


def _notify(callback: CompletionCallback, step: CacheableFileTask, future: Future[TaskResult]) -> None:
    if future.cancelled() or future.exception() is not None:
        return
    try:
        callback(step, future.result().outcome)
    except Exception:  # callback errors are logged, never raised
        logger.exception("Completion callback failed for %s", step.path)

"""Bundle assembly utilities."""

from .builder import BuildResult, BundleBuilder
from .plan import CacheableFileTask, EmissionPlan, Outcome, TaskResult, Writer, build_plan
from .registry import render_registry, serialize_package

__all__ = [
    "BuildResult",
    "BundleBuilder",
    "CacheableFileTask",
    "EmissionPlan",
    "Outcome",
    "TaskResult",
    "Writer",
    "build_plan",
    "render_registry",
    "serialize_package",
]

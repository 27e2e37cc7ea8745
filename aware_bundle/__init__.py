"""Assemble CommonJS packages into a single self-contained bundle."""

__version__ = "0.1.0"
from .bundle.builder import BuildResult, BundleBuilder
from .bundle.plan import CacheableFileTask, EmissionPlan, Outcome, Writer, build_plan
from .config import resolve_options
from .errors import (
    BundleError,
    ConfigError,
    ExecutionError,
    FilesystemError,
    GraphError,
    MissingFileError,
    NoFilesError,
    NoRootFileError,
)
from .graph import BuildRequest, FileRecord, PackageRecord, classify, finalize_graph
from .options import NormalizedOptions, normalize_options
from .runner.engine import RunResult, run_plan
from .schemas.options import BundleOptions, RequireMode, WrapOptions, WrapperType

__all__ = [
    "__version__",
    "BuildRequest",
    "BuildResult",
    "BundleBuilder",
    "BundleError",
    "BundleOptions",
    "CacheableFileTask",
    "ConfigError",
    "EmissionPlan",
    "ExecutionError",
    "FileRecord",
    "FilesystemError",
    "GraphError",
    "MissingFileError",
    "NoFilesError",
    "NoRootFileError",
    "NormalizedOptions",
    "Outcome",
    "PackageRecord",
    "RequireMode",
    "RunResult",
    "WrapOptions",
    "WrapperType",
    "Writer",
    "build_plan",
    "classify",
    "finalize_graph",
    "normalize_options",
    "resolve_options",
    "run_plan",
]

"""Package graph models and finalization."""

from .classify import classify
from .finalize import finalize_graph
from .models import BuildRequest, FileRecord, PackageRecord

__all__ = [
    "BuildRequest",
    "FileRecord",
    "PackageRecord",
    "classify",
    "finalize_graph",
]

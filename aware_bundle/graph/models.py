"""Data models describing the package graph of one build."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Dict, List, Optional

if TYPE_CHECKING:
    from ..tasks.transforms import FileTask


@dataclass(slots=True)
class FileRecord:
    """One discovered file; a record with zero tasks is a non-source asset."""

    path: str
    tasks: List["FileTask"] = field(default_factory=list)


@dataclass(slots=True)
class PackageRecord:
    """A group of files forming one resolvable dependency unit."""

    uid: int
    basepath: str
    files: List[FileRecord] = field(default_factory=list)
    main: Optional[str] = None
    name: Optional[str] = None
    dependencies_by_id: Dict[str, int] = field(default_factory=dict)

    @property
    def label(self) -> str:
        return self.name or "root"


@dataclass(slots=True)
class BuildRequest:
    """Owned graph for a single build; not reused across builds."""

    files: List[FileRecord] = field(default_factory=list)
    packages: List[PackageRecord] = field(default_factory=list)

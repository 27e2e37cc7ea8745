"""Registry text format consumed by the runtime module loader.

Each package becomes one object literal in the ``r.m`` array::

    r.m = [];
    r.m[0] = {
    "jquery": { exports: window.jQuery },
    "dep": {"c":1,"m":"index.js"},
    "index.js": function(module, exports, require){ ... },
    "lib/a.js": function(module, exports, require){ ... }
    };

Snippet and dependency entries always come first and are always followed by
``,\\n``. Module entries are followed by ``,\\n`` except the last module of
the package, which gets a bare ``\\n``. A package with dependency entries but
no modules therefore ends in a trailing comma; that is valid ES5 object
literal syntax and is kept as is. Keys share one flat object, so a later
entry with the same key silently replaces an earlier one when the bundle is
evaluated.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import List, Mapping, Sequence, Union

from ..errors import GraphError
from ..graph.models import PackageRecord

REGISTRY_INIT = "r.m = [];\n"


@dataclass(frozen=True, slots=True)
class SnippetEntry:
    """Pre-rendered entries (replaced / remapped modules)."""

    text: str


@dataclass(frozen=True, slots=True)
class DependencyEntry:
    name: str
    index: int
    main: str


@dataclass(frozen=True, slots=True)
class ModuleEntry:
    name: str
    position: int
    count: int

    @property
    def is_last(self) -> bool:
        return self.position == self.count - 1


Entry = Union[SnippetEntry, DependencyEntry, ModuleEntry]


@dataclass(frozen=True, slots=True)
class PackageBlock:
    index: int
    label: str
    entries: Sequence[Entry]


@dataclass(frozen=True, slots=True)
class ModuleSlot:
    """Marks where a module's transformed source goes in the serialized output."""

    entry: ModuleEntry


Segment = Union[str, ModuleSlot]


def quote(value: str) -> str:
    """Render ``value`` as a JS string literal.

    ``ensure_ascii`` escapes U+2028/U+2029, which are legal in JSON but end
    a string literal in pre-ES2019 engines.
    """

    return json.dumps(value, ensure_ascii=True)


def resolve_dependencies(package: PackageRecord, packages: Sequence[PackageRecord]) -> List[DependencyEntry]:
    """Resolve ``dependencies_by_id`` against the final package list."""

    entries: List[DependencyEntry] = []
    for name, uid in package.dependencies_by_id.items():
        index = next((position for position, item in enumerate(packages) if item.uid == uid), None)
        if index is None:
            raise GraphError(
                f"Package '{package.label}' references dependency '{name}' with unknown uid {uid}."
            )
        target = packages[index]
        if not target.main:
            raise GraphError(f"Dependency '{name}' (uid {uid}) has no main module.")
        entries.append(DependencyEntry(name=name, index=index, main=target.main))
    return entries


def build_package_block(
    index: int,
    package: PackageRecord,
    packages: Sequence[PackageRecord],
    module_names: Sequence[str],
    *,
    replaced_snippet: str = "",
    remapped_snippet: str = "",
) -> PackageBlock:
    entries: List[Entry] = []
    for snippet in (replaced_snippet, remapped_snippet):
        if snippet:
            entries.append(SnippetEntry(snippet))
    entries.extend(resolve_dependencies(package, packages))
    count = len(module_names)
    entries.extend(ModuleEntry(name=name, position=position, count=count) for position, name in enumerate(module_names))
    return PackageBlock(index=index, label=package.label, entries=entries)


def serialize_package(block: PackageBlock) -> List[Segment]:
    """Serialize a package block into literal text and module slots.

    The result reads ``header, (key, slot, separator)*, footer``; snippet and
    dependency entries are folded into the header.
    """

    header = [f"r.m[{block.index}] = {{\n"]
    modules: List[Segment] = []
    for entry in block.entries:
        if isinstance(entry, SnippetEntry):
            header.append(entry.text + ",\n")
        elif isinstance(entry, DependencyEntry):
            reference = json.dumps({"c": entry.index, "m": entry.main}, separators=(",", ":"))
            header.append(f"{quote(entry.name)}: {reference},\n")
        else:
            modules.append(f"{quote(entry.name)}: ")
            modules.append(ModuleSlot(entry))
            # the choice depends only on file position
            modules.append("\n" if entry.is_last else ",\n")
    return ["".join(header), *modules, "};\n"]


def render_registry(blocks: Sequence[PackageBlock], bodies: Mapping[str, str]) -> str:
    """Render complete registry text, looking module bodies up by name.

    ``bodies`` is keyed ``"<package index>:<module name>"``.
    """

    parts = [REGISTRY_INIT]
    for block in blocks:
        for segment in serialize_package(block):
            if isinstance(segment, ModuleSlot):
                parts.append(bodies[f"{block.index}:{segment.entry.name}"])
            else:
                parts.append(segment)
    return "".join(parts)

from __future__ import annotations

from pathlib import Path

import pytest

from aware_bundle.bundle.registry import (
    DependencyEntry,
    ModuleEntry,
    ModuleSlot,
    PackageBlock,
    SnippetEntry,
    build_package_block,
    render_registry,
    resolve_dependencies,
    serialize_package,
)
from aware_bundle.errors import GraphError

from conftest import make_package


def _text(block: PackageBlock) -> str:
    return "".join(
        f"<{segment.entry.name}>" if isinstance(segment, ModuleSlot) else segment
        for segment in serialize_package(block)
    )


def test_last_module_has_no_trailing_comma() -> None:
    block = PackageBlock(
        index=0,
        label="root",
        entries=[ModuleEntry("index.js", 0, 2), ModuleEntry("lib/a.js", 1, 2)],
    )

    assert _text(block) == 'r.m[0] = {\n"index.js": <index.js>,\n"lib/a.js": <lib/a.js>\n};\n'


def test_segments_follow_header_key_slot_separator_footer() -> None:
    block = PackageBlock(index=3, label="dep", entries=[DependencyEntry("x", 1, "index.js"), ModuleEntry("a.js", 0, 1)])

    segments = serialize_package(block)

    assert segments[0] == 'r.m[3] = {\n"x": {"c":1,"m":"index.js"},\n'
    assert segments[1] == '"a.js": '
    assert isinstance(segments[2], ModuleSlot)
    assert segments[3] == "\n"
    assert segments[4] == "};\n"


def test_dependency_only_package_keeps_trailing_comma() -> None:
    block = PackageBlock(index=2, label="shim", entries=[DependencyEntry("dep", 1, "index.js")])

    assert _text(block) == 'r.m[2] = {\n"dep": {"c":1,"m":"index.js"},\n};\n'


def test_snippets_precede_dependencies() -> None:
    block = PackageBlock(
        index=0,
        label="root",
        entries=[SnippetEntry('"jquery": { exports: window.jQuery }'), DependencyEntry("dep", 1, "main.js")],
    )

    assert _text(block) == 'r.m[0] = {\n"jquery": { exports: window.jQuery },\n"dep": {"c":1,"m":"main.js"},\n};\n'


def test_colliding_keys_are_written_in_order(tmp_path: Path) -> None:
    root = make_package(tmp_path, 1, ["dep"], dependencies={"dep": 2})
    dep = make_package(tmp_path, 2, ["index.js"], basepath="node_modules/dep", name="dep")

    block = build_package_block(0, root, [root, dep], ["dep"])
    text = _text(block)

    # both entries are emitted; the module entry comes last and wins at runtime
    assert text.index('"dep": {"c":1') < text.index('"dep": <dep>')


def test_names_are_escaped_as_string_literals() -> None:
    block = PackageBlock(index=0, label="root", entries=[ModuleEntry('we"ird\u2028.js', 0, 1)])

    assert serialize_package(block)[1] == '"we\\"ird\\u2028.js": '


def test_dependencies_resolve_against_current_package_order(tmp_path: Path) -> None:
    root = make_package(tmp_path, 7, ["index.js"], dependencies={"a": 9, "b": 8})
    b = make_package(tmp_path, 8, ["index.js"], basepath="b", name="b", main="b.js")
    a = make_package(tmp_path, 9, ["index.js"], basepath="a", name="a", main="a.js")

    entries = resolve_dependencies(root, [root, b, a])

    assert entries == [DependencyEntry("a", 2, "a.js"), DependencyEntry("b", 1, "b.js")]


def test_dangling_dependency_uid_is_a_graph_error(tmp_path: Path) -> None:
    root = make_package(tmp_path, 1, ["index.js"], dependencies={"gone": 42})

    with pytest.raises(GraphError, match="gone"):
        resolve_dependencies(root, [root])


def test_render_registry_fills_module_bodies(tmp_path: Path) -> None:
    root = make_package(tmp_path, 1, ["index.js"])
    blocks = [build_package_block(0, root, [root], ["index.js"])]

    text = render_registry(blocks, {"0:index.js": "function(){}"})

    assert text == 'r.m = [];\nr.m[0] = {\n"index.js": function(){}\n};\n'

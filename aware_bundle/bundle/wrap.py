"""Prelude/postlude blocks wrapping the registry for each host type."""

from __future__ import annotations

from functools import lru_cache
from importlib import resources

from ..schemas.options import RequireMode, WrapOptions, WrapperType
from .registry import quote


@lru_cache(maxsize=None)
def load_require_source(mode: RequireMode) -> str:
    """Return the runtime ``r()`` implementation bundled with the package."""

    resource = resources.files("aware_bundle").joinpath("resources").joinpath(f"require.{mode.value}.js")
    return resource.read_text(encoding="utf-8")


def prelude(wrap: WrapOptions) -> str:
    """Open the bundle scope and declare the loader."""

    return "(function() {\n" + load_require_source(wrap.require_mode).rstrip("\n") + "\n"


def postlude(wrap: WrapOptions) -> str:
    """Export the root module and close the bundle scope."""

    root = f"r({quote(wrap.root_file)})"
    lines = []
    if wrap.global_require:
        lines.append("require = r;")
    if wrap.wrapper_type is WrapperType.NODE:
        lines.append(f"module.exports = {root};")
    elif wrap.wrapper_type is WrapperType.UMD:
        lines.extend(
            [
                "if (typeof exports == 'object') {",
                f"  module.exports = {root};",
                "} else if (typeof define == 'function' && define.amd) {",
                f"  define(function() {{ return {root}; }});",
                "} else {",
                f"  this[{quote(wrap.export_name)}] = {root};",
                "}",
            ]
        )
    else:
        lines.append(f"{wrap.export_name} = {root};")
    lines.append("}.call(this));")
    return "\n".join(lines) + "\n"

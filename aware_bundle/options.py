"""Reconcile raw build options into canonical wrapper configuration."""

from __future__ import annotations

import json
import os
import re
from dataclasses import dataclass
from typing import Mapping, Pattern, Tuple

from .utils import canonical_json, hash_text
from .errors import ConfigError
from .schemas.options import BundleOptions, RequireMode, WrapOptions, WrapperType

DEFAULT_EXPORT_NAME = "App"

# .npmignore files rarely cover these
DEFAULT_EXCLUDES: Tuple[str, ...] = (
    r"/dist/",
    r"/example/",
    r"/benchmark/",
    r"[-.]min.js$",
)


@dataclass(frozen=True, slots=True)
class NormalizedOptions:
    """Options after synonym coalescing; nothing downstream reads raw flags."""

    export_name: str
    wrapper_type: WrapperType
    require_mode: RequireMode
    global_require: bool
    exclude_patterns: Tuple[Pattern[str], ...]
    replaced_snippet: str
    remapped_snippet: str
    basepath: str
    options_hash: str

    def wrap_options(self, root_file: str) -> WrapOptions:
        return WrapOptions(
            export_name=self.export_name,
            root_file=root_file,
            wrapper_type=self.wrapper_type,
            global_require=self.global_require,
            require_mode=self.require_mode,
        )


def normalize_options(options: BundleOptions) -> NormalizedOptions:
    """Build the canonical option set for one build."""

    return NormalizedOptions(
        export_name=options.export_name or DEFAULT_EXPORT_NAME,
        wrapper_type=select_wrapper_type(options),
        require_mode=RequireMode.MIN if options.require else RequireMode.MAX,
        global_require=options.global_require,
        exclude_patterns=build_exclude_patterns(options),
        replaced_snippet=render_replaced(options.replaced),
        remapped_snippet=render_remapped(options.remap),
        basepath=normalize_basepath(options.basepath),
        options_hash=serialize_options_hash(options),
    )


def select_wrapper_type(options: BundleOptions) -> WrapperType:
    # --amd and --umd are synonyms since umd is a superset of amd
    loader = options.amd or options.umd
    if loader and options.node:
        raise ConfigError("--node cannot be combined with --amd/--umd.")
    if loader:
        return WrapperType.UMD
    if options.node:
        return WrapperType.NODE
    return WrapperType.GLOBAL


def build_exclude_patterns(options: BundleOptions) -> Tuple[Pattern[str], ...]:
    expressions = [] if options.reset_exclude else list(DEFAULT_EXCLUDES)
    expressions.extend(options.exclude)
    patterns = []
    for expression in expressions:
        try:
            patterns.append(re.compile(expression))
        except re.error as exc:
            raise ConfigError(f"Invalid exclude expression '{expression}': {exc}") from exc
    return tuple(patterns)


def render_replaced(replaced: Mapping[str, str]) -> str:
    """e.g. jquery => window.jQuery"""

    return ",\n".join(
        f"{json.dumps(name)}: {{ exports: {expression} }}" for name, expression in replaced.items()
    )


def render_remapped(remap: Mapping[str, str]) -> str:
    """e.g. assert => require('chai').assert"""

    return ",\n".join(
        f"{json.dumps(name)}: function(module, exports, require) {{ module.exports = {expression} }}"
        for name, expression in remap.items()
    )


def normalize_basepath(basepath: str) -> str:
    if not basepath:
        return ""
    normalized = os.path.normpath(basepath).replace(os.sep, "/")
    if normalized == ".":
        return ""
    return normalized if normalized.endswith("/") else normalized + "/"


def serialize_options_hash(options: BundleOptions) -> str:
    """Hash of the serialized options; folded into every cache fingerprint."""

    return hash_text(canonical_json(options.model_dump(mode="json", by_alias=True)))

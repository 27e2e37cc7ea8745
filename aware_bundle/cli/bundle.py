"""Command-line entry point for building bundles."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from aware_bundle.bundle.builder import BundleBuilder
from aware_bundle.config import configure_logging, resolve_options
from aware_bundle.errors import BundleError


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    workspace = _resolve_workspace(args.workspace_root)
    try:
        overrides = _collect_overrides(args, workspace)
    except ValueError as exc:
        parser.error(str(exc))
    try:
        options = resolve_options(_resolve_optional_path(args.config, workspace), overrides)
        configure_logging(options.verbose)
        includes = [_resolve_path(value, workspace) for value in args.include]
        builder = BundleBuilder(workspace_root=workspace)
        builder.build_paths(
            includes,
            options,
            output_path=_resolve_optional_path(args.out, workspace),
        )
    except BundleError as exc:
        print(f"aware-bundle: {exc}", file=sys.stderr)
        return 1
    return 0


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="aware-bundle",
        description="Bundle CommonJS packages into a single self-contained file.",
    )
    parser.add_argument("include", nargs="+", help="File or directory to include (repeatable).")
    parser.add_argument("--out", help="Write the bundle to this file instead of stdout.")
    parser.add_argument("--config", help="YAML build config; command-line flags take precedence.")
    parser.add_argument("--workspace-root")
    parser.add_argument("--main", help="Root module exported by the bundle, e.g. index.js.")
    parser.add_argument("--export", dest="export_name", help="Name of the exported global (default: App).")
    parser.add_argument("--basepath", help="Path prefix stripped from root package module names.")
    parser.add_argument("--amd", action="store_true", default=None, help="Alias of --umd.")
    parser.add_argument("--umd", action="store_true", default=None)
    parser.add_argument("--node", action="store_true", default=None)
    parser.add_argument("--global-require", action="store_true", default=None)
    parser.add_argument(
        "--no-require",
        dest="require",
        action="store_false",
        default=None,
        help="Use the verbose require() implementation.",
    )
    parser.add_argument("--replace", action="append", help="Replace a module with an expression: name=expr.")
    parser.add_argument("--remap", action="append", help="Remap a module to a factory expression: name=expr.")
    parser.add_argument("--rename", action="append", help="Name a file after another path: from=to.")
    parser.add_argument("--command", action="append", help="Pipe files through a command: ext=command.")
    parser.add_argument("--exclude", action="append", help="Exclude paths matching a regular expression.")
    parser.add_argument("--reset-exclude", action="store_true", default=None)
    parser.add_argument("--postlude", help="File whose contents are appended before the export.")
    parser.add_argument("--cache", action=argparse.BooleanOptionalAction, default=None)
    parser.add_argument("--cache-path")
    parser.add_argument("--cache-method", choices=["stat", "hash"])
    parser.add_argument("--jobs", type=int)
    parser.add_argument("--progress", action="store_true", default=None)
    parser.add_argument("--report", action="store_true", default=None)
    parser.add_argument("--verbose", action="store_true", default=None)
    return parser


_SCALAR_OPTIONS = (
    "main",
    "export_name",
    "basepath",
    "amd",
    "umd",
    "node",
    "global_require",
    "require",
    "reset_exclude",
    "postlude",
    "cache",
    "cache_path",
    "cache_method",
    "jobs",
    "progress",
    "report",
    "verbose",
)


def _collect_overrides(args: argparse.Namespace, workspace: Path) -> Dict[str, object]:
    overrides: Dict[str, object] = {
        name: getattr(args, name) for name in _SCALAR_OPTIONS if getattr(args, name) is not None
    }
    for flag, key in (("replace", "replaced"), ("remap", "remap"), ("command", "commands")):
        values = getattr(args, flag)
        if values:
            overrides[key] = _parse_key_values(values, flag)
    if args.rename:
        overrides["rename"] = {
            str(_resolve_path(source, workspace)): str(_resolve_path(target, workspace))
            for source, target in _parse_key_values(args.rename, "rename").items()
        }
    if args.postlude:
        overrides["postlude"] = str(_resolve_path(args.postlude, workspace))
    if args.exclude:
        overrides["exclude"] = list(args.exclude)
    return overrides


def _parse_key_values(values: List[str], flag: str) -> Dict[str, str]:
    parsed: Dict[str, str] = {}
    for entry in values:
        if "=" not in entry:
            raise ValueError(f"--{flag} must be key=value (got '{entry}')")
        key, raw_value = entry.split("=", 1)
        parsed[key.strip()] = raw_value.strip()
    return parsed


def _resolve_workspace(value: Optional[str]) -> Path:
    return Path(value).resolve() if value else Path.cwd()


def _resolve_path(value: str, workspace: Path) -> Path:
    path = Path(value)
    if not path.is_absolute():
        path = workspace / path
    return path.resolve()


def _resolve_optional_path(value: Optional[str], workspace: Path) -> Optional[Path]:
    if value is None:
        return None
    return _resolve_path(value, workspace)


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())

"""Build configuration loading and logging setup."""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

import yaml
from pydantic import ValidationError

from .errors import ConfigError
from .schemas.options import BundleOptions

LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"


def load_config(path: Path) -> Dict[str, Any]:
    """Load a YAML (or JSON) build config file into a plain mapping."""

    if not path.exists():
        raise ConfigError(f"Config file not found: {path}")
    try:
        loaded = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise ConfigError(f"Unable to parse config file {path}: {exc}") from exc
    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        raise ConfigError(f"Config file {path} must contain a mapping, got {type(loaded).__name__}.")
    return loaded


def resolve_options(
    config_path: Optional[Path] = None,
    overrides: Optional[Mapping[str, Any]] = None,
) -> BundleOptions:
    """Merge config file values with explicit overrides and validate them.

    Mapping options (``replaced``, ``remap``, ``rename``, ``commands``) are
    merged key by key; ``exclude`` lists are concatenated; other values from
    ``overrides`` replace the file's.
    """

    payload: Dict[str, Any] = load_config(config_path) if config_path else {}
    payload = {_canonical_key(key): value for key, value in payload.items()}
    for key, value in (overrides or {}).items():
        key = _canonical_key(key)
        if isinstance(value, Mapping) and isinstance(payload.get(key), Mapping):
            payload[key] = {**payload[key], **value}
        elif key == "exclude" and payload.get(key) is not None:
            payload[key] = _as_list(payload[key]) + _as_list(value)
        else:
            payload[key] = value
    try:
        return BundleOptions.model_validate(payload)
    except ValidationError as exc:
        raise ConfigError(f"Invalid build options: {exc}") from exc


def _as_list(value: Any) -> List[Any]:
    if value is None:
        return []
    return list(value) if isinstance(value, (list, tuple)) else [value]


def _canonical_key(key: str) -> str:
    if key == "export":
        return "export_name"
    return key.replace("-", "_")


def configure_logging(verbose: bool = False) -> None:
    level = logging.INFO if verbose else logging.WARNING
    logging.basicConfig(level=level, format=LOG_FORMAT, stream=sys.stderr, force=True)

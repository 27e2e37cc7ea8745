"""Pydantic models describing bundle build configuration."""

from __future__ import annotations

from enum import Enum
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class WrapperType(str, Enum):
    GLOBAL = "global"
    NODE = "node"
    UMD = "umd"


class RequireMode(str, Enum):
    MIN = "min"
    MAX = "max"


class BundleOptions(BaseModel):
    """Raw build configuration as supplied by the CLI or a config file."""

    export_name: Optional[str] = Field(default=None, alias="export", description="Global export name.")
    main: Optional[str] = Field(default=None, description="Root module of the bundle.")
    amd: bool = False
    umd: bool = False
    node: bool = False
    global_require: bool = Field(default=False, alias="global-require")
    require: bool = Field(default=True, description="Use the compact require() implementation.")
    replaced: Dict[str, str] = Field(default_factory=dict, description="Module name to inline expression.")
    remap: Dict[str, str] = Field(default_factory=dict, description="Module name to factory expression.")
    rename: Dict[str, str] = Field(default_factory=dict, description="Absolute path to substitute path.")
    commands: Dict[str, str] = Field(default_factory=dict, description="File extension to shell command.")
    postlude: Optional[str] = None
    basepath: str = ""
    exclude: List[str] = Field(default_factory=list)
    reset_exclude: bool = Field(default=False, alias="reset-exclude")
    cache: bool = False
    cache_path: Optional[str] = Field(default=None, alias="cache-path")
    cache_method: Literal["stat", "hash"] = Field(default="stat", alias="cache-method")
    jobs: int = Field(default=1, ge=1)
    progress: bool = False
    report: bool = False
    verbose: bool = False

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    @field_validator("exclude", mode="before")
    @classmethod
    def _coerce_exclude(cls, value: object) -> object:
        if value is None:
            return []
        if isinstance(value, str):
            return [value]
        return value


class WrapOptions(BaseModel):
    """Canonical wrapper configuration consumed by the prelude/postlude shim."""

    export_name: str
    root_file: str
    wrapper_type: WrapperType
    global_require: bool = False
    require_mode: RequireMode = RequireMode.MIN

    model_config = ConfigDict(extra="forbid", frozen=True)

"""Schema definitions for bundle configuration."""

from .options import BundleOptions, RequireMode, WrapOptions, WrapperType

__all__ = [
    "BundleOptions",
    "RequireMode",
    "WrapOptions",
    "WrapperType",
]

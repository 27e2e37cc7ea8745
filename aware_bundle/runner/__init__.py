"""Plan execution: transform cache and ordered executor."""

from .cache import Cache, CacheFingerprint

__all__ = [
    "Cache",
    "CacheFingerprint",
]

"""Response cache backends."""

from .base import TTLCache, make_cache_key
from .memory import InMemoryTTLCache

__all__ = [
    "TTLCache",
    "InMemoryTTLCache",
    "make_cache_key",
]

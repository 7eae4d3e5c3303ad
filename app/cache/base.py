"""Shared protocol and key helper for response cache backends."""

from typing import Any, Protocol
from urllib.parse import quote


def make_cache_key(resource: str, *params: Any) -> str:
    """Build a cache key from a resource name and its query parameters.

    Parameters are percent-encoded so a separator inside a parameter value can
    never make two different queries share a key.
    """
    parts = [resource] + [quote(str(p), safe="") for p in params]
    return ":".join(parts)


class TTLCache(Protocol):
    """Protocol for time-bounded response caches."""

    def get(self, key: str, default: Any = None) -> Any:
        """Return a copy of the cached value, or `default` if missing or expired."""

    def set(self, key: str, value: Any, ttl_seconds: float) -> None:
        """Store a value, replacing any earlier entry for the key."""

    def delete(self, key: str) -> None:
        """Remove an entry without raising if it is absent."""

    def clear(self) -> None:
        """Drop every entry."""

    def __len__(self) -> int:
        """Number of entries currently held (expired ones included until touched)."""

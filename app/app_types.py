"""Shared dataclasses and lightweight types used across modules."""

from dataclasses import dataclass
from typing import Any, Literal, Optional

CacheStatus = Literal["HIT", "MISS", "BYPASS"]


@dataclass(frozen=True)
class CacheEntry:
    """Cached value with the monotonic time after which it must not be served."""
    value: Any
    expires_at: float


@dataclass
class ResourceResult:
    """Aggregator output: the payload plus what the route needs for cache headers."""
    payload: Any
    cache_status: CacheStatus
    ttl_seconds: Optional[int] = None

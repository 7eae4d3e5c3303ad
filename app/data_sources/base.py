"""Interfaces and value types shared by the upstream data sources."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Mapping, Optional, Protocol, Tuple

if TYPE_CHECKING:
    from app.data_sources.http_fetcher import FetchResult
    from app.data_sources.wind_scraper import WindSnapshot


@dataclass(frozen=True)
class LaunchConfig:
    """How to start the headless browser for one scrape."""
    executable_path: Optional[str]
    arguments: Tuple[str, ...]
    headless: bool = True
    timeout_ms: int = 30000
    ignore_https_errors: bool = True


@dataclass(frozen=True)
class UpstreamRequest:
    """A fully described GET against one of the REST upstreams."""
    url: str
    params: Mapping[str, object] = field(default_factory=dict)
    headers: Mapping[str, str] = field(default_factory=dict)


class LaunchStrategy(Protocol):
    """Interface for anything that can tell us how to launch the browser."""

    name: str

    def resolve(self) -> LaunchConfig:
        """Produce a fresh LaunchConfig; must not raise."""
        ...


class WindSource(Protocol):
    """Interface for anything that can produce a live wind snapshot."""

    def scrape(self) -> "WindSnapshot":
        """Return the latest reading or raise a ProxyError subclass."""
        ...


class HttpFetcher(Protocol):
    """Interface for a deadline-bounded HTTP GET."""

    def fetch(
        self,
        url: str,
        headers: Optional[Mapping[str, str]] = None,
        timeout_ms: Optional[int] = None,
        params: Optional[Mapping[str, object]] = None,
    ) -> "FetchResult":
        """Return the completed response, whatever its status code."""
        ...

"""Failure taxonomy for the proxy; each error knows the HTTP status it maps to."""

from __future__ import annotations

from typing import Any


class ProxyError(Exception):
    """Base class for every failure surfaced to API clients."""

    status_code: int = 500
    error: str = "Internal proxy error"

    def __init__(self, details: str = "") -> None:
        super().__init__(details)
        self.details = details

    def to_payload(self) -> dict[str, Any]:
        """Render the JSON error envelope."""
        return {"error": self.error, "details": self.details}


class BrowserLaunchError(ProxyError):
    """The rendering session could not be started."""
    error = "Browser failed to launch"


class ScrapeError(ProxyError):
    """The wind page was reachable by the browser but readings could not be taken."""
    error = "Failed to fetch wind data"


class NavigationError(ScrapeError):
    """Page load failed or did not settle before the navigation deadline."""


class ScrapeTimeoutError(ScrapeError):
    """The readiness predicate stayed false until its deadline elapsed."""


class ReadingValidationError(ScrapeError):
    """A scraped field could not be interpreted (e.g. a non-numeric direction)."""


class UpstreamTimeoutError(ProxyError):
    """An upstream HTTP call was cancelled by its deadline."""
    status_code = 504
    error = "Upstream request timed out"


class UpstreamNonOkError(ProxyError):
    """An upstream HTTP call completed with a non-success status."""
    status_code = 502
    error = "Upstream returned an error response"

    def __init__(self, details: str = "", *, status: int, body: Any = None) -> None:
        super().__init__(details)
        self.status = status
        self.body = body

    def to_payload(self) -> dict[str, Any]:
        payload = super().to_payload()
        payload["status"] = self.status
        payload["body"] = self.body
        return payload


class GenericFetchError(ProxyError):
    """Transport-level failure, or an upstream body that could not be decoded."""
    error = "Failed to fetch upstream data"

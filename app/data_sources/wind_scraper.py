"""Scrape the live wind reading from a page that only renders it client-side."""
from __future__ import annotations

import math
import re
from contextlib import ExitStack, contextmanager
from dataclasses import dataclass
from typing import Callable, Iterator

from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import TimeoutError as PlaywrightTimeoutError
from playwright.sync_api import sync_playwright

from app.data_sources.base import LaunchConfig, LaunchStrategy
from app.errors import (
    BrowserLaunchError,
    NavigationError,
    ReadingValidationError,
    ScrapeError,
    ScrapeTimeoutError,
)
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__)

COMPASS_POINTS: tuple[str, ...] = ("N", "NE", "E", "SE", "S", "SW", "W", "NW")

# True once every selector's trimmed text differs from the placeholder.
READY_PREDICATE = """
({ selectors, placeholder }) => selectors.every((selector) => {
    const el = document.querySelector(selector);
    const text = el ? el.textContent.trim() : placeholder;
    return text !== placeholder;
})
"""

_LEADING_INT_RE = re.compile(r"^\s*([+-]?\d+)")


def parse_direction_degrees(raw: str) -> int:
    """Parse the leading integer of a direction reading ("270", "270°", "270.4")."""
    match = _LEADING_INT_RE.match(raw or "")
    if not match:
        raise ReadingValidationError(f"Wind direction is not numeric: {raw!r}")
    return int(match.group(1))


def compass_from_degrees(degrees: int) -> str:
    """Map a bearing to one of 8 compass points, N first, clockwise.

    Halves round up (22.5 -> NE) and the index wraps, so 359 and 360 are N.
    """
    index = math.floor(degrees / 45 + 0.5) % len(COMPASS_POINTS)
    return COMPASS_POINTS[index]


@dataclass(frozen=True)
class WindSnapshot:
    """One live reading, text fields kept verbatim."""
    speed_raw: str
    direction_raw: str
    direction_degrees: int
    timestamp: str
    compass_from: str

    @classmethod
    def from_fields(cls, speed: str, direction: str, timestamp: str, *, placeholder: str = "---") -> "WindSnapshot":
        """Build a snapshot, refusing fields that are still unset."""
        fields = {"speed": speed, "direction": direction, "timestamp": timestamp}
        unset = [name for name, value in fields.items() if not value or value == placeholder]
        if unset:
            raise ScrapeError(f"Wind fields still unset after readiness: {', '.join(unset)}")
        degrees = parse_direction_degrees(direction)
        return cls(
            speed_raw=speed,
            direction_raw=direction,
            direction_degrees=degrees,
            timestamp=timestamp,
            compass_from=compass_from_degrees(degrees),
        )

    def to_response(self) -> dict[str, str]:
        """Serialize to the public /api/wind shape."""
        return {
            "windSpeed": self.speed_raw,
            "windDirection": self.direction_raw,
            "latestTimestamp": self.timestamp,
            "windFrom": self.compass_from,
        }


class WindScraper:
    """Drive one headless browser session per call: launch, navigate, wait, extract, close."""

    def __init__(
        self,
        launch_strategy: LaunchStrategy,
        *,
        page_url: str,
        speed_selector: str = "#latestVariable2",
        direction_selector: str = "#latestVariable1",
        timestamp_selector: str = "#latestTimestamp",
        placeholder: str = "---",
        navigation_timeout_ms: int = 30000,
        readiness_timeout_ms: int = 10000,
        playwright_factory: Callable = sync_playwright,
    ) -> None:
        self.launch_strategy = launch_strategy
        self.page_url = page_url
        self.speed_selector = speed_selector
        self.direction_selector = direction_selector
        self.timestamp_selector = timestamp_selector
        self.placeholder = placeholder
        self.navigation_timeout_ms = navigation_timeout_ms
        self.readiness_timeout_ms = readiness_timeout_ms
        self._playwright_factory = playwright_factory

    @property
    def selectors(self) -> list[str]:
        return [self.speed_selector, self.direction_selector, self.timestamp_selector]

    def scrape(self) -> WindSnapshot:
        """Return the current reading or raise a ScrapeError/BrowserLaunchError."""
        config = self.launch_strategy.resolve()
        logger.info(
            "Launching browser",
            extra={
                "strategy": self.launch_strategy.name,
                "headless": config.headless,
                "has_executable": config.executable_path is not None,
            },
        )
        with self._browser_session(config) as browser:
            page = browser.new_page(ignore_https_errors=config.ignore_https_errors)
            self._navigate(page)
            self._wait_until_ready(page)
            speed, direction, timestamp = self._extract(page)
            snapshot = WindSnapshot.from_fields(speed, direction, timestamp, placeholder=self.placeholder)
        logger.info(f"Wind reading {snapshot.speed_raw} from {snapshot.compass_from} at {snapshot.timestamp}")
        return snapshot

    @contextmanager
    def _browser_session(self, config: LaunchConfig) -> Iterator:
        """Start the driver, launch the browser, and close both exactly once."""
        launch_kwargs = {
            "headless": config.headless,
            "args": list(config.arguments),
            "timeout": config.timeout_ms,
        }
        if config.executable_path:
            launch_kwargs["executable_path"] = config.executable_path

        with ExitStack() as stack:
            try:
                playwright = stack.enter_context(self._playwright_factory())
                browser = playwright.chromium.launch(**launch_kwargs)
            except Exception as exc:
                logger.error(f"Browser launch failed: {exc}")
                raise BrowserLaunchError(f"Failed to launch the browser: {exc}") from exc

            try:
                yield browser
            finally:
                try:
                    browser.close()
                except Exception as exc:
                    logger.error(f"Error closing browser: {exc}")

    def _navigate(self, page) -> None:
        logger.debug(f"Navigating to {self.page_url}")
        try:
            page.goto(self.page_url, wait_until="networkidle", timeout=self.navigation_timeout_ms)
        except PlaywrightTimeoutError as exc:
            raise NavigationError(
                f"Page did not settle within {self.navigation_timeout_ms} ms: {self.page_url}"
            ) from exc
        except PlaywrightError as exc:
            raise NavigationError(f"Navigation to {self.page_url} failed: {exc}") from exc

    def _wait_until_ready(self, page) -> None:
        logger.debug("Polling for wind readings", extra={"selectors": self.selectors})
        try:
            page.wait_for_function(
                READY_PREDICATE,
                arg={"selectors": self.selectors, "placeholder": self.placeholder},
                timeout=self.readiness_timeout_ms,
            )
        except PlaywrightTimeoutError as exc:
            raise ScrapeTimeoutError(
                f"Wind readings still '{self.placeholder}' after {self.readiness_timeout_ms} ms"
            ) from exc
        except PlaywrightError as exc:
            raise ScrapeError(f"Readiness check failed: {exc}") from exc

    def _extract(self, page) -> tuple[str, str, str]:
        values = []
        for selector in self.selectors:
            try:
                text = page.text_content(selector)
            except PlaywrightError as exc:
                raise ScrapeError(f"Could not read {selector}: {exc}") from exc
            values.append((text or "").strip())
        return values[0], values[1], values[2]

"""Factory helpers for choosing the browser launch strategy at startup."""

from __future__ import annotations

import sys
from typing import Optional

from app import config
from app.data_sources.base import LaunchStrategy
from app.data_sources.launch_strategies import BundledChromiumStrategy, LocalChromeStrategy
from app.data_sources.wind_scraper import WindScraper
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__)


def default_strategy_name(platform: str) -> str:
    """Linux hosts are the deployment target; everything else is a workstation."""
    return "bundled" if platform.startswith("linux") else "local"


def build_launch_strategy(
    settings: config.Settings | None = None,
    platform: Optional[str] = None,
) -> LaunchStrategy:
    """Instantiate the configured (or platform-appropriate) launch strategy."""
    settings = settings or config.settings
    platform = platform or sys.platform
    name = (settings.launch_strategy or default_strategy_name(platform)).lower()

    if name == "bundled":
        logger.info("Using bundled Chromium launch strategy", extra={"platform": platform})
        return BundledChromiumStrategy(
            settings.chromium_bundle_dir,
            headless=settings.browser_headless,
            timeout_ms=settings.browser_launch_timeout_ms,
        )

    if name == "local":
        if not settings.local_chrome_path:
            raise ValueError("local_chrome_path must be set for the local launch strategy")
        logger.info("Using local browser launch strategy", extra={"platform": platform,
                                                                   "path": settings.local_chrome_path})
        return LocalChromeStrategy(
            settings.local_chrome_path,
            headless=settings.browser_headless,
            timeout_ms=settings.browser_launch_timeout_ms,
        )

    raise ValueError(f"Unknown launch strategy '{name}'")


def build_wind_source(
    settings: config.Settings | None = None,
    launch_strategy: Optional[LaunchStrategy] = None,
) -> WindScraper:
    """Wire a WindScraper from settings."""
    settings = settings or config.settings
    return WindScraper(
        launch_strategy or build_launch_strategy(settings),
        page_url=settings.wind_page_url,
        speed_selector=settings.wind_speed_selector,
        direction_selector=settings.wind_direction_selector,
        timestamp_selector=settings.wind_timestamp_selector,
        placeholder=settings.wind_unset_placeholder,
        navigation_timeout_ms=settings.navigation_timeout_ms,
        readiness_timeout_ms=settings.readiness_timeout_ms,
    )

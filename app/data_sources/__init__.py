"""Upstream data sources: the live wind page and the REST forecast APIs."""

from .base import HttpFetcher, LaunchConfig, LaunchStrategy, UpstreamRequest, WindSource
from .factory import build_launch_strategy, build_wind_source
from .http_fetcher import FetchResult, TimeoutFetcher
from .launch_strategies import BASELINE_ARGS, BundledChromiumStrategy, LocalChromeStrategy
from .wind_scraper import WindScraper, WindSnapshot, compass_from_degrees

__all__ = [
    "build_launch_strategy",
    "build_wind_source",
    "HttpFetcher",
    "LaunchConfig",
    "LaunchStrategy",
    "UpstreamRequest",
    "WindSource",
    "FetchResult",
    "TimeoutFetcher",
    "BASELINE_ARGS",
    "BundledChromiumStrategy",
    "LocalChromeStrategy",
    "WindScraper",
    "WindSnapshot",
    "compass_from_degrees",
]

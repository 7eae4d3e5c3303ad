"""Per-resource orchestration: cache policy, upstream calls, and error translation."""
from __future__ import annotations

from typing import Any, Mapping, Optional

from app import config
from app.app_types import ResourceResult
from app.cache import InMemoryTTLCache, TTLCache, make_cache_key
from app.data_sources.admiralty_client import build_tidal_events_request
from app.data_sources.base import HttpFetcher, UpstreamRequest, WindSource
from app.data_sources.factory import build_wind_source
from app.data_sources.http_fetcher import FetchResult, TimeoutFetcher
from app.data_sources.open_meteo_client import (
    EXPECTED_FORECAST_UNITS,
    EXPECTED_MARINE_UNITS,
    build_forecast_request,
    build_marine_request,
    warn_on_unexpected_units,
)
from app.errors import GenericFetchError, UpstreamNonOkError
from utils.logging_utils import get_tagged_logger, mask_secret

logger = get_tagged_logger(__name__)

_MISS = object()


def _error_body(result: FetchResult) -> Any:
    """Best-effort body for error envelopes: JSON when it parses, text otherwise."""
    try:
        return result.json()
    except ValueError:
        return result.text


class ConditionsAggregator:
    """Serve each logical resource with its own cache policy.

    The live wind reading is never cached. Tides, forecast and waves are
    cache-first with a fixed TTL; failures are never cached.
    """

    def __init__(
        self,
        *,
        cache: TTLCache,
        wind_source: WindSource,
        fetcher: HttpFetcher,
        settings: config.Settings,
    ) -> None:
        self.cache = cache
        self.wind_source = wind_source
        self.fetcher = fetcher
        self.settings = settings

    @property
    def ttl_seconds(self) -> int:
        return self.settings.cache_ttl_seconds

    def live_wind(self) -> ResourceResult:
        """Scrape a fresh reading on every call."""
        snapshot = self.wind_source.scrape()
        return ResourceResult(payload=snapshot.to_response(), cache_status="BYPASS")

    def tides(self, station: Optional[str] = None) -> ResourceResult:
        """Tidal events for `station` (the configured default when blank)."""
        station = (station or "").strip() or self.settings.tidal_default_station
        return self._cache_first(
            make_cache_key("tides", station),
            build_tidal_events_request(station, self.settings),
        )

    def weather_forecast(self) -> ResourceResult:
        """Hourly weather forecast."""
        return self._cache_first(
            make_cache_key("weatherforecast"),
            build_forecast_request(self.settings),
            expected_units=EXPECTED_FORECAST_UNITS,
        )

    def waves(self) -> ResourceResult:
        """Hourly wave and swell forecast."""
        return self._cache_first(
            make_cache_key("waves"),
            build_marine_request(self.settings),
            expected_units=EXPECTED_MARINE_UNITS,
        )

    def _cache_first(
        self,
        key: str,
        request: UpstreamRequest,
        *,
        expected_units: Optional[Mapping[str, str]] = None,
    ) -> ResourceResult:
        cached = self.cache.get(key, _MISS)
        if cached is not _MISS:
            logger.debug(f"Cache hit for {key}")
            return ResourceResult(payload=cached, cache_status="HIT", ttl_seconds=self.ttl_seconds)

        logger.debug(f"Cache miss for {key}; fetching {request.url}")
        result = self.fetcher.fetch(
            request.url,
            headers=request.headers,
            timeout_ms=self.settings.upstream_timeout_ms,
            params=request.params,
        )
        if not result.ok:
            body = _error_body(result)
            logger.warning(f"Upstream {request.url} returned {result.status_code}", extra={"key": key})
            raise UpstreamNonOkError(
                f"Upstream responded with HTTP {result.status_code}",
                status=result.status_code,
                body=body,
            )
        try:
            payload = result.json()
        except ValueError as exc:
            raise GenericFetchError(f"Upstream {request.url} returned invalid JSON: {exc}") from exc

        if expected_units:
            warn_on_unexpected_units(payload, expected_units, context=key)
        self.cache.set(key, payload, self.ttl_seconds)
        return ResourceResult(payload=payload, cache_status="MISS", ttl_seconds=self.ttl_seconds)


def build_aggregator(settings: config.Settings | None = None) -> ConditionsAggregator:
    """Construct the cache, scraper and fetcher once for the process."""
    settings = settings or config.settings
    if settings.uses_default_tidal_key:
        logger.warning("Using the built-in default tidal API key; set COASTAL_TIDAL_API_KEY")
    else:
        logger.info(f"Tidal API key configured ({mask_secret(settings.tidal_api_key)})")
    return ConditionsAggregator(
        cache=InMemoryTTLCache(),
        wind_source=build_wind_source(settings),
        fetcher=TimeoutFetcher(default_timeout_ms=settings.upstream_timeout_ms),
        settings=settings,
    )

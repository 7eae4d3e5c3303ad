"""HTTP API for the coastal conditions proxy."""

from typing import Any, Optional

from fastapi import APIRouter, Depends, Query, Request, Response
from fastapi.responses import JSONResponse

from .aggregator import ConditionsAggregator
from .app_types import ResourceResult
from .models import ErrorResponse, HealthResponse, WindReading
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__)

_ERROR_RESPONSES: dict[int | str, dict[str, Any]] = {
    500: {"model": ErrorResponse},
    502: {"model": ErrorResponse},
    504: {"model": ErrorResponse},
}

router = APIRouter()


def get_aggregator(request: Request) -> ConditionsAggregator:
    """Return the aggregator constructed for this app at startup."""
    return request.app.state.aggregator


def _cached_json(result: ResourceResult) -> JSONResponse:
    """Pass the upstream payload through with cache headers matching its TTL."""
    headers = {"X-Cache": result.cache_status}
    if result.ttl_seconds:
        headers["Cache-Control"] = f"public, max-age={result.ttl_seconds}"
    return JSONResponse(content=result.payload, headers=headers)


@router.get("/api/wind", response_model=WindReading, responses=_ERROR_RESPONSES)
@router.get("/api/livewind", response_model=WindReading, responses=_ERROR_RESPONSES)
def live_wind(response: Response, aggregator: ConditionsAggregator = Depends(get_aggregator)):
    """Latest wind reading, scraped live on every request."""
    result = aggregator.live_wind()
    response.headers["Cache-Control"] = "no-store"
    return result.payload


@router.get("/api/tides", responses=_ERROR_RESPONSES)
def tides(
    station: Optional[str] = Query(default=None, description="Tidal station id"),
    aggregator: ConditionsAggregator = Depends(get_aggregator),
):
    """Tidal events for a station, cached for the configured TTL."""
    return _cached_json(aggregator.tides(station))


@router.get("/api/weatherforecast", responses=_ERROR_RESPONSES)
def weather_forecast(aggregator: ConditionsAggregator = Depends(get_aggregator)):
    """Hourly weather forecast, cached for the configured TTL."""
    return _cached_json(aggregator.weather_forecast())


@router.get("/api/waves", responses=_ERROR_RESPONSES)
def waves(aggregator: ConditionsAggregator = Depends(get_aggregator)):
    """Hourly wave forecast, cached for the configured TTL."""
    return _cached_json(aggregator.waves())


@router.get("/healthz", response_model=HealthResponse)
def health(aggregator: ConditionsAggregator = Depends(get_aggregator)):
    """Liveness probe; touches no upstream."""
    strategy = getattr(aggregator.wind_source, "launch_strategy", None)
    return HealthResponse(
        status="ok",
        launch_strategy=getattr(strategy, "name", "n/a"),
        cache_entries=len(aggregator.cache),
    )

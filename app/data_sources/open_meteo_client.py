"""Request builders and unit checks for the Open-Meteo forecast and marine APIs."""
from __future__ import annotations

from typing import Any, Mapping

from app.config import Settings
from app.data_sources.base import UpstreamRequest
from utils.logging_utils import get_tagged_logger
logger = get_tagged_logger(__name__)

FORECAST_HOURLY_VARS = [
    "temperature_2m",
    "precipitation_probability",
    "precipitation",
    "cloud_cover",
    "wind_speed_10m",
    "wind_gusts_10m",
    "wind_direction_10m",
]

MARINE_HOURLY_VARS = [
    "wave_height",
    "wave_direction",
    "wave_period",
    "swell_wave_height",
    "swell_wave_direction",
    "swell_wave_period",
]

EXPECTED_FORECAST_UNITS = {
    "temperature_2m": "°C",
    "precipitation_probability": "%",
    "precipitation": "mm",
    "cloud_cover": "%",
    "wind_speed_10m": "kn",
    "wind_gusts_10m": "kn",
    "wind_direction_10m": "°",
}

EXPECTED_MARINE_UNITS = {
    "wave_height": "m",
    "wave_direction": "°",
    "wave_period": "s",
    "swell_wave_height": "m",
    "swell_wave_direction": "°",
    "swell_wave_period": "s",
}

# Acceptable alternative spellings that should not trigger warnings.
ALLOWED_UNIT_SYNONYMS = {
    "°": {"°", "deg", "degrees"},
    "%": {"%", "percent"},
    "kn": {"kn", "kt", "knots"},
}


def build_forecast_request(settings: Settings) -> UpstreamRequest:
    """Hourly wind/weather forecast for the configured spot, wind in knots."""
    return UpstreamRequest(
        url=settings.forecast_url,
        params={
            "latitude": settings.latitude,
            "longitude": settings.longitude,
            "hourly": ",".join(FORECAST_HOURLY_VARS),
            "timezone": settings.timezone,
            "wind_speed_unit": "kn",
        },
    )


def build_marine_request(settings: Settings) -> UpstreamRequest:
    """Hourly wave and swell forecast for the configured spot."""
    return UpstreamRequest(
        url=settings.marine_url,
        params={
            "latitude": settings.latitude,
            "longitude": settings.longitude,
            "hourly": ",".join(MARINE_HOURLY_VARS),
            "timezone": settings.timezone,
        },
    )


def warn_on_unexpected_units(payload: Any, expected: Mapping[str, str], *, context: str) -> list[str]:
    """Log a warning for every hourly field whose unit differs from the one requested.

    The payload itself is passed through untouched; returns the offending field names.
    """
    if not isinstance(payload, dict):
        return []
    units = payload.get("hourly_units") or {}
    mismatched = []
    for field, want in expected.items():
        actual = units.get(field)
        if actual is None or actual == want:
            continue
        if actual in ALLOWED_UNIT_SYNONYMS.get(want, set()):
            continue
        mismatched.append(field)
        logger.warning(
            "Unexpected Open-Meteo unit",
            extra={"context": context, "field": field, "unit": actual, "expected": want},
        )
    return mismatched

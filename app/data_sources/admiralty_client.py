"""Request builder for tidal events from the Admiralty UK Tidal API."""
from __future__ import annotations

from urllib.parse import quote

from app.config import Settings
from app.data_sources.base import UpstreamRequest

SUBSCRIPTION_KEY_HEADER = "Ocp-Apim-Subscription-Key"


def build_tidal_events_request(station: str, settings: Settings) -> UpstreamRequest:
    """High/low water events for `station`, authenticated with the subscription key."""
    params = {}
    if settings.tidal_duration_days:
        params["duration"] = settings.tidal_duration_days
    return UpstreamRequest(
        url=f"{settings.tidal_api_base_url}/Stations/{quote(station, safe='')}/TidalEvents",
        params=params,
        headers={SUBSCRIPTION_KEY_HEADER: settings.tidal_api_key},
    )

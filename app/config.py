"""Application configuration pulled from environment variables via pydantic."""
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from utils.logging_utils import get_tagged_logger, mask_secret
logger = get_tagged_logger(__name__, tag="config")

# Literal fallback so the proxy boots without configuration; production deployments
# must override it with COASTAL_TIDAL_API_KEY.
DEFAULT_TIDAL_API_KEY = "admiralty-discovery-key"

_LOCAL_CHROME_PATH = (
    Path(__file__).resolve().parent.parent / "chrome" / "win64-146.0.7667.0" / "chrome-win64" / "chrome.exe"
)


class Settings(BaseSettings):
    """Environment-driven configuration for the coastal conditions proxy."""
    model_config = SettingsConfigDict(env_prefix="COASTAL_", extra="ignore")

    log_level: str = "INFO"

    # live wind page
    wind_page_url: str = "http://88.97.23.70:82/"
    wind_speed_selector: str = "#latestVariable2"
    wind_direction_selector: str = "#latestVariable1"
    wind_timestamp_selector: str = "#latestTimestamp"
    wind_unset_placeholder: str = "---"
    navigation_timeout_ms: int = 30000
    readiness_timeout_ms: int = 10000

    # browser launch
    launch_strategy: str | None = None  # options: bundled, local (unset = by platform)
    chromium_bundle_dir: str | None = None
    local_chrome_path: str = str(_LOCAL_CHROME_PATH)
    browser_headless: bool = True
    browser_launch_timeout_ms: int = 30000

    # tidal events (Admiralty UK Tidal API)
    tidal_api_base_url: str = "https://admiraltyapi.azure-api.net/uktidalapi/api/V1"
    tidal_api_key: str = DEFAULT_TIDAL_API_KEY
    tidal_default_station: str = "0223"
    tidal_duration_days: int | None = None

    # forecasts (Open-Meteo)
    forecast_url: str = "https://api.open-meteo.com/v1/forecast"
    marine_url: str = "https://marine-api.open-meteo.com/v1/marine"
    latitude: float = 50.7167
    longitude: float = -1.8833
    timezone: str = "Europe/London"

    upstream_timeout_ms: int = 10000
    cache_ttl_seconds: int = 600
    cors_allow_origins: list[str] = Field(default_factory=lambda: ["*"])

    @field_validator("tidal_api_base_url", "forecast_url", "marine_url", mode="after")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Normalize base URLs to avoid double slashes."""
        return str(v).rstrip("/")

    @property
    def uses_default_tidal_key(self) -> bool:
        """True while the literal fallback credential is in effect."""
        return self.tidal_api_key == DEFAULT_TIDAL_API_KEY


settings = Settings()


if __name__ == "__main__":
    logger.setLevel("DEBUG")
    dumped = settings.model_dump()
    dumped["tidal_api_key"] = mask_secret(settings.tidal_api_key)
    logger.debug(f"Loaded settings: {dumped}")

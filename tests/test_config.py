import os
import unittest

from app.config import DEFAULT_TIDAL_API_KEY, Settings


class _EnvVar:
    """Temporarily set (or unset, with value=None) one environment variable."""

    def __init__(self, name, value):
        self.name = name
        self.value = value
        self.previous = None

    def __enter__(self):
        self.previous = os.environ.get(self.name)
        if self.value is None:
            os.environ.pop(self.name, None)
        else:
            os.environ[self.name] = self.value
        return self

    def __exit__(self, *exc):
        if self.previous is None:
            os.environ.pop(self.name, None)
        else:
            os.environ[self.name] = self.previous
        return False


class TestConfig(unittest.TestCase):
    def test_settings_defaults(self):
        with _EnvVar("COASTAL_CACHE_TTL_SECONDS", None), _EnvVar("COASTAL_TIDAL_DEFAULT_STATION", None):
            s = Settings()
            self.assertEqual(s.cache_ttl_seconds, 600)
            self.assertEqual(s.tidal_default_station, "0223")
            self.assertEqual(s.wind_unset_placeholder, "---")
            self.assertEqual(s.navigation_timeout_ms, 30000)
            self.assertEqual(s.readiness_timeout_ms, 10000)
            self.assertEqual(s.upstream_timeout_ms, 10000)

    def test_settings_env_override(self):
        with _EnvVar("COASTAL_CACHE_TTL_SECONDS", "30"), _EnvVar("COASTAL_LAUNCH_STRATEGY", "local"):
            s = Settings()
            self.assertEqual(s.cache_ttl_seconds, 30)
            self.assertEqual(s.launch_strategy, "local")

    def test_default_tidal_key_flagged(self):
        with _EnvVar("COASTAL_TIDAL_API_KEY", None):
            self.assertTrue(Settings().uses_default_tidal_key)
            self.assertEqual(Settings().tidal_api_key, DEFAULT_TIDAL_API_KEY)
        with _EnvVar("COASTAL_TIDAL_API_KEY", "real-key"):
            self.assertFalse(Settings().uses_default_tidal_key)

    def test_base_urls_lose_trailing_slash(self):
        s = Settings(
            tidal_api_base_url="https://tides.test/api/V1/",
            forecast_url="https://forecast.test/v1/forecast/",
        )
        self.assertEqual(s.tidal_api_base_url, "https://tides.test/api/V1")
        self.assertEqual(s.forecast_url, "https://forecast.test/v1/forecast")

    def test_wind_page_url_kept_verbatim(self):
        self.assertEqual(Settings(wind_page_url="http://wind.test/").wind_page_url, "http://wind.test/")


if __name__ == "__main__":
    unittest.main()

import unittest

from app.config import Settings
from app.data_sources.admiralty_client import SUBSCRIPTION_KEY_HEADER, build_tidal_events_request


class TestTidalEventsRequest(unittest.TestCase):
    def test_url_and_key_header(self):
        settings = Settings(tidal_api_base_url="https://tides.test/api/V1/", tidal_api_key="k-123")
        req = build_tidal_events_request("0223", settings)
        self.assertEqual(req.url, "https://tides.test/api/V1/Stations/0223/TidalEvents")
        self.assertEqual(req.headers[SUBSCRIPTION_KEY_HEADER], "k-123")
        self.assertEqual(dict(req.params), {})

    def test_station_is_path_escaped(self):
        req = build_tidal_events_request("02/23 x", Settings())
        self.assertTrue(req.url.endswith("/Stations/02%2F23%20x/TidalEvents"))

    def test_duration_param_when_configured(self):
        req = build_tidal_events_request("0223", Settings(tidal_duration_days=3))
        self.assertEqual(req.params["duration"], 3)


if __name__ == "__main__":
    unittest.main()

import unittest

from app.errors import (
    BrowserLaunchError,
    GenericFetchError,
    NavigationError,
    ProxyError,
    ReadingValidationError,
    ScrapeError,
    ScrapeTimeoutError,
    UpstreamNonOkError,
    UpstreamTimeoutError,
)


class TestErrorTaxonomy(unittest.TestCase):
    def test_status_codes(self):
        self.assertEqual(BrowserLaunchError().status_code, 500)
        self.assertEqual(ScrapeTimeoutError().status_code, 500)
        self.assertEqual(GenericFetchError().status_code, 500)
        self.assertEqual(UpstreamNonOkError(status=404).status_code, 502)
        self.assertEqual(UpstreamTimeoutError().status_code, 504)

    def test_scrape_failures_share_label(self):
        for cls in (NavigationError, ScrapeTimeoutError, ReadingValidationError):
            self.assertTrue(issubclass(cls, ScrapeError))
            self.assertEqual(cls("x").to_payload()["error"], "Failed to fetch wind data")

    def test_payload_shape(self):
        self.assertEqual(
            BrowserLaunchError("no executable").to_payload(),
            {"error": "Browser failed to launch", "details": "no executable"},
        )

    def test_non_ok_payload_carries_status_and_body(self):
        payload = UpstreamNonOkError("bad", status=503, body={"message": "down"}).to_payload()
        self.assertEqual(payload["status"], 503)
        self.assertEqual(payload["body"], {"message": "down"})

    def test_all_are_proxy_errors(self):
        for cls in (BrowserLaunchError, ScrapeError, UpstreamTimeoutError, GenericFetchError):
            self.assertTrue(issubclass(cls, ProxyError))


if __name__ == "__main__":
    unittest.main()

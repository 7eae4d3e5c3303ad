import logging
import unittest

from utils import logging_utils
from utils.logging_utils import (
    DEFAULT_JOB_NAME,
    BelowLevelFilter,
    EnsureTagFilter,
    build_logging_config,
    get_tagged_logger,
    mask_secret,
    redact_headers,
    tag_for,
)


class _ListHandler(logging.Handler):
    def __init__(self):
        super().__init__()
        self.records = []

    def emit(self, record: logging.LogRecord) -> None:  # type: ignore[override]
        self.records.append(record)


def _record(name="uvicorn.error", level=logging.INFO):
    return logging.LogRecord(name, level, __file__, 1, "msg", None, None)


class TestTags(unittest.TestCase):
    def test_tag_for_app_modules_drops_package_prefix(self):
        self.assertEqual(tag_for("app.data_sources.http_fetcher"), "data_sources/http_fetcher")
        self.assertEqual(tag_for("app.aggregator"), "aggregator")

    def test_tag_for_third_party_loggers(self):
        self.assertEqual(tag_for("urllib3.connectionpool"), "urllib3/connectionpool")
        self.assertEqual(tag_for(""), "-")

    def test_fetcher_records_carry_component_tag(self):
        from app.data_sources import http_fetcher

        handler = _ListHandler()
        base_logger = http_fetcher.logger.logger
        previous_level = base_logger.level
        base_logger.setLevel(logging.DEBUG)
        base_logger.addHandler(handler)
        try:
            http_fetcher.logger.info("Upstream GET")
        finally:
            base_logger.removeHandler(handler)
            base_logger.setLevel(previous_level)

        self.assertEqual(handler.records[-1].tag, "data_sources/http_fetcher")

    def test_explicit_tag_wins(self):
        self.assertEqual(get_tagged_logger("__main__", tag="server").extra["tag"], "server")

    def test_untagged_records_get_tag_from_name(self):
        record = _record("playwright._impl")
        EnsureTagFilter().filter(record)
        self.assertEqual(record.tag, "playwright/_impl")


class TestLoggingConfig(unittest.TestCase):
    def test_default_job_name_is_the_proxy(self):
        cfg = build_logging_config()
        self.assertEqual(cfg["filters"]["job_name"]["job_name"], "coastal-proxy")
        self.assertEqual(DEFAULT_JOB_NAME, "coastal-proxy")

    def test_warnings_go_to_stderr_only(self):
        cfg = build_logging_config()
        self.assertIn("below_warning", cfg["handlers"]["stdout"]["filters"])
        self.assertEqual(cfg["handlers"]["stderr"]["level"], "WARNING")
        self.assertFalse(BelowLevelFilter().filter(_record(level=logging.WARNING)))
        self.assertTrue(BelowLevelFilter().filter(_record(level=logging.INFO)))

    def test_urllib3_held_at_warning(self):
        cfg = build_logging_config(level="DEBUG")
        self.assertEqual(cfg["loggers"]["urllib3"]["level"], "WARNING")
        self.assertEqual(cfg["root"]["level"], "DEBUG")

    def test_setup_logging_stamps_job_name(self):
        root = logging.getLogger()
        orig_handlers = root.handlers[:]
        orig_level = root.level
        try:
            logging_utils.setup_logging(level="INFO", override_existing=True)
            job_filters = [f for h in root.handlers for f in h.filters
                           if isinstance(f, logging_utils.JobNameFilter)]
            self.assertTrue(job_filters)
            self.assertTrue(all(f.job_name == "coastal-proxy" for f in job_filters))
        finally:
            root.handlers = orig_handlers
            root.setLevel(orig_level)
            logging_utils._CONFIGURED = False


class TestMaskSecret(unittest.TestCase):
    def test_keeps_last_four_characters(self):
        self.assertEqual(mask_secret("abcdef123456"), "********3456")

    def test_short_values_fully_masked(self):
        self.assertEqual(mask_secret("abc"), "***")
        self.assertEqual(mask_secret("abcd"), "****")

    def test_unset_value(self):
        self.assertEqual(mask_secret(None), "<unset>")

    def test_custom_visible_count(self):
        self.assertEqual(mask_secret("abcdef", visible=2), "****ef")


class TestRedactHeaders(unittest.TestCase):
    def test_masks_credential_headers_only(self):
        headers = {
            "Ocp-Apim-Subscription-Key": "0123456789abcdef",
            "Authorization": "Bearer tokenvalue",
            "Accept": "application/json",
        }
        redacted = redact_headers(headers)
        self.assertEqual(redacted["Ocp-Apim-Subscription-Key"], "************cdef")
        self.assertNotIn("tokenvalue", redacted["Authorization"])
        self.assertEqual(redacted["Accept"], "application/json")

    def test_does_not_mutate_input(self):
        headers = {"X-Api-Key": "secret-value"}
        redact_headers(headers)
        self.assertEqual(headers["X-Api-Key"], "secret-value")

    def test_empty_headers(self):
        self.assertEqual(redact_headers(None), {})
        self.assertEqual(redact_headers({}), {})


if __name__ == "__main__":
    unittest.main()

"""
Logging setup for the coastal conditions proxy.

``create_app()`` and ``run_server.py`` both call :func:`setup_logging`; modules
take a logger with :func:`get_tagged_logger`:

    logger = get_tagged_logger(__name__)   # in app/data_sources/http_fetcher.py
    logger.info("Upstream GET")            # tag="data_sources/http_fetcher"

Every line carries the process job name and a component tag, so the output of
concurrent scrapes and upstream calls can be told apart.
"""

from __future__ import annotations

import logging
import logging.config
from typing import Any, Mapping, Optional

DEFAULT_JOB_NAME = "coastal-proxy"

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(job_name)s | %(tag)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Chatty third-party loggers held back regardless of the app level.
QUIET_LOGGERS = {
    "urllib3": "WARNING",
    "asyncio": "WARNING",
}

# Header names whose values are credentials.
SENSITIVE_HEADER_TOKENS = ("key", "token", "secret", "authorization", "cookie")

_CONFIGURED: bool = False


def tag_for(logger_name: str) -> str:
    """Component tag for a logger name: "app.data_sources.http_fetcher" -> "data_sources/http_fetcher"."""
    if not logger_name:
        return "-"
    parts = logger_name.split(".")
    if parts[0] == "app" and len(parts) > 1:
        parts = parts[1:]
    return "/".join(parts)


class BelowLevelFilter(logging.Filter):
    """Pass records strictly below `level`; keeps warnings off stdout."""

    def __init__(self, level: int = logging.WARNING) -> None:
        super().__init__()
        self.level = level

    def filter(self, record: logging.LogRecord) -> bool:  # type: ignore[override]
        return record.levelno < self.level


class EnsureTagFilter(logging.Filter):
    """Give untagged records (uvicorn, urllib3, playwright) a tag from their logger name."""

    def filter(self, record: logging.LogRecord) -> bool:  # type: ignore[override]
        if not hasattr(record, "tag"):
            record.tag = tag_for(record.name)
        return True


class JobNameFilter(logging.Filter):
    """Stamp the process job name on every record."""

    def __init__(self, job_name: str = DEFAULT_JOB_NAME) -> None:
        super().__init__()
        self.job_name = job_name

    def filter(self, record: logging.LogRecord) -> bool:  # type: ignore[override]
        if not hasattr(record, "job_name"):
            record.job_name = self.job_name
        return True


def build_logging_config(*, level: str | int = "INFO", job_name: str = DEFAULT_JOB_NAME) -> Mapping[str, Any]:
    """dictConfig for the proxy: INFO and below to stdout, warnings and errors to stderr."""
    shared_filters = ["ensure_tag", "job_name"]
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "filters": {
            "ensure_tag": {"()": EnsureTagFilter},
            "job_name": {"()": JobNameFilter, "job_name": job_name},
            "below_warning": {"()": BelowLevelFilter, "level": logging.WARNING},
        },
        "formatters": {
            "proxy": {"format": LOG_FORMAT, "datefmt": DATE_FORMAT},
        },
        "handlers": {
            "stdout": {
                "class": "logging.StreamHandler",
                "formatter": "proxy",
                "filters": shared_filters + ["below_warning"],
                "stream": "ext://sys.stdout",
            },
            "stderr": {
                "class": "logging.StreamHandler",
                "formatter": "proxy",
                "filters": shared_filters,
                "level": "WARNING",
                "stream": "ext://sys.stderr",
            },
        },
        "loggers": {name: {"level": quiet_level} for name, quiet_level in QUIET_LOGGERS.items()},
        "root": {"level": level, "handlers": ["stdout", "stderr"]},
    }


def setup_logging(
    *,
    level: str | int = "INFO",
    job_name: str = DEFAULT_JOB_NAME,
    override_existing: bool = False,
) -> None:
    """Apply the proxy's logging config once per process (again only with `override_existing`)."""
    global _CONFIGURED

    if _CONFIGURED and not override_existing:
        return
    logging.config.dictConfig(build_logging_config(level=level, job_name=job_name))
    _CONFIGURED = True


def get_tagged_logger(name: str, *, tag: Optional[str] = None) -> logging.LoggerAdapter:
    """LoggerAdapter whose records carry `tag` (derived from `name` when omitted)."""
    return logging.LoggerAdapter(logging.getLogger(name), {"tag": tag or tag_for(name)})


def mask_secret(value: Optional[str], *, visible: int = 4) -> str:
    """Mask all but the last `visible` characters of a credential.

    "abcdef123456" -> "********3456", "abc" -> "***", None -> "<unset>".
    """
    if value is None:
        return "<unset>"
    value = str(value)
    if len(value) <= visible:
        return "*" * len(value)
    return "*" * (len(value) - visible) + value[-visible:]


def redact_headers(headers: Optional[Mapping[str, Any]]) -> dict[str, Any]:
    """Copy of request headers with credential values masked."""
    if not headers:
        return {}
    redacted: dict[str, Any] = {}
    for key, value in headers.items():
        if any(token in str(key).lower() for token in SENSITIVE_HEADER_TOKENS):
            redacted[key] = mask_secret(None if value is None else str(value))
        else:
            redacted[key] = value
    return redacted

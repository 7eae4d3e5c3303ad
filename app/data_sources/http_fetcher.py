"""Deadline-bounded HTTP GET with real cancellation of the in-flight call."""
from __future__ import annotations

import functools
import json
import socket
import threading
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Mapping, Optional

import requests
from requests.adapters import HTTPAdapter
from requests.structures import CaseInsensitiveDict
from urllib3.connectionpool import HTTPConnectionPool, HTTPSConnectionPool

from app.errors import GenericFetchError, UpstreamTimeoutError
from utils.logging_utils import get_tagged_logger, redact_headers

logger = get_tagged_logger(__name__)

DEFAULT_TIMEOUT_MS = 10000
CHUNK_SIZE = 64 * 1024


@dataclass
class FetchResult:
    """A completed upstream response, successful or not."""
    url: str
    status_code: int
    headers: Mapping[str, str] = field(default_factory=dict)
    content: bytes = b""
    elapsed_ms: float = 0.0

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    @property
    def text(self) -> str:
        return self.content.decode("utf-8", errors="replace")

    def json(self) -> Any:
        """Decode the body as JSON (raises ValueError on malformed input)."""
        return json.loads(self.content)


class _CheckoutHookMixin:
    """Report every connection the pool hands out, so its socket can be shut down."""

    def __init__(self, *args, on_checkout: Optional[Callable[[Any], None]] = None, **kwargs):
        super().__init__(*args, **kwargs)
        self._on_checkout = on_checkout

    def _get_conn(self, timeout=None):
        conn = super()._get_conn(timeout=timeout)
        if self._on_checkout is not None:
            self._on_checkout(conn)
        return conn


class _TrackedHTTPConnectionPool(_CheckoutHookMixin, HTTPConnectionPool):
    pass


class _TrackedHTTPSConnectionPool(_CheckoutHookMixin, HTTPSConnectionPool):
    pass


class _CancellableAdapter(HTTPAdapter):
    """HTTPAdapter whose direct (non-proxied) pools report checked-out connections."""

    def __init__(self, on_checkout: Callable[[Any], None], **kwargs) -> None:
        self._on_checkout = on_checkout
        super().__init__(**kwargs)

    def init_poolmanager(self, *args, **kwargs) -> None:
        super().init_poolmanager(*args, **kwargs)
        self.poolmanager.pool_classes_by_scheme = {
            "http": functools.partial(_TrackedHTTPConnectionPool, on_checkout=self._on_checkout),
            "https": functools.partial(_TrackedHTTPSConnectionPool, on_checkout=self._on_checkout),
        }


def _shutdown_socket(conn: Any) -> None:
    """Unblock any thread reading from `conn`; a socket that is already gone is fine."""
    sock = getattr(conn, "sock", None)
    if sock is None:
        return
    try:
        sock.shutdown(socket.SHUT_RDWR)
    except OSError as exc:
        logger.debug(f"Socket already closed while cancelling: {exc}")


class _CancellationSignal:
    """Fires once after a delay and tears down whatever the call currently holds open."""

    def __init__(self, session: requests.Session, timer_factory: Callable[..., Any]) -> None:
        self._session = session
        self._timer_factory = timer_factory
        self._response: Optional[requests.Response] = None
        self._connections: list[Any] = []
        self._lock = threading.Lock()
        self._timer = None
        self.fired = threading.Event()

    def arm(self, seconds: float) -> None:
        self._timer = self._timer_factory(seconds, self._fire)
        self._timer.daemon = True
        self._timer.start()

    def disarm(self) -> None:
        if self._timer is not None:
            self._timer.cancel()

    def track(self, conn: Any) -> None:
        """Remember a connection in use; shut it at once if the deadline already passed."""
        with self._lock:
            self._connections.append(conn)
        if self.fired.is_set():
            _shutdown_socket(conn)

    def attach(self, response: requests.Response) -> None:
        with self._lock:
            self._response = response
        if self.fired.is_set():
            response.close()

    def _fire(self) -> None:
        self.fired.set()
        with self._lock:
            response = self._response
            connections = list(self._connections)
        for conn in connections:
            _shutdown_socket(conn)
        if response is not None:
            response.close()
        self._session.close()


class TimeoutFetcher:
    """GET an upstream URL, cancelling the call if it has not settled within the budget.

    Non-2xx responses are returned, not raised; only transport failures
    (GenericFetchError) and deadline breaches (UpstreamTimeoutError) raise.
    """

    def __init__(
        self,
        *,
        default_timeout_ms: int = DEFAULT_TIMEOUT_MS,
        session_factory: Callable[[], requests.Session] = requests.Session,
        timer_factory: Callable[..., Any] = threading.Timer,
        user_agent: str = "coastal-conditions-proxy",
    ) -> None:
        if default_timeout_ms <= 0:
            raise ValueError("default_timeout_ms must be positive")
        self.default_timeout_ms = default_timeout_ms
        self._session_factory = session_factory
        self._timer_factory = timer_factory
        self.user_agent = user_agent

    def fetch(
        self,
        url: str,
        headers: Optional[Mapping[str, str]] = None,
        timeout_ms: Optional[int] = None,
        params: Optional[Mapping[str, object]] = None,
    ) -> FetchResult:
        """Issue the GET and return the response, whatever its status code."""
        if timeout_ms is None:
            timeout_ms = self.default_timeout_ms
        if timeout_ms <= 0:
            raise ValueError(f"timeout_ms must be positive, got {timeout_ms}")
        timeout_s = timeout_ms / 1000.0
        request_headers = {"User-Agent": self.user_agent, "Accept": "application/json"}
        request_headers.update(headers or {})
        logger.debug(
            "Upstream GET",
            extra={"url": url, "params": dict(params or {}), "headers": redact_headers(request_headers)},
        )

        started = time.monotonic()
        session = self._session_factory()
        signal = _CancellationSignal(session, self._timer_factory)
        for prefix in ("http://", "https://"):
            session.mount(prefix, _CancellableAdapter(signal.track))
        signal.arm(timeout_s)
        try:
            resp = session.get(
                url,
                headers=request_headers,
                params=params,
                timeout=(timeout_s, timeout_s),
                stream=True,
            )
            signal.attach(resp)
            chunks = []
            for chunk in resp.iter_content(chunk_size=CHUNK_SIZE):
                if signal.fired.is_set():
                    break
                chunks.append(chunk)
            if signal.fired.is_set():
                raise UpstreamTimeoutError(f"{url} did not complete within {timeout_ms} ms")
            result = FetchResult(
                url=url,
                status_code=resp.status_code,
                headers=CaseInsensitiveDict(resp.headers),
                content=b"".join(chunks),
                elapsed_ms=(time.monotonic() - started) * 1000.0,
            )
        except UpstreamTimeoutError:
            raise
        except requests.Timeout as exc:
            raise UpstreamTimeoutError(f"{url} did not complete within {timeout_ms} ms") from exc
        except (requests.RequestException, OSError, ValueError) as exc:
            # Closing the response from the timer surfaces as a connection or I/O error.
            if signal.fired.is_set():
                raise UpstreamTimeoutError(f"{url} did not complete within {timeout_ms} ms") from exc
            raise GenericFetchError(f"Request to {url} failed: {exc}") from exc
        finally:
            signal.disarm()
            session.close()

        if signal.fired.is_set():
            raise UpstreamTimeoutError(f"{url} did not complete within {timeout_ms} ms")
        logger.info(f"Upstream {url} -> {result.status_code} in {result.elapsed_ms:.0f} ms")
        return result

"""Cancellable HTTP fetcher built on a shared ``httpx`` client.

Each request runs on its own daemon thread.  The calling thread waits on the
resulting future in short polls so it can notice a raised cancel token, or
the overall deadline, without waiting for the socket to give up.  An
abandoned request keeps its thread until the socket finishes, but it never
delays requests started after it.
"""

from __future__ import annotations

import threading
import time
from concurrent.futures import Future
from concurrent.futures import TimeoutError as FutureTimeout
from typing import TYPE_CHECKING, Optional

import httpx
import structlog

from linkparser.config import settings
from linkparser.errors import (
    FetchCancelled,
    FetchHttpStatus,
    FetchNetworkError,
    FetchTimeout,
)
from linkparser.scraper.models import RawPage, TargetUrl

if TYPE_CHECKING:
    from linkparser.session import CancelToken

logger = structlog.get_logger(__name__)

_lock = threading.Lock()
_client: Optional[httpx.Client] = None


# ---------------------------------------------------------------------------
# Shared client
# ---------------------------------------------------------------------------

def get_client() -> httpx.Client:
    """Return the process-wide HTTP client, creating it on first use.

    httpx advertises ``gzip``/``deflate`` in ``Accept-Encoding`` and decodes
    compressed bodies on its own.
    """
    global _client
    with _lock:
        if _client is None or _client.is_closed:
            _client = httpx.Client(
                headers=settings.request_headers,
                timeout=settings.request_timeout,
                follow_redirects=True,
            )
        return _client


def close_client() -> None:
    """Close the shared client.  Safe to call repeatedly."""
    global _client
    with _lock:
        client, _client = _client, None
    if client is not None:
        client.close()


# ---------------------------------------------------------------------------
# Worker side
# ---------------------------------------------------------------------------

def _request(url: str) -> RawPage:
    """Perform the GET for *url* and translate httpx failures."""
    try:
        response = get_client().get(url)
    except httpx.TimeoutException as exc:
        raise FetchTimeout(url, settings.request_timeout) from exc
    except (httpx.HTTPError, httpx.InvalidURL) as exc:
        raise FetchNetworkError(url, str(exc) or type(exc).__name__) from exc

    if not response.is_success:
        raise FetchHttpStatus(url, response.status_code, response.reason_phrase)

    return RawPage(
        url=url,
        html=response.text,
        status_code=response.status_code,
        final_url=str(response.url),
    )


def _start_request(url: str) -> Future[RawPage]:
    """Run :func:`_request` on a fresh daemon thread and return its future."""
    future: Future[RawPage] = Future()

    def _worker() -> None:
        if not future.set_running_or_notify_cancel():
            return
        try:
            future.set_result(_request(url))
        except Exception as exc:
            future.set_exception(exc)

    threading.Thread(target=_worker, name="linkparser-fetch", daemon=True).start()
    return future


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def fetch_page(url: TargetUrl | str, cancel: "CancelToken | None" = None) -> RawPage:
    """Fetch *url* and return a :class:`RawPage`.

    Exactly one request is sent; nothing is retried.

    Raises:
        FetchCancelled: *cancel* was raised before the response arrived.
        FetchTimeout: The request outlived ``settings.request_timeout``.
        FetchHttpStatus: The server answered with a non-2xx status.
        FetchNetworkError: DNS, connection or protocol failure.
    """
    target = str(url)
    if cancel is not None and cancel.cancelled:
        raise FetchCancelled(target)

    timeout = settings.request_timeout
    logger.info("fetch_start", url=target, timeout=timeout)
    started = time.monotonic()
    deadline = started + timeout
    future = _start_request(target)

    while True:
        try:
            page = future.result(timeout=settings.cancel_poll_interval)
            break
        except FutureTimeout:
            if cancel is not None and cancel.cancelled:
                logger.info("fetch_cancelled", url=target)
                raise FetchCancelled(target) from None
            if time.monotonic() >= deadline:
                logger.warning("fetch_failed", url=target, kind=FetchTimeout.kind)
                raise FetchTimeout(target, timeout) from None
        except (FetchTimeout, FetchHttpStatus, FetchNetworkError) as exc:
            logger.warning("fetch_failed", url=target, kind=exc.kind, error=str(exc))
            raise

    # A response that lands after the token was raised is still a cancellation.
    if cancel is not None and cancel.cancelled:
        logger.info("fetch_cancelled", url=target)
        raise FetchCancelled(target)

    logger.info(
        "fetch_done",
        url=target,
        final_url=page.final_url,
        status=page.status_code,
        chars=len(page.html),
        elapsed=round(time.monotonic() - started, 3),
    )
    return page


def fetch(url: TargetUrl | str, cancel: "CancelToken | None" = None) -> str:
    """Fetch *url* and return only the decoded document text."""
    return fetch_page(url, cancel).html

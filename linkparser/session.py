"""Operation handles for the fetch → extract pipeline.

``load_links`` is the blocking pipeline every front-end calls.  A
``LinkSession`` wraps it for interactive callers: each ``start`` runs the
pipeline in the background and returns an :class:`Operation` handle.
Starting a new operation cancels the previous one, and only the newest
operation's outcome is ever handed to the caller's callback.
"""

from __future__ import annotations

import itertools
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from typing import Callable, Optional

import structlog

from linkparser.errors import FetchCancelled, FetchError
from linkparser.scraper.extractor import extract
from linkparser.scraper.fetcher import fetch_page
from linkparser.scraper.models import PageLinks, TargetUrl
from linkparser.scraper.urls import normalize_input

logger = structlog.get_logger(__name__)


class CancelToken:
    """Cooperative cancellation signal shared between a caller and a fetch."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self, url: str = "") -> None:
        if self._event.is_set():
            raise FetchCancelled(url)


def load_links(raw: TargetUrl | str, cancel: CancelToken | None = None) -> PageLinks:
    """Normalise *raw*, fetch it and extract its links.

    Relative links are resolved against the URL the document was finally
    served from (after redirects).

    Raises:
        InvalidUrlError: Before any network activity, for unusable input.
        FetchError: Any classified fetch failure, including cancellation.
    """
    target = raw if isinstance(raw, TargetUrl) else normalize_input(raw)
    page = fetch_page(target, cancel)
    if cancel is not None:
        cancel.raise_if_cancelled(target.url)

    links = extract(page.html, page.final_url)
    return PageLinks(
        url=target.url,
        final_url=page.final_url,
        status_code=page.status_code,
        html=page.html,
        links=links,
    )


# ---------------------------------------------------------------------------
# Operation handles
# ---------------------------------------------------------------------------

@dataclass
class OperationOutcome:
    """What one operation ended with: a page, a classified error, or a cancel."""

    operation_id: int
    page: Optional[PageLinks] = None
    error: Optional[FetchError] = None
    cancelled: bool = False

    @property
    def ok(self) -> bool:
        return self.page is not None


class Operation:
    """Handle for one background fetch/extract run."""

    def __init__(self, operation_id: int, target: TargetUrl) -> None:
        self.id = operation_id
        self.target = target
        self.token = CancelToken()
        self._future: Optional[Future[OperationOutcome]] = None

    def cancel(self) -> None:
        self.token.cancel()

    @property
    def cancelled(self) -> bool:
        return self.token.cancelled

    def done(self) -> bool:
        return self._future is not None and self._future.done()

    def result(self, timeout: float | None = None) -> OperationOutcome:
        """Block until the operation finishes and return its outcome."""
        if self._future is None:
            raise RuntimeError(f"operation {self.id} has not been started")
        return self._future.result(timeout=timeout)

    def __repr__(self) -> str:
        return f"Operation(id={self.id}, url={self.target.url!r})"


ResultCallback = Callable[[Operation, OperationOutcome], None]


class LinkSession:
    """Runs at most one live operation, superseding older ones.

    Args:
        loader: The blocking pipeline to run; defaults to :func:`load_links`.
        max_workers: Size of the background pool.  Superseded operations may
            still be winding down, so this is more than one.
    """

    def __init__(
        self,
        loader: Callable[..., PageLinks] = load_links,
        max_workers: int = 2,
    ) -> None:
        self._loader = loader
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="linkparser-op"
        )
        self._ids = itertools.count(1)
        self._lock = threading.Lock()
        # Held while checking currency and invoking the callback, so a stale
        # outcome can never be delivered after a newer one.
        self._deliver_lock = threading.Lock()
        self._current: Optional[Operation] = None

    @property
    def current(self) -> Optional[Operation]:
        return self._current

    def is_current(self, op: Operation) -> bool:
        return self._current is op

    def start(self, raw: str, on_result: ResultCallback | None = None) -> Operation:
        """Start loading *raw*, cancelling any operation still in flight.

        Raises:
            InvalidUrlError: Synchronously, without touching the previous
                operation, when *raw* is not a usable URL.
        """
        target = normalize_input(raw)

        with self._lock:
            previous = self._current
            op = Operation(next(self._ids), target)
            self._current = op

        if previous is not None and not previous.done():
            previous.cancel()
            logger.info("operation_superseded", operation_id=previous.id, by=op.id)

        logger.info("operation_started", operation_id=op.id, url=target.url)
        op._future = self._executor.submit(self._run, op, on_result)
        return op

    def cancel(self) -> None:
        """Raise the cancel token of the current operation, if any."""
        op = self._current
        if op is not None:
            op.cancel()

    def close(self) -> None:
        self.cancel()
        self._executor.shutdown(wait=False)

    def __enter__(self) -> "LinkSession":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # ------------------------------------------------------------------

    def _run(self, op: Operation, on_result: ResultCallback | None) -> OperationOutcome:
        try:
            page = self._loader(op.target, cancel=op.token)
            op.token.raise_if_cancelled(op.target.url)
            outcome = OperationOutcome(op.id, page=page)
        except FetchCancelled:
            outcome = OperationOutcome(op.id, cancelled=True)
        except FetchError as exc:
            outcome = OperationOutcome(op.id, error=exc)

        if on_result is None:
            return outcome

        with self._deliver_lock:
            if self.is_current(op):
                on_result(op, outcome)
            else:
                logger.info("result_discarded", operation_id=op.id)
        return outcome

"""Tests for operation handles: cancellation, supersession and delivery.

Most tests replace the pipeline with small fake loaders so they exercise the
session's threading rules without any HTTP at all.  The last group runs the
real pipeline against ``respx`` routes.
"""

from __future__ import annotations

import threading
import time

import httpx
import pytest
import respx

from linkparser.errors import FetchCancelled, FetchHttpStatus, InvalidUrlError
from linkparser.scraper.fetcher import close_client
from linkparser.scraper.models import LinkSet, PageLinks, TargetUrl
from linkparser.session import CancelToken, LinkSession, Operation, OperationOutcome


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _page(target: TargetUrl) -> PageLinks:
    return PageLinks(
        url=target.url,
        final_url=target.url,
        status_code=200,
        html="<html></html>",
        links=LinkSet([target.url + "child"]),
    )


class FakeLoader:
    """Loader whose behaviour depends on the requested host.

    - ``slow.example``: waits until cancelled (honours the token).
    - ``stubborn.example``: ignores the token and waits for ``release``.
    - ``missing.example``: fails with HTTP 404.
    - anything else: returns a page immediately.
    """

    def __init__(self) -> None:
        self.release = threading.Event()
        self.started: list[str] = []

    def __call__(self, target: TargetUrl, cancel: CancelToken | None = None) -> PageLinks:
        self.started.append(target.host)
        if target.host == "slow.example":
            while not (cancel is not None and cancel.cancelled):
                time.sleep(0.01)
            raise FetchCancelled(target.url)
        if target.host == "stubborn.example":
            self.release.wait(5)
            return _page(target)
        if target.host == "missing.example":
            raise FetchHttpStatus(target.url, 404, "Not Found")
        return _page(target)


class Recorder:
    def __init__(self) -> None:
        self.delivered: list[OperationOutcome] = []
        self.event = threading.Event()

    def __call__(self, op, outcome: OperationOutcome) -> None:
        self.delivered.append(outcome)
        self.event.set()


@pytest.fixture
def loader() -> FakeLoader:
    return FakeLoader()


@pytest.fixture
def session(loader: FakeLoader):
    s = LinkSession(loader=loader)
    yield s
    loader.release.set()
    s.close()


# ---------------------------------------------------------------------------
# CancelToken
# ---------------------------------------------------------------------------

class TestCancelToken:
    def test_starts_clear(self) -> None:
        token = CancelToken()
        assert token.cancelled is False
        token.raise_if_cancelled()

    def test_cancel_is_sticky(self) -> None:
        token = CancelToken()
        token.cancel()
        token.cancel()
        assert token.cancelled is True
        with pytest.raises(FetchCancelled):
            token.raise_if_cancelled("https://example.com/")


# ---------------------------------------------------------------------------
# LinkSession
# ---------------------------------------------------------------------------

class TestLinkSession:
    def test_delivers_successful_outcome(self, session: LinkSession) -> None:
        recorder = Recorder()
        op = session.start("fast.example", on_result=recorder)
        outcome = op.result(timeout=2)

        assert outcome.ok
        assert outcome.page is not None
        assert outcome.page.url == "https://fast.example/"
        assert recorder.event.wait(2)
        assert recorder.delivered == [outcome]

    def test_operation_ids_increase(self, session: LinkSession) -> None:
        first = session.start("one.example")
        second = session.start("two.example")
        assert second.id > first.id
        assert session.current is second

    def test_classified_error_is_delivered(self, session: LinkSession) -> None:
        recorder = Recorder()
        op = session.start("missing.example", on_result=recorder)
        outcome = op.result(timeout=2)

        assert not outcome.ok
        assert isinstance(outcome.error, FetchHttpStatus)
        assert outcome.error.status_code == 404
        assert recorder.event.wait(2)

    def test_explicit_cancel_reports_cancelled(self, session: LinkSession) -> None:
        recorder = Recorder()
        op = session.start("slow.example", on_result=recorder)
        session.cancel()
        outcome = op.result(timeout=2)

        assert outcome.cancelled
        assert outcome.page is None
        assert outcome.error is None
        assert recorder.event.wait(2)
        assert recorder.delivered[0].cancelled

    def test_new_operation_supersedes_previous(self, session: LinkSession) -> None:
        recorder = Recorder()
        first = session.start("slow.example", on_result=recorder)
        second = session.start("fast.example", on_result=recorder)

        assert first.cancelled
        first_outcome = first.result(timeout=2)
        second_outcome = second.result(timeout=2)

        assert first_outcome.cancelled
        assert second_outcome.ok
        assert recorder.delivered == [second_outcome]

    def test_stale_success_is_discarded(self, session: LinkSession, loader: FakeLoader) -> None:
        recorder = Recorder()
        first = session.start("stubborn.example", on_result=recorder)
        second = session.start("fast.example", on_result=recorder)
        second.result(timeout=2)

        loader.release.set()
        stale = first.result(timeout=2)

        # The loader finished, but the token was already raised.
        assert stale.cancelled
        assert stale.page is None
        assert [o.operation_id for o in recorder.delivered] == [second.id]

    def test_invalid_input_leaves_current_operation_alone(
        self, session: LinkSession, loader: FakeLoader
    ) -> None:
        op = session.start("slow.example")
        with pytest.raises(InvalidUrlError):
            session.start("   ")

        assert session.current is op
        assert not op.cancelled
        op.cancel()
        assert op.result(timeout=2).cancelled

    def test_close_cancels_in_flight_operation(self, loader: FakeLoader) -> None:
        session = LinkSession(loader=loader)
        op = session.start("slow.example")
        session.close()

        assert op.cancelled
        assert op.result(timeout=2).cancelled

    def test_context_manager_closes(self, loader: FakeLoader) -> None:
        with LinkSession(loader=loader) as session:
            op = session.start("slow.example")
        assert op.cancelled


# ---------------------------------------------------------------------------
# LinkSession over the real pipeline
# ---------------------------------------------------------------------------

class TestLinkSessionOverHttp:
    @pytest.fixture(autouse=True)
    def fresh_client(self):
        close_client()
        yield
        close_client()

    def test_superseding_a_slow_page_delivers_the_newer_one(self) -> None:
        release = threading.Event()

        def _slow(request: httpx.Request) -> httpx.Response:
            release.wait(5)
            return httpx.Response(200, text="<a href='/stale'>stale</a>")

        recorder = Recorder()
        with respx.mock, LinkSession() as session:
            respx.get("https://slow.example/").mock(side_effect=_slow)
            respx.get("https://fast.example/").mock(
                return_value=httpx.Response(200, text="<a href='/fresh'>fresh</a>")
            )
            try:
                first = session.start("slow.example", on_result=recorder)
                second = session.start("fast.example", on_result=recorder)
                second_outcome = second.result(timeout=5)
                first_outcome = first.result(timeout=5)
            finally:
                release.set()

        assert first_outcome.cancelled
        assert second_outcome.ok
        assert second_outcome.page is not None
        assert second_outcome.page.links == ["https://fast.example/fresh"]
        assert recorder.delivered == [second_outcome]

    def test_result_before_start_raises(self) -> None:
        op = Operation(1, TargetUrl(url="https://example.com/", scheme="https", host="example.com"))
        with pytest.raises(RuntimeError):
            op.result(timeout=0)

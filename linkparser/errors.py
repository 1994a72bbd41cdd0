"""Exception hierarchy shared by the fetch/extract pipeline.

Every failure the core can report is a :class:`LinkParserError`.  Fetch
failures carry a short ``kind`` string so presentation layers can branch on
it without importing each subclass::

    network | timeout | cancelled | http_status
"""

from __future__ import annotations


class LinkParserError(Exception):
    """Base class for all errors raised by :mod:`linkparser`."""


class InvalidUrlError(LinkParserError, ValueError):
    """User input does not yield an absolute http/https URL."""

    def __init__(self, raw: str, reason: str = "not a valid absolute URL") -> None:
        self.raw = raw
        self.reason = reason
        super().__init__(f"Invalid URL {raw!r}: {reason}")


class FetchError(LinkParserError):
    """A single fetch attempt failed."""

    kind = "fetch"

    def __init__(self, url: str, message: str = "") -> None:
        self.url = url
        super().__init__(message or f"Fetching {url} failed")


class FetchNetworkError(FetchError):
    kind = "network"

    def __init__(self, url: str, detail: str = "") -> None:
        message = f"Network error while fetching {url}"
        if detail:
            message += f": {detail}"
        super().__init__(url, message)


class FetchTimeout(FetchError):
    kind = "timeout"

    def __init__(self, url: str, timeout: float | None = None) -> None:
        self.timeout = timeout
        message = f"Timed out fetching {url}"
        if timeout is not None:
            message += f" after {timeout:g}s"
        super().__init__(url, message)


class FetchCancelled(FetchError):
    """The caller cancelled the fetch, or a newer operation superseded it."""

    kind = "cancelled"

    def __init__(self, url: str) -> None:
        super().__init__(url, f"Fetch of {url} was cancelled")


class FetchHttpStatus(FetchError):
    kind = "http_status"

    def __init__(self, url: str, status_code: int, reason: str = "") -> None:
        self.status_code = status_code
        self.reason = reason
        message = f"HTTP {status_code}"
        if reason:
            message += f" {reason}"
        super().__init__(url, f"{message} for {url}")

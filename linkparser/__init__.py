"""Fetch a single HTML page and list the absolute links it contains."""

from linkparser.errors import (
    FetchCancelled,
    FetchError,
    FetchHttpStatus,
    FetchNetworkError,
    FetchTimeout,
    InvalidUrlError,
    LinkParserError,
)
from linkparser.logging_setup import ensure_configured
from linkparser.scraper import (
    LinkSet,
    PageLinks,
    TargetUrl,
    extract,
    fetch,
    fetch_page,
    normalize_input,
)
from linkparser.session import CancelToken, LinkSession, Operation, OperationOutcome, load_links

ensure_configured()

__version__ = "1.0.0"

__all__ = [
    "normalize_input",
    "fetch",
    "fetch_page",
    "extract",
    "load_links",
    "CancelToken",
    "LinkSession",
    "Operation",
    "OperationOutcome",
    "TargetUrl",
    "LinkSet",
    "PageLinks",
    "LinkParserError",
    "InvalidUrlError",
    "FetchError",
    "FetchNetworkError",
    "FetchTimeout",
    "FetchCancelled",
    "FetchHttpStatus",
]

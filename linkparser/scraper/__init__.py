"""Scraper package — URL normalisation, fetch & link extraction."""

from linkparser.scraper.extractor import extract
from linkparser.scraper.fetcher import close_client, fetch, fetch_page
from linkparser.scraper.models import LinkSet, PageLinks, RawPage, TargetUrl
from linkparser.scraper.urls import normalize_input

__all__ = [
    "normalize_input",
    "fetch",
    "fetch_page",
    "close_client",
    "extract",
    "TargetUrl",
    "LinkSet",
    "RawPage",
    "PageLinks",
]

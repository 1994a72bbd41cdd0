"""Utilities for rendering pipeline results in the CLI."""

from __future__ import annotations

import json
from typing import Iterable, List

from linkparser.errors import FetchError, FetchHttpStatus
from linkparser.scraper.models import PageLinks


def render_links(links: Iterable[str], numbered: bool = False) -> str:
    """Render links one per line, optionally prefixed with a 1-based index."""
    items: List[str] = list(links)
    if not numbered:
        return "\n".join(items)
    width = len(str(len(items)))
    return "\n".join(f"{i:>{width}}. {link}" for i, link in enumerate(items, start=1))


def render_status(page: PageLinks) -> str:
    return f"Done: {len(page.links)} links found."


def render_json(page: PageLinks, include_html: bool = False) -> str:
    payload = {
        "url": page.url,
        "final_url": page.final_url,
        "status_code": page.status_code,
        "links": page.links.to_list(),
    }
    if include_html:
        payload["html"] = page.html
    return json.dumps(payload, indent=2, ensure_ascii=False)


def render_error(exc: FetchError) -> str:
    """One-line, user-facing description of a fetch failure."""
    if isinstance(exc, FetchHttpStatus):
        reason = f" {exc.reason}" if exc.reason else ""
        return f"HTTP error: server answered {exc.status_code}{reason}."
    if exc.kind == "timeout":
        return f"Timed out loading {exc.url}."
    if exc.kind == "network":
        return f"Network error: {exc}"
    return f"Error: {exc}"

"""Link endpoints — fetch a page and list its links, or scan posted HTML.

Routes
------
GET  /links?url=<raw>&include_html=false    → normalize, fetch, extract
POST /extract   Body: {"html": "...", "base": "https://..."}    → extract only
"""

from __future__ import annotations

from typing import Any, List, Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from linkparser.errors import (
    FetchError,
    FetchHttpStatus,
    FetchTimeout,
    InvalidUrlError,
)
from linkparser.scraper.extractor import extract
from linkparser.scraper.urls import normalize_input
from linkparser.session import load_links

router = APIRouter()


# ---------------------------------------------------------------------------
# Schemas
# ---------------------------------------------------------------------------

class LinksResponse(BaseModel):
    url: str
    final_url: str
    status_code: int
    count: int
    links: List[str]
    html: Optional[str] = None


class ExtractRequest(BaseModel):
    html: str
    base: str


class ExtractResponse(BaseModel):
    base: str
    count: int
    links: List[str]


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _error_detail(exc: FetchError) -> dict[str, Any]:
    detail: dict[str, Any] = {"kind": exc.kind, "url": exc.url, "message": str(exc)}
    if isinstance(exc, FetchHttpStatus):
        detail["upstream_status"] = exc.status_code
    return detail


def _status_for(exc: FetchError) -> int:
    if isinstance(exc, FetchTimeout):
        return 504
    return 502


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@router.get("/links", response_model=LinksResponse, response_model_exclude_none=True)
def get_links(url: str, include_html: bool = False) -> dict[str, Any]:
    """Fetch *url* and return the absolute links found in the document.

    Args:
        url: Raw user input; ``https://`` is assumed when no scheme is given.
        include_html: Also return the document text.
    """
    try:
        page = load_links(url)
    except InvalidUrlError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    except FetchError as exc:
        raise HTTPException(status_code=_status_for(exc), detail=_error_detail(exc)) from exc

    body: dict[str, Any] = {
        "url": page.url,
        "final_url": page.final_url,
        "status_code": page.status_code,
        "count": len(page.links),
        "links": page.links.to_list(),
    }
    if include_html:
        body["html"] = page.html
    return body


@router.post("/extract", response_model=ExtractResponse)
def post_extract(body: ExtractRequest) -> dict[str, Any]:
    """Extract links from posted HTML without touching the network."""
    try:
        base = normalize_input(body.base)
    except InvalidUrlError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc

    links = extract(body.html, base)
    return {"base": base.url, "count": len(links), "links": links.to_list()}

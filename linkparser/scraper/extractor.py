"""Link extraction: turns fetched HTML into a :class:`LinkSet`.

The scan is a single regular-expression pass over the raw markup.  No DOM is
built, so broken or partial documents are handled the same way as
well-formed ones: anchors that can be read are kept, everything else is
silently dropped.
"""

from __future__ import annotations

import html as html_lib
import re
from typing import Iterator

import structlog

from linkparser.scraper.models import LinkSet, TargetUrl
from linkparser.scraper.urls import resolve

logger = structlog.get_logger(__name__)

# Quoted values use group 2 (group 1 holds the quote so the closing one must
# match); unquoted values use group 3.
_ANCHOR_HREF = re.compile(
    r"""<a\b[^>]*\bhref\s*=\s*(?:(['"])(.*?)\1|([^\s>"']+))""",
    re.IGNORECASE,
)

_SKIPPED_PREFIXES = ("#", "javascript:", "mailto:", "tel:", "data:")


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _iter_hrefs(html: str) -> Iterator[str]:
    """Yield the literal ``href`` value of every ``<a>`` tag in *html*."""
    for match in _ANCHOR_HREF.finditer(html):
        if match.group(2) is not None:
            yield match.group(2)
        else:
            yield match.group(3)


def _clean_reference(raw: str) -> str:
    """Entity-decode and trim a captured ``href`` value."""
    return html_lib.unescape(raw).strip()


def _is_skipped(reference: str) -> bool:
    """Return ``True`` for fragment-only and non-navigable references."""
    return reference.lower().startswith(_SKIPPED_PREFIXES)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def extract(html: str, base: TargetUrl | str) -> LinkSet:
    """Return every navigable absolute link found in *html*.

    Relative references are resolved against *base*.  The result keeps the
    order in which links first appear and holds each URL once, compared
    case-insensitively.  Only ``http`` and ``https`` URLs are returned.

    This function never raises for malformed markup or hrefs.
    """
    base_url = str(base)
    links = LinkSet()

    for raw in _iter_hrefs(html or ""):
        reference = _clean_reference(raw)
        if not reference or _is_skipped(reference):
            continue

        resolved = resolve(base_url, reference)
        if resolved is None:
            logger.debug("href_skipped", href=reference, base=base_url)
            continue

        links.add(resolved)

    return links

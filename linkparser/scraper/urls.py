"""URL normalisation and resolution helpers."""

from __future__ import annotations

import re
from typing import Optional
from urllib.parse import quote, urljoin, urlsplit, urlunsplit

from linkparser.errors import InvalidUrlError
from linkparser.scraper.models import TargetUrl

ALLOWED_SCHEMES = ("http", "https")
DEFAULT_SCHEME = "https"

_DEFAULT_PORTS = {"http": 80, "https": 443}
_SCHEME_PREFIX = re.compile(r"^https?://", re.IGNORECASE)
_BAD_HOST_CHARS = re.compile(r"[\s<>\"{}|\\^`%/?#@]")

# RFC 3986 reserved characters plus "%" so existing escapes survive re-quoting.
_PATH_SAFE = "/%:@!$&'()*+,;="
_QUERY_SAFE = _PATH_SAFE + "?"
_USERINFO_SAFE = "%:!$&'()*+,;="


def _encode_host(host: str) -> Optional[str]:
    if host.isascii():
        return host
    try:
        return host.encode("idna").decode("ascii")
    except UnicodeError:
        return None


def canonicalize(url: str) -> Optional[str]:
    """Return the canonical string form of absolute *url*, or ``None``.

    Scheme and host are lower-cased, a default port is dropped and an empty
    path becomes ``/``.  Non-ASCII host labels are IDNA-encoded; spaces and
    non-ASCII characters elsewhere are percent-encoded as UTF-8, while
    reserved characters and existing ``%XX`` escapes are kept.  ``None``
    means *url* is not an absolute http/https URL with a usable host.
    """
    try:
        parts = urlsplit(url)
        port = parts.port
    except ValueError:
        return None

    scheme = parts.scheme.lower()
    if scheme not in ALLOWED_SCHEMES:
        return None

    host = parts.hostname or ""
    if not host or _BAD_HOST_CHARS.search(host):
        return None
    host = _encode_host(host)
    if host is None:
        return None
    if ":" in host:
        host = f"[{host}]"

    userinfo, at, _ = parts.netloc.rpartition("@")
    netloc = f"{quote(userinfo, safe=_USERINFO_SAFE)}{at}{host}"
    if port is not None and port != _DEFAULT_PORTS[scheme]:
        netloc = f"{netloc}:{port}"

    return urlunsplit((
        scheme,
        netloc,
        quote(parts.path, safe=_PATH_SAFE) or "/",
        quote(parts.query, safe=_QUERY_SAFE),
        quote(parts.fragment, safe=_QUERY_SAFE),
    ))


def normalize_input(raw: str) -> TargetUrl:
    """Turn a user-typed string into a :class:`TargetUrl`.

    Surrounding whitespace is trimmed and ``https://`` is prepended when the
    input carries neither an ``http://`` nor an ``https://`` prefix.

    Raises:
        InvalidUrlError: If the input is empty or does not parse as an
            absolute http/https URL.
    """
    text = (raw or "").strip()
    if not text:
        raise InvalidUrlError(raw or "", "empty input")

    if not _SCHEME_PREFIX.match(text):
        text = f"{DEFAULT_SCHEME}://{text}"

    url = canonicalize(text)
    if url is None:
        raise InvalidUrlError(raw)

    parts = urlsplit(url)
    return TargetUrl(url=url, scheme=parts.scheme, host=parts.hostname or "")


def resolve(base: str, reference: str) -> Optional[str]:
    """Resolve *reference* against *base* and canonicalise the result.

    Returns ``None`` when the reference cannot be resolved or does not land on
    an http/https URL.
    """
    try:
        joined = urljoin(base, reference)
    except ValueError:
        return None
    return canonicalize(joined)

"""Data models for the fetch/extract pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Iterator, List


@dataclass(frozen=True)
class TargetUrl:
    """A validated absolute http/https URL, ready to be fetched."""

    url: str
    scheme: str
    host: str

    def __str__(self) -> str:
        return self.url


class LinkSet:
    """Insertion-ordered set of URLs, unique under case-insensitive comparison.

    The first spelling of a URL wins; later spellings that differ only in
    letter case are dropped.
    """

    def __init__(self, links: Iterable[str] = ()) -> None:
        self._keys: set[str] = set()
        self._links: List[str] = []
        for link in links:
            self.add(link)

    def add(self, link: str) -> bool:
        """Insert *link*; return ``False`` if an equivalent link was already present."""
        key = link.casefold()
        if key in self._keys:
            return False
        self._keys.add(key)
        self._links.append(link)
        return True

    def __contains__(self, link: object) -> bool:
        return isinstance(link, str) and link.casefold() in self._keys

    def __iter__(self) -> Iterator[str]:
        return iter(self._links)

    def __len__(self) -> int:
        return len(self._links)

    def __getitem__(self, index: int) -> str:
        return self._links[index]

    def __eq__(self, other: object) -> bool:
        if isinstance(other, LinkSet):
            return self._links == other._links
        if isinstance(other, (list, tuple)):
            return self._links == list(other)
        return NotImplemented

    def __repr__(self) -> str:
        return f"LinkSet({self._links!r})"

    def to_list(self) -> List[str]:
        return list(self._links)


@dataclass
class RawPage:
    """The raw HTTP response for a single URL fetch."""

    url: str
    html: str
    status_code: int
    final_url: str = ""

    def __post_init__(self) -> None:
        if not self.final_url:
            self.final_url = self.url


@dataclass
class PageLinks:
    """A fetched document together with the links extracted from it."""

    url: str
    final_url: str
    status_code: int
    html: str
    links: LinkSet = field(default_factory=LinkSet)

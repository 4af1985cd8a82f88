"""Pagination helpers for offset-based incident searches.

Provides a generic ``Page`` container and a ``PageOptions`` value object
that enforces sensible offset / limit defaults and upper bounds.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Generic, List, TypeVar

T = TypeVar("T")

DEFAULT_PAGE_SIZE: int = 100
MAX_PAGE_SIZE: int = 1000


def normalize_page_size(limit: int | None) -> int:
    """Clamp *limit* to ``(0, MAX_PAGE_SIZE]``, using the default when unset."""
    if limit is None or limit <= 0:
        return DEFAULT_PAGE_SIZE
    return min(limit, MAX_PAGE_SIZE)


@dataclass(frozen=True)
class PageOptions:
    """Immutable page request parameters.

    ``offset`` is 0-based.  ``limit`` falls back to ``DEFAULT_PAGE_SIZE`` when
    non-positive and is capped at ``MAX_PAGE_SIZE``.
    """

    offset: int = 0
    limit: int = DEFAULT_PAGE_SIZE

    def __post_init__(self) -> None:
        # frozen=True requires object.__setattr__ for validation fixups
        object.__setattr__(self, "offset", max(0, self.offset))
        object.__setattr__(self, "limit", normalize_page_size(self.limit))

    def to_wire(self) -> dict[str, int]:
        return {"fromIndex": self.offset, "size": self.limit}


@dataclass
class Page(Generic[T]):
    """One slice of a larger result set."""

    items: List[T] = field(default_factory=list)
    total: int = 0
    offset: int = 0
    page_size: int = 0

    @property
    def has_more(self) -> bool:
        return self.offset + len(self.items) < self.total

    @property
    def next_offset(self) -> int:
        # Advance by what was actually returned so short pages are tolerated.
        return self.offset + len(self.items)

    @classmethod
    def from_wire(
        cls,
        payload: dict[str, Any],
        item_factory: Callable[[dict[str, Any]], T],
        offset: int = 0,
    ) -> "Page[T]":
        # A missing or null offset means the page starts where it was requested.
        start = payload.get("fromIndex")
        return cls(
            items=[item_factory(raw) for raw in payload.get("data") or []],
            total=int(payload.get("total") or 0),
            offset=int(start) if start is not None else offset,
            page_size=int(payload.get("size") or 0),
        )

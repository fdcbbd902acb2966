"""Page request normalization and fetched-page metadata.

Page and size coming from clients are never rejected: out of range values are
clamped to the nearest accepted one. Every paginated lookup is sorted by
constitution date, most recent first; callers cannot change that order.
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Generic, TypeVar

T = TypeVar("T")

DEFAULT_PAGE = 0
DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100


@dataclass(frozen=True)
class SortOrder:
    field: str
    direction: str

    @property
    def descending(self) -> bool:
        return self.direction == "desc"


DEFAULT_SORT = SortOrder("data_constituicao", "desc")


@dataclass(frozen=True)
class PageRequest:
    page: int = DEFAULT_PAGE
    size: int = DEFAULT_PAGE_SIZE
    sort: SortOrder = DEFAULT_SORT

    @property
    def offset(self) -> int:
        return self.page * self.size


def normalize_page(page: int) -> int:
    return max(page, DEFAULT_PAGE)


def normalize_size(size: int) -> int:
    if size <= 0:
        return DEFAULT_PAGE_SIZE
    return min(size, MAX_PAGE_SIZE)


def normalize_page_request(page: int, size: int) -> PageRequest:
    return PageRequest(page=normalize_page(page), size=normalize_size(size), sort=DEFAULT_SORT)


@dataclass(frozen=True)
class Page(Generic[T]):
    """One slice of a filtered result set plus the totals of the whole set."""

    content: Sequence[T] = field(default_factory=tuple)
    page: int = DEFAULT_PAGE
    size: int = DEFAULT_PAGE_SIZE
    total_elements: int = 0

    @property
    def total_pages(self) -> int:
        if self.total_elements <= 0:
            return 0
        return math.ceil(self.total_elements / self.size)

    @property
    def number_of_elements(self) -> int:
        return len(self.content)

    @property
    def is_empty(self) -> bool:
        return not self.content

    @property
    def has_next(self) -> bool:
        return self.page + 1 < self.total_pages

    @property
    def has_previous(self) -> bool:
        if self.total_elements <= 0:
            return False
        return self.page > 0

    @property
    def first(self) -> bool:
        return not self.has_previous

    @property
    def last(self) -> bool:
        return not self.has_next

"""Page slicing and navigation arithmetic."""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass, replace
from typing import Generic, TypeVar

T = TypeVar("T")

PAGE_SIZE_OPTIONS: tuple[int, ...] = (10, 25, 50, 100)


def total_pages_for(total_items: int, page_size: int) -> int:
    return max(1, math.ceil(total_items / page_size))


@dataclass(frozen=True)
class PageState:
    page: int = 1
    page_size: int = 10

    def __post_init__(self) -> None:
        if self.page_size not in PAGE_SIZE_OPTIONS:
            raise ValueError(
                f"page_size must be one of {PAGE_SIZE_OPTIONS}, got {self.page_size}"
            )
        if self.page < 1:
            object.__setattr__(self, "page", 1)

    def clamped(self, total_items: int) -> PageState:
        """Same state with ``page`` pulled into ``[1, total_pages]``."""
        last = total_pages_for(total_items, self.page_size)
        page = min(max(1, self.page), last)
        return self if page == self.page else replace(self, page=page)

    def with_page(self, page: int) -> PageState:
        return replace(self, page=max(1, page))

    def with_page_size(self, page_size: int) -> PageState:
        return replace(self, page_size=page_size)


@dataclass(frozen=True)
class PageSlice(Generic[T]):
    items: tuple[T, ...]
    page: int
    page_size: int
    total_items: int
    total_pages: int
    start_index: int
    end_index: int

    @property
    def has_previous(self) -> bool:
        return self.page > 1

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages

    @property
    def display_range(self) -> tuple[int, int]:
        """1-based ``(first, last)`` row numbers for "Showing X to Y"."""
        if not self.total_items:
            return 0, 0
        return self.start_index + 1, self.end_index


class Paginator:
    """Slices an ordered result into pages.

    Out-of-range pages are clamped, not rejected: a page-change event can
    race a data change that shrinks the result under it.
    """

    @staticmethod
    def slice(ordered: Sequence[T], state: PageState) -> PageSlice[T]:
        total_items = len(ordered)
        state = state.clamped(total_items)
        start = (state.page - 1) * state.page_size
        end = min(start + state.page_size, total_items)
        return PageSlice(
            items=tuple(ordered[start:end]),
            page=state.page,
            page_size=state.page_size,
            total_items=total_items,
            total_pages=total_pages_for(total_items, state.page_size),
            start_index=start,
            end_index=end,
        )

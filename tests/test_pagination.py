"""Tests for page arithmetic and slicing."""

import pytest

from shopscope.view.pagination import (
    PAGE_SIZE_OPTIONS,
    PageState,
    Paginator,
    total_pages_for,
)

ITEMS = list(range(97))


class TestPaginator:
    def test_last_partial_page(self):
        page = Paginator.slice(ITEMS, PageState(4, 25))
        assert page.total_pages == 4
        assert len(page.items) == 22
        assert page.start_index == 75
        assert page.end_index == 97
        assert page.items[0] == 75
        assert page.display_range == (76, 97)

    def test_first_page(self):
        page = Paginator.slice(ITEMS, PageState(1, 25))
        assert page.items == tuple(range(25))
        assert not page.has_previous
        assert page.has_next

    def test_page_past_end_is_clamped(self):
        page = Paginator.slice(ITEMS, PageState(9, 25))
        assert page.page == 4
        assert len(page.items) == 22
        assert not page.has_next

    def test_empty_input(self):
        page = Paginator.slice([], PageState(3, 10))
        assert page.page == 1
        assert page.total_pages == 1
        assert page.items == ()
        assert page.display_range == (0, 0)

    def test_exact_multiple(self):
        page = Paginator.slice(list(range(50)), PageState(2, 25))
        assert page.total_pages == 2
        assert len(page.items) == 25


class TestPageState:
    def test_rejects_unknown_page_size(self):
        with pytest.raises(ValueError):
            PageState(1, 20)

    def test_page_below_one_is_raised_to_one(self):
        assert PageState(0, 10).page == 1
        assert PageState(1, 10).with_page(-3).page == 1

    def test_clamped(self):
        assert PageState(5, 10).clamped(23).page == 3
        state = PageState(2, 10)
        assert state.clamped(23) is state

    def test_options(self):
        assert PAGE_SIZE_OPTIONS == (10, 25, 50, 100)

    def test_total_pages_for(self):
        assert total_pages_for(0, 10) == 1
        assert total_pages_for(97, 25) == 4
        assert total_pages_for(100, 100) == 1

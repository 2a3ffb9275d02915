"""View-model for one list screen.

:class:`ListController` owns the source snapshot and every piece of
derived-view state (query, filters, sort, page, selection) for a single
screen, and turns them into a :class:`ViewState` for whatever renders
it.  Everything here runs on one thread; the only awaits are the calls
to the record gateway.

Fetches are sequence-tagged.  :meth:`ListController.begin_fetch` hands
out a new sequence number and :meth:`ListController.apply_fetch` drops
any response whose number is no longer the latest, so the last *issued*
fetch wins rather than the last one to arrive.  Callers that run the
network call elsewhere (a worker thread) use that pair directly;
everyone else awaits :meth:`ListController.refresh`.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Any

from ..api.client import ApiError
from ..models import FetchResponse, MutationResponse
from .bulk import BulkAction, BulkOperation, BulkOperationRunner, BulkResult, RecordGateway
from .debounce import Debouncer
from .fields import Record, record_id
from .filters import FilterSet
from .pagination import PageSlice, PageState, Paginator
from .pipeline import OrderedResult, ViewPipeline
from .search import SearchSpec
from .selection import SelectionTracker
from .sorting import SortDirection, SortSpec

if TYPE_CHECKING:
    from ..screens import ScreenConfig, StatusAction

logger = logging.getLogger(__name__)


class NoticeLevel(str, Enum):
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


@dataclass(frozen=True)
class Notice:
    """Transient, dismissible message for the presentation layer."""
    level: NoticeLevel
    message: str


@dataclass(frozen=True)
class RowView:
    record: Record
    id: str
    selected: bool


@dataclass(frozen=True)
class ViewState:
    rows: tuple[RowView, ...]
    current_page: int
    total_pages: int
    total_items: int
    page_size: int
    start: int
    end: int
    has_previous: bool
    has_next: bool
    selected_count: int
    is_indeterminate: bool
    is_all_selected: bool
    query: str
    sort: SortSpec
    stats: dict[str, int] = field(default_factory=dict)
    notice: Notice | None = None
    loading: bool = False


class ListController:
    def __init__(
        self,
        screen: ScreenConfig,
        gateway: RecordGateway,
        debounce_ms: int = 300,
        fetch_limit: int = 100,
        page_size: int | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.screen = screen
        self.gateway = gateway
        self.fetch_limit = fetch_limit
        self._clock = clock

        self.source: tuple[Record, ...] = ()
        self.search = SearchSpec("", screen.search_fields)
        self.filters = FilterSet.from_values(screen.filter_definitions)
        self.sort: SortSpec = screen.default_sort
        self.page = PageState(1, page_size or screen.default_page_size)
        self.selection = SelectionTracker()
        self.stats: dict[str, int] = screen.zeroed_stats()
        self.notice: Notice | None = None
        self._fetch_notice: Notice | None = None
        self.loading = False

        self.pipeline = ViewPipeline()
        self.runner = BulkOperationRunner(gateway)
        delay_ms = screen.debounce_ms if screen.debounce_ms is not None else debounce_ms
        self._debouncer: Debouncer[str] = Debouncer(self._apply_query, delay_ms / 1000)
        self._fetch_seq = 0
        self._listeners: list[Callable[[ListController], None]] = []

    # -- Change notification -------------------------------------------------

    def subscribe(self, callback: Callable[[ListController], None]) -> None:
        """Call *callback* after any change that arrives asynchronously."""
        self._listeners.append(callback)

    def _notify(self) -> None:
        for callback in list(self._listeners):
            callback(self)

    # -- Fetching ------------------------------------------------------------

    def begin_fetch(self) -> int:
        """Issue a new fetch sequence number and mark the view loading."""
        self._fetch_seq += 1
        self.loading = True
        logger.debug("%s: fetch #%d issued", self.screen.name, self._fetch_seq)
        return self._fetch_seq

    def apply_fetch(self, seq: int, response: FetchResponse) -> bool:
        """Install *response* unless a newer fetch has been issued since.

        Returns ``False`` when the response was discarded as stale.
        """
        if seq != self._fetch_seq:
            logger.info(
                "%s: discarding stale fetch #%d (latest is #%d)",
                self.screen.name, seq, self._fetch_seq,
            )
            return False

        self.loading = False
        if response.success:
            self.source = tuple(response.data)
            self.stats = self.screen.stats(self.source)
            if self.notice is not None and self.notice is self._fetch_notice:
                self.notice = None
            self._fetch_notice = None
            logger.info("%s: loaded %d records", self.screen.name, len(self.source))
        else:
            message = response.error or "Request failed"
            logger.warning("%s: fetch failed: %s", self.screen.name, message)
            self.source = ()
            self.stats = self.screen.zeroed_stats()
            self.notice = self._fetch_notice = Notice(
                NoticeLevel.ERROR,
                f"Failed to load {self.screen.title.lower()}: {message}",
            )
        self._notify()
        return True

    async def refresh(self) -> bool:
        """Fetch the collection and apply it; ``False`` if it went stale.

        The fetch is unfiltered: search, filters and sort are applied
        client-side to the snapshot, so changing them never refetches.
        """
        seq = self.begin_fetch()
        try:
            response = await self.gateway.fetch(page=1, limit=self.fetch_limit)
        except ApiError as exc:
            response = FetchResponse.failure(exc.message)
        return self.apply_fetch(seq, response)

    load = refresh

    # -- Search --------------------------------------------------------------

    def type_query(self, text: str) -> None:
        """Queue *text*; only the last value of a typing burst is applied."""
        self._debouncer.push(text)

    def submit_query(self, text: str | None = None) -> None:
        """Apply *text* (or whatever is pending) without waiting."""
        if text is None:
            self._debouncer.flush()
        else:
            self._debouncer.flush(text)

    def clear_query(self) -> None:
        self._debouncer.flush("")

    def _apply_query(self, text: str) -> None:
        if text == self.search.query:
            return
        self.search = self.search.with_query(text)
        self.page = self.page.with_page(1)
        self._notify()

    # -- Filters and sort ----------------------------------------------------

    def set_filter(self, key: str, value: Any) -> None:
        """Set the filter control *key* from a loose UI value.

        ``""``/``None`` clears it; ranges take ``{"min":..,"max":..}`` or
        ``{"start":..,"end":..}`` (or a 2-tuple).
        """
        definition = self.screen.filter_definition(key)
        self.filters = self.filters.with_criterion(definition.build(value))
        self.page = self.page.with_page(1)

    def set_filters(self, values: Mapping[str, Any]) -> None:
        for key, value in values.items():
            self.set_filter(key, value)

    def clear_filters(self) -> None:
        self.filters = self.filters.cleared()
        self.page = self.page.with_page(1)

    def sort_by(self, column_key: str) -> SortSpec:
        column = self.screen.column(column_key)
        if column.sortable:
            self.sort = self.sort.toggled(column.field, column.type_hint)
        return self.sort

    def set_sort(self, column_key: str, direction: SortDirection) -> SortSpec:
        column = self.screen.column(column_key)
        self.sort = SortSpec(column.field, direction, column.type_hint)
        return self.sort

    # -- Pagination ----------------------------------------------------------

    def _total_pages(self) -> int:
        return self._slice().total_pages

    def go_to_page(self, page: int) -> None:
        self.page = self.page.with_page(page).clamped(len(self.visible_records()))

    def next_page(self) -> None:
        self.go_to_page(self.page.page + 1)

    def previous_page(self) -> None:
        self.go_to_page(self.page.page - 1)

    def first_page(self) -> None:
        self.go_to_page(1)

    def last_page(self) -> None:
        self.go_to_page(self._total_pages())

    def set_page_size(self, page_size: int) -> None:
        if page_size not in self.screen.page_size_options:
            raise ValueError(
                f"{self.screen.name} page size must be one of {self.screen.page_size_options}"
            )
        self.page = self.page.with_page_size(page_size).clamped(len(self.visible_records()))

    # -- Selection -----------------------------------------------------------

    def toggle_row(self, row_id: str) -> bool:
        return self.selection.toggle(row_id)

    def toggle_all_visible(self, checked: bool | None = None) -> None:
        """Header checkbox: select every filtered row, or clear."""
        visible_ids = [record_id(r) for r in self.visible_records()]
        if checked is None:
            checked = not self.selection.is_all_selected(visible_ids)
        if checked:
            self.selection.select_all(visible_ids)
        else:
            self.selection.clear()

    def clear_selection(self) -> None:
        self.selection.clear()

    def selected_records(self) -> list[Record]:
        """Selected records that are still in the source, in view order."""
        ordered = list(self.visible_records())
        seen = {id(r) for r in ordered}
        ordered.extend(r for r in self.source if id(r) not in seen)
        return [r for r in ordered if self.selection.is_selected(record_id(r))]

    # -- Bulk actions --------------------------------------------------------

    def bulk_ids(self) -> list[str]:
        """Selected ids in view order, then any no longer in the source."""
        return [record_id(r) for r in self.selected_records()] + sorted(
            self.selection.ids - {record_id(r) for r in self.source}
        )

    def apply_bulk_result(self, result: BulkResult) -> None:
        """Post a notice for *result* and clear the selection."""
        noun = self.screen.title.lower()
        if result.all_succeeded:
            self.notice = Notice(
                NoticeLevel.SUCCESS,
                f"{len(result.items)} {noun} updated ({result.summary()})",
            )
        else:
            self.notice = Notice(
                NoticeLevel.ERROR,
                f"Failed to update some {noun} ({result.summary()})",
            )
        self.selection.clear()
        self._notify()

    async def run_bulk(self, operation: BulkOperation, ids: list[str] | None = None) -> BulkResult:
        """Apply *operation* to the selection (or *ids*), then refetch."""
        targets = self.bulk_ids() if ids is None else ids
        if not targets:
            self.notice = Notice(NoticeLevel.WARNING, f"No {self.screen.title.lower()} selected")
            return BulkResult(operation)
        self._check_status(operation)
        result = await self.runner.run(targets, operation)
        self.apply_bulk_result(result)
        await self.refresh()
        return result

    def _check_status(self, operation: BulkOperation) -> None:
        if operation.status and self.screen.status_options and operation.status not in self.screen.status_options:
            raise ValueError(
                f"{operation.status!r} is not a {self.screen.name} status; "
                f"expected one of {', '.join(self.screen.status_options)}"
            )

    # -- Single-record actions -----------------------------------------------

    def find_record(self, row_id: str) -> Record | None:
        for record in self.source:
            if record_id(record) == row_id:
                return record
        return None

    def status_actions(self, row_id: str) -> tuple[StatusAction, ...]:
        record = self.find_record(row_id)
        return () if record is None else self.screen.status_actions(record)

    def _record_notice(self, row_id: str, done: str, verb: str, response: MutationResponse) -> None:
        item = self.screen.item_name
        if response.success:
            self.notice = Notice(NoticeLevel.SUCCESS, f"{item.capitalize()} {done}")
            self.selection.discard(row_id)
        else:
            logger.warning("%s: %s of %s failed: %s", self.screen.name, verb, row_id, response.error)
            self.notice = Notice(
                NoticeLevel.ERROR,
                f"Failed to {verb} {item} {row_id}: {response.error or 'Request failed'}",
            )
        self._notify()

    def apply_record_result(self, row_id: str, operation: BulkOperation, response: MutationResponse) -> None:
        """Post a notice for a single-record *operation* and unselect the row."""
        if operation.action is BulkAction.DELETE:
            self._record_notice(row_id, "deleted", "delete", response)
        else:
            self._record_notice(row_id, f"status updated to {operation.status}", "update", response)

    async def run_record_action(
        self, row_id: str, operation: BulkOperation, refresh: bool = True,
    ) -> MutationResponse:
        """Apply *operation* to one row; refetch when it succeeded."""
        self._check_status(operation)
        try:
            response = await operation.apply(self.gateway, row_id)
        except ApiError as exc:
            response = MutationResponse(success=False, error=exc.message)
        self.apply_record_result(row_id, operation, response)
        if response.success and refresh:
            await self.refresh()
        return response

    async def delete_record(self, row_id: str, refresh: bool = True) -> MutationResponse:
        return await self.run_record_action(row_id, BulkOperation.delete(), refresh)

    async def set_record_status(self, row_id: str, status: str, refresh: bool = True) -> MutationResponse:
        return await self.run_record_action(row_id, BulkOperation.set_status(status), refresh)

    async def update_record(
        self, row_id: str, fields: Mapping[str, Any], refresh: bool = True,
    ) -> MutationResponse:
        try:
            response = await self.gateway.update(row_id, fields)
        except ApiError as exc:
            response = MutationResponse(success=False, error=exc.message)
        self._record_notice(row_id, "updated", "update", response)
        if response.success and refresh:
            await self.refresh()
        return response

    # -- Notices -------------------------------------------------------------

    def dismiss_notice(self) -> None:
        self.notice = None

    # -- Derived view --------------------------------------------------------

    def visible_records(self) -> OrderedResult:
        """The searched, filtered and sorted records (every page)."""
        now = self._clock() if self._clock else None
        ordered = self.pipeline.recompute(self.source, self.search, self.filters, self.sort, now)
        return ordered

    def _slice(self) -> PageSlice[Record]:
        return Paginator.slice(self.visible_records(), self.page)

    def state(self) -> ViewState:
        ordered = self.visible_records()
        page_slice = Paginator.slice(ordered, self.page)
        self.page = PageState(page_slice.page, page_slice.page_size)
        self.selection.set_visible(record_id(r) for r in ordered)

        rows = tuple(
            RowView(record, rid, self.selection.is_selected(rid))
            for record, rid in ((r, record_id(r)) for r in page_slice.items)
        )
        start, end = page_slice.display_range
        return ViewState(
            rows=rows,
            current_page=page_slice.page,
            total_pages=page_slice.total_pages,
            total_items=page_slice.total_items,
            page_size=page_slice.page_size,
            start=start,
            end=end,
            has_previous=page_slice.has_previous,
            has_next=page_slice.has_next,
            selected_count=self.selection.selected_count,
            is_indeterminate=self.selection.is_indeterminate(),
            is_all_selected=self.selection.is_all_selected(),
            query=self.search.query,
            sort=self.sort,
            stats=dict(self.stats),
            notice=self.notice,
            loading=self.loading,
        )

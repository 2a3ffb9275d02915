"""List tab -- one back-office screen (products, orders or users).

Top:    stat cards and the SearchBar with the screen's filter controls.
Middle: BulkActionsBar (while rows are selected) and the QTableView.
Bottom: notice banner and PaginationBar.

All view state lives in a :class:`ListController`; this widget forwards
user input to it and re-renders from ``controller.state()``.  Network
calls run on the thread pool through FetchWorker, BulkWorker and
RecordWorker; their results are handed back to the controller on the
GUI thread.
"""

from __future__ import annotations

import logging

from PySide6.QtCore import QPoint, Qt, QThreadPool, Signal, Slot
from PySide6.QtGui import QFont
from PySide6.QtWidgets import (
    QAbstractItemView,
    QCheckBox,
    QHBoxLayout,
    QHeaderView,
    QLabel,
    QMenu,
    QMessageBox,
    QPushButton,
    QTableView,
    QVBoxLayout,
    QWidget,
)

from shopscope.models import FetchResponse, MutationResponse
from shopscope.view.bulk import BulkOperation, BulkResult
from shopscope.view.controller import ListController, NoticeLevel, ViewState
from shopscope.view.sorting import SortDirection

from ..models.records_model import ROLE_ROW_ID, RecordsTableModel
from ..widgets.bulk_actions import BulkActionsBar
from ..widgets.pagination_bar import PaginationBar
from ..widgets.search_bar import SearchBar
from ..widgets.stat_card import StatCard
from ..workers.bulk_worker import BulkWorker, RecordWorker
from ..workers.fetch_worker import FetchWorker

logger = logging.getLogger(__name__)

_NOTICE_COLORS = {
    NoticeLevel.INFO: "#3498db",
    NoticeLevel.SUCCESS: "#27ae60",
    NoticeLevel.WARNING: "#f39c12",
    NoticeLevel.ERROR: "#e74c3c",
}


class ListTab(QWidget):
    """Searchable, filterable, paginated table for one screen."""

    status_message = Signal(str)

    def __init__(
        self,
        controller: ListController,
        debounce_ms: int = 300,
        currency: str = "KSh",
        pool: QThreadPool | None = None,
        parent=None,
    ):
        super().__init__(parent)
        self._controller = controller
        self._screen = controller.screen
        self._pool = pool or QThreadPool.globalInstance()
        self._busy = False

        root = QVBoxLayout(self)
        root.setContentsMargins(8, 8, 8, 8)
        root.setSpacing(8)

        # -- Stat cards ------------------------------------------------------
        cards = QHBoxLayout()
        self._cards: dict[str, StatCard] = {}
        for key in controller.stats:
            card = StatCard(self._screen.stat_labels.get(key, key.title()))
            self._cards[key] = card
            cards.addWidget(card)
        cards.addStretch(1)
        root.addLayout(cards)

        # -- Search + filters ------------------------------------------------
        delay = self._screen.debounce_ms if self._screen.debounce_ms is not None else debounce_ms
        self._search_bar = SearchBar(self._screen, delay)
        root.addWidget(self._search_bar)

        # -- Bulk actions ----------------------------------------------------
        header_row = QHBoxLayout()
        self._select_all = QCheckBox("Select all")
        self._select_all.setTristate(True)
        header_row.addWidget(self._select_all)
        self._bulk_bar = BulkActionsBar(self._screen.status_options)
        header_row.addWidget(self._bulk_bar, 1)
        root.addLayout(header_row)

        # -- Table -----------------------------------------------------------
        self._model = RecordsTableModel(self._screen, currency, self)
        self._table = QTableView()
        self._table.setModel(self._model)
        self._table.setSelectionBehavior(QAbstractItemView.SelectionBehavior.SelectRows)
        self._table.setSelectionMode(QAbstractItemView.SelectionMode.NoSelection)
        self._table.setAlternatingRowColors(True)
        self._table.setShowGrid(False)
        self._table.verticalHeader().setDefaultSectionSize(28)
        self._table.verticalHeader().hide()
        hdr = self._table.horizontalHeader()
        hdr.setStretchLastSection(True)
        hdr.setSectionResizeMode(QHeaderView.ResizeMode.Interactive)
        hdr.setSectionResizeMode(0, QHeaderView.ResizeMode.ResizeToContents)
        hdr.setSectionResizeMode(1, QHeaderView.ResizeMode.Stretch)
        hdr.setSortIndicatorShown(True)
        hdr.setSectionsClickable(True)
        self._table.setContextMenuPolicy(Qt.ContextMenuPolicy.CustomContextMenu)
        root.addWidget(self._table, 1)

        # -- Notice banner ---------------------------------------------------
        self._notice = QWidget()
        notice_row = QHBoxLayout(self._notice)
        notice_row.setContentsMargins(8, 4, 8, 4)
        self._notice_label = QLabel("")
        self._notice_label.setFont(QFont("Segoe UI", 9))
        self._notice_label.setWordWrap(True)
        notice_row.addWidget(self._notice_label, 1)
        dismiss = QPushButton("Dismiss")
        dismiss.clicked.connect(self._dismiss_notice)
        notice_row.addWidget(dismiss)
        self._notice.setVisible(False)
        root.addWidget(self._notice)

        # -- Pagination ------------------------------------------------------
        self._pagination = PaginationBar(self._screen.page_size_options, controller.page.page_size)
        root.addWidget(self._pagination)

        self._connect_signals()
        self._render()

    # =====================================================================
    # Signal wiring
    # =====================================================================

    def _connect_signals(self) -> None:
        c = self._controller
        self._search_bar.text_changed.connect(lambda text: self._act(c.submit_query, text))
        self._search_bar.filter_changed.connect(self._on_filter_changed)
        self._search_bar.filters_cleared.connect(self._on_filters_cleared)

        self._table.horizontalHeader().sectionClicked.connect(self._on_header_clicked)
        self._model.row_toggled.connect(lambda row_id: self._act(c.toggle_row, row_id))
        self._table.customContextMenuRequested.connect(self._on_context_menu)
        self._select_all.clicked.connect(self._on_select_all_clicked)

        self._pagination.page_requested.connect(lambda page: self._act(c.go_to_page, page))
        self._pagination.page_size_changed.connect(lambda size: self._act(c.set_page_size, size))

        self._bulk_bar.status_requested.connect(self._on_status_requested)
        self._bulk_bar.delete_requested.connect(self._on_delete_requested)
        self._bulk_bar.clear_requested.connect(lambda: self._act(c.clear_selection))

    # =====================================================================
    # Public API
    # =====================================================================

    @property
    def controller(self) -> ListController:
        return self._controller

    def refresh(self) -> None:
        """Start a background fetch; an older one still in flight goes stale."""
        seq = self._controller.begin_fetch()
        worker = FetchWorker(self._controller.gateway, seq, self._controller.fetch_limit)
        worker.signals.result.connect(self._on_fetched)
        worker.signals.error.connect(lambda trace, seq=seq: self._on_fetch_error(seq, trace))
        self._pool.start(worker)
        self.status_message.emit(f"Loading {self._screen.title.lower()}...")
        self._render()

    def focus_search(self) -> None:
        self._search_bar.focus_search()

    # =====================================================================
    # Private slots
    # =====================================================================

    def _act(self, method, *args) -> None:
        method(*args)
        self._render()

    @Slot(str, object)
    def _on_filter_changed(self, key: str, value: object) -> None:
        try:
            self._controller.set_filter(key, value)
        except ValueError as exc:
            QMessageBox.warning(self, "Invalid filter", str(exc))
            return
        self._render()

    @Slot()
    def _on_filters_cleared(self) -> None:
        self._controller.clear_filters()
        self._controller.clear_query()
        self._render()

    @Slot(int)
    def _on_header_clicked(self, section: int) -> None:
        key = self._model.column_key(section)
        if key is None:
            return
        self._act(self._controller.sort_by, key)

    @Slot()
    def _on_select_all_clicked(self) -> None:
        self._act(self._controller.toggle_all_visible)

    @Slot(object)
    def _on_fetched(self, result: tuple) -> None:
        seq, response = result
        if self._controller.apply_fetch(seq, response):
            count = len(self._controller.source)
            self.status_message.emit(f"Loaded {count:,} {self._screen.title.lower()}")
            self._render()

    def _on_fetch_error(self, seq: int, trace: str) -> None:
        logger.error("%s fetch #%d crashed: %s", self._screen.name, seq, trace)
        reason = trace.strip().splitlines()[-1][:120]
        if self._controller.apply_fetch(seq, FetchResponse.failure(reason)):
            self._render()

    @Slot(str)
    def _on_worker_error(self, trace: str) -> None:
        logger.error("%s worker error: %s", self._screen.name, trace)
        self._busy = False
        self.status_message.emit(f"Error: {trace.strip().splitlines()[-1][:80]}")
        self._render()

    @Slot(str)
    def _on_status_requested(self, status: str) -> None:
        self._start_bulk(BulkOperation.set_status(status))

    @Slot()
    def _on_delete_requested(self) -> None:
        count = self._controller.selection.selected_count
        answer = QMessageBox.question(
            self,
            f"Delete {self._screen.title.lower()}",
            f"Delete {count} selected {self._screen.title.lower()}? This cannot be undone.",
        )
        if answer == QMessageBox.StandardButton.Yes:
            self._start_bulk(BulkOperation.delete())

    def _start_bulk(self, operation: BulkOperation) -> None:
        if self._busy:
            return
        ids = self._controller.bulk_ids()
        if not ids:
            return
        self._busy = True
        worker = BulkWorker(self._controller.gateway, ids, operation)
        worker.signals.result.connect(self._on_bulk_done)
        worker.signals.error.connect(self._on_worker_error)
        self._pool.start(worker)
        self.status_message.emit(f"Running {operation.label} on {len(ids)} {self._screen.title.lower()}...")

    @Slot(object)
    def _on_bulk_done(self, result: BulkResult) -> None:
        self._busy = False
        self._controller.apply_bulk_result(result)
        self.status_message.emit(result.summary())
        self.refresh()

    @Slot(QPoint)
    def _on_context_menu(self, pos: QPoint) -> None:
        index = self._table.indexAt(pos)
        if not index.isValid():
            return
        row_id = self._model.data(index, ROLE_ROW_ID)
        item = self._screen.item_name

        menu = QMenu(self)
        for action in self._controller.status_actions(row_id):
            menu.addAction(action.label).triggered.connect(
                lambda _=False, s=action.status: self._start_record(row_id, BulkOperation.set_status(s)))
        if self._screen.status_options:
            status_menu = menu.addMenu("Set status")
            for status in self._screen.status_options:
                status_menu.addAction(status.replace("_", " ").title()).triggered.connect(
                    lambda _=False, s=status: self._start_record(row_id, BulkOperation.set_status(s)))
        menu.addSeparator()
        menu.addAction(f"Delete {item}").triggered.connect(lambda: self._confirm_delete(row_id))
        menu.exec(self._table.viewport().mapToGlobal(pos))

    def _confirm_delete(self, row_id: str) -> None:
        item = self._screen.item_name
        answer = QMessageBox.question(
            self, f"Delete {item}", f"Delete this {item}? This cannot be undone.")
        if answer == QMessageBox.StandardButton.Yes:
            self._start_record(row_id, BulkOperation.delete())

    def _start_record(self, row_id: str, operation: BulkOperation) -> None:
        worker = RecordWorker(self._controller.gateway, row_id, operation)
        worker.signals.result.connect(self._on_record_done)
        worker.signals.error.connect(self._on_worker_error)
        self._pool.start(worker)
        self.status_message.emit(f"Running {operation.label} on {self._screen.item_name} {row_id}...")

    @Slot(object)
    def _on_record_done(self, result: tuple[str, BulkOperation, MutationResponse]) -> None:
        row_id, operation, response = result
        self._controller.apply_record_result(row_id, operation, response)
        self.status_message.emit(self._controller.notice.message if self._controller.notice else "")
        if response.success:
            self.refresh()
        else:
            self._render()

    @Slot()
    def _dismiss_notice(self) -> None:
        self._act(self._controller.dismiss_notice)

    # =====================================================================
    # Rendering
    # =====================================================================

    def _render(self) -> None:
        state = self._controller.state()
        self._model.set_state(state)
        self._pagination.set_state(state)
        self._bulk_bar.set_count(state.selected_count)
        self._render_select_all(state)
        self._render_sort(state)
        self._render_notice(state)
        for key, card in self._cards.items():
            card.set_value(state.stats.get(key, 0))

    def _render_select_all(self, state: ViewState) -> None:
        self._select_all.blockSignals(True)
        if state.is_all_selected:
            self._select_all.setCheckState(Qt.CheckState.Checked)
        elif state.is_indeterminate:
            self._select_all.setCheckState(Qt.CheckState.PartiallyChecked)
        else:
            self._select_all.setCheckState(Qt.CheckState.Unchecked)
        self._select_all.setEnabled(state.total_items > 0)
        self._select_all.blockSignals(False)

    def _render_sort(self, state: ViewState) -> None:
        section = self._model.section_for(state.sort.key.name)
        order = (
            Qt.SortOrder.AscendingOrder
            if state.sort.direction is SortDirection.ASCENDING
            else Qt.SortOrder.DescendingOrder
        )
        hdr = self._table.horizontalHeader()
        hdr.blockSignals(True)
        hdr.setSortIndicator(section, order)
        hdr.blockSignals(False)

    def _render_notice(self, state: ViewState) -> None:
        if state.notice is None:
            self._notice.setVisible(False)
            return
        color = _NOTICE_COLORS[state.notice.level]
        self._notice.setStyleSheet(f"background: {color}22; border: 1px solid {color}; border-radius: 4px;")
        self._notice_label.setText(state.notice.message)
        self._notice.setVisible(True)

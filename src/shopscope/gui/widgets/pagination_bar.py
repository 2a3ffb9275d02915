from PySide6.QtCore import Signal
from PySide6.QtWidgets import QComboBox, QHBoxLayout, QLabel, QPushButton, QWidget

from shopscope.view.controller import ViewState


class PaginationBar(QWidget):
    """First / previous / next / last navigation with a page-size picker."""

    page_requested = Signal(int)
    page_size_changed = Signal(int)

    def __init__(self, page_size_options: tuple[int, ...], page_size: int, parent=None):
        super().__init__(parent)
        self._page = 1
        self._total_pages = 1
        layout = QHBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)

        self._showing = QLabel("No results")
        self._showing.setStyleSheet("color: #a0a0b0;")
        layout.addWidget(self._showing)
        layout.addStretch(1)

        layout.addWidget(QLabel("Rows per page:"))
        self._size = QComboBox()
        for option in page_size_options:
            self._size.addItem(str(option), option)
        self._size.setCurrentIndex(max(0, self._size.findData(page_size)))
        self._size.currentIndexChanged.connect(
            lambda: self.page_size_changed.emit(self._size.currentData()))
        layout.addWidget(self._size)

        self._first = QPushButton("«")
        self._prev = QPushButton("‹")
        self._label = QLabel("Page 1 of 1")
        self._next = QPushButton("›")
        self._last = QPushButton("»")
        self._first.clicked.connect(lambda: self.page_requested.emit(1))
        self._prev.clicked.connect(lambda: self.page_requested.emit(self._page - 1))
        self._next.clicked.connect(lambda: self.page_requested.emit(self._page + 1))
        self._last.clicked.connect(lambda: self.page_requested.emit(self._total_pages))
        for widget in (self._first, self._prev, self._label, self._next, self._last):
            layout.addWidget(widget)

    def set_state(self, state: ViewState):
        self._page = state.current_page
        self._total_pages = state.total_pages
        if state.total_items:
            self._showing.setText(f"Showing {state.start} to {state.end} of {state.total_items} results")
        else:
            self._showing.setText("No results")
        self._label.setText(f"Page {state.current_page} of {state.total_pages}")
        self._first.setEnabled(state.has_previous)
        self._prev.setEnabled(state.has_previous)
        self._next.setEnabled(state.has_next)
        self._last.setEnabled(state.has_next)

from PySide6.QtCore import QTimer, Signal
from PySide6.QtWidgets import QComboBox, QHBoxLayout, QLabel, QLineEdit, QPushButton, QWidget

from shopscope.screens import ScreenConfig
from shopscope.view.filters import FilterKind


class SearchBar(QWidget):
    """Search box plus one control per filter definition of a screen.

    Typing is debounced with a single-shot QTimer; Enter and Clear skip
    the wait.
    """

    text_changed = Signal(str)
    filter_changed = Signal(str, object)
    filters_cleared = Signal()

    def __init__(self, screen: ScreenConfig, debounce_ms: int = 300, parent=None):
        super().__init__(parent)
        layout = QHBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)

        # Search text with debounce
        self._search = QLineEdit()
        self._search.setPlaceholderText(screen.search_placeholder)
        self._search.setClearButtonEnabled(True)
        self._debounce = QTimer(self)
        self._debounce.setSingleShot(True)
        self._debounce.setInterval(debounce_ms)
        self._debounce.timeout.connect(self._emit_text)
        self._search.textChanged.connect(lambda: self._debounce.start())
        self._search.returnPressed.connect(self._emit_text)
        layout.addWidget(self._search, 2)

        self._combos: dict[str, QComboBox] = {}
        self._ranges: dict[str, tuple[QLineEdit, QLineEdit]] = {}
        for definition in screen.filter_definitions:
            if definition.kind is FilterKind.EQUALITY:
                combo = QComboBox()
                combo.addItem(f"All {definition.label or definition.key}", "")
                for option in definition.options:
                    combo.addItem(option.replace("_", " ").title(), option)
                combo.setMinimumWidth(110)
                combo.currentIndexChanged.connect(
                    lambda _i, key=definition.key, c=combo: self.filter_changed.emit(key, c.currentData()))
                layout.addWidget(combo)
                self._combos[definition.key] = combo
            else:
                placeholder = "YYYY-MM-DD" if definition.kind is FilterKind.DATE_RANGE else ""
                low, high = QLineEdit(), QLineEdit()
                for edit, hint in ((low, "from"), (high, "to")):
                    edit.setPlaceholderText(f"{hint} {placeholder}".strip())
                    edit.setMaximumWidth(100)
                    edit.editingFinished.connect(
                        lambda key=definition.key: self._emit_range(key))
                layout.addWidget(QLabel(f"{definition.label or definition.key}:"))
                layout.addWidget(low)
                layout.addWidget(QLabel("-"))
                layout.addWidget(high)
                self._ranges[definition.key] = (low, high)

        # Clear button
        clear_btn = QPushButton("Clear")
        clear_btn.clicked.connect(self.clear_all)
        layout.addWidget(clear_btn)

    def _emit_text(self):
        self._debounce.stop()
        self.text_changed.emit(self._search.text())

    def _emit_range(self, key: str):
        low, high = self._ranges[key]
        self.filter_changed.emit(key, (low.text().strip() or None, high.text().strip() or None))

    def clear_all(self):
        for widget in [*self._combos.values(), *(e for pair in self._ranges.values() for e in pair)]:
            widget.blockSignals(True)
        for combo in self._combos.values():
            combo.setCurrentIndex(0)
        for low, high in self._ranges.values():
            low.clear()
            high.clear()
        for widget in [*self._combos.values(), *(e for pair in self._ranges.values() for e in pair)]:
            widget.blockSignals(False)
        self._search.blockSignals(True)
        self._search.clear()
        self._search.blockSignals(False)
        self._debounce.stop()
        self.filters_cleared.emit()

    def focus_search(self):
        self._search.setFocus()
        self._search.selectAll()

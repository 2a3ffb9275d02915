from PySide6.QtCore import Signal
from PySide6.QtWidgets import QComboBox, QFrame, QHBoxLayout, QLabel, QPushButton


class BulkActionsBar(QFrame):
    """Shown while rows are selected: status change, delete, clear."""

    status_requested = Signal(str)
    delete_requested = Signal()
    clear_requested = Signal()

    def __init__(self, status_options: tuple[str, ...], parent=None):
        super().__init__(parent)
        self.setObjectName("BulkActionsBar")
        self.setStyleSheet("""
            #BulkActionsBar {
                background: #2d2d3f;
                border: 1px solid #45475a;
                border-radius: 6px;
            }
        """)
        layout = QHBoxLayout(self)
        layout.setContentsMargins(8, 4, 8, 4)

        self._count = QLabel("0 selected")
        layout.addWidget(self._count)
        layout.addStretch(1)

        self._status = QComboBox()
        self._status.addItem("Change status...", "")
        for option in status_options:
            self._status.addItem(option.replace("_", " ").title(), option)
        self._status.activated.connect(self._emit_status)
        self._status.setVisible(bool(status_options))
        layout.addWidget(self._status)

        delete_btn = QPushButton("Delete")
        delete_btn.setStyleSheet("color: #e74c3c;")
        delete_btn.clicked.connect(self.delete_requested.emit)
        layout.addWidget(delete_btn)

        clear_btn = QPushButton("Clear selection")
        clear_btn.clicked.connect(self.clear_requested.emit)
        layout.addWidget(clear_btn)

        self.setVisible(False)

    def _emit_status(self, index: int):
        status = self._status.itemData(index)
        self._status.setCurrentIndex(0)
        if status:
            self.status_requested.emit(status)

    def set_count(self, count: int):
        self._count.setText(f"{count} selected")
        self.setVisible(count > 0)

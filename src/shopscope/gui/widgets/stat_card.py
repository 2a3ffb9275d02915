from PySide6.QtGui import QFont
from PySide6.QtWidgets import QFrame, QLabel, QVBoxLayout


class StatCard(QFrame):
    """Small titled counter shown above a list screen."""

    def __init__(self, title: str, parent=None):
        super().__init__(parent)
        self.setFrameShape(QFrame.Shape.StyledPanel)
        self.setObjectName("StatCard")
        self.setStyleSheet("""
            #StatCard {
                background: #2d2d3f;
                border: 1px solid #45475a;
                border-radius: 8px;
            }
        """)
        self.setMinimumSize(140, 70)
        layout = QVBoxLayout(self)
        layout.setContentsMargins(12, 6, 12, 6)
        layout.setSpacing(2)
        self._title = QLabel(title)
        self._title.setFont(QFont("Segoe UI", 9))
        self._title.setStyleSheet("color: #a0a0b0;")
        self._value = QLabel("0")
        self._value.setFont(QFont("Segoe UI", 20, QFont.Weight.Bold))
        self._value.setStyleSheet("color: #cdd6f4;")
        layout.addWidget(self._title)
        layout.addWidget(self._value)

    def set_value(self, value: int):
        self._value.setText(f"{value:,}")

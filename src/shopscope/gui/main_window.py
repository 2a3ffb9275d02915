"""ShopScope Main Window -- PySide6 desktop application."""

from __future__ import annotations

import sys
from pathlib import Path

from PySide6.QtCore import QThreadPool, QTimer
from PySide6.QtGui import QAction, QFont, QKeySequence, QShortcut
from PySide6.QtWidgets import (
    QApplication,
    QFileDialog,
    QMainWindow,
    QMessageBox,
    QStatusBar,
    QTabWidget,
)

from shopscope.api import AdminApiClient, ResourceGateway
from shopscope.config import get_settings
from shopscope.outputs.table_export import ExportFormat, TableExporter
from shopscope.screens import SCREENS
from shopscope.view.controller import ListController

from .views.list_tab import ListTab
from .workers.base_worker import BaseWorker


class ExportWorker(BaseWorker):
    def __init__(self, exporter: TableExporter, records: list, fmt: ExportFormat, filename: str):
        super().__init__()
        self._exporter = exporter
        self._records = records
        self._fmt = fmt
        self._filename = filename

    def execute(self) -> Path:
        return self._exporter.export(self._records, self._fmt, filename=self._filename)


class ShopScopeMainWindow(QMainWindow):
    """Main application window: one tab per list screen."""

    def __init__(self) -> None:
        super().__init__()
        self.setWindowTitle("ShopScope -- Back-office Admin")
        self.setMinimumSize(1200, 800)
        self.resize(1400, 900)

        self._settings = get_settings()
        self._pool = QThreadPool.globalInstance()
        self._pool.setMaxThreadCount(4)
        self._client = AdminApiClient(
            self._settings.api.base_url,
            token=self._settings.api.token,
            timeout=self._settings.api.timeout,
        )

        self._build_menu_bar()
        self._build_status_bar()
        self._build_tabs()
        self._setup_shortcuts()

        QTimer.singleShot(100, self._refresh_all)

    # ── UI Construction ──

    def _build_menu_bar(self) -> None:
        menu_bar = self.menuBar()

        file_menu = menu_bar.addMenu("&File")

        export_action = QAction("Export Current View...", self)
        export_action.setShortcut(QKeySequence("Ctrl+E"))
        export_action.triggered.connect(lambda: self._export(selected_only=False))
        file_menu.addAction(export_action)

        export_selected_action = QAction("Export Selected Rows...", self)
        export_selected_action.setShortcut(QKeySequence("Ctrl+Shift+E"))
        export_selected_action.triggered.connect(lambda: self._export(selected_only=True))
        file_menu.addAction(export_selected_action)

        file_menu.addSeparator()

        quit_action = QAction("&Quit", self)
        quit_action.setShortcut(QKeySequence("Ctrl+Q"))
        quit_action.triggered.connect(self.close)
        file_menu.addAction(quit_action)

        view_menu = menu_bar.addMenu("&View")

        refresh_action = QAction("Refresh Current Tab", self)
        refresh_action.setShortcut(QKeySequence("F5"))
        refresh_action.triggered.connect(self._refresh_current)
        view_menu.addAction(refresh_action)

        refresh_all_action = QAction("Refresh All", self)
        refresh_all_action.setShortcut(QKeySequence("Shift+F5"))
        refresh_all_action.triggered.connect(self._refresh_all)
        view_menu.addAction(refresh_all_action)

        help_menu = menu_bar.addMenu("&Help")
        about_action = QAction("About ShopScope", self)
        about_action.triggered.connect(self._show_about)
        help_menu.addAction(about_action)

    def _build_tabs(self) -> None:
        self._tabs = QTabWidget()
        self._tabs.setFont(QFont("Segoe UI Variable", 10))
        self.setCentralWidget(self._tabs)

        self._list_tabs: list[ListTab] = []
        for screen in SCREENS.values():
            gateway = ResourceGateway(self._client, screen.resource, status_endpoint=screen.status_endpoint)
            page_size = self._settings.default_page_size
            controller = ListController(
                screen,
                gateway,
                debounce_ms=self._settings.debounce_ms,
                fetch_limit=self._settings.fetch_limit,
                page_size=page_size if page_size in screen.page_size_options else None,
            )
            tab = ListTab(
                controller,
                debounce_ms=self._settings.debounce_ms,
                currency=self._settings.currency,
                pool=self._pool,
            )
            tab.status_message.connect(self._status.showMessage)
            self._tabs.addTab(tab, screen.title)
            self._list_tabs.append(tab)

    def _build_status_bar(self) -> None:
        self._status = QStatusBar()
        self.setStatusBar(self._status)
        self._status.showMessage("Ready")

    def _setup_shortcuts(self) -> None:
        QShortcut(QKeySequence("Ctrl+F"), self, activated=self._focus_search)
        for i in range(len(self._list_tabs)):
            QShortcut(QKeySequence(f"Ctrl+{i + 1}"), self,
                      activated=lambda i=i: self._tabs.setCurrentIndex(i))

    # ── Data Loading ──

    def _current_tab(self) -> ListTab:
        return self._list_tabs[self._tabs.currentIndex()]

    def _refresh_current(self) -> None:
        self._current_tab().refresh()

    def _refresh_all(self) -> None:
        self._status.showMessage("Refreshing data...")
        for tab in self._list_tabs:
            tab.refresh()

    # ── Actions ──

    def _export(self, selected_only: bool) -> None:
        controller = self._current_tab().controller
        records = controller.selected_records() if selected_only else list(controller.visible_records())
        if not records:
            QMessageBox.information(self, "Export", "Nothing to export.")
            return

        exporter = TableExporter(controller.screen, self._settings.exports_dir)
        default = self._settings.exports_dir / exporter.default_filename(ExportFormat.CSV)
        path, _ = QFileDialog.getSaveFileName(
            self, "Export", str(default),
            "CSV Files (*.csv);;JSON Files (*.json);;Excel Workbook (*.xlsx)")
        if not path:
            return

        dest = Path(path)
        try:
            fmt = ExportFormat(dest.suffix.lstrip(".").lower())
        except ValueError:
            fmt = ExportFormat.CSV
            dest = dest.with_suffix(".csv")

        worker = ExportWorker(TableExporter(controller.screen, dest.parent), records, fmt, dest.name)
        worker.signals.result.connect(
            lambda saved: QMessageBox.information(self, "Export", f"Exported {len(records)} rows to:\n{saved}"))
        worker.signals.error.connect(
            lambda e: QMessageBox.warning(self, "Export Error", str(e)[:500]))
        self._pool.start(worker)
        self._status.showMessage(f"Exporting {len(records)} rows...")

    def _focus_search(self) -> None:
        self._current_tab().focus_search()

    def _show_about(self) -> None:
        QMessageBox.about(
            self,
            "About ShopScope",
            "ShopScope -- Back-office Admin\n\n"
            "Products, orders and users of the shop's admin API\n"
            "with search, filters, sorting and bulk actions.\n\n"
            f"API: {self._settings.api.base_url}",
        )


def launch_gui() -> int:
    """Launch the ShopScope GUI application."""
    app = QApplication.instance() or QApplication(sys.argv)
    app.setApplicationName("ShopScope")
    app.setOrganizationName("ShopScope")
    app.setFont(QFont("Segoe UI Variable", 10))

    window = ShopScopeMainWindow()
    window.show()
    return app.exec()

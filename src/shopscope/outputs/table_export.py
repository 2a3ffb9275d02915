"""Write the rows of a list screen to CSV, JSON or a styled .xlsx workbook."""

from __future__ import annotations

import csv
import json
import logging
from collections.abc import Iterable, Sequence
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any

from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter

from ..screens import ScreenConfig
from ..view.fields import FieldAccessor, Record, to_text

logger = logging.getLogger(__name__)

_HEADER_FILL = PatternFill(start_color="4472C4", end_color="4472C4", fill_type="solid")
_HEADER_FONT = Font(bold=True, color="FFFFFF", size=11)
_HEADER_ALIGNMENT = Alignment(horizontal="center", vertical="center", wrap_text=True)
_THIN_BORDER = Border(
    left=Side(style="thin"),
    right=Side(style="thin"),
    top=Side(style="thin"),
    bottom=Side(style="thin"),
)
_MAX_COL_WIDTH = 60


class ExportFormat(str, Enum):
    CSV = "csv"
    JSON = "json"
    XLSX = "xlsx"


def _cell_value(value: Any) -> Any:
    """Flatten *value* into something a CSV or worksheet cell can hold."""
    if value is None:
        return ""
    if isinstance(value, (bool, int, float)):
        return value
    return to_text(value)


class TableExporter:
    """Exports records of one screen with a chosen list of fields.

    *fields* are column keys of the screen or arbitrary field specs
    (``"customer.email"``, ``"price|unitPrice"``); the default is every
    column of the screen.
    """

    def __init__(self, screen: ScreenConfig, output_dir: Path) -> None:
        self.screen = screen
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)

    def _columns(self, fields: Sequence[str] | None) -> list[tuple[str, FieldAccessor]]:
        if not fields:
            return [(c.title, c.field) for c in self.screen.columns]
        columns = []
        for spec in fields:
            try:
                col = self.screen.column(spec)
                columns.append((col.title, col.field))
            except KeyError:
                accessor = FieldAccessor.of(spec)
                columns.append((accessor.name, accessor))
        return columns

    def default_filename(self, fmt: ExportFormat) -> str:
        date_str = datetime.now().strftime("%Y%m%d")
        return f"{self.screen.name}_export_{date_str}.{fmt.value}"

    def export(
        self,
        records: Iterable[Record],
        fmt: ExportFormat | str = ExportFormat.CSV,
        fields: Sequence[str] | None = None,
        filename: str | None = None,
    ) -> Path:
        """Write *records* and return the saved file path."""
        fmt = ExportFormat(fmt)
        columns = self._columns(fields)
        rows = [[accessor.get(r) for _, accessor in columns] for r in records]
        dest = self.output_dir / (filename or self.default_filename(fmt))

        if fmt is ExportFormat.CSV:
            self._write_csv(dest, columns, rows)
        elif fmt is ExportFormat.JSON:
            self._write_json(dest, columns, rows)
        else:
            self._write_xlsx(dest, columns, rows)

        logger.info("Exported %d %s to %s", len(rows), self.screen.name, dest)
        return dest

    # ── Writers ─────────────────────────────────────────────────────

    def _write_csv(self, dest: Path, columns, rows: list[list[Any]]) -> None:
        with open(dest, "w", newline="", encoding="utf-8") as fh:
            writer = csv.writer(fh)
            writer.writerow([title for title, _ in columns])
            for row in rows:
                writer.writerow([_cell_value(v) for v in row])

    def _write_json(self, dest: Path, columns, rows: list[list[Any]]) -> None:
        keys = [accessor.name for _, accessor in columns]
        payload = [dict(zip(keys, row)) for row in rows]
        dest.write_text(json.dumps(payload, indent=2, default=str), encoding="utf-8")

    def _write_xlsx(self, dest: Path, columns, rows: list[list[Any]]) -> None:
        wb = Workbook()
        ws = wb.active
        ws.title = self.screen.title
        ws.append([title for title, _ in columns])
        for row in rows:
            ws.append([_cell_value(v) for v in row])

        self._style_header(ws)
        ws.auto_filter.ref = ws.dimensions
        ws.freeze_panes = "A2"
        self._auto_width(ws)
        wb.save(str(dest))

    # ── Helper methods ──────────────────────────────────────────────

    def _style_header(self, ws, row: int = 1) -> None:
        for cell in ws[row]:
            cell.font = _HEADER_FONT
            cell.fill = _HEADER_FILL
            cell.alignment = _HEADER_ALIGNMENT
            cell.border = _THIN_BORDER

    def _auto_width(self, ws) -> None:
        """Fit each column to its longest value, capped at *_MAX_COL_WIDTH*."""
        for col_cells in ws.columns:
            longest = max((len(str(c.value)) for c in col_cells if c.value is not None), default=0)
            col_letter = get_column_letter(col_cells[0].column)
            ws.column_dimensions[col_letter].width = min(longest + 3, _MAX_COL_WIDTH)

#!/usr/bin/env python3
"""
Excel workbook reading and writing for tradelog.

Supports:
- Reading order rows from an uploaded workbook (bytes or path)
- Writing styled single-sheet workbooks
- Generating the order import template
"""

import io
from pathlib import Path
from typing import Any, Iterable, Union

from openpyxl import Workbook, load_workbook
from openpyxl.cell.rich_text import CellRichText
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.datavalidation import DataValidation

from .clock import SystemClock
from .columns import FIELD_POLICIES, IMPORT_COLUMN_COUNT, IMPORT_COLUMNS, FieldKind
from .schemas import RichText, TabularRow
from .services import ImportFileError

# Second template sheet; import only reads the first
EXAMPLE_SHEET_TITLE = "Example"

# Payment date drives the record date, so the template marks it required too
TEMPLATE_REQUIRED_FIELDS = {"lead_number", "company_name", "closed_product", "payment_date"}

# Styling constants
HEADER_FONT = Font(bold=True, color="FFFFFF")
HEADER_FILL = PatternFill(start_color="4472C4", end_color="4472C4", fill_type="solid")
HEADER_ALIGNMENT = Alignment(horizontal="center", vertical="center", wrap_text=True)
THIN_BORDER = Border(
    left=Side(style="thin"),
    right=Side(style="thin"),
    top=Side(style="thin"),
    bottom=Side(style="thin"),
)


def _style_header(ws, num_cols: int) -> None:
    """Apply header styling to first row."""
    for col in range(1, num_cols + 1):
        cell = ws.cell(row=1, column=col)
        cell.font = HEADER_FONT
        cell.fill = HEADER_FILL
        cell.alignment = HEADER_ALIGNMENT
        cell.border = THIN_BORDER


def _auto_width(ws) -> None:
    """Auto-adjust column widths based on content."""
    for column_cells in ws.columns:
        max_length = max(
            (len(str(cell.value)) for cell in column_cells if cell.value is not None),
            default=0,
        )
        column = column_cells[0].column_letter
        ws.column_dimensions[column].width = min(max_length + 2, 50)


def _add_data_validation(
    ws, col: int, values: Iterable[str], start_row: int = 2, end_row: int = 1000
) -> None:
    """Add dropdown data validation to a column."""
    dv = DataValidation(
        type="list",
        formula1=f'"{",".join(values)}"',
        allow_blank=True,
    )
    dv.error = "Please select from the list"
    dv.errorTitle = "Invalid entry"
    col_letter = get_column_letter(col)
    dv.add(f"{col_letter}{start_row}:{col_letter}{end_row}")
    ws.add_data_validation(dv)


# =============================================================================
# Reading
# =============================================================================


def _ingest_cell(cell) -> Any:
    """Tag formatted or hyperlinked text as RichText, pass other values through"""
    value = cell.value
    hyperlink = getattr(cell, "hyperlink", None)
    target = hyperlink.target if hyperlink is not None else None
    if isinstance(value, CellRichText):
        return RichText(text=str(value), hyperlink=target)
    if isinstance(value, str) and target:
        return RichText(text=value, hyperlink=target)
    return value


def _open_workbook(source: Union[bytes, str, Path]):
    if isinstance(source, (bytes, bytearray)):
        source = io.BytesIO(source)
    try:
        return load_workbook(source, data_only=True, rich_text=True)
    except Exception as e:
        raise ImportFileError(f"Spreadsheet could not be read: {e}") from e


def read_order_rows(source: Union[bytes, str, Path]) -> list[TabularRow]:
    """
    Read the data rows of the first sheet.

    Row 1 is the header and is always skipped. Rows keep their sheet
    row numbers; blank rows are returned too (callers decide to skip).

    Raises:
        ImportFileError: If the workbook is unreadable or has no sheet
    """
    wb = _open_workbook(source)
    if not wb.worksheets:
        raise ImportFileError("Spreadsheet contains no worksheet")
    ws = wb.worksheets[0]

    rows = []
    for row_num, cells in enumerate(
        ws.iter_rows(min_row=2, max_col=IMPORT_COLUMN_COUNT), start=2
    ):
        rows.append(
            TabularRow(row_number=row_num, cells=[_ingest_cell(c) for c in cells])
        )
    return rows


# =============================================================================
# Writing
# =============================================================================


def build_workbook(title: str, headers: list[str], rows: Iterable[list]) -> Workbook:
    """Create a single-sheet workbook with a styled header row."""
    wb = Workbook()
    ws = wb.active
    ws.title = title

    ws.append(headers)
    _style_header(ws, len(headers))
    for row in rows:
        ws.append(row)

    _auto_width(ws)
    return wb


def workbook_bytes(wb: Workbook) -> bytes:
    """Serialize a workbook to .xlsx bytes."""
    buffer = io.BytesIO()
    wb.save(buffer)
    return buffer.getvalue()


def generate_order_template(filepath: Union[str, Path], clock=None) -> None:
    """
    Generate an Excel template for order import.

    The first sheet holds only the headers; the importer reads it. A filled
    example row lives on a second "Example" sheet, which import never reads.
    """
    clock = clock or SystemClock()
    headers = [
        f"{c.label} *" if c.field in TEMPLATE_REQUIRED_FIELDS else c.label
        for c in IMPORT_COLUMNS
    ]
    today = clock.today().isoformat()
    example = [
        "New",
        "United States",
        "North America",
        "Website",
        "LEAD-0001",
        today,
        "Example Trading Co.",
        "Jane Doe",
        "jane@example.com",
        "10000",
        "10000",
        "Widget A",
        "Checked",
        "+1-555-1234",
        today,
        "Distributor",
        "",
        "PO-0001",
        "",
        "",
        "",
    ]
    wb = build_workbook("Orders", headers, [])
    ws = wb.active

    example_ws = wb.create_sheet(EXAMPLE_SHEET_TITLE)
    example_ws.append(headers)
    _style_header(example_ws, len(headers))
    example_ws.append(example)
    _auto_width(example_ws)

    for column in IMPORT_COLUMNS:
        policy = FIELD_POLICIES.get(column.field) if column.field else None
        if policy and policy.kind is FieldKind.CHOICE:
            _add_data_validation(ws, column.position + 1, policy.choices)

    wb.save(filepath)

"""Tests for workbook reading, writing and the import template."""

import io

import pytest
from openpyxl import Workbook, load_workbook
from openpyxl.cell.rich_text import CellRichText, TextBlock
from openpyxl.cell.text import InlineFont

from tradelog.columns import IMPORT_HEADERS
from tradelog.excel import (
    EXAMPLE_SHEET_TITLE,
    build_workbook,
    generate_order_template,
    read_order_rows,
    workbook_bytes,
)
from tradelog.importer import OrderImporter
from tradelog.services import ImportFileError

from factories import valid_row, workbook_with


def save(wb):
    buffer = io.BytesIO()
    wb.save(buffer)
    return buffer.getvalue()


# =============================================================================
# Reading
# =============================================================================


def test_read_skips_header_and_numbers_rows():
    rows = read_order_rows(workbook_with([valid_row(), valid_row(lead_number="L2")]))
    assert [r.row_number for r in rows] == [2, 3]
    assert rows[1].cells[4] == "L2"
    assert all(len(r.cells) == 21 for r in rows)


def test_read_pads_short_rows():
    rows = read_order_rows(workbook_with([["New", "Japan"]], header=None))
    # first row is treated as the header
    assert rows == []
    rows = read_order_rows(workbook_with([["New", "Japan"]]))
    assert rows[0].cells[:2] == ["New", "Japan"]
    assert rows[0].cells[2:] == [None] * 19


def test_read_uses_first_sheet_only():
    wb = Workbook()
    wb.active.append(IMPORT_HEADERS)
    wb.active.append(valid_row())
    other = wb.create_sheet("Other")
    other.append(IMPORT_HEADERS)
    other.append(valid_row(lead_number="IGNORED"))
    rows = read_order_rows(save(wb))
    assert len(rows) == 1
    assert rows[0].cells[4] == "LEAD001"


def test_read_rich_text_cell():
    wb = Workbook()
    ws = wb.active
    ws.append(IMPORT_HEADERS)
    ws.append(valid_row())
    ws.cell(row=2, column=9).value = CellRichText(
        [TextBlock(InlineFont(b=True), "jane"), "@example.com"]
    )
    rows = read_order_rows(save(wb))
    assert rows[0].cells[8] == "jane@example.com"


def test_read_hyperlinked_cell():
    wb = Workbook()
    ws = wb.active
    ws.append(IMPORT_HEADERS)
    ws.append(valid_row(email="jane@example.com"))
    ws.cell(row=2, column=9).hyperlink = "mailto:jane@example.com"
    rows = read_order_rows(save(wb))
    assert rows[0].cells[8] == "jane@example.com"


def test_read_unreadable_bytes():
    with pytest.raises(ImportFileError, match="could not be read"):
        read_order_rows(b"\x00\x01garbage")


def test_read_from_path(tmp_path):
    path = tmp_path / "orders.xlsx"
    path.write_bytes(workbook_with([valid_row()]))
    assert len(read_order_rows(path)) == 1


# =============================================================================
# Writing
# =============================================================================


def test_build_workbook_styles_header():
    wb = build_workbook("Orders", ["A", "B"], [[1, 2]])
    ws = wb.active
    assert ws.title == "Orders"
    assert ws.cell(1, 1).font.bold
    assert ws.cell(2, 2).value == 2


def test_workbook_bytes_round_trip():
    data = workbook_bytes(build_workbook("Orders", ["A"], [["x"]]))
    ws = load_workbook(io.BytesIO(data)).active
    assert ws.cell(2, 1).value == "x"


# =============================================================================
# Template
# =============================================================================


def test_generate_order_template(clock, tmp_path):
    path = tmp_path / "template.xlsx"
    generate_order_template(path, clock=clock)

    wb = load_workbook(path)
    ws = wb.worksheets[0]
    headers = [c.value for c in ws[1]]
    assert len(headers) == 21
    assert headers[4] == "Lead Number *"
    assert headers[5] == "Payment Date *"
    assert headers[1] == "Country"
    assert ws.max_row == 1
    assert len(ws.data_validations.dataValidation) == 1

    example = wb[EXAMPLE_SHEET_TITLE]
    assert [c.value for c in example[1]] == headers
    assert example.cell(2, 6).value == "2024-03-01"
    assert example.cell(2, 15).value == "2024-03-01"


def test_template_imports_nothing(gateway, clock, tmp_path):
    path = tmp_path / "template.xlsx"
    generate_order_template(path, clock=clock)
    result = OrderImporter(gateway, clock=clock).import_file(path)
    assert result.success_count == 0
    assert result.failure_count == 0
    assert result.errors == []

"""Tests for the column layout and field policy table"""

import datetime

import pytest

from tradelog.columns import (
    EXPORT_COLUMN_COUNT,
    EXPORT_HEADERS,
    FIELD_POLICIES,
    IMPORT_COLUMN_COUNT,
    PLACEHOLDER,
    ColumnMap,
    FieldKind,
    FieldPolicy,
    check_field_policies,
    default_value,
    field_kind,
    is_required,
    position_of,
)

from factories import sheet_row


def test_column_counts():
    assert IMPORT_COLUMN_COUNT == 21
    assert EXPORT_COLUMN_COUNT == 19
    assert len(EXPORT_HEADERS) == 19


def test_positions_are_fixed():
    assert position_of("new_or_old") == 0
    assert position_of("lead_number") == 4
    assert position_of("payment_date") == 5
    assert position_of("company_name") == 6
    assert position_of("email") == 8
    assert position_of("closed_product") == 11
    assert position_of("order_date") == 14
    assert position_of("purchase_order_number") == 17


def test_required_fields():
    required = {name for name, policy in FIELD_POLICIES.items() if policy.required}
    assert required == {"lead_number", "company_name", "closed_product", "order_date"}
    assert is_required("lead_number")
    assert not is_required("country")
    assert not is_required("no_such_field")


def test_every_required_field_has_default(clock):
    for name, policy in FIELD_POLICIES.items():
        if policy.required:
            assert default_value(name, clock) is not None


def test_optional_fields_have_no_placeholder_default(clock):
    for name, policy in FIELD_POLICIES.items():
        if not policy.required:
            assert default_value(name, clock) != PLACEHOLDER


def test_check_field_policies_rejects_required_without_default():
    with pytest.raises(ValueError, match="has no default"):
        check_field_policies({"x": FieldPolicy(True, FieldKind.TEXT)})


def test_check_field_policies_rejects_placeholder_on_optional():
    with pytest.raises(ValueError, match="placeholder"):
        check_field_policies({"x": FieldPolicy(False, FieldKind.TEXT, PLACEHOLDER)})


def test_order_date_default_comes_from_clock(clock):
    assert default_value("order_date", clock) == "2024-03-01"


def test_field_kind():
    assert field_kind("invoice_amount") is FieldKind.NUMBER
    assert field_kind("payment_date") is FieldKind.DATE
    assert field_kind("new_or_old") is FieldKind.CHOICE
    assert field_kind("unknown") is FieldKind.TEXT


def test_to_record_applies_defaults_and_nulls(clock):
    record = ColumnMap().to_record(sheet_row(), clock)
    assert record["lead_number"] == "-"
    assert record["company_name"] == "-"
    assert record["closed_product"] == "-"
    assert record["order_date"] == "2024-03-01"
    assert record["country"] is None
    assert record["invoice_amount"] is None


def test_to_record_trims_and_treats_whitespace_as_empty(clock):
    record = ColumnMap().to_record(
        sheet_row(company_name="  ABC  ", country="   "), clock
    )
    assert record["company_name"] == "ABC"
    assert record["country"] is None


def test_to_record_converts_structured_dates(clock):
    record = ColumnMap().to_record(
        sheet_row(payment_date=datetime.datetime(2024, 1, 15, 0, 0)), clock
    )
    assert record["payment_date"] == "2024-01-15"


def test_to_record_numeric_text_fields(clock):
    record = ColumnMap().to_record(sheet_row(lead_number=1001.0, phone=5551234), clock)
    assert record["lead_number"] == "1001"
    assert record["phone"] == "5551234"


def test_to_record_keeps_raw_amounts(clock):
    record = ColumnMap().to_record(sheet_row(invoice_amount=12.5), clock)
    assert record["invoice_amount"] == 12.5


def test_to_record_discards_unbacked_columns(clock):
    record = ColumnMap().to_record(
        sheet_row(invoice_number="INV-1", tracking_number="TRK", payment_proof="p.png"),
        clock,
    )
    assert "INV-1" not in record.values()
    assert "TRK" not in record.values()
    assert "p.png" not in record.values()


def test_to_row_layout():
    row = ColumnMap().to_row(
        {"lead_number": "L1", "company_name": "ABC", "invoice_amount": None}
    )
    assert len(row) == 19
    assert row[4] == "L1"
    assert row[6] == "ABC"
    assert row[9] == ""
    assert row[16] == ""
    assert row[18] == ""

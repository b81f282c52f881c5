#!/usr/bin/env python3
"""
Column layout of the order spreadsheet and the per-field default policy.

One table (SHEET_COLUMNS) drives both directions:
- import reads all 21 positions and keeps the ones backed by a field
- export writes the first 19 positions, leaving unbacked columns empty
"""

import datetime
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional, Union

from .models import CUSTOMER_FLAGS

PLACEHOLDER = "-"


class FieldKind(str, Enum):
    """Value kind of a stored field"""

    TEXT = "text"
    CHOICE = "choice"
    DATE = "date"
    NUMBER = "number"


DefaultRule = Union[str, Callable[[Any], str], None]


@dataclass(frozen=True)
class FieldPolicy:
    """How an empty cell resolves for one field"""

    required: bool
    kind: FieldKind
    default: DefaultRule = None
    choices: tuple[str, ...] = ()


@dataclass(frozen=True)
class SheetColumn:
    """One fixed position in the spreadsheet"""

    position: int
    label: str
    field: Optional[str]  # None: not backed by a stored field
    on_import: bool = True
    on_export: bool = True


def _today(clock) -> str:
    return clock.today().isoformat()


FIELD_POLICIES: dict[str, FieldPolicy] = {
    "lead_number": FieldPolicy(True, FieldKind.TEXT, PLACEHOLDER),
    "company_name": FieldPolicy(True, FieldKind.TEXT, PLACEHOLDER),
    "closed_product": FieldPolicy(True, FieldKind.TEXT, PLACEHOLDER),
    "order_date": FieldPolicy(True, FieldKind.DATE, _today),
    "new_or_old": FieldPolicy(False, FieldKind.CHOICE, choices=tuple(CUSTOMER_FLAGS)),
    "country": FieldPolicy(False, FieldKind.TEXT),
    "continent": FieldPolicy(False, FieldKind.TEXT),
    "source": FieldPolicy(False, FieldKind.TEXT),
    "contact_name": FieldPolicy(False, FieldKind.TEXT),
    "email": FieldPolicy(False, FieldKind.TEXT),
    "phone": FieldPolicy(False, FieldKind.TEXT),
    "customer_nature": FieldPolicy(False, FieldKind.TEXT),
    "customer_background_check": FieldPolicy(False, FieldKind.TEXT),
    "purchase_order_number": FieldPolicy(False, FieldKind.TEXT),
    "payment_date": FieldPolicy(False, FieldKind.DATE),
    "invoice_amount": FieldPolicy(False, FieldKind.NUMBER),
    "payment_amount": FieldPolicy(False, FieldKind.NUMBER),
}


SHEET_COLUMNS: tuple[SheetColumn, ...] = (
    SheetColumn(0, "New/Existing Customer", "new_or_old"),
    SheetColumn(1, "Country", "country"),
    SheetColumn(2, "Continent", "continent"),
    SheetColumn(3, "Source", "source"),
    SheetColumn(4, "Lead Number", "lead_number"),
    SheetColumn(5, "Payment Date", "payment_date"),
    SheetColumn(6, "Company Name", "company_name"),
    SheetColumn(7, "Customer Name", "contact_name"),
    SheetColumn(8, "Email", "email"),
    SheetColumn(9, "Invoice Amount", "invoice_amount"),
    SheetColumn(10, "Payment Amount", "payment_amount"),
    SheetColumn(11, "Closed Product", "closed_product"),
    SheetColumn(12, "Background Check", "customer_background_check"),
    SheetColumn(13, "Phone", "phone"),
    SheetColumn(14, "Record Date", "order_date"),
    SheetColumn(15, "Customer Nature", "customer_nature"),
    SheetColumn(16, "Invoice Number", None),
    SheetColumn(17, "Purchase Order Number", "purchase_order_number"),
    SheetColumn(18, "Shipment Date", None),
    SheetColumn(19, "Tracking Number", None, on_export=False),
    SheetColumn(20, "Payment Proof", None, on_export=False),
)

IMPORT_COLUMNS = tuple(c for c in SHEET_COLUMNS if c.on_import)
EXPORT_COLUMNS = tuple(c for c in SHEET_COLUMNS if c.on_export)
IMPORT_COLUMN_COUNT = len(IMPORT_COLUMNS)
EXPORT_COLUMN_COUNT = len(EXPORT_COLUMNS)
IMPORT_HEADERS = [c.label for c in IMPORT_COLUMNS]
EXPORT_HEADERS = [c.label for c in EXPORT_COLUMNS]


def check_field_policies(policies: dict[str, FieldPolicy]) -> None:
    """
    Check the policy table invariants.

    Raises:
        ValueError: if a required field has no default, or an optional
            field defaults to the placeholder
    """
    for name, policy in policies.items():
        if policy.required and policy.default is None:
            raise ValueError(f"Required field '{name}' has no default")
        if not policy.required and policy.default == PLACEHOLDER:
            raise ValueError(f"Optional field '{name}' defaults to the placeholder")


check_field_policies(FIELD_POLICIES)


def is_required(field: str) -> bool:
    """Check whether a field is required"""
    policy = FIELD_POLICIES.get(field)
    return policy.required if policy else False


def field_kind(field: str) -> FieldKind:
    """Get the value kind of a field (text when unknown)"""
    policy = FIELD_POLICIES.get(field)
    return policy.kind if policy else FieldKind.TEXT


def default_value(field: str, clock) -> Optional[str]:
    """Evaluate a field's default, calling computed defaults with the clock"""
    policy = FIELD_POLICIES.get(field)
    if policy is None or policy.default is None:
        return None
    if callable(policy.default):
        return policy.default(clock)
    return policy.default


def _as_text(value: Any) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def clean_cell(value: Any) -> Any:
    """Trim text cells and collapse empty ones to None"""
    if value is None:
        return None
    if isinstance(value, str):
        value = value.strip()
        return value or None
    if isinstance(value, datetime.datetime):
        return value.date().isoformat()
    if isinstance(value, datetime.date):
        return value.isoformat()
    return value


class ColumnMap:
    """Maps spreadsheet rows to flat field records and back"""

    def __init__(
        self,
        columns: tuple[SheetColumn, ...] = SHEET_COLUMNS,
        policies: dict[str, FieldPolicy] = FIELD_POLICIES,
    ):
        self.import_columns = tuple(c for c in columns if c.on_import)
        self.export_columns = tuple(c for c in columns if c.on_export)
        self.policies = policies

    def resolve(self, field: str, value: Any, clock) -> Any:
        """Apply the field policy to one cleaned cell value"""
        policy = self.policies[field]
        if value is None:
            if policy.required:
                return default_value(field, clock)
            return None
        if policy.kind is FieldKind.NUMBER:
            return value
        return _as_text(value)

    def to_record(self, cells: list, clock) -> dict[str, Any]:
        """
        Convert raw cells (by position) into a field record.

        Columns without a field are read and discarded.
        """
        record: dict[str, Any] = {}
        for column in self.import_columns:
            if column.field is None:
                continue
            raw = cells[column.position] if column.position < len(cells) else None
            record[column.field] = self.resolve(column.field, clean_cell(raw), clock)
        return record

    def to_row(self, record: dict[str, Any]) -> list:
        """Convert a field record into export cells ("" where absent)"""
        row = []
        for column in self.export_columns:
            if column.field is None:
                row.append("")
                continue
            value = record.get(column.field)
            row.append("" if value is None else value)
        return row


def position_of(field: str) -> int:
    """Get the sheet position of a stored field"""
    for column in SHEET_COLUMNS:
        if column.field == field:
            return column.position
    raise KeyError(field)

#!/usr/bin/env python3
"""
Row mapping: one sheet row in, one order candidate (plus its issues) out.
"""

from typing import List, NamedTuple, Optional

from .clock import SystemClock
from .columns import PLACEHOLDER, ColumnMap
from .schemas import ContactInfo, OrderCandidate, TabularRow, ValidationIssue
from .validators import find_missing_required, find_shape_problems, normalize_date


class MappedRow(NamedTuple):
    candidate: Optional[OrderCandidate]
    issues: List[ValidationIssue]

    @property
    def ok(self) -> bool:
        return self.candidate is not None and not self.issues


class RowMapper:
    """Converts sheet rows into order candidates"""

    def __init__(self, clock=None, column_map: Optional[ColumnMap] = None):
        self.clock = clock or SystemClock()
        self.column_map = column_map or ColumnMap()

    def map_row(self, row: TabularRow) -> MappedRow:
        """
        Map and validate a single row.

        The record date is always taken from the payment date; a row
        without a payment date is rejected before anything else is checked.

        Args:
            row: Parsed sheet row

        Returns:
            MappedRow whose candidate is None when the row was rejected early
        """
        record = self.column_map.to_record(row.cells, self.clock)

        contact = ContactInfo(
            name=record.pop("contact_name") or PLACEHOLDER,
            email=record.pop("email") or PLACEHOLDER,
            phone=record.pop("phone") or PLACEHOLDER,
        )

        payment_date = record.get("payment_date")
        if not payment_date:
            issue = ValidationIssue(
                row=row.row_number,
                field="payment_date",
                message="Payment date is empty; row skipped",
                value=payment_date,
            )
            return MappedRow(None, [issue])

        record["payment_date"] = normalize_date(payment_date)
        record["order_date"] = record["payment_date"]

        candidate = OrderCandidate(
            row_number=row.row_number, contact_info=[contact], **record
        )

        checked = dict(record, email=contact.email)
        issues = [
            ValidationIssue(row=row.row_number, field=field, message=message, value=value)
            for field, message, value in find_shape_problems(checked)
            + find_missing_required(checked)
        ]
        return MappedRow(candidate, issues)

#!/usr/bin/env python3
"""
Shape checks for order data read from a spreadsheet.

Every check is pure: it returns a bool or a list of problems and never
raises for bad input.
"""

import datetime
import math
import re
from typing import Any, Mapping, Optional

from .columns import PLACEHOLDER

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
DATE_PATTERN = re.compile(r"^[0-9]{4}[-.][0-9]{2}[-.][0-9]{2}$")

REQUIRED_FIELD_LABELS = {
    "lead_number": "Lead number",
    "company_name": "Company name",
    "closed_product": "Closed product",
    "order_date": "Record date",
}

Problem = tuple[str, str, Any]  # (field, message, offending value)


def validate_email(email: Any) -> bool:
    """Check for a local@domain.tld shape (surrounding whitespace ignored)"""
    if not isinstance(email, str):
        return False
    return EMAIL_PATTERN.match(email.strip()) is not None


def normalize_date(value: str) -> str:
    """Unify date separators to '-' (YYYY.MM.DD -> YYYY-MM-DD)"""
    return value.replace(".", "-")


def validate_date(value: Any) -> bool:
    """
    Check a YYYY-MM-DD or YYYY.MM.DD date that exists on the calendar.

    Future dates are accepted; only shape and calendar validity are checked.
    """
    if not isinstance(value, str):
        return False
    value = value.strip()
    if not DATE_PATTERN.match(value):
        return False
    year, month, day = (int(part) for part in normalize_date(value).split("-"))
    try:
        parsed = datetime.date(year, month, day)
    except ValueError:
        return False
    return (parsed.year, parsed.month, parsed.day) == (year, month, day)


def _is_absent(value: Any) -> bool:
    return value is None or value == ""


def validate_amount(amount: Any) -> bool:
    """Check an optional amount: absent, or a finite non-negative number"""
    if _is_absent(amount):
        return True
    if isinstance(amount, bool):
        return False
    try:
        number = float(amount)
    except (TypeError, ValueError):
        return False
    return math.isfinite(number) and number >= 0


def parse_amount(amount: Any) -> Optional[float]:
    """Convert a validated amount to float (None when absent)"""
    if _is_absent(amount):
        return None
    return float(amount)


def find_shape_problems(order: Mapping[str, Any]) -> list[Problem]:
    """Collect every shape problem in an order; does not stop at the first"""
    problems: list[Problem] = []

    email = order.get("email")
    if not _is_absent(email) and email != PLACEHOLDER:
        if not validate_email(email):
            problems.append(("email", "Email address is invalid", email))

    payment_date = order.get("payment_date")
    if not _is_absent(payment_date) and not validate_date(payment_date):
        problems.append(("payment_date", "Payment date format is invalid", payment_date))

    order_date = order.get("order_date")
    if not _is_absent(order_date) and not validate_date(order_date):
        problems.append(("order_date", "Record date format is invalid", order_date))

    for field, label in (
        ("invoice_amount", "Invoice amount"),
        ("payment_amount", "Payment amount"),
    ):
        value = order.get(field)
        if not validate_amount(value):
            problems.append((field, f"{label} must be a non-negative number", value))

    return problems


def validate_order_data(order: Mapping[str, Any]) -> list[str]:
    """Return the message of every failing shape check (empty when valid)"""
    return [message for _, message, _ in find_shape_problems(order)]


def find_missing_required(order: Mapping[str, Any]) -> list[Problem]:
    """Flag required fields that are empty or still hold the placeholder"""
    problems: list[Problem] = []
    for field, label in REQUIRED_FIELD_LABELS.items():
        value = order.get(field)
        if _is_absent(value) or value == PLACEHOLDER:
            problems.append((field, f"{label} is required", value))
    return problems

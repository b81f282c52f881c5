#!/usr/bin/env python3
"""
Pydantic schemas for the spreadsheet import/export pipeline.

These schemas provide:
- Raw row ingestion (cell shape resolved once, on construction)
- The order candidate assembled from a row
- Row-level issues and the import result payload
"""

import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from .columns import IMPORT_COLUMN_COUNT


class RichText(BaseModel):
    """Formatted or hyperlinked cell content"""

    model_config = ConfigDict(frozen=True)

    text: str
    hyperlink: Optional[str] = None


def resolve_cell(value: Any) -> Any:
    """Reduce a raw cell to a plain scalar (text, number, ISO date or None)"""
    if isinstance(value, RichText):
        return value.text
    if isinstance(value, datetime.datetime):
        return value.date().isoformat()
    if isinstance(value, datetime.date):
        return value.isoformat()
    return value


class TabularRow(BaseModel):
    """One data row of the sheet, padded to the import width"""

    row_number: int = Field(..., ge=1, description="1-based sheet row number")
    cells: List[Any] = Field(default_factory=list)

    @field_validator("cells", mode="before")
    @classmethod
    def resolve_cells(cls, v: Any) -> list:
        """Resolve cell shapes and pad/trim to the fixed column count"""
        cells = [resolve_cell(c) for c in (v or [])][:IMPORT_COLUMN_COUNT]
        cells.extend([None] * (IMPORT_COLUMN_COUNT - len(cells)))
        return cells

    @property
    def is_blank(self) -> bool:
        """True when every cell is None or whitespace"""
        for cell in self.cells:
            if cell is None:
                continue
            if isinstance(cell, str) and not cell.strip():
                continue
            return False
        return True


class ContactInfo(BaseModel):
    """Contact person on an order"""

    name: str = "-"
    email: str = "-"
    phone: str = "-"


class OrderCandidate(BaseModel):
    """Order assembled from one sheet row, before persistence"""

    row_number: int
    company_name: str
    lead_number: str
    closed_product: str
    order_date: str
    payment_date: Optional[str] = None
    # raw until validated, then coerced with validators.parse_amount
    invoice_amount: Any = None
    payment_amount: Any = None
    contact_info: List[ContactInfo] = Field(default_factory=list)
    new_or_old: Optional[str] = None
    country: Optional[str] = None
    continent: Optional[str] = None
    source: Optional[str] = None
    customer_nature: Optional[str] = None
    customer_background_check: Optional[str] = None
    purchase_order_number: Optional[str] = None

    @property
    def email(self) -> Optional[str]:
        return self.contact_info[0].email if self.contact_info else None


class ValidationIssue(BaseModel):
    """A single field-level problem on a sheet row (row 0: whole file/batch)"""

    model_config = ConfigDict(frozen=True)

    row: int
    field: str
    message: str
    value: Any = None


class ImportResult(BaseModel):
    """Outcome of one import call"""

    model_config = ConfigDict(
        frozen=True, alias_generator=to_camel, populate_by_name=True
    )

    success_count: int = 0
    failure_count: int = 0
    errors: List[ValidationIssue] = Field(default_factory=list)

    def to_payload(self) -> dict:
        """Serialize as {successCount, failureCount, errors: [...]}"""
        return self.model_dump(by_alias=True, exclude_none=True)

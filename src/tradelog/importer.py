#!/usr/bin/env python3
"""
Bulk order import.

Parse -> map/validate each row -> partition -> persist in one atomic
scope -> report. The partition step (plan_import) is pure, so all
decision logic can be tested without a database.
"""

import logging
from pathlib import Path
from typing import Iterable, List, NamedTuple, Optional, Union

from .clock import SystemClock
from .config import get_config
from .excel import read_order_rows
from .mapper import RowMapper
from .schemas import ImportResult, OrderCandidate, TabularRow, ValidationIssue
from .services import BatchPersistenceError, ImportFileError

logger = logging.getLogger("tradelog")


class ImportPlan(NamedTuple):
    insertable: List[OrderCandidate]
    issues: List[ValidationIssue]
    rejected: int
    skipped: int


def plan_import(rows: Iterable[TabularRow], clock=None) -> ImportPlan:
    """
    Split rows into insertable candidates and rejected rows.

    Blank rows are skipped and counted in neither group. Row order is
    preserved in both outputs.
    """
    mapper = RowMapper(clock=clock)
    insertable: List[OrderCandidate] = []
    issues: List[ValidationIssue] = []
    rejected = 0
    skipped = 0

    for row in rows:
        if row.is_blank:
            skipped += 1
            continue
        mapped = mapper.map_row(row)
        if mapped.ok:
            insertable.append(mapped.candidate)
        else:
            rejected += 1
            issues.extend(mapped.issues)
            logger.warning(
                f"Row {row.row_number} rejected: "
                + "; ".join(issue.message for issue in mapped.issues)
            )

    return ImportPlan(insertable, issues, rejected, skipped)


class OrderImporter:
    """Imports order spreadsheets through a persistence gateway"""

    def __init__(self, gateway, clock=None, strict_row_writes: Optional[bool] = None):
        self.gateway = gateway
        self.clock = clock or SystemClock()
        if strict_row_writes is None:
            strict_row_writes = get_config().IMPORT_STRICT_ROW_WRITES
        self.strict_row_writes = strict_row_writes

    def import_file(self, filepath: Union[str, Path]) -> ImportResult:
        """Import orders from a workbook on disk"""
        return self._import(Path(filepath))

    def import_bytes(self, data: bytes) -> ImportResult:
        """Import orders from workbook bytes"""
        return self._import(data)

    def _import(self, source: Union[bytes, Path]) -> ImportResult:
        logger.info("Order import started")
        try:
            rows = read_order_rows(source)
        except ImportFileError as e:
            logger.error(str(e))
            return ImportResult(
                success_count=0,
                failure_count=0,
                errors=[ValidationIssue(row=0, field="file", message=str(e))],
            )

        plan = plan_import(rows, self.clock)
        success_count = 0
        failure_count = plan.rejected
        issues = list(plan.issues)

        if plan.insertable:
            try:
                inserted, write_issues = self.gateway.run_atomically(
                    lambda: self._persist(plan.insertable)
                )
            except Exception as e:
                message = (
                    str(e)
                    if isinstance(e, BatchPersistenceError)
                    else f"Batch write failed: {e}"
                )
                logger.error(f"Import batch rolled back: {message}")
                failure_count += len(plan.insertable)
                issues.append(ValidationIssue(row=0, field="batch", message=message))
            else:
                success_count = inserted
                if self.strict_row_writes:
                    failure_count += len(write_issues)
                    issues.extend(write_issues)

        logger.info(
            f"Order import finished: {success_count} imported, "
            f"{failure_count} failed, {plan.skipped} skipped"
        )
        return ImportResult(
            success_count=success_count, failure_count=failure_count, errors=issues
        )

    def _persist(self, candidates: List[OrderCandidate]):
        """Write each candidate in its own savepoint; failed rows are logged and skipped"""
        inserted = 0
        write_issues: List[ValidationIssue] = []
        for candidate in candidates:
            try:
                with self.gateway.row_scope():
                    if not self.gateway.customer_exists(candidate.company_name):
                        self.gateway.create_customer(candidate.company_name)
                    self.gateway.insert_order(candidate)
            except Exception as e:
                logger.error(f"Row {candidate.row_number} not written: {e}")
                write_issues.append(
                    ValidationIssue(
                        row=candidate.row_number,
                        field="persistence",
                        message=f"Row could not be written: {e}",
                    )
                )
                continue
            inserted += 1
        return inserted, write_issues

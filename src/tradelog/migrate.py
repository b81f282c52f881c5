#!/usr/bin/env python3
"""
Schema bootstrap and additive migrations for tradelog.

Databases created before some order columns existed (closed product,
payment date, background check, purchase order number) pick them up
through ALTER TABLE ... ADD COLUMN. Nothing is ever dropped or renamed.
"""

import logging

from sqlalchemy import inspect, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import OperationalError

from .models import Base

logger = logging.getLogger("tradelog")


def sqlite_type(type_name: str) -> str:
    """Map a SQLAlchemy/SQLite type name onto a SQLite storage type."""
    name = type_name.upper()
    if "INT" in name:
        return "INTEGER"
    if "FLOAT" in name or "REAL" in name or "NUMERIC" in name:
        return "REAL"
    if "DATETIME" in name or "TIMESTAMP" in name:
        return "DATETIME"
    if "DATE" in name:
        return "DATE"
    # VARCHAR, TEXT, JSON
    return "TEXT"


def _column_sql(col) -> str:
    sql = f"{col.name} {sqlite_type(str(col.type))}"
    if col.primary_key:
        sql += " PRIMARY KEY"
    elif not col.nullable:
        sql += " NOT NULL"
    for fk in col.foreign_keys:
        table, column = fk.target_fullname.split(".")
        sql += f" REFERENCES {table}({column})"
    return sql


def generate_migrations(engine: Engine) -> list[str]:
    """Generate SQL statements needed to bring the database up to the models."""
    inspector = inspect(engine)
    existing = set(inspector.get_table_names())

    statements = []
    for table_name, table in Base.metadata.tables.items():
        if table_name not in existing:
            cols = ",\n    ".join(_column_sql(col) for col in table.columns)
            statements.append(f"CREATE TABLE IF NOT EXISTS {table_name} (\n    {cols}\n)")
            continue

        db_columns = {c["name"] for c in inspector.get_columns(table_name)}
        for col in table.columns:
            if col.name in db_columns:
                continue
            # SQLite cannot add a NOT NULL column without a default
            statements.append(
                f"ALTER TABLE {table_name} ADD COLUMN {col.name} "
                f"{sqlite_type(str(col.type))}"
            )

    return statements


def run_migrations(engine: Engine, dry_run: bool = False) -> list[str]:
    """
    Apply pending migrations.

    Args:
        engine: SQLAlchemy engine
        dry_run: If True, only return SQL without executing

    Returns:
        List of SQL statements executed (or that would be executed)
    """
    statements = generate_migrations(engine)

    if not statements:
        logger.info("Database schema is up to date")
        return []

    if dry_run:
        return statements

    with engine.connect() as conn:
        for sql in statements:
            logger.info(f"Executing: {sql[:80]}...")
            try:
                conn.execute(text(sql))
            except OperationalError as e:
                # already applied (e.g. duplicate column)
                logger.warning(f"Migration warning: {e}")
        conn.commit()

    logger.info(f"Applied {len(statements)} migration(s)")
    return statements


def check_migrations(engine: Engine) -> list[str]:
    """Check what migrations are needed without applying them."""
    return generate_migrations(engine)


def init_db(engine: Engine) -> list[str]:
    """
    Create missing tables, then add any columns older databases lack.

    Returns:
        List of migration statements applied after table creation
    """
    Base.metadata.create_all(engine)
    return run_migrations(engine)

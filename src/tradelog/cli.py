#!/usr/bin/env python3
"""CLI interface for tradelog: bulk order import/export"""

import argparse
import logging
import sys
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from tabulate import tabulate

from .config import get_config
from .excel import generate_order_template
from .exporter import OrderExporter
from .importer import OrderImporter
from .migrate import init_db
from .schemas import ImportResult
from .services import OrderGateway

logger = logging.getLogger("tradelog")

MAX_ISSUES_SHOWN = 20

EXIT_OK = 0
EXIT_FILE_ERROR = 1
EXIT_PARTIAL = 2


def print_import_result(result: ImportResult) -> None:
    """Print import counts and the first issues as a table"""
    print(f"Imported: {result.success_count}")
    print(f"Failed:   {result.failure_count}")
    if not result.errors:
        return

    headers = ["Row", "Field", "Message", "Value"]
    data = [
        [e.row, e.field, e.message, "" if e.value is None else e.value]
        for e in result.errors[:MAX_ISSUES_SHOWN]
    ]
    print(tabulate(data, headers=headers, tablefmt="grid"))
    remaining = len(result.errors) - MAX_ISSUES_SHOWN
    if remaining > 0:
        print(f"... and {remaining} more")


def import_exit_code(result: ImportResult) -> int:
    if any(e.field == "file" for e in result.errors):
        return EXIT_FILE_ERROR
    if result.failure_count:
        return EXIT_PARTIAL
    return EXIT_OK


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Tradelog - bulk spreadsheet import/export of trade orders"
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    import_parser = subparsers.add_parser("import", help="Import orders from .xlsx")
    opt = import_parser.add_argument
    opt("file", type=str, help="Workbook to import")
    opt(
        "--strict-row-writes",
        action="store_true",
        default=None,
        help="Count rows that fail to write as failures",
    )

    export_parser = subparsers.add_parser("export", help="Export orders to .xlsx")
    export_parser.add_argument(
        "--file", type=str, help="Output path (default: timestamped name)"
    )

    template_parser = subparsers.add_parser(
        "template", help="Write an empty import template"
    )
    template_parser.add_argument("file", type=str, help="Template path")

    subparsers.add_parser("init-db", help="Create and migrate the database schema")

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return EXIT_OK

    config = get_config()
    config.setup_logging()

    if args.command == "template":
        generate_order_template(args.file)
        print(f"Template written to {args.file}")
        return EXIT_OK

    engine = config.get_engine()
    if args.command == "init-db":
        applied = init_db(engine)
        print(f"Database ready ({len(applied)} migration(s) applied)")
        return EXIT_OK

    init_db(engine)
    Session = config.get_session_maker(engine)
    session = Session()
    try:
        gateway = OrderGateway(session)
        if args.command == "import":
            importer = OrderImporter(gateway, strict_row_writes=args.strict_row_writes)
            result = importer.import_file(args.file)
            print_import_result(result)
            return import_exit_code(result)

        if args.command == "export":
            path = OrderExporter(gateway).export_file(args.file)
            print(f"Exported orders to {path}")
            return EXIT_OK

    except SQLAlchemyError as e:
        session.rollback()
        logger.error(f"Database error: {e}")
        print(f"Error: Database error occurred: {e}")
        return EXIT_FILE_ERROR
    except OSError as e:
        logger.error(f"File error: {e}")
        print(f"Error: {e}")
        return EXIT_FILE_ERROR
    except KeyboardInterrupt:
        logger.info("Operation cancelled by user")
        print("\nOperation cancelled by user.")
        session.rollback()
        return EXIT_FILE_ERROR
    finally:
        session.close()

    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())

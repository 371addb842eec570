"""
Command-line entry point for the sales CSV import (`sales-import`).

    sales-import data/sales.csv --batch-size 2000
    sales-import --replace
"""

import argparse
import logging
import sys
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError

from app.core.config import get_settings
from app.core.database import init_db, SessionLocal
from app.services.csv_import import CsvImportError, import_sales_csv

logger = logging.getLogger("app.cli")


def main(argv: Optional[list[str]] = None) -> int:
    settings = get_settings()

    parser = argparse.ArgumentParser(
        prog="sales-import",
        description="Load a sales CSV into the dashboard database.",
    )
    parser.add_argument(
        "csv_path",
        nargs="?",
        default=settings.SALES_CSV_PATH,
        help=f"CSV file to import (default: {settings.SALES_CSV_PATH})",
    )
    parser.add_argument(
        "--replace",
        action="store_true",
        help="delete all existing sales before importing",
    )
    parser.add_argument(
        "--batch-size",
        type=int,
        default=settings.IMPORT_BATCH_SIZE,
        help="rows per INSERT batch",
    )
    args = parser.parse_args(argv)
    if args.batch_size < 1:
        parser.error("--batch-size must be at least 1")

    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
    )

    try:
        init_db()
        db = SessionLocal()
        try:
            result = import_sales_csv(
                db,
                args.csv_path,
                batch_size=args.batch_size,
                replace=args.replace,
            )
        finally:
            db.close()
    except (CsvImportError, SQLAlchemyError) as e:
        logger.error(f"CSV import failed: {e}")
        return 1

    logger.info(
        f"CSV import completed successfully: {result.imported} imported, "
        f"{result.duplicates} already present, {result.skipped} skipped"
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())

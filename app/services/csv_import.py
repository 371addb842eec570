"""
Sales CSV Import.

Loads the source dataset into the `sales` table:
- reads the CSV in chunks with pandas, every cell as a string
- converts each row to a sales record; rows that cannot be converted are logged and skipped
- inserts in batches, idempotent by transaction_id (ON CONFLICT DO NOTHING)
"""

import logging
import os
from dataclasses import dataclass
from typing import Any

import pandas as pd
from sqlalchemy import delete
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.database import count_sales
from app.models.sale import Sale

logger = logging.getLogger(__name__)

# Source CSV header → sales column
CSV_COLUMNS = {
    "Transaction ID": "transaction_id",
    "Date": "date",
    "Customer ID": "customer_id",
    "Customer Name": "customer_name",
    "Phone Number": "phone_number",
    "Gender": "gender",
    "Age": "age",
    "Customer Region": "customer_region",
    "Customer Type": "customer_type",
    "Product ID": "product_id",
    "Product Name": "product_name",
    "Brand": "brand",
    "Product Category": "product_category",
    "Tags": "tags",
    "Quantity": "quantity",
    "Price per Unit": "price_per_unit",
    "Discount Percentage": "discount_percentage",
    "Total Amount": "total_amount",
    "Final Amount": "final_amount",
    "Payment Method": "payment_method",
    "Order Status": "order_status",
    "Delivery Type": "delivery_type",
    "Store ID": "store_id",
    "Store Location": "store_location",
    "Salesperson ID": "salesperson_id",
    "Employee Name": "employee_name",
}

INTEGER_COLUMNS = {"transaction_id", "age", "quantity"}
FLOAT_COLUMNS = {"price_per_unit", "discount_percentage", "total_amount", "final_amount"}

PROGRESS_EVERY = 10_000


class CsvImportError(Exception):
    """The import cannot run at all (missing or unreadable file)."""


@dataclass
class ImportResult:
    read: int = 0
    imported: int = 0
    skipped: int = 0

    @property
    def duplicates(self) -> int:
        """Rows that were valid but already present."""
        return self.read - self.imported - self.skipped


def _to_int(value: str) -> int:
    try:
        return int(value)
    except ValueError:
        pass
    # "3.0"-style cells
    number = float(value)
    if not number.is_integer():
        raise ValueError(f"expected an integer, got {value!r}")
    return int(number)


def parse_row(row: dict[str, Any]) -> dict[str, Any]:
    """
    Convert one CSV row (header → string) into column values for `sales`.
    Blank cells become None. Raises ValueError if the row is unusable.
    """
    record: dict[str, Any] = {}
    for header, column in CSV_COLUMNS.items():
        raw = row.get(header)
        value = raw.strip() if isinstance(raw, str) else raw
        if value is None or value == "":
            record[column] = None
        elif column in INTEGER_COLUMNS:
            try:
                record[column] = _to_int(value)
            except ValueError:
                raise ValueError(f"{header}: expected an integer, got {value!r}")
        elif column in FLOAT_COLUMNS:
            try:
                record[column] = float(value)
            except ValueError:
                raise ValueError(f"{header}: expected a number, got {value!r}")
        else:
            record[column] = value

    if record["transaction_id"] is None:
        raise ValueError("missing Transaction ID")
    return record


def _insert_statement(db: Session):
    """Dialect-specific INSERT that ignores rows whose transaction_id already exists."""
    dialect = db.get_bind().dialect.name
    if dialect == "postgresql":
        insert = postgresql.insert
    elif dialect == "sqlite":
        insert = sqlite.insert
    else:
        raise CsvImportError(f"Unsupported database dialect for import: {dialect}")
    return insert(Sale.__table__).on_conflict_do_nothing(index_elements=["transaction_id"])


def _insert_batch(db: Session, records: list[dict[str, Any]]) -> tuple[int, int]:
    """
    Insert a batch, falling back to row-by-row inserts if the batch fails.
    Returns (inserted, failed).
    """
    stmt = _insert_statement(db)
    # Drivers without a reliable executemany rowcount are measured by row count instead
    sane_rowcount = db.get_bind().dialect.supports_sane_multi_rowcount
    try:
        before = None if sane_rowcount else count_sales(db)
        result = db.execute(stmt, records)
        inserted = result.rowcount if sane_rowcount else None
        db.commit()
        if inserted is None:
            inserted = count_sales(db) - before
        return inserted, 0
    except SQLAlchemyError as e:
        db.rollback()
        logger.warning(f"Batch insert failed, retrying row by row: {e}")

    inserted = failed = 0
    for record in records:
        try:
            result = db.execute(stmt, record)
            inserted += result.rowcount
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            failed += 1
            logger.warning(f"Error importing row {record['transaction_id']}: {e}")
    return inserted, failed


def import_sales_csv(
    db: Session,
    csv_path: str,
    batch_size: int = 1000,
    replace: bool = False,
    skip_if_populated: bool = False,
) -> ImportResult:
    """
    Import a sales CSV into the database.

    Args:
        db: open session
        csv_path: path to the source CSV
        batch_size: rows per INSERT
        replace: delete all existing rows first
        skip_if_populated: do nothing if the table already has rows
    """
    result = ImportResult()

    if not os.path.exists(csv_path):
        raise CsvImportError(f"CSV file not found at: {csv_path}")

    if skip_if_populated:
        existing = count_sales(db)
        if existing > 0:
            logger.info(f"Database already has {existing} records. Skipping import.")
            return result

    if replace:
        db.execute(delete(Sale))
        db.commit()
        logger.info("Cleared existing sales records")

    logger.info(f"Starting CSV import from {csv_path}...")
    next_progress = PROGRESS_EVERY

    try:
        with pd.read_csv(
            csv_path,
            dtype=str,
            keep_default_na=False,
            chunksize=batch_size,
        ) as reader:
            for chunk in reader:
                if "Transaction ID" not in chunk.columns:
                    raise CsvImportError("CSV is missing the 'Transaction ID' column")

                records = []
                for row in chunk.to_dict(orient="records"):
                    result.read += 1
                    try:
                        records.append(parse_row(row))
                    except ValueError as e:
                        result.skipped += 1
                        logger.warning(f"Skipping row {result.read}: {e}")

                if records:
                    inserted, failed = _insert_batch(db, records)
                    result.imported += inserted
                    result.skipped += failed

                if result.read >= next_progress:
                    logger.info(f"Imported {result.imported} of {result.read} records...")
                    next_progress += PROGRESS_EVERY
    except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as e:
        raise CsvImportError(f"Could not read CSV {csv_path}: {e}") from e

    logger.info(
        f"Import complete. read={result.read} imported={result.imported} "
        f"duplicates={result.duplicates} skipped={result.skipped}"
    )
    return result


"""
Sales Filter-Predicate Builder.

Translates the dashboard's query parameters into SQLAlchemy clauses over the
`sales` table. Every literal coming from the request is a bound parameter;
only the fixed columns and operators below ever reach the SQL text.

Used by both the list and the summary queries:
- strict=True  (list)    → malformed dates and inverted ranges raise InvalidFilterError
- strict=False (summary) → malformed dates are dropped, inverted ranges just match nothing
Malformed or negative ages are dropped in both modes.
"""

import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional

from sqlalchemy import or_
from sqlalchemy.sql import Select
from sqlalchemy.sql.elements import ColumnElement

from app.models.sale import Sale

logger = logging.getLogger(__name__)

AGE_RANGE_ERROR = "Invalid age range: minimum age cannot be greater than maximum age"
DATE_RANGE_ERROR = "Invalid date range: start date cannot be after end date"

LIKE_ESCAPE = "\\"

# Largest value a 64-bit INTEGER column or LIMIT/OFFSET can hold
SQL_INT_MAX = 2**63 - 1

# Multi-select filters: parameter attribute → column matched with IN (...)
CATEGORICAL_FILTERS = (
    ("regions", Sale.customer_region),
    ("genders", Sale.gender),
    ("categories", Sale.product_category),
    ("payment_methods", Sale.payment_method),
)


class InvalidFilterError(ValueError):
    """Client input that the strict (list) policy rejects with HTTP 400."""


@dataclass(frozen=True)
class SalesFilterParams:
    """Raw filter parameters exactly as received in the query string."""
    search: str = ""
    regions: str = ""
    genders: str = ""
    categories: str = ""
    tags: str = ""
    payment_methods: str = ""
    age_min: str = ""
    age_max: str = ""
    date_from: str = ""
    date_to: str = ""


@dataclass
class SalesPredicate:
    """AND of the clauses produced for the supplied filters."""
    clauses: list[ColumnElement[bool]] = field(default_factory=list)

    def apply(self, stmt: Select) -> Select:
        """Restrict a SELECT by this predicate; no clauses means no WHERE at all."""
        if not self.clauses:
            return stmt
        return stmt.where(*self.clauses)


def split_multi_value(raw: Optional[str]) -> list[str]:
    """'North,,South' → ['North', 'South']. Tokens are otherwise kept verbatim."""
    if not raw:
        return []
    return [token for token in raw.split(",") if token]


def parse_int(raw: Optional[str]) -> Optional[int]:
    """Integer value of a query parameter, or None when absent or not a number."""
    if raw is None or not str(raw).strip():
        return None
    try:
        return int(raw)
    except (TypeError, ValueError):
        return None


def parse_date(raw: Optional[str]) -> Optional[date]:
    """Calendar date from an ISO date or datetime string, or None when unparseable."""
    if not raw or not raw.strip():
        return None
    value = raw.strip()
    try:
        return date.fromisoformat(value)
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(value).date()
    except ValueError:
        return None


def _like_pattern(term: str) -> str:
    """Wrap a literal substring in % wildcards, escaping LIKE metacharacters."""
    escaped = (
        term.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )
    return f"%{escaped}%"


def build_sales_predicate(params: SalesFilterParams, strict: bool = True) -> SalesPredicate:
    """
    Build the WHERE clauses for a set of sales filters.

    In strict mode the checks run in a fixed order and the first failure wins:
    age inversion, dateFrom format, dateTo format, date inversion.
    """
    age_min = parse_int(params.age_min)
    age_max = parse_int(params.age_max)
    date_from = parse_date(params.date_from)
    date_to = parse_date(params.date_to)

    if strict:
        if age_min is not None and age_max is not None and age_min > age_max:
            raise InvalidFilterError(AGE_RANGE_ERROR)
        if params.date_from and date_from is None:
            raise InvalidFilterError("Invalid date format for dateFrom")
        if params.date_to and date_to is None:
            raise InvalidFilterError("Invalid date format for dateTo")
        if date_from is not None and date_to is not None and date_from > date_to:
            raise InvalidFilterError(DATE_RANGE_ERROR)

    predicate = SalesPredicate()

    # Search (customer name or phone number)
    if params.search:
        pattern = _like_pattern(params.search)
        predicate.clauses.append(or_(
            Sale.customer_name.ilike(pattern, escape=LIKE_ESCAPE),
            Sale.phone_number.ilike(pattern, escape=LIKE_ESCAPE),
        ))

    for attr, column in CATEGORICAL_FILTERS:
        values = split_multi_value(getattr(params, attr))
        if values:
            predicate.clauses.append(column.in_(values))

    # Tags match as substrings of the comma-joined column; any tag is enough
    tags = split_multi_value(params.tags)
    if tags:
        predicate.clauses.append(or_(*[
            Sale.tags.ilike(_like_pattern(tag), escape=LIKE_ESCAPE) for tag in tags
        ]))

    # Oversized ages are clamped to what the driver can bind
    if age_min is not None and age_min >= 0:
        predicate.clauses.append(Sale.age >= min(age_min, SQL_INT_MAX))
    if age_max is not None and age_max >= 0:
        predicate.clauses.append(Sale.age <= min(age_max, SQL_INT_MAX))

    if date_from is not None:
        predicate.clauses.append(Sale.date >= date_from.isoformat())
    if date_to is not None:
        predicate.clauses.append(Sale.date <= date_to.isoformat())

    logger.debug(f"Built sales predicate with {len(predicate.clauses)} clause(s) (strict={strict})")
    return predicate

"""
Sales Query Service.

The three read paths behind the dashboard:
1. list_sales          – filtered, sorted, paginated rows with a pagination envelope
2. get_filter_options  – every selectable filter value over the whole table
3. get_summary         – unit / amount / discount / record totals for the filtered set
"""

import logging
import math
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from app.core.config import get_settings
from app.models.sale import Sale
from app.schemas.sales import (
    FilterOptionsResponse,
    Pagination,
    SaleListResponse,
    SaleResponse,
    SummaryResponse,
)
from app.services.sales_filters import (
    SQL_INT_MAX,
    InvalidFilterError,
    SalesFilterParams,
    build_sales_predicate,
)

logger = logging.getLogger(__name__)
settings = get_settings()

# Whitelisted sort keys; anything else falls back to date
SORT_FIELDS = {
    "date": Sale.date,
    "quantity": Sale.quantity,
    "customer_name": Sale.customer_name,
}
DEFAULT_SORT_FIELD = "date"


def resolve_sort(sort_by: Optional[str], sort_order: Optional[str]) -> tuple[str, str]:
    """Normalise sortBy / sortOrder to a whitelisted field and ASC|DESC."""
    field = sort_by if sort_by in SORT_FIELDS else DEFAULT_SORT_FIELD
    direction = "ASC" if (sort_order or "").upper() == "ASC" else "DESC"
    return field, direction


def parse_pagination(page: Optional[str], page_size: Optional[str]) -> tuple[int, int]:
    """Validate page (>= 1) and pageSize (1..MAX_PAGE_SIZE); missing values take defaults."""
    try:
        page_num = int(page) if page not in (None, "") else 1
    except (TypeError, ValueError):
        page_num = None
    # The OFFSET of the last allowed page must still fit in a 64-bit integer
    if page_num is None or page_num < 1 or page_num > SQL_INT_MAX // settings.MAX_PAGE_SIZE:
        raise InvalidFilterError("Invalid page number")

    try:
        size = int(page_size) if page_size not in (None, "") else settings.DEFAULT_PAGE_SIZE
    except (TypeError, ValueError):
        size = None
    if size is None or size < 1 or size > settings.MAX_PAGE_SIZE:
        raise InvalidFilterError(
            f"Invalid page size (must be between 1 and {settings.MAX_PAGE_SIZE})"
        )
    return page_num, size


def list_sales(
    db: Session,
    filters: SalesFilterParams,
    sort_by: Optional[str] = None,
    sort_order: Optional[str] = None,
    page: Optional[str] = None,
    page_size: Optional[str] = None,
) -> SaleListResponse:
    """
    Fetch one page of sales matching the filters.

    All validation happens before the first query, so a rejected request
    never touches the database.
    """
    predicate = build_sales_predicate(filters, strict=True)
    page_num, size = parse_pagination(page, page_size)
    field, direction = resolve_sort(sort_by, sort_order)

    total = db.execute(
        predicate.apply(select(func.count()).select_from(Sale))
    ).scalar_one()

    column = SORT_FIELDS[field]
    if direction == "ASC":
        ordering = (column.asc(), Sale.transaction_id.asc())
    else:
        ordering = (column.desc(), Sale.transaction_id.desc())

    rows = db.execute(
        predicate.apply(select(Sale))
        .order_by(*ordering)
        .limit(size)
        .offset((page_num - 1) * size)
    ).scalars().all()

    logger.info(
        f"Sales query: {total} match(es), page {page_num}/{math.ceil(total / size)}, "
        f"sort={field} {direction}"
    )

    return SaleListResponse(
        data=[SaleResponse.model_validate(row) for row in rows],
        pagination=Pagination(
            page=page_num,
            pageSize=size,
            total=total,
            totalPages=math.ceil(total / size),
        ),
    )


def _distinct_values(db: Session, column) -> list[str]:
    stmt = select(column).where(column.is_not(None)).distinct().order_by(column)
    return list(db.execute(stmt).scalars().all())


def _flatten_tags(db: Session) -> list[str]:
    """Every individual tag token across the table, trimmed, deduplicated and sorted."""
    stmt = select(Sale.tags).where(Sale.tags.is_not(None), Sale.tags != "").distinct()
    tag_set = set()
    for raw in db.execute(stmt).scalars():
        for tag in raw.split(","):
            tag = tag.strip()
            if tag:
                tag_set.add(tag)
    return sorted(tag_set)


def get_filter_options(db: Session) -> FilterOptionsResponse:
    """
    Filter choices over the entire table, independent of any active filters.
    The sub-queries share no state; any one failing fails the whole call.
    """
    min_age, max_age = db.execute(select(func.min(Sale.age), func.max(Sale.age))).one()
    min_date, max_date = db.execute(select(func.min(Sale.date), func.max(Sale.date))).one()

    return FilterOptionsResponse(
        regions=_distinct_values(db, Sale.customer_region),
        genders=_distinct_values(db, Sale.gender),
        categories=_distinct_values(db, Sale.product_category),
        paymentMethods=_distinct_values(db, Sale.payment_method),
        tags=_flatten_tags(db),
        minAge=min_age,
        maxAge=max_age,
        minDate=min_date,
        maxDate=max_date,
    )


def get_summary(db: Session, filters: SalesFilterParams) -> SummaryResponse:
    """Totals for the filtered set; SUMs are coalesced so an empty match yields zeros."""
    predicate = build_sales_predicate(filters, strict=False)

    stmt = select(
        func.coalesce(func.sum(Sale.quantity), 0),
        func.coalesce(func.sum(Sale.final_amount), 0),
        func.coalesce(func.sum(Sale.total_amount - Sale.final_amount), 0),
        func.count(),
    ).select_from(Sale)

    total_units, total_amount, total_discount, total_records = db.execute(
        predicate.apply(stmt)
    ).one()

    return SummaryResponse(
        totalUnits=int(total_units),
        totalAmount=float(total_amount),
        totalDiscount=float(total_discount),
        totalRecords=int(total_records),
    )

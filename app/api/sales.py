"""
Sales API endpoints.
Search, filter, sort and paginate transactions; list filter options; summarise.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.schemas.sales import FilterOptionsResponse, SaleListResponse, SummaryResponse
from app.services import sales_service
from app.services.sales_filters import InvalidFilterError, SalesFilterParams

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/sales", tags=["Sales"])


def get_filter_params(
    search: str = Query("", description="Substring of customer name or phone number"),
    regions: str = Query("", description="Comma-separated customer regions"),
    genders: str = Query("", description="Comma-separated genders"),
    age_min: str = Query("", alias="ageMin", description="Minimum age (inclusive)"),
    age_max: str = Query("", alias="ageMax", description="Maximum age (inclusive)"),
    categories: str = Query("", description="Comma-separated product categories"),
    tags: str = Query("", description="Comma-separated tags; any one must appear"),
    payment_methods: str = Query("", alias="paymentMethods", description="Comma-separated payment methods"),
    date_from: str = Query("", alias="dateFrom", description="Start date (YYYY-MM-DD, inclusive)"),
    date_to: str = Query("", alias="dateTo", description="End date (YYYY-MM-DD, inclusive)"),
) -> SalesFilterParams:
    """
    Collect the shared filter parameters.
    Everything is taken as a raw string so that malformed values follow the
    endpoint's own policy instead of failing framework validation.
    """
    return SalesFilterParams(
        search=search,
        regions=regions,
        genders=genders,
        categories=categories,
        tags=tags,
        payment_methods=payment_methods,
        age_min=age_min,
        age_max=age_max,
        date_from=date_from,
        date_to=date_to,
    )


@router.get("", response_model=SaleListResponse)
def list_sales(
    filters: SalesFilterParams = Depends(get_filter_params),
    sort_by: str = Query("date", alias="sortBy", description="date | quantity | customer_name"),
    sort_order: str = Query("DESC", alias="sortOrder", description="ASC | DESC"),
    page: str = Query("1", description="Page number, starting at 1"),
    page_size: str = Query("10", alias="pageSize", description="Rows per page (1-100)"),
    db: Session = Depends(get_db),
):
    """Get sales with search, filters, sorting, and pagination."""
    try:
        return sales_service.list_sales(
            db,
            filters,
            sort_by=sort_by,
            sort_order=sort_order,
            page=page,
            page_size=page_size,
        )
    except InvalidFilterError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except SQLAlchemyError:
        logger.exception("Error getting sales")
        raise HTTPException(status_code=500, detail="Failed to get sales data")


@router.get("/filters", response_model=FilterOptionsResponse)
def get_filter_options(db: Session = Depends(get_db)):
    """Get every available filter value, for populating the dashboard dropdowns."""
    try:
        return sales_service.get_filter_options(db)
    except SQLAlchemyError:
        logger.exception("Error getting filter options")
        raise HTTPException(status_code=500, detail="Failed to get filter options")


@router.get("/summary", response_model=SummaryResponse)
def get_summary(
    filters: SalesFilterParams = Depends(get_filter_params),
    db: Session = Depends(get_db),
):
    """Get summary statistics for the currently filtered sales."""
    try:
        return sales_service.get_summary(db, filters)
    except SQLAlchemyError:
        logger.exception("Error getting summary")
        raise HTTPException(status_code=500, detail="Failed to get summary statistics")

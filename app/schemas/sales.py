"""Pydantic schemas for the sales list, filter options and summary responses."""

from typing import Optional
from pydantic import BaseModel, Field


class SaleResponse(BaseModel):
    """Single sales record; keys mirror the table's column names."""
    transaction_id: int = Field(..., description="Transaction identifier")
    date: Optional[str] = Field(None, description="Transaction date (YYYY-MM-DD)")
    customer_id: Optional[str] = None
    customer_name: Optional[str] = None
    phone_number: Optional[str] = None
    gender: Optional[str] = None
    age: Optional[int] = None
    customer_region: Optional[str] = None
    customer_type: Optional[str] = None
    product_id: Optional[str] = None
    product_name: Optional[str] = None
    brand: Optional[str] = None
    product_category: Optional[str] = None
    tags: Optional[str] = Field(None, description="Comma-separated tags")
    quantity: Optional[int] = None
    price_per_unit: Optional[float] = None
    discount_percentage: Optional[float] = None
    total_amount: Optional[float] = None
    final_amount: Optional[float] = None
    payment_method: Optional[str] = None
    order_status: Optional[str] = None
    delivery_type: Optional[str] = None
    store_id: Optional[str] = None
    store_location: Optional[str] = None
    salesperson_id: Optional[str] = None
    employee_name: Optional[str] = None

    model_config = {"from_attributes": True}


class Pagination(BaseModel):
    """Pagination envelope returned alongside list results."""
    page: int
    pageSize: int
    total: int
    totalPages: int


class SaleListResponse(BaseModel):
    """One page of sales records."""
    data: list[SaleResponse]
    pagination: Pagination


class FilterOptionsResponse(BaseModel):
    """All values the dashboard filters can offer, computed over the whole table."""
    regions: list[str] = Field(default_factory=list)
    genders: list[str] = Field(default_factory=list)
    categories: list[str] = Field(default_factory=list)
    paymentMethods: list[str] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    minAge: Optional[int] = Field(None, description="Youngest customer age, null on an empty table")
    maxAge: Optional[int] = None
    minDate: Optional[str] = Field(None, description="Earliest transaction date, null on an empty table")
    maxDate: Optional[str] = None


class SummaryResponse(BaseModel):
    """Aggregates over the filtered result set; zeros when nothing matches."""
    totalUnits: int = Field(0, description="SUM(quantity)")
    totalAmount: float = Field(0.0, description="SUM(final_amount)")
    totalDiscount: float = Field(0.0, description="SUM(total_amount - final_amount)")
    totalRecords: int = Field(0, description="COUNT(*)")


class HealthResponse(BaseModel):
    status: str
    database: str
    environment: str

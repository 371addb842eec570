"""
Sale model: one row per retail transaction.
Rows are written only by the CSV import job and never updated afterwards.
"""

from typing import Optional

from sqlalchemy import String, Float, Integer
from sqlalchemy.orm import Mapped, mapped_column

from app.core.database import Base


class Sale(Base):
    __tablename__ = "sales"

    transaction_id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=False,
        doc="Transaction identifier from the source dataset"
    )
    date: Mapped[Optional[str]] = mapped_column(
        String(32),
        index=True,
        doc="Transaction date as an ISO string (YYYY-MM-DD)"
    )

    # Customer
    customer_id: Mapped[Optional[str]] = mapped_column(String(64))
    customer_name: Mapped[Optional[str]] = mapped_column(String(255), doc="Search target")
    phone_number: Mapped[Optional[str]] = mapped_column(String(32), doc="Search target")
    gender: Mapped[Optional[str]] = mapped_column(String(32), index=True)
    age: Mapped[Optional[int]] = mapped_column(Integer, index=True)
    customer_region: Mapped[Optional[str]] = mapped_column(String(64), index=True)
    customer_type: Mapped[Optional[str]] = mapped_column(String(64))

    # Product
    product_id: Mapped[Optional[str]] = mapped_column(String(64))
    product_name: Mapped[Optional[str]] = mapped_column(String(255))
    brand: Mapped[Optional[str]] = mapped_column(String(128))
    product_category: Mapped[Optional[str]] = mapped_column(String(128), index=True)
    tags: Mapped[Optional[str]] = mapped_column(
        String(512),
        doc="Comma-separated tag tokens, e.g. 'organic,skincare'"
    )

    # Amounts
    quantity: Mapped[Optional[int]] = mapped_column(Integer)
    price_per_unit: Mapped[Optional[float]] = mapped_column(Float)
    discount_percentage: Mapped[Optional[float]] = mapped_column(Float)
    total_amount: Mapped[Optional[float]] = mapped_column(Float, doc="Amount before discount")
    final_amount: Mapped[Optional[float]] = mapped_column(Float, doc="Amount after discount")

    # Order
    payment_method: Mapped[Optional[str]] = mapped_column(String(64), index=True)
    order_status: Mapped[Optional[str]] = mapped_column(String(64))
    delivery_type: Mapped[Optional[str]] = mapped_column(String(64))

    # Store
    store_id: Mapped[Optional[str]] = mapped_column(String(64))
    store_location: Mapped[Optional[str]] = mapped_column(String(128))
    salesperson_id: Mapped[Optional[str]] = mapped_column(String(64))
    employee_name: Mapped[Optional[str]] = mapped_column(String(255))

    def __repr__(self) -> str:
        return (
            f"<Sale(id={self.transaction_id}, date={self.date}, "
            f"customer={self.customer_name}, amount={self.final_amount})>"
        )

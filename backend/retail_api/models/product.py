"""
Online Retail API - Product SQLAlchemy Model
=============================================

What:  ORM model representing the `online_retail_data` table.
Who:   Used by ProductService for CRUD statements and by Alembic for schema management.

Table Design Rationale:
    - stock_code is the natural key and the primary key. There is no surrogate
      id; the primary key constraint is what rejects duplicate inserts.
    - invoice_date is a naive timestamp holding UTC. Schemas normalize aware
      datetimes before they reach the model.
    - customer_id is text: source data mixes numeric and alphanumeric ids.
    - unit_price is a double so JSON numbers round-trip unchanged.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, Float, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from retail_api.database import Base


class Product(Base):
    """
    One row of online retail transaction data, keyed by stock code.

    Lifecycle:
        Created by POST, only `description` is ever mutated (PUT),
        removed by DELETE. No soft delete, no history.
    """

    __tablename__ = "online_retail_data"

    stock_code: Mapped[str] = mapped_column(
        String(32),
        primary_key=True,
        comment="Natural key of the product",
    )
    invoice_no: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
    )
    description: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
        comment="The only field mutable after creation",
    )
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    invoice_date: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=False),
        nullable=True,
        comment="Invoice timestamp (UTC, naive)",
    )
    unit_price: Mapped[float] = mapped_column(Float, nullable=False)
    customer_id: Mapped[str] = mapped_column(String(32), nullable=False)
    country: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)

    def __repr__(self) -> str:
        return (
            f"<Product(stock_code='{self.stock_code}', invoice_no='{self.invoice_no}', "
            f"quantity={self.quantity})>"
        )

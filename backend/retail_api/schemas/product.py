"""
Online Retail API - Pydantic Request/Response Schemas
======================================================

What:  Pydantic models defining the API contract for the product resource.
Why:   Loosely typed JSON bodies are validated into explicit records before
       they reach the service layer, and the same models drive the OpenAPI
       document served at /api-docs.
How:   FastAPI validates request bodies against the *Create / *Update models
       and serializes responses through the *Response models. Failures raise
       RequestValidationError, which main.py maps to 400.

Design Decision:
    Schemas are separate from the SQLAlchemy model because the create
    contract (description required, numbers must be JSON numbers) is stricter
    than the table (description nullable).
"""

from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import BaseModel, Field, StrictStr, ValidationInfo, field_validator

# Bounds of the 32-bit INTEGER quantity column
QUANTITY_MIN = -(2**31)
QUANTITY_MAX = 2**31 - 1


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class ProductCreate(BaseModel):
    """
    What:  Full payload for POST /products.

    Required: invoice_no, stock_code, description, quantity, unit_price, customer_id
    Optional: invoice_date, country

    Numeric fields accept JSON numbers only. "6" or true is a validation
    error, not a coercion. unit_price must be finite and quantity must fit
    the column.
    """
    invoice_no: str = Field(min_length=1, max_length=32, description="Invoice number", examples=["536365"])
    stock_code: str = Field(
        min_length=1,
        max_length=32,
        description="Product stock code (unique natural key)",
        examples=["85123A"],
    )
    description: str = Field(
        description="Product description",
        examples=["WHITE HANGING HEART T-LIGHT HOLDER"],
    )
    quantity: int = Field(
        ge=QUANTITY_MIN,
        le=QUANTITY_MAX,
        description="Quantity invoiced (negative for returns)",
        examples=[6],
    )
    invoice_date: Optional[datetime] = Field(
        default=None,
        description="Invoice date and time (ISO 8601)",
        examples=["2010-12-01T08:26:00"],
    )
    unit_price: float = Field(allow_inf_nan=False, description="Unit price", examples=[2.55])
    customer_id: str = Field(
        min_length=1,
        max_length=32,
        description="Customer identifier (integers are accepted and stored as text)",
        examples=["17850"],
    )
    country: Optional[str] = Field(
        default=None,
        max_length=64,
        description="Customer country",
        examples=["United Kingdom"],
    )

    @field_validator("quantity", "unit_price", mode="before")
    @classmethod
    def require_json_number(cls, v: Any, info: ValidationInfo) -> Any:
        """Rejects strings and booleans before Pydantic's lax numeric coercion."""
        if isinstance(v, bool) or not isinstance(v, (int, float)):
            raise ValueError(f"{info.field_name} must be a number")
        return v

    @field_validator("customer_id", mode="before")
    @classmethod
    def normalize_customer_id(cls, v: Any) -> Any:
        if isinstance(v, bool):
            raise ValueError("customer_id must be a string or an integer")
        if isinstance(v, int):
            return str(v)
        return v

    @field_validator("invoice_date")
    @classmethod
    def to_naive_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        """Stores aware datetimes as naive UTC to match the column type."""
        if v is not None and v.tzinfo is not None:
            return v.astimezone(timezone.utc).replace(tzinfo=None)
        return v


class ProductDescriptionUpdate(BaseModel):
    """
    What:  Body for PUT /products/{stock_code}.

    Only the description is mutable. Other keys in the body are ignored, so a
    client echoing a full record back cannot change anything else.
    """
    description: StrictStr = Field(description="New product description", examples=["Updated"])


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class ProductResponse(BaseModel):
    """Full representation of one `online_retail_data` row."""
    invoice_no: str = Field(description="Invoice number")
    stock_code: str = Field(description="Product stock code (unique natural key)")
    description: Optional[str] = Field(default=None, description="Product description")
    quantity: int = Field(description="Quantity invoiced")
    invoice_date: Optional[datetime] = Field(default=None, description="Invoice date and time")
    unit_price: float = Field(description="Unit price")
    customer_id: str = Field(description="Customer identifier")
    country: Optional[str] = Field(default=None, description="Customer country")

    model_config = {"from_attributes": True}


class DeleteResponse(BaseModel):
    """Confirmation returned by DELETE /products/{stock_code}."""
    message: str = Field(description="Human-readable confirmation")
    stock_code: str = Field(description="Stock code of the deleted product")


class ErrorResponse(BaseModel):
    """
    What:  Standardized error body for all API errors.

    Example:
        {
            "error": "conflict",
            "message": "product with ID '85123A' already exists",
            "request_id": "a1b2c3d4"
        }
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[Any] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """Service and database status returned by GET /health."""
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")

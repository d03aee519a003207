"""
Online Retail API - Product Service
====================================

What:  Resource logic for the `online_retail_data` table: list, get, create,
       update description, delete.
Why:   Keeps SQL and error translation out of the route handlers so both can
       be tested independently.
How:   Each method runs one parameterized statement on the request's session,
       commits mutations immediately, and converts every SQLAlchemy failure
       into an application exception.

Error Translation:
    None / rowcount == 0     → NotFoundError  (404)
    unique/primary key violation → ConflictError (400)
    other IntegrityError     → DatabaseError  (500)
    any other SQLAlchemyError → DatabaseError (500, details logged only)

Design Decision:
    ProductService is stateless. The session is passed into every call, so
    there is no shared mutable state between concurrent requests.
"""

import logging
from typing import List

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from retail_api.config import settings
from retail_api.exceptions import ConflictError, DatabaseError, NotFoundError, ValidationError
from retail_api.models.product import Product
from retail_api.schemas.product import (
    DeleteResponse,
    ProductCreate,
    ProductResponse,
)

logger = logging.getLogger(__name__)

# Driver errors arrive wrapped as SQLAlchemyError; a refused connection can
# surface as a bare OSError from the socket layer
PERSISTENCE_ERRORS = (SQLAlchemyError, OSError)

# SQLSTATE for unique_violation, which also covers the primary key
UNIQUE_VIOLATION = "23505"


def is_duplicate_key(error: IntegrityError) -> bool:
    """
    True when an IntegrityError comes from a unique or primary key constraint.

    asyncpg exposes the SQLSTATE on the wrapped exception; SQLite only
    reports it in the message ("UNIQUE constraint failed: ...").
    """
    sqlstate = getattr(error.orig, "sqlstate", None) or getattr(error.orig, "pgcode", None)
    if sqlstate:
        return sqlstate == UNIQUE_VIOLATION
    message = str(error.orig).lower()
    return "unique constraint" in message or "duplicate key" in message


class ProductService:
    """
    Business logic layer for product operations.

    Responsibilities:
        - list_products(): bounded listing, persistence default order
        - get_product(): single lookup by stock_code
        - create_product(): insert, duplicate key → ConflictError
        - update_description(): the only mutation besides delete
        - delete_product(): delete by key, missing key → NotFoundError
    """

    async def list_products(self, db: AsyncSession, limit: int) -> List[ProductResponse]:
        """
        Return at most `limit` products, clamped to the configured maximum.

        Query plan:
            SELECT ... FROM online_retail_data LIMIT :limit

        Raises:
            ValidationError: limit below 1 (→ 400)
            DatabaseError: Query execution failed (→ 500)
        """
        if limit < 1:
            raise ValidationError(message="limit must be at least 1", field="limit")
        effective_limit = settings.clamp_products_limit(limit)
        try:
            result = await db.execute(select(Product).limit(effective_limit))
            products = result.scalars().all()
        except PERSISTENCE_ERRORS as e:
            logger.error("Database error listing products: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not retrieve products. Please try again.",
                context={"error_type": type(e).__name__, "limit": effective_limit},
            )

        return [ProductResponse.model_validate(product) for product in products]

    async def get_product(self, db: AsyncSession, stock_code: str) -> ProductResponse:
        """
        Retrieve a single product by its natural key.

        Raises:
            NotFoundError: No row with this stock_code (→ 404)
            DatabaseError: Query execution failed (→ 500)
        """
        product = await self._fetch(db, stock_code)
        return ProductResponse.model_validate(product)

    async def create_product(self, db: AsyncSession, payload: ProductCreate) -> ProductResponse:
        """
        Insert a new product row.

        Duplicate detection relies on the primary key constraint rather than
        a SELECT beforehand, so two concurrent creates of the same stock_code
        cannot both succeed.

        Raises:
            ConflictError: stock_code already exists (→ 400)
            DatabaseError: Any other insert/commit failure (→ 500)
        """
        product = Product(**payload.model_dump())
        try:
            db.add(product)
            await db.commit()
        except IntegrityError as e:
            await db.rollback()
            if not is_duplicate_key(e):
                logger.error(
                    "Integrity error creating product %s: %s",
                    payload.stock_code,
                    str(e),
                    exc_info=True,
                )
                raise DatabaseError(
                    message="Could not create the product. Please try again.",
                    context={"stock_code": payload.stock_code, "error_type": type(e).__name__},
                )
            logger.info("Duplicate stock_code rejected: %s", payload.stock_code)
            raise ConflictError(
                resource="product",
                resource_id=payload.stock_code,
                context={"constraint_error": str(e.orig)},
            )
        except PERSISTENCE_ERRORS as e:
            await db.rollback()
            logger.error(
                "Database error creating product %s: %s",
                payload.stock_code,
                str(e),
                exc_info=True,
            )
            raise DatabaseError(
                message="Could not create the product. Please try again.",
                context={"stock_code": payload.stock_code, "error_type": type(e).__name__},
            )

        logger.info("Product created: %s", product.stock_code)
        return ProductResponse.model_validate(product)

    async def update_description(
        self,
        db: AsyncSession,
        stock_code: str,
        description: str,
    ) -> ProductResponse:
        """
        Replace the description of an existing product.

        No other column is touched: the ORM only emits an UPDATE for
        attributes that changed.

        Raises:
            NotFoundError: No row with this stock_code (→ 404)
            DatabaseError: Update/commit failed (→ 500)
        """
        product = await self._fetch(db, stock_code)
        try:
            product.description = description
            await db.commit()
        except PERSISTENCE_ERRORS as e:
            await db.rollback()
            logger.error(
                "Database error updating product %s: %s", stock_code, str(e), exc_info=True
            )
            raise DatabaseError(
                message="Could not update the product. Please try again.",
                context={"stock_code": stock_code, "error_type": type(e).__name__},
            )

        logger.info("Product %s description updated", stock_code)
        return ProductResponse.model_validate(product)

    async def delete_product(self, db: AsyncSession, stock_code: str) -> DeleteResponse:
        """
        Delete a product by key.

        Query plan:
            DELETE FROM online_retail_data WHERE stock_code = :stock_code

        Raises:
            NotFoundError: Zero rows affected; nothing was changed (→ 404)
            DatabaseError: Statement/commit failed (→ 500)
        """
        try:
            result = await db.execute(
                delete(Product).where(Product.stock_code == stock_code)
            )
            deleted = result.rowcount
            if deleted:
                await db.commit()
        except PERSISTENCE_ERRORS as e:
            await db.rollback()
            logger.error(
                "Database error deleting product %s: %s", stock_code, str(e), exc_info=True
            )
            raise DatabaseError(
                message="Could not delete the product. Please try again.",
                context={"stock_code": stock_code, "error_type": type(e).__name__},
            )

        if not deleted:
            raise NotFoundError(resource="product", resource_id=stock_code)

        logger.info("Product deleted: %s", stock_code)
        return DeleteResponse(
            message=f"Product '{stock_code}' deleted successfully",
            stock_code=stock_code,
        )

    async def _fetch(self, db: AsyncSession, stock_code: str) -> Product:
        try:
            result = await db.execute(
                select(Product).where(Product.stock_code == stock_code)
            )
            product = result.scalar_one_or_none()
        except PERSISTENCE_ERRORS as e:
            logger.error(
                "Database error fetching product %s: %s", stock_code, str(e), exc_info=True
            )
            raise DatabaseError(
                message="Could not retrieve the product. Please try again.",
                context={"stock_code": stock_code, "error_type": type(e).__name__},
            )

        if product is None:
            raise NotFoundError(resource="product", resource_id=stock_code)
        return product


# Stateless, one instance shared by all requests
product_service = ProductService()

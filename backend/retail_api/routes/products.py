"""
Online Retail API - Product Route Handlers
===========================================

What:  CRUD endpoints for the product resource under /products.
How:   Extract path/query/body, delegate to ProductService, return the
       response model. Error statuses come from the exception handlers in
       main.py, never from try/except in the handlers.

Route Inventory:
    GET    /products?limit=N          list (default 100, capped at 1000)
    GET    /products/{stock_code}     single product
    POST   /products                  create (201)
    PUT    /products/{stock_code}     update description only
    DELETE /products/{stock_code}     delete (200 + confirmation)

The summary/description/responses on each decorator are the source of the
OpenAPI document served at /api-docs.
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, Path, Query
from sqlalchemy.ext.asyncio import AsyncSession

from retail_api.config import settings
from retail_api.database import get_db_session
from retail_api.schemas.product import (
    DeleteResponse,
    ErrorResponse,
    ProductCreate,
    ProductDescriptionUpdate,
    ProductResponse,
)
from retail_api.services.product_service import product_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/products", tags=["Products"])

_SERVER_ERROR = {"description": "Server error", "model": ErrorResponse}
_NOT_FOUND = {"description": "Product not found", "model": ErrorResponse}
_BAD_REQUEST = {"description": "Invalid input", "model": ErrorResponse}


@router.get(
    "",
    response_model=List[ProductResponse],
    responses={400: _BAD_REQUEST, 500: _SERVER_ERROR},
    summary="Get all products",
    description=(
        "Returns up to `limit` products from online_retail_data. "
        f"Values above {settings.products_max_limit} are clamped; values below 1 are rejected."
    ),
)
async def list_products(
    limit: int = Query(
        default=settings.products_default_limit,
        description=f"Maximum number of products to return (capped at {settings.products_max_limit})",
    ),
    db: AsyncSession = Depends(get_db_session),
) -> List[ProductResponse]:
    return await product_service.list_products(db=db, limit=limit)


@router.get(
    "/{stock_code}",
    response_model=ProductResponse,
    responses={404: _NOT_FOUND, 500: _SERVER_ERROR},
    summary="Get a product by stock_code",
)
async def get_product(
    stock_code: str = Path(description="Stock code of the product", examples=["85123A"]),
    db: AsyncSession = Depends(get_db_session),
) -> ProductResponse:
    return await product_service.get_product(db=db, stock_code=stock_code)


@router.post(
    "",
    status_code=201,
    response_model=ProductResponse,
    responses={
        400: {
            "description": "Missing/invalid fields, or the stock_code already exists",
            "model": ErrorResponse,
        },
        500: _SERVER_ERROR,
    },
    summary="Add a new product",
)
async def create_product(
    payload: ProductCreate,
    db: AsyncSession = Depends(get_db_session),
) -> ProductResponse:
    """
    Create a product from a full record.

    Required fields are enforced by ProductCreate; the uniqueness of
    stock_code is enforced by the database and reported as 400.
    """
    logger.info("Create product request: stock_code=%s", payload.stock_code)
    return await product_service.create_product(db=db, payload=payload)


@router.put(
    "/{stock_code}",
    response_model=ProductResponse,
    responses={400: _BAD_REQUEST, 404: _NOT_FOUND, 500: _SERVER_ERROR},
    summary="Update a product",
    description="Replaces the description of a product. No other field can be changed.",
)
async def update_product(
    payload: ProductDescriptionUpdate,
    stock_code: str = Path(description="Stock code of the product", examples=["85123A"]),
    db: AsyncSession = Depends(get_db_session),
) -> ProductResponse:
    return await product_service.update_description(
        db=db,
        stock_code=stock_code,
        description=payload.description,
    )


@router.delete(
    "/{stock_code}",
    response_model=DeleteResponse,
    responses={404: _NOT_FOUND, 500: _SERVER_ERROR},
    summary="Delete a product",
    description="Deletes a product and returns a confirmation message.",
)
async def delete_product(
    stock_code: str = Path(description="Stock code of the product", examples=["85123A"]),
    db: AsyncSession = Depends(get_db_session),
) -> DeleteResponse:
    return await product_service.delete_product(db=db, stock_code=stock_code)

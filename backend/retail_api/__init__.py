"""
Online Retail API - Application Package Initializer
====================================================

What: Marks the `retail_api` directory as a Python package.
Who:  Imported by uvicorn, Alembic, pytest and the `python -m retail_api` entry point.

Architecture Note:
    The service is a thin layered CRUD backend over one table:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │        Services (Resource Logic)    │  ← Validation outcome → SQL
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘

    Routes translate HTTP to service calls, services translate service calls
    to parameterized statements, and the exception handlers in main.py
    translate failures back into HTTP status codes.
"""

__version__ = "1.0.0"

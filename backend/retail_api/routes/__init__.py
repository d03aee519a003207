# Routes package init
"""
Online Retail API - API Routes Package
=======================================

Route Inventory:
    - products.py: GET/POST /products, GET/PUT/DELETE /products/{stock_code}
    - health.py:   GET /health

Routes stay thin: read the request, call a service, return the response
model. Status codes for failures come from the global exception handlers.
"""

# Middleware package init
"""
Online Retail API - Middleware Package
=======================================

Cross-cutting concerns applied to every request.

Middleware Chain (outermost first):
    Request → [Request ID] → [Rate Limit] → [Logging] → [GZip] → [CORS] → Route Handler

    1. Request ID: set the correlation ID used by everything below,
       including 429 bodies
    2. Rate Limit: reject abusive clients before any route work
    3. Logging: one access line per request, tagged with the request ID
"""

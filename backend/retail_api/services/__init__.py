# Services package init
"""
Online Retail API - Services Layer
===================================

Resource logic between routes (HTTP) and the database (persistence).

Service Inventory:
    - ProductService: list/get/create/update-description/delete for online_retail_data

Services receive the request's AsyncSession as an argument and keep no
state of their own, so they can be unit-tested with a mocked session.
"""

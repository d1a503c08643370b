"""Orders module for the Fast Shopping API

Provides draft-to-order conversion and order read endpoints for the
storefront and the supplier/admin dashboard.
"""

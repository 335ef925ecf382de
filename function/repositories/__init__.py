# ============================================================================
# FUNCTION APP REPOSITORIES
# ============================================================================
# STATUS: Gateway - Database access layer
# PURPOSE: Repositories for the products and product_inventory tables
# CREATED: 19 OCT 2026
# ============================================================================
"""
Function App Repositories

Single-statement SQL wrappers. Transactions and batching are driven by
the catalog service.
"""

from function.repositories.base import FunctionRepository
from function.repositories.catalog_repo import CatalogRepository

__all__ = [
    "FunctionRepository",
    "CatalogRepository",
]

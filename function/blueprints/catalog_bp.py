# ============================================================================
# CATALOG BLUEPRINT
# ============================================================================
# STATUS: Gateway - Product and inventory endpoints
# PURPOSE: HTTP triggers for the shoe catalog
# CREATED: 19 OCT 2026
# ============================================================================
"""
Catalog Blueprint

Product endpoints:
- GET    /api/products[?brand=]            - List products with inventory
- POST   /api/products                     - Create one or many (admin)
- GET    /api/products/{id}                - Get product
- PUT    /api/products/{id}                - Partial update (admin)
- DELETE /api/products/{id}                - Delete with inventory (admin)
- PATCH  /api/products/{id}/inventory      - Adjust one size (admin)

Every trigger accepts all verbs and hands the request to CatalogRouter,
which answers OPTIONS, 404 and 405 itself. A catch-all route gives
unknown paths the same JSON 404 as the router.
"""

import logging

import azure.functions as func

from core.logging import log_context
from function.router import CatalogRequest, CatalogRouter

logger = logging.getLogger(__name__)
catalog_bp = func.Blueprint()

ALL_METHODS = ["GET", "POST", "PUT", "DELETE", "PATCH", "OPTIONS"]

_router = None


def get_router() -> CatalogRouter:
    """Router shared by the catalog triggers (lazy)."""
    global _router
    if _router is None:
        _router = CatalogRouter()
    return _router


def handle(req: func.HttpRequest, context: func.Context = None) -> func.HttpResponse:
    """Run one invocation through the router with invocation-scoped log context."""
    invocation_id = getattr(context, "invocation_id", None)
    with log_context(invocation_id=invocation_id):
        return get_router().dispatch(CatalogRequest.from_http(req))


@catalog_bp.route(route="products", methods=ALL_METHODS)
def products_collection(req: func.HttpRequest, context: func.Context) -> func.HttpResponse:
    """
    GET /api/products, POST /api/products
    """
    return handle(req, context)


@catalog_bp.route(route="products/{id}", methods=ALL_METHODS)
def products_item(req: func.HttpRequest, context: func.Context) -> func.HttpResponse:
    """
    GET | PUT | DELETE /api/products/{id}
    """
    return handle(req, context)


@catalog_bp.route(route="products/{id}/inventory", methods=ALL_METHODS)
def products_inventory(req: func.HttpRequest, context: func.Context) -> func.HttpResponse:
    """
    PATCH /api/products/{id}/inventory

    Body: {"size": 9.5, "quantity": 5} or {"size": 9.5, "delta": -1}
    """
    return handle(req, context)


@catalog_bp.route(route="{*path}", methods=ALL_METHODS)
def route_not_found(req: func.HttpRequest, context: func.Context) -> func.HttpResponse:
    """Any path no other trigger claims."""
    return handle(req, context)


__all__ = ["catalog_bp", "handle", "get_router"]

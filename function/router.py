# ============================================================================
# REQUEST ROUTER
# ============================================================================
# STATUS: Gateway - Route table and dispatch
# PURPOSE: Map normalized catalog requests to service operations
# CREATED: 19 OCT 2026
# ============================================================================
"""
Request Router

Turns a normalized request into one catalog operation and formats the
outcome. Order of checks:

    1. OPTIONS              -> 200, empty body (no auth)
    2. route lookup         -> 404 "Route not found."
    3. method lookup        -> 405
    4. authorization        -> 403 (before any connection is acquired)
    5. path id, JSON body   -> 400
    6. service call         -> success, or mapped CatalogError / 500

Routes:
    GET    products                    list
    POST   products                    create
    GET    products/{id}               get
    PUT    products/{id}               update
    DELETE products/{id}               delete
    PATCH  products/{id}/inventory     patch_inventory
    GET    images                      list_images
"""

import json
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Mapping, Optional, Tuple
from urllib.parse import urlparse

import azure.functions as func
from pydantic import BaseModel, ValidationError as PydanticValidationError

from core.errors import CatalogError, Forbidden, MethodNotAllowed, NotFound, ValidationError
from core.logging import log_context
from function.config import get_config
from function.guard import FORBIDDEN_MESSAGE, authorize, extract_claims
from function.models.requests import (
    InventoryPatch,
    ProductUpdate,
    describe_validation_error,
    parse_create_payload,
)
from function.models.responses import ImageListResponse, Product
from function.responses import empty_response, json_response, response_for_exception

logger = logging.getLogger(__name__)

ROUTE_NOT_FOUND = "Route not found."

# Message for unexpected (500) failures, per operation
SERVER_ERROR_MESSAGES = {
    "list": "Error fetching shoes.",
    "get": "Error fetching shoe.",
    "create": "Seeding/creation failed.",
    "update": "Error updating shoe.",
    "patch_inventory": "Error updating inventory.",
    "delete": "Error deleting shoe.",
    "list_images": "Error listing images",
}

BODY_OPERATIONS = frozenset({"create", "update", "patch_inventory"})


@dataclass
class CatalogRequest:
    """
    Transport-neutral view of one HTTP request.

    `path` excludes the host's /api prefix and surrounding slashes,
    e.g. "products/5/inventory".
    """

    method: str
    path: str
    headers: Mapping[str, str] = field(default_factory=dict)
    params: Mapping[str, str] = field(default_factory=dict)
    body: bytes = b""

    @classmethod
    def from_http(cls, req: func.HttpRequest) -> "CatalogRequest":
        path = urlparse(req.url).path.strip("/")
        if path == "api" or path.startswith("api/"):
            path = path[3:].lstrip("/")
        return cls(
            method=req.method.upper(),
            path=path,
            headers=req.headers,
            params=req.params,
            body=req.get_body() or b"",
        )

    def json(self) -> Any:
        """
        Parsed JSON body.

        Raises:
            ValidationError: Empty or malformed body
        """
        if not self.body or not self.body.strip():
            raise ValidationError("Request body is required.")
        try:
            return json.loads(self.body)
        except ValueError:
            raise ValidationError("Invalid JSON body")


# (pattern, {method: operation})
ROUTES: Tuple[Tuple[re.Pattern, Dict[str, str]], ...] = (
    (re.compile(r"^products$"), {"GET": "list", "POST": "create"}),
    (re.compile(r"^products/(?P<id>[^/]+)$"), {"GET": "get", "PUT": "update", "DELETE": "delete"}),
    (re.compile(r"^products/(?P<id>[^/]+)/inventory$"), {"PATCH": "patch_inventory"}),
    (re.compile(r"^images$"), {"GET": "list_images"}),
)


def match_route(method: str, path: str) -> Tuple[str, Optional[str]]:
    """
    Resolve (operation, raw id) for a method and path.

    Raises:
        NotFound: No route matches the path
        MethodNotAllowed: Path matches but not with this method
    """
    for pattern, methods in ROUTES:
        match = pattern.match(path.strip("/"))
        if not match:
            continue
        if method not in methods:
            raise MethodNotAllowed(f"Method {method} not allowed on /{path.strip('/')}.")
        return methods[method], match.groupdict().get("id")
    raise NotFound(ROUTE_NOT_FOUND)


def parse_product_id(raw: Optional[str]) -> int:
    if raw is None or not raw.strip():
        raise ValidationError("Shoe ID is required.", field="id")
    try:
        return int(raw)
    except ValueError:
        raise ValidationError("Shoe ID must be an integer.", field="id")


def _validated(model: type, body: Any) -> BaseModel:
    if not isinstance(body, dict):
        raise ValidationError("Request body must be a JSON object.")
    try:
        return model.model_validate(body)
    except PydanticValidationError as e:
        raise ValidationError(describe_validation_error(e))


class CatalogRouter:
    """
    Dispatches requests to the catalog and image services.

    Services are built on first use so rejected requests never touch
    the database or storage.

    Args:
        catalog_service_factory: Zero-arg callable returning a CatalogService
        image_service_factory: Zero-arg callable returning an ImageService
        admin_group: Group required for writes (default ADMIN_GROUP)
        claims_source: Trusted claims header source (default CLAIMS_SOURCE)
    """

    def __init__(
        self,
        catalog_service_factory: Optional[Callable[[], Any]] = None,
        image_service_factory: Optional[Callable[[], Any]] = None,
        admin_group: Optional[str] = None,
        claims_source: Optional[str] = None,
    ):
        self._catalog_service_factory = catalog_service_factory or _default_catalog_service
        self._image_service_factory = image_service_factory or _default_image_service
        self.admin_group = admin_group or get_config().admin_group
        self.claims_source = claims_source or get_config().claims_source

    def dispatch(self, request: CatalogRequest) -> func.HttpResponse:
        if request.method == "OPTIONS":
            return empty_response(200)

        try:
            operation, raw_id = match_route(request.method, request.path)
        except CatalogError as e:
            logger.info(f"{request.method} /{request.path}: {e.message}")
            return response_for_exception(e)

        with log_context(operation=operation, method=request.method, route=request.path):
            try:
                claims = extract_claims(request.headers, self.claims_source)
                if not authorize(claims, operation, self.admin_group):
                    raise Forbidden(FORBIDDEN_MESSAGE)

                product_id = parse_product_id(raw_id) if raw_id is not None else None
                body = request.json() if operation in BODY_OPERATIONS else None

                handler = getattr(self, f"_{operation}")
                if product_id is None:
                    status_code, result = handler(request, body)
                else:
                    with log_context(product_id=product_id):
                        status_code, result = handler(request, body, product_id)
                return json_response(result, status_code=status_code)

            except CatalogError as e:
                if e.status_code >= 500:
                    logger.error(f"{operation} failed: {type(e).__name__}: {e.message}")
                else:
                    logger.info(f"{operation} rejected ({e.status_code}): {e.message}")
                return response_for_exception(e, SERVER_ERROR_MESSAGES[operation])
            except Exception as e:
                logger.exception(f"{operation} failed unexpectedly: {type(e).__name__}")
                return response_for_exception(e, SERVER_ERROR_MESSAGES[operation])

    # ================================================================
    # HANDLERS: each returns (status_code, payload)
    # ================================================================

    def _list(self, request: CatalogRequest, body: Any):
        brand = request.params.get("brand") or None
        return 200, self._catalog_service_factory().list_products(brand=brand)

    def _get(self, request: CatalogRequest, body: Any, product_id: int):
        return 200, self._catalog_service_factory().get_product(product_id)

    def _create(self, request: CatalogRequest, body: Any):
        result = self._catalog_service_factory().create_products(parse_create_payload(body))
        return (201 if isinstance(result, Product) else 200), result

    def _update(self, request: CatalogRequest, body: Any, product_id: int):
        update = _validated(ProductUpdate, body)
        return 200, self._catalog_service_factory().update_product(product_id, update)

    def _patch_inventory(self, request: CatalogRequest, body: Any, product_id: int):
        patch = _validated(InventoryPatch, body)
        return 200, self._catalog_service_factory().patch_inventory(product_id, patch)

    def _delete(self, request: CatalogRequest, body: Any, product_id: int):
        return 200, self._catalog_service_factory().delete_product(product_id)

    def _list_images(self, request: CatalogRequest, body: Any):
        images = self._image_service_factory().list_images()
        return 200, ImageListResponse(images=images)


def _default_catalog_service():
    from function.services.catalog_service import CatalogService
    return CatalogService()


def _default_image_service():
    from function.services.image_service import ImageService
    return ImageService.from_config()


__all__ = [
    "CatalogRequest",
    "CatalogRouter",
    "ROUTES",
    "match_route",
    "parse_product_id",
]

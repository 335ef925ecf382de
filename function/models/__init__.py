# ============================================================================
# FUNCTION APP MODELS
# ============================================================================
# STATUS: Gateway - Pydantic models for API
# PURPOSE: Request and response models for catalog endpoints
# CREATED: 19 OCT 2026
# ============================================================================
"""
Function App Models

Pydantic V2 models for API requests and responses.
"""

from function.models.requests import (
    InventoryItem,
    ProductCreate,
    ProductUpdate,
    InventoryPatch,
    SingleCreate,
    BatchCreate,
    InvalidCreate,
    parse_create_payload,
)
from function.models.responses import (
    InventoryLevel,
    Product,
    InventoryPatchResponse,
    BatchCreateResponse,
    MessageResponse,
    ImageListResponse,
    ErrorResponse,
    group_product_rows,
)

__all__ = [
    # Requests
    "InventoryItem",
    "ProductCreate",
    "ProductUpdate",
    "InventoryPatch",
    "SingleCreate",
    "BatchCreate",
    "InvalidCreate",
    "parse_create_payload",
    # Responses
    "InventoryLevel",
    "Product",
    "InventoryPatchResponse",
    "BatchCreateResponse",
    "MessageResponse",
    "ImageListResponse",
    "ErrorResponse",
    "group_product_rows",
]

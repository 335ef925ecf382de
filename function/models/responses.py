# ============================================================================
# API RESPONSE MODELS
# ============================================================================
# STATUS: Gateway - Response schemas
# PURPOSE: Pydantic V2 models for catalog API responses
# CREATED: 19 OCT 2026
# ============================================================================
"""
API Response Models

Pydantic V2 models for API responses.
All models use V2 patterns: ConfigDict, model_validate, model_dump.

Prices and sizes leave the database as NUMERIC (Decimal) and are
serialized as JSON numbers, matching what storefront clients expect.
"""

from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class InventoryLevel(BaseModel):
    """Quantity on hand for one size."""

    model_config = ConfigDict()

    size: float = Field(..., description="Shoe size")
    quantity: int = Field(..., ge=0, description="Units on hand")


class Product(BaseModel):
    """A catalog product with its nested inventory, ordered by size."""

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "id": 5,
                "name": "Air Zoom",
                "brand": "Nike",
                "price": 129.99,
                "image": "https://example.blob.core.windows.net/public/images/air-zoom.png",
                "inventory": [{"size": 9.0, "quantity": 3}],
            }
        }
    )

    id: int = Field(..., description="Product ID")
    name: str
    brand: str
    price: float
    image: Optional[str] = None
    inventory: List[InventoryLevel] = Field(default_factory=list)

    @field_validator("price", mode="before")
    @classmethod
    def _decimal_to_float(cls, value: Any) -> Any:
        if isinstance(value, Decimal):
            return float(value)
        return value


class InventoryPatchResponse(BaseModel):
    """Resulting row after an inventory adjustment."""

    model_config = ConfigDict(populate_by_name=True)

    product_id: int = Field(..., serialization_alias="productId")
    size: float
    quantity: int = Field(..., ge=0)


class BatchCreateResponse(BaseModel):
    """Response for multi-product creation."""

    model_config = ConfigDict()

    message: str
    inserted: int = Field(..., description="Number of products inserted")


class MessageResponse(BaseModel):
    model_config = ConfigDict()

    message: str


class ImageListResponse(BaseModel):
    """Public URLs of product images."""

    model_config = ConfigDict()

    images: List[str] = Field(..., description="Public blob URLs")


class ErrorResponse(BaseModel):
    """
    Error body.

    `error` is populated only for server-side failures and never
    carries stack traces or credentials.
    """

    model_config = ConfigDict()

    message: str = Field(..., description="Human-readable description")
    error: Optional[str] = Field(default=None, description="Failure detail (500s only)")


def group_product_rows(rows: Iterable[Dict[str, Any]]) -> List[Product]:
    """
    Fold product⟕inventory join rows into Product models.

    Rows must be ordered by product id then size. Rows with a null size
    or quantity (products without inventory) contribute the product only.
    """
    products: Dict[int, Dict[str, Any]] = {}

    for row in rows:
        product_id = row["id"]
        if product_id not in products:
            products[product_id] = {
                "id": product_id,
                "name": row["name"],
                "brand": row["brand"],
                "price": row["price"],
                "image": row.get("image"),
                "inventory": [],
            }

        if row.get("size") is not None and row.get("quantity") is not None:
            products[product_id]["inventory"].append(
                InventoryLevel(size=float(row["size"]), quantity=row["quantity"])
            )

    return [Product.model_validate(data) for data in products.values()]


__all__ = [
    "InventoryLevel",
    "Product",
    "InventoryPatchResponse",
    "BatchCreateResponse",
    "MessageResponse",
    "ImageListResponse",
    "ErrorResponse",
    "group_product_rows",
]

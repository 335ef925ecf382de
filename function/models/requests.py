# ============================================================================
# API REQUEST MODELS
# ============================================================================
# STATUS: Gateway - Request schemas
# PURPOSE: Pydantic V2 models for incoming catalog requests
# CREATED: 19 OCT 2026
# ============================================================================
"""
API Request Models

Pydantic V2 models for incoming API requests.
All models use V2 patterns: ConfigDict, model_validate, model_dump.

Request bodies are untyped JSON at the edge. They are parsed here into
strict models before reaching the catalog service. Create requests go
through parse_create_payload, which yields a tagged variant:

    SingleCreate  - one product object
    BatchCreate   - {"shoes": [...]}, {"products": [...]} or a bare list
    InvalidCreate - anything else, carrying the reason
"""

from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, List, Optional, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError as PydanticValidationError,
    field_validator,
    model_validator,
)

BATCH_KEYS = ("shoes", "products")

_CENTS = Decimal("0.01")


def _require_text(value: Optional[str], name: str) -> Optional[str]:
    if value is None:
        return value
    value = value.strip()
    if not value:
        raise ValueError(f"{name} must not be empty")
    return value


def _to_cents(value: Optional[Decimal]) -> Optional[Decimal]:
    if value is None:
        return value
    return value.quantize(_CENTS, rounding=ROUND_HALF_UP)


def _require_number(value: Any) -> Any:
    # Decimal would otherwise accept "129.99" and True
    if isinstance(value, (str, bool)):
        raise ValueError("must be a number")
    return value


def _whole_number(value: Any) -> Any:
    if isinstance(value, float) and not value.is_integer():
        raise ValueError("must be a whole number")
    return value


def _unique_sizes(
items: Optional[List["InventoryItem"]]) -> Optional[List["InventoryItem"]]:
    if not items:
        return items
    seen = set()
    for item in items:
        if item.size is None:
            continue
        if item.size in seen:
            raise ValueError(f"duplicate size {item.size:g}")
        seen.add(item.size)
    return items


class InventoryItem(BaseModel):
    """One size/quantity pair inside a product payload."""

    model_config = ConfigDict(extra="ignore")

    size: Optional[float] = Field(
        default=None,
        allow_inf_nan=False,
        description="Shoe size; half sizes allowed (e.g. 9.5). Null entries are skipped.",
    )
    quantity: Optional[int] = Field(
        default=None,
        ge=0,
        description="Units on hand; defaults to 1 when omitted",
    )

    def as_row(self) -> Optional[tuple]:
        """(size, quantity) for insertion, or None when size is missing."""
        if self.size is None:
            return None
        return (self.size, 1 if self.quantity is None else self.quantity)


class ProductCreate(BaseModel):
    """A product to insert, optionally with initial inventory."""

    model_config = ConfigDict(
        extra="ignore",
        json_schema_extra={
            "example": {
                "name": "Air Zoom",
                "brand": "Nike",
                "price": 129.99,
                "image": "https://example.blob.core.windows.net/public/images/air-zoom.png",
                "inventory": [{"size": 9, "quantity": 3}],
            }
        },
    )

    name: str = Field(..., description="Display name")
    brand: str = Field(..., description="Brand name (exact-match filter key)")
    price: Decimal = Field(..., ge=0, description="Unit price, two decimal places")
    image: Optional[str] = Field(default=None, description="Image URL")
    inventory: List[InventoryItem] = Field(default_factory=list)

    @field_validator("name", "brand")
    @classmethod
    def _non_empty(cls, value: str, info) -> str:
        return _require_text(value, info.field_name)

    @field_validator("price", mode="before")
    @classmethod
    def _numeric_price(cls, value: Any) -> Any:
        return _require_number(value)

    @field_validator("price")
    @classmethod
    def _round_price(cls, value: Decimal) -> Decimal:
        return _to_cents(value)

    @field_validator("image")
    @classmethod
    def _blank_image_is_null(cls, value: Optional[str]) -> Optional[str]:
        return value or None

    @field_validator("inventory")
    @classmethod
    def _one_row_per_size(cls, value: List[InventoryItem]) -> List[InventoryItem]:
        return _unique_sizes(value)

    def inventory_rows(self) -> List[tuple]:
        """(size, quantity) pairs, skipping entries without a size."""
        return [row for row in (item.as_row() for item in self.inventory) if row is not None]


class ProductUpdate(BaseModel):
    """
    Partial product update.

    Only non-null fields are written. When `inventory` is a list, the
    product's inventory is replaced wholesale (an empty list clears it).
    """

    model_config = ConfigDict(extra="ignore")

    name: Optional[str] = None
    brand: Optional[str] = None
    price: Optional[Decimal] = Field(default=None, ge=0)
    image: Optional[str] = None
    inventory: Optional[List[InventoryItem]] = None

    @field_validator("name", "brand")
    @classmethod
    def _non_empty(cls, value: Optional[str], info) -> Optional[str]:
        return _require_text(value, info.field_name)

    @field_validator("price", mode="before")
    @classmethod
    def _numeric_price(cls, value: Any) -> Any:
        return _require_number(value)

    @field_validator("price")
    @classmethod
    def _round_price(cls, value: Optional[Decimal]) -> Optional[Decimal]:
        return _to_cents(value)

    @field_validator("inventory")
    @classmethod
    def _one_row_per_size(cls, value: Optional[List[InventoryItem]]) -> Optional[List[InventoryItem]]:
        return _unique_sizes(value)

    @model_validator(mode="after")
    def _something_to_do(self) -> "ProductUpdate":
        if not self.field_values() and self.inventory is None:
            raise ValueError("Provide at least one of name, brand, price, image or inventory")
        return self

    def field_values(self) -> Dict[str, Any]:
        """Column → value for every field present in the payload."""
        values = {}
        for column in ("name", "brand", "price", "image"):
            value = getattr(self, column)
            if value is not None:
                values[column] = value
        # empty string clears the image
        if "image" in values and not values["image"]:
            values["image"] = None
        return values

    def inventory_rows(self) -> List[tuple]:
        if self.inventory is None:
            return []
        return [row for row in (item.as_row() for item in self.inventory) if row is not None]


class InventoryPatch(BaseModel):
    """
    Single-size inventory adjustment.

    Exactly one of:
        quantity - absolute value (upsert)
        delta    - signed adjustment; never drives quantity below zero
    """

    model_config = ConfigDict(
        extra="ignore",
        json_schema_extra={
            "examples": [
                {"size": 9.5, "quantity": 5},
                {"size": 8, "delta": -1},
            ]
        },
    )

    size: float = Field(..., allow_inf_nan=False, description="Size to adjust")
    quantity: Optional[int] = Field(default=None, ge=0)
    delta: Optional[int] = Field(default=None)

    @field_validator("delta", mode="before")
    @classmethod
    def _integral_delta(cls, value: Any) -> Any:
        return _whole_number(value)

    @model_validator(mode="after")
    def _exactly_one_mode(self) -> "InventoryPatch":
        if self.quantity is not None and self.delta is not None:
            raise ValueError('Provide either "quantity" or "delta", not both.')
        if self.quantity is None and self.delta is None:
            raise ValueError('Provide "quantity" or "delta".')
        return self


# ============================================================================
# CREATE PAYLOAD VARIANTS
# ============================================================================

@dataclass(frozen=True)
class SingleCreate:
    product: ProductCreate


@dataclass(frozen=True)
class BatchCreate:
    products: List[ProductCreate]


@dataclass(frozen=True)
class InvalidCreate:
    message: str


CreatePayload = Union[SingleCreate, BatchCreate, InvalidCreate]


def describe_validation_error(exc: PydanticValidationError) -> str:
    """First error as 'field: message', readable in a 400 body."""
    errors = exc.errors()
    if not errors:
        return "Invalid request body"
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "__root__")
    message = first.get("msg", "invalid value")
    if message.startswith("Value error, "):
        message = message[len("Value error, "):]
    return f"{location}: {message}" if location else message


def parse_create_payload(body: Any) -> CreatePayload:
    """
    Classify and validate a create request body.

    A single invalid item rejects the whole payload.
    """
    items = None
    if isinstance(body, list):
        items = body
    elif isinstance(body, dict):
        for key in BATCH_KEYS:
            if key in body:
                items = body[key]
                if not isinstance(items, list):
                    return InvalidCreate(f'"{key}" must be a list of products.')
                break

    if items is not None:
        if not items:
            return InvalidCreate("Invalid or missing shoe data.")
        products = []
        for index, item in enumerate(items):
            if not isinstance(item, dict):
                return InvalidCreate(f"Item {index} is not an object.")
            try:
                products.append(ProductCreate.model_validate(item))
            except PydanticValidationError as e:
                return InvalidCreate(f"Item {index}: {describe_validation_error(e)}")
        return BatchCreate(products=products)

    if not isinstance(body, dict) or not body:
        return InvalidCreate("Invalid or missing shoe data.")

    # Legacy single-item form: {name, brand, price, image, size}
    if "inventory" not in body and body.get("size") is not None:
        body = {**body, "inventory": [{"size": body["size"], "quantity": 1}]}

    try:
        return SingleCreate(product=ProductCreate.model_validate(body))
    except PydanticValidationError as e:
        return InvalidCreate(describe_validation_error(e))


__all__ = [
    "InventoryItem",
    "ProductCreate",
    "ProductUpdate",
    "InventoryPatch",
    "SingleCreate",
    "BatchCreate",
    "InvalidCreate",
    "CreatePayload",
    "parse_create_payload",
    "describe_validation_error",
]

# ============================================================================
# CATALOG SERVICE
# ============================================================================
# STATUS: Gateway - Catalog operations engine
# PURPOSE: Transactional product and inventory operations
# CREATED: 19 OCT 2026
# ============================================================================
"""
Catalog Service

Business logic for the product catalog. Each public method is one
operation: it borrows the worker's cached connection through
ConnectionManager.with_connection, so a stale connection is replaced
and the operation retried once. Writes that touch more than one
statement run inside a single repository transaction.

Inserts are issued in chunks of CHUNK_SIZE products and CHUNK_SIZE
inventory rows to keep individual statements small.

Usage:
    from function.services.catalog_service import CatalogService

    service = CatalogService()
    products = service.list_products(brand="Nike")
"""

import logging
from typing import Callable, Iterator, List, Optional, Sequence, TypeVar, Union

from core.errors import NotFound, ValidationError
from function.models.requests import (
    BatchCreate,
    CreatePayload,
    InvalidCreate,
    InventoryPatch,
    ProductCreate,
    ProductUpdate,
    SingleCreate,
)
from function.models.responses import (
    BatchCreateResponse,
    InventoryPatchResponse,
    MessageResponse,
    Product,
    group_product_rows,
)
from function.repositories.catalog_repo import CatalogRepository
from infrastructure.connection import ConnectionManager, get_connection_manager

logger = logging.getLogger(__name__)

T = TypeVar("T")

CHUNK_SIZE = 10

PRODUCT_NOT_FOUND = "Shoe not found."
CANNOT_DECREMENT = "Cannot decrement: inventory row does not exist for this size."


def chunked(items: Sequence[T], size: int) -> Iterator[Sequence[T]]:
    """Yield consecutive slices of at most `size` items."""
    for start in range(0, len(items), size):
        yield items[start:start + size]


class CatalogService:
    """
    Product and inventory operations.

    Args:
        manager: Connection manager (defaults to the worker-wide instance)
        repository_factory: Builds a repository around a connection
        chunk_size: Rows per multi-row insert
    """

    def __init__(
        self,
        manager: Optional[ConnectionManager] = None,
        repository_factory: Callable[..., CatalogRepository] = CatalogRepository,
        chunk_size: int = CHUNK_SIZE,
    ):
        self._manager = manager or get_connection_manager()
        self._repository_factory = repository_factory
        self.chunk_size = chunk_size

    def _run(self, operation: Callable[[CatalogRepository], T]) -> T:
        return self._manager.with_connection(
            lambda conn: operation(self._repository_factory(conn))
        )

    # ================================================================
    # READS
    # ================================================================

    def list_products(self, brand: Optional[str] = None) -> List[Product]:
        """All products (optionally one brand) with inventory by size."""
        rows = self._run(lambda repo: repo.list_product_rows(brand))
        products = group_product_rows(rows)
        logger.debug(f"Listed {len(products)} products (brand={brand!r})")
        return products

    def get_product(self, product_id: int) -> Product:
        """
        One product with inventory.

        Raises:
            NotFound: No product with this id
        """
        rows = self._run(lambda repo: repo.get_product_rows(product_id))
        return self._single(rows)

    @staticmethod
    def _single(rows) -> Product:
        products = group_product_rows(rows)
        if not products:
            raise NotFound(PRODUCT_NOT_FOUND)
        return products[0]

    # ================================================================
    # CREATE
    # ================================================================

    def create_products(self, payload: CreatePayload) -> Union[Product, BatchCreateResponse]:
        """
        Insert one or many products with their initial inventory.

        All chunks commit together or not at all. A single submitted
        product is returned re-fetched; several yield an insert count.

        Raises:
            ValidationError: Payload was classified invalid
        """
        if isinstance(payload, InvalidCreate):
            raise ValidationError(payload.message)
        if isinstance(payload, SingleCreate):
            products = [payload.product]
        elif isinstance(payload, BatchCreate):
            products = list(payload.products)
        else:
            raise ValidationError("Invalid or missing shoe data.")

        def _create(repo: CatalogRepository):
            with repo.transaction():
                ids = self._insert_products(repo, products)
                if len(products) == 1:
                    return self._single(repo.get_product_rows(ids[0]))
            return BatchCreateResponse(
                message=f"Shoes seeded successfully! Inserted {len(ids)} shoes.",
                inserted=len(ids),
            )

        result = self._run(_create)
        logger.info(f"Created {len(products)} product(s)")
        return result

    def _insert_products(self, repo: CatalogRepository, products: List[ProductCreate]) -> List[int]:
        ids: List[int] = []
        for chunk in chunked(products, self.chunk_size):
            chunk_ids = repo.insert_products(chunk)
            rows = [
                (product_id, size, quantity)
                for product_id, product in zip(chunk_ids, chunk)
                for size, quantity in product.inventory_rows()
            ]
            self._insert_inventory(repo, rows)
            ids.extend(chunk_ids)
        return ids

    def _insert_inventory(self, repo: CatalogRepository, rows: List[tuple]) -> None:
        for chunk in chunked(rows, self.chunk_size):
            repo.insert_inventory(chunk)

    # ================================================================
    # UPDATE
    # ================================================================

    def update_product(self, product_id: int, update: ProductUpdate) -> Product:
        """
        Partial update; a supplied inventory list replaces all sizes.

        Raises:
            NotFound: No product with this id (nothing is written)
        """
        values = update.field_values()

        def _update(repo: CatalogRepository) -> Product:
            with repo.transaction():
                if values:
                    found = repo.update_product(product_id, values) > 0
                else:
                    found = repo.product_exists(product_id, lock=True)
                if not found:
                    raise NotFound(PRODUCT_NOT_FOUND)

                if update.inventory is not None:
                    repo.delete_inventory(product_id)
                    self._insert_inventory(
                        repo,
                        [(product_id, size, quantity) for size, quantity in update.inventory_rows()],
                    )
                return self._single(repo.get_product_rows(product_id))

        product = self._run(_update)
        logger.info(
            f"Updated product {product_id} "
            f"(fields={sorted(values)}, inventory_replaced={update.inventory is not None})"
        )
        return product

    # ================================================================
    # INVENTORY
    # ================================================================

    def patch_inventory(self, product_id: int, patch: InventoryPatch) -> InventoryPatchResponse:
        """
        Adjust one size of one product.

        quantity  - absolute upsert
        delta > 0 - additive upsert (missing row starts at 0)
        delta < 0 - existing row only, floored at 0
        delta = 0 - read; quantity 0 when no row exists

        Raises:
            NotFound: No product with this id
            ValidationError: Negative delta for a size with no row
        """

        def _patch(repo: CatalogRepository) -> dict:
            with repo.transaction():
                if not repo.product_exists(product_id, lock=True):
                    raise NotFound(PRODUCT_NOT_FOUND)

                if patch.quantity is not None:
                    return repo.set_quantity(product_id, patch.size, patch.quantity)
                if patch.delta > 0:
                    return repo.add_quantity(product_id, patch.size, patch.delta)
                if patch.delta < 0:
                    if repo.get_inventory_row(product_id, patch.size) is None:
                        raise ValidationError(CANNOT_DECREMENT, field="size")
                    row = repo.decrement_quantity(product_id, patch.size, patch.delta)
                    if row is None:
                        raise ValidationError(CANNOT_DECREMENT, field="size")
                    return row

                row = repo.get_inventory_row(product_id, patch.size)
                return row or {"product_id": product_id, "size": patch.size, "quantity": 0}

        row = self._run(_patch)
        logger.info(
            f"Inventory for product {product_id} size {patch.size:g} is now {row['quantity']}"
        )
        return InventoryPatchResponse(
            product_id=row["product_id"],
            size=float(row["size"]),
            quantity=row["quantity"],
        )

    # ================================================================
    # DELETE
    # ================================================================

    def delete_product(self, product_id: int) -> MessageResponse:
        """
        Delete a product and all of its inventory rows.

        Raises:
            NotFound: No product with this id (nothing is removed)
        """

        def _delete(repo: CatalogRepository) -> int:
            with repo.transaction():
                removed = repo.delete_inventory(product_id)
                if repo.delete_product(product_id) == 0:
                    raise NotFound(PRODUCT_NOT_FOUND)
                return removed

        removed = self._run(_delete)
        logger.info(f"Deleted product {product_id} and {removed} inventory row(s)")
        return MessageResponse(message="Shoe and inventory deleted successfully.")


__all__ = ["CatalogService", "CHUNK_SIZE", "chunked"]

# ============================================================================
# CATALOG REPOSITORY
# ============================================================================
# STATUS: Gateway - Products and per-size inventory
# PURPOSE: SQL for the products / product_inventory table pair
# CREATED: 19 OCT 2026
# ============================================================================
"""
Catalog Repository

Statements for the two catalog tables:

    products(id, name, brand, price, image)
    product_inventory(product_id, size, quantity)   PK (product_id, size)

No method assumes an ON DELETE CASCADE foreign key. Callers delete
inventory explicitly inside the same transaction as the product.

Batching (chunk sizes) and transaction scoping belong to the service;
each method here is a single statement.
"""

import logging
from typing import Any, Dict, List, Optional, Sequence

from function.repositories.base import FunctionRepository

logger = logging.getLogger(__name__)

# Whitelist for dynamic UPDATE ... SET clauses
UPDATABLE_COLUMNS = ("name", "brand", "price", "image")


class CatalogRepository(FunctionRepository):
    """Sync repository for product and inventory reads and writes."""

    TABLE_PRODUCTS = "products"
    TABLE_INVENTORY = "product_inventory"

    # ================================================================
    # READS
    # ================================================================

    def list_product_rows(self, brand: Optional[str] = None) -> List[Dict[str, Any]]:
        """
        Product ⟕ inventory rows, ordered by product id then size.

        Args:
            brand: Optional exact-match brand filter
        """
        where_clause = ""
        params: tuple = ()
        if brand:
            where_clause = "WHERE p.brand = %s"
            params = (brand,)

        query = f"""
            SELECT p.id, p.name, p.brand, p.price, p.image,
                   i.size, i.quantity
            FROM {self.TABLE_PRODUCTS} p
            LEFT JOIN {self.TABLE_INVENTORY} i ON p.id = i.product_id
            {where_clause}
            ORDER BY p.id, i.size
        """
        return self.execute_many(query, params)

    def get_product_rows(self, product_id: int) -> List[Dict[str, Any]]:
        """Join rows for one product, ordered by size (empty if missing)."""
        return self.execute_many(
            f"""
            SELECT p.id, p.name, p.brand, p.price, p.image,
                   i.size, i.quantity
            FROM {self.TABLE_PRODUCTS} p
            LEFT JOIN {self.TABLE_INVENTORY} i ON p.id = i.product_id
            WHERE p.id = %s
            ORDER BY i.size
            """,
            (product_id,),
        )

    def product_exists(self, product_id: int, lock: bool = False) -> bool:
        """
        Check a product row exists.

        Args:
            lock: Take a row lock (FOR UPDATE); only meaningful in a transaction
        """
        suffix = " FOR UPDATE" if lock else ""
        row = self.execute_one(
            f"SELECT id FROM {self.TABLE_PRODUCTS} WHERE id = %s{suffix}",
            (product_id,),
        )
        return row is not None

    def get_inventory_row(self, product_id: int, size: float) -> Optional[Dict[str, Any]]:
        return self.execute_one(
            f"SELECT product_id, size, quantity FROM {self.TABLE_INVENTORY} "
            f"WHERE product_id = %s AND size = %s",
            (product_id, size),
        )

    # ================================================================
    # PRODUCT WRITES
    # ================================================================

    def insert_products(self, products: Sequence[Any]) -> List[int]:
        """
        Insert products, returning generated ids in input order.

        Args:
            products: Objects with name, brand, price, image attributes
        """
        rows = self.execute_batch_returning(
            f"INSERT INTO {self.TABLE_PRODUCTS} (name, brand, price, image) "
            f"VALUES (%s, %s, %s, %s) RETURNING id",
            [(p.name, p.brand, p.price, p.image) for p in products],
        )
        return [row["id"] for row in rows]

    def update_product(self, product_id: int, values: Dict[str, Any]) -> int:
        """
        Update the given columns of one product.

        Returns:
            Rows affected (0 when the product does not exist)
        """
        columns = [c for c in UPDATABLE_COLUMNS if c in values]
        if not columns:
            raise ValueError("update_product requires at least one column")

        set_clause = ", ".join(f"{column} = %s" for column in columns)
        params = tuple(values[c] for c in columns) + (product_id,)
        return self.execute_write(
            f"UPDATE {self.TABLE_PRODUCTS} SET {set_clause} WHERE id = %s",
            params,
        )

    def delete_product(self, product_id: int) -> int:
        return self.execute_write(
            f"DELETE FROM {self.TABLE_PRODUCTS} WHERE id = %s",
            (product_id,),
        )

    # ================================================================
    # INVENTORY WRITES
    # ================================================================

    def insert_inventory(self, rows: Sequence[tuple]) -> int:
        """
        Multi-row insert of (product_id, size, quantity) tuples.

        Returns:
            Rows inserted
        """
        if not rows:
            return 0

        placeholders = ", ".join(["(%s, %s, %s)"] * len(rows))
        params = tuple(value for row in rows for value in row)
        return self.execute_write(
            f"INSERT INTO {self.TABLE_INVENTORY} (product_id, size, quantity) "
            f"VALUES {placeholders}",
            params,
        )

    def delete_inventory(self, product_id: int) -> int:
        return self.execute_write(
            f"DELETE FROM {self.TABLE_INVENTORY} WHERE product_id = %s",
            (product_id,),
        )

    def set_quantity(self, product_id: int, size: float, quantity: int) -> Dict[str, Any]:
        """Upsert an absolute quantity for (product_id, size)."""
        return self.execute_write_returning(
            f"""
            INSERT INTO {self.TABLE_INVENTORY} (product_id, size, quantity)
            VALUES (%s, %s, %s)
            ON CONFLICT (product_id, size)
            DO UPDATE SET quantity = EXCLUDED.quantity
            RETURNING product_id, size, quantity
            """,
            (product_id, size, quantity),
        )

    def add_quantity(self, product_id: int, size: float, delta: int) -> Dict[str, Any]:
        """Upsert adding a positive delta (row starts from 0 when absent)."""
        return self.execute_write_returning(
            f"""
            INSERT INTO {self.TABLE_INVENTORY} (product_id, size, quantity)
            VALUES (%s, %s, %s)
            ON CONFLICT (product_id, size)
            DO UPDATE SET quantity = {self.TABLE_INVENTORY}.quantity + EXCLUDED.quantity
            RETURNING product_id, size, quantity
            """,
            (product_id, size, delta),
        )

    def decrement_quantity(self, product_id: int, size: float, delta: int) -> Optional[Dict[str, Any]]:
        """
        Apply a negative delta to an existing row, flooring at zero.

        Returns:
            Updated row, or None if the row vanished
        """
        return self.execute_write_returning(
            f"""
            UPDATE {self.TABLE_INVENTORY}
            SET quantity = GREATEST(0, quantity + %s)
            WHERE product_id = %s AND size = %s
            RETURNING product_id, size, quantity
            """,
            (delta, product_id, size),
        )


__all__ = ["CatalogRepository", "UPDATABLE_COLUMNS"]

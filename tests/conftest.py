# ============================================================================
# TEST FIXTURES
# ============================================================================
# STATUS: Tests - Shared fixtures
# PURPOSE: In-memory catalog store and connection manager stand-ins
# CREATED: 19 OCT 2026
# ============================================================================
"""
Shared fixtures.

FakeCatalogRepository implements the CatalogRepository interface over an
in-memory store. transaction() snapshots the store and restores it when
the block raises, so rollback behavior is observable without PostgreSQL.
"""

import copy
from contextlib import contextmanager
from decimal import Decimal

import pytest

from function.config import reset_config
from function.services.catalog_service import CatalogService


class DuplicateKey(Exception):
    """Stands in for psycopg.errors.UniqueViolation."""


class CatalogStore:
    """Tables as dicts, plus a statement counter."""

    def __init__(self):
        self.products = {}
        self.inventory = {}
        self.next_id = 1
        self.statements = 0
        self.fail_on_insert_products_call = None
        self._insert_products_calls = 0

    def snapshot(self):
        return copy.deepcopy((self.products, self.inventory, self.next_id))

    def restore(self, snapshot):
        self.products, self.inventory, self.next_id = snapshot

    def add_product(self, name="Air Zoom", brand="Nike", price="129.99", image=None, inventory=None):
        product_id = self.next_id
        self.next_id += 1
        self.products[product_id] = {
            "name": name,
            "brand": brand,
            "price": Decimal(price),
            "image": image,
        }
        for size, quantity in (inventory or {}).items():
            self.inventory[(product_id, float(size))] = quantity
        return product_id

    def sizes(self, product_id):
        return {size: qty for (pid, size), qty in self.inventory.items() if pid == product_id}


class FakeCatalogRepository:
    """CatalogRepository over a CatalogStore."""

    def __init__(self, store: CatalogStore):
        self.store = store

    def _count(self):
        self.store.statements += 1

    @contextmanager
    def transaction(self):
        snapshot = self.store.snapshot()
        try:
            yield
        except BaseException:
            self.store.restore(snapshot)
            raise

    def _rows(self, product_ids):
        rows = []
        for product_id in sorted(product_ids):
            product = self.store.products[product_id]
            sizes = sorted(self.store.sizes(product_id).items())
            base = {"id": product_id, **product}
            if not sizes:
                rows.append({**base, "size": None, "quantity": None})
            for size, quantity in sizes:
                rows.append({**base, "size": Decimal(str(size)), "quantity": quantity})
        return rows

    def list_product_rows(self, brand=None):
        self._count()
        ids = [pid for pid, p in self.store.products.items() if not brand or p["brand"] == brand]
        return self._rows(ids)

    def get_product_rows(self, product_id):
        self._count()
        if product_id not in self.store.products:
            return []
        return self._rows([product_id])

    def product_exists(self, product_id, lock=False):
        self._count()
        return product_id in self.store.products

    def get_inventory_row(self, product_id, size):
        self._count()
        key = (product_id, float(size))
        if key not in self.store.inventory:
            return None
        return {"product_id": product_id, "size": Decimal(str(size)), "quantity": self.store.inventory[key]}

    def insert_products(self, products):
        self._count()
        self.store._insert_products_calls += 1
        if self.store._insert_products_calls == self.store.fail_on_insert_products_call:
            raise RuntimeError("simulated insert failure")
        ids = []
        for p in products:
            ids.append(self.store.add_product(p.name, p.brand, str(p.price), p.image))
        return ids

    def update_product(self, product_id, values):
        self._count()
        if product_id not in self.store.products:
            return 0
        self.store.products[product_id].update(values)
        return 1

    def delete_product(self, product_id):
        self._count()
        return 1 if self.store.products.pop(product_id, None) is not None else 0

    def insert_inventory(self, rows):
        self._count()
        for product_id, size, quantity in rows:
            key = (product_id, float(size))
            if key in self.store.inventory:
                raise DuplicateKey(key)
            self.store.inventory[key] = quantity
        return len(rows)

    def delete_inventory(self, product_id):
        self._count()
        keys = [key for key in self.store.inventory if key[0] == product_id]
        for key in keys:
            del self.store.inventory[key]
        return len(keys)

    def _row(self, product_id, size):
        key = (product_id, float(size))
        return {"product_id": product_id, "size": Decimal(str(size)), "quantity": self.store.inventory[key]}

    def set_quantity(self, product_id, size, quantity):
        self._count()
        self.store.inventory[(product_id, float(size))] = quantity
        return self._row(product_id, size)

    def add_quantity(self, product_id, size, delta):
        self._count()
        key = (product_id, float(size))
        self.store.inventory[key] = self.store.inventory.get(key, 0) + delta
        return self._row(product_id, size)

    def decrement_quantity(self, product_id, size, delta):
        self._count()
        key = (product_id, float(size))
        if key not in self.store.inventory:
            return None
        self.store.inventory[key] = max(0, self.store.inventory[key] + delta)
        return self._row(product_id, size)


class FakeConnectionManager:
    """Hands a placeholder connection to each operation."""

    def __init__(self):
        self.calls = 0

    def with_connection(self, operation):
        self.calls += 1
        return operation(object())


# ============================================================================
# FIXTURES
# ============================================================================

@pytest.fixture(autouse=True)
def fresh_config(monkeypatch):
    """Each test reads settings from a clean environment."""
    for key in ("CORS_ORIGIN", "ADMIN_GROUP", "CLAIMS_SOURCE", "DB_PASSWORD", "DB_CONFIG_SOURCE", "LOG_FORMAT"):
        monkeypatch.delenv(key, raising=False)
    reset_config()
    yield
    reset_config()


@pytest.fixture
def store():
    return CatalogStore()


@pytest.fixture
def manager():
    return FakeConnectionManager()


@pytest.fixture
def service(store, manager):
    return CatalogService(
        manager=manager,
        repository_factory=lambda conn: FakeCatalogRepository(store),
        chunk_size=10,
    )

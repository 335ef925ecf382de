# ============================================================================
# CATALOG SERVICE TESTS
# ============================================================================
# STATUS: Tests - Catalog operations engine
# PURPOSE: Verify create/update/patch/delete semantics and rollback
# CREATED: 19 OCT 2026
# ============================================================================
"""
Catalog Service Tests

Runs CatalogService against the in-memory repository from conftest.py.

Run with:
    pytest tests/test_catalog_service.py -v
"""

import pytest

from core.errors import NotFound, ValidationError
from function.models.requests import (
    InventoryPatch,
    InvalidCreate,
    ProductUpdate,
    parse_create_payload,
)
from function.models.responses import BatchCreateResponse, Product
from function.services.catalog_service import chunked


def _shoe(name="Air Zoom", **overrides):
    data = {"name": name, "brand": "Nike", "price": 129.99, "image": "u"}
    data.update(overrides)
    return data


# ============================================================================
# READS
# ============================================================================

class TestReads:
    """list_products / get_product."""

    def test_list_groups_inventory_by_product(self, service, store):
        first = store.add_product("Air Zoom", "Nike", inventory={9: 3, 8.5: 1})
        second = store.add_product("Gel", "Asics")

        products = service.list_products()

        assert [p.id for p in products] == [first, second]
        assert [(i.size, i.quantity) for i in products[0].inventory] == [(8.5, 1), (9.0, 3)]
        assert products[1].inventory == []

    def test_list_filters_by_exact_brand(self, service, store):
        store.add_product("Air Zoom", "Nike")
        store.add_product("Gel", "Asics")

        products = service.list_products(brand="Asics")

        assert [p.brand for p in products] == ["Asics"]
        assert service.list_products(brand="nike") == []

    def test_list_empty_catalog(self, service):
        assert service.list_products() == []

    def test_get_missing_raises_not_found(self, service):
        with pytest.raises(NotFound):
            service.get_product(404)

    def test_reads_go_through_connection_manager(self, service, manager, store):
        store.add_product()
        service.list_products()
        service.get_product(1)
        assert manager.calls == 2


# ============================================================================
# CREATE
# ============================================================================

class TestCreate:
    """create_products."""

    def test_create_then_get_round_trip(self, service):
        payload = parse_create_payload(_shoe(inventory=[{"size": 9, "quantity": 3}]))

        created = service.create_products(payload)

        assert isinstance(created, Product)
        fetched = service.get_product(created.id)
        assert fetched == created
        assert fetched.name == "Air Zoom"
        assert fetched.price == 129.99
        assert [(i.size, i.quantity) for i in fetched.inventory] == [(9.0, 3)]

    def test_batch_returns_insert_count(self, service, store):
        payload = parse_create_payload({"shoes": [_shoe(f"Shoe {i}") for i in range(3)]})

        result = service.create_products(payload)

        assert isinstance(result, BatchCreateResponse)
        assert result.inserted == 3
        assert result.message == "Shoes seeded successfully! Inserted 3 shoes."
        assert len(store.products) == 3

    def test_batch_of_one_returns_product(self, service):
        result = service.create_products(parse_create_payload([_shoe()]))
        assert isinstance(result, Product)

    def test_missing_quantity_defaults_to_one_and_null_size_skipped(self, service, store):
        payload = parse_create_payload(
            _shoe(inventory=[{"size": 10}, {"size": None, "quantity": 4}])
        )

        created = service.create_products(payload)

        assert store.sizes(created.id) == {10.0: 1}

    def test_legacy_size_field_becomes_one_unit(self, service, store):
        created = service.create_products(parse_create_payload(_shoe(size=7.5)))
        assert store.sizes(created.id) == {7.5: 1}

    def test_chunks_products_and_inventory(self, service, store):
        shoes = [_shoe(f"Shoe {i}", inventory=[{"size": 8, "quantity": 1}, {"size": 9, "quantity": 1}])
                 for i in range(25)]

        result = service.create_products(parse_create_payload({"products": shoes}))

        assert result.inserted == 25
        assert len(store.inventory) == 50
        # 3 product chunks; 20 + 20 + 10 inventory rows -> 2 + 2 + 1 inserts
        assert store.statements == 3 + 5

    def test_failure_in_later_chunk_rolls_back_everything(self, service, store):
        store.fail_on_insert_products_call = 2
        shoes = [_shoe(f"Shoe {i}") for i in range(15)]

        with pytest.raises(RuntimeError):
            service.create_products(parse_create_payload({"shoes": shoes}))

        assert store.products == {}
        assert store.inventory == {}

    def test_invalid_payload_raises_before_store_access(self, service, store, manager):
        with pytest.raises(ValidationError) as exc_info:
            service.create_products(InvalidCreate("Invalid or missing shoe data."))

        assert exc_info.value.status_code == 400
        assert manager.calls == 0
        assert store.statements == 0


# ============================================================================
# UPDATE
# ============================================================================

class TestUpdate:
    """update_product."""

    def test_partial_update_keeps_other_fields(self, service, store):
        product_id = store.add_product("Air Zoom", "Nike", price="100.00", inventory={9: 2})

        updated = service.update_product(product_id, ProductUpdate(price=89.5))

        assert updated.price == 89.5
        assert updated.name == "Air Zoom"
        assert [(i.size, i.quantity) for i in updated.inventory] == [(9.0, 2)]

    def test_inventory_replacement_removes_old_sizes(self, service, store):
        product_id = store.add_product(inventory={8: 1, 9: 2})

        updated = service.update_product(
            product_id, ProductUpdate(inventory=[{"size": 10, "quantity": 5}])
        )

        assert store.sizes(product_id) == {10.0: 5}
        assert [(i.size, i.quantity) for i in updated.inventory] == [(10.0, 5)]

    def test_empty_inventory_list_clears_sizes(self, service, store):
        product_id = store.add_product(inventory={8: 1})

        updated = service.update_product(product_id, ProductUpdate(inventory=[]))

        assert store.sizes(product_id) == {}
        assert updated.inventory == []

    def test_missing_product_is_not_found_and_writes_nothing(self, service, store):
        other = store.add_product(inventory={9: 1})

        with pytest.raises(NotFound):
            service.update_product(999, ProductUpdate(inventory=[{"size": 9, "quantity": 4}]))

        assert store.sizes(other) == {9.0: 1}
        assert (999, 9.0) not in store.inventory

    def test_inventory_only_update_checks_existence(self, service):
        with pytest.raises(NotFound):
            service.update_product(42, ProductUpdate(inventory=[]))


# ============================================================================
# INVENTORY PATCH
# ============================================================================

class TestPatchInventory:
    """patch_inventory."""

    def test_absolute_upsert_is_idempotent(self, service, store):
        product_id = store.add_product()
        patch = InventoryPatch(size=9.5, quantity=5)

        first = service.patch_inventory(product_id, patch)
        second = service.patch_inventory(product_id, patch)

        assert first == second
        assert second.quantity == 5
        assert store.sizes(product_id) == {9.5: 5}

    def test_delta_sequence_floors_at_zero_only_when_needed(self, service, store):
        product_id = store.add_product(inventory={9: 4})

        service.patch_inventory(product_id, InventoryPatch(size=9, delta=3))
        result = service.patch_inventory(product_id, InventoryPatch(size=9, delta=-5))

        assert result.quantity == 2

    def test_negative_delta_clamps_at_zero(self, service, store):
        product_id = store.add_product(inventory={9: 1})

        result = service.patch_inventory(product_id, InventoryPatch(size=9, delta=-100))

        assert result.quantity == 0

    def test_positive_delta_creates_missing_row(self, service, store):
        product_id = store.add_product()

        result = service.patch_inventory(product_id, InventoryPatch(size=11, delta=2))

        assert result.quantity == 2
        assert store.sizes(product_id) == {11.0: 2}

    def test_negative_delta_on_missing_row_is_rejected(self, service, store):
        product_id = store.add_product(inventory={9: 1})

        with pytest.raises(ValidationError) as exc_info:
            service.patch_inventory(product_id, InventoryPatch(size=10, delta=-100))

        assert exc_info.value.message == (
            "Cannot decrement: inventory row does not exist for this size."
        )
        assert store.sizes(product_id) == {9.0: 1}

    def test_zero_delta_reads_without_writing(self, service, store):
        product_id = store.add_product()

        result = service.patch_inventory(product_id, InventoryPatch(size=12, delta=0))

        assert result.quantity == 0
        assert store.inventory == {}

    def test_missing_product_is_not_found(self, service):
        with pytest.raises(NotFound):
            service.patch_inventory(7, InventoryPatch(size=9, quantity=1))

    def test_response_uses_product_id_alias(self, service, store):
        product_id = store.add_product()

        result = service.patch_inventory(product_id, InventoryPatch(size=9, quantity=2))

        assert result.model_dump(by_alias=True) == {"productId": product_id, "size": 9.0, "quantity": 2}


# ============================================================================
# DELETE
# ============================================================================

class TestDelete:
    """delete_product."""

    def test_delete_removes_product_and_inventory(self, service, store):
        product_id = store.add_product(inventory={8: 1, 9: 2})

        result = service.delete_product(product_id)

        assert result.message == "Shoe and inventory deleted successfully."
        assert product_id not in store.products
        assert store.sizes(product_id) == {}
        with pytest.raises(NotFound):
            service.get_product(product_id)

    def test_delete_missing_leaves_other_inventory(self, service, store):
        other = store.add_product(inventory={9: 3})

        with pytest.raises(NotFound):
            service.delete_product(12345)

        assert store.sizes(other) == {9.0: 3}


# ============================================================================
# HELPERS
# ============================================================================

class TestChunked:

    def test_slices(self):
        assert list(chunked(list(range(25)), 10)) == [
            list(range(10)), list(range(10, 20)), list(range(20, 25))
        ]

    def test_empty(self):
        assert list(chunked([], 10)) == []

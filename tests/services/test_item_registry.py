"""
Tests for ItemRegistry.

Covers:
- Creation defaults and id assignment
- Input validation
- Ordered listing
- Lookups of unknown ids
"""

import pytest

from catalog_kernel.domain.guards import MAX_AMOUNT
from catalog_kernel.exceptions import InvalidInputError, ItemNotFoundError
from catalog_kernel.models.item import ItemListing


class TestCreate:
    def test_new_item_takes_next_id(self, registry):
        expected = registry.next_item_id()
        item = registry.create("Widget", 3, 7, created_by="owner")

        assert item.id == expected == 1
        assert item.stock == item.quantity == 7
        assert item.is_available is True
        assert item.locked is False
        assert item.exists is True
        assert registry.next_item_id() == 2

    def test_ids_follow_creation_order(self, registry):
        ids = [registry.create(f"item-{n}", 1, 1, created_by="owner").id for n in range(3)]
        assert ids == [1, 2, 3]
        assert registry.list_ids() == [1, 2, 3]
        assert registry.count() == 3

    def test_listing_positions_are_contiguous(self, registry, session):
        registry.create("a", 1, 1, created_by="owner")
        registry.create("b", 1, 1, created_by="owner")
        positions = [row.position for row in session.query(ItemListing).order_by(ItemListing.position)]
        assert positions == [1, 2]

    def test_empty_name_is_accepted(self, registry):
        assert registry.create("", 1, 1, created_by="owner").name == ""

    @pytest.mark.parametrize(
        "price,quantity,field",
        [(0, 1, "unit_price"), (-1, 1, "unit_price"), (1, 0, "initial_quantity"), (1, -5, "initial_quantity")],
    )
    def test_rejects_non_positive(self, registry, price, quantity, field):
        with pytest.raises(InvalidInputError) as exc_info:
            registry.create("Widget", price, quantity, created_by="owner")
        assert exc_info.value.field == field
        assert registry.next_item_id() == 1
        assert registry.count() == 0

    def test_rejects_missing_name(self, registry):
        with pytest.raises(InvalidInputError):
            registry.create(None, 1, 1, created_by="owner")

    @pytest.mark.parametrize(
        "price,quantity,field",
        [(MAX_AMOUNT + 1, 1, "unit_price"), (1, MAX_AMOUNT + 1, "initial_quantity")],
    )
    def test_rejects_values_past_bound(self, registry, price, quantity, field):
        with pytest.raises(InvalidInputError) as exc_info:
            registry.create("Widget", price, quantity, created_by="owner")
        assert exc_info.value.field == field
        assert registry.next_item_id() == 1

    def test_long_name_and_creator_are_stored(self, registry, session):
        name = "n" * 1000
        creator = "0x" + "ab" * 200
        item = registry.create(name, 1, 1, created_by=creator)
        session.expire(item)
        assert registry.get(item.id).name == name
        assert registry.get(item.id).created_by == creator


class TestLookup:
    def test_find_unknown_returns_none(self, registry):
        assert registry.find(42) is None

    def test_get_unknown_raises(self, registry):
        with pytest.raises(ItemNotFoundError) as exc_info:
            registry.get(42)
        assert exc_info.value.item_id == 42

    def test_list_items_in_order(self, registry):
        registry.create("first", 1, 1, created_by="owner")
        registry.create("second", 2, 2, created_by="owner")
        assert [item.name for item in registry.list_items()] == ["first", "second"]

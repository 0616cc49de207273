"""
Tests for CatalogSelector.

Covers:
- Single-item lookups and the get_stock sentinel
- The available-items projection and its ordering
- Ledger reads (always zero)
- Owner and next-id reads
"""

import pytest

from catalog_kernel.domain.dtos import AvailableItems, ItemInfo
from catalog_kernel.exceptions import ItemNotFoundError
from catalog_kernel.selectors.catalog_selector import CatalogSelector
from tests.conftest import BUYER, OWNER


@pytest.fixture
def selector(session) -> CatalogSelector:
    return CatalogSelector(session)


@pytest.fixture
def three_items(admin):
    return [
        admin.add_item(OWNER, "alpha", 1, 5),
        admin.add_item(OWNER, "beta", 2, 6),
        admin.add_item(OWNER, "gamma", 3, 7),
    ]


class TestItemLookups:
    def test_get_item_returns_snapshot(self, selector, three_items):
        info = selector.get_item(2)
        assert isinstance(info, ItemInfo)
        assert (info.name, info.unit_price, info.stock, info.quantity) == ("beta", 2, 6, 6)
        assert info.exists is True

    def test_get_item_unknown(self, selector):
        with pytest.raises(ItemNotFoundError):
            selector.get_item(999)

    def test_get_stock_unknown_is_zero(self, selector):
        assert selector.get_stock(999) == 0

    def test_is_sold_out_unknown(self, selector):
        with pytest.raises(ItemNotFoundError):
            selector.is_sold_out(999)

    def test_sold_out_tracks_stock_not_quantity(self, selector, purchase_engine, three_items):
        purchase_engine.purchase(1, 5, 5, BUYER)
        assert selector.is_sold_out(1) is False
        purchase_engine.buy(1, 5, 5, BUYER)
        assert selector.is_sold_out(1) is True
        assert selector.get_item(1).is_sold_out


class TestAvailableItems:
    def test_empty_catalog(self, selector):
        result = selector.get_available_items()
        assert result == AvailableItems()
        assert len(result) == 0

    def test_parallel_sequences_in_creation_order(self, selector, three_items):
        ids, names, prices, stocks = selector.get_available_items()
        assert ids == (1, 2, 3)
        assert names == ("alpha", "beta", "gamma")
        assert prices == (1, 2, 3)
        assert stocks == (5, 6, 7)

    def test_excludes_unavailable_and_empty_stock(self, selector, admin, purchase_engine, three_items):
        admin.change_item_status(OWNER, 1, False)
        purchase_engine.buy(3, 7, 21, BUYER)
        assert selector.get_available_items().ids == (2,)

    def test_locked_items_still_listed(self, selector, admin, three_items):
        admin.lock_item(OWNER, 2)
        assert 2 in selector.get_available_items().ids

    def test_emergency_stop_empties_projection(self, selector, admin, three_items):
        admin.emergency_stop(OWNER)
        assert len(selector.get_available_items()) == 0
        assert selector.get_all_item_ids() == [1, 2, 3]


class TestCountsAndIds:
    def test_counts(self, selector, three_items):
        assert selector.get_total_item_count() == 3
        assert selector.get_all_item_ids() == [1, 2, 3]
        assert [i.name for i in selector.list_items()] == ["alpha", "beta", "gamma"]

    def test_next_item_id(self, selector, admin):
        assert selector.get_next_item_id() == 1
        admin.add_item(OWNER, "x", 1, 1)
        assert selector.get_next_item_id() == 2

    def test_owner(self, selector, initialized_access):
        assert selector.get_owner() == OWNER


class TestLedger:
    def test_purchases_are_not_recorded(self, selector, purchase_engine, three_items):
        purchase_engine.purchase(1, 2, 2, BUYER)
        purchase_engine.buy(1, 1, 1, BUYER)
        assert selector.get_user_purchases(BUYER, 1) == 0

    def test_unknown_pair(self, selector):
        assert selector.get_user_purchases(BUYER, 12345) == 0

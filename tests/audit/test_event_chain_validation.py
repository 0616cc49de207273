"""
Event chain validation tests.

Verifies:
- The chain validates after every kind of committed operation
- Rejected operations append nothing
- Tamper detection on payload, hash and linkage edits
"""

from contextlib import contextmanager

import pytest
from sqlalchemy import update
from sqlalchemy.orm import sessionmaker

from catalog_kernel.db.immutability import (
    register_immutability_listeners,
    unregister_immutability_listeners,
)
from catalog_kernel.exceptions import EventChainBrokenError, ItemLockedError
from catalog_kernel.models.catalog_event import CatalogEvent


@contextmanager
def disabled_immutability():
    """Disable ORM immutability enforcement to simulate tampering."""
    unregister_immutability_listeners()
    try:
        yield
    finally:
        register_immutability_listeners()


@pytest.fixture
def busy_catalog(catalog, owner_ctx, buyer, widget):
    catalog.purchase(buyer(5), widget.id, 2)
    catalog.buy(buyer(3), widget.id, 3)
    catalog.lock_item(owner_ctx, widget.id)
    catalog.restock_item(owner_ctx, widget.id, 4)
    catalog.update_item_price(owner_ctx, widget.id, 7)
    catalog.change_item_status(owner_ctx, widget.id, True)
    catalog.emergency_stop(owner_ctx)
    return catalog


class TestChainIntegrity:
    def test_chain_valid_after_operations(self, busy_catalog):
        assert busy_catalog.validate_event_chain() is True

    def test_genesis_is_initial_ownership(self, busy_catalog):
        first = busy_catalog.events()[0]
        assert first.seq == 1
        assert first.event_type == "OwnershipTransferred"

    def test_seq_is_gapless(self, busy_catalog):
        seqs = [e.seq for e in busy_catalog.events()]
        assert seqs == list(range(1, len(seqs) + 1))

    def test_rejected_operation_appends_nothing(self, catalog, owner_ctx, buyer, widget):
        catalog.lock_item(owner_ctx, widget.id)
        before = catalog.events()
        with pytest.raises(ItemLockedError):
            catalog.purchase(buyer(1), widget.id, 1)
        assert catalog.events() == before
        assert catalog.validate_event_chain()


class TestTamperDetection:
    def test_payload_edit_detected(self, busy_catalog, catalog_engine):
        factory = sessionmaker(bind=catalog_engine)
        with disabled_immutability(), factory() as session:
            event = session.get(CatalogEvent, 3)
            event.payload = {**event.payload, "quantity": 1}
            session.commit()

        with pytest.raises(EventChainBrokenError) as exc_info:
            busy_catalog.validate_event_chain()
        assert exc_info.value.seq == 3

    def test_hash_edit_detected(self, busy_catalog, catalog_engine):
        with catalog_engine.begin() as conn:
            conn.execute(
                update(CatalogEvent).where(CatalogEvent.seq == 4).values(hash="0" * 64)
            )

        with pytest.raises(EventChainBrokenError) as exc_info:
            busy_catalog.validate_event_chain()
        assert exc_info.value.seq == 4

    def test_relinking_detected(self, busy_catalog, catalog_engine):
        with catalog_engine.begin() as conn:
            conn.execute(
                update(CatalogEvent).where(CatalogEvent.seq == 5).values(prev_hash=None)
            )

        with pytest.raises(EventChainBrokenError) as exc_info:
            busy_catalog.validate_event_chain()
        assert exc_info.value.seq == 5

"""
Tests for EventLogService.

Covers:
- Monotonic seq numbers and hash linkage
- Filtering reads
- Pending events handed back for publication
- Timestamps from the injected clock
"""

from datetime import timedelta

import pytest

from catalog_kernel.models.catalog_event import CatalogEventType
from catalog_kernel.services.event_log import EventLogService
from catalog_kernel.utils.hashing import hash_catalog_event, hash_payload
from tests.conftest import OWNER


class TestAppend:
    def test_seq_starts_at_one_and_increments(self, event_log):
        first = event_log.record_item_locked(OWNER, 1)
        second = event_log.record_item_unlocked(OWNER, 1)
        assert (first.seq, second.seq) == (1, 2)

    def test_first_event_is_genesis(self, event_log):
        first = event_log.record_item_locked(OWNER, 1)
        assert first.is_genesis
        assert first.prev_hash is None

    def test_events_link_to_predecessor(self, event_log):
        first = event_log.record_item_locked(OWNER, 1)
        second = event_log.record_item_unlocked(OWNER, 1)
        assert second.prev_hash == first.hash

    def test_hash_covers_payload(self, event_log):
        event = event_log.record_price_updated(OWNER, 4, 12)
        assert event.payload_hash == hash_payload({"item_id": 4, "new_price": 12})
        assert event.hash == hash_catalog_event(
            seq=event.seq,
            event_type=CatalogEventType.ITEM_PRICE_UPDATED.value,
            item_id=4,
            payload_hash=event.payload_hash,
            prev_hash=None,
        )

    def test_occurred_at_comes_from_clock(self, event_log, clock):
        first = event_log.record_item_locked(OWNER, 1)
        clock.advance(300)
        second = event_log.record_item_unlocked(OWNER, 1)
        assert second.occurred_at - first.occurred_at == timedelta(minutes=5)

    def test_emergency_stop_has_no_item(self, event_log):
        event = event_log.record_emergency_stop(OWNER, 3)
        assert event.item_id is None
        assert event.payload == {"item_count": 3}


class TestPending:
    def test_pending_in_seq_order(self, event_log):
        event_log.record_item_locked(OWNER, 1)
        event_log.record_status_changed(OWNER, 1, False)
        pending = event_log.pending
        assert [p.seq for p in pending] == [1, 2]
        assert pending[1].payload["is_active"] is False

    def test_separate_instances_do_not_share_pending(self, session, clock, event_log):
        event_log.record_item_locked(OWNER, 1)
        other = EventLogService(session, clock)
        assert other.pending == []


class TestReads:
    def test_filters(self, event_log):
        event_log.record_item_locked(OWNER, 1)
        event_log.record_item_locked(OWNER, 2)
        event_log.record_item_unlocked(OWNER, 1)

        assert [e.seq for e in event_log.events(item_id=1)] == [1, 3]
        assert [e.seq for e in event_log.events(since_seq=1)] == [2, 3]
        assert [
            e.seq for e in event_log.events(event_type=CatalogEventType.ITEM_UNLOCKED)
        ] == [3]

    def test_records_are_read_only(self, event_log):
        event_log.record_item_locked(OWNER, 1)
        record = event_log.events()[0]
        with pytest.raises(TypeError):
            record.payload["item_id"] = 2
        assert event_log.events()[0].payload["item_id"] == 1

    def test_chain_validates(self, event_log):
        for n in range(5):
            event_log.record_item_restocked(OWNER, 1, n)
        assert event_log.validate_chain() is True

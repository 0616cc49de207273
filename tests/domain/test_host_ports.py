"""Tests for CallContext, identity helpers and the in-memory value transfer."""

import pytest

from catalog_kernel.domain.host import (
    NULL_IDENTITY,
    CallContext,
    InMemoryValueTransfer,
    Transfer,
    is_null_identity,
)


class TestIdentity:
    @pytest.mark.parametrize("identity", [None, "", "  ", NULL_IDENTITY, NULL_IDENTITY.upper()])
    def test_null_identities(self, identity):
        assert is_null_identity(identity)

    def test_real_identity(self):
        assert not is_null_identity("0x00000000000000000000000000000000000000a1")


class TestCallContext:
    def test_defaults_to_no_payment(self):
        assert CallContext("alice").payment == 0

    def test_negative_payment_rejected(self):
        with pytest.raises(ValueError):
            CallContext("alice", payment=-1)


class TestInMemoryValueTransfer:
    def test_records_transfers_and_totals(self):
        transfers = InMemoryValueTransfer()
        transfers.transfer_value("alice", 3)
        transfers.transfer_value("alice", 2)
        transfers.transfer_value("bob", 1)

        assert transfers.transfers == (
            Transfer("alice", 3),
            Transfer("alice", 2),
            Transfer("bob", 1),
        )
        assert transfers.received_by("alice") == 5
        assert transfers.received_by("carol") == 0

    def test_rejects_non_positive_amounts(self):
        transfers = InMemoryValueTransfer()
        with pytest.raises(ValueError):
            transfers.transfer_value("alice", 0)
        assert transfers.transfers == ()

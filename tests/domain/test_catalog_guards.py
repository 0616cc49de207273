"""
Tests for the ordered guard chains.

Guards read plain attributes, so a SimpleNamespace stands in for a loaded
Item.  Each chain must report the FIRST failing precondition.
"""

from types import SimpleNamespace

import pytest

from catalog_kernel.domain.guards import (
    ADMIN_GUARDS,
    ADMIN_ITEM_GUARDS,
    BUY_GUARDS,
    MAX_AMOUNT,
    PURCHASE_GUARDS,
    GuardContext,
    GuardResult,
    enforce_guards,
    evaluate_guards,
)
from catalog_kernel.exceptions import (
    CatalogNotInitializedError,
    InsufficientPaymentError,
    InsufficientStockError,
    InvalidInputError,
    ItemLockedError,
    ItemNotFoundError,
    ItemUnavailableError,
    UnauthorizedError,
)


def make_item(**overrides):
    fields = dict(
        id=1,
        unit_price=2,
        stock=5,
        quantity=5,
        is_available=True,
        locked=False,
        exists=True,
    )
    fields.update(overrides)
    return SimpleNamespace(**fields)


def purchase_ctx(item=None, quantity=1, paid_amount=2, item_id=1) -> GuardContext:
    return GuardContext(
        operation="purchase",
        caller="buyer",
        item_id=item_id,
        item=item,
        quantity=quantity,
        paid_amount=paid_amount,
    )


class TestGuardResult:
    def test_success_has_no_reason(self):
        result = GuardResult.success("g")
        assert result.passed
        assert result.reason_code is None

    def test_reject_carries_error_code(self):
        result = GuardResult.reject("g", ItemLockedError(3))
        assert not result.passed
        assert result.reason_code == "ITEM_LOCKED"

    def test_all_passing_returns_success(self):
        result = evaluate_guards(PURCHASE_GUARDS, purchase_ctx(make_item()))
        assert result.passed


class TestAdminGuards:
    def test_no_owner_means_not_initialized(self):
        ctx = GuardContext(operation="add_item", caller="anyone", owner=None)
        with pytest.raises(CatalogNotInitializedError):
            enforce_guards(ADMIN_GUARDS, ctx)

    def test_non_owner_rejected(self):
        ctx = GuardContext(operation="add_item", caller="mallory", owner="alice")
        with pytest.raises(UnauthorizedError) as exc_info:
            enforce_guards(ADMIN_GUARDS, ctx)
        assert exc_info.value.operation == "add_item"

    def test_authorization_checked_before_existence(self):
        ctx = GuardContext(
            operation="lock_item", caller="mallory", owner="alice", item_id=99, item=None
        )
        with pytest.raises(UnauthorizedError):
            enforce_guards(ADMIN_ITEM_GUARDS, ctx)

    def test_owner_on_missing_item(self):
        ctx = GuardContext(
            operation="lock_item", caller="alice", owner="alice", item_id=99, item=None
        )
        with pytest.raises(ItemNotFoundError):
            enforce_guards(ADMIN_ITEM_GUARDS, ctx)


class TestPurchaseGuardOrder:
    def test_missing_item_first(self):
        with pytest.raises(ItemNotFoundError):
            enforce_guards(PURCHASE_GUARDS, purchase_ctx(None, quantity=0, paid_amount=0))

    def test_unavailable_before_zero_amount(self):
        item = make_item(is_available=False)
        with pytest.raises(ItemUnavailableError):
            enforce_guards(PURCHASE_GUARDS, purchase_ctx(item, quantity=0))

    def test_zero_amount_before_lock(self):
        item = make_item(locked=True)
        with pytest.raises(InvalidInputError):
            enforce_guards(PURCHASE_GUARDS, purchase_ctx(item, quantity=0))

    def test_locked_regardless_of_sufficiency(self):
        item = make_item(locked=True)
        with pytest.raises(ItemLockedError):
            enforce_guards(PURCHASE_GUARDS, purchase_ctx(item, quantity=100, paid_amount=0))

    def test_quantity_before_payment(self):
        with pytest.raises(InsufficientStockError) as exc_info:
            enforce_guards(
                PURCHASE_GUARDS, purchase_ctx(make_item(), quantity=6, paid_amount=0)
            )
        assert exc_info.value.counter == "quantity"
        assert exc_info.value.available == 5

    def test_payment_shortfall(self):
        with pytest.raises(InsufficientPaymentError) as exc_info:
            enforce_guards(
                PURCHASE_GUARDS, purchase_ctx(make_item(), quantity=2, paid_amount=3)
            )
        assert exc_info.value.required == 4
        assert exc_info.value.paid == 3


class TestBuyGuards:
    def test_lock_is_ignored(self):
        item = make_item(locked=True)
        assert evaluate_guards(BUY_GUARDS, purchase_ctx(item, quantity=1)).passed

    def test_zero_quantity_allowed(self):
        assert evaluate_guards(BUY_GUARDS, purchase_ctx(make_item(), quantity=0, paid_amount=0)).passed

    def test_negative_quantity_rejected(self):
        result = evaluate_guards(BUY_GUARDS, purchase_ctx(make_item(), quantity=-1))
        assert result.guard == "quantity_non_negative"

    def test_checks_stock_not_quantity(self):
        item = make_item(stock=1, quantity=50)
        with pytest.raises(InsufficientStockError) as exc_info:
            enforce_guards(BUY_GUARDS, purchase_ctx(item, quantity=2, paid_amount=100))
        assert exc_info.value.counter == "stock"


class TestQuantityBound:
    @pytest.mark.parametrize("guards", [BUY_GUARDS, PURCHASE_GUARDS])
    def test_oversized_quantity_is_invalid_input(self, guards):
        item = make_item(stock=MAX_AMOUNT, quantity=MAX_AMOUNT)
        result = evaluate_guards(guards, purchase_ctx(item, quantity=MAX_AMOUNT + 1))
        assert result.guard == "quantity_within_bound"
        assert isinstance(result.error, InvalidInputError)

    def test_bound_itself_is_accepted(self):
        item = make_item(stock=MAX_AMOUNT, quantity=MAX_AMOUNT, unit_price=0)
        ctx = purchase_ctx(item, quantity=MAX_AMOUNT, paid_amount=0)
        assert evaluate_guards(PURCHASE_GUARDS, ctx).passed

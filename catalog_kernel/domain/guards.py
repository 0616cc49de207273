"""
Guards -- ordered precondition checks for catalog operations.

Responsibility:
    Every public operation declares an ordered tuple of guards.  Each guard
    inspects a GuardContext and returns a GuardResult.  ``enforce_guards``
    evaluates them in order and raises the error carried by the FIRST
    failing result.  Guards never mutate anything, so a rejected operation
    has zero side effects.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.  Guards read an
    already-loaded Item; loading it is the caller's job.

Guard chains:
    ADMIN_GUARDS          owner check only (emergency_stop)
    ADMIN_ITEM_GUARDS     owner check, then item existence
    BUY_GUARDS            exists, available, non-negative qty, bounded qty,
                          stock, payment
    PURCHASE_GUARDS       exists, available, positive amount, bounded qty,
                          unlocked, quantity, payment

    BUY_GUARDS has no lock check and accepts a zero quantity;
    PURCHASE_GUARDS rejects both.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Sequence

from catalog_kernel.exceptions import (
    CatalogKernelError,
    CatalogNotInitializedError,
    InsufficientPaymentError,
    InsufficientStockError,
    InvalidInputError,
    ItemLockedError,
    ItemNotFoundError,
    ItemUnavailableError,
    UnauthorizedError,
)

if TYPE_CHECKING:
    from catalog_kernel.models.item import Item

# Largest price or counter value an item can hold (signed 64-bit column)
MAX_AMOUNT = 2**63 - 1


def check_amount_bound(field: str, value: int) -> None:
    """
    Raises:
        InvalidInputError: if ``value`` exceeds MAX_AMOUNT.
    """
    if value > MAX_AMOUNT:
        raise InvalidInputError(field, value, f"must not exceed {MAX_AMOUNT}")


@dataclass(frozen=True)
class GuardContext:
    """Everything a guard may look at.  Fields a chain does not use stay None."""

    operation: str
    caller: str | None = None
    owner: str | None = None
    item_id: int | None = None
    item: Item | None = None
    quantity: int | None = None
    paid_amount: int | None = None


@dataclass(frozen=True)
class GuardResult:
    """
    Result of evaluating one guard.

    Attributes:
        passed: True if the precondition holds
        guard: name of the guard that produced this result
        error: the exception to raise when the guard failed
    """

    passed: bool
    guard: str
    error: CatalogKernelError | None = None

    @property
    def reason_code(self) -> str | None:
        return self.error.code if self.error is not None else None

    @classmethod
    def success(cls, guard: str) -> GuardResult:
        return cls(passed=True, guard=guard)

    @classmethod
    def reject(cls, guard: str, error: CatalogKernelError) -> GuardResult:
        return cls(passed=False, guard=guard, error=error)


Guard = Callable[[GuardContext], GuardResult]


# ---------------------------------------------------------------------------
# Access
# ---------------------------------------------------------------------------


def caller_is_owner(ctx: GuardContext) -> GuardResult:
    if ctx.owner is None:
        return GuardResult.reject("caller_is_owner", CatalogNotInitializedError())
    if ctx.caller != ctx.owner:
        return GuardResult.reject(
            "caller_is_owner", UnauthorizedError(str(ctx.caller), ctx.operation)
        )
    return GuardResult.success("caller_is_owner")


# ---------------------------------------------------------------------------
# Item state
# ---------------------------------------------------------------------------


def item_exists(ctx: GuardContext) -> GuardResult:
    if ctx.item is None or not ctx.item.exists:
        return GuardResult.reject("item_exists", ItemNotFoundError(ctx.item_id))
    return GuardResult.success("item_exists")


def item_available(ctx: GuardContext) -> GuardResult:
    if not ctx.item.is_available:
        return GuardResult.reject("item_available", ItemUnavailableError(ctx.item.id))
    return GuardResult.success("item_available")


def item_not_locked(ctx: GuardContext) -> GuardResult:
    if ctx.item.locked:
        return GuardResult.reject("item_not_locked", ItemLockedError(ctx.item.id))
    return GuardResult.success("item_not_locked")


# ---------------------------------------------------------------------------
# Amounts and counters
# ---------------------------------------------------------------------------


def quantity_non_negative(ctx: GuardContext) -> GuardResult:
    if ctx.quantity is None or ctx.quantity < 0:
        return GuardResult.reject(
            "quantity_non_negative",
            InvalidInputError("quantity", ctx.quantity, "must not be negative"),
        )
    return GuardResult.success("quantity_non_negative")


def quantity_positive(ctx: GuardContext) -> GuardResult:
    if ctx.quantity is None or ctx.quantity <= 0:
        return GuardResult.reject(
            "quantity_positive",
            InvalidInputError("amount", ctx.quantity, "must be greater than zero"),
        )
    return GuardResult.success("quantity_positive")


def quantity_within_bound(ctx: GuardContext) -> GuardResult:
    if ctx.quantity > MAX_AMOUNT:
        return GuardResult.reject(
            "quantity_within_bound",
            InvalidInputError(
                "quantity" if ctx.operation == "buy" else "amount",
                ctx.quantity,
                f"must not exceed {MAX_AMOUNT}",
            ),
        )
    return GuardResult.success("quantity_within_bound")


def stock_sufficient(ctx: GuardContext) -> GuardResult:
    if ctx.item.stock < ctx.quantity:
        return GuardResult.reject(
            "stock_sufficient",
            InsufficientStockError(ctx.item.id, ctx.quantity, ctx.item.stock, "stock"),
        )
    return GuardResult.success("stock_sufficient")


def quantity_sufficient(ctx: GuardContext) -> GuardResult:
    if ctx.item.quantity < ctx.quantity:
        return GuardResult.reject(
            "quantity_sufficient",
            InsufficientStockError(
                ctx.item.id, ctx.quantity, ctx.item.quantity, "quantity"
            ),
        )
    return GuardResult.success("quantity_sufficient")


def payment_sufficient(ctx: GuardContext) -> GuardResult:
    required = ctx.item.unit_price * ctx.quantity
    if ctx.paid_amount < required:
        return GuardResult.reject(
            "payment_sufficient",
            InsufficientPaymentError(ctx.item.id, required, ctx.paid_amount),
        )
    return GuardResult.success("payment_sufficient")


ADMIN_GUARDS: tuple[Guard, ...] = (caller_is_owner,)

ADMIN_ITEM_GUARDS: tuple[Guard, ...] = (caller_is_owner, item_exists)

BUY_GUARDS: tuple[Guard, ...] = (
    item_exists,
    item_available,
    quantity_non_negative,
    quantity_within_bound,
    stock_sufficient,
    payment_sufficient,
)

PURCHASE_GUARDS: tuple[Guard, ...] = (
    item_exists,
    item_available,
    quantity_positive,
    quantity_within_bound,
    item_not_locked,
    quantity_sufficient,
    payment_sufficient,
)


def evaluate_guards(guards: Sequence[Guard], ctx: GuardContext) -> GuardResult:
    """
    Evaluate guards in order, stopping at the first failure.

    Returns:
        The first failing GuardResult, or a success result when all pass.
    """
    for guard in guards:
        result = guard(ctx)
        if not result.passed:
            return result
    return GuardResult.success("all")


def enforce_guards(guards: Sequence[Guard], ctx: GuardContext) -> None:
    """
    Evaluate guards and raise the first failure's error.

    Raises:
        CatalogKernelError: the specific error of the first failing guard.
    """
    result = evaluate_guards(guards, ctx)
    if not result.passed:
        raise result.error

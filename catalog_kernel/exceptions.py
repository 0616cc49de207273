"""
Typed Exception Hierarchy for the Catalog Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Every rejected catalog operation must tell the caller exactly why it was
rejected, and must leave no state change behind.  Callers branch on the
exception TYPE (or its ``code``), never on message text:

    try:
        catalog.purchase(ctx, item_id, amount=3)
    except ItemLockedError as e:
        notify(f"Item {e.item_id} is locked")
    except InsufficientStockError as e:
        api_response(code=e.code, available=e.available)

Every exception:
  1. Has a TYPED class (catch by type, not message)
  2. Has a CODE class attribute (machine-readable, API-safe)
  3. Carries structured DATA as attributes

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    CatalogKernelError (base)
    |
    +-- CatalogNotInitializedError
    |
    +-- AccessError
    |   +-- UnauthorizedError
    |
    +-- ItemError
    |   +-- ItemNotFoundError
    |   +-- ItemLockedError
    |   +-- ItemUnavailableError
    |
    +-- ValidationError
    |   +-- InvalidInputError
    |
    +-- PurchaseError
    |   +-- InsufficientStockError
    |   +-- InsufficientPaymentError
    |   +-- RefundTransferError
    |
    +-- EventLogError
    |   +-- EventChainBrokenError
    |
    +-- ImmutabilityError
        +-- ImmutabilityViolationError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category      | Code                     | When Raised
--------------|--------------------------|---------------------------------------
Setup         | CATALOG_NOT_INITIALIZED  | Operation before an owner was set
Access        | UNAUTHORIZED             | Caller is not the owner
Item          | ITEM_NOT_FOUND           | Item id not in the registry
              | ITEM_LOCKED              | purchase() on a locked item
              | ITEM_UNAVAILABLE         | Purchase on an unavailable item
Validation    | INVALID_INPUT            | Non-positive price/quantity, null owner
Purchase      | INSUFFICIENT_STOCK       | Counter below requested quantity
              | INSUFFICIENT_PAYMENT     | Paid less than unit price * quantity
              | REFUND_TRANSFER_FAILED   | Committed purchase, refund not delivered
Event log     | EVENT_CHAIN_BROKEN       | Hash chain validation failed
Immutability  | IMMUTABILITY_VIOLATION   | Update/delete of an append-only row

Only REFUND_TRANSFER_FAILED is raised AFTER a commit.  Every other error is
raised before any state is written, and the surrounding transaction is
rolled back.
"""


class CatalogKernelError(Exception):
    """
    Base exception for all catalog kernel errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "CATALOG_KERNEL_ERROR"


class CatalogNotInitializedError(CatalogKernelError):
    """No owner has been recorded yet."""

    code: str = "CATALOG_NOT_INITIALIZED"

    def __init__(self):
        super().__init__("Catalog has no owner; call initialize() first")


# Access-related exceptions


class AccessError(CatalogKernelError):
    """Base exception for access control errors."""

    code: str = "ACCESS_ERROR"


class UnauthorizedError(AccessError):
    """Caller is not the catalog owner."""

    code: str = "UNAUTHORIZED"

    def __init__(self, caller: str, operation: str | None = None):
        self.caller = caller
        self.operation = operation
        detail = f" for {operation}" if operation else ""
        super().__init__(f"Caller {caller!r} is not the owner{detail}")


# Item-related exceptions


class ItemError(CatalogKernelError):
    """Base exception for item state errors."""

    code: str = "ITEM_ERROR"


class ItemNotFoundError(ItemError):
    """Item with the given id does not exist."""

    code: str = "ITEM_NOT_FOUND"

    def __init__(self, item_id: int):
        self.item_id = item_id
        super().__init__(f"Item not found: {item_id}")


class ItemLockedError(ItemError):
    """Item is locked against the purchase workflow."""

    code: str = "ITEM_LOCKED"

    def __init__(self, item_id: int):
        self.item_id = item_id
        super().__init__(f"Item {item_id} is locked")


class ItemUnavailableError(ItemError):
    """Item is not available for sale."""

    code: str = "ITEM_UNAVAILABLE"

    def __init__(self, item_id: int):
        self.item_id = item_id
        super().__init__(f"Item {item_id} is not available")


# Validation exceptions


class ValidationError(CatalogKernelError):
    """Base exception for input validation errors."""

    code: str = "VALIDATION_ERROR"


class InvalidInputError(ValidationError):
    """An argument is outside its allowed range."""

    code: str = "INVALID_INPUT"

    def __init__(self, field: str, value, reason: str):
        self.field = field
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid {field}={value!r}: {reason}")


# Purchase-related exceptions


class PurchaseError(CatalogKernelError):
    """Base exception for purchase workflow errors."""

    code: str = "PURCHASE_ERROR"


class InsufficientStockError(PurchaseError):
    """Requested more units than the counter holds."""

    code: str = "INSUFFICIENT_STOCK"

    def __init__(self, item_id: int, requested: int, available: int, counter: str):
        self.item_id = item_id
        self.requested = requested
        self.available = available
        self.counter = counter
        super().__init__(
            f"Insufficient {counter} for item {item_id}: "
            f"requested {requested}, available {available}"
        )


class InsufficientPaymentError(PurchaseError):
    """Attached payment is below the total cost."""

    code: str = "INSUFFICIENT_PAYMENT"

    def __init__(self, item_id: int, required: int, paid: int):
        self.item_id = item_id
        self.required = required
        self.paid = paid
        super().__init__(
            f"Insufficient payment for item {item_id}: required {required}, paid {paid}"
        )


class RefundTransferError(PurchaseError):
    """
    The purchase committed but returning the excess payment failed.

    The registry mutation stays applied.  ``receipt`` is the committed
    PurchaseReceipt; ``amount`` is the refund still owed to ``recipient``.
    """

    code: str = "REFUND_TRANSFER_FAILED"

    def __init__(self, receipt, recipient: str, amount: int, reason: str):
        self.receipt = receipt
        self.recipient = recipient
        self.amount = amount
        self.reason = reason
        super().__init__(
            f"Refund of {amount} to {recipient!r} failed after commit: {reason}"
        )


# Event log exceptions


class EventLogError(CatalogKernelError):
    """Base exception for event log errors."""

    code: str = "EVENT_LOG_ERROR"


class EventChainBrokenError(EventLogError):
    """Event hash chain validation failed."""

    code: str = "EVENT_CHAIN_BROKEN"

    def __init__(self, seq: int, expected_hash: str, actual_hash: str):
        self.seq = seq
        self.expected_hash = expected_hash
        self.actual_hash = actual_hash
        super().__init__(
            f"Event chain broken at seq {seq}: "
            f"expected {expected_hash}, found {actual_hash}"
        )


# Immutability exceptions


class ImmutabilityError(CatalogKernelError):
    """Base exception for immutability errors."""

    code: str = "IMMUTABILITY_ERROR"


class ImmutabilityViolationError(ImmutabilityError):
    """
    Attempted to modify or delete an append-only record.

    Catalog events and listing rows are never updated or deleted; items
    are never deleted.
    """

    code: str = "IMMUTABILITY_VIOLATION"

    def __init__(self, entity_type: str, entity_id: str, reason: str):
        self.entity_type = entity_type
        self.entity_id = entity_id
        self.reason = reason
        super().__init__(
            f"Immutability violation on {entity_type} {entity_id}: {reason}"
        )

"""
ORM-Level Immutability Enforcement.

===============================================================================
HOW IT WORKS
===============================================================================

SQLAlchemy fires events before UPDATE/DELETE operations reach the database.
We register listeners that intercept these events and check our invariants:

    session.flush()
         |
         v
    [before_update event] --> _check_*_immutability() --> ImmutabilityViolationError
         |                                                        ^
         v                                                        |
    [before_delete event] --> _check_*_delete() -----------------+
         |
         v
    SQL sent to database (only if checks pass)

If a check fails, we raise ImmutabilityViolationError and the transaction
is aborted. The database is never modified.

===============================================================================
PROTECTED ENTITIES
===============================================================================

Entity          | Rule                                   | Why
----------------|----------------------------------------|----------------------------
CatalogEvent    | No UPDATE, no DELETE                   | The event log is append-only
ItemListing     | No UPDATE, no DELETE                   | Listing order is permanent
Item            | No DELETE; id and exists never change  | Items are never removed
"""

from sqlalchemy import event, inspect

from catalog_kernel.exceptions import ImmutabilityViolationError
from catalog_kernel.logging_config import get_logger

logger = get_logger("db.immutability")

ITEM_IDENTITY_FIELDS = frozenset({"id", "exists"})


def _blocked(entity_type: str, entity_id, operation: str, reason: str):
    logger.error(
        "immutability_violation_blocked",
        extra={
            "entity_type": entity_type,
            "entity_id": str(entity_id),
            "blocked_operation": operation,
        },
    )
    raise ImmutabilityViolationError(
        entity_type=entity_type,
        entity_id=str(entity_id),
        reason=reason,
    )


# =============================================================================
# Catalog events
# =============================================================================


def _check_catalog_event_immutability(mapper, connection, target):
    """Prevent any updates to CatalogEvent records."""
    _blocked(
        "CatalogEvent",
        target.seq,
        "UPDATE",
        "Catalog events are immutable and cannot be modified",
    )


def _check_catalog_event_delete(mapper, connection, target):
    """Prevent deletion of CatalogEvent records."""
    _blocked("CatalogEvent", target.seq, "DELETE", "Catalog events cannot be deleted")


# =============================================================================
# Listing
# =============================================================================


def _check_listing_immutability(mapper, connection, target):
    _blocked(
        "ItemListing",
        target.position,
        "UPDATE",
        "Listing positions are assigned once and never reordered",
    )


def _check_listing_delete(mapper, connection, target):
    _blocked("ItemListing", target.position, "DELETE", "Listing rows are never pruned")


# =============================================================================
# Items
# =============================================================================


def _check_item_identity(mapper, connection, target):
    """Counters and flags may change; identity and existence may not."""
    state = inspect(target)
    for field in ITEM_IDENTITY_FIELDS:
        if state.attrs[field].history.has_changes():
            _blocked(
                "Item",
                target.id,
                "UPDATE",
                f"Field '{field}' is fixed at creation",
            )


def _check_item_delete(mapper, connection, target):
    _blocked("Item", target.id, "DELETE", "Items are never removed from the catalog")


def _listeners():
    from catalog_kernel.models.catalog_event import CatalogEvent
    from catalog_kernel.models.item import Item, ItemListing

    return (
        (CatalogEvent, "before_update", _check_catalog_event_immutability),
        (CatalogEvent, "before_delete", _check_catalog_event_delete),
        (ItemListing, "before_update", _check_listing_immutability),
        (ItemListing, "before_delete", _check_listing_delete),
        (Item, "before_update", _check_item_identity),
        (Item, "before_delete", _check_item_delete),
    )


def register_immutability_listeners():
    """
    Register all immutability enforcement event listeners (idempotent).
    """
    for target, event_name, listener_fn in _listeners():
        if not event.contains(target, event_name, listener_fn):
            event.listen(target, event_name, listener_fn)


def unregister_immutability_listeners():
    """
    Remove immutability enforcement event listeners.

    WARNING: Only use this in tests where you need to intentionally
    violate immutability rules to verify detection.
    """
    for target, event_name, listener_fn in _listeners():
        if event.contains(target, event_name, listener_fn):
            event.remove(target, event_name, listener_fn)

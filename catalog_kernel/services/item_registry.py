"""
ItemRegistry -- keyed item store with an append-only ordered id list.

Responsibility:
    Creates items, assigns their ids from the monotonic ``item_id``
    sequence, appends them to the ordered listing, and loads them back.

Architecture position:
    Kernel > Services.  Used by AdministrativeOps (create), PurchaseEngine
    (locked loads) and CatalogSelector (ordered reads go through the same
    listing table).

Invariants enforced:
    - create() requires 0 < unit_price, initial_quantity <= MAX_AMOUNT.
    - A new id equals the counter value before creation; the counter
      advances exactly once per committed creation.
    - stock == quantity == initial_quantity, available and unlocked at
      creation.
    - exists is True iff the id is in the listing.

Failure modes:
    - InvalidInputError: non-positive or oversized price or
      quantity, missing name.
    - ItemNotFoundError: get() of an id that was never created.
"""

from sqlalchemy import func, select

from catalog_kernel.domain.guards import check_amount_bound
from catalog_kernel.exceptions import InvalidInputError, ItemNotFoundError
from catalog_kernel.logging_config import get_logger
from catalog_kernel.models.item import Item, ItemListing
from catalog_kernel.services.base import BaseService
from catalog_kernel.services.sequence_service import SequenceService

logger = get_logger("services.item_registry")


class ItemRegistry(BaseService):
    """Item store plus ordered listing and id counter."""

    def __init__(self, session):
        super().__init__(session)
        self._sequence_service = SequenceService(session)

    def create(
        self,
        name: str,
        unit_price: int,
        initial_quantity: int,
        created_by: str,
    ) -> Item:
        """
        Create an item and append it to the listing.

        Returns:
            The new Item, flushed.
        """
        if name is None:
            raise InvalidInputError("name", name, "is required")
        if unit_price <= 0:
            raise InvalidInputError("unit_price", unit_price, "must be greater than zero")
        if initial_quantity <= 0:
            raise InvalidInputError(
                "initial_quantity", initial_quantity, "must be greater than zero"
            )
        check_amount_bound("unit_price", unit_price)
        check_amount_bound("initial_quantity", initial_quantity)

        item_id = self._sequence_service.next_value(SequenceService.ITEM_ID)
        item = Item(
            id=item_id,
            name=name,
            unit_price=unit_price,
            stock=initial_quantity,
            quantity=initial_quantity,
            is_available=True,
            locked=False,
            exists=True,
            created_by=created_by,
        )
        self.session.add(item)
        self.session.flush()

        self.session.add(ItemListing(position=self.count() + 1, item_id=item_id))
        self.session.flush()

        logger.info(
            "item_created",
            extra={
                "new_item_id": item_id,
                "unit_price": unit_price,
                "initial_quantity": initial_quantity,
            },
        )
        return item

    def find(self, item_id: int, for_update: bool = False) -> Item | None:
        """Load an item, or None if it does not exist."""
        stmt = select(Item).where(Item.id == item_id, Item.exists.is_(True))
        if for_update:
            stmt = stmt.with_for_update()
        return self.session.execute(stmt).scalar_one_or_none()

    def get(self, item_id: int, for_update: bool = False) -> Item:
        """
        Load an item.

        Raises:
            ItemNotFoundError: If the item does not exist.
        """
        item = self.find(item_id, for_update=for_update)
        if item is None:
            raise ItemNotFoundError(item_id)
        return item

    def list_ids(self) -> list[int]:
        """All assigned ids in creation order."""
        return list(
            self.session.execute(
                select(ItemListing.item_id).order_by(ItemListing.position)
            ).scalars()
        )

    def list_items(self, for_update: bool = False) -> list[Item]:
        """All items in creation order."""
        stmt = (
            select(Item)
            .join(ItemListing, ItemListing.item_id == Item.id)
            .order_by(ItemListing.position)
        )
        if for_update:
            stmt = stmt.with_for_update()
        return list(self.session.execute(stmt).scalars())

    def count(self) -> int:
        return self.session.execute(
            select(func.count()).select_from(ItemListing)
        ).scalar_one()

    def next_item_id(self) -> int:
        """The id the next successful create() will assign."""
        return self._sequence_service.peek_next(SequenceService.ITEM_ID)

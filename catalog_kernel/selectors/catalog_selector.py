"""
CatalogSelector -- read-only projections over the item registry.

Every id-keyed query except ``get_stock`` rejects a missing id with
ItemNotFoundError.  ``get_stock`` answers 0 instead; callers relying on
either behaviour exist, so the two are kept as they are.

``is_sold_out`` looks at ``stock`` (the legacy buy counter), not at
``quantity``, so an item emptied through purchase() is not reported sold out.

``get_user_purchases`` reads the purchase ledger.  No workflow writes that
ledger, so it reports 0 for every (user, item) pair.
"""

from sqlalchemy import func, select

from catalog_kernel.domain.dtos import AvailableItems, ItemInfo
from catalog_kernel.exceptions import ItemNotFoundError
from catalog_kernel.models.item import Item, ItemListing
from catalog_kernel.models.ownership import OWNERSHIP_ROW_ID, CatalogOwnership
from catalog_kernel.models.purchase_ledger import PurchaseLedgerEntry
from catalog_kernel.selectors.base import BaseSelector
from catalog_kernel.services.sequence_service import SequenceCounter, SequenceService


class CatalogSelector(BaseSelector):
    """Queries over items, the listing, the ledger and the owner."""

    def _find(self, item_id: int) -> Item | None:
        return self.session.execute(
            select(Item).where(Item.id == item_id, Item.exists.is_(True))
        ).scalar_one_or_none()

    def get_item(self, item_id: int) -> ItemInfo:
        item = self._find(item_id)
        if item is None:
            raise ItemNotFoundError(item_id)
        return ItemInfo.from_model(item)

    def get_available_items(self) -> AvailableItems:
        """Items that are available with stock left, in creation order."""
        rows = self.session.execute(
            select(Item.id, Item.name, Item.unit_price, Item.stock)
            .join(ItemListing, ItemListing.item_id == Item.id)
            .where(Item.is_available.is_(True), Item.stock > 0)
            .order_by(ItemListing.position)
        ).all()
        if not rows:
            return AvailableItems()
        ids, names, prices, stocks = zip(*rows)
        return AvailableItems(ids=ids, names=names, prices=prices, stocks=stocks)

    def get_all_item_ids(self) -> list[int]:
        return list(
            self.session.execute(
                select(ItemListing.item_id).order_by(ItemListing.position)
            ).scalars()
        )

    def list_items(self) -> list[ItemInfo]:
        """Every item in creation order, unfiltered."""
        rows = self.session.execute(
            select(Item)
            .join(ItemListing, ItemListing.item_id == Item.id)
            .order_by(ItemListing.position)
        ).scalars()
        return [ItemInfo.from_model(item) for item in rows]

    def get_user_purchases(self, user: str, item_id: int) -> int:
        total = self.session.execute(
            select(PurchaseLedgerEntry.total_purchased).where(
                PurchaseLedgerEntry.buyer == user,
                PurchaseLedgerEntry.item_id == item_id,
            )
        ).scalar_one_or_none()
        return total or 0

    def is_sold_out(self, item_id: int) -> bool:
        item = self._find(item_id)
        if item is None:
            raise ItemNotFoundError(item_id)
        return item.stock == 0

    def get_stock(self, item_id: int) -> int:
        item = self._find(item_id)
        return item.stock if item is not None else 0

    def get_total_item_count(self) -> int:
        return self.session.execute(
            select(func.count()).select_from(ItemListing)
        ).scalar_one()

    def get_owner(self) -> str | None:
        return self.session.execute(
            select(CatalogOwnership.owner).where(CatalogOwnership.id == OWNERSHIP_ROW_ID)
        ).scalar_one_or_none()

    def get_next_item_id(self) -> int:
        current = self.session.execute(
            select(SequenceCounter.current_value).where(
                SequenceCounter.name == SequenceService.ITEM_ID
            )
        ).scalar_one_or_none()
        return (current or 0) + 1

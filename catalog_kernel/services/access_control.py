"""
AccessControlService -- the single catalog owner.

Responsibility:
    Holds the one identity allowed to perform administrative mutations,
    authorizes callers against it, and transfers it.

Architecture position:
    Kernel > Services.  Owner changes are recorded through EventLogService
    in the caller's transaction.

Invariants enforced:
    - Exactly one owner once initialized; never the null identity.
    - Ownership changes only through ``transfer_ownership`` by the current
      owner.

Failure modes:
    - CatalogNotInitializedError: no owner recorded yet.
    - UnauthorizedError: caller is not the owner.
    - InvalidInputError: null identity as initial or new owner, or a second
      initialization.
"""

from sqlalchemy import select

from catalog_kernel.domain.guards import ADMIN_GUARDS, GuardContext, enforce_guards
from catalog_kernel.domain.host import NULL_IDENTITY, is_null_identity
from catalog_kernel.exceptions import CatalogNotInitializedError, InvalidInputError
from catalog_kernel.logging_config import get_logger
from catalog_kernel.models.ownership import OWNERSHIP_ROW_ID, CatalogOwnership
from catalog_kernel.services.base import BaseService
from catalog_kernel.services.event_log import EventLogService

logger = get_logger("services.access_control")


class AccessControlService(BaseService):
    """Single-owner gate for every mutating catalog operation."""

    def __init__(self, session, event_log: EventLogService):
        super().__init__(session)
        self._event_log = event_log

    def _ownership(self, for_update: bool = False) -> CatalogOwnership | None:
        stmt = select(CatalogOwnership).where(CatalogOwnership.id == OWNERSHIP_ROW_ID)
        if for_update:
            stmt = stmt.with_for_update()
        return self.session.execute(stmt).scalar_one_or_none()

    def owner(self) -> str | None:
        """Current owner, or None before initialization."""
        ownership = self._ownership()
        return ownership.owner if ownership else None

    @property
    def is_initialized(self) -> bool:
        return self._ownership() is not None

    def initialize(self, owner: str) -> None:
        """
        Record the initializing caller as owner.

        Emits OwnershipTransferred(NULL_IDENTITY -> owner).
        """
        if is_null_identity(owner):
            raise InvalidInputError("owner", owner, "must not be the null identity")
        if self._ownership(for_update=True) is not None:
            raise InvalidInputError("owner", owner, "catalog is already initialized")

        self.session.add(CatalogOwnership(id=OWNERSHIP_ROW_ID, owner=owner, created_by=owner))
        self.session.flush()
        self._event_log.record_ownership_transferred(owner, NULL_IDENTITY, owner)

        logger.info("catalog_initialized", extra={"owner": owner})

    def authorize(self, caller: str, operation: str | None = None) -> None:
        """
        Raise unless ``caller`` is the owner.

        Raises:
            CatalogNotInitializedError: no owner recorded yet.
            UnauthorizedError: caller is not the owner.
        """
        enforce_guards(
            ADMIN_GUARDS,
            GuardContext(operation=operation or "authorize", caller=caller, owner=self.owner()),
        )

    def transfer_ownership(self, caller: str, new_owner: str) -> str:
        """
        Hand the catalog to ``new_owner``.

        Returns:
            The previous owner.
        """
        self.authorize(caller, "transfer_ownership")
        if is_null_identity(new_owner):
            raise InvalidInputError("new_owner", new_owner, "must not be the null identity")

        ownership = self._ownership(for_update=True)
        if ownership is None:
            raise CatalogNotInitializedError()
        previous = ownership.owner
        ownership.owner = new_owner
        self.session.flush()

        self._event_log.record_ownership_transferred(caller, previous, new_owner)
        logger.info(
            "ownership_transferred",
            extra={"previous_owner": previous, "new_owner": new_owner},
        )
        return previous

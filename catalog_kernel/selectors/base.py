"""
Module: catalog_kernel.selectors.base
Responsibility: Abstract base class for all read-only query selectors.  Selectors
    form the query side of the catalog, providing structured read access
    without mutation capability.
Architecture position: Kernel > Selectors.  May import from db/, models/,
    domain/dtos and the SequenceCounter model.  MUST NOT call any service.

Invariants enforced:
    - Read-only access: Selectors MUST NOT call session.add(), session.delete(),
      session.commit(), or session.flush().
    - DTO return convention: Selectors return frozen dataclasses or plain
      values, NOT ORM model instances.
    - Session ownership: the caller owns the session and its transaction
      scope, so a selector only ever sees committed state.
"""

from abc import ABC

from sqlalchemy.orm import Session


class BaseSelector(ABC):
    """
    Abstract base class for all selectors.

    Guarantees:
        - session is stored as a public attribute for subclass query use.
        - No commit, flush, add, or delete operations are performed.
    """

    def __init__(self, session: Session):
        self.session = session

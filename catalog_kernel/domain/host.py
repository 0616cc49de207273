"""
Host ports -- what the surrounding environment supplies to the catalog.

Responsibility:
    Defines the value objects and interfaces for the collaborators the core
    consumes but does not implement: the identity of the caller and the
    payment attached to a call (CallContext), and the ability to send value
    back to an identity (ValueTransfer).

Architecture position:
    Kernel > Domain -- pure, zero I/O.  Concrete transports live outside
    the kernel; InMemoryValueTransfer is the reference implementation used
    by tests and local runs.
"""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from collections import defaultdict
from dataclasses import dataclass

# The null / zero identity.  Never a valid owner.
NULL_IDENTITY = "0x0000000000000000000000000000000000000000"


def is_null_identity(identity: str | None) -> bool:
    """True for None, the empty string, and the zero address."""
    if identity is None:
        return True
    normalized = identity.strip().lower()
    return normalized == "" or normalized == NULL_IDENTITY


@dataclass(frozen=True)
class CallContext:
    """
    Who is calling, and how much value is attached to the call.

    ``payment`` is in the smallest currency unit.  Calls that do not pay
    leave it at 0.
    """

    caller: str
    payment: int = 0

    def __post_init__(self) -> None:
        if self.payment < 0:
            raise ValueError(f"payment must be non-negative, got {self.payment}")


class ValueTransfer(ABC):
    """
    Port for sending value to an identity.

    Contract:
        ``transfer_value`` either delivers the full amount or raises.  It is
        only ever invoked after the transaction that owes the value has
        committed.
    """

    @abstractmethod
    def transfer_value(self, to: str, amount: int) -> None:
        """Send ``amount`` to ``to``."""
        ...


@dataclass(frozen=True)
class Transfer:
    """One delivered value transfer."""

    to: str
    amount: int


class InMemoryValueTransfer(ValueTransfer):
    """Records transfers and keeps per-identity received totals."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._transfers: list[Transfer] = []
        self._received: dict[str, int] = defaultdict(int)

    def transfer_value(self, to: str, amount: int) -> None:
        if amount <= 0:
            raise ValueError(f"transfer amount must be positive, got {amount}")
        with self._lock:
            self._transfers.append(Transfer(to=to, amount=amount))
            self._received[to] += amount

    @property
    def transfers(self) -> tuple[Transfer, ...]:
        with self._lock:
            return tuple(self._transfers)

    def received_by(self, identity: str) -> int:
        with self._lock:
            return self._received.get(identity, 0)

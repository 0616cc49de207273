"""Database layer - engine, base classes and immutability."""

from catalog_kernel.db.base import Base, TrackedBase
from catalog_kernel.db.engine import (
    build_engine,
    create_tables,
    drop_tables,
    session_scope,
)

__all__ = [
    "build_engine",
    "session_scope",
    "create_tables",
    "drop_tables",
    "Base",
    "TrackedBase",
]

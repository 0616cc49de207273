"""
CatalogSettings schema.

The parsed, frozen form of a catalog configuration file.  The loader turns
YAML into this type; ``get_active_config()`` hands it to callers, who pass
it to ``CatalogService.from_settings()``.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class CatalogSettings:
    """Runtime settings for one catalog deployment."""

    database_url: str = "sqlite://"
    echo: bool = False
    pool_size: int = 5  # PostgreSQL only
    max_overflow: int = 10  # PostgreSQL only
    log_level: str = "INFO"
    serialize_reads: bool = True
    create_schema: bool = True
    checksum: str = ""

    def __post_init__(self) -> None:
        if not self.database_url:
            raise ValueError("database_url must not be empty")
        if self.pool_size < 1:
            raise ValueError(f"pool_size must be >= 1, got {self.pool_size}")
        if self.max_overflow < 0:
            raise ValueError(f"max_overflow must be >= 0, got {self.max_overflow}")

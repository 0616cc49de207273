"""
catalog_config -- single public entrypoint for catalog configuration.

Responsibility:
    Provides the only way to obtain settings at runtime through
    ``get_active_config()``.  Returns a frozen ``CatalogSettings``.

Architecture position:
    Configuration sits above ``catalog_kernel``.  The kernel never imports
    from this package; ``CatalogService.from_settings()`` accepts the
    settings object it produces.

Failure modes:
    - ``FileNotFoundError`` -- the requested settings file does not exist.
    - ``ValueError`` -- unknown keys or wrongly typed values.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from catalog_config.loader import compute_checksum, load_yaml_file, parse_settings
from catalog_config.schema import CatalogSettings

_logger = logging.getLogger("catalog_kernel.config")

CONFIG_PATH_ENV = "CATALOG_CONFIG_PATH"

_DEFAULT_CONFIG_FILE = Path(__file__).parent / "defaults.yaml"


def get_active_config(path: Path | str | None = None) -> CatalogSettings:
    """The only public configuration entrypoint.

    Resolution order: the ``path`` argument, then the file named by
    ``CATALOG_CONFIG_PATH``, then the packaged ``defaults.yaml``.  Every
    successful call emits a ``catalog_config_loaded`` log entry carrying the
    source file and the settings checksum.

    Raises:
        FileNotFoundError: If the resolved file does not exist.
        ValueError: If the file contains unknown or mistyped settings.
    """
    source = Path(path or os.environ.get(CONFIG_PATH_ENV) or _DEFAULT_CONFIG_FILE)
    settings = parse_settings(load_yaml_file(source))

    _logger.info(
        "catalog_config_loaded",
        extra={
            "config_source": str(source),
            "checksum": settings.checksum,
            "dialect": settings.database_url.split(":", 1)[0],
            "serialize_reads": settings.serialize_reads,
        },
    )
    return settings


__all__ = [
    "CONFIG_PATH_ENV",
    "CatalogSettings",
    "compute_checksum",
    "get_active_config",
    "load_yaml_file",
    "parse_settings",
]

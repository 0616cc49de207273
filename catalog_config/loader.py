"""
Configuration Loader (``catalog_config.loader``).

Responsibility
--------------
Loads a YAML settings file and parses it into a frozen
``CatalogSettings``.  Runtime callers go through
``catalog_config.get_active_config()`` instead of calling this directly.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Unknown keys or wrongly typed values  -> ``ValueError``.
"""

from __future__ import annotations

import hashlib
import json
from dataclasses import fields
from pathlib import Path
from typing import Any

import yaml

from catalog_config.schema import CatalogSettings

_FIELD_TYPES: dict[str, type] = {
    "database_url": str,
    "echo": bool,
    "pool_size": int,
    "max_overflow": int,
    "log_level": str,
    "serialize_reads": bool,
    "create_schema": bool,
}


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
        ValueError: if the top level is not a mapping.
    """
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"{path}: top level must be a mapping, got {type(data).__name__}")
    return data


def parse_settings(data: dict[str, Any]) -> CatalogSettings:
    """
    Parse a settings dict into ``CatalogSettings``.

    Settings may sit at the top level or under a ``catalog:`` key.
    Missing keys take the dataclass defaults.
    """
    section = data.get("catalog", data)
    known = {f.name for f in fields(CatalogSettings)} - {"checksum"}
    unknown = sorted(set(section) - known)
    if unknown:
        raise ValueError(f"Unknown catalog settings: {', '.join(unknown)}")

    values: dict[str, Any] = {}
    for key, value in section.items():
        expected = _FIELD_TYPES[key]
        # bool is a subclass of int; reject it where a count is expected
        if not isinstance(value, expected) or (expected is int and isinstance(value, bool)):
            raise ValueError(
                f"Setting '{key}' must be {expected.__name__}, got {type(value).__name__}"
            )
        values[key] = value

    return CatalogSettings(checksum=compute_checksum(values), **values)


def compute_checksum(data: dict[str, Any]) -> str:
    """SHA-256 of the canonical JSON serialization of ``data``."""
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()

"""
Deterministic hashing utilities.

All hashing in the catalog kernel must be deterministic and reproducible.
This module provides the canonical hashing functions for the event trail.
"""

import hashlib
import json
from datetime import date, datetime
from typing import Any


def _json_serializer(obj: Any) -> Any:
    """
    Custom JSON serializer for types not natively supported.

    Raises:
        TypeError: If object type is not supported.
    """
    if isinstance(obj, (datetime, date)):
        return obj.isoformat()
    if isinstance(obj, bytes):
        return obj.hex()

    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


def canonicalize_json(data: dict | list | Any) -> str:
    """
    Convert data to canonical JSON string.

    Keys are sorted alphabetically and no whitespace is emitted, so equal
    payloads always produce equal strings.
    """
    return json.dumps(
        data,
        sort_keys=True,
        separators=(",", ":"),
        default=_json_serializer,
    )


def hash_payload(payload: dict) -> str:
    """
    Compute SHA-256 hash of a payload.

    Returns:
        Hex-encoded SHA-256 hash (64 characters).
    """
    canonical = canonicalize_json(payload)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


def hash_catalog_event(
    seq: int,
    event_type: str,
    item_id: int | None,
    payload_hash: str,
    prev_hash: str | None,
) -> str:
    """
    Compute hash for a catalog event.

    The hash includes the key fields plus the previous event's hash,
    creating a tamper-evident chain.

    Returns:
        Hex-encoded SHA-256 hash.
    """
    components = [
        str(seq),
        event_type,
        "" if item_id is None else str(item_id),
        payload_hash,
        prev_hash or "GENESIS",
    ]
    data = "|".join(components)
    return hashlib.sha256(data.encode("utf-8")).hexdigest()

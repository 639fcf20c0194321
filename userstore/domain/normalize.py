"""
Canonicalization of validated user payloads before they reach the store.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Mapping

# Attributes owned by the core; never taken from caller payloads.
RESERVED_FIELDS = frozenset({"id", "createdAt", "updatedAt"})


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def timestamp(now: datetime) -> str:
    """ISO-8601 UTC string with millisecond precision and a `Z` suffix."""
    return now.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def normalize_id(user_id: str) -> str:
    return user_id.strip()


def _normalize_fields(data: Mapping[str, Any]) -> Dict[str, Any]:
    fields = {key: value for key, value in data.items() if key not in RESERVED_FIELDS}
    if isinstance(fields.get("name"), str):
        fields["name"] = fields["name"].strip()
    if fields.get("email"):
        fields["email"] = fields["email"].strip().lower()
    return fields


def normalize_new(user_id: str, data: Mapping[str, Any], now: datetime) -> Dict[str, Any]:
    """
    Build the item persisted on creation.

    Empty optional values are dropped so they never reach the store.
    """
    fields = _normalize_fields(data)
    for optional in ("email", "phone"):
        if optional in fields and not fields[optional]:
            del fields[optional]
    stamp = timestamp(now)
    return {"id": normalize_id(user_id), **fields, "createdAt": stamp, "updatedAt": stamp}


def normalize_changes(data: Mapping[str, Any], now: datetime) -> Dict[str, Any]:
    """
    Build the field set applied by an update: only the fields present, plus
    a fresh `updatedAt`.
    """
    changes = _normalize_fields(data)
    changes["updatedAt"] = timestamp(now)
    return changes


__all__ = [
    "RESERVED_FIELDS",
    "normalize_changes",
    "normalize_id",
    "normalize_new",
    "timestamp",
    "utc_now",
]

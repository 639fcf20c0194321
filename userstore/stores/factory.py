"""
Record store factory.

Builds the configured store once from Settings so it can be injected into the
orchestrator. No module-level client is kept here; callers own the instance.
"""

from __future__ import annotations

from typing import Callable, Dict, List, Optional

from userstore.config import Settings, get_settings
from userstore.stores.abstract import RecordStore
from userstore.stores.dynamodb import DynamoDBRecordStore
from userstore.stores.memory import MemoryRecordStore
from userstore.stores.postgres import PostgresRecordStore


def _store_factories() -> Dict[str, Callable[[Settings], RecordStore]]:
    """Registry of available store backends."""
    return {
        "dynamodb": lambda s: DynamoDBRecordStore(
            table_name=s.table_name,
            region=s.region,
            key_attribute=s.table_key,
            endpoint_url=s.dynamodb_endpoint_url,
        ),
        "postgres": lambda s: PostgresRecordStore(dsn=s.dsn, table_name=s.table_name),
        "memory": lambda s: MemoryRecordStore(),
    }


def available_backends() -> List[str]:
    """List available store backend names."""
    return sorted(_store_factories().keys())


def build_store(settings: Optional[Settings] = None) -> RecordStore:
    """
    Construct the store selected by `settings.store_backend`.

    Raises
    ------
    ValueError
        If the backend name is unknown.
    """
    settings = settings or get_settings()
    factories = _store_factories()
    backend = settings.store_backend.lower()
    if backend not in factories:
        raise ValueError(f"Unknown store backend '{backend}'. Available: {', '.join(factories)}")
    return factories[backend](settings)


__all__ = ["available_backends", "build_store"]

"""
Stores package for the user record store.

Re-exports the store contract and the concrete backends so downstream code
can import from `userstore.stores` directly.
"""

from userstore.stores.abstract import (
    AbstractRecordStore,
    ConditionFailed,
    RecordStore,
    StoreError,
)
from userstore.stores.dynamodb import DynamoDBRecordStore
from userstore.stores.factory import available_backends, build_store
from userstore.stores.memory import MemoryRecordStore
from userstore.stores.postgres import PostgresRecordStore

__all__ = [
    # Contract
    "AbstractRecordStore",
    "ConditionFailed",
    "RecordStore",
    "StoreError",
    # Concrete stores
    "DynamoDBRecordStore",
    "MemoryRecordStore",
    "PostgresRecordStore",
    # Factory
    "available_backends",
    "build_store",
]

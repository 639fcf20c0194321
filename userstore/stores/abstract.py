"""
Record store contract for the user operations.

Concrete stores (in-memory, DynamoDB, PostgreSQL) implement the RecordStore
protocol: three conditional primitives keyed by a single primary key. Stores
report the outcome of their existence checks with `ConditionFailed` and every
other failure with `StoreError`, so callers never see backend-specific error
names.
"""

from __future__ import annotations

import abc
from typing import Any, Dict, Optional, Protocol, runtime_checkable

Item = Dict[str, Any]


class StoreError(Exception):
    """The backing store failed to complete a request."""


class ConditionFailed(StoreError):
    """A conditional write was rejected because the existence check did not hold."""


@runtime_checkable
class RecordStore(Protocol):
    """
    Common interface all record stores must implement.

    Attributes
    ----------
    name : str
        A short machine-friendly identifier of the backend.
    """

    name: str

    async def put(self, key: str, item: Item) -> None:
        """
        Insert `item` under `key` only if no item with that key exists.

        Raises
        ------
        ConditionFailed
            If `key` is already present.
        StoreError
            On any other failure.
        """
        ...

    async def get(self, key: str) -> Optional[Item]:
        """Return the item stored under `key`, or None when absent."""
        ...

    async def update(self, key: str, changes: Item) -> Item:
        """
        Merge `changes` into the item under `key` only if it exists.

        Returns
        -------
        Item
            The full item after the update.

        Raises
        ------
        ConditionFailed
            If `key` is absent.
        StoreError
            On any other failure.
        """
        ...


class AbstractRecordStore(abc.ABC):
    """
    Optional ABC helper for class-based implementations.

    Subclasses should set `name` and implement the three primitives.
    """

    name: str

    @abc.abstractmethod
    async def put(self, key: str, item: Item) -> None:  # pragma: no cover - interface only
        raise NotImplementedError

    @abc.abstractmethod
    async def get(self, key: str) -> Optional[Item]:  # pragma: no cover - interface only
        raise NotImplementedError

    @abc.abstractmethod
    async def update(self, key: str, changes: Item) -> Item:  # pragma: no cover - interface only
        raise NotImplementedError


__all__ = [
    "AbstractRecordStore",
    "ConditionFailed",
    "Item",
    "RecordStore",
    "StoreError",
]

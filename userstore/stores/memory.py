"""
In-memory record store.

Keeps items in a dict keyed by id. Each primitive runs without awaiting
between its existence check and its write, so on a single event loop the
conditional semantics hold without a lock.
"""

from __future__ import annotations

import copy
from typing import Dict, Optional

from userstore.stores.abstract import AbstractRecordStore, ConditionFailed, Item


class MemoryRecordStore(AbstractRecordStore):
    """
    Dict-backed store used by tests and the `memory` backend.
    """

    name: str = "memory"

    def __init__(self, items: Optional[Dict[str, Item]] = None) -> None:
        self._items: Dict[str, Item] = copy.deepcopy(items) if items else {}

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, key: object) -> bool:
        return key in self._items

    async def put(self, key: str, item: Item) -> None:
        if key in self._items:
            raise ConditionFailed(f"item {key!r} already exists")
        self._items[key] = copy.deepcopy(item)

    async def get(self, key: str) -> Optional[Item]:
        item = self._items.get(key)
        return copy.deepcopy(item) if item is not None else None

    async def update(self, key: str, changes: Item) -> Item:
        if key not in self._items:
            raise ConditionFailed(f"item {key!r} does not exist")
        self._items[key].update(copy.deepcopy(changes))
        return copy.deepcopy(self._items[key])


__all__ = ["MemoryRecordStore"]

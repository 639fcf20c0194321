"""
PostgreSQL record store.

Stores each user as a JSONB document in a two-column table keyed by id.
Conditional semantics come from single statements: `INSERT ... ON CONFLICT
DO NOTHING RETURNING` for creation and `UPDATE ... RETURNING` for
modification, so an empty result is the condition failure.

Includes retry logic for transient connection failures using tenacity. Only
connection establishment is retried, never a statement.
"""

from __future__ import annotations

from typing import Awaitable, Callable, Optional

import psycopg
from psycopg import AsyncConnection, sql
from psycopg.types.json import Jsonb
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from userstore.stores.abstract import AbstractRecordStore, ConditionFailed, Item, StoreError
from userstore.utils.logging import get_logger

log = get_logger(__name__)

ConnectFactory = Callable[[], Awaitable[AsyncConnection]]

_CREATE_TABLE = sql.SQL(
    "CREATE TABLE IF NOT EXISTS {table} (id TEXT PRIMARY KEY, item JSONB NOT NULL)"
)
_INSERT = sql.SQL(
    "INSERT INTO {table} (id, item) VALUES (%s, %s) ON CONFLICT (id) DO NOTHING RETURNING id"
)
_SELECT = sql.SQL("SELECT item FROM {table} WHERE id = %s")
_UPDATE = sql.SQL("UPDATE {table} SET item = item || %s WHERE id = %s RETURNING item")


class PostgresRecordStore(AbstractRecordStore):
    """
    Record store backed by a PostgreSQL table of JSONB documents.
    """

    name: str = "postgres"

    def __init__(
        self,
        dsn: str,
        table_name: str,
        connect: Optional[ConnectFactory] = None,
    ) -> None:
        self._dsn = dsn
        self._table = sql.Identifier(table_name)
        self._connect_override = connect

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=10),
        retry=retry_if_exception_type((psycopg.OperationalError, psycopg.InterfaceError)),
        reraise=True,
    )
    async def _connect(self) -> AsyncConnection:
        """
        Acquire an asynchronous connection with automatic retry.

        Retries up to 3 times with exponential backoff for transient connection errors.
        """
        if self._connect_override is not None:
            return await self._connect_override()
        return await AsyncConnection.connect(self._dsn)

    async def _fetchone(self, query: sql.Composable, params: tuple) -> Optional[tuple]:
        try:
            async with await self._connect() as conn:
                cur = await conn.execute(query.format(table=self._table), params)
                return await cur.fetchone()
        except psycopg.Error as exc:
            raise StoreError(str(exc)) from exc

    async def put(self, key: str, item: Item) -> None:
        row = await self._fetchone(_INSERT, (key, Jsonb({**item, "id": key})))
        if row is None:
            raise ConditionFailed(f"item {key!r} already exists")

    async def get(self, key: str) -> Optional[Item]:
        row = await self._fetchone(_SELECT, (key,))
        return dict(row[0]) if row is not None else None

    async def update(self, key: str, changes: Item) -> Item:
        fields = {k: v for k, v in changes.items() if k != "id"}
        row = await self._fetchone(_UPDATE, (Jsonb(fields), key))
        if row is None:
            raise ConditionFailed(f"item {key!r} does not exist")
        return dict(row[0])

    async def ensure_schema(self) -> None:
        """Create the backing table if it does not exist yet."""
        try:
            async with await self._connect() as conn:
                await conn.execute(_CREATE_TABLE.format(table=self._table))
        except psycopg.Error as exc:
            raise StoreError(str(exc)) from exc
        log.info("Schema ensured", extra={"backend": self.name})


__all__ = ["PostgresRecordStore"]

"""
DynamoDB record store.

Wraps a boto3 `Table` resource. Conditional writes use
`attribute_(not_)exists` on the partition key, and DynamoDB's
`ConditionalCheckFailedException` is reported as `ConditionFailed`. boto3 is
blocking, so every call runs in a worker thread to keep the event loop free.

The partition key attribute is configurable (`TABLE_KEY`, default `user`)
and is mapped to and from the record's `id`. A record field with the same
name as that attribute is refused with `StoreError` rather than overwritten.
"""

from __future__ import annotations

import asyncio
import json
from decimal import Decimal
from typing import Any, Dict, List, Optional

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from userstore.stores.abstract import AbstractRecordStore, ConditionFailed, Item, StoreError
from userstore.utils.logging import get_logger

log = get_logger(__name__)

_CONDITION_FAILED_CODE = "ConditionalCheckFailedException"


def _is_conditional_check_failed(exc: Exception) -> bool:
    if not isinstance(exc, ClientError):
        return False
    return exc.response.get("Error", {}).get("Code") == _CONDITION_FAILED_CODE


def _to_dynamo_value(value: Any) -> Any:
    """boto3 rejects floats; round-trip through JSON to turn them into Decimals."""
    return json.loads(json.dumps(value), parse_float=Decimal)


def _from_dynamo_value(value: Any) -> Any:
    if isinstance(value, Decimal):
        return int(value) if value == value.to_integral_value() else float(value)
    if isinstance(value, dict):
        return {k: _from_dynamo_value(v) for k, v in value.items()}
    if isinstance(value, (list, set)):
        return [_from_dynamo_value(v) for v in value]
    return value


class DynamoDBRecordStore(AbstractRecordStore):
    """
    Record store backed by a single DynamoDB table with a string partition key.
    """

    name: str = "dynamodb"

    def __init__(
        self,
        table_name: str,
        region: str,
        key_attribute: str = "user",
        endpoint_url: Optional[str] = None,
        table: Any = None,
    ) -> None:
        self.table_name = table_name
        self.key_attribute = key_attribute
        self._resource = None
        if table is None:
            self._resource = boto3.resource(
                "dynamodb",
                region_name=region,
                endpoint_url=endpoint_url,
                config=Config(retries={"max_attempts": 3, "mode": "standard"}),
            )
            table = self._resource.Table(table_name)
        self._table = table

    def _key(self, key: str) -> Dict[str, str]:
        return {self.key_attribute: key}

    def _check_key_collision(self, fields: Item) -> None:
        """Refuse caller fields that would shadow the partition key attribute."""
        if self.key_attribute != "id" and self.key_attribute in fields:
            raise StoreError(
                f"field {self.key_attribute!r} is reserved for the table's partition key"
            )

    def _to_item(self, key: str, item: Item) -> Item:
        self._check_key_collision(item)
        body = {k: v for k, v in item.items() if k != "id"}
        body[self.key_attribute] = key
        return _to_dynamo_value(body)

    def _from_item(self, raw: Item) -> Item:
        item = _from_dynamo_value(dict(raw))
        key = item.pop(self.key_attribute, None)
        return {"id": key, **item}

    async def put(self, key: str, item: Item) -> None:
        try:
            await asyncio.to_thread(
                self._table.put_item,
                Item=self._to_item(key, item),
                ConditionExpression="attribute_not_exists(#key)",
                ExpressionAttributeNames={"#key": self.key_attribute},
            )
        except ClientError as exc:
            if _is_conditional_check_failed(exc):
                raise ConditionFailed(f"item {key!r} already exists") from exc
            raise StoreError(str(exc)) from exc
        except BotoCoreError as exc:
            raise StoreError(str(exc)) from exc

    async def get(self, key: str) -> Optional[Item]:
        try:
            response = await asyncio.to_thread(
                self._table.get_item, Key=self._key(key), ConsistentRead=True
            )
        except (ClientError, BotoCoreError) as exc:
            raise StoreError(str(exc)) from exc
        raw = response.get("Item")
        return self._from_item(raw) if raw else None

    async def update(self, key: str, changes: Item) -> Item:
        self._check_key_collision(changes)
        assignments: List[str] = []
        names: Dict[str, str] = {"#key": self.key_attribute}
        values: Dict[str, Any] = {}
        fields = [(k, v) for k, v in changes.items() if k != "id"]
        for index, (field, value) in enumerate(fields):
            assignments.append(f"#attr{index} = :val{index}")
            names[f"#attr{index}"] = field
            values[f":val{index}"] = _to_dynamo_value(value)

        kwargs: Dict[str, Any] = {
            "Key": self._key(key),
            "ConditionExpression": "attribute_exists(#key)",
            "ExpressionAttributeNames": names,
            "ReturnValues": "ALL_NEW",
        }
        # Without assignments the call is a pure existence check returning the item.
        if assignments:
            kwargs["UpdateExpression"] = f"SET {', '.join(assignments)}"
            kwargs["ExpressionAttributeValues"] = values

        try:
            response = await asyncio.to_thread(self._table.update_item, **kwargs)
        except ClientError as exc:
            if _is_conditional_check_failed(exc):
                raise ConditionFailed(f"item {key!r} does not exist") from exc
            raise StoreError(str(exc)) from exc
        except BotoCoreError as exc:
            raise StoreError(str(exc)) from exc
        return self._from_item(response.get("Attributes", {}))

    async def ensure_table(self) -> None:
        """
        Create the table (on-demand billing) if it does not exist yet.
        """
        if self._resource is None:
            raise StoreError("ensure_table requires a store built from a boto3 resource")

        def _create() -> None:
            client = self._resource.meta.client
            try:
                client.describe_table(TableName=self.table_name)
                log.info("Table already exists", extra={"tableName": self.table_name})
                return
            except ClientError as exc:
                if exc.response.get("Error", {}).get("Code") != "ResourceNotFoundException":
                    raise
            table = self._resource.create_table(
                TableName=self.table_name,
                KeySchema=[{"AttributeName": self.key_attribute, "KeyType": "HASH"}],
                AttributeDefinitions=[{"AttributeName": self.key_attribute, "AttributeType": "S"}],
                BillingMode="PAY_PER_REQUEST",
            )
            table.wait_until_exists()
            log.info("Table created", extra={"tableName": self.table_name})

        try:
            await asyncio.to_thread(_create)
        except (ClientError, BotoCoreError) as exc:
            raise StoreError(str(exc)) from exc


__all__ = ["DynamoDBRecordStore"]

"""
Infrastructure adapter: Amazon DynamoDB → IAliasStore.

Table layout: partition key 'alias' (string, e.g. '?FAANG'), attribute
'assets' (list of ticker strings). boto3 is blocking, so every call runs
in a worker thread. Any boto3 failure surfaces as AliasLookupError.
"""

import asyncio
import logging
import os
from typing import Any, Callable, TypeVar

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from brokerbot.domain.errors import AliasLookupError
from brokerbot.domain.ports.alias_store_port import IAliasStore

logger = logging.getLogger(__name__)

T = TypeVar("T")


class DynamoDBAliasStore(IAliasStore):
    """Persists aliases in a DynamoDB table."""

    def __init__(self, table_name: str, region: str | None = None, table: Any = None) -> None:
        self._table = table or boto3.resource(
            "dynamodb",
            region_name=region or os.environ.get("AWS_DEFAULT_REGION", "us-east-1"),
        ).Table(table_name)

    async def get_aliases(self) -> dict[str, list[str]]:
        items = await self._call(self._scan_all)
        return {item["alias"].upper(): _members(item) for item in items}

    async def get_alias(self, name: str) -> list[str]:
        name = name.upper()
        response = await self._call(lambda: self._table.get_item(Key={"alias": name}))
        item = response.get("Item")
        if item is None:
            raise AliasLookupError(f'alias "{name}" not found')
        return _members(item)

    async def create_alias(self, name: str, members: list[str]) -> None:
        item = {"alias": name.upper(), "assets": [m.upper() for m in members]}
        await self._call(lambda: self._table.put_item(Item=item))

    async def delete_alias(self, name: str) -> None:
        name = name.upper()
        await self._call(lambda: self._table.delete_item(Key={"alias": name}))

    def _scan_all(self) -> list[dict]:
        response = self._table.scan()
        items = list(response.get("Items", []))
        while "LastEvaluatedKey" in response:
            response = self._table.scan(ExclusiveStartKey=response["LastEvaluatedKey"])
            items.extend(response.get("Items", []))
        return items

    async def _call(self, fn: Callable[[], T]) -> T:
        try:
            return await asyncio.to_thread(fn)
        except (BotoCoreError, ClientError) as exc:
            logger.error("DynamoDB alias store call failed: %s", exc)
            raise AliasLookupError(f"alias store unavailable: {exc}") from exc


def _members(item: dict) -> list[str]:
    return [str(m).upper() for m in item.get("assets", [])]

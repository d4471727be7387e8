from __future__ import annotations

import logging
import time
from collections.abc import Sequence
from decimal import Decimal
from typing import Any

import boto3
from boto3.dynamodb.conditions import Key
from botocore.exceptions import BotoCoreError, ClientError

from laundrybill.store.base import (
    INDEX_PARTITION_KEY,
    PARTITION_KEY,
    SORT_KEY,
    KeyValueStore,
    Record,
    StoreError,
)

logger = logging.getLogger(__name__)

MAX_UNPROCESSED_RETRIES = 5
RETRY_BASE_DELAY = 0.05


def _to_dynamo(value: Any) -> Any:
    """Convert floats to Decimal recursively; boto3 rejects float values."""
    if isinstance(value, bool):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    if isinstance(value, dict):
        return {k: _to_dynamo(v) for k, v in value.items() if v is not None}
    if isinstance(value, (list, tuple)):
        return [_to_dynamo(v) for v in value]
    return value


def _from_dynamo(value: Any) -> Any:
    if isinstance(value, Decimal):
        return int(value) if value == value.to_integral_value() else float(value)
    if isinstance(value, dict):
        return {k: _from_dynamo(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_from_dynamo(v) for v in value]
    return value


class DynamoDBStore(KeyValueStore):
    def __init__(
        self,
        table_name: str,
        index_name: str = "gsi1",
        region: str = "",
        access_key_id: str = "",
        secret_access_key: str = "",
        endpoint_url: str = "",
        max_batch_size: int = 25,
    ) -> None:
        self.table_name = table_name
        self.index_name = index_name
        self.max_batch_size = max_batch_size

        resource_kwargs: dict = {"service_name": "dynamodb"}
        if region:
            resource_kwargs["region_name"] = region
        if access_key_id and secret_access_key:
            resource_kwargs["aws_access_key_id"] = access_key_id
            resource_kwargs["aws_secret_access_key"] = secret_access_key
        if endpoint_url:
            resource_kwargs["endpoint_url"] = endpoint_url

        self.resource = boto3.resource(**resource_kwargs)
        self.table = self.resource.Table(table_name)

    def _fail(self, operation: str, exc: Exception) -> StoreError:
        logger.error("DynamoDB %s failed on table %s: %s", operation, self.table_name, exc)
        return StoreError()

    def get(self, pk: str, sk: str) -> Record | None:
        try:
            response = self.table.get_item(Key={PARTITION_KEY: pk, SORT_KEY: sk})
        except (ClientError, BotoCoreError) as exc:
            raise self._fail("get_item", exc) from exc
        item = response.get("Item")
        return _from_dynamo(item) if item is not None else None

    def put(self, record: Record) -> None:
        try:
            self.table.put_item(Item=_to_dynamo(record))
        except (ClientError, BotoCoreError) as exc:
            raise self._fail("put_item", exc) from exc

    def delete(self, pk: str, sk: str) -> None:
        try:
            self.table.delete_item(Key={PARTITION_KEY: pk, SORT_KEY: sk})
        except (ClientError, BotoCoreError) as exc:
            raise self._fail("delete_item", exc) from exc

    def _paginate(self, operation: str, **query_kwargs: Any) -> list[Record]:
        limit = query_kwargs.get("Limit")
        records: list[Record] = []
        try:
            while True:
                response = self.table.query(**query_kwargs)
                records.extend(_from_dynamo(item) for item in response.get("Items", []))
                last_key = response.get("LastEvaluatedKey")
                if not last_key or (limit is not None and len(records) >= limit):
                    break
                query_kwargs["ExclusiveStartKey"] = last_key
        except (ClientError, BotoCoreError) as exc:
            raise self._fail(operation, exc) from exc
        return records[:limit] if limit is not None else records

    def query(self, pk: str, sk_prefix: str | None = None) -> list[Record]:
        condition = Key(PARTITION_KEY).eq(pk)
        if sk_prefix is not None:
            condition = condition & Key(SORT_KEY).begins_with(sk_prefix)
        return self._paginate("query", KeyConditionExpression=condition)

    def query_index(self, index_pk: str, limit: int | None = None) -> list[Record]:
        kwargs: dict[str, Any] = {
            "IndexName": self.index_name,
            "KeyConditionExpression": Key(INDEX_PARTITION_KEY).eq(index_pk),
        }
        if limit is not None:
            kwargs["Limit"] = limit
        return self._paginate("query_index", **kwargs)

    def batch_write(
        self,
        puts: Sequence[Record] = (),
        deletes: Sequence[tuple[str, str]] = (),
    ) -> None:
        self._check_batch_size(puts, deletes)
        requests: list[dict] = [{"PutRequest": {"Item": _to_dynamo(record)}} for record in puts]
        requests.extend({"DeleteRequest": {"Key": {PARTITION_KEY: pk, SORT_KEY: sk}}} for pk, sk in deletes)
        if not requests:
            return

        pending = {self.table_name: requests}
        attempt = 0
        try:
            while pending:
                response = self.resource.batch_write_item(RequestItems=pending)
                pending = response.get("UnprocessedItems") or {}
                if not pending:
                    break
                attempt += 1
                if attempt > MAX_UNPROCESSED_RETRIES:
                    remaining = sum(len(v) for v in pending.values())
                    logger.error("batch_write gave up with %d unprocessed requests", remaining)
                    raise StoreError()
                logger.warning("batch_write retrying %d unprocessed requests (attempt %d)", len(pending), attempt)
                time.sleep(RETRY_BASE_DELAY * 2**attempt)
        except (ClientError, BotoCoreError) as exc:
            raise self._fail("batch_write_item", exc) from exc

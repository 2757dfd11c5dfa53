"""DynamoDB-backed notification store.

Table schema:
- Partition Key: user_id
- Sort Key: sort_key (``<created_at ISO>#<notification id>``, newest last)

Every inbox query is scoped to one user, so all reads are a single-partition
``Query`` in descending sort-key order. Secondary filters (read, type,
priority, pharmacy, date range) are evaluated on the decoded records.
The boto3 client is blocking; calls run through ``asyncio.to_thread``.
"""

import asyncio
import json
from typing import Any, Dict, Iterator, List, Optional

import boto3
from botocore.exceptions import ClientError

from infrastructure.logging import get_module_logger
from infrastructure.notifications.models import NotificationFilter, NotificationRecord
from infrastructure.persistence.stores import NotificationStore

logger = get_module_logger()

_OPTIONAL_STRINGS = ("pharmacy_id", "error", "read_at")


def _sort_key(record: NotificationRecord) -> str:
    return f"{record.created_at.isoformat()}#{record.id}"


def to_item(record: NotificationRecord) -> Dict[str, Any]:
    """Encode a record in DynamoDB attribute-value format."""
    dumped = record.model_dump(mode="json")
    item: Dict[str, Any] = {
        "user_id": {"S": record.user_id},
        "sort_key": {"S": _sort_key(record)},
        "id": {"S": record.id},
        "tenant_id": {"S": record.tenant_id},
        "type": {"S": record.type},
        "title": {"S": record.title},
        "message": {"S": record.message},
        "data": {"S": json.dumps(dumped["data"])},
        "channels": {"S": json.dumps(dumped["channels"])},
        "priority": {"S": dumped["priority"]},
        "status": {"S": dumped["status"]},
        "read": {"BOOL": record.read},
        "language": {"S": record.language},
        "created_at": {"S": dumped["created_at"]},
    }
    for field in _OPTIONAL_STRINGS:
        if dumped[field] is not None:
            item[field] = {"S": dumped[field]}
    return item


def from_item(item: Dict[str, Any]) -> NotificationRecord:
    """Decode a DynamoDB item into a record."""
    values: Dict[str, Any] = {
        "id": item["id"]["S"],
        "user_id": item["user_id"]["S"],
        "tenant_id": item["tenant_id"]["S"],
        "type": item["type"]["S"],
        "title": item["title"]["S"],
        "message": item["message"]["S"],
        "data": json.loads(item["data"]["S"]),
        "channels": json.loads(item["channels"]["S"]),
        "priority": item["priority"]["S"],
        "status": item["status"]["S"],
        "read": item["read"]["BOOL"],
        "language": item.get("language", {}).get("S", "en"),
        "created_at": item["created_at"]["S"],
    }
    for field in _OPTIONAL_STRINGS:
        if field in item:
            values[field] = item[field]["S"]
    return NotificationRecord.model_validate(values)


class DynamoDBNotificationStore(NotificationStore):
    """Notification store backed by a DynamoDB table.

    Attributes:
        table_name: Table holding notification items
        client: boto3 DynamoDB client
    """

    def __init__(
        self,
        table_name: str,
        region_name: Optional[str] = None,
        endpoint_url: Optional[str] = None,
        client: Any = None,
    ) -> None:
        self.table_name = table_name
        self.client = client or boto3.client(
            "dynamodb", region_name=region_name, endpoint_url=endpoint_url
        )

    def _query_user(self, user_id: str) -> Iterator[NotificationRecord]:
        paginator = self.client.get_paginator("query")
        pages = paginator.paginate(
            TableName=self.table_name,
            KeyConditionExpression="user_id = :uid",
            ExpressionAttributeValues={":uid": {"S": user_id}},
            ScanIndexForward=False,
        )
        for page in pages:
            for item in page.get("Items", []):
                yield from_item(item)

    def _matching(self, filter: NotificationFilter) -> List[NotificationRecord]:
        try:
            return [r for r in self._query_user(filter.user_id) if filter.matches(r)]
        except ClientError as e:
            logger.error(
                "dynamodb_notification_query_error",
                table=self.table_name,
                error=str(e),
                error_code=e.response.get("Error", {}).get("Code"),
            )
            raise

    def _put(self, record: NotificationRecord) -> None:
        self.client.put_item(TableName=self.table_name, Item=to_item(record))

    def _update(self, record: NotificationRecord, changes: Dict[str, Any]) -> None:
        updated = NotificationRecord.model_validate({**record.model_dump(), **changes})
        # read state is the only mutable part of a record; rewrite the item
        self._put(updated)

    def _delete(self, record: NotificationRecord) -> None:
        self.client.delete_item(
            TableName=self.table_name,
            Key={
                "user_id": {"S": record.user_id},
                "sort_key": {"S": _sort_key(record)},
            },
        )

    async def create(self, record: NotificationRecord) -> NotificationRecord:
        await asyncio.to_thread(self._put, record)
        logger.debug(
            "notification_record_written",
            notification_id=record.id,
            table=self.table_name,
        )
        return record

    async def find_one(self, filter: NotificationFilter) -> Optional[NotificationRecord]:
        matches = await asyncio.to_thread(self._matching, filter)
        return matches[0] if matches else None

    async def find_many(
        self,
        filter: NotificationFilter,
        offset: int = 0,
        limit: Optional[int] = None,
    ) -> List[NotificationRecord]:
        matches = await asyncio.to_thread(self._matching, filter)
        end = None if limit is None else offset + limit
        return matches[offset:end]

    async def count(self, filter: NotificationFilter) -> int:
        return len(await asyncio.to_thread(self._matching, filter))

    async def update_many(
        self, filter: NotificationFilter, changes: Dict[str, Any]
    ) -> int:
        def _run() -> int:
            matches = self._matching(filter)
            for record in matches:
                self._update(record, changes)
            return len(matches)

        return await asyncio.to_thread(_run)

    async def delete_many(self, filter: NotificationFilter) -> int:
        def _run() -> int:
            matches = self._matching(filter)
            for record in matches:
                self._delete(record)
            return len(matches)

        return await asyncio.to_thread(_run)

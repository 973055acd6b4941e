"""
Correlation Store.

Durable mapping from a stack's target key to the drift detection in flight for
it and the CodePipeline job waiting on the result. One item per target key; a
newer scan overwrites the previous item and items are never deleted.

DynamoDB item layout:
    pk               (S) "{account}#{region}#{stack_name}"
    scan_id          (S) StackDriftDetectionId
    pipeline_job_id  (S) CodePipeline job id
    updated_at       (S) ISO-8601 UTC timestamp of the write
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, Optional, Protocol, runtime_checkable

from ..utils import setup_logging
from .types import DynamoDBClient, DynamoDBItem

logger = setup_logging()


@dataclass(frozen=True)
class CorrelationRecord:
    """Association between an in-flight drift scan and the waiting pipeline job."""

    target_key: str
    scan_id: Optional[str]
    waiting_job_id: str


@runtime_checkable
class CorrelationStoreProtocol(Protocol):
    """Store interface both handlers depend on."""

    def put(self, record: CorrelationRecord) -> None: ...

    def get(self, target_key: str) -> Optional[CorrelationRecord]: ...


def build_target_key(account: str, region: str, stack_name: str) -> str:
    """Composite key identifying one stack: '{account}#{region}#{stack_name}'."""
    return f"{account}#{region}#{stack_name}"


class CorrelationStore:
    """DynamoDB-backed correlation store."""

    def __init__(self, dynamodb_client: DynamoDBClient, table_name: str) -> None:
        self._client = dynamodb_client
        self._table_name = table_name

    def put(self, record: CorrelationRecord) -> None:
        """
        Writes the record, replacing any previous record for the same target key.

        Raises:
            botocore.exceptions.ClientError: If the write fails
        """
        item: DynamoDBItem = {
            "pk": {"S": record.target_key},
            "pipeline_job_id": {"S": record.waiting_job_id},
            "updated_at": {"S": datetime.now(timezone.utc).isoformat()},
        }
        if record.scan_id:
            item["scan_id"] = {"S": record.scan_id}

        logger.debug(f"Writing correlation record for {record.target_key}")
        self._client.put_item(TableName=self._table_name, Item=item)

    def get(self, target_key: str) -> Optional[CorrelationRecord]:
        """
        Reads the record for a target key.

        Returns:
            The record, or None if no record exists for the key

        Raises:
            botocore.exceptions.ClientError: If the read fails
        """
        response = self._client.get_item(
            TableName=self._table_name,
            Key={"pk": {"S": target_key}},
            ConsistentRead=True,
        )
        logger.debug(f"GetItem response for {target_key}: {response}")

        item = response.get("Item")
        if not item or "pipeline_job_id" not in item:
            return None
        return CorrelationRecord(
            target_key=target_key,
            scan_id=item.get("scan_id", {}).get("S"),
            waiting_job_id=item["pipeline_job_id"]["S"],
        )


class InMemoryCorrelationStore:
    """In-memory correlation store for tests; the Lambda handlers always use DynamoDB."""

    def __init__(self) -> None:
        self.records: Dict[str, CorrelationRecord] = {}

    def put(self, record: CorrelationRecord) -> None:
        self.records[record.target_key] = record

    def get(self, target_key: str) -> Optional[CorrelationRecord]:
        return self.records.get(target_key)

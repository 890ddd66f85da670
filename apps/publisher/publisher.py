"""
Event Publisher for the Transactions Queue

Sends TransactionEvents to SQS and writes rejected CSV rows to S3.

Features:
- SQS send with automatic retries
- JSON message serialization (camelCase, same document shape the consumer reads)
- Rejected rows stored with the rejection reason
- Structured logging

Usage:
    from apps.publisher.publisher import SqsPublisher

    publisher = SqsPublisher(sqs_client)
    publisher.publish(event)
"""

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

import orjson
from botocore.exceptions import BotoCoreError, ClientError
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from apps.publisher.csv_reader import RejectedRow
from utils.config import settings
from utils.schemas import TransactionEvent
from utils.storage import S3Storage

logger = logging.getLogger(__name__)


class SqsPublisher:
    """SQS publisher for transaction events with retries."""

    def __init__(
        self,
        sqs_client: Any,
        queue_name: Optional[str] = None,
        queue_url: Optional[str] = None,
    ) -> None:
        """Initialize SQS publisher.

        Args:
            sqs_client: boto3 SQS client
            queue_name: Queue name, defaults to settings.SQS_QUEUE_NAME
            queue_url: Queue URL, skips the name lookup when given
        """
        self.sqs_client = sqs_client
        self.queue_name = queue_name or settings.SQS_QUEUE_NAME
        self.queue_url = queue_url or settings.SQS_QUEUE_URL

    def resolve_queue_url(self) -> str:
        """Look up the queue URL by name unless one was configured."""
        if not self.queue_url:
            response = self.sqs_client.get_queue_url(QueueName=self.queue_name)
            self.queue_url = response["QueueUrl"]
        return self.queue_url

    @retry(
        retry=retry_if_exception_type((BotoCoreError, ClientError)),
        stop=stop_after_attempt(settings.PUBLISH_MAX_RETRIES),
        wait=wait_exponential(multiplier=1, min=1, max=5),
        reraise=True,
    )
    def publish(self, event: TransactionEvent) -> str:
        """Send one event to the queue with retry logic.

        Args:
            event: Event to publish

        Returns:
            SQS MessageId

        Raises:
            botocore.exceptions.ClientError: If sending fails after retries
        """
        response = self.sqs_client.send_message(
            QueueUrl=self.resolve_queue_url(),
            MessageBody=event.to_json(),
        )
        logger.debug("Published transaction_id=%s", event.transactionId)
        return response["MessageId"]


def rejected_row_key(file_name: str, line_number: int) -> str:
    """Object key for one rejected row: rejected/{stem}/{stem}_{line_number}.json

    Stable per file and line, so republishing a file overwrites its earlier rejects.
    """
    stem = Path(file_name).stem
    return f"rejected/{stem}/{stem}_{line_number}.json"


def discard_rejected(
    storage: S3Storage,
    bucket: str,
    rejected: RejectedRow,
    file_name: str,
) -> Optional[str]:
    """
    Store a rejected row in the rejected-transactions bucket.

    Args:
        storage: Storage adapter
        bucket: Rejected bucket name; the row is only logged when empty
        rejected: The rejected row
        file_name: Name of the CSV file the row came from

    Returns:
        s3:// URI of the stored row, or None if no bucket is configured

    Raises:
        StorageError: If the write fails
    """
    if not bucket:
        logger.error(
            "Rejected bucket not configured, dropping row: file=%s, line=%d, reason=%s",
            file_name, rejected.line_number, rejected.reason,
        )
        return None

    document = {
        **rejected.row,
        "_rejectionReason": rejected.reason,
        "_originalFileName": file_name,
        "_rejectionTimestamp": datetime.now(timezone.utc).isoformat(),
    }
    body = orjson.dumps(document).decode("utf-8")

    return storage.store(bucket, rejected_row_key(file_name, rejected.line_number), body)

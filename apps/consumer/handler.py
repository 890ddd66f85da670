"""
Message Handler - one queue message, one enrichment + storage round trip.

The handler never swallows a failure: the queue runtime only deletes a
message when ``handle`` returns, so any raised error leads to redelivery.
Replays write the same key, since the key depends only on the event.
"""

import logging

import orjson
from pydantic import ValidationError

from apps.consumer.enrichment import enrich
from utils.errors import DeserializationError, ErrorKind, ProcessingError
from utils.schemas import EnrichmentResult, TransactionEvent
from utils.storage import S3Storage

logger = logging.getLogger(__name__)


class MessageHandler:
    """
    Deserializes, enriches and stores transaction events.

    Holds only immutable references, so one instance can serve concurrent
    invocations.
    """

    def __init__(self, storage: S3Storage, bucket: str) -> None:
        """
        Args:
            storage: Storage adapter used for the write
            bucket: Output bucket name
        """
        self.storage = storage
        self.bucket = bucket

    def deserialize(self, body: str | bytes) -> TransactionEvent:
        """
        Parse a raw queue payload into a TransactionEvent.

        Raises:
            DeserializationError: If the payload is not JSON or not an event
        """
        try:
            return TransactionEvent.from_json(body)
        except (orjson.JSONDecodeError, ValidationError, TypeError) as e:
            raise DeserializationError(f"Invalid transaction event payload: {e}") from e

    def handle(self, body: str | bytes) -> EnrichmentResult:
        """
        Process one inbound message end to end.

        Args:
            body: Raw message body (UTF-8 JSON)

        Returns:
            The enrichment result that was stored

        Raises:
            DeserializationError: If the payload cannot be decoded
            ProcessingError: If enrichment or storage fails; carries the
                cause's message and kind
        """
        logger.info("Message received")

        event = self.deserialize(body)
        logger.debug("Event deserialized: transaction_id=%s", event.transactionId)

        try:
            result = enrich(event)
            self.storage.store(self.bucket, result.storage_key, result.event.to_json())
        except Exception as e:
            logger.error(
                "Failed to process transaction: transaction_id=%s, error=%s",
                event.transactionId, str(e),
            )
            raise ProcessingError.wrap(
                e,
                default_kind=ErrorKind.STORAGE,
                details={"transactionId": event.transactionId},
            ) from e

        logger.info(
            "Transaction processed: transaction_id=%s, uri=s3://%s/%s",
            event.transactionId, self.bucket, result.storage_key,
        )
        return result

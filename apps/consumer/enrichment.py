"""
Event enrichment and storage key derivation.

Pure functions: no I/O, same output for the same input.
"""

from datetime import datetime
from typing import Optional

from utils.errors import MalformedInputError
from utils.schemas import EnrichmentResult, TransactionEvent

PROCESSED_STATUS = "PROCESSED"
CONSUMER_SOURCE = "SQS-Consumer"
KEY_PREFIX = "processed-transactions"


def build_storage_key(transaction_id: str, transaction_date: Optional[datetime]) -> str:
    """
    Derive the date-partitioned object key for a transaction.

    Format: processed-transactions/{yyyy}/{MM}/{dd}/{transactionId}.json

    Raises:
        MalformedInputError: If the id is blank or the date is missing
    """
    if not transaction_id or not transaction_id.strip():
        raise MalformedInputError("transactionId must be a non-empty string")

    if not isinstance(transaction_date, datetime):
        raise MalformedInputError(
            "transactionDate is required to derive the storage key",
            details={"transactionId": transaction_id},
        )

    date_path = f"{transaction_date.year:04d}/{transaction_date.month:02d}/{transaction_date.day:02d}"
    return f"{KEY_PREFIX}/{date_path}/{transaction_id}.json"


def enrich(event: TransactionEvent) -> EnrichmentResult:
    """
    Mark an event as processed by this consumer and derive its storage key.

    Overwrites ``status`` and ``originalSource`` whatever their inbound
    values; every other field is copied unchanged.

    Raises:
        MalformedInputError: If the event cannot be keyed
    """
    storage_key = build_storage_key(event.transactionId, event.transactionDate)

    enriched = event.model_copy(
        update={
            "status": PROCESSED_STATUS,
            "originalSource": CONSUMER_SOURCE,
        }
    )
    return EnrichmentResult(event=enriched, storage_key=storage_key)

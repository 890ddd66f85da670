"""
pytest configuration and shared fixtures.

Sets a test environment before application modules read their settings.
"""

import os
from datetime import datetime
from decimal import Decimal
from unittest.mock import MagicMock

import pytest

# Set test environment variables BEFORE any imports
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("LOG_FORMAT", "text")
os.environ.setdefault("SQS_QUEUE_URL", "https://sqs.us-east-1.amazonaws.com/000000000000/transactions-queue")
os.environ.setdefault("S3_OUTPUT_BUCKET_NAME", "test-processed-data-bucket")

from utils.schemas import TransactionEvent  # noqa: E402


@pytest.fixture
def event_payload():
    """Inbound queue payload for transaction tx-1."""
    return (
        '{"transactionId":"tx-1","userId":"u1","amount":100.50,"currency":"BRL",'
        '"transactionDate":"2023-10-27T10:30:00","status":"PENDING"}'
    )


@pytest.fixture
def sample_event():
    """TransactionEvent matching event_payload."""
    return TransactionEvent(
        transactionId="tx-1",
        userId="u1",
        amount=Decimal("100.50"),
        currency="BRL",
        transactionDate=datetime(2023, 10, 27, 10, 30, 0),
        status="PENDING",
    )


@pytest.fixture
def mock_s3_client():
    """Mock boto3 S3 client."""
    client = MagicMock()
    client.put_object.return_value = {"ETag": '"abc123"'}
    return client


@pytest.fixture
def mock_sqs_client():
    """Mock boto3 SQS client."""
    client = MagicMock()
    client.get_queue_url.return_value = {
        "QueueUrl": "https://sqs.us-east-1.amazonaws.com/000000000000/transactions-queue"
    }
    client.send_message.return_value = {"MessageId": "msg-1"}
    client.receive_message.return_value = {"Messages": []}
    return client

"""
Unit tests for the SQS publisher and rejected-row storage.
"""

from unittest.mock import Mock

import orjson
import pytest

from apps.publisher.csv_reader import RejectedRow
from apps.publisher.publisher import SqsPublisher, discard_rejected, rejected_row_key
from utils.storage import S3Storage

QUEUE_URL = "https://sqs.us-east-1.amazonaws.com/000000000000/transactions-queue"


@pytest.fixture
def rejected_row():
    return RejectedRow(
        line_number=3,
        row={"transaction_id": "tx-2", "amount": "-5"},
        reason="Validation Failed",
    )


class TestSqsPublisher:
    """Test SqsPublisher.publish()."""

    def test_sends_event_json(self, mock_sqs_client, sample_event):
        publisher = SqsPublisher(mock_sqs_client, queue_url=QUEUE_URL)

        message_id = publisher.publish(sample_event)

        assert message_id == "msg-1"
        mock_sqs_client.send_message.assert_called_once_with(
            QueueUrl=QUEUE_URL,
            MessageBody=sample_event.to_json(),
        )

    def test_resolves_queue_url_once(self, mock_sqs_client, sample_event):
        publisher = SqsPublisher(mock_sqs_client, queue_name="transactions-queue")
        publisher.queue_url = None

        publisher.publish(sample_event)
        publisher.publish(sample_event)

        mock_sqs_client.get_queue_url.assert_called_once_with(QueueName="transactions-queue")

    def test_non_transport_error_not_retried(self, mock_sqs_client, sample_event):
        mock_sqs_client.send_message.side_effect = ValueError("bad request")
        publisher = SqsPublisher(mock_sqs_client, queue_url=QUEUE_URL)

        with pytest.raises(ValueError):
            publisher.publish(sample_event)

        assert mock_sqs_client.send_message.call_count == 1


class TestDiscardRejected:
    """Test discard_rejected()."""

    def test_stores_row_with_reason(self, rejected_row):
        storage = Mock(spec=S3Storage)
        storage.store.return_value = "s3://rejected-bucket/key.json"

        uri = discard_rejected(storage, "rejected-bucket", rejected_row, "batch.csv")

        assert uri == "s3://rejected-bucket/key.json"
        bucket, key, body = storage.store.call_args.args
        assert bucket == "rejected-bucket"
        assert key == "rejected/batch/batch_3.json"
        document = orjson.loads(body)
        assert document["transaction_id"] == "tx-2"
        assert document["_rejectionReason"] == "Validation Failed"
        assert document["_originalFileName"] == "batch.csv"
        assert "_rejectionTimestamp" in document

    def test_no_bucket_only_logs(self, rejected_row):
        storage = Mock(spec=S3Storage)

        assert discard_rejected(storage, "", rejected_row, "batch.csv") is None
        storage.store.assert_not_called()


def test_rejected_row_key_is_stable_per_line():
    assert rejected_row_key("batch.csv", 3) == rejected_row_key("batch.csv", 3)
    assert rejected_row_key("batch.csv", 3) != rejected_row_key("batch.csv", 4)
    assert rejected_row_key("inbox/2023-10-27.csv", 12) == "rejected/2023-10-27/2023-10-27_12.json"

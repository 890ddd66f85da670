"""
SQS Listener - Queue Runtime for the Message Handler

Long-polls the transactions queue and hands every message body to the
MessageHandler. A message is deleted only after its handler returned; a
raised error leaves it on the queue, and SQS redelivers it once the
visibility timeout expires.

Features:
- Long polling with configurable batch size and visibility timeout
- Concurrent handling of the messages in one batch
- Retries with exponential backoff on queue transport errors
- Graceful shutdown handling

Usage:
    # Listener mode (default)
    python -m apps.consumer

    # Process one batch and exit
    RUN_ONCE=true python -m apps.consumer
"""

import asyncio
import logging
import os
import signal
import sys
from typing import Any, Optional

from botocore.exceptions import BotoCoreError, ClientError
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from apps.consumer.handler import MessageHandler
from utils.aws import create_client
from utils.config import settings
from utils.logging import setup_logging
from utils.storage import S3Storage

setup_logging(level=settings.LOG_LEVEL, format_type=settings.LOG_FORMAT)

logger = logging.getLogger(__name__)

_transport_retry = retry(
    retry=retry_if_exception_type((BotoCoreError, ClientError)),
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=1, max=5),
    reraise=True,
)


class SqsListener:
    """
    Listener delivering SQS messages to a MessageHandler.

    Handles:
    - Queue URL resolution
    - Receive / delete round trips
    - Signal handling for graceful shutdown
    """

    def __init__(
        self,
        handler: MessageHandler,
        sqs_client: Any,
        queue_name: Optional[str] = None,
        queue_url: Optional[str] = None,
        run_once: bool = False,
    ) -> None:
        """
        Initialize SQS listener.

        Args:
            handler: Handler invoked once per message
            sqs_client: boto3 SQS client
            queue_name: Queue to listen on, defaults to settings.SQS_QUEUE_NAME
            queue_url: Queue URL, skips the name lookup when given
            run_once: If True, process one batch and exit (for testing)
        """
        self.handler = handler
        self.sqs_client = sqs_client
        self.queue_name = queue_name or settings.SQS_QUEUE_NAME
        self.queue_url = queue_url or settings.SQS_QUEUE_URL
        self.run_once = run_once
        self.shutdown_event = asyncio.Event()
        self._processed_count = 0
        self._failed_count = 0

        logger.info(
            "SqsListener initialized (run_once=%s, queue=%s)",
            run_once, self.queue_name,
        )

    @_transport_retry
    def resolve_queue_url(self) -> str:
        """Look up the queue URL by name unless one was configured."""
        if not self.queue_url:
            response = self.sqs_client.get_queue_url(QueueName=self.queue_name)
            self.queue_url = response["QueueUrl"]
        return self.queue_url

    @_transport_retry
    def receive_batch(self) -> list[dict[str, Any]]:
        """Long-poll the queue for up to SQS_MAX_MESSAGES messages."""
        response = self.sqs_client.receive_message(
            QueueUrl=self.queue_url,
            MaxNumberOfMessages=settings.SQS_MAX_MESSAGES,
            WaitTimeSeconds=settings.SQS_WAIT_TIME_SECONDS,
            VisibilityTimeout=settings.SQS_VISIBILITY_TIMEOUT,
        )
        return response.get("Messages", [])

    @_transport_retry
    def delete_message(self, receipt_handle: str) -> None:
        """Acknowledge a message by deleting it from the queue."""
        self.sqs_client.delete_message(QueueUrl=self.queue_url, ReceiptHandle=receipt_handle)

    async def process_message(self, message: dict[str, Any]) -> bool:
        """
        Run the handler for one message and acknowledge it on success.

        Args:
            message: SQS message dict (MessageId, ReceiptHandle, Body)

        Returns:
            True if the message was handled and deleted
        """
        message_id = message.get("MessageId")

        try:
            result = await asyncio.to_thread(self.handler.handle, message["Body"])
        except Exception as e:
            self._failed_count += 1
            logger.error(
                "Message handling failed, leaving it for redelivery (message_id=%s): %s",
                message_id, str(e),
                exc_info=True,
            )
            return False

        try:
            await asyncio.to_thread(self.delete_message, message["ReceiptHandle"])
        except (BotoCoreError, ClientError) as e:
            # The stored object is rewritten on redelivery under the same key.
            self._failed_count += 1
            logger.error(
                "Failed to delete handled message (message_id=%s, key=%s): %s",
                message_id, result.storage_key, str(e),
            )
            return False

        self._processed_count += 1
        logger.debug("Message deleted (message_id=%s)", message_id)
        return True

    async def poll_once(self) -> int:
        """
        Receive one batch and process its messages concurrently.

        Returns:
            Number of messages received
        """
        messages = await asyncio.to_thread(self.receive_batch)
        if not messages:
            return 0

        logger.info("Received %d message(s)", len(messages))
        await asyncio.gather(*(self.process_message(m) for m in messages))
        return len(messages)

    def setup_signal_handlers(self) -> None:
        """Setup handlers for graceful shutdown on SIGINT/SIGTERM."""

        def signal_handler(signum: int, frame: object) -> None:
            logger.info("Received signal %d, initiating graceful shutdown", signum)
            self.shutdown_event.set()

        signal.signal(signal.SIGINT, signal_handler)
        signal.signal(signal.SIGTERM, signal_handler)

    async def start(self) -> None:
        """
        Poll the queue until a shutdown signal arrives.

        In RUN_ONCE mode a single batch is processed.
        """
        self.setup_signal_handlers()

        logger.info("Starting SQS listener")

        queue_url = await asyncio.to_thread(self.resolve_queue_url)
        logger.info("Listening on queue: %s", queue_url)

        try:
            while not self.shutdown_event.is_set():
                await self.poll_once()

                if self.run_once:
                    logger.info("RUN_ONCE mode: signaling shutdown after one batch")
                    self.shutdown_event.set()

        except Exception as e:
            logger.error("Listener failed: %s", str(e), exc_info=True)
            raise

        finally:
            logger.info(
                "Listener shutdown complete (processed=%d, failed=%d)",
                self._processed_count, self._failed_count,
            )


async def main() -> None:
    """Main entry point for the SQS listener."""
    run_once = os.getenv("RUN_ONCE", "false").lower() in ("true", "1", "yes")

    storage = S3Storage(create_client("s3"))
    handler = MessageHandler(storage=storage, bucket=settings.S3_OUTPUT_BUCKET_NAME)
    listener = SqsListener(handler=handler, sqs_client=create_client("sqs"), run_once=run_once)

    try:
        await listener.start()
    except Exception as e:
        logger.error("Listener failed: %s", str(e), exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    asyncio.run(main())

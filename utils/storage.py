"""
Object storage adapter for S3.

Thin pass-through over an injected S3 client: one ``put_object`` per call,
no retry. Failures come back as StorageError with the client's message.
"""

import logging
from typing import Any

from utils.errors import StorageError

logger = logging.getLogger(__name__)

JSON_CONTENT_TYPE = "application/json"


class S3Storage:
    """Writes documents to S3 through a pre-built client."""

    def __init__(self, client: Any) -> None:
        """
        Args:
            client: boto3 S3 client (or any object exposing ``put_object``)
        """
        self.client = client

    def store(self, bucket: str, key: str, body: str) -> str:
        """
        Write ``body`` to ``bucket/key`` as a JSON object.

        Args:
            bucket: Target bucket name
            key: Object key
            body: Document content

        Returns:
            s3:// URI of the stored object

        Raises:
            StorageError: If the client call fails for any reason
        """
        uri = f"s3://{bucket}/{key}"
        logger.info("Uploading to %s", uri)

        try:
            self.client.put_object(
                Bucket=bucket,
                Key=key,
                Body=body.encode("utf-8"),
                ContentType=JSON_CONTENT_TYPE,
            )
        except Exception as e:
            logger.error("Upload failed: uri=%s, error=%s", uri, str(e))
            raise StorageError(str(e), details={"bucket": bucket, "key": key}) from e

        logger.info("Upload succeeded: %s", uri)
        return uri

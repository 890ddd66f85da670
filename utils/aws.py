"""
AWS client factory.

Builds boto3 clients from settings. Pass ``AWS_ENDPOINT_URL`` to target
LocalStack or another S3/SQS-compatible endpoint.
"""

import logging
from typing import Any, Optional

import boto3

from utils.config import Settings, settings as default_settings

logger = logging.getLogger(__name__)


def create_client(service: str, config: Optional[Settings] = None) -> Any:
    """
    Create a boto3 client for ``service`` ("s3", "sqs").

    Credentials come from the default boto3 provider chain.

    Args:
        service: AWS service name
        config: Settings to read region and endpoint from, defaults to global settings

    Returns:
        boto3 client
    """
    config = config or default_settings
    session = boto3.session.Session(region_name=config.AWS_REGION)

    if config.AWS_ENDPOINT_URL:
        logger.info("Configuring %s client for endpoint %s", service, config.AWS_ENDPOINT_URL)
        return session.client(service, endpoint_url=config.AWS_ENDPOINT_URL)

    logger.info("Configuring %s client for region %s", service, config.AWS_REGION)
    return session.client(service)

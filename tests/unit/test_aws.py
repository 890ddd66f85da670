"""
Unit tests for the boto3 client factory.
"""

from unittest.mock import patch

from utils.aws import create_client
from utils.config import Settings


def test_uses_region():
    config = Settings(AWS_REGION="sa-east-1", AWS_ENDPOINT_URL=None)

    with patch("utils.aws.boto3.session.Session") as mock_session:
        create_client("s3", config)

    mock_session.assert_called_once_with(region_name="sa-east-1")
    mock_session.return_value.client.assert_called_once_with("s3")


def test_endpoint_override():
    config = Settings(AWS_REGION="us-east-1", AWS_ENDPOINT_URL="http://localhost:4566")

    with patch("utils.aws.boto3.session.Session") as mock_session:
        client = create_client("sqs", config)

    mock_session.return_value.client.assert_called_once_with("sqs", endpoint_url="http://localhost:4566")
    assert client is mock_session.return_value.client.return_value

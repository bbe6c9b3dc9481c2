"""Shared pytest fixtures."""

import pytest
from unittest.mock import Mock

from src.core.aws_client import AWSClientManager


@pytest.fixture
def mock_aws_client():
    """AWS client manager returning one mock boto3 client for every service."""
    manager = Mock(spec=AWSClientManager)
    manager.get_client.return_value = Mock()
    return manager

"""
Shared pytest fixtures and configuration for dynapage tests.

This module provides canned page fixtures used across unit tests, a mocked boto3
client, and the LocalStack clients used by integration tests.
"""

import os
from typing import TYPE_CHECKING, Any
from unittest.mock import MagicMock

import boto3
import pytest
from botocore.exceptions import BotoCoreError

from dynapage.registry import set_registry

if TYPE_CHECKING:
    from tests.helpers.localstack import LocalStackHelper


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests with mocked dependencies")
    config.addinivalue_line("markers", "integration: Integration tests against LocalStack")
    config.addinivalue_line("markers", "slow: Slow tests that may take longer")


@pytest.fixture
def table_pages() -> list[dict[str, Any]]:
    """Three ListTables-style pages: two carrying LastToken, the last one without."""
    return [
        {"LastToken": "test2", "TableNames": ["test1", "test2"]},
        {"LastToken": "test2", "TableNames": []},
        {"TableNames": ["test3"]},
    ]


@pytest.fixture
def composite_pages() -> list[dict[str, Any]]:
    """Same shape as table_pages, but with a two-field token."""
    return [
        {"LT1": "foo", "LT2": "bar", "TableNames": ["test1", "test2"]},
        {"LT1": "foo", "LT2": "bar", "TableNames": []},
        {"TableNames": ["test3"]},
    ]


@pytest.fixture
def mock_client():
    """
    Creates a fully mocked boto3 client.

    Unit tests script responses with e.g. ``mock_client.list_tables.side_effect``.
    """
    client = MagicMock()
    client.meta.service_model.service_name = "dynamodb"
    return client


@pytest.fixture(autouse=True)
def reset_global_registry():
    """Make sure no test leaks a process-wide default registry into another."""
    yield
    set_registry(None)


@pytest.fixture(scope="session")
def localstack_endpoint() -> str:
    """Get LocalStack endpoint URL from environment or default."""
    return os.getenv("LOCALSTACK_ENDPOINT", "http://localhost:4566")


@pytest.fixture(scope="session")
def localstack_client(localstack_endpoint: str):
    """
    Creates a boto3 DynamoDB client connected to LocalStack.

    Integration tests are skipped when LocalStack is not reachable.
    """
    client = boto3.client(
        "dynamodb",
        endpoint_url=localstack_endpoint,
        region_name="eu-south-1",
        aws_access_key_id="test",
        aws_secret_access_key="test",
    )
    try:
        client.list_tables(Limit=1)
    except BotoCoreError as e:
        pytest.skip(f"LocalStack is not reachable at {localstack_endpoint}: {e}")
    return client


@pytest.fixture(scope="session")
def localstack_helper(localstack_client) -> "LocalStackHelper":
    """Provides a LocalStackHelper sharing the session's LocalStack client."""
    from tests.helpers.localstack import LocalStackHelper

    return LocalStackHelper(client=localstack_client)


@pytest.fixture
def seeded_table(localstack_helper):
    """
    Creates a table holding 25 items and drops it after the test.

    Yields the table name.
    """
    table_name = "dynapage_items"
    localstack_helper.create_table(table_name, pk_name="pk")
    for i in range(25):
        localstack_helper.put_item(
            table_name, {"pk": {"S": f"item-{i:02d}"}, "n": {"N": str(i)}}
        )

    yield table_name

    localstack_helper.delete_table(table_name)

"""
Test fixtures for the entity REST API.

Provides CDK stacks, resource namers and mocked AWS resources.
"""

import os
from typing import Any, Generator

import boto3
import pytest
from aws_cdk import App, Stack
from moto import mock_aws

from family_api.models import EntityConfig
from family_api.plan import ApiPlan, plan_api

TABLE_NAME = "family-table"
TABLE_ARN = "arn:aws:dynamodb:us-east-1:123456789012:table/family-table"


@pytest.fixture
def stack() -> Stack:
    """Create a test stack."""
    app = App()
    return Stack(app, "TestStack")


@pytest.fixture
def rn():
    """Create a resource naming function."""

    def _rn(name: str) -> str:
        return f"{name}-ue1-test"

    return _rn


@pytest.fixture
def config() -> EntityConfig:
    """Default family configuration with every route enabled."""
    return EntityConfig()


@pytest.fixture
def plan(config: EntityConfig) -> ApiPlan:
    """Plan against a literal table name and ARN."""
    return plan_api(config, TABLE_NAME, TABLE_ARN)


@pytest.fixture
def aws_credentials() -> None:
    """Set fake AWS credentials for moto."""
    os.environ["AWS_ACCESS_KEY_ID"] = "testing"
    os.environ["AWS_SECRET_ACCESS_KEY"] = "testing"
    os.environ["AWS_SECURITY_TOKEN"] = "testing"
    os.environ["AWS_SESSION_TOKEN"] = "testing"
    os.environ["AWS_DEFAULT_REGION"] = "us-east-1"
    os.environ.pop("DYNAMODB_ENDPOINT", None)


@pytest.fixture
def dynamodb_client(aws_credentials: None) -> Generator[Any, None, None]:
    """Mock DynamoDB client with the family table created."""
    with mock_aws():
        client = boto3.client("dynamodb", region_name="us-east-1")
        client.create_table(
            TableName=TABLE_NAME,
            KeySchema=[{"AttributeName": "family-id", "KeyType": "HASH"}],
            AttributeDefinitions=[{"AttributeName": "family-id", "AttributeType": "S"}],
            BillingMode="PAY_PER_REQUEST",
        )
        yield client

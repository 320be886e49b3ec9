"""
Build context threaded through the construct factories.

Each construction step takes the context it needs and returns its output;
the stack derives a new context from it instead of setting attributes on
itself as it goes.
"""

from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Callable, Mapping, Optional

from aws_cdk import aws_apigateway as apigw
from aws_cdk import aws_dynamodb as dynamodb
from aws_cdk import aws_iam as iam
from constructs import Construct

from .models import EntityConfig, StorageOperation


@dataclass(frozen=True)
class BuildContext:
    scope: Construct
    rn: Callable[[str], str]
    config: EntityConfig
    table: Optional[dynamodb.Table] = None
    roles: Mapping[StorageOperation, iam.Role] = field(default_factory=lambda: MappingProxyType({}))
    api: Optional[apigw.RestApi] = None

    def with_table(self, table: dynamodb.Table) -> "BuildContext":
        return replace(self, table=table)

    def with_roles(self, roles: Mapping[StorageOperation, iam.Role]) -> "BuildContext":
        return replace(self, roles=MappingProxyType(dict(roles)))

    def with_api(self, api: apigw.RestApi) -> "BuildContext":
        return replace(self, api=api)

    def require_table(self) -> dynamodb.Table:
        if self.table is None:
            raise RuntimeError("Entity table must be created before it is referenced")
        return self.table

    def require_api(self) -> apigw.RestApi:
        if self.api is None:
            raise RuntimeError("REST API must be created before routes are attached")
        return self.api

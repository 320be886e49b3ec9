from typing import Callable, Optional

from aws_cdk import CfnOutput, Stack
from constructs import Construct

from .context import BuildContext
from .dynamodb_tables import create_entity_table
from .helpers import get_region_abbrev, make_resource_namer
from .iam_roles import create_scoped_roles
from .models import EntityConfig
from .plan import ApiPlan, plan_api
from .rest_api import attach_routes, create_rest_api


class FamilyApiStack(Stack):
    """
    Entity REST API - Core Infrastructure Stack

    Creates:
    - DynamoDB table with a single partition key
    - One IAM role per DynamoDB action in use, assumable by API Gateway
    - REST API whose routes call DynamoDB directly through service integrations
    """

    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        env_name: str = "dev",
        entity_config: Optional[EntityConfig] = None,
        resource_namer: Optional[Callable[[str], str]] = None,
        **kwargs,
    ) -> None:
        super().__init__(scope, construct_id, **kwargs)

        self.env_name = env_name
        self.entity_config = (entity_config or EntityConfig()).validate()

        rn = resource_namer or make_resource_namer(get_region_abbrev(), env_name)
        ctx = BuildContext(scope=self, rn=rn, config=self.entity_config)

        ctx = ctx.with_table(create_entity_table(ctx))
        table = ctx.require_table()
        self.plan: ApiPlan = plan_api(self.entity_config, table.table_name, table.table_arn)

        ctx = ctx.with_roles(create_scoped_roles(ctx, self.plan.credentials.values()))
        ctx = ctx.with_api(create_rest_api(ctx))
        self.methods = attach_routes(ctx, self.plan)
        self.context = ctx

        CfnOutput(self, "ApiUrl", value=ctx.require_api().url, description="REST API endpoint URL")
        CfnOutput(self, "TableName", value=table.table_name, description="DynamoDB table backing the API")
        CfnOutput(
            self,
            "CollectionPath",
            value=self.entity_config.collection_path,
            description="Collection resource path",
        )

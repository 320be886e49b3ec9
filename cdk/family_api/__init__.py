"""
Entity REST API infrastructure.

- models.py: entity configuration and operation enums
- mapping_templates.py: typed request/response mapping templates
- plan.py: scoped credentials and verb mappings derived from the config
- dynamodb_tables.py, iam_roles.py, integrations.py, rest_api.py: CDK constructs
- cdk_stack.py: the stack wiring them together
- simulator.py: local replay of the planned API against DynamoDB
"""

from .cdk_stack import FamilyApiStack
from .models import ApiOperation, EntityConfig, KeyType, StorageOperation
from .plan import ApiPlan, plan_api

__all__ = [
    "FamilyApiStack",
    "ApiOperation",
    "EntityConfig",
    "KeyType",
    "StorageOperation",
    "ApiPlan",
    "plan_api",
]

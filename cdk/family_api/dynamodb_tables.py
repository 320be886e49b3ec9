from aws_cdk import RemovalPolicy
from aws_cdk import aws_dynamodb as ddb

from .context import BuildContext
from .models import KeyType

ATTRIBUTE_TYPES = {
    KeyType.STRING: ddb.AttributeType.STRING,
    KeyType.NUMBER: ddb.AttributeType.NUMBER,
}


def create_entity_table(ctx: BuildContext) -> ddb.Table:
    """Create the DynamoDB table backing the entity collection.

    Single partition key, no sort key and no indexes. On-demand billing and
    destroyed together with the stack.

    Args:
        ctx: Build context carrying the scope, namer and entity config

    Returns:
        The Table construct
    """
    config = ctx.config
    return ddb.Table(
        ctx.scope,
        "DynamoTable",
        table_name=ctx.rn(f"{config.entity_name}-table"),
        partition_key=ddb.Attribute(name=config.key_attribute, type=ATTRIBUTE_TYPES[config.key_type]),
        billing_mode=ddb.BillingMode.PAY_PER_REQUEST,
        removal_policy=RemovalPolicy.DESTROY,
    )

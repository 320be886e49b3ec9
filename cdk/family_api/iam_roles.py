"""
IAM roles and policies for the CDK stack.

Creates one role per scoped credential: assumable only by API Gateway, with a
single inline policy granting a single DynamoDB action on the entity table.
"""

from typing import Iterable

from aws_cdk import aws_iam as iam

from .context import BuildContext
from .errors import ConfigurationError
from .models import StorageOperation
from .plan import ScopedCredential


def create_scoped_role(ctx: BuildContext, credential: ScopedCredential) -> iam.Role:
    """Create the role and inline policy for one credential.

    Args:
        ctx: Build context
        credential: Planned credential (operation + permission statement)

    Returns:
        The IAM role
    """
    statement = credential.statement
    policy = iam.Policy(
        ctx.scope,
        f"{credential.operation.value}Policy",
        statements=[
            iam.PolicyStatement(
                actions=list(statement.actions),
                effect=iam.Effect.ALLOW if statement.effect == "Allow" else iam.Effect.DENY,
                resources=list(statement.resources),
            )
        ],
    )

    role = iam.Role(
        ctx.scope,
        f"{credential.name}Role",
        assumed_by=iam.ServicePrincipal(credential.principal),
    )
    role.attach_inline_policy(policy)
    return role


def create_scoped_roles(
    ctx: BuildContext, credentials: Iterable[ScopedCredential]
) -> dict[StorageOperation, iam.Role]:
    """Create one role per credential, keyed by storage operation."""
    roles: dict[StorageOperation, iam.Role] = {}
    for credential in credentials:
        if credential.operation in roles:
            raise ConfigurationError(
                f"Duplicate credential for {credential.operation.value}",
                operation=credential.operation.value,
            )
        roles[credential.operation] = create_scoped_role(ctx, credential)
    return roles

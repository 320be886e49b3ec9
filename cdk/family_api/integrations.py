"""
Builder for API Gateway -> DynamoDB service integrations.

Turns planned verb mappings into AwsIntegration constructs: the scoped role
as integration credentials, the compiled request template, and the ordered
integration responses.
"""

from typing import Mapping

from aws_cdk import aws_apigateway as apigw
from aws_cdk import aws_iam as iam

from .mapping_templates import CONTENT_TYPE, METHOD_RESPONSE_STATUS_CODES, ResponseRule
from .models import StorageOperation
from .plan import VerbMapping


def to_integration_response(rule: ResponseRule) -> apigw.IntegrationResponse:
    """Convert a response rule into an integration response.

    Passthrough rules carry no selection pattern and no template.
    """
    body = rule.body_template()
    return apigw.IntegrationResponse(
        status_code=str(rule.status_code),
        selection_pattern=rule.selection_pattern,
        response_templates={CONTENT_TYPE: body} if body is not None else None,
    )


def method_responses() -> list[apigw.MethodResponse]:
    """Method responses every route declares."""
    return [apigw.MethodResponse(status_code=code) for code in METHOD_RESPONSE_STATUS_CODES]


class IntegrationBuilder:
    """
    Builder for DynamoDB service integrations.

    Example:
        builder = IntegrationBuilder(roles)
        integration = builder.create_integration(plan.mapping_for(ApiOperation.READ))
    """

    def __init__(self, roles: Mapping[StorageOperation, iam.IRole]):
        """
        Initialize the integration builder.

        Args:
            roles: Scoped IAM roles keyed by the storage operation they grant
        """
        self.roles = roles

    def create_integration(self, mapping: VerbMapping) -> apigw.AwsIntegration:
        """
        Create the service integration for one verb mapping.

        Args:
            mapping: Planned verb mapping

        Returns:
            The AwsIntegration

        Raises:
            KeyError: If no role was created for the mapping's storage operation
        """
        operation = mapping.storage_operation
        role = self.roles[operation]

        return apigw.AwsIntegration(
            service="dynamodb",
            action=operation.value,
            options=apigw.IntegrationOptions(
                credentials_role=role,
                integration_responses=[to_integration_response(rule) for rule in mapping.response_rules],
                request_templates={CONTENT_TYPE: mapping.request_template.render()},
            ),
        )

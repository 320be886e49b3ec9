"""
Resource graph plan for the entity REST API.

Derives, from an EntityConfig, the scoped credentials (one per storage
operation in use) and the verb mappings (one per exposed route). The plan is
plain data: the CDK constructs in iam_roles/integrations/rest_api are created
from it, and the gateway simulator replays it locally.
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Optional

from .errors import AccessDeniedError
from .mapping_templates import FieldMapping, RequestTemplate, ResponseRule, error_translation_rules
from .models import ApiOperation, EntityConfig, PayloadShape, StorageOperation, ValueSource

GATEWAY_SERVICE_PRINCIPAL = "apigateway.amazonaws.com"

# Declaration order of routes: collection first, then single item
ROUTE_ORDER = (
    ApiOperation.LIST,
    ApiOperation.CREATE,
    ApiOperation.READ,
    ApiOperation.DELETE,
    ApiOperation.UPDATE,
)


@dataclass(frozen=True)
class PermissionStatement:
    actions: tuple[str, ...]
    resources: tuple[str, ...]
    effect: str = "Allow"

    def allows(self, action: str, resource: Optional[str] = None) -> bool:
        if self.effect != "Allow" or action not in self.actions:
            return False
        return resource is None or resource in self.resources


@dataclass(frozen=True)
class ScopedCredential:
    """Role assumable by API Gateway with exactly one table permission."""

    operation: StorageOperation
    statement: PermissionStatement
    principal: str = GATEWAY_SERVICE_PRINCIPAL

    @property
    def name(self) -> str:
        return self.operation.role_label

    def authorize(self, operation: StorageOperation, resource: Optional[str] = None) -> None:
        """Raise AccessDeniedError unless this credential grants the operation."""
        if not self.statement.allows(operation.action, resource):
            raise AccessDeniedError(
                f"{self.name} credential is not authorized to perform {operation.action}",
                credential=self.name,
                action=operation.action,
            )


@dataclass(frozen=True)
class VerbMapping:
    """HTTP verb + path bound to one storage call and its rewrite rules."""

    operation: ApiOperation
    http_method: str
    path: str
    credential: ScopedCredential
    request_template: RequestTemplate
    response_rules: tuple[ResponseRule, ...]

    @property
    def storage_operation(self) -> StorageOperation:
        return self.request_template.operation


@dataclass(frozen=True)
class ApiPlan:
    config: EntityConfig
    table_name: str
    table_arn: str
    credentials: Mapping[StorageOperation, ScopedCredential]
    mappings: tuple[VerbMapping, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "credentials", MappingProxyType(dict(self.credentials)))
        object.__setattr__(self, "mappings", tuple(self.mappings))

    def mapping_for(self, operation: ApiOperation) -> Optional[VerbMapping]:
        for mapping in self.mappings:
            if mapping.operation is operation:
                return mapping
        return None

    def find_route(self, http_method: str, path: str) -> Optional[VerbMapping]:
        for mapping in self.mappings:
            if mapping.http_method == http_method.upper() and mapping.path == path:
                return mapping
        return None


def plan_scoped_credential(operation: StorageOperation, table_arn: str) -> ScopedCredential:
    return ScopedCredential(
        operation=operation,
        statement=PermissionStatement(actions=(operation.action,), resources=(table_arn,)),
    )


def plan_scoped_credentials(
    operations: frozenset[StorageOperation], table_arn: str
) -> dict[StorageOperation, ScopedCredential]:
    """One credential per distinct storage operation, in enum order."""
    return {op: plan_scoped_credential(op, table_arn) for op in StorageOperation if op in operations}


def plan_request_template(config: EntityConfig, operation: ApiOperation, table_name: str) -> RequestTemplate:
    """Build the request template for a route.

    Key-addressed operations carry only the partition key; item writes add
    the body fields after it. Scan carries neither.
    """
    storage_operation = operation.storage_operation
    if storage_operation.payload_shape is PayloadShape.NONE:
        return RequestTemplate(operation=storage_operation, table_name=table_name)

    fields = [FieldMapping(config.key_attribute, operation.key_source, attribute_type=config.key_type)]
    if storage_operation.payload_shape is PayloadShape.ITEM:
        fields.extend(
            FieldMapping(attribute, ValueSource.BODY, body_field=body_field)
            for body_field, attribute in config.item_fields
        )
    return RequestTemplate(operation=storage_operation, table_name=table_name, fields=tuple(fields))


def plan_verb_mappings(
    config: EntityConfig,
    credentials: Mapping[StorageOperation, ScopedCredential],
    table_name: str,
) -> tuple[VerbMapping, ...]:
    rules = error_translation_rules(config.bad_input_message, config.server_error_message)
    mappings = []
    for operation in ROUTE_ORDER:
        if operation not in config.operations:
            continue
        mappings.append(
            VerbMapping(
                operation=operation,
                http_method=operation.http_method,
                path=config.item_path if operation.is_item_route else config.collection_path,
                credential=credentials[operation.storage_operation],
                request_template=plan_request_template(config, operation, table_name),
                response_rules=rules,
            )
        )
    return tuple(mappings)


def plan_api(config: EntityConfig, table_name: str, table_arn: str) -> ApiPlan:
    """Plan the full graph for a validated config.

    Args:
        config: Deployment configuration
        table_name: Table name (literal or CDK token)
        table_arn: Table ARN (literal or CDK token) the credentials are scoped to

    Returns:
        The immutable plan

    Raises:
        ConfigurationError: If the config is inconsistent
    """
    config.validate()
    credentials = plan_scoped_credentials(config.storage_operations, table_arn)
    return ApiPlan(
        config=config,
        table_name=table_name,
        table_arn=table_arn,
        credentials=credentials,
        mappings=plan_verb_mappings(config, credentials, table_name),
    )

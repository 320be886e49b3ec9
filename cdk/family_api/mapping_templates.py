"""
Typed request/response mapping templates for API Gateway service integrations.

Request templates are built from field mappings (attribute name, type and
value source) and only turned into the Velocity/JSON text API Gateway expects
when the integration is created. The same model resolves concrete payloads
for the local gateway simulator, so both paths share one definition.

Response rules collapse every backend status into three outward classes:
exactly 400 (bad input), any 5xx (service error), everything else (200
passthrough).
"""

import json
import re
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

from .errors import ConfigurationError
from .models import KeyType, PayloadShape, StorageOperation, ValueSource

CONTENT_TYPE = "application/json"
METHOD_RESPONSE_STATUS_CODES: tuple[str, ...] = ("200", "400", "500")

BAD_INPUT_PATTERN = "400"
SERVER_ERROR_PATTERN = r"5\d{2}"


@dataclass(frozen=True)
class RequestContext:
    """Values available to a request template at request time."""

    request_id: str
    path_id: Optional[str] = None
    body: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class FieldMapping:
    """One attribute written into the Key or Item payload."""

    attribute: str
    source: ValueSource
    body_field: Optional[str] = None
    attribute_type: KeyType = KeyType.STRING

    def __post_init__(self) -> None:
        if (self.source is ValueSource.BODY) != (self.body_field is not None):
            raise ConfigurationError(
                "body_field is required for, and only for, body-sourced attributes",
                attribute=self.attribute,
            )

    def expression(self) -> str:
        """Velocity expression API Gateway substitutes for the value."""
        if self.source is ValueSource.BODY:
            return self.source.value.format(field=self.body_field)
        return self.source.value

    def resolve(self, request: RequestContext) -> str:
        """Value the expression evaluates to for a concrete request."""
        if self.source is ValueSource.PATH_ID:
            return request.path_id or ""
        if self.source is ValueSource.REQUEST_ID:
            return request.request_id
        value = request.body.get(self.body_field)
        # $input.path of a missing field renders as an empty string
        return "" if value is None else str(value)


@dataclass(frozen=True)
class RequestTemplate:
    """Request rewrite from an HTTP request into a DynamoDB API payload."""

    operation: StorageOperation
    table_name: str
    fields: tuple[FieldMapping, ...] = ()

    def __post_init__(self) -> None:
        shape = self.operation.payload_shape
        if shape is PayloadShape.NONE and self.fields:
            raise ConfigurationError(f"{self.operation.value} does not accept Key or Item fields")
        if shape is not PayloadShape.NONE and not self.fields:
            raise ConfigurationError(f"{self.operation.value} requires {shape.value} fields")
        if shape is PayloadShape.KEY and any(f.source is ValueSource.BODY for f in self.fields):
            raise ConfigurationError(f"{self.operation.value} keys cannot come from the request body")

    @property
    def shape(self) -> PayloadShape:
        return self.operation.payload_shape

    @property
    def attributes(self) -> list[str]:
        return [f.attribute for f in self.fields]

    def _payload(self, value_of: Callable[[FieldMapping], str]) -> dict[str, Any]:
        payload: dict[str, Any] = {}
        if self.shape is not PayloadShape.NONE:
            payload[self.shape.value] = {f.attribute: {f.attribute_type.value: value_of(f)} for f in self.fields}
        payload["TableName"] = self.table_name
        return payload

    def render(self) -> str:
        """Compile to the Velocity/JSON text used in the integration request template."""
        return json.dumps(self._payload(FieldMapping.expression), indent=4)

    def resolve(self, request: RequestContext) -> dict[str, Any]:
        """Evaluate against a concrete request, producing boto3 keyword arguments."""
        return self._payload(lambda f: f.resolve(request))


@dataclass(frozen=True)
class ResponseRule:
    """One integration response: inward status pattern -> outward status and body."""

    status_code: int
    selection_pattern: Optional[str] = None
    error_message: Optional[str] = None

    @property
    def is_passthrough(self) -> bool:
        return self.error_message is None

    def matches(self, inward_status: int | str) -> bool:
        if self.selection_pattern is None:
            return True
        return re.fullmatch(self.selection_pattern, str(inward_status)) is not None

    def body_template(self) -> Optional[str]:
        """Fixed JSON error body, None for passthrough rules."""
        if self.is_passthrough:
            return None
        return json.dumps({"error": self.error_message})

    def apply(self, body: Any) -> tuple[int, Any]:
        if self.is_passthrough:
            return self.status_code, body
        return self.status_code, {"error": self.error_message}


def error_translation_rules(bad_input_message: str, server_error_message: str) -> tuple[ResponseRule, ...]:
    """Default passthrough plus the two error classes, in declaration order."""
    return (
        ResponseRule(status_code=200),
        ResponseRule(status_code=400, selection_pattern=BAD_INPUT_PATTERN, error_message=bad_input_message),
        ResponseRule(status_code=500, selection_pattern=SERVER_ERROR_PATTERN, error_message=server_error_message),
    )


def select_response_rule(rules: tuple[ResponseRule, ...], inward_status: int | str) -> ResponseRule:
    """Pick the rule API Gateway would apply to an inward status.

    Patterned rules are tried in order and the first match wins; the rule
    without a pattern is the default.
    """
    default = None
    for rule in rules:
        if rule.selection_pattern is None:
            default = default or rule
        elif rule.matches(inward_status):
            return rule
    if default is None:
        raise ConfigurationError("Response rules need a default rule without a selection pattern")
    return default

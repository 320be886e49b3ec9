"""
Local gateway simulator.

Replays a planned verb mapping set against a DynamoDB endpoint the way the
deployed REST API would: route the request, check the scoped credential,
evaluate the request template, make the one storage call, then rewrite the
response through the ordered response rules.

Used by the test suite with moto, or against LocalStack by setting
DYNAMODB_ENDPOINT.
"""

import json
import os
import uuid
from urllib.parse import unquote
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Optional

import boto3
from botocore.exceptions import ClientError, ParamValidationError

from .errors import AccessDeniedError
from .logging import StructuredLogger
from .mapping_templates import RequestContext, select_response_rule
from .models import PayloadShape
from .plan import ApiPlan, VerbMapping

if TYPE_CHECKING:
    from mypy_boto3_dynamodb import DynamoDBClient

MISSING_ROUTE_STATUS = 403
MISSING_ROUTE_BODY = {"message": "Missing Authentication Token"}


@dataclass(frozen=True)
class SimulatedResponse:
    status_code: int
    body: Any


def _get_dynamodb_client() -> "DynamoDBClient":
    """Get DynamoDB client with optional endpoint override for LocalStack."""
    return boto3.client("dynamodb", endpoint_url=os.getenv("DYNAMODB_ENDPOINT"))


def apply_response_rules(mapping: VerbMapping, inward_status: int, body: Any) -> SimulatedResponse:
    """Rewrite a backend response through the mapping's response rules."""
    rule = select_response_rule(mapping.response_rules, inward_status)
    status_code, outward_body = rule.apply(body)
    return SimulatedResponse(status_code=status_code, body=outward_body)


class GatewaySimulator:
    """
    Evaluates REST requests against a planned API.

    Example:
        simulator = GatewaySimulator(plan_api(config, "family-table", table_arn))
        response = simulator.handle("POST", "/family", {"firstname": "Ann", "lastname": "Lee"})
    """

    def __init__(self, plan: ApiPlan, client: Optional["DynamoDBClient"] = None):
        self.plan = plan
        self.client = client or _get_dynamodb_client()

    def route(self, http_method: str, path: str) -> tuple[Optional[VerbMapping], Optional[str]]:
        """Resolve a concrete path to its verb mapping and path id.

        The path id is URL-decoded, as API Gateway decodes path parameters
        before the request template sees them.
        """
        config = self.plan.config
        segments = [segment for segment in path.strip("/").split("/") if segment]

        if segments == [config.entity_name]:
            return self.plan.find_route(http_method, config.collection_path), None
        if len(segments) == 2 and segments[0] == config.entity_name:
            return self.plan.find_route(http_method, config.item_path), unquote(segments[1])
        return None, None

    def handle(
        self,
        http_method: str,
        path: str,
        body: Any = None,
        request_id: Optional[str] = None,
    ) -> SimulatedResponse:
        """
        Handle one request end to end.

        Args:
            http_method: HTTP verb
            path: Concrete request path, e.g. /family/abc
            body: JSON object or raw JSON text
            request_id: Gateway request id; generated when omitted

        Returns:
            Outward status code and body
        """
        request_id = request_id or str(uuid.uuid4())
        logger = StructuredLogger(__name__, correlation_id=request_id)

        mapping, path_id = self.route(http_method, path)
        if mapping is None:
            logger.warning("No route", method=http_method, path=path)
            return SimulatedResponse(MISSING_ROUTE_STATUS, dict(MISSING_ROUTE_BODY))

        logger = logger.bind(method=mapping.http_method, path=mapping.path)
        logger.info("Dispatching request", action=mapping.storage_operation.value)

        inward_status, inward_body = self.invoke(mapping, body, request_id, path_id)
        response = apply_response_rules(mapping, inward_status, inward_body)

        logger.info("Request complete", inwardStatus=inward_status, statusCode=response.status_code)
        return response

    def invoke(
        self,
        mapping: VerbMapping,
        body: Any,
        request_id: str,
        path_id: Optional[str] = None,
    ) -> tuple[int, Any]:
        """
        Make the storage call for a mapping and report the inward status.

        Returns:
            (inward status, backend body)
        """
        logger = StructuredLogger(__name__, correlation_id=request_id)

        if mapping.request_template.shape is not PayloadShape.ITEM:
            # Scan and key-addressed templates never read $input
            body = {}
        elif isinstance(body, (str, bytes)):
            try:
                body = json.loads(body) if body else {}
            except json.JSONDecodeError as e:
                logger.warning("Malformed request body", error=str(e))
                return 400, {"__type": "SerializationException", "message": str(e)}
        if body is None:
            body = {}
        if not isinstance(body, dict):
            logger.warning("Request body is not a JSON object", bodyType=type(body).__name__)
            return 400, {"__type": "SerializationException", "message": "Expected a JSON object"}

        try:
            mapping.credential.authorize(mapping.storage_operation)
        except AccessDeniedError as e:
            logger.error("Credential rejected", errorCode=e.error_code, error=e.message, **e.details)
            return 400, {"__type": "AccessDeniedException", "message": e.message}

        request = RequestContext(request_id=request_id, path_id=path_id, body=body)
        payload = mapping.request_template.resolve(request)
        call = getattr(self.client, mapping.storage_operation.client_method)

        try:
            result = call(**payload)
        except ParamValidationError as e:
            logger.warning("Invalid storage payload", error=str(e))
            return 400, {"__type": "ValidationException", "message": str(e)}
        except ClientError as e:
            status = e.response.get("ResponseMetadata", {}).get("HTTPStatusCode", 500)
            logger.warning("Storage call failed", status=status, error=e.response.get("Error"))
            return status, e.response.get("Error", {})

        result.pop("ResponseMetadata", None)
        return 200, result

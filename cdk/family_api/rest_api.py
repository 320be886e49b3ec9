"""REST API creation and route attachment."""

from aws_cdk import aws_apigateway as apigw

from .context import BuildContext
from .integrations import IntegrationBuilder, method_responses
from .plan import ApiPlan


def create_rest_api(ctx: BuildContext) -> apigw.RestApi:
    """
    Create the REST API with CORS preflight enabled for all origins.

    Args:
        ctx: Build context

    Returns:
        The created RestApi
    """
    api_name = ctx.rn(f"{ctx.config.entity_name}-api")
    print(f"Creating REST API: {api_name}")

    return apigw.RestApi(
        ctx.scope,
        "ApiGateway",
        rest_api_name=api_name,
        default_cors_preflight_options=apigw.CorsOptions(
            allow_origins=apigw.Cors.ALL_ORIGINS,
        ),
    )


def attach_routes(ctx: BuildContext, plan: ApiPlan) -> dict[str, apigw.Method]:
    """
    Attach every planned verb mapping to its resource.

    The single-item resource is only created when an item route is enabled.

    Args:
        ctx: Build context with the REST API and scoped roles
        plan: Planned graph

    Returns:
        Methods keyed by "<VERB> <path>"
    """
    api = ctx.require_api()
    builder = IntegrationBuilder(ctx.roles)

    collection = api.root.add_resource(ctx.config.entity_name)
    resources = {plan.config.collection_path: collection}
    if any(mapping.operation.is_item_route for mapping in plan.mappings):
        resources[plan.config.item_path] = collection.add_resource("{id}")

    methods: dict[str, apigw.Method] = {}
    for mapping in plan.mappings:
        methods[f"{mapping.http_method} {mapping.path}"] = resources[mapping.path].add_method(
            mapping.http_method,
            builder.create_integration(mapping),
            method_responses=method_responses(),
        )
    return methods

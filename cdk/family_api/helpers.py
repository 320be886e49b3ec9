"""
Shared helper utilities for CDK stack construction.

This module provides:
- Region abbreviation mapping for resource naming
- Resource naming function (rn)
- Context/environment configuration utilities
"""

import os
from typing import Any, Optional

from constructs import Construct

from .models import ApiOperation, EntityConfig, KeyType

# Region abbreviation mapping for resource naming
# Pattern: {name}-{region_abbrev}-{env} e.g. family-table-ue1-dev
REGION_ABBREVIATIONS: dict[str, str] = {
    "us-east-1": "ue1",
    "us-east-2": "ue2",
    "us-west-1": "uw1",
    "us-west-2": "uw2",
    "eu-west-1": "ew1",
    "eu-west-2": "ew2",
    "eu-west-3": "ew3",
    "eu-central-1": "ec1",
    "eu-north-1": "en1",
    "ap-northeast-1": "ane1",  # Tokyo
    "ap-northeast-2": "ane2",  # Seoul
    "ap-northeast-3": "ane3",  # Osaka
    "ap-southeast-1": "ase1",  # Singapore
    "ap-southeast-2": "ase2",  # Sydney
    "ap-south-1": "as1",  # Mumbai
    "sa-east-1": "se1",  # Sao Paulo
    "ca-central-1": "cc1",  # Canada
}

_FALSE_STRINGS = {"false", "0", "no", "off", ""}


def get_region() -> str:
    """Get the AWS region from environment variables or default to us-east-1."""
    return os.getenv("AWS_REGION") or os.getenv("CDK_DEFAULT_REGION") or "us-east-1"


def get_region_abbrev(region: Optional[str] = None) -> str:
    """Get the region abbreviation for resource naming.

    Args:
        region: AWS region code. If None, reads from environment.

    Returns:
        Region abbreviation (e.g., 'ue1' for 'us-east-1')
    """
    if region is None:
        region = get_region()
    return REGION_ABBREVIATIONS.get(region, region[:3])


def make_resource_namer(region_abbrev: str, env_name: str):
    """Create a resource naming function.

    Args:
        region_abbrev: Region abbreviation (e.g., 'ue1')
        env_name: Environment name (e.g., 'dev', 'prod')

    Returns:
        A function that takes a base name and returns a fully qualified name
    """

    def rn(name: str, abbrev: str = region_abbrev, env: str = env_name) -> str:
        """Generate resource name with region and environment suffix."""
        return f"{name}-{abbrev}-{env}"

    return rn


def plain_resource_namer(name: str) -> str:
    """Resource namer that keeps base names unchanged."""
    return name


def get_context_bool(scope: Construct, key: str, default: bool = False) -> bool:
    """Read a boolean CDK context value.

    Context passed on the command line (-c key=false) arrives as a string, so
    string values are parsed case-insensitively.
    """
    value = scope.node.try_get_context(key)
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() not in _FALSE_STRINGS


def get_setting(scope: Construct, context_key: str, env_var: str, default: Any = None) -> Any:
    """Resolve a setting: CDK context first, then environment variable, then default."""
    value = scope.node.try_get_context(context_key)
    if value is not None:
        return value
    env_value = os.getenv(env_var)
    if env_value:
        return env_value
    return default


def get_env_name(scope: Construct) -> str:
    return get_setting(scope, "environment", "ENVIRONMENT", "dev")


def load_entity_config(scope: Construct) -> EntityConfig:
    """Build the EntityConfig from CDK context and environment variables.

    Args:
        scope: Construct whose node carries the context (usually the App)

    Returns:
        Validated EntityConfig

    Raises:
        ConfigurationError: If a setting is unknown or inconsistent
    """
    defaults = EntityConfig()
    operations = get_setting(scope, "operations", "OPERATIONS")

    config = EntityConfig(
        entity_name=get_setting(scope, "entity_name", "ENTITY_NAME", defaults.entity_name),
        key_field_name=get_setting(scope, "key_field", "KEY_FIELD"),
        key_type=KeyType.parse(get_setting(scope, "key_type", "KEY_TYPE", defaults.key_type)),
        operations=ApiOperation.parse_set(operations) if operations is not None else defaults.operations,
        bad_input_message=get_setting(
            scope, "bad_input_message", "BAD_INPUT_MESSAGE", defaults.bad_input_message
        ),
        server_error_message=get_setting(
            scope, "server_error_message", "SERVER_ERROR_MESSAGE", defaults.server_error_message
        ),
    )
    return config.validate()

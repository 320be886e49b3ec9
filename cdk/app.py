#!/usr/bin/env python3
import json
import os
from pathlib import Path

import aws_cdk as cdk

from family_api.cdk_stack import FamilyApiStack
from family_api.errors import AppError, handle_error
from family_api.helpers import (
    get_context_bool,
    get_env_name,
    get_region,
    get_region_abbrev,
    load_entity_config,
    make_resource_namer,
    plain_resource_namer,
)

# Load environment variables from .env file if it exists
env_file = Path(__file__).parent / ".env"
if env_file.exists():
    with open(env_file) as f:
        for line in f:
            line = line.strip()
            if line and not line.startswith("#") and "=" in line:
                key, value = line.split("=", 1)
                # Only set if not already in environment (allow override)
                if key.strip() and not os.getenv(key.strip()):
                    os.environ[key.strip()] = value.strip()

app = cdk.App()

# Get environment from context or environment variable (dev/prod)
env_name = get_env_name(app)

region = get_region()
region_abbrev = get_region_abbrev(region)

env = cdk.Environment(
    account=os.getenv("AWS_ACCOUNT_ID") or os.getenv("CDK_DEFAULT_ACCOUNT"),
    region=region,
)

try:
    entity_config = load_entity_config(app)
except AppError as error:
    print(f"Invalid API configuration: {json.dumps(handle_error(error))}")
    raise

if get_context_bool(app, "prefix_names", default=True):
    rn = make_resource_namer(region_abbrev, env_name)
else:
    rn = plain_resource_namer

stack = FamilyApiStack(
    app,
    f"{entity_config.entity_name.title()}ApiStack-{region_abbrev}-{env_name}",
    stack_name=rn(f"{entity_config.entity_name}-api-stack"),
    env_name=env_name,
    entity_config=entity_config,
    resource_namer=rn,
    env=env,
    description=f"{entity_config.entity_name} REST API over DynamoDB ({region_abbrev}-{env_name})",
)

app.synth()

"""Tests for CDK helper utilities."""

import os
from unittest.mock import MagicMock, patch

import pytest

from family_api.errors import ConfigurationError
from family_api.helpers import (
    REGION_ABBREVIATIONS,
    get_context_bool,
    get_env_name,
    get_region,
    get_region_abbrev,
    get_setting,
    load_entity_config,
    make_resource_namer,
    plain_resource_namer,
)
from family_api.models import ALL_OPERATIONS, ApiOperation, KeyType


def _construct_with_context(context: dict) -> MagicMock:
    construct = MagicMock()
    construct.node.try_get_context.side_effect = lambda key: context.get(key)
    return construct


class TestRegionAbbreviations:
    """Tests for REGION_ABBREVIATIONS constant."""

    def test_us_east_1(self):
        """US East 1 abbreviation is ue1."""
        assert REGION_ABBREVIATIONS["us-east-1"] == "ue1"

    def test_eu_west_1(self):
        """EU West 1 abbreviation is ew1."""
        assert REGION_ABBREVIATIONS["eu-west-1"] == "ew1"


class TestGetRegion:
    """Tests for get_region function."""

    def test_returns_aws_region_env_var(self):
        """Returns AWS_REGION environment variable when set."""
        with patch.dict(os.environ, {"AWS_REGION": "us-west-2"}, clear=True):
            assert get_region() == "us-west-2"

    def test_returns_cdk_default_region_if_aws_region_not_set(self):
        """Returns CDK_DEFAULT_REGION when AWS_REGION is not set."""
        with patch.dict(os.environ, {"CDK_DEFAULT_REGION": "eu-west-1"}, clear=True):
            assert get_region() == "eu-west-1"

    def test_returns_us_east_1_as_default(self):
        """Returns us-east-1 when no region environment variables are set."""
        with patch.dict(os.environ, {}, clear=True):
            assert get_region() == "us-east-1"


class TestGetRegionAbbrev:
    """Tests for get_region_abbrev function."""

    def test_known_region(self):
        assert get_region_abbrev("us-east-1") == "ue1"

    def test_unknown_region_uses_first_three_chars(self):
        assert get_region_abbrev("unknown-region") == "unk"

    def test_reads_from_env_when_none(self):
        with patch.dict(os.environ, {"AWS_REGION": "us-west-2"}, clear=True):
            assert get_region_abbrev() == "uw2"


class TestResourceNamers:
    """Tests for make_resource_namer and plain_resource_namer."""

    def test_creates_naming_function(self):
        rn = make_resource_namer("ue1", "dev")
        assert rn("family-table") == "family-table-ue1-dev"

    def test_naming_function_allows_override(self):
        rn = make_resource_namer("ue1", "dev")
        assert rn("family-api", "uw2", "prod") == "family-api-uw2-prod"

    def test_plain_namer_keeps_name(self):
        assert plain_resource_namer("family-table") == "family-table"


class TestGetContextBool:
    """Tests for get_context_bool function."""

    def test_returns_default_when_key_not_found(self):
        construct = _construct_with_context({})
        assert get_context_bool(construct, "missing", default=True) is True
        assert get_context_bool(construct, "missing", default=False) is False

    def test_returns_bool_value_directly(self):
        assert get_context_bool(_construct_with_context({"key": True}), "key") is True
        assert get_context_bool(_construct_with_context({"key": False}), "key") is False

    @pytest.mark.parametrize("value", ["false", "FALSE", "0", "no"])
    def test_parses_false_strings(self, value):
        assert get_context_bool(_construct_with_context({"key": value}), "key", default=True) is False

    @pytest.mark.parametrize("value", ["true", "yes", "1"])
    def test_parses_true_strings(self, value):
        assert get_context_bool(_construct_with_context({"key": value}), "key") is True


class TestGetSetting:
    """Tests for get_setting precedence."""

    def test_context_wins_over_env(self):
        construct = _construct_with_context({"entity_name": "household"})
        with patch.dict(os.environ, {"ENTITY_NAME": "person"}, clear=True):
            assert get_setting(construct, "entity_name", "ENTITY_NAME", "family") == "household"

    def test_env_used_without_context(self):
        construct = _construct_with_context({})
        with patch.dict(os.environ, {"ENTITY_NAME": "person"}, clear=True):
            assert get_setting(construct, "entity_name", "ENTITY_NAME", "family") == "person"

    def test_default_used_last(self):
        construct = _construct_with_context({})
        with patch.dict(os.environ, {}, clear=True):
            assert get_setting(construct, "entity_name", "ENTITY_NAME", "family") == "family"

    def test_env_name_defaults_to_dev(self):
        with patch.dict(os.environ, {}, clear=True):
            assert get_env_name(_construct_with_context({})) == "dev"


class TestLoadEntityConfig:
    """Tests for load_entity_config."""

    def test_defaults(self):
        with patch.dict(os.environ, {}, clear=True):
            config = load_entity_config(_construct_with_context({}))

        assert config.entity_name == "family"
        assert config.key_attribute == "family-id"
        assert config.key_type is KeyType.STRING
        assert config.operations == ALL_OPERATIONS

    def test_reads_context(self):
        construct = _construct_with_context(
            {
                "entity_name": "family",
                "key_field": "family_id",
                "operations": "list,read",
                "bad_input_message": "Bad request body",
            }
        )
        with patch.dict(os.environ, {}, clear=True):
            config = load_entity_config(construct)

        assert config.key_attribute == "family_id"
        assert config.operations == frozenset({ApiOperation.LIST, ApiOperation.READ})
        assert config.bad_input_message == "Bad request body"

    def test_reads_environment(self):
        with patch.dict(os.environ, {"KEY_TYPE": "number", "OPERATIONS": "read,delete"}, clear=True):
            config = load_entity_config(_construct_with_context({}))

        assert config.key_type is KeyType.NUMBER
        assert config.operations == frozenset({ApiOperation.READ, ApiOperation.DELETE})

    def test_invalid_configuration_raises(self):
        with patch.dict(os.environ, {"KEY_TYPE": "NUMBER"}, clear=True):
            with pytest.raises(ConfigurationError):
                load_entity_config(_construct_with_context({}))

    def test_unknown_operation_raises(self):
        construct = _construct_with_context({"operations": "list,patch"})
        with patch.dict(os.environ, {}, clear=True):
            with pytest.raises(ConfigurationError):
                load_entity_config(construct)

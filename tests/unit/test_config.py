"""
Unit tests for pagination contract resolution.

Tests how caller overrides and registry defaults combine into a canonical contract.
"""

import pytest

from dynapage.config import (
    Disabled,
    Flagged,
    PaginatorConfig,
    Tokenized,
    as_fields,
    merge_config,
    resolve_contract,
)

LIST_TABLES_DEFAULT = PaginatorConfig(
    input_token="ExclusiveStartTableName",
    output_token="LastEvaluatedTableName",
    limit_key="Limit",
    result_key="TableNames",
)


class TestAsFields:
    def test_single_name_is_one_element_tuple(self):
        """Test that a single field name becomes a one-element tuple."""
        assert as_fields("NextToken") == ("NextToken",)

    def test_sequence_keeps_order(self):
        """Test that a list of field names keeps its order."""
        assert as_fields(["NT1", "NT2"]) == ("NT1", "NT2")

    @pytest.mark.parametrize("value", [None, "", []])
    def test_empty_values(self, value):
        """Test that None and empty values yield no fields."""
        assert as_fields(value) == ()


class TestResolveContract:
    """Test resolve_contract() across the contract variants."""

    def test_single_field_token(self):
        """Test resolving a single input/output token pair."""
        contract = resolve_contract({"input_token": "NextToken", "output_token": "LastToken"})
        assert contract == Tokenized(("NextToken",), ("LastToken",))

    def test_composite_token_is_paired_by_position(self):
        """Test that composite tokens are paired by position."""
        contract = resolve_contract(
            {"input_token": ["NT1", "NT2"], "output_token": ["LT1", "LT2"]}
        )
        assert isinstance(contract, Tokenized)
        assert contract.pairs() == (("NT1", "LT1"), ("NT2", "LT2"))

    @pytest.mark.parametrize("empty", [None, "", []])
    def test_explicit_empty_output_token_disables(self, empty):
        """An explicitly empty output_token wins over any default tokenization."""
        contract = resolve_contract({"output_token": empty}, LIST_TABLES_DEFAULT)
        assert contract == Disabled()

    def test_flag_only(self):
        """Test that a more-results key alone gives a flag-only contract."""
        contract = resolve_contract({"more_results": "IsTruncated"})
        assert contract == Flagged(continue_field="IsTruncated", tokenized=None)

    def test_flag_combines_with_default_tokens(self):
        """Test that a caller flag combines with the default's tokens."""
        contract = resolve_contract({"more_results": "IsTruncated"}, LIST_TABLES_DEFAULT)
        assert contract == Flagged(
            continue_field="IsTruncated",
            tokenized=Tokenized(("ExclusiveStartTableName",), ("LastEvaluatedTableName",)),
        )

    def test_defaults_used_when_caller_supplies_nothing(self):
        """Test that the default applies when the caller overrides nothing."""
        contract = resolve_contract(None, LIST_TABLES_DEFAULT)
        assert contract == Tokenized(("ExclusiveStartTableName",), ("LastEvaluatedTableName",))

    def test_override_is_key_by_key(self):
        """Overriding only output_token keeps the default input_token."""
        contract = resolve_contract({"output_token": "NextName"}, LIST_TABLES_DEFAULT)
        assert contract == Tokenized(("ExclusiveStartTableName",), ("NextName",))

    def test_no_tokens_and_no_flag_is_disabled(self):
        """Test that a config with neither tokens nor a flag is not paginated."""
        assert resolve_contract(None) == Disabled()
        assert resolve_contract({}) == Disabled()

    def test_mismatched_lengths_are_not_rejected(self):
        """Malformed contracts are not validated: pairs stop at the shorter list."""
        contract = resolve_contract({"input_token": ["A", "B"], "output_token": ["X"]})
        assert contract == Tokenized(("A",), ("X",))

    def test_canonical_contract_passes_through(self):
        """Test that an already-resolved contract is returned unchanged."""
        contract = Tokenized(("NextToken",), ("NextToken",))
        assert resolve_contract(contract, LIST_TABLES_DEFAULT) is contract

    def test_accepts_paginator_config(self):
        """Test that a PaginatorConfig instance is accepted as overrides."""
        config = PaginatorConfig(input_token="Marker", output_token="NextMarker")
        assert resolve_contract(config) == Tokenized(("Marker",), ("NextMarker",))


class TestMergeConfig:
    def test_unset_keys_fall_back_to_default(self):
        """Test that keys the caller leaves unset come from the default."""
        merged = merge_config({"more_results": "IsTruncated"}, LIST_TABLES_DEFAULT)
        assert merged.more_results == "IsTruncated"
        assert merged.limit_key == "Limit"
        assert merged.result_key == "TableNames"

    def test_unknown_keys_are_ignored(self):
        """botocore paginator models carry extra keys such as non_aggregate_keys."""
        merged = merge_config({"non_aggregate_keys": ["Owner"], "limit_key": "MaxKeys"})
        assert merged.limit_key == "MaxKeys"

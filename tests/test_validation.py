"""Tests for listing query parameter validation."""

import pytest

from invoice_api.domain.validation import (
    DOCUMENT_LENGTH_MESSAGE,
    EMPTY_SORT_FIELD_MESSAGE,
    INVALID_SORT_FIELD_MESSAGE,
    parse_amount,
    parse_int,
    validate_query_params,
)


class TestParseInt:
    """Strict base-10 integer parsing."""

    @pytest.mark.parametrize("raw, expected", [("0", 0), ("42", 42), ("-3", -3), ("+7", 7)])
    def test_accepts_plain_integers(self, raw, expected):
        assert parse_int(raw) == expected

    @pytest.mark.parametrize("raw", ["", "abc", "1.5", " 1", "1_000", "١٢", "0x10"])
    def test_rejects_non_integers(self, raw):
        assert parse_int(raw) is None

    def test_rejects_values_outside_64_bits(self):
        assert parse_int(str(2**63 - 1)) == 2**63 - 1
        assert parse_int(str(2**63)) is None


class TestParseAmount:
    def test_accepts_signed_decimals(self):
        assert parse_amount("42.42") == 42.42
        assert parse_amount("-10") == -10.0

    @pytest.mark.parametrize("raw", [None, "", "ten", "nan", "inf", "1_000", " 5"])
    def test_rejects_missing_and_non_finite(self, raw):
        assert parse_amount(raw) is None


class TestValidateQueryParams:
    """Each rule reports its own message and all violations accumulate."""

    def test_valid_parameters_produce_no_errors(self):
        params = {
            "document": ["DOC-1"],
            "referenceMonth": ["3"],
            "referenceYear": ["2024"],
            "sort": ["-referenceYear,document"],
            "page": ["2"],
            "perPage": ["10"],
            "apiToken": ["secret"],
        }

        assert validate_query_params(params) == []

    def test_empty_mapping_is_valid(self):
        assert validate_query_params({}) == []

    def test_duplicate_parameter(self):
        errors = validate_query_params({"document": ["A", "B"]})

        assert errors == ["duplicate parameter document"]

    def test_unknown_parameter(self):
        assert validate_query_params({"foo": ["1"]}) == ["invalid parameter foo"]

    def test_non_integer_page(self):
        assert validate_query_params({"page": ["abc"]}) == ["parameter page must be an integer"]

    @pytest.mark.parametrize("key", ["referenceMonth", "referenceYear", "perPage"])
    def test_non_integer_numeric_parameters(self, key):
        assert validate_query_params({key: ["x"]}) == [f"parameter {key} must be an integer"]

    @pytest.mark.parametrize("per_page", ["0", "-3"])
    def test_non_positive_per_page_passes_validation(self, per_page):
        # page size is checked against the result count later
        assert validate_query_params({"perPage": [per_page]}) == []

    def test_negative_page_passes_validation(self):
        # page bounds are checked against the result count later
        assert validate_query_params({"page": ["-1"]}) == []

    def test_document_length_boundary(self):
        assert validate_query_params({"document": ["a" * 14]}) == []
        assert validate_query_params({"document": ["a" * 15]}) == [DOCUMENT_LENGTH_MESSAGE]

    def test_document_length_counts_code_points(self):
        # 14 code points, 28 bytes in UTF-8
        assert validate_query_params({"document": ["ç" * 14]}) == []
        assert validate_query_params({"document": ["ç" * 15]}) == [DOCUMENT_LENGTH_MESSAGE]

    def test_sort_with_empty_segment(self):
        assert validate_query_params({"sort": ["document,"]}) == [EMPTY_SORT_FIELD_MESSAGE]

    def test_sort_with_unknown_field(self):
        errors = validate_query_params({"sort": ["-amount"]})

        assert errors == [INVALID_SORT_FIELD_MESSAGE]
        assert "document|referenceMonth|referenceYear" in errors[0]

    def test_lone_minus_is_an_invalid_sort_field(self):
        assert validate_query_params({"sort": ["-"]}) == [INVALID_SORT_FIELD_MESSAGE]

    def test_all_violations_are_reported(self):
        params = {
            "foo": ["1"],
            "document": ["x" * 20, "y"],
            "page": ["abc"],
            "sort": [",amount"],
        }

        errors = validate_query_params(params)

        assert errors == [
            "invalid parameter foo",
            "duplicate parameter document",
            DOCUMENT_LENGTH_MESSAGE,
            "parameter page must be an integer",
            EMPTY_SORT_FIELD_MESSAGE,
            INVALID_SORT_FIELD_MESSAGE,
        ]

    def test_one_message_per_rule_and_key(self):
        errors = validate_query_params({"perPage": ["a", "b"]})

        assert errors == ["duplicate parameter perPage", "parameter perPage must be an integer"]

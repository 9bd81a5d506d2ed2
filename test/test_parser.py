import pytest

from clarityai.errors import ParseError
from clarityai.parser import (
    extract_first_json_span,
    merge_over,
    parse_required,
    parse_with_defaults,
    strip_code_fences,
)


DEFAULT = {"summary": "default", "riskLevel": "MEDIUM", "features": ["Unknown"]}


def test_span_runs_from_first_open_to_last_close():
    text = 'Here you go: {"a": 1} and also {"b": 2}. Done.'
    assert extract_first_json_span(text) == '{"a": 1} and also {"b": 2}'


def test_array_span():
    assert extract_first_json_span("tests:\n[1, 2]\nend", array=True) == "[1, 2]"


def test_no_span():
    assert extract_first_json_span("no json here") is None
    assert extract_first_json_span("") is None


def test_embedded_object_merges_over_defaults():
    text = 'Sure! Here is the analysis:\n```json\n{"summary": "A token", "riskLevel": "LOW"}\n```\nHope it helps.'
    result = parse_with_defaults(text, DEFAULT)

    assert result == {"summary": "A token", "riskLevel": "LOW", "features": ["Unknown"]}


def test_null_fields_keep_default():
    result = parse_with_defaults('{"summary": null, "riskLevel": "HIGH"}', DEFAULT)
    assert result["summary"] == "default"
    assert result["riskLevel"] == "HIGH"


def test_nested_values_are_replaced_not_merged():
    default = {"security": {"issues": ["x"], "bestPractices": {"followed": ["a"]}}}
    result = parse_with_defaults('{"security": {"issues": []}}', default)
    assert result["security"] == {"issues": []}


@pytest.mark.parametrize("text", ["plain prose", '{"summary": "unterminated', '{"a": 1} trailing } brace', "[1, 2]"])
def test_failures_return_default_copy(text):
    result = parse_with_defaults(text, DEFAULT)

    assert result == DEFAULT
    result["features"].append("mutated")
    assert DEFAULT["features"] == ["Unknown"]


def test_parse_required_raises():
    with pytest.raises(ParseError):
        parse_required("nothing to see")
    with pytest.raises(ParseError):
        parse_required("{not json}")
    with pytest.raises(ParseError):
        parse_required('{"a": 1}', array=True)


def test_parse_required_array():
    assert parse_required('Tests: [{"name": "t1"}]', array=True) == [{"name": "t1"}]


def test_merge_over_ignores_non_mappings():
    assert merge_over({"a": 1}, "oops") == {"a": 1}
    assert merge_over({"a": 1}, {"b": 2}) == {"a": 1, "b": 2}


def test_strip_code_fences():
    assert strip_code_fences("```clarity\n(define-data-var x uint u0)\n```") == "(define-data-var x uint u0)"
    assert strip_code_fences("```solidity\ncontract A {}\n```") == "contract A {}"

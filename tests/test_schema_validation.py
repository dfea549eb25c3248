from __future__ import annotations

import json
from pathlib import Path

import pytest

from schemakit.schema import BooleanSchema, decode_schema
from schemakit.validation import (
    Invalid,
    collect_errors,
    is_valid,
    iter_errors,
    validate,
    validate_instance,
    validate_json_file,
)


def _check(schema: dict | bool, value: object):
    return validate(value, decode_schema(schema))


def test_validate_json_file_catches_type_mismatch(tmp_path: Path) -> None:
    schema = {
        "type": "object",
        "properties": {"count": {"type": "integer"}},
    }
    doc = {"count": "not-an-int"}

    schema_path = tmp_path / "schema.json"
    schema_path.write_text(json.dumps(schema) + "\n", encoding="utf-8")

    doc_path = tmp_path / "doc.json"
    doc_path.write_text(json.dumps(doc) + "\n", encoding="utf-8")

    loaded_schema = json.loads(schema_path.read_text(encoding="utf-8"))
    errors = validate_json_file(doc_path, loaded_schema)
    assert errors
    assert any("Expecting an Int" in err.message for err in errors)
    assert errors[0].path == "#/count"


def test_validate_json_file_leaves_tuple_overflow_unconstrained(
    tmp_path: Path,
) -> None:
    schema = {
        "type": "object",
        "properties": {
            "items": {
                "type": "array",
                # positional items; without additionalItems the rest is free
                "items": [{"type": "string"}],
            }
        },
    }

    doc = {"items": ["a", 2]}

    doc_path = tmp_path / "doc.json"
    doc_path.write_text(json.dumps(doc) + "\n", encoding="utf-8")

    errors = validate_json_file(doc_path, schema)
    assert errors == []


def test_validate_json_file_reports_invalid_json(tmp_path: Path) -> None:
    doc_path = tmp_path / "broken.json"
    doc_path.write_text("{not json", encoding="utf-8")

    errors = validate_json_file(doc_path, {"type": "object"})
    assert len(errors) == 1
    assert errors[0].message.startswith("Invalid JSON")


def test_validate_json_file_reads_yaml(tmp_path: Path) -> None:
    doc_path = tmp_path / "doc.yaml"
    doc_path.write_text("name: 12\n", encoding="utf-8")

    errors = validate_json_file(
        doc_path, {"properties": {"name": {"type": "string"}}}
    )
    assert [e.describe() for e in errors] == [
        "Invalid property 'name': Expecting a String but instead got: 12"
    ]


@pytest.mark.parametrize(
    ("value", "divisor"),
    [(4, 2), (2 / 3, 1 / 3), (0.3, 0.1), (7.5, 2.5), (-6, 3)],
)
def test_multiple_of_tolerates_float_error(value: float, divisor: float) -> None:
    assert _check({"multipleOf": divisor}, value) is True


def test_multiple_of_rejects_non_multiples() -> None:
    assert _check({"multipleOf": 3}, 2 / 7) == Invalid(
        "Value is not a multiple of 3"
    )
    assert _check({"multipleOf": 2}, 5) == Invalid("Value is not a multiple of 2")


@pytest.mark.parametrize("value", [10000000000.5, 1000000000.05])
def test_multiple_of_rejects_offsets_on_large_quotients(value: float) -> None:
    assert _check({"multipleOf": 1}, value) == Invalid(
        "Value is not a multiple of 1"
    )
    assert _check({"multipleOf": 1}, 10000000000.0) is True


def test_multiple_of_handles_integers_beyond_float_range() -> None:
    assert _check({"multipleOf": 0.5}, 10**400) is True
    assert _check({"multipleOf": 0.3}, 10**400 + 1) == Invalid(
        "Value is not a multiple of 0.3"
    )


def test_maximum_and_exclusive_maximum() -> None:
    assert _check({"maximum": 10}, 10) is True
    assert _check({"maximum": 10}, 10.5) == Invalid(
        "Value is above the maximum of 10"
    )
    assert _check({"exclusiveMaximum": 10}, 9.99) is True
    assert _check({"exclusiveMaximum": 10}, 10) == Invalid(
        "Value is not below the exclusive maximum of 10"
    )


def test_minimum_and_exclusive_minimum() -> None:
    assert _check({"minimum": 1.5}, 1.5) is True
    assert _check({"minimum": 1.5}, 1) == Invalid(
        "Value is below the minimum of 1.5"
    )
    assert _check({"exclusiveMinimum": 0}, 0) == Invalid(
        "Value is not above the exclusive minimum of 0"
    )


def test_draft4_boolean_exclusive_maximum() -> None:
    schema = {"maximum": 5, "exclusiveMaximum": True}
    assert _check(schema, 4) is True
    assert _check(schema, 5) == Invalid(
        "Value is not below the exclusive maximum of 5"
    )


def test_numeric_keywords_ignore_other_kinds() -> None:
    assert _check({"maximum": 1, "minLength": 5}, [1, 2, 3]) is True


def test_string_length_counts_code_points() -> None:
    assert _check({"maxLength": 2}, "日本") is True
    assert _check({"maxLength": 2}, "\U0001F600\U0001F600") is True
    assert _check({"maxLength": 2}, "abc") == Invalid(
        "String is longer than expected (maxLength=2)"
    )
    assert _check({"minLength": 2}, "a") == Invalid(
        "String is shorter than expected (minLength=2)"
    )


def test_pattern_is_a_search() -> None:
    assert _check({"pattern": "b"}, "abc") is True
    assert _check({"pattern": "^b"}, "abc") == Invalid(
        "String does not match the regex pattern"
    )


def test_invalid_pattern_is_reported() -> None:
    assert _check({"pattern": "("}, "a") == Invalid(
        "Pattern '(' is not a valid regular expression"
    )


def test_enum_and_const() -> None:
    assert _check({"enum": [1, "a", None]}, 1.0) is True
    assert _check({"enum": [1, "a"]}, True) == Invalid(
        "Value is not present in enum"
    )
    assert _check({"const": {"a": [1]}}, {"a": [1]}) is True
    assert _check({"const": 1}, 2) == Invalid(
        'Value doesn\'t equal const: expected "1" but the actual value is "2"'
    )
    assert _check({"const": "a"}, "b") == Invalid(
        'Value doesn\'t equal const: expected ""a"" but the actual value is ""b""'
    )


def test_type_checks() -> None:
    assert _check({"type": "integer"}, 1.0) is True
    assert _check({"type": "number"}, 1) is True
    assert _check({"type": "integer"}, True) == Invalid(
        "Expecting an Int but instead got: true"
    )
    assert _check({"type": "string"}, 5) == Invalid(
        "Expecting a String but instead got: 5"
    )
    assert _check({"type": "object"}, [1]) == Invalid(
        "Expecting a Object but instead got: [1]"
    )
    assert _check({"type": "null"}, 0) == Invalid(
        "Expecting null but instead got: 0"
    )


def test_nullable_and_union_types() -> None:
    nullable = {"type": ["string", "null"]}
    assert _check(nullable, None) is True
    assert _check(nullable, "a") is True
    assert _check(nullable, 1) == Invalid("Expecting a String but instead got: 1")

    union = {"type": ["string", "integer", "boolean"]}
    assert _check(union, False) is True
    assert _check(union, []) == Invalid(
        "Expecting one of String, Int, Bool but instead got: []"
    )


def test_array_constraints() -> None:
    assert _check({"maxItems": 1}, [1, 2]) == Invalid(
        "Array has more items than expected (maxItems=1)"
    )
    assert _check({"minItems": 3}, [1, 2]) == Invalid(
        "Array has fewer items than expected (minItems=3)"
    )
    assert _check({"uniqueItems": True}, [1, 1]) == Invalid(
        "Array has non-unique items"
    )
    assert _check({"uniqueItems": True}, [1, 2, 3]) is True
    assert _check({"uniqueItems": True}, [1, True]) is True
    assert _check({"uniqueItems": True}, [{"a": 1, "b": 2}, {"b": 2, "a": 1}]) == (
        Invalid("Array has non-unique items")
    )


def test_items_are_tagged_with_their_index() -> None:
    assert _check({"items": {"type": "integer"}}, [1, "x"]) == Invalid(
        'Item at index 1: Expecting an Int but instead got: "x"'
    )
    tuple_schema = {
        "items": [{"type": "string"}, {"type": "integer"}],
        "additionalItems": {"type": "boolean"},
    }
    assert _check(tuple_schema, ["a", 1, True, False]) is True
    assert _check(tuple_schema, ["a", 1, "no"]) == Invalid(
        'Item at index 2: Expecting a Bool but instead got: "no"'
    )
    closed = {"items": [{"type": "string"}], "additionalItems": False}
    assert _check(closed, ["a", 1]) == Invalid(
        "Item at index 1: Additional item not allowed"
    )


def test_contains() -> None:
    schema = {"contains": {"type": "string"}}
    assert _check(schema, [1, "a"]) is True
    assert _check(schema, [1, 2]) == Invalid("Array does not contain expected value")
    assert _check(schema, []) == Invalid("Array does not contain expected value")


def test_required_properties() -> None:
    schema = {"required": ["foo", "bar"]}
    assert _check(schema, {"foo": 1, "bar": 2}) is True
    assert _check(schema, {"foo": 1}) == Invalid(
        "Object doesn't have all the required properties"
    )


def test_property_count_constraints() -> None:
    assert _check({"maxProperties": 1}, {"a": 1, "b": 2}) == Invalid(
        "Object has more properties than expected (maxProperties=1)"
    )
    assert _check({"minProperties": 1}, {}) == Invalid(
        "Object has fewer properties than expected (minProperties=1)"
    )


def test_properties_pattern_properties_and_additional() -> None:
    schema = {
        "properties": {"name": {"type": "string"}},
        "patternProperties": {"^x-": {"type": "integer"}},
        "additionalProperties": False,
    }
    assert _check(schema, {"name": "a", "x-count": 2}) is True
    assert _check(schema, {"name": 1}) == Invalid(
        "Invalid property 'name': Expecting a String but instead got: 1"
    )
    assert _check(schema, {"x-count": "2"}) == Invalid(
        "Invalid property 'x-count': Expecting an Int but instead got: \"2\""
    )
    assert _check(schema, {"other": 1}) == Invalid(
        "Invalid property 'other': Additional property not allowed"
    )


def test_pattern_properties_match_by_substring() -> None:
    schema = {"patternProperties": {"id": {"type": "integer"}}}
    assert _check(schema, {"user_id_ref": "x"}) == Invalid(
        "Invalid property 'user_id_ref': Expecting an Int but instead got: \"x\""
    )


def test_additional_properties_schema() -> None:
    schema = {"properties": {"a": {}}, "additionalProperties": {"type": "string"}}
    assert _check(schema, {"a": 1, "b": "x"}) is True
    assert _check(schema, {"a": 1, "b": 2}) == Invalid(
        "Invalid property 'b': Expecting a String but instead got: 2"
    )


def test_property_names() -> None:
    schema = {"propertyNames": {"maxLength": 3}}
    assert _check(schema, {"abc": 1}) is True
    assert _check(schema, {"abcd": 1}) == Invalid(
        "Property 'abcd' doesn't validate against propertyNames schema: "
        "String is longer than expected (maxLength=3)"
    )


def test_dependencies() -> None:
    names = {"dependencies": {"card": ["billing"]}}
    assert _check(names, {"billing": 1}) is True
    assert _check(names, {"card": 1, "billing": 2}) is True
    assert _check(names, {"card": 1}) == Invalid(
        "Object doesn't have all the required properties"
    )

    schema_dep = {"dependencies": {"card": {"required": ["cvv"]}}}
    assert _check(schema_dep, {"card": 1, "cvv": 2}) is True
    assert _check(schema_dep, {"card": 1}) == Invalid(
        "Object doesn't have all the required properties"
    )


def test_all_of_surfaces_first_failing_branch() -> None:
    schema = {"allOf": [{"type": "string"}, {"minLength": 3}]}
    assert _check(schema, "abc") is True
    assert _check(schema, "ab") == Invalid(
        "String is shorter than expected (minLength=3)"
    )
    assert _check(schema, 5) == Invalid("Expecting a String but instead got: 5")


def test_any_of() -> None:
    schema = {"anyOf": [{"type": "string"}, {"minimum": 10}]}
    assert _check(schema, "a") is True
    assert _check(schema, 11) is True
    assert _check(schema, 1) == Invalid(
        "None of the schemas in anyOf accept this value"
    )


def test_one_of_requires_exactly_one_match() -> None:
    schema = {"oneOf": [{"minimum": 0}, {"enum": [1]}]}
    assert _check(schema, 0) is True
    assert _check(schema, 1) == Invalid(
        "oneOf expects value to succeed validation against exactly one schema "
        "but 2 validations succeeded"
    )
    assert _check(schema, -1) == Invalid(
        "None of the schemas in anyOf allow this value"
    )


def test_boolean_schemas() -> None:
    assert validate({"anything": [1]}, BooleanSchema(True)) is True
    assert validate(1, BooleanSchema(False)) == Invalid(
        "Value is not allowed by the false schema"
    )


def test_ref_to_definition() -> None:
    schema = {
        "definitions": {"pos": {"type": "integer", "minimum": 0}},
        "properties": {"n": {"$ref": "#/definitions/pos"}},
    }
    assert _check(schema, {"n": 3}) is True
    assert _check(schema, {"n": -1}) == Invalid(
        "Invalid property 'n': Value is below the minimum of 0"
    )


def test_ref_overrides_sibling_keywords() -> None:
    schema = {
        "definitions": {"s": {"type": "string"}},
        "$ref": "#/definitions/s",
        "maxLength": 1,
    }
    assert _check(schema, "abc") is True


def test_unresolvable_ref_is_no_constraint() -> None:
    assert _check({"$ref": "http://example.com/schema.json"}, 1) is True
    assert _check({"$ref": "#/definitions/missing"}, 1) is True


def test_recursive_root_ref() -> None:
    schema = {
        "type": "object",
        "properties": {"child": {"$ref": "#"}, "v": {"type": "integer"}},
    }
    assert _check(schema, {"child": {"child": {"v": 1}}}) is True
    assert _check(schema, {"child": {"child": {"v": "x"}}}) == Invalid(
        "Invalid property 'child': Invalid property 'child': "
        'Invalid property \'v\': Expecting an Int but instead got: "x"'
    )


def test_cyclic_definitions_terminate() -> None:
    self_loop = {
        "definitions": {"a": {"allOf": [{"$ref": "#/definitions/a"}]}},
        "$ref": "#/definitions/a",
    }
    assert _check(self_loop, 1) is True

    ping_pong = {
        "definitions": {
            "a": {"$ref": "#/definitions/b"},
            "b": {"$ref": "#/definitions/a"},
        },
        "$ref": "#/definitions/a",
    }
    assert _check(ping_pong, 1) is True


def test_collect_errors_maps_paths_to_messages() -> None:
    schema = decode_schema(
        {
            "properties": {
                "a": {"type": "integer"},
                "b": {"type": "string"},
                "tags": {"items": {"type": "string"}},
            }
        }
    )
    errors = collect_errors({"a": "x", "b": 1, "tags": ["ok", 2, 3]}, schema)
    assert errors == {
        "#/a": 'Expecting an Int but instead got: "x"',
        "#/b": "Expecting a String but instead got: 1",
        "#/tags/1": "Expecting a String but instead got: 2",
        "#/tags/2": "Expecting a String but instead got: 3",
    }


def test_collect_errors_is_empty_for_valid_values() -> None:
    schema = decode_schema({"type": "object", "required": ["a"]})
    assert collect_errors({"a": 1}, schema) == {}


def test_validate_instance_honours_max_errors() -> None:
    schema = decode_schema({"items": {"type": "string"}})
    errors = validate_instance([1, 2, 3, 4], schema, max_errors=2)
    assert [e.path for e in errors] == ["#/0", "#/1"]


def test_iter_errors_keeps_context_separate_from_message() -> None:
    schema = decode_schema({"properties": {"list": {"items": {"minimum": 5}}}})
    (error,) = list(iter_errors({"list": [7, 1]}, schema))
    assert error.path == "#/list/1"
    assert error.message == "Value is below the minimum of 5"
    assert error.context == ("Invalid property 'list'", "Item at index 1")


def test_is_valid() -> None:
    schema = decode_schema({"type": "string"})
    assert is_valid("a", schema)
    assert not is_valid(1, schema)

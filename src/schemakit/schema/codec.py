from __future__ import annotations

from pathlib import Path
from typing import Any, Callable

from schemakit.pointer import join_pointer
from schemakit.schema.model import (
    ArrayOfItems,
    BooleanSchema,
    Dependency,
    ItemDefinition,
    NoItems,
    ObjectSchema,
    PropertyNamesDependency,
    Schema,
    SchemaDependency,
)
from schemakit.schema.types import AnyType, type_from_names, type_to_names
from schemakit.values import UNSET, is_number, load_document


class SchemaDecodeError(ValueError):
    def __init__(self, pointer: str, message: str) -> None:
        super().__init__(f"{pointer}: {message}")
        self.pointer = pointer
        self.message = message


_KNOWN_KEYWORDS = {
    "type",
    "$ref",
    "definitions",
    "title",
    "description",
    "default",
    "examples",
    "multipleOf",
    "maximum",
    "exclusiveMaximum",
    "minimum",
    "exclusiveMinimum",
    "maxLength",
    "minLength",
    "pattern",
    "items",
    "additionalItems",
    "maxItems",
    "minItems",
    "uniqueItems",
    "contains",
    "maxProperties",
    "minProperties",
    "required",
    "properties",
    "patternProperties",
    "additionalProperties",
    "propertyNames",
    "dependencies",
    "enum",
    "const",
    "allOf",
    "anyOf",
    "oneOf",
}


def _number(data: dict[str, Any], key: str, pointer: str) -> float | None:
    value = data.get(key)
    if value is None:
        return None
    if not is_number(value):
        raise SchemaDecodeError(join_pointer(pointer, key), "expected a number")
    return value


def _count(data: dict[str, Any], key: str, pointer: str) -> int | None:
    value = data.get(key)
    if value is None:
        return None
    if not is_number(value) or value < 0 or int(value) != value:
        raise SchemaDecodeError(
            join_pointer(pointer, key), "expected a non-negative integer"
        )
    return int(value)


def _schema_map(
    data: dict[str, Any], key: str, pointer: str
) -> dict[str, Schema] | None:
    value = data.get(key)
    if value is None:
        return None
    here = join_pointer(pointer, key)
    if not isinstance(value, dict):
        raise SchemaDecodeError(here, "expected an object of schemas")
    return {
        name: _decode(sub, join_pointer(here, name)) for name, sub in value.items()
    }


def _schema_list(
    data: dict[str, Any], key: str, pointer: str
) -> tuple[Schema, ...] | None:
    value = data.get(key)
    if value is None:
        return None
    here = join_pointer(pointer, key)
    if not isinstance(value, list):
        raise SchemaDecodeError(here, "expected a list of schemas")
    return tuple(_decode(sub, join_pointer(here, idx)) for idx, sub in enumerate(value))


def _optional_schema(data: dict[str, Any], key: str, pointer: str) -> Schema | None:
    if key not in data:
        return None
    return _decode(data[key], join_pointer(pointer, key))


def _string_list(value: Any, pointer: str) -> tuple[str, ...]:
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise SchemaDecodeError(pointer, "expected a list of strings")
    return tuple(value)


def _exclusive_bound(
    data: dict[str, Any], exclusive_key: str, bound_key: str, pointer: str
) -> tuple[float | None, float | None]:
    """Return (bound, exclusive bound), accepting the draft-04 boolean form."""

    bound = _number(data, bound_key, pointer)
    exclusive = data.get(exclusive_key)
    if isinstance(exclusive, bool):
        if exclusive and bound is not None:
            return None, bound
        return bound, None
    return bound, _number(data, exclusive_key, pointer)


def _decode(data: Any, pointer: str) -> Schema:
    if isinstance(data, bool):
        return BooleanSchema(data)
    if not isinstance(data, dict):
        raise SchemaDecodeError(pointer, "schema must be an object or a boolean")

    type_names = data.get("type")
    try:
        type_ = AnyType() if type_names is None else type_from_names(type_names)
    except (TypeError, ValueError) as exc:
        raise SchemaDecodeError(join_pointer(pointer, "type"), str(exc)) from exc

    ref = data.get("$ref")
    if ref is not None and not isinstance(ref, str):
        raise SchemaDecodeError(join_pointer(pointer, "$ref"), "expected a string")

    items_raw = data.get("items")
    items: Any
    if items_raw is None:
        items = NoItems()
    elif isinstance(items_raw, list):
        items = ArrayOfItems(_schema_list(data, "items", pointer) or ())
    else:
        items = ItemDefinition(_decode(items_raw, join_pointer(pointer, "items")))

    pattern = data.get("pattern")
    if pattern is not None and not isinstance(pattern, str):
        raise SchemaDecodeError(join_pointer(pointer, "pattern"), "expected a string")

    enum = data.get("enum")
    if enum is not None and not isinstance(enum, list):
        raise SchemaDecodeError(join_pointer(pointer, "enum"), "expected a list")

    examples = data.get("examples")

    required = None
    if "required" in data:
        required = _string_list(data["required"], join_pointer(pointer, "required"))

    dependencies: dict[str, Dependency] | None = None
    if "dependencies" in data:
        here = join_pointer(pointer, "dependencies")
        raw = data["dependencies"]
        if not isinstance(raw, dict):
            raise SchemaDecodeError(here, "expected an object")
        dependencies = {}
        for name, dep in raw.items():
            if isinstance(dep, list):
                dependencies[name] = PropertyNamesDependency(
                    _string_list(dep, join_pointer(here, name))
                )
            else:
                dependencies[name] = SchemaDependency(
                    _decode(dep, join_pointer(here, name))
                )

    maximum, exclusive_maximum = _exclusive_bound(
        data, "exclusiveMaximum", "maximum", pointer
    )
    minimum, exclusive_minimum = _exclusive_bound(
        data, "exclusiveMinimum", "minimum", pointer
    )

    return ObjectSchema(
        type=type_,
        ref=ref,
        definitions=_schema_map(data, "definitions", pointer),
        title=data.get("title"),
        description=data.get("description"),
        default=data.get("default", UNSET),
        examples=tuple(examples) if isinstance(examples, list) else None,
        multiple_of=_number(data, "multipleOf", pointer),
        maximum=maximum,
        exclusive_maximum=exclusive_maximum,
        minimum=minimum,
        exclusive_minimum=exclusive_minimum,
        max_length=_count(data, "maxLength", pointer),
        min_length=_count(data, "minLength", pointer),
        pattern=pattern,
        items=items,
        additional_items=_optional_schema(data, "additionalItems", pointer),
        max_items=_count(data, "maxItems", pointer),
        min_items=_count(data, "minItems", pointer),
        unique_items=bool(data.get("uniqueItems", False)),
        contains=_optional_schema(data, "contains", pointer),
        max_properties=_count(data, "maxProperties", pointer),
        min_properties=_count(data, "minProperties", pointer),
        required=required,
        properties=_schema_map(data, "properties", pointer),
        pattern_properties=_schema_map(data, "patternProperties", pointer),
        additional_properties=_optional_schema(data, "additionalProperties", pointer),
        property_names=_optional_schema(data, "propertyNames", pointer),
        dependencies=dependencies,
        enum=tuple(enum) if enum is not None else None,
        const=data.get("const", UNSET),
        all_of=_schema_list(data, "allOf", pointer),
        any_of=_schema_list(data, "anyOf", pointer),
        one_of=_schema_list(data, "oneOf", pointer),
        extras={k: v for k, v in data.items() if k not in _KNOWN_KEYWORDS},
    )


def decode_schema(data: Any) -> Schema:
    """Decode a JSON-like schema document into Schema nodes."""

    return _decode(data, "#")


def load_schema(path: str | Path) -> Schema:
    return decode_schema(load_document(path))


def _put(
    out: dict[str, Any],
    key: str,
    value: Any,
    convert: Callable[[Any], Any] | None = None,
) -> None:
    if value is None or value is UNSET:
        return
    out[key] = convert(value) if convert else value


def encode_schema(schema: Schema) -> Any:
    if isinstance(schema, BooleanSchema):
        return schema.value

    def schema_map(mapping: dict[str, Schema]) -> dict[str, Any]:
        return {name: encode_schema(sub) for name, sub in mapping.items()}

    def schema_list(schemas: tuple[Schema, ...]) -> list[Any]:
        return [encode_schema(sub) for sub in schemas]

    out: dict[str, Any] = {}
    _put(out, "$ref", schema.ref)
    _put(out, "type", type_to_names(schema.type))
    _put(out, "title", schema.title)
    _put(out, "description", schema.description)
    if schema.default is not UNSET:
        out["default"] = schema.default
    _put(out, "examples", schema.examples, list)
    _put(out, "definitions", schema.definitions, schema_map)
    _put(out, "multipleOf", schema.multiple_of)
    _put(out, "maximum", schema.maximum)
    _put(out, "exclusiveMaximum", schema.exclusive_maximum)
    _put(out, "minimum", schema.minimum)
    _put(out, "exclusiveMinimum", schema.exclusive_minimum)
    _put(out, "maxLength", schema.max_length)
    _put(out, "minLength", schema.min_length)
    _put(out, "pattern", schema.pattern)
    if isinstance(schema.items, ItemDefinition):
        out["items"] = encode_schema(schema.items.schema)
    elif isinstance(schema.items, ArrayOfItems):
        out["items"] = schema_list(schema.items.schemas)
    _put(out, "additionalItems", schema.additional_items, encode_schema)
    _put(out, "maxItems", schema.max_items)
    _put(out, "minItems", schema.min_items)
    if schema.unique_items:
        out["uniqueItems"] = True
    _put(out, "contains", schema.contains, encode_schema)
    _put(out, "maxProperties", schema.max_properties)
    _put(out, "minProperties", schema.min_properties)
    _put(out, "required", schema.required, list)
    _put(out, "properties", schema.properties, schema_map)
    _put(out, "patternProperties", schema.pattern_properties, schema_map)
    _put(out, "additionalProperties", schema.additional_properties, encode_schema)
    _put(out, "propertyNames", schema.property_names, encode_schema)
    if schema.dependencies is not None:
        out["dependencies"] = {
            name: (
                list(dep.names)
                if isinstance(dep, PropertyNamesDependency)
                else encode_schema(dep.schema)
            )
            for name, dep in schema.dependencies.items()
        }
    _put(out, "enum", schema.enum, list)
    if schema.const is not UNSET:
        out["const"] = schema.const
    _put(out, "allOf", schema.all_of, schema_list)
    _put(out, "anyOf", schema.any_of, schema_list)
    _put(out, "oneOf", schema.one_of, schema_list)
    out.update(schema.extras)
    return out


__all__ = [
    "SchemaDecodeError",
    "decode_schema",
    "encode_schema",
    "load_schema",
]

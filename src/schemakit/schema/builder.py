from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Any, Iterable, Mapping

from schemakit.schema.codec import decode_schema, encode_schema
from schemakit.schema.model import (
    ArrayOfItems,
    BooleanSchema,
    Dependency,
    ItemDefinition,
    ObjectSchema,
    PropertyNamesDependency,
    Schema,
    SchemaDependency,
)
from schemakit.schema.types import (
    ANY_TYPE,
    NullableType,
    Primitive,
    UnionType,
    parse_primitive,
    type_from_names,
)

if TYPE_CHECKING:
    from schemakit.validation import ValidationResult


class SchemaBuildError(ValueError):
    pass


def _schema(value: Schema | SchemaBuilder | bool) -> Schema:
    if isinstance(value, SchemaBuilder):
        return value.build()
    if isinstance(value, bool):
        return BooleanSchema(value)
    return value


def _schemas(values: Iterable[Schema | SchemaBuilder | bool]) -> tuple[Schema, ...]:
    return tuple(_schema(v) for v in values)


def _schema_map(
    values: Mapping[str, Schema | SchemaBuilder | bool],
) -> dict[str, Schema]:
    return {name: _schema(v) for name, v in values.items()}


def _count(name: str, value: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise SchemaBuildError(f"{name} must be a non-negative integer")
    return value


def _primitive(name: str) -> Primitive:
    try:
        return parse_primitive(name)
    except ValueError as exc:
        raise SchemaBuildError(str(exc)) from exc


@dataclass(frozen=True)
class SchemaBuilder:
    """Immutable, chainable construction of an object-form schema.

    Every ``with_*`` call returns a new builder::

        schema = (
            SchemaBuilder()
            .with_type("object")
            .with_properties({"age": SchemaBuilder().with_type("integer")})
            .with_required(["age"])
        )
        schema.validate({"age": 3})
    """

    schema: ObjectSchema = field(default_factory=ObjectSchema)

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> SchemaBuilder:
        decoded = decode_schema(dict(data))
        if not isinstance(decoded, ObjectSchema):
            raise SchemaBuildError("Builder needs an object-form schema")
        return cls(decoded)

    def _with(self, **changes: Any) -> SchemaBuilder:
        return SchemaBuilder(replace(self.schema, **changes))

    def build(self) -> ObjectSchema:
        return self.schema

    def to_json(self) -> Any:
        return encode_schema(self.schema)

    def validate(self, value: Any) -> ValidationResult:
        from schemakit.validation import validate

        return validate(value, self.schema)

    # type

    def with_type(self, name: str) -> SchemaBuilder:
        try:
            return self._with(type=type_from_names(name))
        except ValueError as exc:
            raise SchemaBuildError(str(exc)) from exc

    def with_nullable_type(self, name: str) -> SchemaBuilder:
        return self._with(type=NullableType(_primitive(name)))

    def with_union_type(self, names: Iterable[str]) -> SchemaBuilder:
        primitives = tuple(_primitive(name) for name in names)
        if not primitives:
            raise SchemaBuildError("Union type needs at least one type name")
        return self._with(type=UnionType(primitives))

    def with_any_type(self) -> SchemaBuilder:
        return self._with(type=ANY_TYPE)

    # references

    def with_ref(self, ref: str) -> SchemaBuilder:
        return self._with(ref=ref)

    def with_definitions(
        self, definitions: Mapping[str, Schema | SchemaBuilder | bool]
    ) -> SchemaBuilder:
        return self._with(definitions=_schema_map(definitions))

    # annotations

    def with_title(self, title: str) -> SchemaBuilder:
        return self._with(title=title)

    def with_description(self, description: str) -> SchemaBuilder:
        return self._with(description=description)

    def with_default(self, default: Any) -> SchemaBuilder:
        return self._with(default=default)

    # numeric

    def with_multiple_of(self, value: float) -> SchemaBuilder:
        if value <= 0:
            raise SchemaBuildError("multipleOf must be greater than 0")
        return self._with(multiple_of=value)

    def with_maximum(self, value: float) -> SchemaBuilder:
        return self._with(maximum=value)

    def with_exclusive_maximum(self, value: float) -> SchemaBuilder:
        return self._with(exclusive_maximum=value)

    def with_minimum(self, value: float) -> SchemaBuilder:
        return self._with(minimum=value)

    def with_exclusive_minimum(self, value: float) -> SchemaBuilder:
        return self._with(exclusive_minimum=value)

    # string

    def with_max_length(self, value: int) -> SchemaBuilder:
        return self._with(max_length=_count("maxLength", value))

    def with_min_length(self, value: int) -> SchemaBuilder:
        return self._with(min_length=_count("minLength", value))

    def with_pattern(self, pattern: str) -> SchemaBuilder:
        return self._with(pattern=pattern)

    # array

    def with_item(self, item: Schema | SchemaBuilder | bool) -> SchemaBuilder:
        return self._with(items=ItemDefinition(_schema(item)))

    def with_items(
        self, items: Iterable[Schema | SchemaBuilder | bool]
    ) -> SchemaBuilder:
        return self._with(items=ArrayOfItems(_schemas(items)))

    def with_additional_items(
        self, schema: Schema | SchemaBuilder | bool
    ) -> SchemaBuilder:
        return self._with(additional_items=_schema(schema))

    def with_max_items(self, value: int) -> SchemaBuilder:
        return self._with(max_items=_count("maxItems", value))

    def with_min_items(self, value: int) -> SchemaBuilder:
        return self._with(min_items=_count("minItems", value))

    def with_unique_items(self, unique: bool = True) -> SchemaBuilder:
        return self._with(unique_items=unique)

    def with_contains(self, schema: Schema | SchemaBuilder | bool) -> SchemaBuilder:
        return self._with(contains=_schema(schema))

    # object

    def with_max_properties(self, value: int) -> SchemaBuilder:
        return self._with(max_properties=_count("maxProperties", value))

    def with_min_properties(self, value: int) -> SchemaBuilder:
        return self._with(min_properties=_count("minProperties", value))

    def with_required(self, names: Iterable[str]) -> SchemaBuilder:
        return self._with(required=tuple(names))

    def with_properties(
        self, properties: Mapping[str, Schema | SchemaBuilder | bool]
    ) -> SchemaBuilder:
        return self._with(properties=_schema_map(properties))

    def with_pattern_properties(
        self, properties: Mapping[str, Schema | SchemaBuilder | bool]
    ) -> SchemaBuilder:
        return self._with(pattern_properties=_schema_map(properties))

    def with_additional_properties(
        self, schema: Schema | SchemaBuilder | bool
    ) -> SchemaBuilder:
        return self._with(additional_properties=_schema(schema))

    def with_property_names(
        self, schema: Schema | SchemaBuilder | bool
    ) -> SchemaBuilder:
        return self._with(property_names=_schema(schema))

    def with_schema_dependency(
        self, name: str, schema: Schema | SchemaBuilder | bool
    ) -> SchemaBuilder:
        return self._with_dependency(name, SchemaDependency(_schema(schema)))

    def with_property_dependency(
        self, name: str, names: Iterable[str]
    ) -> SchemaBuilder:
        return self._with_dependency(name, PropertyNamesDependency(tuple(names)))

    def _with_dependency(self, name: str, dependency: Dependency) -> SchemaBuilder:
        dependencies = dict(self.schema.dependencies or {})
        dependencies[name] = dependency
        return self._with(dependencies=dependencies)

    # generic

    def with_enum(self, values: Iterable[Any]) -> SchemaBuilder:
        return self._with(enum=tuple(values))

    def with_const(self, value: Any) -> SchemaBuilder:
        return self._with(const=value)

    # composition

    def with_all_of(
        self, schemas: Iterable[Schema | SchemaBuilder | bool]
    ) -> SchemaBuilder:
        return self._with(all_of=_schemas(schemas))

    def with_any_of(
        self, schemas: Iterable[Schema | SchemaBuilder | bool]
    ) -> SchemaBuilder:
        return self._with(any_of=_schemas(schemas))

    def with_one_of(
        self, schemas: Iterable[Schema | SchemaBuilder | bool]
    ) -> SchemaBuilder:
        return self._with(one_of=_schemas(schemas))


__all__ = ["SchemaBuildError", "SchemaBuilder"]

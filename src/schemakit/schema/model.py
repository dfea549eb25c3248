from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Any, Union

from schemakit.schema.types import ANY_TYPE, Type
from schemakit.values import UNSET


@dataclass(frozen=True)
class BooleanSchema:
    value: bool


@dataclass(frozen=True)
class NoItems:
    pass


@dataclass(frozen=True)
class ItemDefinition:
    schema: Schema


@dataclass(frozen=True)
class ArrayOfItems:
    schemas: tuple[Schema, ...]


Items = Union[NoItems, ItemDefinition, ArrayOfItems]

NO_ITEMS = NoItems()


@dataclass(frozen=True)
class SchemaDependency:
    schema: Schema


@dataclass(frozen=True)
class PropertyNamesDependency:
    names: tuple[str, ...]


Dependency = Union[SchemaDependency, PropertyNamesDependency]


@dataclass(frozen=True)
class ObjectSchema:
    """Object-form schema node.

    Mapping fields keep document order and are never mutated after
    construction; the builder and codec always create fresh dicts.
    """

    type: Type = ANY_TYPE
    ref: str | None = None
    definitions: dict[str, Schema] | None = None

    # annotations, never consulted by validation
    title: str | None = None
    description: str | None = None
    default: Any = UNSET
    examples: tuple[Any, ...] | None = None

    # numeric
    multiple_of: float | None = None
    maximum: float | None = None
    exclusive_maximum: float | None = None
    minimum: float | None = None
    exclusive_minimum: float | None = None

    # string
    max_length: int | None = None
    min_length: int | None = None
    pattern: str | None = None

    # array
    items: Items = NO_ITEMS
    additional_items: Schema | None = None
    max_items: int | None = None
    min_items: int | None = None
    unique_items: bool = False
    contains: Schema | None = None

    # object
    max_properties: int | None = None
    min_properties: int | None = None
    required: tuple[str, ...] | None = None
    properties: dict[str, Schema] | None = None
    pattern_properties: dict[str, Schema] | None = None
    additional_properties: Schema | None = None
    property_names: Schema | None = None
    dependencies: dict[str, Dependency] | None = None

    # generic
    enum: tuple[Any, ...] | None = None
    const: Any = UNSET

    # composition
    all_of: tuple[Schema, ...] | None = None
    any_of: tuple[Schema, ...] | None = None
    one_of: tuple[Schema, ...] | None = None

    extras: dict[str, Any] = field(default_factory=dict, compare=False)


Schema = Union[BooleanSchema, ObjectSchema]

_ANNOTATIONS = {"title", "description", "default", "examples", "extras"}


def blank_schema() -> ObjectSchema:
    """A schema that accepts anything."""

    return ObjectSchema()


def is_blank(schema: Schema) -> bool:
    if isinstance(schema, BooleanSchema):
        return schema.value
    blank = blank_schema()
    for f in fields(ObjectSchema):
        if f.name in _ANNOTATIONS:
            continue
        if getattr(schema, f.name) != getattr(blank, f.name):
            return False
    return True


def as_object_schema(schema: Schema) -> ObjectSchema | None:
    """``true`` behaves like a blank schema; ``false`` has no object form."""

    if isinstance(schema, ObjectSchema):
        return schema
    if schema.value:
        return blank_schema()
    return None


__all__ = [
    "ArrayOfItems",
    "BooleanSchema",
    "Dependency",
    "ItemDefinition",
    "Items",
    "NO_ITEMS",
    "NoItems",
    "ObjectSchema",
    "PropertyNamesDependency",
    "Schema",
    "SchemaDependency",
    "as_object_schema",
    "blank_schema",
    "is_blank",
]

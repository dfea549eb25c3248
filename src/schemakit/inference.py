from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, Tuple

from schemakit.pointer import InvalidPointerError, parse_pointer, value_at
from schemakit.resolver import resolve_reference, schema_for
from schemakit.schema.model import (
    ObjectSchema,
    Schema,
    as_object_schema,
    blank_schema,
    is_blank,
)
from schemakit.schema.types import (
    ANY_TYPE,
    AnyType,
    Primitive,
    SingleType,
    Type,
    UnionType,
    primitive_of,
)
from schemakit.validation import is_valid
from schemakit.values import UNSET

logger = logging.getLogger(__name__)

SubSchemaType = Tuple[Type, ObjectSchema]

_SCHEMA_OR_FALSE = {Primitive.BOOLEAN, Primitive.OBJECT}


@dataclass(frozen=True)
class ImpliedType:
    type: Type
    schema: ObjectSchema = field(default_factory=blank_schema)
    error: str | None = None


def imply_type(value: Any, root: Schema, pointer: str) -> ImpliedType:
    """Work out which concrete type applies at ``pointer``.

    The value found at ``pointer`` (if any) breaks ties between
    ``anyOf``/``allOf``/``oneOf`` branches. Failures degrade to ``AnyType``
    with a blank schema and an explanatory ``error``.
    """

    try:
        actual = value_at(value, parse_pointer(pointer))
    except InvalidPointerError:
        actual = UNSET

    node = schema_for(pointer, root)
    if node is None:
        logger.debug("No schema found at %s", pointer)
        return ImpliedType(ANY_TYPE, error=f"Can't resolve schema at {pointer}")

    implied = calc_sub_schema_type(actual, root, node)
    if implied is None:
        logger.debug("Type inference failed at %s", pointer)
        return ImpliedType(ANY_TYPE, error=f"Can't imply type: {pointer}")
    type_, schema = implied
    return ImpliedType(type_, schema)


def calc_sub_schema_type(
    actual: Any,
    root: Schema,
    node: Schema,
    _seen: frozenset[str] = frozenset(),
) -> SubSchemaType | None:
    schema = as_object_schema(node)
    if schema is None:
        return None

    if schema.ref is not None:
        if schema.ref in _seen:
            return None
        target = resolve_reference(root, schema.ref)
        if target is None:
            return None
        return calc_sub_schema_type(actual, root, target, _seen | {schema.ref})

    type_ = schema.type
    if isinstance(type_, AnyType):
        branches = (schema.any_of or ()) + (schema.all_of or ()) + (schema.one_of or ())
        found = try_all_schemas(actual, root, branches, _seen)
        if found is not None:
            return found
        if schema.properties is not None or schema.additional_properties is not None:
            return SingleType(Primitive.OBJECT), schema
        if schema.enum:
            return SingleType(primitive_of(schema.enum[0])), schema
        if is_blank(schema):
            return ANY_TYPE, schema
        return None

    if isinstance(type_, UnionType) and set(type_.primitives) == _SCHEMA_OR_FALSE:
        return SingleType(Primitive.OBJECT), schema

    return type_, schema


def try_all_schemas(
    actual: Any,
    root: Schema,
    branches: Iterable[Schema],
    _seen: frozenset[str] = frozenset(),
) -> SubSchemaType | None:
    """First branch that accepts ``actual`` and resolves to a type."""

    for branch in branches:
        if actual is not UNSET and not is_valid(actual, branch, root=root):
            continue
        found = calc_sub_schema_type(actual, root, branch, _seen)
        if found is not None:
            return found
    return None


__all__ = [
    "ImpliedType",
    "SubSchemaType",
    "calc_sub_schema_type",
    "imply_type",
    "try_all_schemas",
]

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Union

from schemakit.values import is_integral


class Primitive(str, Enum):
    INTEGER = "integer"
    NUMBER = "number"
    STRING = "string"
    BOOLEAN = "boolean"
    ARRAY = "array"
    OBJECT = "object"
    NULL = "null"

    @property
    def kind(self) -> str:
        return _KINDS[self]


_KINDS = {
    Primitive.INTEGER: "Int",
    Primitive.NUMBER: "Float",
    Primitive.STRING: "String",
    Primitive.BOOLEAN: "Bool",
    Primitive.ARRAY: "Array",
    Primitive.OBJECT: "Object",
    Primitive.NULL: "Null",
}


@dataclass(frozen=True)
class AnyType:
    pass


@dataclass(frozen=True)
class SingleType:
    primitive: Primitive


@dataclass(frozen=True)
class NullableType:
    primitive: Primitive


@dataclass(frozen=True)
class UnionType:
    primitives: tuple[Primitive, ...]


Type = Union[AnyType, SingleType, NullableType, UnionType]

ANY_TYPE = AnyType()


def parse_primitive(name: str) -> Primitive:
    try:
        return Primitive(name)
    except ValueError:
        raise ValueError(f"Unknown type name: {name!r}") from None


def type_from_names(names: str | list[str] | tuple[str, ...]) -> Type:
    """Build a Type from the ``type`` keyword value.

    A two-element list containing ``"null"`` is a nullable type.
    """

    if isinstance(names, str):
        return SingleType(parse_primitive(names))
    primitives = tuple(parse_primitive(name) for name in names)
    if len(primitives) == 1:
        return SingleType(primitives[0])
    if len(primitives) == 2 and Primitive.NULL in primitives:
        other = [p for p in primitives if p is not Primitive.NULL]
        if other:
            return NullableType(other[0])
    return UnionType(primitives)


def type_to_names(type_: Type) -> str | list[str] | None:
    if isinstance(type_, SingleType):
        return type_.primitive.value
    if isinstance(type_, NullableType):
        return [type_.primitive.value, Primitive.NULL.value]
    if isinstance(type_, UnionType):
        return [p.value for p in type_.primitives]
    return None


def primitive_of(value: Any) -> Primitive:
    """JSON type of a value; integral floats count as integers."""

    if value is None:
        return Primitive.NULL
    if isinstance(value, bool):
        return Primitive.BOOLEAN
    if is_integral(value):
        return Primitive.INTEGER
    if isinstance(value, float):
        return Primitive.NUMBER
    if isinstance(value, str):
        return Primitive.STRING
    if isinstance(value, list):
        return Primitive.ARRAY
    if isinstance(value, dict):
        return Primitive.OBJECT
    raise TypeError(f"Not a JSON value: {type(value).__name__}")


def primitive_accepts(primitive: Primitive, value: Any) -> bool:
    actual = primitive_of(value)
    if actual is primitive:
        return True
    # every integer is also a number
    return primitive is Primitive.NUMBER and actual is Primitive.INTEGER


__all__ = [
    "ANY_TYPE",
    "AnyType",
    "NullableType",
    "Primitive",
    "SingleType",
    "Type",
    "UnionType",
    "parse_primitive",
    "primitive_accepts",
    "primitive_of",
    "type_from_names",
    "type_to_names",
]

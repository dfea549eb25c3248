"""Schema-guided reads and writes of JSON values at ``#/a/b/0`` pointers.

Writes never mutate their input: ``set_value`` rebuilds only the containers
along the pointer and shares everything else with the original root.
"""

from __future__ import annotations

from typing import Any

from schemakit.inference import calc_sub_schema_type
from schemakit.pointer import (
    InvalidPointerError,
    format_pointer,
    is_index,
    parse_pointer,
    value_at,
)
from schemakit.resolver import find_property
from schemakit.schema.model import Schema
from schemakit.schema.types import (
    AnyType,
    NullableType,
    Primitive,
    SingleType,
    Type,
    UnionType,
)
from schemakit.values import UNSET, is_integral


class InvalidPathError(ValueError):
    pass


class PathIndexOutOfBounds(IndexError):
    def __init__(self, pointer: str, index: int, length: int) -> None:
        super().__init__(
            f"{pointer}: index {index} is beyond the end of an array of "
            f"length {length}"
        )
        self.pointer = pointer
        self.index = index
        self.length = length


_SEEDS: dict[Primitive, Any] = {
    Primitive.STRING: "",
    Primitive.INTEGER: 0,
    Primitive.NUMBER: 0.0,
    Primitive.BOOLEAN: False,
    Primitive.NULL: None,
}


def _seed_for_primitive(primitive: Primitive) -> Any:
    if primitive is Primitive.OBJECT:
        return {}
    if primitive is Primitive.ARRAY:
        return []
    return _SEEDS[primitive]


def _primary_primitive(type_: Type) -> Primitive | None:
    if isinstance(type_, (SingleType, NullableType)):
        return type_.primitive
    if isinstance(type_, UnionType):
        for primitive in type_.primitives:
            if primitive is not Primitive.NULL:
                return primitive
        return Primitive.NULL if type_.primitives else None
    return None


def default_for(schema: Schema, root: Schema | None = None) -> Any:
    """Empty-but-typed seed value for a new member described by ``schema``.

    Ambiguous schemas are narrowed through type inference; anything still
    unknown seeds an empty object.
    """

    implied = calc_sub_schema_type(UNSET, root if root is not None else schema, schema)
    if implied is None or isinstance(implied[0], AnyType):
        return {}
    primitive = _primary_primitive(implied[0])
    if primitive is None:
        return {}
    return _seed_for_primitive(primitive)


def get_value(schema: Schema, pointer: str, value: Any, default: Any = None) -> Any:
    try:
        found = value_at(value, parse_pointer(pointer))
    except InvalidPointerError:
        return default
    if found is UNSET:
        return default
    return found


def get_string(schema: Schema, pointer: str, value: Any) -> str:
    found = get_value(schema, pointer, value)
    return found if isinstance(found, str) else ""


def get_int(schema: Schema, pointer: str, value: Any) -> int:
    found = get_value(schema, pointer, value)
    return int(found) if is_integral(found) else 0


def get_bool(schema: Schema, pointer: str, value: Any) -> bool:
    found = get_value(schema, pointer, value)
    return found if isinstance(found, bool) else False


def get_length(schema: Schema, pointer: str, value: Any) -> int:
    found = get_value(schema, pointer, value)
    return len(found) if isinstance(found, list) else 0


def _container_seed(root: Schema, schema: Schema) -> Any:
    seed = default_for(schema, root)
    if isinstance(seed, (dict, list)):
        return seed
    return {}


def _set_in(
    root: Schema,
    schema: Schema,
    segments: list[str],
    depth: int,
    new_value: Any,
    current: Any,
) -> Any:
    if depth == len(segments):
        return new_value

    segment = segments[depth]
    child_schema = find_property(segment, root, schema)

    if current is UNSET or not isinstance(current, (dict, list)):
        current = _container_seed(root, schema)

    if isinstance(current, list):
        if not is_index(segment):
            raise InvalidPathError(
                f"{format_pointer(segments[: depth + 1])}: "
                f"'{segment}' is not an array index"
            )
        idx = int(segment)
        if idx > len(current):
            raise PathIndexOutOfBounds(
                format_pointer(segments[: depth + 1]), idx, len(current)
            )
        if idx == len(current):
            if depth + 1 == len(segments):
                child = new_value
            else:
                seed = _container_seed(root, child_schema)
                child = _set_in(
                    root, child_schema, segments, depth + 1, new_value, seed
                )
            return [*current, child]
        updated = list(current)
        updated[idx] = _set_in(
            root, child_schema, segments, depth + 1, new_value, current[idx]
        )
        return updated

    child = _set_in(
        root,
        child_schema,
        segments,
        depth + 1,
        new_value,
        current.get(segment, UNSET),
    )
    return {**current, segment: child}


def set_value(schema: Schema, pointer: str, new_value: Any, root_value: Any) -> Any:
    """Return a copy of ``root_value`` with ``new_value`` stored at ``pointer``.

    Missing objects along the way are created; an array may be extended by
    writing to index ``len(array)``. Larger indices raise
    ``PathIndexOutOfBounds``.
    """

    segments = parse_pointer(pointer)
    return _set_in(schema, schema, segments, 0, new_value, root_value)


__all__ = [
    "InvalidPathError",
    "PathIndexOutOfBounds",
    "default_for",
    "get_bool",
    "get_int",
    "get_length",
    "get_string",
    "get_value",
    "set_value",
]

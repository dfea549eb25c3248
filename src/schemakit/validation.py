from __future__ import annotations

import itertools
import json
import logging
import math
import re
from dataclasses import dataclass
from fractions import Fraction
from functools import lru_cache
from pathlib import Path
from typing import Any, Iterable, Iterator, Literal, Union

import yaml  # type: ignore[import-untyped]

from schemakit.pointer import join_pointer
from schemakit.resolver import resolve_reference
from schemakit.schema.codec import SchemaDecodeError, decode_schema
from schemakit.schema.model import (
    ArrayOfItems,
    BooleanSchema,
    ItemDefinition,
    ObjectSchema,
    PropertyNamesDependency,
    Schema,
)
from schemakit.schema.types import (
    AnyType,
    NullableType,
    Primitive,
    SingleType,
    UnionType,
    primitive_accepts,
)
from schemakit.values import (
    UNSET,
    encode_value,
    format_number,
    is_number,
    load_document,
    values_equal,
)

logger = logging.getLogger(__name__)

MULTIPLE_OF_TOLERANCE = 1e-10
MULTIPLE_OF_REL_TOLERANCE = 1e-15

REQUIRED_MESSAGE = "Object doesn't have all the required properties"

_DOCUMENT_SUFFIXES = {".json", ".yaml", ".yml"}


@dataclass(frozen=True)
class SchemaValidationError:
    path: str
    message: str
    context: tuple[str, ...] = ()

    def describe(self) -> str:
        """Message prefixed with its location, e.g. ``Item at index 0: ...``."""

        return ": ".join(self.context + (self.message,))


@dataclass(frozen=True)
class Invalid:
    message: str

    def __bool__(self) -> bool:
        return False


ValidationResult = Union[Literal[True], Invalid]

_Errors = Iterator[SchemaValidationError]


@lru_cache(maxsize=256)
def _compile(pattern: str) -> re.Pattern[str] | None:
    try:
        return re.compile(pattern)
    except re.error:
        return None


def _bad_pattern(pattern: str) -> str:
    return f"Pattern '{pattern}' is not a valid regular expression"


def _expecting(primitive: Primitive, value: Any) -> str:
    got = encode_value(value)
    if primitive is Primitive.NULL:
        return f"Expecting null but instead got: {got}"
    if primitive is Primitive.INTEGER:
        return f"Expecting an Int but instead got: {got}"
    return f"Expecting a {primitive.kind} but instead got: {got}"


def _is_multiple(value: float | int, divisor: float | int) -> bool:
    if isinstance(value, int) and isinstance(divisor, int):
        return value % divisor == 0
    try:
        quotient = value / divisor
    except OverflowError:
        return Fraction(value) % Fraction(divisor) == 0
    if not math.isfinite(quotient):
        return False
    return math.isclose(
        quotient,
        round(quotient),
        rel_tol=MULTIPLE_OF_REL_TOLERANCE,
        abs_tol=MULTIPLE_OF_TOLERANCE,
    )


def _numeric_failure(value: float | int, schema: ObjectSchema) -> str | None:
    divisor = schema.multiple_of
    if divisor is not None and divisor > 0 and not _is_multiple(value, divisor):
        return f"Value is not a multiple of {format_number(divisor)}"
    if schema.maximum is not None and value > schema.maximum:
        return f"Value is above the maximum of {format_number(schema.maximum)}"
    if schema.exclusive_maximum is not None and value >= schema.exclusive_maximum:
        return (
            "Value is not below the exclusive maximum of "
            f"{format_number(schema.exclusive_maximum)}"
        )
    if schema.minimum is not None and value < schema.minimum:
        return f"Value is below the minimum of {format_number(schema.minimum)}"
    if schema.exclusive_minimum is not None and value <= schema.exclusive_minimum:
        return (
            "Value is not above the exclusive minimum of "
            f"{format_number(schema.exclusive_minimum)}"
        )
    return None


def _string_failure(value: str, schema: ObjectSchema) -> str | None:
    # len() counts code points, not UTF-16 units
    if schema.max_length is not None and len(value) > schema.max_length:
        return f"String is longer than expected (maxLength={schema.max_length})"
    if schema.min_length is not None and len(value) < schema.min_length:
        return f"String is shorter than expected (minLength={schema.min_length})"
    if schema.pattern is not None:
        compiled = _compile(schema.pattern)
        if compiled is None:
            return _bad_pattern(schema.pattern)
        if compiled.search(value) is None:
            return "String does not match the regex pattern"
    return None


def _has_duplicates(items: list[Any]) -> bool:
    for idx, left in enumerate(items):
        for right in items[idx + 1 :]:
            if values_equal(left, right):
                return True
    return False


def _array_size_failure(value: list[Any], schema: ObjectSchema) -> str | None:
    if schema.max_items is not None and len(value) > schema.max_items:
        return f"Array has more items than expected (maxItems={schema.max_items})"
    if schema.min_items is not None and len(value) < schema.min_items:
        return f"Array has fewer items than expected (minItems={schema.min_items})"
    if schema.unique_items and _has_duplicates(value):
        return "Array has non-unique items"
    return None


def _object_size_failure(value: dict[str, Any], schema: ObjectSchema) -> str | None:
    if schema.max_properties is not None and len(value) > schema.max_properties:
        return (
            "Object has more properties than expected "
            f"(maxProperties={schema.max_properties})"
        )
    if schema.min_properties is not None and len(value) < schema.min_properties:
        return (
            "Object has fewer properties than expected "
            f"(minProperties={schema.min_properties})"
        )
    if schema.required and any(key not in value for key in schema.required):
        return REQUIRED_MESSAGE
    return None


class _Walker:
    """Recursive validator bound to one root schema.

    ``active`` holds the refs entered at the current value without
    descending into a child; re-entering one of them means a cycle.
    """

    def __init__(self, root: Schema) -> None:
        self.root = root

    def node(
        self,
        value: Any,
        schema: Schema,
        path: str,
        context: tuple[str, ...],
        active: frozenset[str],
    ) -> _Errors:
        if isinstance(schema, BooleanSchema):
            if not schema.value:
                yield SchemaValidationError(
                    path, "Value is not allowed by the false schema", context
                )
            return

        if schema.ref is not None:
            if schema.ref in active:
                logger.debug("Skipping cyclic $ref %s at %s", schema.ref, path)
                return
            target = resolve_reference(self.root, schema.ref)
            if target is None:
                return
            yield from self.node(
                value, target, path, context, active | {schema.ref}
            )
            return

        groups = (
            self._enum,
            self._const,
            self._type,
            self._numeric,
            self._string,
            self._array,
            self._object,
            self._all_of,
            self._any_of,
            self._one_of,
        )
        for group in groups:
            failed = False
            for error in group(value, schema, path, context, active):
                failed = True
                yield error
            if failed:
                return

    def passes(
        self, value: Any, schema: Schema, path: str, active: frozenset[str]
    ) -> bool:
        return next(self.node(value, schema, path, (), active), None) is None

    def child(
        self, value: Any, schema: Schema, path: str, context: tuple[str, ...]
    ) -> _Errors:
        return self.node(value, schema, path, context, frozenset())

    def _enum(
        self,
        value: Any,
        schema: ObjectSchema,
        path: str,
        context: tuple[str, ...],
        active: frozenset[str],
    ) -> _Errors:
        if schema.enum is None:
            return
        if not any(values_equal(value, member) for member in schema.enum):
            yield SchemaValidationError(path, "Value is not present in enum", context)

    def _const(
        self,
        value: Any,
        schema: ObjectSchema,
        path: str,
        context: tuple[str, ...],
        active: frozenset[str],
    ) -> _Errors:
        if schema.const is UNSET or values_equal(value, schema.const):
            return
        yield SchemaValidationError(
            path,
            "Value doesn't equal const: expected "
            f'"{encode_value(schema.const)}" but the actual value is '
            f'"{encode_value(value)}"',
            context,
        )

    def _type(
        self,
        value: Any,
        schema: ObjectSchema,
        path: str,
        context: tuple[str, ...],
        active: frozenset[str],
    ) -> _Errors:
        type_ = schema.type
        if isinstance(type_, AnyType):
            return
        if isinstance(type_, SingleType):
            if not primitive_accepts(type_.primitive, value):
                yield SchemaValidationError(
                    path, _expecting(type_.primitive, value), context
                )
        elif isinstance(type_, NullableType):
            if value is not None and not primitive_accepts(type_.primitive, value):
                yield SchemaValidationError(
                    path, _expecting(type_.primitive, value), context
                )
        elif isinstance(type_, UnionType):
            if not any(primitive_accepts(p, value) for p in type_.primitives):
                kinds = ", ".join(p.kind for p in type_.primitives)
                yield SchemaValidationError(
                    path,
                    f"Expecting one of {kinds} but instead got: "
                    f"{encode_value(value)}",
                    context,
                )

    def _numeric(
        self,
        value: Any,
        schema: ObjectSchema,
        path: str,
        context: tuple[str, ...],
        active: frozenset[str],
    ) -> _Errors:
        if not is_number(value):
            return
        message = _numeric_failure(value, schema)
        if message:
            yield SchemaValidationError(path, message, context)

    def _string(
        self,
        value: Any,
        schema: ObjectSchema,
        path: str,
        context: tuple[str, ...],
        active: frozenset[str],
    ) -> _Errors:
        if not isinstance(value, str):
            return
        message = _string_failure(value, schema)
        if message:
            yield SchemaValidationError(path, message, context)

    def _array(
        self,
        value: Any,
        schema: ObjectSchema,
        path: str,
        context: tuple[str, ...],
        active: frozenset[str],
    ) -> _Errors:
        if not isinstance(value, list):
            return
        message = _array_size_failure(value, schema)
        if message:
            yield SchemaValidationError(path, message, context)
            return

        failed = False
        for idx, item in enumerate(value):
            item_schema = self._item_schema(schema, idx)
            if item_schema is None:
                continue
            item_path = join_pointer(path, idx)
            item_context = context + (f"Item at index {idx}",)
            if item_schema == BooleanSchema(False) and self._is_overflow(schema, idx):
                failed = True
                yield SchemaValidationError(
                    item_path, "Additional item not allowed", item_context
                )
                continue
            for error in self.child(item, item_schema, item_path, item_context):
                failed = True
                yield error
        if failed:
            return

        if schema.contains is not None and not any(
            self.passes(item, schema.contains, join_pointer(path, idx), frozenset())
            for idx, item in enumerate(value)
        ):
            yield SchemaValidationError(
                path, "Array does not contain expected value", context
            )

    @staticmethod
    def _is_overflow(schema: ObjectSchema, idx: int) -> bool:
        items = schema.items
        return isinstance(items, ArrayOfItems) and idx >= len(items.schemas)

    @staticmethod
    def _item_schema(schema: ObjectSchema, idx: int) -> Schema | None:
        items = schema.items
        if isinstance(items, ItemDefinition):
            return items.schema
        if isinstance(items, ArrayOfItems):
            if idx < len(items.schemas):
                return items.schemas[idx]
            return schema.additional_items
        return None

    def _object(
        self,
        value: Any,
        schema: ObjectSchema,
        path: str,
        context: tuple[str, ...],
        active: frozenset[str],
    ) -> _Errors:
        if not isinstance(value, dict):
            return
        message = _object_size_failure(value, schema)
        if message:
            yield SchemaValidationError(path, message, context)
            return

        subgroups = (
            self._properties,
            self._property_names,
            self._dependencies,
        )
        for subgroup in subgroups:
            failed = False
            for error in subgroup(value, schema, path, context, active):
                failed = True
                yield error
            if failed:
                return

    def _properties(
        self,
        value: Any,
        schema: ObjectSchema,
        path: str,
        context: tuple[str, ...],
        active: frozenset[str],
    ) -> _Errors:
        properties = schema.properties or {}
        patterns = schema.pattern_properties or {}
        for pattern in patterns:
            if _compile(pattern) is None:
                yield SchemaValidationError(path, _bad_pattern(pattern), context)
                return

        for key, member in value.items():
            member_path = join_pointer(path, key)
            member_context = context + (f"Invalid property '{key}'",)
            matched = False
            if key in properties:
                matched = True
                yield from self.child(
                    member, properties[key], member_path, member_context
                )
            for pattern, sub in patterns.items():
                compiled = _compile(pattern)
                if compiled is not None and compiled.search(key):
                    matched = True
                    yield from self.child(member, sub, member_path, member_context)
            if matched or schema.additional_properties is None:
                continue
            if schema.additional_properties == BooleanSchema(False):
                yield SchemaValidationError(
                    member_path, "Additional property not allowed", member_context
                )
            else:
                yield from self.child(
                    member,
                    schema.additional_properties,
                    member_path,
                    member_context,
                )

    def _property_names(
        self,
        value: Any,
        schema: ObjectSchema,
        path: str,
        context: tuple[str, ...],
        active: frozenset[str],
    ) -> _Errors:
        if schema.property_names is None:
            return
        for key in value:
            yield from self.child(
                key,
                schema.property_names,
                join_pointer(path, key),
                context
                + (f"Property '{key}' doesn't validate against propertyNames schema",),
            )

    def _dependencies(
        self,
        value: Any,
        schema: ObjectSchema,
        path: str,
        context: tuple[str, ...],
        active: frozenset[str],
    ) -> _Errors:
        for trigger, dependency in (schema.dependencies or {}).items():
            if trigger not in value:
                continue
            if isinstance(dependency, PropertyNamesDependency):
                if any(name not in value for name in dependency.names):
                    yield SchemaValidationError(path, REQUIRED_MESSAGE, context)
                    return
            else:
                yield from self.node(value, dependency.schema, path, context, active)

    def _all_of(
        self,
        value: Any,
        schema: ObjectSchema,
        path: str,
        context: tuple[str, ...],
        active: frozenset[str],
    ) -> _Errors:
        for branch in schema.all_of or ():
            errors = list(self.node(value, branch, path, context, active))
            if errors:
                yield from errors
                return

    def _any_of(
        self,
        value: Any,
        schema: ObjectSchema,
        path: str,
        context: tuple[str, ...],
        active: frozenset[str],
    ) -> _Errors:
        if schema.any_of is None:
            return
        if not any(self.passes(value, b, path, active) for b in schema.any_of):
            yield SchemaValidationError(
                path, "None of the schemas in anyOf accept this value", context
            )

    def _one_of(
        self,
        value: Any,
        schema: ObjectSchema,
        path: str,
        context: tuple[str, ...],
        active: frozenset[str],
    ) -> _Errors:
        if schema.one_of is None:
            return
        matches = sum(1 for b in schema.one_of if self.passes(value, b, path, active))
        if matches == 0:
            yield SchemaValidationError(
                path, "None of the schemas in anyOf allow this value", context
            )
        elif matches > 1:
            yield SchemaValidationError(
                path,
                "oneOf expects value to succeed validation against exactly one "
                f"schema but {matches} validations succeeded",
                context,
            )


def iter_errors(
    value: Any,
    schema: Schema,
    *,
    root: Schema | None = None,
    path: str = "#",
) -> Iterator[SchemaValidationError]:
    """Lazily yield every violated constraint of ``value``.

    Within one node, keyword groups are checked in a fixed order and the
    walk stops at the first group that fails; children of a failing
    ``items``/``properties`` group are all reported.
    """

    walker = _Walker(root if root is not None else schema)
    return walker.node(value, schema, path, (), frozenset())


def validate(
    value: Any, schema: Schema, *, root: Schema | None = None
) -> ValidationResult:
    error = next(iter_errors(value, schema, root=root), None)
    if error is None:
        return True
    return Invalid(error.describe())


def is_valid(value: Any, schema: Schema, *, root: Schema | None = None) -> bool:
    return validate(value, schema, root=root) is True


def validate_instance(
    instance: Any,
    schema: Schema,
    *,
    schema_root: Schema | None = None,
    path: str = "#",
    max_errors: int = 200,
) -> list[SchemaValidationError]:
    errors = iter_errors(instance, schema, root=schema_root, path=path)
    return list(itertools.islice(errors, max_errors))


def collect_errors(
    value: Any,
    schema: Schema,
    *,
    root: Schema | None = None,
    max_errors: int = 200,
) -> dict[str, str]:
    """Map each failing pointer to its first error message."""

    collected: dict[str, str] = {}
    for error in validate_instance(
        value, schema, schema_root=root, max_errors=max_errors
    ):
        collected.setdefault(error.path, error.message)
    return collected


def validate_json_file(
    json_path: Path,
    schema: Schema | dict[str, Any] | bool,
    *,
    schema_root: Schema | None = None,
    max_errors: int = 200,
) -> list[SchemaValidationError]:
    try:
        instance = load_document(json_path)
    except json.JSONDecodeError as exc:
        return [SchemaValidationError(path="#", message=f"Invalid JSON: {exc}")]
    except yaml.YAMLError as exc:
        return [SchemaValidationError(path="#", message=f"Invalid YAML: {exc}")]

    if not isinstance(schema, (ObjectSchema, BooleanSchema)):
        try:
            schema = decode_schema(schema)
        except SchemaDecodeError as exc:
            return [
                SchemaValidationError(path="#", message=f"Invalid schema: {exc}")
            ]

    return validate_instance(
        instance,
        schema,
        schema_root=schema_root,
        max_errors=max_errors,
    )


def write_report(path: Path, report: dict[str, Any]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(report, indent=2, ensure_ascii=False) + "\n")


def iter_json_files(paths: Iterable[Path]) -> Iterable[Path]:
    for path in paths:
        if path.is_dir():
            yield from sorted(
                p for p in path.iterdir() if p.suffix.lower() in _DOCUMENT_SUFFIXES
            )
        elif path.is_file() and path.suffix.lower() in _DOCUMENT_SUFFIXES:
            yield path


__all__ = [
    "Invalid",
    "SchemaValidationError",
    "ValidationResult",
    "collect_errors",
    "is_valid",
    "iter_errors",
    "iter_json_files",
    "validate",
    "validate_instance",
    "validate_json_file",
    "write_report",
]

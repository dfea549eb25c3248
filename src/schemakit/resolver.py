from __future__ import annotations

import logging

from schemakit.pointer import InvalidPointerError, is_index, parse_pointer
from schemakit.schema.model import (
    ArrayOfItems,
    ItemDefinition,
    ObjectSchema,
    Schema,
    as_object_schema,
    blank_schema,
)

logger = logging.getLogger(__name__)

_DEFINITIONS_PREFIX = "#/definitions/"


def _unescape(name: str) -> str:
    return name.replace("~1", "/").replace("~0", "~")


def resolve_reference(root: Schema, ref: str) -> Schema | None:
    """Resolve a local ``$ref`` against ``root``.

    Only ``#`` and ``#/definitions/<name>`` are supported; anything else,
    a missing definition, or a cyclic chain of definitions resolves to
    ``None``.
    """

    seen: set[str] = set()
    current = ref
    while True:
        if current in seen:
            logger.debug("Cyclic $ref chain through %s", current)
            return None
        seen.add(current)

        if current == "#":
            return root
        if not current.startswith(_DEFINITIONS_PREFIX):
            logger.debug("Unsupported $ref: %s", current)
            return None
        name = _unescape(current[len(_DEFINITIONS_PREFIX) :])
        if not isinstance(root, ObjectSchema) or not root.definitions:
            logger.debug("Root schema has no definitions for %s", current)
            return None
        target = root.definitions.get(name)
        if target is None:
            logger.debug("Unknown definition in $ref: %s", current)
            return None
        if isinstance(target, ObjectSchema) and target.ref is not None:
            current = target.ref
            continue
        return target


def resolve(root: Schema, schema: Schema) -> Schema:
    """Single-level deref: substitute the target of ``$ref`` when it resolves."""

    if isinstance(schema, ObjectSchema) and schema.ref is not None:
        target = resolve_reference(root, schema.ref)
        if target is not None:
            return target
    return schema


def _item_schema(schema: ObjectSchema, index: int) -> Schema | None:
    items = schema.items
    if isinstance(items, ItemDefinition):
        return items.schema
    if isinstance(items, ArrayOfItems):
        if index < len(items.schemas):
            return items.schemas[index]
        return schema.additional_items
    return None


def find_property(name: str, root: Schema, schema: Schema) -> Schema:
    """Schema of member ``name`` one level below ``schema``.

    Falls back to a blank schema so callers can always keep walking.
    """

    node = as_object_schema(resolve(root, schema))
    if node is None or node.ref is not None:
        return blank_schema()

    if node.properties and name in node.properties:
        return node.properties[name]

    if is_index(name):
        item = _item_schema(node, int(name))
        if item is not None:
            return item

    if node.additional_properties is not None:
        return node.additional_properties

    for branch in node.any_of or ():
        resolved = as_object_schema(resolve(root, branch))
        if resolved is None or not resolved.properties:
            continue
        if name in resolved.properties:
            return resolved.properties[name]

    return blank_schema()


def schema_for(pointer: str, root: Schema) -> ObjectSchema | None:
    """Walk ``pointer`` through the schema tree rooted at ``root``."""

    try:
        segments = parse_pointer(pointer)
    except InvalidPointerError:
        return None

    current = as_object_schema(resolve(root, root))
    for segment in segments:
        if current is None or current.ref is not None:
            return None
        current = as_object_schema(resolve(root, find_property(segment, root, current)))
    if current is None or current.ref is not None:
        return None
    return current


__all__ = ["find_property", "resolve", "resolve_reference", "schema_for"]

"""Schemakit: JSON Schema validation and schema-guided value editing."""

from . import (
    accessor,
    inference,
    pointer,
    resolver,
    schema,
    validation,
    values,
)
from .schema.builder import SchemaBuilder

__all__ = [
    "SchemaBuilder",
    "accessor",
    "inference",
    "pointer",
    "resolver",
    "schema",
    "validation",
    "values",
]

"""Schema node model, type tags and JSON codec."""

from schemakit.schema.codec import (
    SchemaDecodeError,
    decode_schema,
    encode_schema,
    load_schema,
)
from schemakit.schema.model import (
    ArrayOfItems,
    BooleanSchema,
    ItemDefinition,
    NoItems,
    ObjectSchema,
    PropertyNamesDependency,
    Schema,
    SchemaDependency,
    blank_schema,
    is_blank,
)
from schemakit.schema.types import (
    ANY_TYPE,
    AnyType,
    NullableType,
    Primitive,
    SingleType,
    Type,
    UnionType,
)

__all__ = [
    "ANY_TYPE",
    "AnyType",
    "ArrayOfItems",
    "BooleanSchema",
    "ItemDefinition",
    "NoItems",
    "NullableType",
    "ObjectSchema",
    "Primitive",
    "PropertyNamesDependency",
    "Schema",
    "SchemaDecodeError",
    "SchemaDependency",
    "SingleType",
    "Type",
    "UnionType",
    "blank_schema",
    "decode_schema",
    "encode_schema",
    "is_blank",
    "load_schema",
]

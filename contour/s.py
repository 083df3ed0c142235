"""
Builder namespace.

Usage:
    from contour import s

    user = s.object({
        "id": s.string().uuid(),
        "name": s.string().trim().min(1),
        "age": s.number().int().positive().optional(),
        "role": s.enum(["admin", "member"]).default("member"),
    })
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Callable

from .algebraic import (
    DiscriminatedUnionSchema,
    IntersectionSchema,
    LazySchema,
    UnionSchema,
)
from .asynchronous import AsyncSchema
from .bimap import bi_map
from .contextual import ContextualSchema
from .generic import api_response, paginated
from .metadata import with_metadata
from .migration import create_version_registry
from .missing import MISSING
from .permissions import PermissionAwareSchema, RestrictedSchema
from .pipeline import PostprocessSchema, PreprocessSchema, TransformSchema
from .primitives import (
    AnySchema,
    BooleanSchema,
    CustomSchema,
    EnumSchema,
    InstanceOfSchema,
    NullSchema,
    NumberSchema,
    StringSchema,
    enum_values,
)
from .schema import Schema
from .structural import ArraySchema, ObjectSchema, RecordSchema
from .versioned import create_versioned


def string() -> StringSchema:
    return StringSchema()


def number() -> NumberSchema:
    return NumberSchema()


def boolean() -> BooleanSchema:
    return BooleanSchema()


def null() -> NullSchema:
    return NullSchema()


def any() -> AnySchema:  # noqa: A001
    return AnySchema()


def enum(values: Any) -> EnumSchema:
    """One of ``values``: a collection, or an ``enum.Enum`` subclass."""
    return EnumSchema(enum_values(values))


def literal(value: Any) -> EnumSchema:
    return EnumSchema((value,))


def object(shape: Mapping[str, Schema]) -> ObjectSchema:  # noqa: A001
    return ObjectSchema(shape)


def array(item: Schema) -> ArraySchema:
    return ArraySchema(item)


def record(key: Schema, value: Schema | None = None) -> RecordSchema:
    """``record(value)`` uses string keys; ``record(key, value)`` validates both."""
    if value is None:
        return RecordSchema(StringSchema(), key)
    return RecordSchema(key, value)


def union(members: list[Schema] | tuple[Schema, ...]) -> UnionSchema:
    return UnionSchema(tuple(members))


def discriminated_union(
    discriminator: str, members: list[Schema] | tuple[Schema, ...]
) -> DiscriminatedUnionSchema:
    return DiscriminatedUnionSchema(discriminator, tuple(members))


def intersection(*members: Schema) -> IntersectionSchema:
    return IntersectionSchema(members)


def lazy(factory: Callable[[], Schema], default: Any = MISSING) -> LazySchema:
    """
    Deferred schema for recursive shapes.

    ``default`` is returned for an absent value, including when the factory
    cannot be evaluated yet.
    """
    return LazySchema(factory, default)


def custom(check: Callable[[Any], Any], message: str = "Invalid value") -> CustomSchema:
    return CustomSchema(check, message)


def instance_of(cls: type) -> InstanceOfSchema:
    return InstanceOfSchema(cls)


def preprocess(fn: Callable[[Any], Any], schema: Schema) -> PreprocessSchema:
    return PreprocessSchema(schema, fn)


def postprocess(schema: Schema, fn: Callable[[Any], Any]) -> PostprocessSchema:
    return PostprocessSchema(schema, fn)


def transform(
    schema: Schema,
    fn: Callable[[Any], Any],
    reverse: Callable[[Any], Any] | None = None,
) -> TransformSchema:
    return TransformSchema(schema, fn, reverse)


def restrict(schema: Schema, requirement: Any) -> RestrictedSchema:
    return RestrictedSchema(schema, requirement)


def with_permissions(schema: Schema) -> PermissionAwareSchema:
    if isinstance(schema, PermissionAwareSchema):
        return schema
    return PermissionAwareSchema(schema)


def with_context(schema: Schema) -> ContextualSchema:
    return ContextualSchema(schema)


def async_validate(
    schema: Schema, check: Callable[[Any], Any], message: str | None = None
) -> AsyncSchema:
    return AsyncSchema(schema, check, message)


__all__ = [
    "string",
    "number",
    "boolean",
    "null",
    "any",
    "enum",
    "literal",
    "object",
    "array",
    "record",
    "union",
    "discriminated_union",
    "intersection",
    "lazy",
    "custom",
    "instance_of",
    "preprocess",
    "postprocess",
    "transform",
    "restrict",
    "with_permissions",
    "with_context",
    "with_metadata",
    "async_validate",
    "bi_map",
    "create_versioned",
    "create_version_registry",
    "api_response",
    "paginated",
]

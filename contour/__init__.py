"""
contour - composable runtime schema validation.

Usage:
    from contour import s, validation_context

    schema = s.object({
        "id": s.string().uuid(),
        "age": s.number().int().positive().optional(),
    })

    result = schema.safe_parse(payload)
    if result.is_err():
        for issue in result.error.issues:
            print(issue.location, issue.code, issue.message)
"""

import logging

from . import s
from .algebraic import DiscriminatedUnionSchema, IntersectionSchema, LazySchema, UnionSchema
from .asynchronous import AsyncSchema
from .bimap import BiMap, bi_map
from .context import ValidationOptions, current_context, validation_context
from .contextual import ContextualSchema, matches_context
from .errors import HistoryError, Issue, UnwrapError, ValidationError
from .generic import ApiResponseSchema, PaginatedSchema, api_response, paginated
from .metadata import MetadataSchema, with_metadata
from .migration import Migration, SchemaVersion, VersionRegistry, create_version_registry
from .missing import MISSING, is_missing
from .models import to_pydantic
from .permissions import (
    PermissionAwareSchema,
    PermissionCondition,
    RestrictedSchema,
    extract_roles,
    has_permission,
)
from .pipeline import PostprocessSchema, PreprocessSchema, RefinedSchema, TransformSchema
from .primitives import (
    AnySchema,
    BooleanSchema,
    CustomSchema,
    EnumSchema,
    InstanceOfSchema,
    NullSchema,
    NumberSchema,
    StringSchema,
)
from .result import Err, Ok, Result, is_result
from .schema import DefaultSchema, OptionalSchema, Schema
from .structural import ArraySchema, ObjectSchema, RecordSchema
from .versioned import HistoryEntry, Versioned, create_versioned

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "s",
    # Result types
    "Ok",
    "Err",
    "Result",
    "is_result",
    # Errors
    "Issue",
    "ValidationError",
    "UnwrapError",
    "HistoryError",
    # Options
    "MISSING",
    "is_missing",
    "ValidationOptions",
    "validation_context",
    "current_context",
    "matches_context",
    # Schemas
    "Schema",
    "OptionalSchema",
    "DefaultSchema",
    "StringSchema",
    "NumberSchema",
    "BooleanSchema",
    "NullSchema",
    "AnySchema",
    "EnumSchema",
    "CustomSchema",
    "InstanceOfSchema",
    "ObjectSchema",
    "ArraySchema",
    "RecordSchema",
    "UnionSchema",
    "DiscriminatedUnionSchema",
    "IntersectionSchema",
    "LazySchema",
    "PreprocessSchema",
    "RefinedSchema",
    "TransformSchema",
    "PostprocessSchema",
    "ContextualSchema",
    "RestrictedSchema",
    "PermissionAwareSchema",
    "PermissionCondition",
    "extract_roles",
    "has_permission",
    "AsyncSchema",
    "MetadataSchema",
    "with_metadata",
    "ApiResponseSchema",
    "PaginatedSchema",
    "api_response",
    "paginated",
    # History, mapping, migration
    "Versioned",
    "HistoryEntry",
    "create_versioned",
    "BiMap",
    "bi_map",
    "SchemaVersion",
    "Migration",
    "VersionRegistry",
    "create_version_registry",
    # Pydantic
    "to_pydantic",
]

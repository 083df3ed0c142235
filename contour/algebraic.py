"""
Algebraic schema variants: union, discriminated union, intersection and lazy.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from copy import deepcopy
from dataclasses import dataclass, field
from typing import Any, Callable

from .context import ValidationOptions
from .errors import Issue, ValidationError
from .missing import MISSING
from .result import Err, Ok
from .schema import CompositeSchema, Descend, Schema, Steps, fail, issue

logger = logging.getLogger(__name__)


def _members(members: Any, kind: str) -> tuple[Schema, ...]:
    members = tuple(members)
    if not members:
        raise ValueError(f"{kind} needs at least one member schema")
    for m in members:
        if not isinstance(m, Schema):
            raise TypeError(f"{kind} members must be schemas, got {type(m).__name__}")
    return members


@dataclass(frozen=True, slots=True)
class UnionSchema(CompositeSchema):
    """
    Tries each member in order and returns the first success.

    On total failure the error starts with one ``union.no_match`` issue,
    followed by every member's issues in member order.
    """

    members: tuple[Schema, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "members", _members(self.members, "Union"))

    def __or__(self, other: Schema) -> UnionSchema:
        return UnionSchema((*self.members, other))

    def accepts_missing(self) -> bool:
        return any(m.accepts_missing() for m in self.members)

    def partial(self) -> Schema:
        return UnionSchema(tuple(m.partial() for m in self.members))

    def _steps(self, value: Any, options: ValidationOptions) -> Steps:
        failures: list[Issue] = []
        for member in self.members:
            result = yield Descend(member, value, options)
            if isinstance(result, Ok):
                return result
            failures.extend(result.error.issues)

        no_match = issue(
            "Value does not match any union member",
            "union.no_match",
            options,
            {"members": len(self.members)},
        )
        if options.abort_early:
            return fail(no_match)
        return fail(no_match, *failures)

    def describe_constraints(self) -> dict[str, Any]:
        return {
            "type": "union",
            "members": [m.describe_constraints() for m in self.members],
        }


@dataclass(frozen=True, slots=True)
class DiscriminatedUnionSchema(CompositeSchema):
    """
    Union of object schemas selected by a discriminator field.

    A member matches only if it parses the input and its output carries the
    same discriminator value as the input. Members are tried in order; one that
    parses but rewrites the discriminator is skipped, not accepted.
    """

    discriminator: str
    members: tuple[Schema, ...]

    def __post_init__(self) -> None:
        if not isinstance(self.discriminator, str) or not self.discriminator:
            raise ValueError("Discriminator must be a non-empty string")
        object.__setattr__(
            self, "members", _members(self.members, "Discriminated union")
        )

    def partial(self) -> Schema:
        return DiscriminatedUnionSchema(
            self.discriminator, tuple(m.partial() for m in self.members)
        )

    def _steps(self, value: Any, options: ValidationOptions) -> Steps:
        if not isinstance(value, Mapping):
            return Err(ValidationError.type_mismatch("object", value, options.path))

        key = self.discriminator
        if key not in value:
            return fail(
                issue(
                    f"Missing discriminator field '{key}'",
                    "union.discriminator_missing",
                    options.at(key),
                    {"discriminator": key},
                )
            )

        tag = value[key]
        failures: list[Issue] = []
        for member in self.members:
            result = yield Descend(member, value, options)
            if isinstance(result, Err):
                failures.extend(result.error.issues)
                continue
            output = result.value
            if isinstance(output, Mapping) and output.get(key, MISSING) == tag:
                return result

        no_match = issue(
            f"No union member matches discriminator value {tag!r}",
            "union.no_discriminator_match",
            options.at(key),
            {"discriminator": key, "value": tag},
        )
        if options.abort_early:
            return fail(no_match)
        return fail(no_match, *failures)

    def describe_constraints(self) -> dict[str, Any]:
        return {
            "type": "union",
            "discriminator": self.discriminator,
            "members": [m.describe_constraints() for m in self.members],
        }


@dataclass(frozen=True, slots=True)
class IntersectionSchema(CompositeSchema):
    """
    Value must satisfy every member.

    Mapping outputs are merged shallowly, later members winning on key
    collisions. If any output is not a mapping, the last output is returned.
    """

    members: tuple[Schema, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "members", _members(self.members, "Intersection"))

    def __and__(self, other: Schema) -> IntersectionSchema:
        return IntersectionSchema((*self.members, other))

    def accepts_missing(self) -> bool:
        return all(m.accepts_missing() for m in self.members)

    def partial(self) -> Schema:
        return IntersectionSchema(tuple(m.partial() for m in self.members))

    def _steps(self, value: Any, options: ValidationOptions) -> Steps:
        outputs: list[Any] = []
        issues: list[Issue] = []
        for member in self.members:
            result = yield Descend(member, value, options)
            if isinstance(result, Ok):
                outputs.append(result.value)
                continue
            issues.extend(result.error.issues)
            if options.abort_early:
                return fail(issues[0])

        if issues:
            return Err(ValidationError(issues))

        if all(isinstance(out, Mapping) for out in outputs):
            merged: dict[Any, Any] = {}
            for out in outputs:
                merged.update(out)
            return Ok(merged)
        return Ok(outputs[-1])

    def describe_constraints(self) -> dict[str, Any]:
        return {
            "type": "intersection",
            "members": [m.describe_constraints() for m in self.members],
        }


@dataclass(frozen=True, slots=True)
class LazySchema(CompositeSchema):
    """
    Schema whose definition is produced on first use, for recursive shapes.

    The factory runs until it first succeeds; the schema it returns is kept
    for the lifetime of this node. A factory that raises is reported as
    ``lazy.evaluation_error`` unless the input is MISSING and a ``default``
    was declared.

    Example:
        category = s.lazy(lambda: s.object({
            "name": s.string(),
            "children": s.array(category).optional(),
        }))
    """

    factory: Callable[[], Schema]
    fallback: Any = MISSING
    resolved: Schema | None = field(default=None, init=False, repr=False, compare=False)
    resolving: bool = field(default=False, init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if not callable(self.factory):
            raise TypeError("Lazy schema factory must be callable")

    def resolve(self) -> Schema:
        """Resolve and memoize the factory's schema. First resolution wins."""
        if self.resolved is not None:
            return self.resolved

        object.__setattr__(self, "resolving", True)
        try:
            schema = self.factory()
        finally:
            object.__setattr__(self, "resolving", False)
        if not isinstance(schema, Schema):
            raise TypeError(
                f"Lazy schema factory returned {type(schema).__name__}, expected a Schema"
            )

        if self.resolved is None:
            logger.debug("Resolved lazy schema to %s", type(schema).__name__)
            object.__setattr__(self, "resolved", schema)
        return self.resolved

    def accepts_missing(self) -> bool:
        """
        True with a declared default, or when the resolved schema accepts MISSING.

        A factory that cannot resolve yet, or a self-reference met while
        resolving, counts as required.
        """
        if self.fallback is not MISSING:
            return True
        if self.resolving:
            return False
        try:
            return self.resolve().accepts_missing()
        except Exception as e:
            logger.debug("Lazy schema not resolvable yet, treating as required: %r", e)
            return False

    def partial(self) -> Schema:
        return LazySchema(lambda: self.resolve().partial(), self.fallback)

    def _steps(self, value: Any, options: ValidationOptions) -> Steps:
        use_fallback = (
            value is MISSING and options.apply_defaults and self.fallback is not MISSING
        )
        try:
            schema = self.resolve()
        except Exception as e:
            logger.warning("Lazy schema factory failed: %r", e)
            if use_fallback:
                return Ok(deepcopy(self.fallback))
            return fail(
                issue(
                    f"Failed to evaluate lazy schema: {e}",
                    "lazy.evaluation_error",
                    options,
                    {"error": repr(e)},
                )
            )

        if use_fallback:
            return Ok(deepcopy(self.fallback))
        return (yield Descend(schema, value, options))

    def describe_constraints(self) -> dict[str, Any]:
        info: dict[str, Any] = {"type": "lazy"}
        if self.fallback is not MISSING:
            info["default"] = self.fallback
        return info

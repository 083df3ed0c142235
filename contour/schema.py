"""
Schema contract for contour.

Every variant implements ``_parse(value, options) -> Ok | Err``. Variants
with children are written once as a step generator: each ``yield Descend(...)``
asks the driver to validate a child and receives its result, each
``yield Await(...)`` asks the driver to await a user coroutine. The sync driver
runs children with ``_parse``; the async driver awaits ``_parse_async``. Both
walk the same steps, so field order and issue order are identical.
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Generator, Mapping
from copy import deepcopy
from dataclasses import dataclass
from typing import Any, Callable

from .context import ValidationOptions, resolve_options
from .errors import Issue, ValidationError
from .missing import MISSING
from .result import Err, Ok, Result

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Descend:
    """Step request: validate ``value`` with ``schema`` under ``options``."""

    schema: Schema
    value: Any
    options: ValidationOptions


@dataclass(frozen=True, slots=True)
class Await:
    """Step request: await a user-supplied awaitable."""

    awaitable: Any


class AsyncRequiredError(RuntimeError):
    """Thrown into steps when an awaitable reaches the synchronous driver."""


Steps = Generator[Any, Any, Result]


def run_sync(steps: Steps) -> Result:
    """Drive a step generator synchronously."""
    try:
        request = next(steps)
        while True:
            if isinstance(request, Descend):
                reply = request.schema._parse(request.value, request.options)
                request = steps.send(reply)
            else:
                _discard(request.awaitable)
                request = steps.throw(
                    AsyncRequiredError(
                        "Asynchronous check reached a synchronous parse; use parse_async"
                    )
                )
    except StopIteration as stop:
        return stop.value


async def run_async(steps: Steps) -> Result:
    """Drive a step generator, awaiting children and user awaitables."""
    try:
        request = next(steps)
        while True:
            if isinstance(request, Descend):
                reply = await request.schema._parse_async(
                    request.value, request.options
                )
                request = steps.send(reply)
            else:
                try:
                    awaited = await request.awaitable
                except Exception as e:
                    request = steps.throw(e)
                else:
                    request = steps.send(awaited)
    except StopIteration as stop:
        return stop.value


def _discard(awaitable: Any) -> None:
    close = getattr(awaitable, "close", None)
    if callable(close):
        close()


def invoke(fn: Callable[..., Any], *args: Any) -> Generator[Any, Any, Any]:
    """Call a user function from inside steps, awaiting awaitable results."""
    result = fn(*args)
    if inspect.isawaitable(result):
        result = yield Await(result)
    return result


def issue(
    message: str,
    code: str,
    options: ValidationOptions,
    params: Mapping[str, Any] | None = None,
) -> Issue:
    """Issue located at the current path of ``options``."""
    return Issue(options.path, message, code, params)


def fail(*issues: Issue) -> Err[ValidationError]:
    return Err(ValidationError(issues))


def user_failure(
    exc: Exception, code: str, label: str, options: ValidationOptions
) -> Err[ValidationError]:
    """
    Convert an exception raised by user code into a one-issue failure.

    An awaitable that reached the synchronous driver becomes ``async.required``
    whatever stage produced it.
    """
    if isinstance(exc, AsyncRequiredError):
        return fail(issue(str(exc), "async.required", options))
    logger.debug("%s raised at %s: %r", label, options.path or "value", exc)
    return fail(issue(f"{label}: {exc}", code, options, {"error": repr(exc)}))


class Schema:
    """
    Base class for all schema variants.

    Schemas are immutable. Builder methods return a new schema wrapping or
    replacing this one; nothing here mutates ``self``.
    """

    __slots__ = ()

    # ---- primitives every variant provides -------------------------------

    def _parse(self, value: Any, options: ValidationOptions) -> Result:
        raise NotImplementedError

    async def _parse_async(self, value: Any, options: ValidationOptions) -> Result:
        return self._parse(value, options)

    def partial(self) -> Schema:
        """Schema accepting a weakened version of this schema's values."""
        return OptionalSchema(self)

    def accepts_missing(self) -> bool:
        """True when an absent value is valid for this schema."""
        return False

    def describe_constraints(self) -> dict[str, Any]:
        """Structured description of this schema's type and constraints."""
        return {"type": "unknown"}

    # ---- entry points ----------------------------------------------------

    def parse(
        self,
        value: Any,
        options: ValidationOptions | Mapping[str, Any] | None = None,
        **kwargs: Any,
    ) -> Any:
        """
        Validate ``value`` and return the parsed result.

        Raises:
            ValidationError: carrying every collected issue
        """
        result = self._parse(value, resolve_options(options, **kwargs))
        if isinstance(result, Err):
            raise result.error
        return result.value

    def safe_parse(
        self,
        value: Any,
        options: ValidationOptions | Mapping[str, Any] | None = None,
        **kwargs: Any,
    ) -> Result:
        """Validate ``value`` and return Ok(parsed) or Err(ValidationError)."""
        return self._parse(value, resolve_options(options, **kwargs))

    def validate(
        self,
        value: Any,
        options: ValidationOptions | Mapping[str, Any] | None = None,
        **kwargs: Any,
    ) -> Result:
        """Like safe_parse, but an Ok carries None instead of the value."""
        result = self._parse(value, resolve_options(options, **kwargs))
        if isinstance(result, Err):
            return result
        return Ok(None)

    async def parse_async(
        self,
        value: Any,
        options: ValidationOptions | Mapping[str, Any] | None = None,
        **kwargs: Any,
    ) -> Any:
        result = await self._parse_async(value, resolve_options(options, **kwargs))
        if isinstance(result, Err):
            raise result.error
        return result.value

    async def safe_parse_async(
        self,
        value: Any,
        options: ValidationOptions | Mapping[str, Any] | None = None,
        **kwargs: Any,
    ) -> Result:
        return await self._parse_async(value, resolve_options(options, **kwargs))

    # ---- builders --------------------------------------------------------
    # Imports are local to avoid circular dependencies between variants.

    def optional(self) -> Schema:
        """Accept MISSING or None in addition to this schema's values."""
        return OptionalSchema(self)

    def default(self, value: Any) -> Schema:
        """Substitute ``value`` (deep-copied) when the input is MISSING."""
        return DefaultSchema(self, value)

    def refine(
        self,
        check: Callable[[Any], Any],
        message: str | Callable[[Any], str] = "Invalid value",
    ) -> Schema:
        from .pipeline import RefinedSchema

        return RefinedSchema(self, check, message)

    def transform(
        self,
        fn: Callable[[Any], Any],
        reverse: Callable[[Any], Any] | None = None,
    ) -> Schema:
        from .pipeline import TransformSchema

        return TransformSchema(self, fn, reverse)

    def preprocess(self, fn: Callable[[Any], Any]) -> Schema:
        from .pipeline import PreprocessSchema

        return PreprocessSchema(self, fn)

    def postprocess(self, fn: Callable[[Any], Any]) -> Schema:
        from .pipeline import PostprocessSchema

        return PostprocessSchema(self, fn)

    def describe(self, description: str) -> Schema:
        from .metadata import MetadataSchema

        return MetadataSchema(self, {"description": description})

    def example(self, example: Any) -> Schema:
        from .metadata import MetadataSchema

        return MetadataSchema(self, {"examples": [example]})

    def deprecated(self, message: str | None = None) -> Schema:
        from .metadata import MetadataSchema

        return MetadataSchema(
            self, {"deprecated": True, "deprecation_message": message}
        )

    def meta(self, key: str, value: Any) -> Schema:
        from .metadata import MetadataSchema

        return MetadataSchema(self, {key: value})

    def restrict(self, requirement: Any) -> Schema:
        """Deny the whole value unless the context satisfies ``requirement``."""
        from .permissions import RestrictedSchema

        return RestrictedSchema(self, requirement)

    def with_permissions(self) -> Schema:
        from .permissions import PermissionAwareSchema

        return PermissionAwareSchema(self)

    def when_context(self, context: Any, build: Callable[[Schema], Schema]) -> Schema:
        """
        Apply ``build(self)`` as an extra validation when ``context`` matches.

        Usage:
            s.string().when_context("signup", lambda sch: sch.min(8))
        """
        from .contextual import ContextualSchema

        return ContextualSchema(self, ()).when_context(context, build)

    def async_validate(
        self, check: Callable[[Any], Any], message: str | None = None
    ) -> Schema:
        from .asynchronous import AsyncSchema

        return AsyncSchema(self, check, message)

    def __or__(self, other: Schema) -> Schema:
        """``a | b`` is a union of the two schemas."""
        from .algebraic import UnionSchema

        return UnionSchema((self, other))

    def __and__(self, other: Schema) -> Schema:
        """``a & b`` is an intersection of the two schemas."""
        from .algebraic import IntersectionSchema

        return IntersectionSchema((self, other))


class CompositeSchema(Schema):
    """Base for variants written as step generators."""

    __slots__ = ()

    def _steps(self, value: Any, options: ValidationOptions) -> Steps:
        raise NotImplementedError

    def _parse(self, value: Any, options: ValidationOptions) -> Result:
        return run_sync(self._steps(value, options))

    async def _parse_async(self, value: Any, options: ValidationOptions) -> Result:
        return await run_async(self._steps(value, options))


class WrapperSchema(CompositeSchema):
    """Composite with a single ``base`` schema it mostly defers to."""

    __slots__ = ()

    def accepts_missing(self) -> bool:
        return self.base.accepts_missing()  # type: ignore[attr-defined]

    def describe_constraints(self) -> dict[str, Any]:
        return self.base.describe_constraints()  # type: ignore[attr-defined]


@dataclass(frozen=True, slots=True)
class OptionalSchema(WrapperSchema):
    """Passes MISSING and None through unchanged, validates anything else."""

    base: Schema

    def _steps(self, value: Any, options: ValidationOptions) -> Steps:
        if value is MISSING or value is None:
            return Ok(value)
        return (yield Descend(self.base, value, options))

    def accepts_missing(self) -> bool:
        return True

    def partial(self) -> Schema:
        inner = self.base.partial()
        return inner if inner.accepts_missing() else OptionalSchema(inner)

    def describe_constraints(self) -> dict[str, Any]:
        return {**self.base.describe_constraints(), "optional": True}


@dataclass(frozen=True, slots=True)
class DefaultSchema(WrapperSchema):
    """Substitutes a default for MISSING input when defaults are enabled."""

    base: Schema
    value: Any

    def _steps(self, value: Any, options: ValidationOptions) -> Steps:
        if value is MISSING and options.apply_defaults:
            return Ok(deepcopy(self.value))
        return (yield Descend(self.base, value, options))

    def accepts_missing(self) -> bool:
        return True

    def partial(self) -> Schema:
        return DefaultSchema(self.base.partial(), self.value)

    def describe_constraints(self) -> dict[str, Any]:
        return {**self.base.describe_constraints(), "default": self.value}


def reroot(error: Any, options: ValidationOptions, code: str = "custom") -> ValidationError:
    """
    Anchor an error produced by user code at the current path.

    User functions never see the options, so any issue paths they report are
    relative to the value they were given. With ``abort_early`` only the
    first issue is kept.
    """
    if isinstance(error, ValidationError):
        issues = error.issues[:1] if options.abort_early else error.issues
        return ValidationError(
            [Issue((*options.path, *i.path), i.message, i.code, i.params) for i in issues]
        )
    return ValidationError([issue(str(error), code, options)])

"""
Pipeline schema variants.

Each wraps a base schema with one processing stage. Except for preprocess,
the stage only runs after the base schema succeeded.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, replace
from typing import Any, Callable

from .context import ValidationOptions
from .errors import Issue, ValidationError
from .result import Err, Ok, Result
from .schema import (
    Descend,
    OptionalSchema,
    Schema,
    Steps,
    WrapperSchema,
    fail,
    invoke,
    issue,
    reroot,
    user_failure,
)


def _weakened(stage: Any) -> Schema:
    """Stage over the partial base; absent and None values skip the stage."""
    return OptionalSchema(replace(stage, base=stage.base.partial()))


@dataclass(frozen=True, slots=True)
class PreprocessSchema(WrapperSchema):
    """Applies ``fn`` to the raw input, then validates the result."""

    base: Schema
    fn: Callable[[Any], Any]

    def partial(self) -> Schema:
        return _weakened(self)

    def _steps(self, value: Any, options: ValidationOptions) -> Steps:
        try:
            prepared = yield from invoke(self.fn, value)
        except Exception as e:
            return user_failure(e, "process.preprocess_failed", "Preprocess failed", options)
        return (yield Descend(self.base, prepared, options))


@dataclass(frozen=True, slots=True)
class RefinedSchema(WrapperSchema):
    """
    Base schema plus a predicate on the validated value.

    ``message`` is a string or a function of the value. A falsy predicate
    result is one ``custom`` issue; a raising predicate is ``refine.failed``.
    """

    base: Schema
    check: Callable[[Any], Any]
    message: str | Callable[[Any], str] = "Invalid value"

    def partial(self) -> Schema:
        return _weakened(self)

    def _steps(self, value: Any, options: ValidationOptions) -> Steps:
        result = yield Descend(self.base, value, options)
        if isinstance(result, Err):
            return result

        try:
            passed = yield from invoke(self.check, result.value)
        except Exception as e:
            return user_failure(e, "refine.failed", "Refinement failed", options)

        if passed:
            return result

        if callable(self.message):
            try:
                message = self.message(result.value)
            except Exception as e:
                return user_failure(
                    e, "refine.failed", "Refinement message failed", options
                )
        else:
            message = self.message
        return fail(issue(message, "custom", options))


@dataclass(frozen=True, slots=True)
class TransformSchema(WrapperSchema):
    """
    Base schema followed by a conversion.

    The conversion may return Ok/Err (propagated) or a bare value (wrapped).
    A NaN float result is rejected. ``inverse`` backs ``reverse()``.
    """

    base: Schema
    fn: Callable[[Any], Any]
    inverse: Callable[[Any], Any] | None = None

    def partial(self) -> Schema:
        return _weakened(self)

    def _steps(self, value: Any, options: ValidationOptions) -> Steps:
        result = yield Descend(self.base, value, options)
        if isinstance(result, Err):
            return result

        try:
            converted = yield from invoke(self.fn, result.value)
        except Exception as e:
            return user_failure(e, "transform.failed", "Transform failed", options)

        if isinstance(converted, Ok):
            return converted
        if isinstance(converted, Err):
            return Err(reroot(converted.error, options, "transform.failed"))
        if isinstance(converted, float) and math.isnan(converted):
            return fail(
                issue("Transform produced an invalid number", "transform.invalid_number", options)
            )
        return Ok(converted)

    def describe_constraints(self) -> dict[str, Any]:
        # output shape is no longer the base schema's
        return {"type": "any", "transformed": True}

    def reverse(self, value: Any) -> Result:
        """
        Map a transformed value back and validate it with the base schema.

        Returns Err with ``transform.no_reverse`` when no inverse is set.
        """
        if self.inverse is None:
            return Err(
                ValidationError(
                    [Issue((), "No reverse transform configured", "transform.no_reverse")]
                )
            )
        try:
            raw = self.inverse(value)
        except Exception as e:
            return Err(
                ValidationError(
                    [
                        Issue(
                            (),
                            f"Reverse transform failed: {e}",
                            "transform.failed",
                            {"error": repr(e)},
                        )
                    ]
                )
            )
        return self.base.safe_parse(raw)


@dataclass(frozen=True, slots=True)
class PostprocessSchema(WrapperSchema):
    """Applies ``fn`` to the fully validated value."""

    base: Schema
    fn: Callable[[Any], Any]

    def partial(self) -> Schema:
        return _weakened(self)

    def _steps(self, value: Any, options: ValidationOptions) -> Steps:
        result = yield Descend(self.base, value, options)
        if isinstance(result, Err):
            return result

        try:
            processed = yield from invoke(self.fn, result.value)
        except Exception as e:
            return user_failure(
                e, "process.postprocess_failed", "Postprocess failed", options
            )
        return Ok(processed)

    def describe_constraints(self) -> dict[str, Any]:
        return {"type": "any", "transformed": True}

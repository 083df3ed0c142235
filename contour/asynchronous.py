"""
Asynchronously validated schemas.
"""

from __future__ import annotations

import inspect
from dataclasses import dataclass, replace
from typing import Any, Callable

from .context import ValidationOptions
from .result import Err, Ok, Result
from .schema import Await, Descend, Schema, Steps, WrapperSchema, fail, issue, reroot

DEFAULT_ASYNC_MESSAGE = "Async validation failed"


@dataclass(frozen=True, slots=True)
class AsyncSchema(WrapperSchema):
    """
    Base schema followed by an awaited check.

    ``parse`` and ``safe_parse`` only run the base schema; the check runs
    under ``parse_async``/``safe_parse_async``, after the base succeeded.
    The check may return True/False, Ok/Err, or None (success).

    Example:
        email = s.string().email().async_validate(is_unused, "Email taken")
        await email.parse_async("a@example.com")
    """

    base: Schema
    check: Callable[[Any], Any]
    message: str | None = None

    def partial(self) -> Schema:
        return replace(self, base=self.base.partial())

    def _parse(self, value: Any, options: ValidationOptions) -> Result:
        return self.base._parse(value, options)

    def _steps(self, value: Any, options: ValidationOptions) -> Steps:
        result = yield Descend(self.base, value, options)
        if isinstance(result, Err):
            return result

        try:
            outcome = self.check(result.value)
            if inspect.isawaitable(outcome):
                outcome = yield Await(outcome)
        except Exception as e:
            return fail(
                issue(
                    f"Async validation error: {e}",
                    "async.error",
                    options,
                    {"error": repr(e)},
                )
            )

        if outcome is None or outcome is True:
            return result
        if outcome is False:
            return fail(issue(self.message or DEFAULT_ASYNC_MESSAGE, "async.failed", options))
        if isinstance(outcome, Ok):
            return outcome
        if isinstance(outcome, Err):
            return Err(reroot(outcome.error, options, "async.failed"))
        return result

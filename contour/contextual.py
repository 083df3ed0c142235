"""
Context-gated validation.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, replace
from typing import Any, Callable

from .context import ValidationOptions
from .result import Err
from .schema import Descend, Schema, Steps, WrapperSchema


def matches_context(current: Any, target: Any) -> bool:
    """
    Check whether the active context ``current`` selects ``target``.

    Strings match by equality, mappings when ``target`` is a key-subset of
    ``current`` with equal values. A None context matches nothing.
    """
    if current is None:
        return False
    if isinstance(current, str) and isinstance(target, str):
        return current == target
    if isinstance(current, Mapping) and isinstance(target, Mapping):
        return all(k in current and current[k] == v for k, v in target.items())
    return False


@dataclass(frozen=True, slots=True)
class ContextualSchema(WrapperSchema):
    """
    Base schema plus rules applied only under a matching context.

    Rules run in registration order after the base succeeds, each receiving
    the previous output and able to transform or reject it.
    """

    base: Schema
    rules: tuple[tuple[Any, Schema], ...] = ()

    def when_context(self, context: Any, build: Callable[[Schema], Schema]) -> ContextualSchema:
        """Register ``build(base)`` as the validator for ``context``."""
        rule_schema = build(self.base)
        if not isinstance(rule_schema, Schema):
            raise TypeError(
                f"when_context builder must return a Schema, got {type(rule_schema).__name__}"
            )
        return replace(self, rules=(*self.rules, (context, rule_schema)))

    def partial(self) -> Schema:
        return replace(self, base=self.base.partial())

    def _steps(self, value: Any, options: ValidationOptions) -> Steps:
        result = yield Descend(self.base, value, options)
        if isinstance(result, Err):
            return result

        for context, rule_schema in self.rules:
            if not matches_context(options.context, context):
                continue
            result = yield Descend(rule_schema, result.value, options)
            if isinstance(result, Err):
                return result
        return result

"""
Validation options and the ambient validation context.
"""

from __future__ import annotations

from collections.abc import Mapping
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, fields, replace
from typing import Any

from .errors import Path

# Context variable holding the ambient validation context
_current_context: ContextVar[Any] = ContextVar("validation_context", default=None)


@dataclass(frozen=True, slots=True)
class ValidationOptions:
    """
    Options threaded through one validation call.

    A fresh instance is built per top-level parse. Composite schemas hand each
    child its own copy with the path extended, so sibling branches never share
    state.
    """

    path: Path = ()
    abort_early: bool = False
    strip_unknown: bool = False
    apply_defaults: bool = True
    context: Any = None

    def at(self, *segments: str | int) -> ValidationOptions:
        """Copy of these options with the path extended by ``segments``."""
        return replace(self, path=(*self.path, *(str(s) for s in segments)))


_OPTION_NAMES = frozenset(f.name for f in fields(ValidationOptions))


def current_context() -> Any:
    """Return the ambient validation context, or None."""
    return _current_context.get()


@contextmanager
def validation_context(context: Any):
    """
    Context manager setting the ambient validation context.

    Calls that do not pass ``context`` explicitly pick this value up, which
    drives ``when_context`` rules and permission checks.

    Example:
        schema = s.object({"name": s.string()}).with_permissions().restrict_field(
            "salary", "admin"
        )

        with validation_context({"user": {"role": "admin"}}):
            schema.parse(row)   # salary kept

        schema.parse(row)       # salary omitted
    """
    token = _current_context.set(context)
    try:
        yield
    finally:
        _current_context.reset(token)


def resolve_options(
    options: ValidationOptions | Mapping[str, Any] | None = None, **overrides: Any
) -> ValidationOptions:
    """
    Build the options for a top-level call.

    Accepts a ValidationOptions, a mapping of option names, keyword overrides,
    or nothing. Unknown option names raise TypeError. When no context is given
    the ambient one from ``validation_context`` is used.
    """
    if isinstance(options, ValidationOptions):
        values = {f: getattr(options, f) for f in _OPTION_NAMES}
    elif options is None:
        values = {}
    elif isinstance(options, Mapping):
        values = dict(options)
    else:
        raise TypeError(
            f"Options must be ValidationOptions or a mapping, got {type(options).__name__}"
        )

    values.update(overrides)

    unknown = set(values) - _OPTION_NAMES
    if unknown:
        raise TypeError(f"Unknown validation option(s): {', '.join(sorted(unknown))}")

    if values.get("context") is None:
        values["context"] = current_context()
    if "path" in values:
        values["path"] = tuple(str(p) for p in values["path"])

    return ValidationOptions(**values)

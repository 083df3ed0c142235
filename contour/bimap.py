"""
Bidirectional mapping between two schemas.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Callable, Union

from .errors import ValidationError
from .lib.paths import get_path
from .result import Err, Result
from .schema import Schema

FieldMapping = Union[str, Callable[[Any], Any]]


def _compile(mapping: Mapping[str, FieldMapping], direction: str) -> dict[str, Callable[[Any], Any]]:
    compiled: dict[str, Callable[[Any], Any]] = {}
    for key, spec in mapping.items():
        if isinstance(spec, str):
            compiled[key] = lambda data, path=spec: get_path(data, path)
        elif callable(spec):
            compiled[key] = spec
        else:
            raise TypeError(
                f"Mapping for {direction} field {key!r} must be a callable or a path, "
                f"got {type(spec).__name__}"
            )
    return compiled


@dataclass(frozen=True)
class BiMap:
    """
    Field-by-field conversion between a source and a target schema.

    Each mapping value is either a callable receiving the whole input or a
    dotted path into it. Mapping never fails; the mapped value is then
    validated against the opposite schema.

    Example:
        users = bi_map(
            api_user, db_user,
            to={"full_name": lambda u: f"{u['first']} {u['last']}", "mail": "email"},
            from_={"first": lambda r: r["full_name"].split(" ")[0],
                   "last": lambda r: r["full_name"].split(" ")[1],
                   "email": "mail"},
        )
        row = users.to(payload).unwrap()
    """

    source: Schema
    target: Schema
    to_fields: Mapping[str, Callable[[Any], Any]]
    from_fields: Mapping[str, Callable[[Any], Any]] = field(default_factory=dict)

    def to(self, source: Any) -> Result:
        """Map a source value to the target shape and validate it."""
        return self.target.safe_parse(self._apply(self.to_fields, source))

    def from_(self, target: Any) -> Result:
        """Map a target value back to the source shape and validate it."""
        return self.source.safe_parse(self._apply(self.from_fields, target))

    def to_and_validate(self, source: Any) -> Any:
        return _unwrap(self.to(source))

    def from_and_validate(self, target: Any) -> Any:
        return _unwrap(self.from_(target))

    def inverse(self) -> BiMap:
        """The same mapping with both directions swapped."""
        return BiMap(self.target, self.source, self.from_fields, self.to_fields)

    @staticmethod
    def _apply(fields: Mapping[str, Callable[[Any], Any]], data: Any) -> dict[str, Any]:
        return {key: fn(data) for key, fn in fields.items()}


def _unwrap(result: Result) -> Any:
    if isinstance(result, Err):
        error = result.error
        raise error if isinstance(error, ValidationError) else ValidationError.from_message(str(error))
    return result.value


def bi_map(
    source: Schema,
    target: Schema,
    to: Mapping[str, FieldMapping],
    from_: Mapping[str, FieldMapping] | None = None,
) -> BiMap:
    return BiMap(source, target, _compile(to, "target"), _compile(from_ or {}, "source"))

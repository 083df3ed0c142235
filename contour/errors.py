"""
Issue and error types for contour.

An Issue is one path-addressed defect. ValidationError aggregates the issues
collected during a parse and is what ``Schema.parse`` raises.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from .missing import MISSING

Path = tuple[str, ...]


@dataclass(frozen=True, slots=True)
class Issue:
    """One validation defect at a specific path."""

    path: Path
    message: str
    code: str
    params: Mapping[str, Any] | None = None

    def to_dict(self) -> dict[str, Any]:
        """Plain-dict form for adapters that serialize issues."""
        data: dict[str, Any] = {
            "path": list(self.path),
            "message": self.message,
            "code": self.code,
        }
        if self.params is not None:
            data["params"] = dict(self.params)
        return data

    @property
    def location(self) -> str:
        return ".".join(self.path) if self.path else "value"


class ValidationError(Exception):
    """Validation failure carrying every collected issue."""

    def __init__(self, issues: Sequence[Issue]):
        self.issues: tuple[Issue, ...] = tuple(issues)
        super().__init__(self.format_message(self.issues))

    @property
    def message(self) -> str:
        return self.args[0]

    @staticmethod
    def format_message(issues: Sequence[Issue]) -> str:
        if not issues:
            return "Validation failed"

        if len(issues) == 1:
            issue = issues[0]
            return f"Validation failed at {issue.location}: {issue.message}"

        lines = "\n".join(f"  - {i.location}: {i.message}" for i in issues)
        return f"Validation failed with {len(issues)} issues:\n{lines}"

    def issues_at(self, path: str | Sequence[str]) -> list[Issue]:
        """
        Issues whose path starts with ``path``.

        Comparison is segment-wise and exact, so ``"user"`` matches
        ``("user", "name")`` but not ``("username",)``.
        """
        prefix = tuple(path.split(".")) if isinstance(path, str) else tuple(path)
        return [i for i in self.issues if i.path[: len(prefix)] == prefix]

    def codes(self) -> list[str]:
        return [i.code for i in self.issues]

    def to_dicts(self) -> list[dict[str, Any]]:
        return [i.to_dict() for i in self.issues]

    def __repr__(self) -> str:
        return f"ValidationError({list(self.issues)!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ValidationError):
            return NotImplemented
        return self.issues == other.issues

    def __hash__(self) -> int:
        # params may hold dicts, so only path and code feed the hash
        return hash(tuple((i.path, i.code) for i in self.issues))

    @classmethod
    def from_message(cls, message: str, path: Sequence[str] = ()) -> ValidationError:
        """Single-issue error with the generic ``invalid_value`` code."""
        return cls([Issue(tuple(path), message, "invalid_value")])

    @classmethod
    def type_mismatch(
        cls, expected: str, received: Any, path: Sequence[str] = ()
    ) -> ValidationError:
        actual = type_name(received)
        return cls(
            [
                Issue(
                    tuple(path),
                    f"Expected {expected}, received {actual}",
                    "type_mismatch",
                    {"expected": expected, "received": actual},
                )
            ]
        )


class UnwrapError(RuntimeError):
    """Raised when unwrapping the wrong variant of an Ok/Err result."""


class HistoryError(IndexError):
    """Raised when a Versioned cursor move falls outside the kept history."""


def type_name(value: Any) -> str:
    """Name a value's type the way issue messages report it."""
    if value is MISSING:
        return "missing"
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, (list, tuple)):
        return "array"
    if isinstance(value, Mapping):
        return "object"
    return type(value).__name__

"""
Outcome types for contour.

Provides a minimal Result type (Ok/Err) returned by every validation step.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Generic, TypeVar, Union

from .errors import UnwrapError

T = TypeVar("T")
E = TypeVar("E")
U = TypeVar("U")
F = TypeVar("F")


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    """Success result containing a value."""

    value: T

    def is_ok(self) -> bool:
        return True

    def is_err(self) -> bool:
        return False

    def unwrap(self) -> T:
        return self.value

    def unwrap_or(self, default: Any) -> T:
        return self.value

    def unwrap_err(self) -> Any:
        raise UnwrapError(f"Cannot unwrap error from Ok result with: {self.value!r}")

    def map(self, fn: Callable[[T], U]) -> Ok[U]:
        """Apply ``fn`` to the contained value."""
        return Ok(fn(self.value))

    def map_err(self, fn: Callable[[Any], Any]) -> Ok[T]:
        return self

    def and_then(self, fn: Callable[[T], Result[U, Any]]) -> Result[U, Any]:
        """Chain another fallible step onto this result."""
        return fn(self.value)

    def match(self, *, ok: Callable[[T], U], err: Callable[[Any], U]) -> U:
        return ok(self.value)


@dataclass(frozen=True, slots=True)
class Err(Generic[E]):
    """Error result containing an error value."""

    error: E

    def is_ok(self) -> bool:
        return False

    def is_err(self) -> bool:
        return True

    def unwrap(self) -> Any:
        raise UnwrapError(f"Cannot unwrap value from Err result with: {self.error}")

    def unwrap_or(self, default: U) -> U:
        return default

    def unwrap_err(self) -> E:
        return self.error

    def map(self, fn: Callable[[Any], Any]) -> Err[E]:
        return self

    def map_err(self, fn: Callable[[E], F]) -> Err[F]:
        """Apply ``fn`` to the contained error."""
        return Err(fn(self.error))

    def and_then(self, fn: Callable[[Any], Any]) -> Err[E]:
        return self

    def match(self, *, ok: Callable[[Any], U], err: Callable[[E], U]) -> U:
        return err(self.error)


Result = Union[Ok[T], Err[E]]


def is_result(value: Any) -> bool:
    """True when ``value`` is an Ok or Err instance."""
    return isinstance(value, (Ok, Err))

"""
Primitive schema variants: string, number, boolean, null, any, enum, custom
and instance-of.

Each checks type identity first, then every configured constraint, reporting
each violated constraint as its own issue.
"""

from __future__ import annotations

import enum
import math
import re
from fractions import Fraction
from dataclasses import dataclass, replace
from datetime import date, datetime, time
from typing import Any, Callable
from urllib.parse import urlparse

from .context import ValidationOptions
from .errors import Issue, ValidationError
from .result import Err, Ok, Result
from .schema import (
    CompositeSchema,
    Schema,
    Steps,
    fail,
    invoke,
    issue,
    reroot,
    user_failure,
)

_EMAIL = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
_UUID = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-4[0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$",
    re.IGNORECASE,
)

# Absolute tolerance for multiple_of checks on floats
MULTIPLE_OF_EPSILON = 1e-9


def _is_multiple(value: int | float, multiple: int | float) -> bool:
    """Exact for integers, tolerant of float rounding otherwise. Infinity passes."""
    if isinstance(value, int) and isinstance(multiple, int):
        return value % multiple == 0
    if isinstance(value, float) and math.isinf(value):
        return True
    try:
        return abs(math.remainder(value, multiple)) < MULTIPLE_OF_EPSILON
    except OverflowError:
        return Fraction(value) % Fraction(multiple) == 0


def _finish(value: Any, issues: list[Issue], options: ValidationOptions) -> Result:
    """Ok(value) when no issue was found, else the issues (first only if aborting)."""
    if not issues:
        return Ok(value)
    if options.abort_early:
        issues = issues[:1]
    return Err(ValidationError(issues))


def _is_url(value: str) -> bool:
    parsed = urlparse(value)
    return bool(parsed.scheme) and bool(parsed.netloc or parsed.path)


def _is_iso(parser: Callable[[str], Any], value: str) -> bool:
    try:
        parser(value)
    except ValueError:
        return False
    return True


def _parse_datetime(value: str) -> datetime:
    # fromisoformat only learned the "Z" suffix in 3.11
    if value.endswith(("Z", "z")):
        value = value[:-1] + "+00:00"
    return datetime.fromisoformat(value)


_FORMATS: dict[str, tuple[Callable[[str], bool], str]] = {
    "email": (lambda v: _EMAIL.match(v) is not None, "Invalid email address"),
    "url": (_is_url, "Invalid URL"),
    "uuid": (lambda v: _UUID.match(v) is not None, "Invalid UUID"),
    "date": (lambda v: _is_iso(date.fromisoformat, v), "Invalid ISO date"),
    "time": (lambda v: _is_iso(time.fromisoformat, v), "Invalid ISO time"),
    "datetime": (lambda v: _is_iso(_parse_datetime, v), "Invalid ISO datetime"),
}


def _check_length(n: int | None, name: str) -> None:
    if n is not None and (not isinstance(n, int) or isinstance(n, bool) or n < 0):
        raise ValueError(f"{name} must be a non-negative integer, got {n!r}")


@dataclass(frozen=True, slots=True)
class StringSchema(Schema):
    """Validator for strings with length, pattern and format constraints."""

    min_length: int | None = None
    max_length: int | None = None
    pattern: re.Pattern[str] | None = None
    string_format: str | None = None
    trims: bool = False

    def __post_init__(self) -> None:
        _check_length(self.min_length, "min_length")
        _check_length(self.max_length, "max_length")
        if self.string_format is not None and self.string_format not in _FORMATS:
            raise ValueError(
                f"Unsupported string format {self.string_format!r}; "
                f"expected one of {sorted(_FORMATS)}"
            )

    def min(self, length: int) -> StringSchema:
        return replace(self, min_length=length)

    def max(self, length: int) -> StringSchema:
        return replace(self, max_length=length)

    def length(self, length: int) -> StringSchema:
        """Exact length, i.e. min and max at once."""
        return replace(self, min_length=length, max_length=length)

    def regex(self, pattern: str | re.Pattern[str]) -> StringSchema:
        return replace(self, pattern=re.compile(pattern))

    def trim(self) -> StringSchema:
        """Strip surrounding whitespace before any constraint runs."""
        return replace(self, trims=True)

    def format(self, name: str) -> StringSchema:
        return replace(self, string_format=name)

    def email(self) -> StringSchema:
        return self.format("email")

    def url(self) -> StringSchema:
        return self.format("url")

    def uuid(self) -> StringSchema:
        return self.format("uuid")

    def date(self) -> StringSchema:
        return self.format("date")

    def time(self) -> StringSchema:
        return self.format("time")

    def datetime(self) -> StringSchema:
        return self.format("datetime")

    def _parse(self, value: Any, options: ValidationOptions) -> Result:
        if not isinstance(value, str):
            return Err(ValidationError.type_mismatch("string", value, options.path))

        if self.trims:
            value = value.strip()

        issues: list[Issue] = []

        if self.min_length is not None and len(value) < self.min_length:
            issues.append(
                issue(
                    f"String must contain at least {self.min_length} character(s)",
                    "string.min_length",
                    options,
                    {"min_length": self.min_length, "actual": len(value)},
                )
            )

        if self.max_length is not None and len(value) > self.max_length:
            issues.append(
                issue(
                    f"String must contain at most {self.max_length} character(s)",
                    "string.max_length",
                    options,
                    {"max_length": self.max_length, "actual": len(value)},
                )
            )

        if self.pattern is not None and self.pattern.search(value) is None:
            issues.append(
                issue(
                    f"String must match pattern: {self.pattern.pattern}",
                    "string.pattern",
                    options,
                    {"pattern": self.pattern.pattern},
                )
            )

        if self.string_format is not None:
            check, message = _FORMATS[self.string_format]
            if not check(value):
                issues.append(issue(message, f"string.{self.string_format}", options))

        return _finish(value, issues, options)

    def describe_constraints(self) -> dict[str, Any]:
        info: dict[str, Any] = {"type": "string"}
        if self.min_length is not None:
            info["min_length"] = self.min_length
        if self.max_length is not None:
            info["max_length"] = self.max_length
        if self.pattern is not None:
            info["pattern"] = self.pattern.pattern
        if self.string_format is not None:
            info["format"] = self.string_format
        if self.trims:
            info["trim"] = True
        return info


@dataclass(frozen=True, slots=True)
class NumberSchema(Schema):
    """Validator for ints and floats (never bools, never NaN)."""

    minimum: float | None = None
    maximum: float | None = None
    integer: bool = False
    sign: str | None = None
    multiple: float | None = None

    def __post_init__(self) -> None:
        if self.sign not in (None, "positive", "negative"):
            raise ValueError(f"sign must be 'positive' or 'negative', got {self.sign!r}")
        if self.multiple is not None and not self.multiple > 0:
            raise ValueError(f"multiple_of requires a positive number, got {self.multiple!r}")

    def min(self, value: float) -> NumberSchema:
        return replace(self, minimum=value)

    def max(self, value: float) -> NumberSchema:
        return replace(self, maximum=value)

    def int(self) -> NumberSchema:
        return replace(self, integer=True)

    def positive(self) -> NumberSchema:
        """Require > 0. Replaces a previous ``negative()``."""
        return replace(self, sign="positive")

    def negative(self) -> NumberSchema:
        """Require < 0. Replaces a previous ``positive()``."""
        return replace(self, sign="negative")

    def multiple_of(self, value: float) -> NumberSchema:
        return replace(self, multiple=value)

    def _parse(self, value: Any, options: ValidationOptions) -> Result:
        if (
            not isinstance(value, (int, float))
            or isinstance(value, bool)
            or (isinstance(value, float) and math.isnan(value))
        ):
            return Err(ValidationError.type_mismatch("number", value, options.path))

        issues: list[Issue] = []

        if self.integer and not (isinstance(value, int) or value.is_integer()):
            issues.append(issue("Number must be an integer", "number.integer", options))

        if self.sign == "positive" and value <= 0:
            issues.append(
                issue("Number must be positive", "number.positive", options, {"value": value})
            )

        if self.sign == "negative" and value >= 0:
            issues.append(
                issue("Number must be negative", "number.negative", options, {"value": value})
            )

        if self.minimum is not None and value < self.minimum:
            issues.append(
                issue(
                    f"Number must be greater than or equal to {self.minimum}",
                    "number.min",
                    options,
                    {"min": self.minimum, "value": value},
                )
            )

        if self.maximum is not None and value > self.maximum:
            issues.append(
                issue(
                    f"Number must be less than or equal to {self.maximum}",
                    "number.max",
                    options,
                    {"max": self.maximum, "value": value},
                )
            )

        if self.multiple is not None and not _is_multiple(value, self.multiple):
            issues.append(
                issue(
                    f"Number must be a multiple of {self.multiple}",
                    "number.multiple_of",
                    options,
                    {"multiple_of": self.multiple, "value": value},
                )
            )

        return _finish(value, issues, options)

    def describe_constraints(self) -> dict[str, Any]:
        info: dict[str, Any] = {"type": "integer" if self.integer else "number"}
        if self.minimum is not None:
            info["min"] = self.minimum
        if self.maximum is not None:
            info["max"] = self.maximum
        if self.sign is not None:
            info[self.sign] = True
        if self.multiple is not None:
            info["multiple_of"] = self.multiple
        return info


@dataclass(frozen=True, slots=True)
class BooleanSchema(Schema):
    def _parse(self, value: Any, options: ValidationOptions) -> Result:
        if not isinstance(value, bool):
            return Err(ValidationError.type_mismatch("boolean", value, options.path))
        return Ok(value)

    def describe_constraints(self) -> dict[str, Any]:
        return {"type": "boolean"}


@dataclass(frozen=True, slots=True)
class NullSchema(Schema):
    def _parse(self, value: Any, options: ValidationOptions) -> Result:
        if value is not None:
            return Err(ValidationError.type_mismatch("null", value, options.path))
        return Ok(None)

    def describe_constraints(self) -> dict[str, Any]:
        return {"type": "null"}


@dataclass(frozen=True, slots=True)
class AnySchema(Schema):
    """Accepts every value unchanged."""

    def _parse(self, value: Any, options: ValidationOptions) -> Result:
        return Ok(value)

    def describe_constraints(self) -> dict[str, Any]:
        return {"type": "any"}


def _same(a: Any, b: Any) -> bool:
    # True == 1 in Python; enum membership must not confuse them
    if isinstance(a, bool) or isinstance(b, bool):
        return a is b
    return a == b


@dataclass(frozen=True, slots=True)
class EnumSchema(Schema):
    """Validator accepting one of a fixed set of values."""

    values: tuple[Any, ...]

    def __post_init__(self) -> None:
        if not self.values:
            raise ValueError("Enum schema needs at least one value")

    def _parse(self, value: Any, options: ValidationOptions) -> Result:
        for allowed in self.values:
            if _same(allowed, value):
                return Ok(value)
        expected = ", ".join(str(v) for v in self.values)
        return fail(
            issue(
                f"Invalid enum value. Expected one of: {expected}",
                "enum.invalid",
                options,
                {"expected": list(self.values), "received": value},
            )
        )

    def describe_constraints(self) -> dict[str, Any]:
        return {"type": "enum", "values": list(self.values)}


def enum_values(values: Any) -> tuple[Any, ...]:
    """Normalize enum input: an ``enum.Enum`` subclass or any iterable."""
    if isinstance(values, type) and issubclass(values, enum.Enum):
        return tuple(member.value for member in values)
    if isinstance(values, (str, bytes)):
        raise TypeError("Enum values must be a collection, not a single string")
    return tuple(values)


@dataclass(frozen=True, slots=True)
class CustomSchema(CompositeSchema):
    """
    Validator backed by a user function.

    The function may return Ok/Err, a bool, or an awaitable of either
    (awaited by ``parse_async``).
    """

    check: Callable[[Any], Any]
    message: str = "Invalid value"

    def _steps(self, value: Any, options: ValidationOptions) -> Steps:
        try:
            outcome = yield from invoke(self.check, value)
        except Exception as e:
            return user_failure(e, "custom.failed", "Custom validation failed", options)

        if isinstance(outcome, Ok):
            return outcome
        if isinstance(outcome, Err):
            return Err(reroot(outcome.error, options))
        if outcome:
            return Ok(value)
        return fail(issue(self.message, "custom", options))

    def describe_constraints(self) -> dict[str, Any]:
        return {"type": "custom"}


@dataclass(frozen=True, slots=True)
class InstanceOfSchema(Schema):
    cls: type

    def _parse(self, value: Any, options: ValidationOptions) -> Result:
        if not isinstance(value, self.cls):
            return Err(
                ValidationError.type_mismatch(self.cls.__name__, value, options.path)
            )
        return Ok(value)

    def describe_constraints(self) -> dict[str, Any]:
        return {"type": "instance", "class": self.cls.__name__}

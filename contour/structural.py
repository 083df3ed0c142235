"""
Structural schema variants: object, array and record.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from copy import deepcopy
from dataclasses import dataclass, field, replace
from typing import Any

from .context import ValidationOptions
from .errors import Issue, ValidationError, type_name
from .missing import MISSING
from .result import Err, Ok
from .schema import CompositeSchema, Descend, OptionalSchema, Schema, Steps, fail, issue


def _required_by_default(fields: Mapping[str, Schema]) -> frozenset[str]:
    return frozenset(k for k, sch in fields.items() if not sch.accepts_missing())


def _check_keys(keys: Iterable[str], fields: Mapping[str, Schema]) -> None:
    unknown = [k for k in keys if k not in fields]
    if unknown:
        raise KeyError(f"Unknown field(s): {', '.join(map(str, unknown))}")


@dataclass(frozen=True, slots=True)
class ObjectSchema(CompositeSchema):
    """
    Validator for mappings with a declared, ordered set of fields.

    A field is required unless its schema accepts absence (optional, defaulted,
    or a lazy schema with a declared default). Every builder returns a new
    schema; the required set and default map are never mutated in place.

    Example:
        user = s.object({
            "id": s.string().uuid(),
            "age": s.number().int().positive().optional(),
        })
        user.partial().required("id").parse({"id": "..."})
    """

    fields: Mapping[str, Schema]
    required_keys: frozenset[str] = field(default=None)  # type: ignore[assignment]
    defaults: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        for key, sch in self.fields.items():
            if not isinstance(sch, Schema):
                raise TypeError(
                    f"Field {key!r} must be a Schema, got {type(sch).__name__}"
                )
        object.__setattr__(self, "fields", dict(self.fields))
        object.__setattr__(self, "defaults", dict(self.defaults))
        if self.required_keys is None:
            object.__setattr__(self, "required_keys", _required_by_default(self.fields))
        else:
            object.__setattr__(self, "required_keys", frozenset(self.required_keys))

    @property
    def shape(self) -> dict[str, Schema]:
        return dict(self.fields)

    # ---- builders --------------------------------------------------------

    def required(self, *keys: str) -> ObjectSchema:
        """Add ``keys`` to the required set. Repeated calls accumulate."""
        _check_keys(keys, self.fields)
        return replace(self, required_keys=self.required_keys | set(keys))

    def optional(self, *keys: str) -> Schema:  # type: ignore[override]
        """
        Without keys, an optional object (MISSING/None accepted). With keys,
        the same object with those fields no longer required.
        """
        if not keys:
            return OptionalSchema(self)
        _check_keys(keys, self.fields)
        return replace(self, required_keys=self.required_keys - set(keys))

    def default(self, key: str, value: Any = MISSING) -> Schema:  # type: ignore[override]
        """
        ``default(key, value)`` records a field default. ``default(value)`` with
        a single argument is a default for the whole object.
        """
        if value is MISSING:
            return Schema.default(self, key)
        _check_keys((key,), self.fields)
        return replace(self, defaults={**self.defaults, key: value})

    def partial(self) -> ObjectSchema:
        return ObjectSchema(
            {k: sch.partial() for k, sch in self.fields.items()},
            frozenset(),
            self.defaults,
        )

    def extend(self, shape: Mapping[str, Schema]) -> ObjectSchema:
        """New object with ``shape`` added; redeclared fields are replaced."""
        fields = {**self.fields, **shape}
        required = (self.required_keys - set(shape)) | _required_by_default(shape)
        return ObjectSchema(fields, required, self.defaults)

    def merge(self, other: ObjectSchema) -> ObjectSchema:
        return replace(
            self.extend(other.fields),
            defaults={**self.defaults, **other.defaults},
        )

    def pick(self, *keys: str) -> ObjectSchema:
        _check_keys(keys, self.fields)
        return ObjectSchema(
            {k: self.fields[k] for k in keys},
            self.required_keys & set(keys),
            {k: v for k, v in self.defaults.items() if k in keys},
        )

    def omit(self, *keys: str) -> ObjectSchema:
        _check_keys(keys, self.fields)
        kept = [k for k in self.fields if k not in keys]
        return self.pick(*kept)

    # ---- validation ------------------------------------------------------

    def _steps(self, value: Any, options: ValidationOptions) -> Steps:
        if not isinstance(value, Mapping):
            return Err(ValidationError.type_mismatch("object", value, options.path))

        output: dict[Any, Any] = {}
        issues: list[Issue] = []

        for key, sch in self.fields.items():
            child = options.at(key)

            if key in value:
                result = yield Descend(sch, value[key], child)
                if isinstance(result, Ok):
                    output[key] = result.value
                else:
                    issues.extend(result.error.issues)
            else:
                resolved = yield from self._resolve_default(key, sch, child)
                if resolved is not MISSING:
                    output[key] = resolved
                elif key in self.required_keys:
                    issues.append(
                        issue("Required property missing", "object.required", child)
                    )

            if issues and options.abort_early:
                break

        if not options.strip_unknown:
            for key, item in value.items():
                if key not in self.fields:
                    output[key] = item

        if issues:
            if options.abort_early:
                issues = issues[:1]
            return Err(ValidationError(issues))
        return Ok(output)

    def _resolve_default(self, key: str, sch: Schema, options: ValidationOptions) -> Steps:
        """Value for an absent field, or MISSING when none can be produced."""
        if not options.apply_defaults:
            return MISSING
        if key in self.defaults:
            return deepcopy(self.defaults[key])

        probe = yield Descend(sch, MISSING, options)
        if isinstance(probe, Ok):
            return probe.value
        return MISSING

    def describe_constraints(self) -> dict[str, Any]:
        return {
            "type": "object",
            "fields": {k: sch.describe_constraints() for k, sch in self.fields.items()},
            "required": [k for k in self.fields if k in self.required_keys],
            "defaults": dict(self.defaults),
        }


def _unique_key(item: Any) -> Any:
    """Hashable equality key for uniqueness checks, ignoring mapping key order."""
    if isinstance(item, Mapping):
        return ("object", frozenset((_unique_key(k), _unique_key(v)) for k, v in item.items()))
    if isinstance(item, (list, tuple)):
        return ("array", tuple(_unique_key(i) for i in item))
    try:
        hash(item)
    except TypeError:
        return ("repr", repr(item))
    # keeps True and 1 apart
    return (type_name(item), item)


@dataclass(frozen=True, slots=True)
class ArraySchema(CompositeSchema):
    """Validator for lists (tuples accepted) whose items share one schema."""

    item: Schema
    min_length: int | None = None
    max_length: int | None = None
    unique_items: bool = False

    def __post_init__(self) -> None:
        if not isinstance(self.item, Schema):
            raise TypeError(f"Array item must be a Schema, got {type(self.item).__name__}")
        for name in ("min_length", "max_length"):
            n = getattr(self, name)
            if n is not None and (isinstance(n, bool) or not isinstance(n, int) or n < 0):
                raise ValueError(f"{name} must be a non-negative integer, got {n!r}")

    def min(self, length: int) -> ArraySchema:
        return replace(self, min_length=length)

    def max(self, length: int) -> ArraySchema:
        return replace(self, max_length=length)

    def length(self, length: int) -> ArraySchema:
        return replace(self, min_length=length, max_length=length)

    def nonempty(self) -> ArraySchema:
        return self.min(1)

    def unique(self) -> ArraySchema:
        return replace(self, unique_items=True)

    def partial(self) -> Schema:
        return OptionalSchema(replace(self, item=self.item.partial()))

    def _steps(self, value: Any, options: ValidationOptions) -> Steps:
        if not isinstance(value, (list, tuple)):
            return Err(ValidationError.type_mismatch("array", value, options.path))

        issues: list[Issue] = []

        if self.min_length is not None and len(value) < self.min_length:
            issues.append(
                issue(
                    f"Array must contain at least {self.min_length} item(s)",
                    "array.min_length",
                    options,
                    {"min_length": self.min_length, "actual": len(value)},
                )
            )

        if self.max_length is not None and len(value) > self.max_length:
            issues.append(
                issue(
                    f"Array must contain at most {self.max_length} item(s)",
                    "array.max_length",
                    options,
                    {"max_length": self.max_length, "actual": len(value)},
                )
            )

        if self.unique_items:
            seen: set[Any] = set()
            duplicates: list[int] = []
            for i, item in enumerate(value):
                key = _unique_key(item)
                if key in seen:
                    duplicates.append(i)
                seen.add(key)
            if duplicates:
                issues.append(
                    issue(
                        "Array items must be unique",
                        "array.unique",
                        options,
                        {"duplicates": duplicates},
                    )
                )

        if issues and options.abort_early:
            return fail(issues[0])

        output: list[Any] = []
        for i, item in enumerate(value):
            result = yield Descend(self.item, item, options.at(i))
            if isinstance(result, Ok):
                output.append(result.value)
                continue
            issues.extend(result.error.issues)
            if options.abort_early:
                break

        if issues:
            if options.abort_early:
                issues = issues[:1]
            return Err(ValidationError(issues))
        return Ok(output)

    def describe_constraints(self) -> dict[str, Any]:
        info: dict[str, Any] = {"type": "array", "items": self.item.describe_constraints()}
        if self.min_length is not None:
            info["min_length"] = self.min_length
        if self.max_length is not None:
            info["max_length"] = self.max_length
        if self.unique_items:
            info["unique"] = True
        return info


@dataclass(frozen=True, slots=True)
class RecordSchema(CompositeSchema):
    """
    Validator for mappings with arbitrary keys.

    Key failures are reported under a ``[key]`` path segment, value failures
    under the bare key.
    """

    key_schema: Schema
    value_schema: Schema

    def partial(self) -> Schema:
        return replace(self, value_schema=self.value_schema.partial())

    def _steps(self, value: Any, options: ValidationOptions) -> Steps:
        if not isinstance(value, Mapping):
            return Err(ValidationError.type_mismatch("object", value, options.path))

        output: dict[Any, Any] = {}
        issues: list[Issue] = []

        for key, item in value.items():
            key_result = yield Descend(self.key_schema, key, options.at(f"[{key}]"))
            if isinstance(key_result, Err):
                issues.extend(key_result.error.issues)
                if options.abort_early:
                    break
                continue

            item_result = yield Descend(self.value_schema, item, options.at(key))
            if isinstance(item_result, Err):
                issues.extend(item_result.error.issues)
                if options.abort_early:
                    break
                continue

            output[key_result.value] = item_result.value

        if issues:
            if options.abort_early:
                issues = issues[:1]
            return Err(ValidationError(issues))
        return Ok(output)

    def describe_constraints(self) -> dict[str, Any]:
        return {
            "type": "record",
            "keys": self.key_schema.describe_constraints(),
            "values": self.value_schema.describe_constraints(),
        }

"""
Permission-gated and permission-aware schemas.

``restrict`` denies a whole value when the context lacks the required role.
``with_permissions().restrict_field(...)`` validates normally and then omits
the fields the context may not see.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, replace
from typing import Any, Callable, Union

from .context import ValidationOptions
from .result import Err, Ok
from .schema import Descend, Schema, Steps, WrapperSchema, fail, issue, user_failure

DEFAULT_DENIED_MESSAGE = "Access denied: insufficient permissions"


@dataclass(frozen=True, slots=True)
class PermissionCondition:
    """Structured requirement: any of ``role``, plus an optional context check."""

    role: str | tuple[str, ...] | None = None
    check: Callable[[Any], bool] | None = None
    message: str | None = None


Requirement = Union[str, list, tuple, set, frozenset, PermissionCondition]


def _as_roles(value: Any) -> list[str]:
    if isinstance(value, str):
        return [value]
    if isinstance(value, (list, tuple, set, frozenset)):
        return [r for r in value if isinstance(r, str)]
    return []


def extract_roles(context: Any) -> list[str]:
    """
    Roles carried by a validation context.

    Recognizes a bare role string, a list of roles, ``{"role"|"roles": ...}``
    and ``{"user": {"role"|"roles": ...}}``.
    """
    if not context:
        return []
    if isinstance(context, (str, list, tuple, set, frozenset)):
        return _as_roles(context)
    if isinstance(context, Mapping):
        for key in ("role", "roles"):
            if context.get(key):
                return _as_roles(context[key])
        user = context.get("user")
        if isinstance(user, Mapping):
            for key in ("role", "roles"):
                if user.get(key):
                    return _as_roles(user[key])
    return []


def has_permission(requirement: Requirement, context: Any) -> bool:
    """Evaluate ``requirement`` against ``context``."""
    roles = extract_roles(context)

    if isinstance(requirement, str):
        return requirement in roles
    if isinstance(requirement, (list, tuple, set, frozenset)):
        return any(r in roles for r in requirement)
    if isinstance(requirement, PermissionCondition):
        if requirement.role is not None:
            if not any(r in roles for r in _as_roles(requirement.role)):
                return False
        if requirement.check is not None and not requirement.check(context):
            return False
        return True
    raise TypeError(f"Unsupported permission requirement: {requirement!r}")


def denied_message(requirement: Requirement) -> str:
    if isinstance(requirement, PermissionCondition) and requirement.message:
        return requirement.message
    return DEFAULT_DENIED_MESSAGE


@dataclass(frozen=True, slots=True)
class RestrictedSchema(WrapperSchema):
    """Rejects the value with ``permission.denied`` unless allowed."""

    base: Schema
    requirement: Requirement

    def partial(self) -> Schema:
        return replace(self, base=self.base.partial())

    def _steps(self, value: Any, options: ValidationOptions) -> Steps:
        try:
            allowed = has_permission(self.requirement, options.context)
        except Exception as e:
            return user_failure(
                e, "permission.check_failed", "Permission check failed", options
            )
        if not allowed:
            return fail(
                issue(
                    denied_message(self.requirement),
                    "permission.denied",
                    options,
                    {"roles": extract_roles(options.context)},
                )
            )
        return (yield Descend(self.base, value, options))


@dataclass(frozen=True, slots=True)
class PermissionAwareSchema(WrapperSchema):
    """
    Validates with the base schema, then drops restricted fields.

    Fields without a restriction are never touched. With no context at all,
    restricted fields are dropped.
    """

    base: Schema
    field_permissions: tuple[tuple[str, Requirement], ...] = ()

    def restrict_field(self, field: str | list[str], requirement: Requirement) -> PermissionAwareSchema:
        names = [field] if isinstance(field, str) else list(field)
        permissions = dict(self.field_permissions)
        for name in names:
            permissions[name] = requirement
        return replace(self, field_permissions=tuple(permissions.items()))

    def with_permissions(self) -> PermissionAwareSchema:
        return self

    def partial(self) -> Schema:
        return replace(self, base=self.base.partial())

    def apply_permissions(self, data: Mapping[str, Any], context: Any) -> dict[str, Any]:
        """Copy of ``data`` without the fields ``context`` may not see."""
        permissions = dict(self.field_permissions)
        return {
            key: item
            for key, item in data.items()
            if key not in permissions or has_permission(permissions[key], context)
        }

    def _steps(self, value: Any, options: ValidationOptions) -> Steps:
        result = yield Descend(self.base, value, options)
        if isinstance(result, Err) or not isinstance(result.value, Mapping):
            return result
        try:
            return Ok(self.apply_permissions(result.value, options.context))
        except Exception as e:
            return user_failure(
                e, "permission.check_failed", "Permission check failed", options
            )

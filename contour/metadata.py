"""
Documentation metadata attached to a schema.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, replace
from typing import Any

from .context import ValidationOptions
from .schema import Descend, Schema, Steps, WrapperSchema


@dataclass(frozen=True, slots=True)
class MetadataSchema(WrapperSchema):
    """
    Validates exactly like ``base`` and carries descriptive metadata.

    Chained metadata builders merge into one node instead of nesting.
    """

    base: Schema
    info: Mapping[str, Any]

    def __post_init__(self) -> None:
        object.__setattr__(self, "info", dict(self.info))

    @property
    def metadata(self) -> dict[str, Any]:
        """Copy of the attached metadata."""
        return dict(self.info)

    def _with(self, **changes: Any) -> MetadataSchema:
        return replace(self, info={**self.info, **changes})

    def describe(self, description: str) -> MetadataSchema:
        return self._with(description=description)

    def example(self, example: Any) -> MetadataSchema:
        return self._with(examples=[*self.info.get("examples", []), example])

    def deprecated(self, message: str | None = None) -> MetadataSchema:
        return self._with(deprecated=True, deprecation_message=message)

    def mark_deprecated(self, *fields: str) -> MetadataSchema:
        """Record field names as deprecated."""
        return self._with(
            deprecated_fields=[*self.info.get("deprecated_fields", []), *fields]
        )

    def set_version(self, version: str | int) -> MetadataSchema:
        return self._with(version=version)

    def meta(self, key: str, value: Any) -> MetadataSchema:
        return self._with(**{key: value})

    def partial(self) -> Schema:
        return replace(self, base=self.base.partial())

    def _steps(self, value: Any, options: ValidationOptions) -> Steps:
        return (yield Descend(self.base, value, options))

    def describe_constraints(self) -> dict[str, Any]:
        info = self.base.describe_constraints()
        if "description" in self.info:
            info["description"] = self.info["description"]
        if self.info.get("examples"):
            info["examples"] = list(self.info["examples"])
        if self.info.get("deprecated") is True:
            info["deprecated"] = True
        return info


def with_metadata(schema: Schema, metadata: Mapping[str, Any] | None = None) -> MetadataSchema:
    return MetadataSchema(schema, metadata or {})

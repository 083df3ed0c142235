"""
Envelope schemas for common API payload shapes.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from .context import ValidationOptions
from .errors import Issue, ValidationError
from .result import Err, Ok
from .schema import CompositeSchema, Descend, Schema, Steps, fail, issue

PAGINATION_FIELDS = ("items", "total", "page", "page_size", "page_count")


@dataclass(frozen=True, slots=True)
class ApiResponseSchema(CompositeSchema):
    """
    ``{"success": bool, "data": ..., "error": ...}`` envelope.

    A successful response must carry ``data``, validated with ``data_schema``.
    A failed one has its ``error`` validated with ``error_schema`` when given.
    """

    data_schema: Schema
    error_schema: Schema | None = None

    def partial(self) -> Schema:
        return ApiResponseSchema(
            self.data_schema.partial(),
            self.error_schema.partial() if self.error_schema is not None else None,
        )

    def _steps(self, value: Any, options: ValidationOptions) -> Steps:
        if not isinstance(value, Mapping):
            return Err(ValidationError.type_mismatch("object", value, options.path))

        success = value.get("success")
        if not isinstance(success, bool):
            return fail(
                issue(
                    "API response must have a boolean success field",
                    "api.missing_success",
                    options.at("success"),
                )
            )

        output: dict[str, Any] = {"success": success}
        if success:
            if "data" not in value:
                return fail(
                    issue(
                        "Successful API response must have a data field",
                        "api.missing_data",
                        options,
                    )
                )
            result = yield Descend(self.data_schema, value["data"], options.at("data"))
            if isinstance(result, Err):
                return result
            output["data"] = result.value
        elif "error" in value:
            if self.error_schema is None:
                output["error"] = value["error"]
            else:
                result = yield Descend(self.error_schema, value["error"], options.at("error"))
                if isinstance(result, Err):
                    return result
                output["error"] = result.value
        return Ok(output)

    def describe_constraints(self) -> dict[str, Any]:
        return {
            "type": "api_response",
            "data": self.data_schema.describe_constraints(),
            "error": (
                self.error_schema.describe_constraints()
                if self.error_schema is not None
                else {"type": "any"}
            ),
        }


@dataclass(frozen=True, slots=True)
class PaginatedSchema(CompositeSchema):
    """Page of items plus ``total``, ``page``, ``page_size``, ``page_count``."""

    item_schema: Schema

    def partial(self) -> Schema:
        return PaginatedSchema(self.item_schema.partial())

    def _steps(self, value: Any, options: ValidationOptions) -> Steps:
        if not isinstance(value, Mapping):
            return Err(ValidationError.type_mismatch("object", value, options.path))

        missing = [name for name in PAGINATION_FIELDS if name not in value]
        if missing and options.abort_early:
            missing = missing[:1]
        if missing:
            return fail(
                *(
                    issue(
                        f"Missing required pagination field: {name}",
                        "pagination.missing_field",
                        options.at(name),
                        {"field": name},
                    )
                    for name in missing
                )
            )

        items = value["items"]
        if not isinstance(items, (list, tuple)):
            return fail(
                issue(
                    "Pagination items must be an array",
                    "pagination.items_not_array",
                    options.at("items"),
                )
            )

        issues: list[Issue] = []
        parsed: list[Any] = []
        for i, item in enumerate(items):
            result = yield Descend(self.item_schema, item, options.at("items", i))
            if isinstance(result, Ok):
                parsed.append(result.value)
                continue
            issues.extend(result.error.issues)
            if options.abort_early:
                return fail(issues[0])

        output: dict[str, Any] = {"items": parsed}
        for name in PAGINATION_FIELDS[1:]:
            number = value[name]
            if isinstance(number, bool) or not isinstance(number, (int, float)):
                issues.append(
                    issue(
                        f"Pagination field {name} must be a number",
                        "pagination.field_not_number",
                        options.at(name),
                        {"field": name},
                    )
                )
            else:
                output[name] = number

        if issues:
            if options.abort_early:
                issues = issues[:1]
            return Err(ValidationError(issues))
        return Ok(output)

    def describe_constraints(self) -> dict[str, Any]:
        return {"type": "paginated", "items": self.item_schema.describe_constraints()}


def api_response(data_schema: Schema, error_schema: Schema | None = None) -> ApiResponseSchema:
    return ApiResponseSchema(data_schema, error_schema)


def paginated(item_schema: Schema) -> PaginatedSchema:
    return PaginatedSchema(item_schema)

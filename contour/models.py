"""
Pydantic model export for object schemas.
"""

from __future__ import annotations

from typing import Annotated, Any, Literal, Optional, Union

from pydantic import Field, create_model

from .structural import ObjectSchema


def to_pydantic(name: str, schema: ObjectSchema) -> type:
    """
    Compile an object schema to a Pydantic model.

    Args:
        name: Name of the generated model class
        schema: Object schema to compile

    Returns:
        A Pydantic BaseModel subclass

    Usage:
        User = to_pydantic("User", s.object({
            "name": s.string().min(1),
            "email": s.string().email().optional(),
        }))
        user = User(name="Alice")
    """
    if not isinstance(schema, ObjectSchema):
        raise TypeError("Schema must be an object schema")
    return _model(name, schema.describe_constraints())


def _model(name: str, info: dict[str, Any]) -> type:
    required = set(info["required"])
    defaults = info["defaults"]
    fields: dict[str, Any] = {}

    for key, child in info["fields"].items():
        field_type = _field_type(f"{name}{key.title().replace('_', '')}", child)
        if key in defaults:
            fields[key] = (field_type, defaults[key])
        elif "default" in child:
            fields[key] = (field_type, child["default"])
        elif key in required:
            fields[key] = (field_type, ...)
        else:
            fields[key] = (Optional[field_type], None)

    return create_model(name, **fields)


def _field_type(name: str, info: dict[str, Any]) -> Any:
    """Python type, with pydantic constraints attached, for a description."""
    field_type = _base_type(name, info)
    if info.get("optional"):
        return Optional[field_type]
    return field_type


def _base_type(name: str, info: dict[str, Any]) -> Any:
    match info:
        case {"type": "string"}:
            return Annotated[
                str,
                Field(
                    min_length=info.get("min_length"),
                    max_length=info.get("max_length"),
                    pattern=info.get("pattern"),
                    description=info.get("description"),
                ),
            ]
        case {"type": "number" | "integer" as kind}:
            return Annotated[
                int if kind == "integer" else float,
                Field(
                    ge=info.get("min"),
                    le=info.get("max"),
                    gt=0 if info.get("positive") else None,
                    lt=0 if info.get("negative") else None,
                    multiple_of=info.get("multiple_of"),
                    description=info.get("description"),
                ),
            ]
        case {"type": "boolean"}:
            return bool
        case {"type": "null"}:
            return type(None)
        case {"type": "enum", "values": values}:
            return Literal[tuple(values)]
        case {"type": "array", "items": items}:
            return Annotated[
                list[_field_type(name, items)],  # type: ignore[misc]
                Field(min_length=info.get("min_length"), max_length=info.get("max_length")),
            ]
        case {"type": "record", "keys": keys, "values": values}:
            return dict[_field_type(name, keys), _field_type(name, values)]  # type: ignore[misc]
        case {"type": "object"}:
            return _model(name, info)
        case {"type": "union", "members": members}:
            return Union[tuple(_field_type(f"{name}{i}", m) for i, m in enumerate(members))]

    return Any

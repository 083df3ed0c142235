"""
Tests for Pydantic model export.
"""

import pytest
from pydantic import ValidationError

from contour import s, to_pydantic


class TestToPydantic:
    def test_simple_model(self):
        User = to_pydantic("User", s.object({"name": s.string(), "age": s.number().int()}))
        user = User(name="Alice", age=30)
        assert user.name == "Alice"
        assert user.age == 30

    def test_optional_fields(self):
        User = to_pydantic("User", s.object({"name": s.string(), "email": s.string().optional()}))
        user = User(name="Alice")
        assert user.email is None

    def test_required_field(self):
        User = to_pydantic("User", s.object({"name": s.string()}))
        with pytest.raises(ValidationError):
            User()

    def test_constraints_carried(self):
        User = to_pydantic(
            "User",
            s.object({"name": s.string().min(2), "age": s.number().int().positive()}),
        )
        with pytest.raises(ValidationError):
            User(name="A", age=1)
        with pytest.raises(ValidationError):
            User(name="Ada", age=0)

    def test_defaults(self):
        Settings = to_pydantic(
            "Settings",
            s.object({"mode": s.enum(["fast", "safe"]).default("safe"), "retries": s.number()})
            .default("retries", 3),
        )
        settings = Settings()
        assert settings.mode == "safe"
        assert settings.retries == 3
        with pytest.raises(ValidationError):
            Settings(mode="other")

    def test_nested_and_lists(self):
        Order = to_pydantic(
            "Order",
            s.object(
                {
                    "customer": s.object({"name": s.string()}),
                    "lines": s.array(s.object({"sku": s.string()})).min(1),
                }
            ),
        )
        order = Order(customer={"name": "Ada"}, lines=[{"sku": "A1"}])
        assert order.customer.name == "Ada"
        assert order.lines[0].sku == "A1"
        with pytest.raises(ValidationError):
            Order(customer={"name": "Ada"}, lines=[])

    def test_requires_object_schema(self):
        with pytest.raises(TypeError):
            to_pydantic("Bad", s.string())

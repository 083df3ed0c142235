"""
Tests for context-gated and permission-controlled schemas.
"""

import pytest

from contour import (
    PermissionCondition,
    current_context,
    extract_roles,
    has_permission,
    matches_context,
    s,
    validation_context,
)


class TestMatchesContext:
    def test_strings(self):
        assert matches_context("signup", "signup")
        assert not matches_context("login", "signup")

    def test_mapping_subset(self):
        assert matches_context({"mode": "create", "user": "a"}, {"mode": "create"})
        assert not matches_context({"mode": "update"}, {"mode": "create"})
        assert not matches_context({}, {"mode": "create"})

    def test_none_matches_nothing(self):
        assert not matches_context(None, "signup")
        assert not matches_context(None, {})

    def test_mixed_kinds(self):
        assert not matches_context("create", {"mode": "create"})


class TestContextualSchema:
    def test_rule_applies_only_in_context(self):
        password = s.string().when_context("signup", lambda sch: sch.min(8))
        assert password.parse("short") == "short"
        assert password.safe_parse("short", context="signup").error.codes() == [
            "string.min_length"
        ]

    def test_rules_compose_in_order(self):
        schema = (
            s.with_context(s.string())
            .when_context({"mode": "create"}, lambda sch: sch.transform(str.upper))
            .when_context({"mode": "create"}, lambda sch: sch.refine(lambda v: v == "ABC"))
        )
        assert schema.parse("abc", context={"mode": "create"}) == "ABC"
        assert schema.parse("xyz") == "xyz"

    def test_ambient_context(self):
        schema = s.string().when_context("strict", lambda sch: sch.min(3))
        with validation_context("strict"):
            assert current_context() == "strict"
            assert schema.safe_parse("ab").is_err()
        assert current_context() is None
        assert schema.safe_parse("ab").is_ok()

    def test_explicit_context_wins(self):
        schema = s.string().when_context("strict", lambda sch: sch.min(3))
        with validation_context("strict"):
            assert schema.safe_parse("ab", context="lenient").is_ok()

    def test_builder_must_return_schema(self):
        with pytest.raises(TypeError):
            s.string().when_context("x", lambda sch: None)


class TestRoles:
    @pytest.mark.parametrize(
        "context,roles",
        [
            (None, []),
            ("admin", ["admin"]),
            (["admin", "editor", 3], ["admin", "editor"]),
            ({"role": "admin"}, ["admin"]),
            ({"roles": ["a", "b"]}, ["a", "b"]),
            ({"user": {"role": "admin"}}, ["admin"]),
            ({"user": {"roles": ["x"]}}, ["x"]),
            ({"other": 1}, []),
        ],
    )
    def test_extract_roles(self, context, roles):
        assert extract_roles(context) == roles

    def test_requirements(self):
        assert has_permission("admin", {"role": "admin"})
        assert has_permission(["admin", "owner"], "owner")
        assert not has_permission(["admin", "owner"], "guest")
        condition = PermissionCondition(role="admin", check=lambda ctx: ctx.get("mfa"))
        assert has_permission(condition, {"role": "admin", "mfa": True})
        assert not has_permission(condition, {"role": "admin"})
        assert has_permission(PermissionCondition(check=lambda ctx: True), None)


class TestRestricted:
    def test_denied(self):
        schema = s.string().restrict("admin")
        [issue] = schema.safe_parse("x", context={"role": "user"}).error.issues
        assert issue.code == "permission.denied"
        assert issue.message == "Access denied: insufficient permissions"

    def test_allowed(self):
        assert s.string().restrict("admin").parse("x", context="admin") == "x"

    def test_condition_message(self):
        schema = s.restrict(s.number(), PermissionCondition(role="admin", message="Admins only"))
        assert schema.safe_parse(1).error.issues[0].message == "Admins only"

    def test_field_level_deny(self):
        schema = s.object({"name": s.string(), "salary": s.number().restrict("admin")})
        result = schema.safe_parse({"name": "a", "salary": 1}, context="user")
        assert result.error.issues[0].path == ("salary",)

    def test_raising_condition_check(self):
        condition = PermissionCondition(check=lambda ctx: ctx["missing"])
        result = s.string().restrict(condition).safe_parse("x", context={"role": "a"})
        [issue] = result.error.issues
        assert issue.code == "permission.check_failed"

    def test_raising_field_check(self):
        condition = PermissionCondition(check=lambda ctx: ctx["missing"])
        schema = s.object({"a": s.string()}).with_permissions().restrict_field("a", condition)
        result = schema.safe_parse({"a": "x"}, context={"role": "a"})
        assert result.error.codes() == ["permission.check_failed"]


class TestPermissionAware:
    @pytest.fixture
    def employee(self):
        return (
            s.object({"name": s.string(), "salary": s.number().optional()})
            .with_permissions()
            .restrict_field("salary", "admin")
        )

    def test_omits_restricted_fields(self, employee):
        data = {"name": "Ada", "salary": 10}
        assert employee.parse(data, context={"user": {"role": "admin"}}) == data
        assert employee.parse(data, context={"user": {"role": "staff"}}) == {"name": "Ada"}

    def test_no_context_omits_restricted_fields(self, employee):
        assert employee.parse({"name": "Ada", "salary": 10}) == {"name": "Ada"}

    def test_validation_still_applies(self, employee):
        assert employee.safe_parse({"salary": 1}, context="admin").is_err()

    def test_apply_permissions(self, employee):
        assert employee.apply_permissions({"name": "a", "salary": 1, "x": 2}, "guest") == {
            "name": "a",
            "x": 2,
        }

    def test_with_permissions_is_idempotent(self, employee):
        assert s.with_permissions(employee) is employee

    def test_partial_keeps_restrictions(self, employee):
        assert employee.partial().parse({"salary": 1}, context="guest") == {}

"""
Tests for union, discriminated union, intersection and lazy schemas.
"""

import pytest

from contour import MISSING, LazySchema, s


class TestUnion:
    def test_first_success_wins(self):
        schema = s.union([s.string(), s.number()])
        assert schema.parse("a") == "a"
        assert schema.parse(1) == 1

    def test_total_failure(self):
        schema = s.union([s.string(), s.number()])
        result = schema.safe_parse(True)
        assert result.error.codes() == ["union.no_match", "type_mismatch", "type_mismatch"]

    def test_operator(self):
        schema = s.string() | s.number() | s.null()
        assert len(schema.members) == 3
        assert schema.parse(None) is None

    def test_abort_early(self):
        result = s.union([s.string(), s.number()]).safe_parse(True, abort_early=True)
        assert result.error.codes() == ["union.no_match"]

    def test_empty(self):
        with pytest.raises(ValueError):
            s.union([])

    def test_optional_member_accepts_missing(self):
        schema = s.object({"v": s.union([s.string(), s.null().optional()])})
        assert schema.parse({}) == {}


@pytest.fixture
def shapes():
    circle = s.object({"kind": s.literal("circle"), "radius": s.number()})
    square = s.object({"kind": s.literal("square"), "side": s.number()})
    return s.discriminated_union("kind", [circle, square])


class TestDiscriminatedUnion:
    def test_match(self, shapes):
        assert shapes.parse({"kind": "square", "side": 2}) == {"kind": "square", "side": 2}

    def test_missing_discriminator(self, shapes):
        result = shapes.safe_parse({"radius": 1})
        assert result.error.codes() == ["union.discriminator_missing"]
        assert result.error.issues[0].path == ("kind",)

    def test_no_match(self, shapes):
        result = shapes.safe_parse({"kind": "triangle"})
        assert result.error.codes()[0] == "union.no_discriminator_match"
        assert result.error.issues[0].params == {"discriminator": "kind", "value": "triangle"}

    def test_non_mapping(self, shapes):
        assert shapes.safe_parse("circle").error.codes() == ["type_mismatch"]

    def test_member_rewriting_discriminator_is_skipped(self):
        loose = s.object({"kind": s.string()}).transform(lambda v: {**v, "kind": "other"})
        exact = s.object({"kind": s.literal("a"), "n": s.number().default(0)})
        schema = s.discriminated_union("kind", [loose, exact])
        assert schema.parse({"kind": "a"}) == {"kind": "a", "n": 0}

    def test_empty_discriminator(self):
        with pytest.raises(ValueError):
            s.discriminated_union("", [s.object({})])


class TestIntersection:
    def test_merges_outputs(self):
        schema = s.object({"a": s.string()}) & s.object({"b": s.number()})
        assert schema.parse({"a": "x", "b": 1}) == {"a": "x", "b": 1}

    def test_later_member_wins(self):
        first = s.object({"a": s.string()})
        second = s.object({"a": s.string().transform(str.upper)})
        assert s.intersection(first, second).parse({"a": "x"}) == {"a": "X"}

    def test_collects_issues(self):
        schema = s.intersection(s.object({"a": s.string()}), s.object({"b": s.number()}))
        result = schema.safe_parse({})
        assert [i.path for i in result.error.issues] == [("a",), ("b",)]
        result = schema.safe_parse({}, abort_early=True)
        assert [i.path for i in result.error.issues] == [("a",)]

    def test_scalar_outputs(self):
        schema = s.number().min(0) & s.number().max(10)
        assert schema.parse(5) == 5
        assert schema.safe_parse(11).error.codes() == ["number.max"]


class TestLazy:
    def test_recursive(self):
        category = s.lazy(
            lambda: s.object(
                {"name": s.string(), "children": s.array(category).optional()}
            )
        )
        tree = {"name": "root", "children": [{"name": "leaf", "children": []}]}
        assert category.parse(tree) == tree
        result = category.safe_parse({"name": "root", "children": [{"name": 1}]})
        assert result.error.issues[0].path == ("children", "0", "name")

    def test_factory_called_once(self):
        calls = []

        def factory():
            calls.append(1)
            return s.string()

        schema = s.lazy(factory)
        schema.parse("a")
        schema.parse("b")
        assert len(calls) == 1

    def test_failing_factory(self):
        def factory():
            raise NameError("not defined yet")

        result = s.lazy(factory).safe_parse("x")
        [issue] = result.error.issues
        assert issue.code == "lazy.evaluation_error"

    def test_failing_factory_with_declared_default(self):
        def factory():
            raise NameError("not defined yet")

        schema = s.lazy(factory, default=[])
        assert schema.parse(MISSING) == []
        assert s.object({"items": schema}).parse({}) == {"items": []}

    def test_non_schema_factory(self):
        assert s.lazy(lambda: 5).safe_parse(1).error.codes() == ["lazy.evaluation_error"]
        with pytest.raises(TypeError):
            LazySchema(5)

    def test_partial(self):
        schema = s.lazy(lambda: s.object({"a": s.string()}))
        assert schema.partial().parse({}) == {}

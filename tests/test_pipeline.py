"""
Tests for preprocess, refine, transform and postprocess stages.
"""

from contour import Err, Issue, Ok, ValidationError, s


class TestPreprocess:
    def test_runs_before_validation(self):
        schema = s.number().preprocess(lambda v: float(v) if isinstance(v, str) else v)
        assert schema.parse("2.5") == 2.5

    def test_base_failures_surface(self):
        schema = s.preprocess(str.strip, s.string().min(3))
        assert schema.safe_parse("  a ").error.codes() == ["string.min_length"]

    def test_raising_preprocessor(self):
        schema = s.number().preprocess(int)
        result = schema.safe_parse("abc")
        assert result.error.codes() == ["process.preprocess_failed"]


class TestRefine:
    def test_predicate(self):
        schema = s.string().refine(lambda v: v.startswith("a"), "Must start with a")
        assert schema.parse("abc") == "abc"
        [issue] = schema.safe_parse("bcd").error.issues
        assert issue.code == "custom"
        assert issue.message == "Must start with a"

    def test_message_from_value(self):
        schema = s.number().refine(lambda v: v < 10, lambda v: f"{v} is too big")
        assert schema.safe_parse(12).error.issues[0].message == "12 is too big"

    def test_base_runs_first(self):
        calls = []
        schema = s.number().refine(lambda v: calls.append(v) or True)
        assert schema.safe_parse("x").error.codes() == ["type_mismatch"]
        assert calls == []

    def test_raising_predicate(self):
        schema = s.object({"n": s.number().refine(lambda v: 1 / v > 0)})
        result = schema.safe_parse({"n": 0})
        assert result.error.codes() == ["refine.failed"]
        assert result.error.issues[0].path == ("n",)

    def test_password_confirmation(self):
        schema = s.object({"password": s.string(), "confirm": s.string()}).refine(
            lambda v: v["password"] == v["confirm"], "Passwords do not match"
        )
        assert schema.safe_parse({"password": "a", "confirm": "b"}).is_err()

    def test_raising_message_function(self):
        schema = s.number().refine(lambda v: False, lambda v: v["x"])
        [issue] = schema.safe_parse(1).error.issues
        assert issue.code == "refine.failed"

    def test_partial_weakens_base(self):
        schema = s.object({"a": s.string()}).refine(lambda v: True).partial()
        assert schema.parse({}) == {}

    def test_partial_skips_predicate_for_absent_field(self):
        schema = s.object({"n": s.number().refine(lambda v: v > 0)}).partial()
        assert schema.parse({}) == {}
        assert schema.safe_parse({"n": -1}).error.codes() == ["custom"]


class TestTransform:
    def test_bare_value_wrapped(self):
        assert s.string().transform(len).parse("abc") == 3

    def test_result_propagated(self):
        schema = s.string().transform(
            lambda v: Ok(v.upper()) if v else Err(ValidationError.from_message("empty"))
        )
        assert schema.parse("a") == "A"
        assert schema.safe_parse("").error.codes() == ["invalid_value"]

    def test_nan_rejected(self):
        schema = s.string().transform(float)
        assert schema.parse("1.5") == 1.5
        assert schema.safe_parse("nan").error.codes() == ["transform.invalid_number"]

    def test_raising_transform(self):
        schema = s.string().transform(int)
        assert schema.safe_parse("x").error.codes() == ["transform.failed"]

    def test_skipped_on_base_failure(self):
        schema = s.string().transform(int)
        assert schema.safe_parse(1).error.codes() == ["type_mismatch"]

    def test_reverse(self):
        cents = s.number().int().transform(lambda v: v / 100, reverse=lambda v: round(v * 100))
        assert cents.parse(250) == 2.5
        assert cents.reverse(2.5) == Ok(250)

    def test_reverse_revalidates(self):
        schema = s.transform(s.number().positive(), lambda v: -v, reverse=lambda v: -v)
        assert schema.reverse(5).error.codes() == ["number.positive"]

    def test_no_reverse(self):
        result = s.string().transform(str.upper).reverse("A")
        assert result.error.codes() == ["transform.no_reverse"]

    def test_partial_nested_object(self):
        inner = s.object({"x": s.string()}).transform(lambda v: v)
        schema = s.object({"inner": inner}).partial()
        assert schema.parse({"inner": {}}) == {"inner": {}}

    def test_abort_early_keeps_first_returned_issue(self):
        two = ValidationError(
            [Issue(("a",), "first", "custom"), Issue(("b",), "second", "custom")]
        )
        schema = s.object({"f": s.any().transform(lambda v: Err(two))})
        assert len(schema.safe_parse({"f": 1}).error.issues) == 2
        [issue] = schema.safe_parse({"f": 1}, abort_early=True).error.issues
        assert issue.path == ("f", "a")


class TestPostprocess:
    def test_augments_value(self):
        schema = s.object({"first": s.string(), "last": s.string()}).postprocess(
            lambda v: {**v, "full": f"{v['first']} {v['last']}"}
        )
        assert schema.parse({"first": "Ada", "last": "Lovelace"})["full"] == "Ada Lovelace"

    def test_raising_postprocessor(self):
        schema = s.postprocess(s.object({}), lambda v: v["missing"])
        assert schema.safe_parse({}).error.codes() == ["process.postprocess_failed"]

    def test_skipped_on_base_failure(self):
        schema = s.string().postprocess(str.upper)
        assert schema.safe_parse(None).error.codes() == ["type_mismatch"]


class TestMetadata:
    def test_validation_unchanged(self):
        schema = s.string().min(2).describe("User name").example("ada")
        assert schema.parse("ab") == "ab"
        assert schema.safe_parse("a").is_err()

    def test_chained_metadata_merges(self):
        schema = (
            s.string()
            .describe("Name")
            .example("a")
            .example("b")
            .deprecated("Use full_name")
            .meta("x-internal", True)
            .set_version(2)
        )
        assert schema.metadata == {
            "description": "Name",
            "examples": ["a", "b"],
            "deprecated": True,
            "deprecation_message": "Use full_name",
            "x-internal": True,
            "version": 2,
        }

    def test_metadata_is_a_copy(self):
        schema = s.string().describe("Name")
        schema.metadata["description"] = "changed"
        assert schema.metadata["description"] == "Name"

    def test_mark_deprecated(self):
        schema = s.with_metadata(s.object({"a": s.string()})).mark_deprecated("a").mark_deprecated("b")
        assert schema.metadata["deprecated_fields"] == ["a", "b"]

    def test_mark_deprecated_keeps_flag(self):
        schema = s.string().deprecated().mark_deprecated("a")
        assert schema.metadata["deprecated"] is True
        assert schema.metadata["deprecated_fields"] == ["a"]

    def test_describe_constraints(self):
        info = s.string().min(1).describe("Name").describe_constraints()
        assert info == {"type": "string", "min_length": 1, "description": "Name"}

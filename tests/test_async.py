"""
Tests for asynchronous validation.
"""

import asyncio

import pytest

from contour import Err, Ok, ValidationError, s

TAKEN = {"taken@example.com"}


async def is_unused(email):
    await asyncio.sleep(0)
    return email not in TAKEN


class TestAsyncSchema:
    def test_bool_result(self):
        schema = s.string().email().async_validate(is_unused, "Email already registered")
        assert asyncio.run(schema.parse_async("new@example.com")) == "new@example.com"

        result = asyncio.run(schema.safe_parse_async("taken@example.com"))
        [issue] = result.error.issues
        assert issue.code == "async.failed"
        assert issue.message == "Email already registered"

    def test_base_check_first(self):
        calls = []

        async def check(value):
            calls.append(value)
            return True

        schema = s.string().email().async_validate(check)
        result = asyncio.run(schema.safe_parse_async("nope"))
        assert result.error.codes() == ["string.email"]
        assert calls == []

    def test_result_and_none(self):
        async def upper(value):
            return Ok(value.upper())

        async def silent(value):
            return None

        async def reject(value):
            return Err(ValidationError.from_message("rejected"))

        assert asyncio.run(s.string().async_validate(upper).parse_async("a")) == "A"
        assert asyncio.run(s.string().async_validate(silent).parse_async("a")) == "a"
        result = asyncio.run(s.string().async_validate(reject).safe_parse_async("a"))
        assert result.error.codes() == ["invalid_value"]

    def test_raising_validator(self):
        async def broken(value):
            raise ConnectionError("database down")

        result = asyncio.run(s.string().async_validate(broken).safe_parse_async("a"))
        [issue] = result.error.issues
        assert issue.code == "async.error"
        assert "database down" in issue.message

    def test_sync_parse_runs_base_only(self):
        schema = s.string().email().async_validate(is_unused)
        assert schema.parse("taken@example.com") == "taken@example.com"
        assert schema.safe_parse("bad").error.codes() == ["string.email"]

    def test_nested_in_object(self):
        schema = s.object(
            {
                "email": s.string().email().async_validate(is_unused),
                "name": s.string(),
            }
        )
        result = asyncio.run(schema.safe_parse_async({"email": "taken@example.com", "name": 1}))
        assert [(i.path, i.code) for i in result.error.issues] == [
            (("email",), "async.failed"),
            (("name",), "type_mismatch"),
        ]

    def test_sync_validator_function(self):
        schema = s.async_validate(s.number(), lambda v: v > 0)
        assert asyncio.run(schema.safe_parse_async(-1)).error.codes() == ["async.failed"]

    def test_parse_async_raises(self):
        schema = s.string().async_validate(is_unused)
        with pytest.raises(ValidationError):
            asyncio.run(schema.parse_async("taken@example.com"))


class TestAsyncCallbacks:
    def test_async_refine(self):
        async def check(value):
            return value > 0

        schema = s.number().refine(check, "Must be positive")
        assert asyncio.run(schema.parse_async(1)) == 1
        result = asyncio.run(schema.safe_parse_async(-1))
        assert result.error.issues[0].message == "Must be positive"

    def test_async_callback_in_sync_parse(self):
        async def check(value):
            return True

        result = s.number().refine(check).safe_parse(1)
        assert result.error.codes() == ["async.required"]

    def test_async_transform(self):
        async def double(value):
            await asyncio.sleep(0)
            return value * 2

        schema = s.array(s.number().transform(double))
        assert asyncio.run(schema.parse_async([1, 2])) == [2, 4]

    def test_sync_schemas_work_async(self):
        schema = s.object({"a": s.union([s.string(), s.number()])})
        assert asyncio.run(schema.parse_async({"a": 1})) == {"a": 1}

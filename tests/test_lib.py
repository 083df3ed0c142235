"""Tests for dotted-path helpers."""

import pytest

from contour.lib import get_path, split_path


def test_get_path_basic():
    data = {
        "patient": {
            "id": "123",
            "name": {"given": "John", "family": "Doe"},
            "contact": [
                {"system": "phone", "value": "555-1234"},
                {"system": "email", "value": "john@example.com"},
            ],
        }
    }

    assert get_path(data, "patient.id") == "123"
    assert get_path(data, "patient.name.given") == "John"
    assert get_path(data, "patient.contact[0].value") == "555-1234"
    assert get_path(data, "patient.contact[-1].system") == "email"


def test_get_path_missing():
    data = {"a": {"b": [1]}}

    assert get_path(data, "a.c") is None
    assert get_path(data, "a.b[3]", default=0) == 0
    assert get_path(data, "a.b.c") is None
    assert get_path(data, "a.b[0].x") is None


def test_get_path_strict():
    data = {"a": {"b": [1]}}

    with pytest.raises(KeyError):
        get_path(data, "a.c", strict=True)
    with pytest.raises(IndexError):
        get_path(data, "a.b[3]", strict=True)
    with pytest.raises(TypeError):
        get_path(data, "a[0]", strict=True)


def test_split_path():
    assert split_path("a.b[2].c") == ["a", "b", 2, "c"]
    assert split_path("[0].name") == [0, "name"]

    for bad in ("", ".a", "a..b", "a[x]"):
        with pytest.raises(ValueError):
            split_path(bad)

"""
Tests for Versioned history.
"""

import pytest

from contour import HistoryError, ValidationError, Versioned, create_versioned, s

DOC = s.object({"title": s.string().min(1), "tags": s.array(s.string())})


@pytest.fixture
def doc():
    return create_versioned(DOC, {"title": "draft", "tags": []})


class TestVersioned:
    def test_initial_data_validated(self):
        with pytest.raises(ValidationError):
            create_versioned(DOC, {"title": ""})

    def test_transform_commits(self, doc):
        doc.transform(lambda d: d.update(title="v2"), label="rename")
        assert doc.current["title"] == "v2"
        assert [e.label for e in doc.history] == [None, "rename"]
        assert doc.history[-1].is_current

    def test_failed_transform_leaves_history(self, doc):
        with pytest.raises(ValidationError):
            doc.transform(lambda d: d.update(title=""))
        assert len(doc) == 1
        assert doc.current["title"] == "draft"

    def test_revert_redo_round_trip(self, doc):
        doc.transform(lambda d: d["tags"].append("a"))
        before = doc.current
        doc.revert(1)
        assert doc.current["tags"] == []
        doc.redo(1)
        assert doc.current == before

    def test_out_of_range(self, doc):
        with pytest.raises(HistoryError):
            doc.revert()
        with pytest.raises(HistoryError):
            doc.redo()
        with pytest.raises(ValueError):
            doc.revert(0)

    def test_branch_overwrite(self, doc):
        doc.transform(lambda d: d.update(title="b"))
        doc.transform(lambda d: d.update(title="c"))
        doc.revert(2)
        doc.transform(lambda d: d.update(title="x"))
        assert [e.data["title"] for e in doc.history] == ["draft", "x"]
        with pytest.raises(HistoryError):
            doc.redo()

    def test_snapshots_are_isolated(self, doc):
        current = doc.current
        current["tags"].append("mutated")
        assert doc.current["tags"] == []
        doc.history[0].data["tags"].append("mutated")
        assert doc.history[0].data["tags"] == []

    def test_max_versions(self):
        doc = Versioned(DOC, {"title": "0", "tags": []}, max_versions=3)
        for i in range(1, 6):
            doc.transform(lambda d, i=i: d.update(title=str(i)))
        assert [e.data["title"] for e in doc.history] == ["3", "4", "5"]
        assert doc.cursor == 2
        doc.revert(2)
        assert doc.current["title"] == "3"

    def test_manual_versioning(self):
        doc = Versioned(DOC, {"title": "a", "tags": []}, auto_version=False)
        doc.transform(lambda d: d.update(title="b"))
        assert len(doc) == 1
        assert doc.current["title"] == "b"
        doc.create_version({"title": "c", "tags": []}, label="explicit")
        assert len(doc) == 2

    def test_custom_clone(self):
        clones = []

        def clone(value):
            clones.append(value)
            return {**value, "tags": list(value["tags"])}

        doc = Versioned(DOC, {"title": "a", "tags": []}, clone=clone)
        doc.current
        assert clones

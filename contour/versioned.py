"""
Undo/redo history of validated values.
"""

from __future__ import annotations

import copy
import logging
import time
from dataclasses import dataclass, replace
from typing import Any, Callable

from .errors import HistoryError
from .result import Err
from .schema import Schema

logger = logging.getLogger(__name__)

DEFAULT_MAX_VERSIONS = 10


@dataclass(frozen=True, slots=True)
class HistoryEntry:
    """One committed snapshot."""

    data: Any
    timestamp: float
    label: str | None = None
    is_current: bool = False


class Versioned:
    """
    A value validated by ``schema`` with an undo/redo history.

    Every commit stores a deep copy, so mutating a value obtained from
    ``current`` never alters history. Committing after a ``revert`` discards
    the entries that could have been redone. At most ``max_versions`` entries
    are kept, oldest dropped first.

    Example:
        doc = create_versioned(s.object({"title": s.string()}), {"title": "a"})
        doc.transform(lambda d: d.update(title="b"), label="rename")
        doc.revert()        # {"title": "a"}
        doc.redo()          # {"title": "b"}
    """

    def __init__(
        self,
        schema: Schema,
        data: Any,
        *,
        max_versions: int = DEFAULT_MAX_VERSIONS,
        auto_version: bool = True,
        clone: Callable[[Any], Any] = copy.deepcopy,
    ):
        if max_versions < 1:
            raise ValueError(f"max_versions must be at least 1, got {max_versions}")
        self._schema = schema
        self._max_versions = max_versions
        self._auto_version = auto_version
        self._clone = clone
        self._history: list[HistoryEntry] = []
        self._cursor = 0
        self._commit(data, None)

    @property
    def schema(self) -> Schema:
        return self._schema

    @property
    def current(self) -> Any:
        """Copy of the value at the cursor."""
        return self._clone(self._history[self._cursor].data)

    @property
    def history(self) -> list[HistoryEntry]:
        return [
            replace(entry, data=self._clone(entry.data), is_current=i == self._cursor)
            for i, entry in enumerate(self._history)
        ]

    @property
    def cursor(self) -> int:
        return self._cursor

    def transform(self, mutator: Callable[[Any], Any], label: str | None = None) -> Any:
        """
        Apply ``mutator`` in place to a copy of the current value and commit it.

        Raises:
            ValidationError: the mutated value is invalid; history is unchanged
        """
        draft = self._clone(self._history[self._cursor].data)
        mutator(draft)
        validated = self._validate(draft)

        if self._auto_version:
            self._commit(validated, label)
        else:
            entry = self._history[self._cursor]
            self._history[self._cursor] = replace(
                entry, data=self._clone(validated), timestamp=time.time()
            )
        return self.current

    def create_version(self, data: Any, label: str | None = None) -> Any:
        """Validate ``data`` and commit it as a new version."""
        self._commit(self._validate(data), label)
        return self.current

    def revert(self, steps: int = 1) -> Any:
        if steps <= 0:
            raise ValueError("Steps must be positive")
        target = self._cursor - steps
        if target < 0:
            raise HistoryError(
                f"Cannot revert {steps} step(s), only {self._cursor} earlier version(s) available"
            )
        logger.debug("Reverting history cursor %d -> %d", self._cursor, target)
        self._cursor = target
        return self.current

    def redo(self, steps: int = 1) -> Any:
        if steps <= 0:
            raise ValueError("Steps must be positive")
        target = self._cursor + steps
        if target >= len(self._history):
            available = len(self._history) - self._cursor - 1
            raise HistoryError(
                f"Cannot redo {steps} step(s), only {available} later version(s) available"
            )
        logger.debug("Redoing history cursor %d -> %d", self._cursor, target)
        self._cursor = target
        return self.current

    def _validate(self, data: Any) -> Any:
        result = self._schema.safe_parse(data)
        if isinstance(result, Err):
            raise result.error
        return result.value

    def _commit(self, data: Any, label: str | None) -> None:
        del self._history[self._cursor + 1 :]
        self._history.append(HistoryEntry(self._clone(data), time.time(), label))
        self._cursor = len(self._history) - 1

        excess = len(self._history) - self._max_versions
        if excess > 0:
            del self._history[:excess]
            self._cursor = max(0, self._cursor - excess)
        logger.debug("Committed version %d (%s)", self._cursor, label or "unlabeled")

    def __len__(self) -> int:
        return len(self._history)

    def __repr__(self) -> str:
        return f"Versioned(cursor={self._cursor}, versions={len(self._history)})"


def create_versioned(schema: Schema, data: Any, **options: Any) -> Versioned:
    """
    Validate ``data`` against ``schema`` and start a history from the result.

    Raises:
        ValidationError: the initial data is invalid
    """
    result = schema.safe_parse(data)
    if isinstance(result, Err):
        raise result.error
    return Versioned(schema, result.value, **options)

"""
Dotted-path lookup used by bidirectional mappings.

Supports:
- Simple keys: "user.profile.name"
- List indices: "items[0]", "items[-1]"
"""

import re
from collections.abc import Mapping, Sequence
from typing import Any

_SEGMENT = re.compile(r"([^.\[\]]+)|\[(-?\d+)\]")


def split_path(path: str) -> list[str | int]:
    """
    Split a path into key and index segments.

    Raises:
        ValueError: empty path or characters outside the path grammar
    """
    if not path:
        raise ValueError("Empty path")

    segments: list[str | int] = []
    pos = 0
    while pos < len(path):
        if path[pos] == "." and segments:
            pos += 1
        match = _SEGMENT.match(path, pos)
        if match is None:
            raise ValueError(f"Invalid path syntax: {path}")
        key, index = match.groups()
        segments.append(int(index) if index is not None else key)
        pos = match.end()
    return segments


def get_path(data: Any, path: str, default: Any = None, strict: bool = False) -> Any:
    """
    Value at ``path`` inside nested mappings and lists.

    Returns ``default`` when a key or index is absent, unless ``strict``,
    in which case the KeyError/IndexError/TypeError propagates.

    Examples:
        get_path(d, "user.name")       # nested access
        get_path(d, "items[0].id")     # list index
        get_path(d, "items[-1]")       # negative index
    """
    current = data
    for segment in split_path(path):
        if isinstance(segment, int):
            if not isinstance(current, Sequence) or isinstance(current, (str, bytes)):
                if strict:
                    raise TypeError(f"Expected list at '{segment}' in {path!r}")
                return default
            try:
                current = current[segment]
            except IndexError:
                if strict:
                    raise
                return default
        else:
            if not isinstance(current, Mapping):
                if strict:
                    raise TypeError(f"Expected mapping at '{segment}' in {path!r}")
                return default
            if segment not in current:
                if strict:
                    raise KeyError(f"Key '{segment}' not found")
                return default
            current = current[segment]
    return current

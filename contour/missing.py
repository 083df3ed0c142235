"""
MISSING sentinel marking an absent value.
"""

from enum import Enum
from typing import Any


class Missing(Enum):
    """
    Sentinel for a value that is absent, as opposed to present and ``None``.

    Object schemas pass MISSING to a field schema when the key is not in the
    input, which is how optional and defaulted fields tell "not given" apart
    from an explicit null.

    Examples:
        s.string().optional().parse(MISSING)     # -> MISSING
        s.string().default("x").parse(MISSING)   # -> "x"
        s.string().parse(MISSING)                # ValidationError
    """

    MISSING = "MISSING"

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING = Missing.MISSING


def is_missing(value: Any) -> bool:
    """Check if a value is the MISSING sentinel."""
    return value is MISSING

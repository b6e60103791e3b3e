"""
Predicates for untrusted JSON-shaped input.

Save files and content packs arrive as parsed JSON, so every consumer
needs the same small set of shape checks. Booleans are never numbers
here, matching how the data is authored.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from typing import Any


def is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def is_finite_number(value: Any) -> bool:
    """True for numbers that fit a float and are neither NaN nor infinite."""
    if not is_number(value):
        return False
    try:
        return math.isfinite(value)
    except OverflowError:
        # JSON integers too large for a float
        return False


def is_integer(value: Any) -> bool:
    """True for ints and integral floats (1.0), never for bools."""
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return True
    return isinstance(value, float) and value.is_integer()


def is_non_empty_string(value: Any) -> bool:
    return isinstance(value, str) and value.strip() != ""


def is_plain_object(value: Any) -> bool:
    return isinstance(value, Mapping)


def finite_or(value: Any, default: float) -> float:
    """Return value when it is a finite number, else default."""
    return value if is_finite_number(value) else default

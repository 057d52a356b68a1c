"""Lenient coercion of client-supplied JSON values.

Clients are browsers, so numbers can arrive as ints, floats, numeric strings
or booleans. Everything is funnelled through :func:`to_number`, which mirrors
how a browser's ``Number()`` would read the value, and returns ``nan`` for
anything it cannot interpret.
"""
from __future__ import annotations

import math
from typing import Any, Optional


def to_number(value: Any) -> float:
    if value is None:
        # JSON null reads as 0; callers pass nan for absent keys
        return 0.0
    if isinstance(value, bool):
        return 1.0 if value else 0.0
    if isinstance(value, (int, float)):
        try:
            return float(value)
        except OverflowError:
            # JSON integers can exceed the float range; read them as infinite.
            return math.copysign(math.inf, value)
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return 0.0
        if "_" in text:
            return math.nan
        try:
            return float(text)
        except ValueError:
            return math.nan
    return math.nan


def to_int(value: Any) -> Optional[int]:
    """Return *value* as an ``int`` only if it is an exact finite integer."""
    number = to_number(value)
    if not math.isfinite(number) or not number.is_integer():
        return None
    return int(number)


__all__ = ["to_number", "to_int"]

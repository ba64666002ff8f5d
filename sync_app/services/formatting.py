"""Value coercion and display helpers shared by prompts, charts and exports."""
from __future__ import annotations

import math
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

_ORDINAL_WORDS = (
    "first", "second", "third", "fourth", "fifth",
    "sixth", "seventh", "eighth", "ninth", "tenth",
)


def to_number(value: Any) -> float:
    """Coerce a stored or client-supplied value to a float.

    Numeric strings are parsed; ``None``, blanks, booleans and anything
    unparseable count as ``0.0``.
    """
    if isinstance(value, bool) or value is None:
        return 0.0
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return 0.0
    else:
        return 0.0
    if math.isnan(number) or math.isinf(number):
        return 0.0
    return number


def format_value(value: Any, missing: str = "Unknown") -> str:
    """Render a record field for text output.

    Integral floats drop their fractional part so ``80.0`` reads ``80``.
    """
    if value is None:
        return missing
    if isinstance(value, bool):
        return str(value).lower()
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return str(value)


def round_half_up(value: float, places: int = 1) -> Decimal:
    """Round ties away from zero on the decimal value: ``50.25`` gives ``50.3``."""
    return Decimal(str(value)).quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP)


def ordinal(position: int) -> str:
    """``3`` -> ``"third"``; past ten, ``21`` -> ``"21st"``."""
    if 1 <= position <= len(_ORDINAL_WORDS):
        return _ORDINAL_WORDS[position - 1]
    if 10 <= position % 100 <= 20:
        suffix = "th"
    else:
        suffix = {1: "st", 2: "nd", 3: "rd"}.get(position % 10, "th")
    return f"{position}{suffix}"

"""Permissive number parsing for spreadsheet cells and client-written documents."""

import math
from typing import Any, Optional, Union

Number = Union[int, float]


def parse_number(value: Any) -> Optional[Number]:
    """Numbers pass through, strings may use a decimal comma; anything else is None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = value
    else:
        text = str(value).strip()
        if not text:
            return None
        try:
            number = float(text.replace(",", ".", 1))
        except ValueError:
            return None
    if not math.isfinite(number):
        return None
    if isinstance(number, float) and number.is_integer():
        return int(number)
    return number


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def format_percent(numerator: Number, denominator: Optional[Number]) -> str:
    """round(n/d*100)% or an em-dash when there is nothing to divide by."""
    if not denominator or denominator <= 0:
        return "—"
    return f"{round_half_up(numerator / denominator * 100)}%"

"""
triple_tracker/analytics/normalizer.py
Canonical card-rank tokens and draw-number coercion for raw table cells.
"""
from __future__ import annotations

import math
from typing import Any

# Hebrew letters and geresh/gershayim spellings used for the picture ranks
RANK_SYNONYMS: dict[str, str] = {
    "ט": "10",
    "10": "10",
    "J": "J",
    "ג": "J",
    "ג׳": "J",
    'ג"': "J",
    "Q": "Q",
    "ק": "Q",
    "ק׳": "Q",
    "K": "K",
    "כ": "K",
    "כ׳": "K",
    "A": "A",
    "א": "A",
}


def _cell_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value).strip()


def normalize_value(value: Any) -> str:
    """Return the canonical uppercase rank for a card cell, or '' when blank."""
    token = _cell_text(value).upper()
    if not token:
        return ""
    return RANK_SYNONYMS.get(token, token)


def parse_draw_number(value: Any) -> int | float | None:
    """
    Trim and numeric-coerce a draw-number cell.
    Returns None for blank or non-numeric values.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = value
    else:
        text = _cell_text(value)
        if not text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
    if not math.isfinite(number):
        return None
    if isinstance(number, float) and number.is_integer():
        return int(number)
    return number


def draw_label(value: Any) -> str:
    """Draw number as displayed: the trimmed raw cell text."""
    return _cell_text(value)

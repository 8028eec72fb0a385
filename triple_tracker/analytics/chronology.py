"""
triple_tracker/analytics/chronology.py
Decide whether a draw table is oldest-first or newest-first and
return it oldest-first.
"""
from __future__ import annotations

import math
import re
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from typing import Any, Mapping, Sequence

from triple_tracker.analytics.normalizer import parse_draw_number
from triple_tracker.utils.config import COL_DATE, COL_DRAW

# Spreadsheet serial day 0
SERIAL_EPOCH = datetime(1899, 12, 30)

_DMY_RE = re.compile(r"^\s*(\d{1,2})[./-](\d{1,2})[./-](\d{2,4})\s*$")
_FALLBACK_FORMATS = ("%Y-%m-%d %H:%M:%S", "%Y/%m/%d", "%d %b %Y", "%d %B %Y", "%b %d %Y", "%B %d %Y")

METHOD_NONE = "none"
METHOD_DATE = "date"
METHOD_DRAW = "draw-number"
METHOD_UNKNOWN = "unknown"


@dataclass(frozen=True)
class ChronologyResult:
    rows: list[Mapping[str, Any]]
    was_reversed: bool
    method: str


def _naive(d: datetime) -> datetime:
    if d.tzinfo is not None:
        return d.astimezone(timezone.utc).replace(tzinfo=None)
    return d


def _parse_text(text: str) -> datetime | None:
    m = _DMY_RE.match(text)
    if m:
        dd, mm, yy = int(m.group(1)), int(m.group(2)), int(m.group(3))
        if yy < 100:
            yy += 2000
        try:
            return datetime(yy, mm, dd)
        except ValueError:
            return None

    try:
        return _naive(datetime.fromisoformat(text))
    except ValueError:
        pass
    for fmt in _FALLBACK_FORMATS:
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue
    return None


def parse_date_safe(value: Any) -> datetime | None:
    """
    Best-effort date parsing.
    Accepts date/datetime objects, spreadsheet serial numbers and D/M/YY-style
    text. Anything unparsable yields None.
    """
    if isinstance(value, datetime):
        return _naive(value)
    if isinstance(value, date):
        return datetime.combine(value, datetime.min.time())
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        if not math.isfinite(value):
            return None
        try:
            return SERIAL_EPOCH + timedelta(days=value)
        except OverflowError:
            return None
    text = "" if value is None else str(value).strip()
    if not text:
        return None
    return _parse_text(text)


def resolve_chronology(
    rows: Sequence[Mapping[str, Any]],
    date_field: str = COL_DATE,
    draw_field: str = COL_DRAW,
) -> ChronologyResult:
    """
    Return rows oldest-first.
    Dates of the first and last row decide; draw numbers are the fallback.
    When neither is usable the input order is kept with method 'unknown'.
    """
    rows = list(rows)
    if len(rows) < 2:
        return ChronologyResult(rows, False, METHOD_NONE)

    first, last = rows[0], rows[-1]

    d_first = parse_date_safe(first.get(date_field))
    d_last = parse_date_safe(last.get(date_field))
    if d_first is not None and d_last is not None:
        if d_first > d_last:
            return ChronologyResult(rows[::-1], True, METHOD_DATE)
        return ChronologyResult(rows, False, METHOD_DATE)

    n_first = parse_draw_number(first.get(draw_field))
    n_last = parse_draw_number(last.get(draw_field))
    if n_first is not None and n_last is not None:
        if n_first > n_last:
            return ChronologyResult(rows[::-1], True, METHOD_DRAW)
        return ChronologyResult(rows, False, METHOD_DRAW)

    return ChronologyResult(rows, False, METHOD_UNKNOWN)

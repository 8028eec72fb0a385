"""
triple_tracker/analytics/event_detector.py
Find draws where at least three of the four suit columns show the same rank.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Sequence

from triple_tracker.analytics.normalizer import draw_label, normalize_value, parse_draw_number
from triple_tracker.utils.config import COL_DATE, COL_DRAW, SUIT_COLUMNS

MIN_MATCH = 3


@dataclass(frozen=True)
class TripleMatch:
    value: str
    size: int
    match_columns: tuple[str, ...]
    missing_columns: tuple[str, ...]
    suits: dict[str, str]


@dataclass(frozen=True)
class TripleEvent:
    """A qualifying draw. `idx` is its position in the oldest-first table."""

    idx: int
    draw: str
    draw_number: int | float | None
    date: Any
    value: str
    size: int
    match_columns: tuple[str, ...]
    missing_columns: tuple[str, ...]
    suits: dict[str, str]

    @property
    def is_quad(self) -> bool:
        return self.size == 4


def detect_triple(row: Mapping[str, Any], suit_columns: Sequence[str] = SUIT_COLUMNS) -> TripleMatch | None:
    """Return the 3- or 4-way match in a row, or None."""
    suits = {col: normalize_value(row.get(col)) for col in suit_columns}

    # Insertion order is column order, so a tie keeps the first-seen rank
    counts: dict[str, int] = {}
    for v in suits.values():
        if not v:
            continue
        counts[v] = counts.get(v, 0) + 1

    best_value, best_count = None, 0
    for v, c in counts.items():
        if c > best_count:
            best_value, best_count = v, c

    if best_value is None or best_count < MIN_MATCH:
        return None

    return TripleMatch(
        value=best_value,
        size=best_count,
        match_columns=tuple(col for col, v in suits.items() if v == best_value),
        missing_columns=tuple(col for col, v in suits.items() if v != best_value),
        suits=suits,
    )


def compute_events(
    rows_old_to_new: Sequence[Mapping[str, Any]],
    suit_columns: Sequence[str] = SUIT_COLUMNS,
    draw_field: str = COL_DRAW,
    date_field: str = COL_DATE,
) -> list[TripleEvent]:
    """Scan oldest-first rows and return events in ascending idx order."""
    events: list[TripleEvent] = []
    for idx, row in enumerate(rows_old_to_new):
        match = detect_triple(row, suit_columns)
        if match is None:
            continue
        raw_draw = row.get(draw_field)
        events.append(TripleEvent(
            idx=idx,
            draw=draw_label(raw_draw),
            draw_number=parse_draw_number(raw_draw),
            date=row.get(date_field),
            value=match.value,
            size=match.size,
            match_columns=match.match_columns,
            missing_columns=match.missing_columns,
            suits=match.suits,
        ))
    return events

"""
triple_tracker/analytics/gap_analyzer.py
Draw-count gaps between consecutive triple events, and the current lag.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from triple_tracker.analytics.event_detector import TripleEvent


@dataclass(frozen=True)
class Gap:
    from_event: TripleEvent
    to_event: TripleEvent
    distance: int


def compute_gaps(events: Sequence[TripleEvent]) -> list[Gap]:
    """One gap per consecutive event pair; empty for fewer than two events."""
    return [
        Gap(from_event=prev, to_event=cur, distance=cur.idx - prev.idx)
        for prev, cur in zip(events, events[1:])
    ]


def max_gap(gaps: Sequence[Gap]) -> int | None:
    return max((g.distance for g in gaps), default=None)


def gaps_over(gaps: Sequence[Gap], threshold: int) -> list[Gap]:
    """Gaps strictly longer than `threshold` draws."""
    return [g for g in gaps if g.distance > threshold]


def current_lag(total_rows: int, events: Sequence[TripleEvent]) -> int:
    """
    Draws since the latest event, measured to the last row.
    With no event at all the whole table counts.
    """
    if not events:
        return total_rows
    return (total_rows - 1) - events[-1].idx

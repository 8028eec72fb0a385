"""
triple_tracker/analytics/window_rate.py
Event density over trailing windows, the whole-file baseline, and the
faster/slower classification between them.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Sequence

from triple_tracker.analytics.event_detector import TripleEvent

FASTER = "faster than baseline"
SLOWER = "slower than baseline"
MATCHES = "matches baseline"
UNAVAILABLE = "unavailable"


@dataclass(frozen=True)
class WindowRate:
    window: int
    draws: int
    triples: int
    every: float | None  # draws per event; None when the window holds no event


def window_start(total_rows: int, window: int) -> int:
    return max(0, total_rows - window)


def count_in_range(positions: Iterable[int], start: int, end: int) -> int:
    return sum(1 for p in positions if start <= p < end)


def make_rate(window: int, draws: int, triples: int) -> WindowRate:
    every = draws / triples if triples > 0 else None
    return WindowRate(window=window, draws=draws, triples=triples, every=every)


def rate_in_window(total_rows: int, events: Sequence[TripleEvent], window: int) -> WindowRate:
    start = window_start(total_rows, window)
    triples = count_in_range((ev.idx for ev in events), start, total_rows)
    return make_rate(window, total_rows - start, triples)


def rates_for_windows(
    total_rows: int, events: Sequence[TripleEvent], windows: Iterable[int]
) -> dict[int, WindowRate]:
    return {w: rate_in_window(total_rows, events, w) for w in windows}


def baseline_every(total_rows: int, events: Sequence[TripleEvent]) -> float | None:
    """Average draws per event over the whole file."""
    if total_rows == 0 or not events:
        return None
    return total_rows / len(events)


def classify_rate(window_every: float | None, baseline: float | None, tolerance: float = 0.1) -> str:
    """Compare a window rate with the baseline using a ±tolerance band around 1.0."""
    if window_every is None or baseline is None:
        return UNAVAILABLE
    ratio = window_every / baseline
    if ratio <= 1.0 - tolerance:
        return FASTER
    if ratio >= 1.0 + tolerance:
        return SLOWER
    return MATCHES

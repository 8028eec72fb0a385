"""
triple_tracker/analytics/overlay.py
Manual "what if" draws appended after the file, affecting only the
current-state metrics (lag and trailing window rates).

Virtual draws occupy positions base_n, base_n + 1, ... in draw-number order.
Historical events, gaps and clusters are never touched, and the baseline
stays the file's own.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Iterable, Iterator, Sequence

from triple_tracker.analytics.event_detector import TripleEvent
from triple_tracker.analytics.normalizer import parse_draw_number
from triple_tracker.analytics.window_rate import (
    WindowRate,
    classify_rate,
    count_in_range,
    make_rate,
    window_start,
)

MANUAL_DATE = "manual"
MANUAL_VALUE = "-"
MANUAL_SIZE = 3


@dataclass(frozen=True)
class ManualEntry:
    draw_number: int | float
    has_event: bool
    created_at: datetime = field(default_factory=datetime.now, compare=False)


class ManualEntrySet:
    """Operator hypotheses keyed by draw number; re-adding a draw replaces it."""

    def __init__(self, entries: Iterable[ManualEntry] = ()):
        self._entries: dict[int | float, ManualEntry] = {}
        for entry in entries:
            self._entries[entry.draw_number] = entry

    def add(self, draw_number: Any, has_event: bool) -> ManualEntry:
        number = parse_draw_number(draw_number)
        if number is None:
            raise ValueError(f"Draw number must be numeric, got {draw_number!r}")
        entry = ManualEntry(draw_number=number, has_event=bool(has_event))
        self._entries.pop(number, None)
        self._entries[number] = entry
        return entry

    def remove(self, draw_number: Any) -> bool:
        number = parse_draw_number(draw_number)
        return self._entries.pop(number, None) is not None

    def clear(self) -> None:
        self._entries.clear()

    def get(self, draw_number: Any) -> ManualEntry | None:
        return self._entries.get(parse_draw_number(draw_number))

    def snapshot(self) -> tuple[ManualEntry, ...]:
        """Entries ordered by draw number; safe to hand to the simulator."""
        return tuple(sorted(self._entries.values(), key=lambda e: e.draw_number))

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[ManualEntry]:
        return iter(self.snapshot())


@dataclass(frozen=True)
class EventLabel:
    draw: str
    date: Any
    value: str
    size: int
    missing_columns: tuple[str, ...] = ()


@dataclass(frozen=True)
class OverlayView:
    lag: int
    windows: dict[int, WindowRate]
    baseline_every: float | None
    classifications: dict[int, str]
    manual_count: int
    manual_yes_count: int
    manual_no_count: int
    last_event_label: EventLabel | None


def _label_for(event: TripleEvent) -> EventLabel:
    return EventLabel(
        draw=event.draw,
        date=event.date,
        value=event.value,
        size=event.size,
        missing_columns=event.missing_columns,
    )


def simulate_overlay(
    events: Sequence[TripleEvent],
    total_rows: int,
    baseline: float | None,
    manual_entries: Iterable[ManualEntry],
    windows: Iterable[int] = (100, 200, 400),
    classified_windows: Iterable[int] = (200, 400),
    tolerance: float = 0.1,
) -> OverlayView:
    """Recompute lag and window rates as if the manual draws followed the file."""
    manual = sorted(manual_entries, key=lambda e: e.draw_number)
    base_n = total_rows
    sim_n = base_n + len(manual)

    last_idx = events[-1].idx if events else -1
    last_label = _label_for(events[-1]) if events else None

    virtual: list[int] = []
    for k, entry in enumerate(manual):
        if not entry.has_event:
            continue
        pos = base_n + k
        virtual.append(pos)
        last_idx = pos
        last_label = EventLabel(
            draw=str(entry.draw_number),
            date=MANUAL_DATE,
            value=MANUAL_VALUE,
            size=MANUAL_SIZE,
        )

    lag = (sim_n - 1 - last_idx) if last_idx >= 0 else sim_n

    rates: dict[int, WindowRate] = {}
    for w in windows:
        start = window_start(sim_n, w)
        file_hits = count_in_range((ev.idx for ev in events), start, base_n)
        virtual_hits = count_in_range(virtual, start, sim_n)
        rates[w] = make_rate(w, sim_n - start, file_hits + virtual_hits)

    classifications = {
        w: classify_rate(rates[w].every, baseline, tolerance)
        for w in classified_windows
        if w in rates
    }

    yes = sum(1 for e in manual if e.has_event)
    return OverlayView(
        lag=lag,
        windows=rates,
        baseline_every=baseline,
        classifications=classifications,
        manual_count=len(manual),
        manual_yes_count=yes,
        manual_no_count=len(manual) - yes,
        last_event_label=last_label,
    )

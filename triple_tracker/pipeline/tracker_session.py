"""
triple_tracker/pipeline/tracker_session.py
Holds the loaded table and the operator's manual entries, and hands out
fresh file-only and overlay results.
"""
from __future__ import annotations

from pathlib import Path
from typing import Any, Mapping, Sequence

from triple_tracker.analytics.chronology import resolve_chronology
from triple_tracker.analytics.overlay import ManualEntry, ManualEntrySet, OverlayView, simulate_overlay
from triple_tracker.pipeline.file_analysis import FileAnalysis, analyze_rows
from triple_tracker.pipeline.table_loader import (
    InputRejectedError,
    load_table,
    max_draw_number,
    validate_rows,
)
from triple_tracker.utils.config import get_analysis_config
from triple_tracker.utils.logger import get_logger

log = get_logger("pipeline.session")


def should_reset_manual(prev_max: int | float | None, new_max: int | float | None) -> bool:
    """A newer file (higher max draw) supersedes hypotheses made on the old one."""
    return prev_max is not None and new_max is not None and new_max > prev_max


class TrackerSession:
    """Single-writer owner of the table and manual entries."""

    def __init__(self, params: Mapping[str, Any] | None = None):
        self.params = {**get_analysis_config(), **(params or {})}
        self.file_name = ""
        self.rows: list[Mapping[str, Any]] = []
        self.was_reversed = False
        self.method = ""
        self.max_draw: int | float | None = None
        self.manual = ManualEntrySet()
        self._analysis: FileAnalysis | None = None

    # ── Loading ───────────────────────────────────────────────────

    def _clear_table(self) -> None:
        self.file_name = ""
        self.rows = []
        self.was_reversed = False
        self.method = ""
        self.max_draw = None
        self._analysis = None

    def load_rows(self, raw_rows: Sequence[Mapping[str, Any]], file_name: str = "") -> None:
        try:
            validate_rows(raw_rows)
        except InputRejectedError as exc:
            log.error(f"Rejected {file_name or 'table'}: {exc}")
            self._clear_table()
            raise

        chrono = resolve_chronology(raw_rows)
        new_max = max_draw_number(raw_rows)

        if should_reset_manual(self.max_draw, new_max) and len(self.manual):
            log.info(f"Max draw advanced {self.max_draw} → {new_max}; clearing {len(self.manual)} manual entries")
            self.manual.clear()

        self.file_name = file_name
        self.rows = chrono.rows
        self.was_reversed = chrono.was_reversed
        self.method = chrono.method
        self.max_draw = new_max
        self._analysis = None
        log.info(
            f"[LOAD] {file_name or 'table'}: {len(self.rows)} rows, max draw={new_max}, "
            f"reversed={chrono.was_reversed} via {chrono.method}"
        )

    def load_file(self, path: str | Path) -> None:
        path = Path(path)
        try:
            rows = load_table(path)
        except InputRejectedError as exc:
            log.error(f"Rejected {path.name}: {exc}")
            self._clear_table()
            raise
        self.load_rows(rows, file_name=path.name)

    # ── Manual overlay ────────────────────────────────────────────

    def add_manual(self, draw_number: Any, has_event: bool) -> ManualEntry:
        entry = self.manual.add(draw_number, has_event)
        log.info(f"Manual entry draw={entry.draw_number} has_triple={entry.has_event}")
        return entry

    def reset_manual(self) -> None:
        self.manual.clear()

    # ── Results ───────────────────────────────────────────────────

    @property
    def loaded(self) -> bool:
        return bool(self.rows)

    def file_analysis(self) -> FileAnalysis | None:
        if not self.rows:
            return None
        if self._analysis is None:
            self._analysis = analyze_rows(self.rows, self.params)
        return self._analysis

    def current_view(self) -> OverlayView | None:
        analysis = self.file_analysis()
        if analysis is None:
            return None
        return simulate_overlay(
            analysis.events,
            analysis.total_rows,
            analysis.baseline_every,
            self.manual.snapshot(),
            windows=self.params["overlay_windows"],
            classified_windows=self.params["classified_windows"],
            tolerance=self.params["rate_tolerance"],
        )

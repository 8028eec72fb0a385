"""tests/test_overlay.py"""
import pytest

from triple_tracker.analytics.overlay import ManualEntry, ManualEntrySet, simulate_overlay
from triple_tracker.pipeline.file_analysis import analyze_rows

from helpers import make_table


class TestManualEntrySet:
    def setup_method(self):
        self.manual = ManualEntrySet()

    def test_last_write_wins(self):
        self.manual.add(101, False)
        self.manual.add(101, True)
        assert len(self.manual) == 1
        assert self.manual.get(101).has_event is True

    def test_text_and_number_share_a_key(self):
        self.manual.add("101", False)
        self.manual.add(101.0, True)
        assert len(self.manual) == 1

    def test_snapshot_sorted_by_draw(self):
        self.manual.add(13, True)
        self.manual.add(11, False)
        self.manual.add(12, False)
        assert [e.draw_number for e in self.manual.snapshot()] == [11, 12, 13]

    def test_rejects_non_numeric(self):
        with pytest.raises(ValueError):
            self.manual.add("abc", True)
        assert len(self.manual) == 0

    def test_remove_and_clear(self):
        self.manual.add(5, True)
        self.manual.add(6, True)
        assert self.manual.remove(5) is True
        assert self.manual.remove(5) is False
        self.manual.clear()
        assert len(self.manual) == 0


class TestSimulateOverlay:
    def setup_method(self):
        self.analysis = analyze_rows(make_table(10, triple_draws=(4, 5)))

    def _simulate(self, entries, windows=(5, 100)):
        a = self.analysis
        return simulate_overlay(a.events, a.total_rows, a.baseline_every, entries, windows=windows)

    def test_no_entries_matches_file(self):
        view = self._simulate([], windows=(100, 200, 400))
        assert view.lag == self.analysis.current_lag == 5
        for w in (100, 200, 400):
            assert view.windows[w] == self.analysis.windows[w]
        assert view.baseline_every == self.analysis.baseline_every
        assert view.classifications == self.analysis.classifications
        assert view.last_event_label.draw == "5"
        assert view.manual_count == 0

    def test_virtual_event_shifts_lag_and_windows(self):
        entries = [ManualEntry(11, False), ManualEntry(12, True)]
        view = self._simulate(entries)
        assert view.lag == 0
        assert (view.windows[5].draws, view.windows[5].triples, view.windows[5].every) == (5, 1, 5.0)
        assert (view.windows[100].draws, view.windows[100].triples, view.windows[100].every) == (12, 3, 4.0)
        assert view.baseline_every == 5.0
        assert view.manual_yes_count == 1
        assert view.manual_no_count == 1
        assert view.last_event_label.date == "manual"
        assert view.last_event_label.draw == "12"

    def test_entries_ordered_by_draw_number(self):
        view = self._simulate([ManualEntry(12, True), ManualEntry(11, False)])
        assert view.lag == 0
        view = self._simulate([ManualEntry(12, False), ManualEntry(11, True)])
        assert view.lag == 1

    def test_misses_only_extend_lag(self):
        view = self._simulate([ManualEntry(11, False), ManualEntry(12, False)])
        assert view.lag == self.analysis.current_lag + 2
        assert view.windows[5].triples == 0
        assert view.windows[5].every is None
        assert view.last_event_label.draw == "5"

    def test_no_history_events(self):
        view = simulate_overlay([], 10, None, [ManualEntry(11, False)], windows=(100,))
        assert view.lag == 11
        assert view.last_event_label is None
        assert view.classifications == {}

    def test_historical_results_untouched(self):
        events_before = list(self.analysis.events)
        self._simulate([ManualEntry(11, True)])
        assert self.analysis.events == events_before
        assert len(self.analysis.gaps) == 1

"""tests/test_pipeline.py"""
import csv
from datetime import datetime

import pytest
from openpyxl import Workbook, load_workbook

from triple_tracker.pipeline.file_analysis import analyze_rows
from triple_tracker.pipeline.report_exporter import SHEET_ORDER, build_report, export_xlsx, fmt_baseline
from triple_tracker.pipeline.table_loader import InputRejectedError, load_table, max_draw_number, validate_rows
from triple_tracker.pipeline.tracker_session import TrackerSession, should_reset_manual
from triple_tracker.utils.config import COL_DRAW, REQUIRED_COLUMNS

from helpers import make_row, make_table


class TestFileAnalysis:
    def test_scenario_two_adjacent_triples(self):
        a = analyze_rows(make_table(10, triple_draws=(4, 5)))
        assert len(a.events) == 2
        assert [g.distance for g in a.gaps] == [1]
        assert len(a.clusters) == 1
        assert a.clusters[0].triple_count == 2
        assert a.clusters[0].draw_span == 1
        assert a.cluster_status.active is True
        assert a.current_lag == 5
        assert a.baseline_every == 5.0
        assert a.after_clusters.count == 0
        assert a.after_clusters.cluster_count == 1

    def test_scenario_no_triples(self):
        a = analyze_rows(make_table(12))
        assert a.events == []
        assert a.baseline_every is None
        assert a.cluster_status.active is False
        assert a.lag_behavior.count == 0
        assert a.current_lag == 12
        assert all(w.every is None for w in a.windows.values())
        assert set(a.classifications.values()) == {"unavailable"}

    def test_recent_events_newest_first(self):
        a = analyze_rows(make_table(40, triple_draws=(3, 9), quad_draws=(20,)))
        assert [e.draw for e in a.recent_events] == ["20", "9", "3"]
        assert a.recent_events[0].is_quad

    def test_long_gaps(self):
        a = analyze_rows(make_table(150, triple_draws=(2, 140)))
        assert [g.distance for g in a.long_gaps] == [138]
        assert a.max_gap == 138

    def test_recent_events_limit(self):
        rows = make_table(20, triple_draws=(3, 9, 15))
        assert analyze_rows(rows, {"recent_events": 0}).recent_events == []
        assert [e.draw for e in analyze_rows(rows, {"recent_events": 1}).recent_events] == ["15"]
        assert len(analyze_rows(rows, {"recent_events": 50}).recent_events) == 3


class TestTableLoader:
    def test_empty_rejected(self):
        with pytest.raises(InputRejectedError, match="empty"):
            validate_rows([])

    def test_missing_column_rejected(self):
        row = make_row("1", "1/1/24", ("2", "3", "4", "5"))
        del row[REQUIRED_COLUMNS[-1]]
        with pytest.raises(InputRejectedError, match="Missing required column"):
            validate_rows([row])

    def test_max_draw_skips_non_numeric(self):
        rows = [{COL_DRAW: "7"}, {COL_DRAW: "abc"}, {COL_DRAW: " 12 "}, {COL_DRAW: ""}]
        assert max_draw_number(rows) == 12
        assert max_draw_number([{COL_DRAW: "x"}]) is None

    def test_load_csv(self, tmp_path):
        path = tmp_path / "draws.csv"
        rows = make_table(5, triple_draws=(2,))
        with open(path, "w", newline="", encoding="utf-8") as f:
            writer = csv.DictWriter(f, fieldnames=REQUIRED_COLUMNS)
            writer.writeheader()
            writer.writerows(rows[::-1])
        loaded = load_table(path)
        assert len(loaded) == 5
        assert loaded[0][COL_DRAW] == "5"

    def test_load_xlsx(self, tmp_path):
        path = tmp_path / "draws.xlsx"
        wb = Workbook()
        ws = wb.active
        ws.append(REQUIRED_COLUMNS)
        ws.append([datetime(2024, 1, 2), 2, "7", "7", "7", "K"])
        ws.append([datetime(2024, 1, 1), 1, "2", "3", None, "5"])
        wb.save(path)
        loaded = load_table(path)
        assert len(loaded) == 2
        assert loaded[1][REQUIRED_COLUMNS[4]] == ""
        assert loaded[0][COL_DRAW] == 2

    def test_unsupported_suffix(self, tmp_path):
        path = tmp_path / "draws.txt"
        path.write_text("x")
        with pytest.raises(InputRejectedError):
            load_table(path)

    def test_missing_file_rejected(self, tmp_path):
        with pytest.raises(InputRejectedError, match="Cannot read nope.csv"):
            load_table(tmp_path / "nope.csv")

    def test_corrupt_xlsx_rejected(self, tmp_path):
        path = tmp_path / "draws.xlsx"
        path.write_bytes(b"not a zip")
        with pytest.raises(InputRejectedError, match="Cannot read draws.xlsx"):
            load_table(path)

    def test_non_utf8_csv_rejected(self, tmp_path):
        path = tmp_path / "draws.csv"
        path.write_bytes(b"caf\xe9,x\n1,2\n")
        with pytest.raises(InputRejectedError, match="Cannot read draws.csv"):
            load_table(path)


class TestTrackerSession:
    def setup_method(self):
        self.session = TrackerSession()

    def test_reset_rule(self):
        assert should_reset_manual(10, 12) is True
        assert should_reset_manual(10, 10) is False
        assert should_reset_manual(10, 8) is False
        assert should_reset_manual(None, 12) is False

    def test_newer_table_clears_manual(self):
        self.session.load_rows(make_table(10))
        self.session.add_manual(11, True)
        self.session.load_rows(make_table(12))
        assert len(self.session.manual) == 0
        assert self.session.max_draw == 12

    def test_same_or_older_table_keeps_manual(self):
        self.session.load_rows(make_table(10))
        self.session.add_manual(11, True)
        self.session.load_rows(make_table(10))
        assert len(self.session.manual) == 1
        self.session.load_rows(make_table(8))
        assert len(self.session.manual) == 1

    def test_reversed_input_recorded(self):
        self.session.load_rows(make_table(6, triple_draws=(2,))[::-1], file_name="draws.xlsx")
        assert self.session.was_reversed is True
        assert self.session.method == "date"
        assert self.session.file_analysis().events[0].idx == 1

    def test_rejected_load_clears_table_keeps_manual(self):
        self.session.load_rows(make_table(10))
        self.session.add_manual(11, False)
        with pytest.raises(InputRejectedError):
            self.session.load_rows([])
        assert self.session.loaded is False
        assert self.session.file_analysis() is None
        assert self.session.current_view() is None
        assert self.session.max_draw is None
        assert len(self.session.manual) == 1

    def test_current_view_uses_manual(self):
        self.session.load_rows(make_table(10, triple_draws=(4, 5)))
        assert self.session.current_view().lag == 5
        self.session.add_manual(11, True)
        assert self.session.current_view().lag == 0
        self.session.reset_manual()
        assert self.session.current_view().lag == 5

    def test_load_file(self, tmp_path):
        path = tmp_path / "draws.csv"
        with open(path, "w", newline="", encoding="utf-8") as f:
            writer = csv.DictWriter(f, fieldnames=REQUIRED_COLUMNS)
            writer.writeheader()
            writer.writerows(make_table(4))
        self.session.load_file(path)
        assert self.session.file_name == "draws.csv"
        assert self.session.max_draw == 4

    def test_unreadable_files_clear_table(self, tmp_path):
        corrupt = tmp_path / "draws.xlsx"
        corrupt.write_bytes(b"not a zip")
        for path in (tmp_path / "nope.csv", corrupt):
            self.session.load_rows(make_table(10, triple_draws=(4, 5)), file_name="good.csv")
            self.session.add_manual(11, True)
            with pytest.raises(InputRejectedError):
                self.session.load_file(path)
            assert self.session.loaded is False
            assert self.session.file_name == ""
            assert self.session.max_draw is None
            assert self.session.file_analysis() is None
            assert len(self.session.manual) == 1


class TestReportExporter:
    def setup_method(self):
        self.session = TrackerSession()
        self.session.load_rows(make_table(150, triple_draws=(2, 3, 140)), file_name="draws.csv")

    def test_build_report(self):
        report = build_report(self.session)
        assert tuple(report) == SHEET_ORDER
        assert len(report["all_triples"]) == 3
        assert report["last_30_triples"][0]["draw"] == "140"
        assert report["gaps_over_100"][0]["gap"] == 137
        assert report["cluster_behavior"][0]["clusters_found"] == 1
        assert report["cluster_behavior"][0]["median_to_next"] == 137
        assert report["lag_behavior"][0]["cases_found"] == 0

    def test_manual_only_flagged(self):
        self.session.add_manual(151, True)
        report = build_report(self.session)
        summary = {r["metric"]: r["value"] for r in report["summary"]}
        assert summary["manual input active"] == "yes (1)"
        assert len(report["all_triples"]) == 3

    def test_nothing_loaded(self):
        with pytest.raises(ValueError):
            build_report(TrackerSession())

    def test_export_xlsx(self, tmp_path):
        out = export_xlsx(build_report(self.session), tmp_path / "out" / "report.xlsx")
        wb = load_workbook(out)
        assert wb.sheetnames == list(SHEET_ORDER)
        assert wb["all_triples"].max_row == 4

    def test_baseline_unavailable_without_triples(self):
        session = TrackerSession()
        session.load_rows(make_table(12))
        summary = {r["metric"]: r["value"] for r in build_report(session)["summary"]}
        assert summary["baseline rate (file)"] == "unavailable"
        assert fmt_baseline(None) == "unavailable"
        assert fmt_baseline(5.0) == "1 in 5.00"

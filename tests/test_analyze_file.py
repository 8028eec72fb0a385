"""tests/test_analyze_file.py"""
import argparse
import importlib.util
from pathlib import Path

import pytest
from rich.console import Console

from triple_tracker.pipeline.tracker_session import TrackerSession

from helpers import make_table

SCRIPT = Path(__file__).parent.parent / "scripts" / "analyze_file.py"


def _load_script():
    spec = importlib.util.spec_from_file_location("analyze_file", SCRIPT)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


class TestAnalyzeFileScript:
    def setup_method(self):
        self.cli = _load_script()

    def test_parse_manual(self):
        assert self.cli.parse_manual("1201:yes") == ("1201", True)
        assert self.cli.parse_manual(" 1202 : No ") == ("1202", False)

    def test_parse_manual_rejects_non_numeric_draw(self):
        with pytest.raises(argparse.ArgumentTypeError, match="numeric"):
            self.cli.parse_manual("abc:yes")

    def test_parse_manual_rejects_bad_flag(self):
        with pytest.raises(argparse.ArgumentTypeError):
            self.cli.parse_manual("1201:maybe")

    def test_render_without_triples_shows_unavailable_baseline(self):
        session = TrackerSession()
        session.load_rows(make_table(12), file_name="draws.csv")
        console = Console(record=True, width=200)
        self.cli.render(session, console)
        text = console.export_text()
        baseline_line = next(line for line in text.splitlines() if "Baseline" in line)
        assert "unavailable" in baseline_line
        assert "no triples" not in baseline_line

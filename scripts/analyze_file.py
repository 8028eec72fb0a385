"""
scripts/analyze_file.py
Load a draw table, print current triple/quad state, optionally overlay
manual draws and export the spreadsheet report.

  python scripts/analyze_file.py draws.xlsx --manual 1201:no --manual 1202:yes --export out.xlsx
"""
from __future__ import annotations

import argparse
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from rich.console import Console
from rich.table import Table

from triple_tracker.analytics.normalizer import parse_draw_number
from triple_tracker.pipeline.report_exporter import (
    bucket_line,
    build_report,
    export_xlsx,
    fmt_baseline,
    fmt_every,
    fmt_num,
)
from triple_tracker.pipeline.table_loader import InputRejectedError
from triple_tracker.pipeline.tracker_session import TrackerSession
from triple_tracker.utils.logger import get_logger

log = get_logger("analyze_file")

_YES = {"yes", "y", "1", "true"}
_NO = {"no", "n", "0", "false"}


def parse_manual(value: str) -> tuple[str, bool]:
    """'1201:yes' → ('1201', True)."""
    draw, _, flag = value.partition(":")
    draw = draw.strip()
    flag = flag.strip().lower()
    if parse_draw_number(draw) is None:
        raise argparse.ArgumentTypeError(f"Draw number must be numeric, got {draw!r}")
    if flag in _YES:
        return draw, True
    if flag in _NO:
        return draw, False
    raise argparse.ArgumentTypeError(f"Expected DRAW:yes|no, got {value!r}")


def render(session: TrackerSession, console: Console) -> None:
    analysis = session.file_analysis()
    view = session.current_view()

    meta = Table(title=f"{session.file_name}: max draw {fmt_num(session.max_draw)}", show_header=False)
    meta.add_row("Order", f"reversed={session.was_reversed} (by {session.method})")
    meta.add_row("Triples/quads", str(len(analysis.events)))
    last = analysis.last_event
    meta.add_row("Last triple (file)", f"draw {last.draw} ({last.date})" if last else "not found")
    meta.add_row("Current lag (file)", str(analysis.current_lag))
    meta.add_row("Max gap", fmt_num(analysis.max_gap))
    meta.add_row("Baseline", fmt_baseline(analysis.baseline_every))
    for w, rate in analysis.windows.items():
        label = analysis.classifications.get(w)
        meta.add_row(f"Window {w}", f"{rate.triples} | {fmt_every(rate.every)}" + (f" ({label})" if label else ""))
    console.print(meta)

    status = analysis.cluster_status
    cl = Table(title="Clusters", show_header=False)
    cl.add_row("Detected", str(len(analysis.clusters)))
    if status.active:
        cl.add_row("Active", f"{status.triple_count} triples over {status.draw_span} draws, gaps {list(status.gaps)}")
    else:
        cl.add_row("Active", "no")
    after = analysis.after_clusters
    cl.add_row("After cluster", bucket_line(after.buckets) if after.found else "no data")
    console.print(cl)

    lag = analysis.lag_behavior
    if lag.found:
        console.print(
            f"Lag {lag.lag}: {lag.count} cases, mean {lag.stats.mean:.2f}, median {lag.stats.median}, "
            f"{bucket_line(lag.buckets)}"
        )
    else:
        console.print(f"Lag {lag.lag}: no historical precedent")

    if view.manual_count:
        ov = Table(title=f"Manual overlay ({view.manual_yes_count} yes / {view.manual_no_count} no)", show_header=False)
        ov.add_row("Simulated lag", str(view.lag))
        for w, rate in view.windows.items():
            label = view.classifications.get(w)
            ov.add_row(f"Window {w}", f"{rate.triples} | {fmt_every(rate.every)}" + (f" ({label})" if label else ""))
        console.print(ov)


def main():
    parser = argparse.ArgumentParser(description="Triple/quad draw statistics")
    parser.add_argument("file", help="CSV or XLSX draw table")
    parser.add_argument("--manual", action="append", type=parse_manual, default=[],
                        metavar="DRAW:yes|no", help="Hypothetical draw appended after the file")
    parser.add_argument("--export", help="Write the xlsx report to this path")
    parser.add_argument("--cluster-max-gap", type=int, default=None)
    args = parser.parse_args()

    params = {}
    if args.cluster_max_gap is not None:
        params["cluster_max_gap"] = args.cluster_max_gap
    session = TrackerSession(params)

    try:
        session.load_file(args.file)
    except InputRejectedError as exc:
        log.error(str(exc))
        sys.exit(1)

    for draw, has_event in args.manual:
        session.add_manual(draw, has_event)

    render(session, Console())

    if args.export:
        export_xlsx(build_report(session), args.export)


if __name__ == "__main__":
    main()

"""
triple_tracker/pipeline/report_exporter.py
Spreadsheet report of the file-only analysis.
Manual entries are not exported, only flagged in the summary.
"""
from __future__ import annotations

from pathlib import Path
from typing import Any

from openpyxl import Workbook

from triple_tracker.analytics.outcome_summarizer import GapSummary
from triple_tracker.pipeline.tracker_session import TrackerSession
from triple_tracker.utils.config import SUIT_COLUMNS
from triple_tracker.utils.logger import get_logger

log = get_logger("pipeline.export")

SHEET_ORDER = (
    "summary",
    "last_30_triples",
    "all_triples",
    "gaps_over_100",
    "lag_behavior",
    "cluster_behavior",
)


def fmt_every(every: float | None) -> str:
    if every is None:
        return "no triples in window"
    return f"1 in {every:.2f}"


def fmt_baseline(every: float | None) -> str:
    return "unavailable" if every is None else fmt_every(every)


def fmt_num(n: Any) -> str:
    return "unavailable" if n is None else str(n)


def bucket_line(buckets: dict[str, int] | None) -> str:
    if not buckets:
        return "-"
    return "  |  ".join(f"{label}: {pct}%" for label, pct in buckets.items())


def _size_label(size: int) -> str:
    return "quad" if size == 4 else "triple"


def _behavior_row(title: str, summary: GapSummary, found_key: str, found: int, empty_msg: str) -> dict[str, Any]:
    row: dict[str, Any] = {"title": title, found_key: found}
    if not summary.found:
        row["message"] = empty_msg
        return row
    row.update({
        "mean_to_next": summary.stats.mean,
        "median_to_next": summary.stats.median,
        "min": summary.stats.min,
        "max": summary.stats.max,
        "distribution": bucket_line(summary.buckets),
    })
    return row


def build_report(session: TrackerSession) -> dict[str, list[dict[str, Any]]]:
    analysis = session.file_analysis()
    if analysis is None:
        raise ValueError("Nothing to export: no table loaded")

    last = analysis.last_event
    manual_count = len(session.manual)
    summary = {
        "file": session.file_name,
        "rows (draws)": analysis.total_rows,
        "max draw number": fmt_num(session.max_draw),
        "triples/quads in file": len(analysis.events),
        "last triple draw (file)": last.draw if last else "not found",
        "last triple date (file)": str(last.date) if last else "-",
        "current lag (file)": analysis.current_lag,
        "max gap (triple to triple)": fmt_num(analysis.max_gap),
        "gaps over 100": len(analysis.long_gaps),
        "baseline rate (file)": fmt_baseline(analysis.baseline_every),
    }
    for w, rate in analysis.windows.items():
        summary[f"window {w} rate (file)"] = f"{rate.triples} | {fmt_every(rate.every)}"
    summary["manual input active"] = f"yes ({manual_count})" if manual_count else "no"
    summary["note"] = "Manual input is not part of the historical data or this export."

    def event_row(ev) -> dict[str, Any]:
        row = {
            "draw": ev.draw,
            "date": str(ev.date),
            "value": ev.value,
            "size": _size_label(ev.size),
        }
        row.update({col: ev.suits.get(col, "") for col in SUIT_COLUMNS})
        return row

    all_triples = []
    for ev in analysis.events:
        row = {"idx": ev.idx, **event_row(ev)}
        row["matching_columns"] = ", ".join(ev.match_columns)
        row["missing_columns"] = ", ".join(ev.missing_columns)
        all_triples.append(row)

    last_30 = [{"order": i + 1, **event_row(ev)} for i, ev in enumerate(analysis.recent_events)]

    long_gaps = [
        {
            "gap": g.distance,
            "prev_draw": g.from_event.draw,
            "prev_date": str(g.from_event.date),
            "prev_value": g.from_event.value,
            "next_draw": g.to_event.draw,
            "next_date": str(g.to_event.date),
            "next_value": g.to_event.value,
        }
        for g in analysis.long_gaps
    ]

    lag = analysis.current_lag
    lag_row = _behavior_row(
        f"Historical behaviour - lag {lag}",
        analysis.lag_behavior,
        "cases_found",
        analysis.lag_behavior.count,
        f"No historical case in file with lag {lag}",
    )

    if not analysis.clusters:
        cluster_row = {
            "title": "Historical behaviour - cluster",
            "clusters_found": 0,
            "message": "No historical clusters in file",
        }
    else:
        cluster_row = _behavior_row(
            "Historical behaviour - cluster",
            analysis.after_clusters,
            "clusters_found",
            len(analysis.clusters),
            "Cannot compute after-cluster gap (no data after any cluster end)",
        )

    return {
        "summary": [{"metric": k, "value": v} for k, v in summary.items()],
        "last_30_triples": last_30,
        "all_triples": all_triples,
        "gaps_over_100": long_gaps,
        "lag_behavior": [lag_row],
        "cluster_behavior": [cluster_row],
    }


def _write_sheet(ws, rows: list[dict[str, Any]]) -> None:
    if not rows:
        return
    headers: list[str] = []
    for row in rows:
        for k in row:
            if k not in headers:
                headers.append(k)
    ws.append(headers)
    for row in rows:
        ws.append([row.get(h, "") for h in headers])


def export_xlsx(report: dict[str, list[dict[str, Any]]], path: str | Path) -> Path:
    path = Path(path)
    wb = Workbook()
    wb.remove(wb.active)
    for name in SHEET_ORDER:
        ws = wb.create_sheet(title=name)
        _write_sheet(ws, report.get(name, []))
    path.parent.mkdir(parents=True, exist_ok=True)
    wb.save(path)
    log.info(f"[EXPORT] wrote {path}")
    return path

"""
triple_tracker/pipeline/file_analysis.py
Full file-only computation over an oldest-first table.
Recomputed from scratch whenever the table changes.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Sequence

from triple_tracker.analytics.cluster_detector import Cluster, ClusterDetector, ClusterStatus
from triple_tracker.analytics.event_detector import TripleEvent, compute_events
from triple_tracker.analytics.gap_analyzer import Gap, compute_gaps, current_lag, gaps_over, max_gap
from triple_tracker.analytics.outcome_summarizer import (
    GapSummary,
    summarize_after_clusters,
    summarize_next_gaps_for_lag,
)
from triple_tracker.analytics.window_rate import WindowRate, baseline_every, classify_rate, rates_for_windows
from triple_tracker.utils.config import get_analysis_config
from triple_tracker.utils.logger import get_logger

log = get_logger("pipeline.analysis")


@dataclass(frozen=True)
class FileAnalysis:
    total_rows: int
    events: list[TripleEvent]
    gaps: list[Gap]
    baseline_every: float | None
    windows: dict[int, WindowRate]
    classifications: dict[int, str]
    last_event: TripleEvent | None
    current_lag: int
    max_gap: int | None
    long_gaps: list[Gap]
    clusters: list[Cluster]
    cluster_status: ClusterStatus
    after_clusters: GapSummary
    lag_behavior: GapSummary
    recent_events: list[TripleEvent]  # newest first


def analyze_rows(
    rows_old_to_new: Sequence[Mapping[str, Any]],
    params: Mapping[str, Any] | None = None,
) -> FileAnalysis:
    params = {**get_analysis_config(), **(params or {})}
    n = len(rows_old_to_new)
    recent = int(params["recent_events"])

    events = compute_events(rows_old_to_new)
    gaps = compute_gaps(events)
    baseline = baseline_every(n, events)
    windows = rates_for_windows(n, events, params["windows"])
    classifications = {
        w: classify_rate(windows[w].every, baseline, params["rate_tolerance"])
        for w in params["classified_windows"]
        if w in windows
    }

    lag = current_lag(n, events)
    detector = ClusterDetector(max_gap=params["cluster_max_gap"])
    clusters = detector.detect(gaps)

    analysis = FileAnalysis(
        total_rows=n,
        events=events,
        gaps=gaps,
        baseline_every=baseline,
        windows=windows,
        classifications=classifications,
        last_event=events[-1] if events else None,
        current_lag=lag,
        max_gap=max_gap(gaps),
        long_gaps=gaps_over(gaps, params["long_gap_threshold"]),
        clusters=clusters,
        cluster_status=detector.current_status(events, clusters),
        after_clusters=summarize_after_clusters(gaps, clusters),
        lag_behavior=summarize_next_gaps_for_lag(gaps, lag),
        recent_events=events[max(0, len(events) - recent):][::-1] if recent > 0 else [],
    )
    log.info(
        f"[ANALYZE] rows={n} triples={len(events)} clusters={len(clusters)} "
        f"lag={lag} baseline={baseline if baseline is None else round(baseline, 2)}"
    )
    if not events:
        log.warning("No triple/quad draws in table; rates are unavailable")
    return analysis

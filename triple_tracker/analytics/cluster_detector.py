"""
triple_tracker/analytics/cluster_detector.py
Group triple events into clusters: a run that opens with back-to-back
events (gap == 1) and keeps growing while the next gap stays within
`max_gap` draws.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from triple_tracker.analytics.event_detector import TripleEvent
from triple_tracker.analytics.gap_analyzer import Gap

DEFAULT_CLUSTER_MAX_GAP = 18


@dataclass(frozen=True)
class Cluster:
    start_event: TripleEvent
    end_event: TripleEvent
    start_gap_index: int
    end_gap_index: int
    triple_count: int
    draw_span: int
    gaps: tuple[int, ...]


@dataclass(frozen=True)
class ClusterStatus:
    active: bool
    triple_count: int | None = None
    draw_span: int | None = None
    gaps: tuple[int, ...] = ()
    start_draw: str | None = None
    end_draw: str | None = None


class ClusterDetector:
    """Single left-to-right pass over the gap list; clusters never overlap."""

    def __init__(self, max_gap: int = DEFAULT_CLUSTER_MAX_GAP):
        self.max_gap = max_gap

    def detect(self, gaps: Sequence[Gap]) -> list[Cluster]:
        clusters: list[Cluster] = []
        i = 0
        while i < len(gaps):
            if gaps[i].distance != 1:
                i += 1
                continue

            start = end = i
            while end + 1 < len(gaps) and gaps[end + 1].distance <= self.max_gap:
                end += 1

            start_event = gaps[start].from_event
            end_event = gaps[end].to_event
            inner = tuple(g.distance for g in gaps[start:end + 1])
            clusters.append(Cluster(
                start_event=start_event,
                end_event=end_event,
                start_gap_index=start,
                end_gap_index=end,
                triple_count=len(inner) + 1,
                draw_span=end_event.idx - start_event.idx,
                gaps=inner,
            ))
            i = end + 1
        return clusters

    @staticmethod
    def current_status(events: Sequence[TripleEvent], clusters: Sequence[Cluster]) -> ClusterStatus:
        """
        The latest event is in an active cluster only if some cluster ends
        exactly on it.
        """
        if not events:
            return ClusterStatus(active=False)
        last = events[-1]
        cluster = next((c for c in clusters if c.end_event.idx == last.idx), None)
        if cluster is None:
            return ClusterStatus(active=False)
        return ClusterStatus(
            active=True,
            triple_count=cluster.triple_count,
            draw_span=cluster.draw_span,
            gaps=cluster.gaps,
            start_draw=cluster.start_event.draw,
            end_draw=cluster.end_event.draw,
        )

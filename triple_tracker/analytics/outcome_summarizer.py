"""
triple_tracker/analytics/outcome_summarizer.py
What gap followed historically: after a given lag, or after a cluster ended.
"""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Sequence

import numpy as np

from triple_tracker.analytics.cluster_detector import Cluster
from triple_tracker.analytics.gap_analyzer import Gap

# (label, inclusive upper bound); the last bucket is open-ended
DEFAULT_BUCKETS: tuple[tuple[str, int | None], ...] = (
    ("1-5", 5),
    ("6-10", 10),
    ("11-20", 20),
    ("21+", None),
)


@dataclass(frozen=True)
class GapStats:
    mean: float
    median: float
    min: int
    max: int


@dataclass(frozen=True)
class GapSummary:
    """
    count == 0 means no historical precedent; stats and buckets are then None.
    `lag` is set for lag-conditioned summaries, `cluster_count` for
    after-cluster summaries.
    """

    count: int
    stats: GapStats | None = None
    buckets: dict[str, int] | None = None
    bucket_counts: dict[str, int] | None = None
    lag: int | None = None
    cluster_count: int | None = None
    samples: tuple[int, ...] = field(default=(), repr=False)

    @property
    def found(self) -> bool:
        return self.count > 0


def _round_half_up(x: float) -> int:
    return int(math.floor(x + 0.5))


def bucket_label(distance: int, buckets: Sequence[tuple[str, int | None]] = DEFAULT_BUCKETS) -> str:
    for label, upper in buckets:
        if upper is None or distance <= upper:
            return label
    return buckets[-1][0]


def summarize_gaps(
    distances: Sequence[int],
    buckets: Sequence[tuple[str, int | None]] = DEFAULT_BUCKETS,
    **extra,
) -> GapSummary:
    """
    count/mean/median/min/max plus a bucketed percentage distribution.
    Each percentage is rounded on its own, so they may not total 100.
    """
    if not distances:
        return GapSummary(count=0, **extra)

    arr = np.asarray(distances, dtype=float)
    stats = GapStats(
        mean=float(np.mean(arr)),
        median=float(np.median(arr)),
        min=int(min(distances)),
        max=int(max(distances)),
    )

    counts = {label: 0 for label, _ in buckets}
    for d in distances:
        counts[bucket_label(d, buckets)] += 1
    n = len(distances)
    pct = {label: _round_half_up(c / n * 100) for label, c in counts.items()}

    return GapSummary(
        count=n,
        stats=stats,
        buckets=pct,
        bucket_counts=counts,
        samples=tuple(distances),
        **extra,
    )


def summarize_next_gaps_for_lag(
    gaps: Sequence[Gap],
    lag: int,
    buckets: Sequence[tuple[str, int | None]] = DEFAULT_BUCKETS,
) -> GapSummary:
    """
    For every gap equal to `lag`, take the gap that followed it.
    The last gap has no successor and is never a trigger.
    """
    following = [gaps[i + 1].distance for i in range(len(gaps) - 1) if gaps[i].distance == lag]
    return summarize_gaps(following, buckets, lag=lag)


def summarize_after_clusters(
    gaps: Sequence[Gap],
    clusters: Sequence[Cluster],
    buckets: Sequence[tuple[str, int | None]] = DEFAULT_BUCKETS,
) -> GapSummary:
    """Gap right after each cluster's end; clusters ending on the last event are skipped."""
    after = [
        gaps[c.end_gap_index + 1].distance
        for c in clusters
        if c.end_gap_index + 1 < len(gaps)
    ]
    return summarize_gaps(after, buckets, cluster_count=len(clusters))

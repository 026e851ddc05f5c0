"""
Built-in normalizers.

  percentile  p10..p90 → [0, 1], outliers clamped.  0.5 when flat.
  rank        position in the sorted sample, ties share the average rank.

Both return the constant 0.5 for an empty distribution.
"""
from __future__ import annotations

from bisect import bisect_left, bisect_right

from codedash.model.normalizer import NormalizerDef


def nth_position(count: int, pct: int) -> int:
    """
    1-based position of the pct-th percentile in a sorted sample of `count`.

    ceil(count * pct / 100) in integer arithmetic, never below 1:
    count=10 → p10 is the 1st element, p90 the 9th.
    """
    return max(1, -(-count * pct // 100))


# ── percentile ─────────────────────────────────────────────────────────────────

def _percentile_stats(values: list) -> dict:
    count = len(values)
    if count == 0:
        return {"min": 0, "max": 0, "p10": 0, "p50": 0, "p90": 0, "count": 0}

    ordered = sorted(values)
    return {
        "min":   ordered[0],
        "max":   ordered[-1],
        "p10":   ordered[nth_position(count, 10) - 1],
        "p50":   ordered[nth_position(count, 50) - 1],
        "p90":   ordered[nth_position(count, 90) - 1],
        "count": count,
    }


def _percentile_normalize(stats: dict):
    lo = stats["p10"]
    hi = stats["p90"]
    if stats["count"] == 0 or hi <= lo:
        return lambda raw: 0.5

    def normalize(raw: float) -> float:
        clamped = max(lo, min(hi, raw))
        return (clamped - lo) / (hi - lo)

    return normalize


percentile = NormalizerDef(
    "percentile",
    stats=_percentile_stats,
    normalize=_percentile_normalize,
)


# ── rank ───────────────────────────────────────────────────────────────────────

def _rank_stats(values: list) -> dict:
    return {"count": len(values), "sorted": sorted(values)}


def _rank_normalize(stats: dict):
    count   = stats["count"]
    ordered = stats["sorted"]
    if count == 0:
        return lambda raw: 0.5

    def normalize(raw: float) -> float:
        first = bisect_left(ordered, raw)
        if first >= count:
            return 1.0
        if count <= 1:
            return 0.5
        if ordered[first] != raw:
            # No exact match: rank of the insertion point.
            return first / (count - 1)
        last = bisect_right(ordered, raw) - 1
        return ((first + last) / 2) / (count - 1)

    return normalize


rank = NormalizerDef(
    "rank",
    stats=_rank_stats,
    normalize=_rank_normalize,
)


NORMALIZERS = {
    "percentile": percentile,
    "rank":       rank,
}

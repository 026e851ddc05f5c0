"""
codedash sweep — search the catalog for the most informative bindings.

Definitions are data, so they can be generated and compared.  For every
catalog Index × Normalizer pair the sweep measures how well the
normalized values spread across [0, 1], then picks a small set of
indexes that spread well *and* do not duplicate each other.

  1. Spread        stddev, IQR, occupied tenths, valid % per pair
  2. Correlation   Pearson r between the best pair of each index
  3. Selection     greedy: spread × (1 − max |r| to already-picked)

Usage:
    codedash sweep enriched.json
    codedash sweep enriched.json --top 3
"""
from __future__ import annotations

import math
import statistics
import sys

from codedash.presets import default_registry
from codedash.presets.percepts import PERCEPTS
from codedash.schema import SWEEP_SCHEMA

HIGH_CORRELATION = 0.7


# ── Stat helpers ───────────────────────────────────────────────────────────────

def stddev(vals: list) -> float:
    """Sample standard deviation.  0.0 below two values."""
    return statistics.stdev(vals) if len(vals) >= 2 else 0.0


def iqr(sorted_vals: list) -> float:
    n = len(sorted_vals)
    if n < 4:
        return 0.0
    q1 = sorted_vals[math.ceil(n * 0.25) - 1]
    q3 = sorted_vals[math.ceil(n * 0.75) - 1]
    return q3 - q1


def unique_bins(vals: list) -> int:
    """Number of occupied tenths of [0, 1]."""
    return len({min(9, math.floor(v * 10)) for v in vals})


def pearson(xs: list, ys: list) -> float:
    n = min(len(xs), len(ys))
    if n < 3:
        return 0.0
    mx = sum(xs[:n]) / n
    my = sum(ys[:n]) / n
    cov = vx = vy = 0.0
    for x, y in zip(xs[:n], ys[:n]):
        dx, dy = x - mx, y - my
        cov += dx * dy
        vx  += dx * dx
        vy  += dy * dy
    if vx == 0 or vy == 0:
        return 0.0
    return cov / math.sqrt(vx * vy)


# ── Phases ─────────────────────────────────────────────────────────────────────

def _spread(nodes, registry) -> "tuple[list, dict]":
    candidates = []
    per_node = {}     # key → {node position: normalized}

    for idx_name in sorted(registry.indexes):
        idx = registry.indexes[idx_name]
        raws = [(i, v) for i, v in ((i, idx.resolve(n)) for i, n in enumerate(nodes))
                if v is not None]
        valid_pct = len(raws) / len(nodes) * 100 if nodes else 0.0
        values = [v for _, v in raws]

        for norm_name in sorted(registry.normalizers):
            fn = registry.normalizers[norm_name].fit(values)
            normalized = {i: fn(v) for i, v in raws}
            ordered = sorted(normalized.values())

            key = f"{idx_name}:{norm_name}"
            per_node[key] = normalized
            candidates.append({
                "index":      idx_name,
                "normalizer": norm_name,
                "key":        key,
                "stddev":     stddev(ordered),
                "iqr":        iqr(ordered),
                "bins":       unique_bins(ordered),
                "valid_pct":  valid_pct,
            })

    candidates.sort(key=lambda c: c["stddev"], reverse=True)
    return candidates, per_node


def _best_per_index(candidates: list) -> list:
    best = {}
    for c in candidates:
        prev = best.get(c["index"])
        if prev is None or c["stddev"] > prev["stddev"]:
            best[c["index"]] = c
    return sorted(best.values(), key=lambda c: c["stddev"], reverse=True)


def _correlations(best: list, per_node: dict) -> list:
    size = len(best)
    matrix = [[0.0] * size for _ in range(size)]
    for i, ci in enumerate(best):
        matrix[i][i] = 1.0
        for j in range(i + 1, size):
            a, b = per_node[ci["key"]], per_node[best[j]["key"]]
            shared = sorted(set(a) & set(b))
            r = pearson([a[k] for k in shared], [b[k] for k in shared])
            matrix[i][j] = matrix[j][i] = r
    return matrix


def _select(best: list, matrix: list, top_n: int) -> list:
    percept_order = list(PERCEPTS)
    selected = []
    taken = set()

    for pick in range(min(top_n, len(best))):
        best_score, best_i = -1.0, None
        for i, c in enumerate(best):
            if i in taken:
                continue
            # Binary-like distributions (few occupied bins) score lower.
            bin_factor = max(0.1, c["bins"] / 10)
            score = c["stddev"] * (0.5 + 0.5 * bin_factor)
            if c["valid_pct"] < 50:
                score *= c["valid_pct"] / 50
            if selected:
                max_corr = max(abs(matrix[i][s["matrix_idx"]]) for s in selected)
                score *= 1 - max_corr
            if score > best_score:
                best_score, best_i = score, i

        if best_i is None:
            break
        taken.add(best_i)
        c = best[best_i]

        max_corr, corr_with = 0.0, ""
        for s in selected:
            r = abs(matrix[best_i][s["matrix_idx"]])
            if r > max_corr:
                max_corr, corr_with = r, s["index"]

        selected.append({
            "rank":       pick + 1,
            "index":      c["index"],
            "normalizer": c["normalizer"],
            "percept":    percept_order[pick] if pick < len(percept_order) else f"ch{pick + 1}",
            "stddev":     c["stddev"],
            "bins":       c["bins"],
            "valid_pct":  c["valid_pct"],
            "max_corr":   max_corr,
            "corr_with":  corr_with,
            "matrix_idx": best_i,
        })

    return selected


def run_sweep(nodes, registry=None, top_n: int = 5) -> dict:
    """
    Sweep every Index × Normalizer pair over `nodes`.

    Returns a structured dict with keys:
      candidates, best, correlation, selected, summary
    """
    registry = registry or default_registry()
    nodes = list(nodes)

    candidates, per_node = _spread(nodes, registry)
    best = _best_per_index(candidates)
    matrix = _correlations(best, per_node)
    selected = _select(best, matrix, top_n)

    return {
        "schema":      SWEEP_SCHEMA,
        "candidates":  candidates,
        "best":        [c["index"] for c in best],
        "correlation": matrix,
        "selected":    selected,
        "summary": {
            "nodes":      len(nodes),
            "pairs":      len(candidates),
            "redundant":  sum(
                1 for i in range(len(best)) for j in range(i + 1, len(best))
                if abs(matrix[i][j]) >= HIGH_CORRELATION
            ),
        },
    }


# ── Printing ───────────────────────────────────────────────────────────────────

def _stars(sd: float) -> str:
    if sd >= 0.25:
        return "***"
    if sd >= 0.15:
        return "** "
    return "*  "


def config_snippet(selected: list) -> str:
    """YAML bindings block for the selected set."""
    lines = ["bindings:"]
    for s in selected:
        lines.append(f"  - index: {s['index']}")
        lines.append(f"    percept: {s['percept']}")
        if s["normalizer"] != "percentile":
            lines.append(f"    normalize: {s['normalizer']}")
    return "\n".join(lines)


def print_sweep(result: dict, file=None) -> None:
    file = file or sys.stdout
    candidates = result["candidates"]
    best       = result["best"]
    matrix     = result["correlation"]
    selected   = result["selected"]

    print("=== Phase 1: Index x Normalizer Spread ===", file=file)
    print(f"  {'Index':<20} {'Normalizer':<12} {'stddev':>7} {'IQR':>7} {'bins/10':>7} {'valid%':>7}",
          file=file)
    print("  " + "-" * 74, file=file)
    for c in candidates:
        print(f"  {c['index']:<20} {c['normalizer']:<12} {c['stddev']:7.3f} {c['iqr']:7.3f} "
              f"{c['bins']:5d}   {c['valid_pct']:5.0f}%  {_stars(c['stddev'])}", file=file)
    print(file=file)

    print("=== Phase 2: Correlation Matrix (best normalizer per index) ===", file=file)
    print(f"  {'':<14}" + "".join(f" {name[:8]:>8}" for name in best), file=file)
    print("  " + "-" * (14 + len(best) * 9), file=file)
    for i, name in enumerate(best):
        row = f"  {name:<14}"
        for j in range(i + 1):
            r = matrix[i][j]
            mark = "!" if i != j and abs(r) >= HIGH_CORRELATION else " "
            row += f" {r:7.2f}{mark}"
        print(row, file=file)
    print(file=file)
    print(f"  (!) = |r| >= {HIGH_CORRELATION} — high correlation, likely redundant pair", file=file)
    print(file=file)

    print(f"=== Phase 3: Recommended {len(selected)} Bindings ===", file=file)
    print(f"  {'#':<4} {'Index':<14} {'Normalizer':<12} -> {'Percept':<10}  {'stddev':>7}  "
          f"{'bins':>5}  Independence", file=file)
    print("  " + "-" * 80, file=file)
    for s in selected:
        if s["rank"] == 1:
            indep = "(anchor)"
        elif s["max_corr"] < 0.4:
            indep = f"r={s['max_corr']:.2f} ok"
        elif s["max_corr"] < HIGH_CORRELATION:
            indep = f"r={s['max_corr']:.2f} ~{s['corr_with']}"
        else:
            indep = f"r={s['max_corr']:.2f} !{s['corr_with']}"
        print(f"  {s['rank']:<4d} {s['index']:<14} {s['normalizer']:<12} -> {s['percept']:<10}  "
              f"{s['stddev']:7.3f}  {s['bins']:3d}    {indep}", file=file)
    print(file=file)

    print("=== Generated Config (codedash.yaml) ===", file=file)
    print(config_snippet(selected), file=file)

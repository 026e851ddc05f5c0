"""
Evaluation engine — (bindings, nodes, domain_map) → Report.

Input:  resolved bindings   (Settings.bindings — each carries .resolved)
        nodes               [Node]
        domain_map          {node.name: domain}  (optional)
Output: Report              entries, groups, total, excluded, bindings

Pipeline:
  1. per binding: collect defined raw values over all nodes, fit stats,
     build the normalize function
  2. per node × binding: resolve → normalize → percept map.  Absent
     values leave the channel out of the entry (no zero fill)
  3. optional: group entries by domain, "_excluded" only counted
  4. assemble the report

Each binding is fitted independently of the others; nothing is shared
between bindings and the nodes are only read.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable

from codedash.errors import ResolutionError
from codedash.eval.classify import DEFAULT_FALLBACK, EXCLUDED
from codedash.model.binding import BindingDef
from codedash.model.node import Node
from codedash.presets.normalizers import nth_position
from codedash.schema import REPORT_SCHEMA


# ── Report shape ───────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Entry:
    node:       Node
    normalized: dict = field(default_factory=dict)   # percept name → [0, 1]
    percept:    dict = field(default_factory=dict)   # percept name → visual value

    def to_dict(self) -> dict:
        return {
            "node":       self.node.to_dict(),
            "normalized": dict(self.normalized),
            "percept":    dict(self.percept),
        }


@dataclass(frozen=True)
class Group:
    name:    str
    count:   int
    pct:     float
    stats:   dict                # percept name → {avg, max, p90, valid}
    entries: tuple = ()

    def to_dict(self) -> dict:
        return {
            "name":    self.name,
            "count":   self.count,
            "pct":     round(self.pct, 4),
            "stats":   {k: dict(v) for k, v in self.stats.items()},
            "members": [e.node.name for e in self.entries],
        }


@dataclass(frozen=True)
class Report:
    entries:  tuple
    groups:   tuple
    total:    int
    excluded: int
    bindings: tuple
    valid:    dict = field(default_factory=dict)   # percept name → nodes with a value

    def to_dict(self) -> dict:
        return {
            "schema":   REPORT_SCHEMA,
            "entries":  [e.to_dict() for e in self.entries],
            "groups":   [g.to_dict() for g in self.groups],
            "total":    self.total,
            "excluded": self.excluded,
            "bindings": [describe_binding(b) for b in self.bindings],
            "valid":    dict(self.valid),
        }


def describe_binding(binding: BindingDef) -> dict:
    """JSON-friendly view of a resolved binding."""
    pct = binding.percept
    return {
        "percept":    binding.key,
        "index":      binding.source_label,
        "kind":       binding.index.kind,
        "normalizer": binding.resolved.name if binding.resolved else None,
        "range":      [pct.range.lo, pct.range.hi],
        "steps":      pct.steps,
    }


# ── Step 1: fit ────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class FittedBinding:
    binding:   BindingDef
    normalize: Callable[[float], float]
    valid:     int


def fit_binding(binding: BindingDef, nodes) -> FittedBinding:
    """Collect the binding's defined raw values and fit its normalizer."""
    if binding.resolved is None:
        raise ResolutionError(
            f"binding '{binding.key}': normalizer not resolved (use resolve_settings)"
        )
    values = [v for v in (binding.index.resolve(n) for n in nodes) if v is not None]
    return FittedBinding(binding, binding.resolved.fit(values), len(values))


# ── Step 2: per-node entries ───────────────────────────────────────────────────

def evaluate_node(node: Node, fitted: list) -> Entry:
    normalized = {}
    percept = {}
    for fb in fitted:
        raw = fb.binding.index.resolve(node)
        if raw is None:
            continue
        ch = fb.binding.key
        t = fb.normalize(raw)
        normalized[ch] = t
        percept[ch] = fb.binding.percept.mapper(t)
    return Entry(node, normalized, percept)


# ── Step 3: domain groups ──────────────────────────────────────────────────────

def _channel_stats(entries: list, channel: str) -> "dict | None":
    vals = sorted(e.normalized[channel] for e in entries if channel in e.normalized)
    valid = len(vals)
    if valid == 0:
        return None
    return {
        "avg":   sum(vals) / valid,
        "max":   vals[-1],
        "p90":   vals[nth_position(valid, 90) - 1],
        "valid": valid,
    }


def build_groups(entries, domain_map: dict, bindings) -> "tuple[tuple, int]":
    """
    Group entries by domain.  Returns (groups, excluded_count).

    Groups are sorted by member count, largest first; equal counts keep
    the order in which the domain was first seen.
    """
    by_domain: dict[str, list] = {}
    for entry in entries:
        domain = domain_map.get(entry.node.name, DEFAULT_FALLBACK)
        by_domain.setdefault(domain, []).append(entry)

    total = len(entries)
    excluded = len(by_domain.pop(EXCLUDED, []))

    groups = []
    for name, members in by_domain.items():
        stats = {}
        for b in bindings:
            s = _channel_stats(members, b.key)
            if s is not None:
                stats[b.key] = s
        groups.append(Group(
            name=name,
            count=len(members),
            pct=(len(members) / total * 100) if total else 0.0,
            stats=stats,
            entries=tuple(members),
        ))

    groups.sort(key=lambda g: g.count, reverse=True)
    return tuple(groups), excluded


# ── run ────────────────────────────────────────────────────────────────────────

def evaluate(bindings, nodes, domain_map: "dict | None" = None) -> Report:
    """
    Run every binding over every node.

    Args:
        bindings:    resolved bindings (Settings.bindings)
        nodes:       list of Node
        domain_map:  {node.name: domain}; empty or None → no grouping
    """
    bindings = tuple(bindings)
    nodes = list(nodes)

    fitted = [fit_binding(b, nodes) for b in bindings]
    entries = tuple(evaluate_node(node, fitted) for node in nodes)

    groups, excluded = (), 0
    if domain_map:
        groups, excluded = build_groups(entries, domain_map, bindings)

    return Report(
        entries=entries,
        groups=groups,
        total=len(entries),
        excluded=excluded,
        bindings=bindings,
        valid={fb.binding.key: fb.valid for fb in fitted},
    )

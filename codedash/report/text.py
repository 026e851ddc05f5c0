"""
Plain-text report formatting.

Turns an evaluated Report into short human-readable blocks:

    Total: 26 nodes
    Excluded: 3 nodes

    Domains:
      auth             9 nodes (34.6%)
      crypto           5 nodes (19.2%)

    --- Top 10 ---
      login  hue=204.00  size=1.35  border=0.75
"""
from __future__ import annotations

import sys


def top(report, n: int, channel: str | None = None) -> list:
    """
    The n entries with the highest normalized value on `channel`.

    `channel` defaults to the first binding's percept.  Entries without a
    value on the channel sort as 0.
    """
    if channel is None and report.bindings:
        channel = report.bindings[0].key
    if channel is None:
        return []
    ranked = sorted(
        report.entries,
        key=lambda e: e.normalized.get(channel, 0),
        reverse=True,
    )
    return ranked[:max(n, 0)]


def summary(report) -> str:
    lines = [f"Total: {report.total} nodes"]

    if report.excluded:
        lines.append(f"Excluded: {report.excluded} nodes")

    if report.groups:
        lines.append("")
        lines.append("Domains:")
        for g in report.groups:
            lines.append(f"  {g.name:<15}  {g.count} nodes ({g.pct:.1f}%)")

    return "\n".join(lines)


def format_entry(entry, bindings) -> str:
    """Short name followed by channel=value for every channel the entry has."""
    parts = [entry.node.short_name or entry.node.name]
    for b in bindings:
        value = entry.percept.get(b.key)
        if value is not None:
            parts.append(f"{b.key}={value:.2f}")
    return "  ".join(parts)


def format_group(group, bindings) -> str:
    parts = [f"  {group.name:<15}  {group.count} nodes ({group.pct:.1f}%)"]
    for b in bindings:
        s = group.stats.get(b.key)
        if s:
            parts.append(f"{b.key}: avg={s['avg']:.2f} p90={s['p90']:.2f}")
    return "  ".join(parts)


def print_report(report, top_n: int = 10, domain: str | None = None, file=None) -> None:
    """Summary, top-N entries and domain breakdown."""
    file = file or sys.stdout
    print(summary(report), file=file)
    print(file=file)

    print(f"--- Top {top_n} ---", file=file)
    for entry in top(report, top_n):
        print("  " + format_entry(entry, report.bindings), file=file)
    print(file=file)

    if report.groups:
        print("--- Domains ---", file=file)
        for g in report.groups:
            if domain is None or g.name == domain:
                print(format_group(g, report.bindings), file=file)

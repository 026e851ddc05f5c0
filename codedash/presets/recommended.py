"""
The recommended preset.

Highlights risky areas in most projects with five bindings, within the
number of channels a reader can track at once:

    high churn    → red      (hue)
    many lines    → large    (size)
    many params   → thick    (border)
    deep nesting  → faded    (opacity)
    coverage      → clarity
"""
from codedash.model.binding import bind
from codedash.presets import indexes as idx
from codedash.presets import percepts as pct


PRESET = {
    "bindings": [
        bind(idx.churn,    pct.hue),
        bind(idx.lines,    pct.size),
        bind(idx.params,   pct.border),
        bind(idx.depth,    pct.opacity),
        bind(idx.coverage, pct.clarity),
    ],
}

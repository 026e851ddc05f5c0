"""
custom.py — auth-service example, programmatic settings

Same project as codedash.yaml, but the bindings are built in Python so
they can use functions a config file cannot express.

    python custom.py
"""
import math
import sys
from pathlib import Path

from codedash import NormalizerDef, PerceptDef, bind, index, init, map_index
from codedash.presets import default_registry
from codedash.presets import indexes as idx
from codedash.report.text import print_report

HERE = Path(__file__).parent


def _minmax_stats(values):
    return (min(values), max(values)) if values else (0, 0)


def _minmax_normalize(stats):
    lo, hi = stats
    if hi <= lo:
        return lambda raw: 0.5
    return lambda raw: (raw - lo) / (hi - lo)


minmax = NormalizerDef("minmax", stats=_minmax_stats, normalize=_minmax_normalize)

# Lines per parameter; functions without parameters have no density.
density = index("density", compute=lambda n: n.lines / n.params)

log_churn = map_index(idx.churn, math.log1p)

glow = PerceptDef("glow", range=(0, 1.0), steps=3)


def settings() -> dict:
    return {
        "extends": "recommended",
        "bindings": [
            bind(log_churn, default_registry().percepts["hue"]),
            bind(density, glow, normalize="minmax"),
        ],
        "domains": [
            {"name": "auth",   "patterns": ["auth", "session"]},
            {"name": "crypto", "patterns": ["crypto"]},
        ],
        "exclude": ["index"],
    }


def registry():
    return default_registry().extend(normalizers={"minmax": minmax})


def main():
    instance = init(HERE / "enriched.json", settings(), registry=registry(), verbose=True)
    print_report(instance.run(), top_n=5)
    return 0


if __name__ == "__main__":
    sys.exit(main())

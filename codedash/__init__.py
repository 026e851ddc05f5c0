"""
codedash — map code metrics to visual channels

Turn per-symbol code metrics (lines, churn, coverage …) into visual
encodings (hue, size, border …) through small declarative definitions.

Quick start
-----------
  pip install codedash
  codedash run enriched.json            # recommended preset
  codedash sweep enriched.json          # find informative bindings

Stages
------
  Index        Node → raw number           "what to measure"
  Normalizer   raw distribution → [0, 1]  "how to compare"
  Percept      [0, 1] → visual value      "how to show it"

A Binding pairs one Index with one Percept; Settings merge a preset's
bindings with your own, and the evaluator produces a Report.
"""

from codedash.errors import ConstructionError, ResolutionError
from codedash.eval.engine import Report, evaluate
from codedash.eval.settings import resolve_settings
from codedash.model import NormalizerDef, Node, PerceptDef, bind, index, map_index
from codedash.presets import Registry, default_registry
from codedash.runner import init

__all__ = [
    "ConstructionError", "ResolutionError",
    "Report", "evaluate", "resolve_settings",
    "NormalizerDef", "Node", "PerceptDef", "bind", "index", "map_index",
    "Registry", "default_registry", "init",
]
__version__ = "0.1.0"

"""
codedash.eval — settings resolution, classification, evaluation.

  from codedash.eval import resolve_settings, build_domain_map, evaluate
"""

from codedash.eval.classify import (
    EXCLUDED, DomainRule, DomainRules, build_domain_map, classify_node,
)
from codedash.eval.engine   import Entry, Group, Report, evaluate
from codedash.eval.loader   import load_json, load_nodes, to_nodes
from codedash.eval.settings import Settings, merge_bindings, resolve_settings

__all__ = [
    "EXCLUDED", "DomainRule", "DomainRules", "build_domain_map", "classify_node",
    "Entry", "Group", "Report", "evaluate",
    "load_json", "load_nodes", "to_nodes",
    "Settings", "merge_bindings", "resolve_settings",
]

"""
Pipeline runner.

Two modes:

1. Config-driven (recommended):
       codedash run enriched.json                  # reads codedash.yaml
       codedash run enriched.json --config ci.yaml
   codedash reads the config, loads the nodes, resolves the settings,
   classifies domains and evaluates every binding.

2. Programmatic (for library use or notebooks):
       instance = init("enriched.json", {"extends": "recommended"})
       report   = instance.run()

Config file schema (codedash.yaml):

    extends: recommended
    bindings:
      - index: complexity
        percept: size
      - index: churn
        percept: hue
        normalize: rank
    domains:
      - name: auth
        patterns: [auth, session]
      - name: crypto
        patterns: [crypto]
    exclude: [index, .test.]
    fallback: other

With no config file, the recommended preset is used on its own.
"""
from __future__ import annotations

import json
import sys
from pathlib import Path

from codedash.eval.classify import build_domain_map
from codedash.eval.engine import Report, evaluate
from codedash.eval.loader import load_json, to_nodes
from codedash.eval.settings import resolve_settings
from codedash.schema import validate_report

CONFIG_CANDIDATES = ["codedash.yaml", ".codedash.yaml", "codedash.yml"]
DEFAULT_CONFIG = {"extends": "recommended"}


# ── Config loading ─────────────────────────────────────────────────────────────

def load_config(path: "str | Path | None" = None) -> dict:
    """
    Load a codedash.yaml config file.

    With an explicit path, a missing file raises FileNotFoundError.
    Without one, the current directory is searched and the built-in
    default ({"extends": "recommended"}) is returned when nothing is found.
    """
    import yaml

    if path:
        config_path = Path(path)
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")
    else:
        config_path = next((Path(c) for c in CONFIG_CANDIDATES if Path(c).exists()), None)
        if config_path is None:
            return dict(DEFAULT_CONFIG)

    with open(config_path) as f:
        raw = yaml.safe_load(f)

    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ValueError(
            f"{config_path}: config must be a mapping, got {type(raw).__name__}"
        )
    return raw


# ── Instance ───────────────────────────────────────────────────────────────────

class Codebase:
    """Loaded nodes + resolved settings + domain map, ready to run."""

    def __init__(self, nodes, settings, domain_map):
        self.nodes      = nodes
        self.settings   = settings
        self.domain_map = domain_map

    def count(self) -> int:
        return len(self.nodes)

    def run(self) -> Report:
        return evaluate(self.settings.bindings, self.nodes, self.domain_map)

    def __repr__(self):
        return f"Codebase(nodes={len(self.nodes)}, bindings={len(self.settings.bindings)})"


def init(source, config: "dict | None" = None, registry=None, verbose: bool = False) -> Codebase:
    """
    Load a codebase and resolve settings.

    Args:
        source:    enriched.json path, or an already-loaded dict
        config:    settings mapping; None → recommended preset
        registry:  catalogs to resolve against; None → built-ins
        verbose:   print stage info to stderr
    """
    doc = load_json(source)
    nodes = to_nodes(doc)
    if verbose:
        print(f"[codedash] loaded {len(nodes)} nodes", file=sys.stderr)

    settings = resolve_settings(DEFAULT_CONFIG if config is None else config, registry)
    if verbose:
        keys = ", ".join(b.key for b in settings.bindings) or "none"
        print(f"[codedash] {len(settings.bindings)} bindings: {keys}", file=sys.stderr)

    domain_map = {}
    if settings.rules.active:
        domain_map = build_domain_map(nodes, settings.rules)
        if verbose:
            print(f"[codedash] classified {len(domain_map)} nodes into "
                  f"{len(set(domain_map.values()))} domains", file=sys.stderr)

    return Codebase(nodes, settings, domain_map)


# ── Config-driven pipeline ─────────────────────────────────────────────────────

def run_from_config(
    source,
    config: "dict | str | Path | None" = None,
    output_path: "str | Path | None" = None,
    verbose: bool = False,
) -> Report:
    """
    Run the whole pipeline for one enriched document.

    Args:
        source:       enriched.json path or dict
        config:       config file path, already-loaded dict, or None (auto-discover)
        output_path:  also write the report JSON here
        verbose:      print stage info to stderr
    """
    cfg = config if isinstance(config, dict) else load_config(config)
    report = init(source, cfg, verbose=verbose).run()

    if output_path:
        doc = report.to_dict()
        validate_report(doc)
        write_output(doc, output_path)
        if verbose:
            print(f"[codedash] report: {output_path}", file=sys.stderr)

    return report


def write_output(data: dict, output_path) -> None:
    """Write JSON to a file if output_path given, otherwise stdout."""
    text = json.dumps(data, indent=2)
    if output_path:
        Path(output_path).write_text(text)
    else:
        print(text)

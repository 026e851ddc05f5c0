"""
Enriched AST loading — enriched.json → [Node].

Input shape (produced by the tree-sitter parsers + git enrichment):

    {
      "files": [
        {
          "name": "auth.ts",
          "nodes": [
            {"name": "AuthService", "kind": "class", "depth": 0, "lines": 80, ...},
            {"name": "login", "kind": "method", "depth": 1, "params": 2,
             "git_churn_30d": 12, "coverage": 0.4, ...}
          ]
        }
      ]
    }

Members nested below a class/interface are qualified with the container
name: ``auth.ts::AuthService.login``.  Everything else becomes
``file::name``.
"""
from __future__ import annotations

import json
import math
from pathlib import Path

from codedash.model.node import Node
from codedash.schema import validate_enriched

_CONTAINER_KINDS = {"class", "interface"}
_TRIVIAL_KINDS   = {"interface", "type_alias"}


def load_json(source) -> dict:
    """
    Load an enriched document from:
      - a dict        → returned as-is
      - a file path   → read and parse JSON
    """
    if isinstance(source, dict):
        return source
    with open(Path(source)) as f:
        return json.load(f)


def estimate_cyclomatic(raw: dict):
    """
    Cyclomatic estimate when the parser did not supply one.

    A heuristic (lines/10 + params/2), not McCabe complexity.  A value
    present in the input always wins.
    """
    if raw.get("cyclomatic") is not None:
        return raw["cyclomatic"]
    if raw.get("kind") in _TRIVIAL_KINDS:
        return 1
    lines  = raw.get("lines") or 1
    params = raw.get("params") or 0
    return max(1, int(lines // 10) + math.floor(params * 0.5))


def qualified_name(file_name: str, raw_name: str, parent: "str | None") -> str:
    if parent:
        return f"{file_name}::{parent}.{raw_name}"
    return f"{file_name}::{raw_name}"


def to_nodes(doc: dict) -> list[Node]:
    """Convert an enriched document into Nodes.  Raises on schema violations."""
    validate_enriched(doc)
    nodes = []

    for file in doc["files"]:
        file_name = file["name"]
        current_parent = None
        parent_depth = 0

        for raw in file.get("nodes", []):
            raw_depth = raw.get("depth") or 0
            is_container = raw.get("kind") in _CONTAINER_KINDS

            if is_container:
                current_parent = raw.get("name")
                parent_depth = raw_depth
            elif raw_depth <= parent_depth:
                current_parent = None

            nested_in = current_parent if not is_container and raw_depth > parent_depth else None
            exported = raw.get("exported") or False

            nodes.append(Node(
                name           = qualified_name(file_name, raw.get("name"), nested_in),
                short_name     = raw.get("name"),
                file           = file_name,
                semantic_type  = raw.get("kind"),

                lines          = raw.get("lines"),
                start_line     = raw.get("start_line"),
                end_line       = raw.get("end_line"),
                depth          = raw_depth,
                params         = raw.get("params"),
                field_count    = raw.get("field_count"),

                exported       = exported,
                exported_score = 1 if exported else 0,
                visibility     = raw.get("visibility") or ("pub" if exported else "private"),

                cyclomatic     = estimate_cyclomatic(raw),
                git_churn_30d  = raw.get("git_churn_30d"),
                coverage       = raw.get("coverage"),
            ))

    return nodes


def load_nodes(source) -> list[Node]:
    """load_json + to_nodes."""
    return to_nodes(load_json(source))

"""
Node — immutable per-symbol metric record.

A Node holds structural facts about one code symbol (function, class,
method …) plus the external data attached by the enrichment tools (git
churn, test coverage).  It is never mutated after construction, and
classification results are never written back onto it.

    node = Node.from_dict({
        "name": "auth.ts::login", "short_name": "login",
        "file": "auth.ts", "semantic_type": "function",
        "lines": 42, "git_churn_30d": 12,
    })
    node.lines       # 42
    node.coverage    # None  (nullable, no default)

FIELDS is the single source of truth for names, types and defaults.
Index sources are validated against it.
"""
from __future__ import annotations

from codedash.errors import ConstructionError
from codedash.model.range import is_number


FIELDS: dict[str, dict] = {
    # Identity
    "name":           {"type": "string",  "required": True},
    "short_name":     {"type": "string",  "required": True},
    "file":           {"type": "string",  "required": True},
    "semantic_type":  {"type": "string",  "required": True},

    # Structural metrics
    "lines":          {"type": "number",  "default": 1},
    "start_line":     {"type": "number",  "default": 0},
    "end_line":       {"type": "number",  "default": 0},
    "depth":          {"type": "number",  "default": 0},
    "params":         {"type": "number",  "default": 0},
    "field_count":    {"type": "number",  "default": 0},
    "cyclomatic":     {"type": "number",  "default": 1},

    # Visibility
    "exported":       {"type": "boolean", "default": False},
    "exported_score": {"type": "number",  "default": 0},
    "visibility":     {"type": "string",  "default": "private"},

    # External data
    "git_churn_30d":  {"type": "number",  "default": 0},
    "coverage":       {"type": "number",  "nullable": True},
}

_TYPE_CHECKS = {
    "string":  lambda v: isinstance(v, str),
    "number":  is_number,
    "boolean": lambda v: isinstance(v, bool),
}


class Node:
    __slots__ = tuple(FIELDS)

    def __init__(self, **raw):
        unknown = sorted(set(raw) - set(FIELDS))
        if unknown:
            raise ConstructionError(f"Node: unknown field(s) {', '.join(unknown)}")

        ctx = str(raw.get("name") or raw.get("short_name") or "?")
        for field_name, spec in FIELDS.items():
            val = raw.get(field_name)
            if val is None:
                if spec.get("required"):
                    raise ConstructionError(
                        f"Node: required field '{field_name}' is missing ({ctx})"
                    )
                val = spec.get("default")
            elif not _TYPE_CHECKS[spec["type"]](val):
                raise ConstructionError(
                    f"Node: field '{field_name}' expected {spec['type']}, "
                    f"got {type(val).__name__} ({ctx})"
                )
            object.__setattr__(self, field_name, val)

    @classmethod
    def from_dict(cls, raw: dict) -> "Node":
        """Build a Node from a loader dict.  Keys outside FIELDS are ignored."""
        if not isinstance(raw, dict):
            raise ConstructionError(f"Node: expected a dict, got {type(raw).__name__}")
        return cls(**{k: v for k, v in raw.items() if k in FIELDS})

    def to_dict(self) -> dict:
        return {name: getattr(self, name) for name in FIELDS}

    def __setattr__(self, name, value):
        raise AttributeError(f"Node is immutable (tried to set '{name}')")

    def __delattr__(self, name):
        raise AttributeError(f"Node is immutable (tried to delete '{name}')")

    def __eq__(self, other):
        if not isinstance(other, Node):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __hash__(self):
        return hash(tuple(getattr(self, n) for n in FIELDS))

    def __repr__(self):
        return f"Node<{self.semantic_type} {self.short_name}>"


# ── Introspection ──────────────────────────────────────────────────────────────

def numeric_fields() -> list[str]:
    """Sorted names of all numeric fields (the valid Index sources)."""
    return sorted(name for name, spec in FIELDS.items() if spec["type"] == "number")


def validate_source(field_name: str) -> "tuple[bool, str | None]":
    """Check that a field exists and is numeric.  Returns (ok, error_message)."""
    spec = FIELDS.get(field_name)
    if spec is None:
        return False, f"unknown field '{field_name}' (not a Node field)"
    if spec["type"] != "number":
        return False, (
            f"field '{field_name}' is {spec['type']}, not number "
            "(cannot use as Index source)"
        )
    return True, None

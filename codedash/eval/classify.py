"""
Domain classification — pure functions, Node → domain name.

    rules = DomainRules(
        domains=[DomainRule("auth", ["auth", "session"])],
        exclude=["index", ".test."],
    )
    classify_node(node, rules)            # "auth" | "_excluded" | "unknown"
    build_domain_map(nodes, rules)        # {node.name: domain}

Patterns are literal substrings (no wildcard or regex syntax) matched
against the node's qualified name, file and short name.

Order:
  1. any exclude pattern matches     → "_excluded"
  2. first domain rule that matches  → its name   (declaration order)
  3. otherwise                       → rules.fallback
"""
from __future__ import annotations

from codedash.errors import ResolutionError

EXCLUDED = "_excluded"
DEFAULT_FALLBACK = "unknown"


class DomainRule:
    __slots__ = ("name", "patterns")

    def __init__(self, name: str, patterns):
        if not isinstance(name, str) or not name:
            raise ResolutionError(f"domain: name must be a non-empty string, got {name!r}")
        if isinstance(patterns, str) or not isinstance(patterns, (list, tuple)):
            raise ResolutionError(f"domain '{name}': patterns must be a list of strings")
        for p in patterns:
            if not isinstance(p, str) or not p:
                raise ResolutionError(
                    f"domain '{name}': pattern {p!r} must be a non-empty string"
                )
        object.__setattr__(self, "name", name)
        object.__setattr__(self, "patterns", tuple(patterns))

    def __setattr__(self, name, value):
        raise AttributeError("DomainRule is immutable")

    def __eq__(self, other):
        if not isinstance(other, DomainRule):
            return NotImplemented
        return (self.name, self.patterns) == (other.name, other.patterns)

    def __hash__(self):
        return hash((self.name, self.patterns))

    def __repr__(self):
        return f"DomainRule({self.name!r}, {list(self.patterns)!r})"


class DomainRules:
    __slots__ = ("domains", "exclude", "fallback")

    def __init__(self, domains=(), exclude=(), fallback: str = DEFAULT_FALLBACK):
        object.__setattr__(self, "domains", tuple(domains))
        object.__setattr__(self, "exclude", tuple(exclude))
        object.__setattr__(self, "fallback", fallback)

    @property
    def active(self) -> bool:
        """True when domain rules are declared.  Exclude patterns alone do not group."""
        return bool(self.domains)

    def __setattr__(self, name, value):
        raise AttributeError("DomainRules is immutable")

    def __repr__(self):
        return (
            f"DomainRules(domains={list(self.domains)!r}, "
            f"exclude={list(self.exclude)!r}, fallback={self.fallback!r})"
        )


def _matches(node, pattern: str) -> bool:
    return (
        pattern in node.name
        or pattern in (node.file or "")
        or pattern in (node.short_name or "")
    )


def classify_node(node, rules: DomainRules) -> str:
    """Domain name for one node."""
    for pattern in rules.exclude:
        if _matches(node, pattern):
            return EXCLUDED

    for domain in rules.domains:
        for pattern in domain.patterns:
            if _matches(node, pattern):
                return domain.name

    return rules.fallback or DEFAULT_FALLBACK


def build_domain_map(nodes, rules: DomainRules) -> dict[str, str]:
    """{node.name: domain} for every node.  Does not touch the nodes."""
    return {node.name: classify_node(node, rules) for node in nodes}

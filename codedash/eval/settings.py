"""
Settings resolution — user config + preset → evaluable Settings.

Input (a dict, typically loaded from codedash.yaml):

    {
      "extends":  "recommended",          # optional preset name
      "bindings": [...],                  # BindingDef objects or mappings
      "domains":  [{"name": "auth", "patterns": ["auth"]}],
      "exclude":  ["index"],
      "fallback": "other",
    }

Steps:
  1. Load the preset's bindings.  An unknown preset name resolves to no
     bindings.  A preset that exists but is not {"bindings": [Binding…]}
     is a ResolutionError.
  2. Merge by percept name: a user binding replaces the preset binding
     for the same percept *in the preset's position*; other user
     bindings are appended in the order given.
  3. Every percept may be driven by one binding only.
  4. Resolve each binding's normalizer (binding override, else the
     index default) against the registry and attach it.

Binding mappings (from YAML) refer to catalog entries by name:

    - index: churn
      percept: hue
      normalize: rank
    - index: {name: fields, source: field_count}
      percept: {name: weight, steps: 4}
"""
from __future__ import annotations

from collections.abc import Mapping

from codedash.errors import ResolutionError
from codedash.eval.classify import DEFAULT_FALLBACK, DomainRule, DomainRules
from codedash.model.binding import BindingDef
from codedash.model.index import SourceIndex, with_normalize
from codedash.model.normalizer import NormalizerDef
from codedash.model.percept import PerceptDef
from codedash.presets import Registry, default_registry

PRESET_PREFIX = "codedash:"


class Settings:
    """Fully resolved configuration.  Every binding carries `.resolved`."""

    __slots__ = ("bindings", "rules", "preset")

    def __init__(self, bindings, rules: DomainRules, preset: str | None = None):
        object.__setattr__(self, "bindings", tuple(bindings))
        object.__setattr__(self, "rules", rules)
        object.__setattr__(self, "preset", preset)

    @property
    def domains(self):
        return self.rules.domains

    @property
    def exclude(self):
        return self.rules.exclude

    @property
    def fallback(self) -> str:
        return self.rules.fallback

    def __setattr__(self, name, value):
        raise AttributeError("Settings is immutable")

    def __repr__(self):
        return f"Settings(bindings={list(self.bindings)!r}, rules={self.rules!r})"


# ── Presets ────────────────────────────────────────────────────────────────────

def load_preset(name: str, registry: Registry) -> "list[BindingDef] | None":
    """
    Preset bindings by name, or None if no such preset exists.

    Accepts "recommended" and "codedash:recommended".
    """
    if not isinstance(name, str):
        raise ResolutionError(f"extends: preset name must be a string, got {type(name).__name__}")
    short = name[len(PRESET_PREFIX):] if name.startswith(PRESET_PREFIX) else name
    preset = registry.presets.get(short)
    if preset is None:
        return None

    if not isinstance(preset, Mapping):
        raise ResolutionError(
            f"preset '{name}': must be a mapping with 'bindings', got {type(preset).__name__}"
        )
    bindings = preset.get("bindings", [])
    if not isinstance(bindings, (list, tuple)):
        raise ResolutionError(
            f"preset '{name}': 'bindings' must be a list, got {type(bindings).__name__}"
        )
    for i, b in enumerate(bindings):
        if not isinstance(b, BindingDef):
            raise ResolutionError(f"preset '{name}': bindings[{i}] must be a Binding")
    return list(bindings)


# ── Merge ──────────────────────────────────────────────────────────────────────

def merge_bindings(preset_bindings: list, user_bindings: "list | None") -> list:
    """
    Preset bindings with user overrides applied, then user additions.

    When several user bindings override the same preset percept, the last
    one wins.  Repeated additions are kept as given and rejected later by
    the uniqueness check.

    Pure: returns a new list, inputs are untouched.
    """
    if not user_bindings:
        return list(preset_bindings)

    user_by_key: dict[str, BindingDef] = {}
    for b in user_bindings:
        user_by_key[b.key] = b

    merged = []
    replaced = set()
    for pb in preset_bindings:
        ub = user_by_key.get(pb.key)
        if ub is not None:
            merged.append(ub)
            replaced.add(pb.key)
        else:
            merged.append(pb)

    merged.extend(ub for ub in user_bindings if ub.key not in replaced)
    return merged


def _check_unique(bindings: list) -> None:
    seen = set()
    for b in bindings:
        if b.key in seen:
            raise ResolutionError(f"percept '{b.key}' used more than once")
        seen.add(b.key)


# ── Normalizer resolution ──────────────────────────────────────────────────────

def resolve_normalizer(ref, registry: Registry, context: str) -> NormalizerDef:
    """Turn a normalizer name or NormalizerDef into a NormalizerDef."""
    if isinstance(ref, NormalizerDef):
        return ref
    if not isinstance(ref, str):
        raise ResolutionError(
            f"{context}: normalize must be string or NormalizerDef, got {type(ref).__name__}"
        )
    found = registry.normalizers.get(ref)
    if found is None:
        known = ", ".join(sorted(registry.normalizers))
        raise ResolutionError(f"{context}: unknown normalizer '{ref}' (available: {known})")
    return found


# ── Binding mappings (config files) ────────────────────────────────────────────

def _lookup(catalog, kind: str, name, context: str):
    if not isinstance(name, str):
        raise ResolutionError(f"{context}: {kind} name must be a string, got {name!r}")
    found = catalog.get(name)
    if found is None:
        known = ", ".join(sorted(catalog))
        raise ResolutionError(f"{context}: unknown {kind} '{name}' (available: {known})")
    return found


def _coerce_index(spec, registry: Registry, context: str):
    if not isinstance(spec, Mapping):
        return _lookup(registry.indexes, "index", spec, context)

    name = spec.get("name")
    if "source" in spec:
        return SourceIndex(name or spec["source"], spec["source"], spec.get("normalize"))
    idx = _lookup(registry.indexes, "index", name, context)
    if spec.get("normalize") is not None:
        idx = with_normalize(idx, spec["normalize"])
    return idx


def _coerce_percept(spec, registry: Registry, context: str):
    if not isinstance(spec, Mapping):
        return _lookup(registry.percepts, "percept", spec, context)

    name = spec.get("name")
    if "range" in spec:
        return PerceptDef(name, spec["range"], spec.get("steps"))
    base = _lookup(registry.percepts, "percept", name, context)
    steps = spec.get("steps", base.steps)
    return PerceptDef(base.name, base.range, steps)


def coerce_binding(entry, registry: Registry, position: int = 0) -> BindingDef:
    """Accept a BindingDef as-is or build one from a config mapping."""
    if isinstance(entry, BindingDef):
        return entry
    context = f"bindings[{position}]"
    if not isinstance(entry, Mapping):
        raise ResolutionError(
            f"{context}: must be a Binding or a mapping, got {type(entry).__name__}"
        )
    for key in ("index", "percept"):
        if key not in entry:
            raise ResolutionError(f"{context}: missing required key '{key}'")
    return BindingDef(
        _coerce_index(entry["index"], registry, context),
        _coerce_percept(entry["percept"], registry, context),
        normalize=entry.get("normalize"),
        label=entry.get("label"),
    )


def _coerce_rules(config: Mapping) -> DomainRules:
    domains = config.get("domains") or []
    exclude = config.get("exclude") or []
    fallback = config.get("fallback") or DEFAULT_FALLBACK

    if not isinstance(domains, (list, tuple)):
        raise ResolutionError("domains: must be a list of {name, patterns}")
    rules = []
    for i, d in enumerate(domains):
        if isinstance(d, DomainRule):
            rules.append(d)
        elif isinstance(d, Mapping):
            rules.append(DomainRule(d.get("name"), d.get("patterns")))
        else:
            raise ResolutionError(f"domains[{i}]: must be a mapping with name and patterns")

    if isinstance(exclude, str) or not isinstance(exclude, (list, tuple)):
        raise ResolutionError("exclude: must be a list of strings")
    for p in exclude:
        if not isinstance(p, str) or not p:
            raise ResolutionError(f"exclude: pattern {p!r} must be a non-empty string")
    if not isinstance(fallback, str):
        raise ResolutionError(f"fallback: must be a string, got {type(fallback).__name__}")

    return DomainRules(rules, exclude, fallback)


# ── Resolve ────────────────────────────────────────────────────────────────────

def resolve_settings(config: "Mapping | None" = None, registry: "Registry | None" = None) -> Settings:
    """Load the preset, merge user bindings, resolve normalizers."""
    config = config if config is not None else {}
    if not isinstance(config, Mapping):
        raise ResolutionError(f"settings: config must be a mapping, got {type(config).__name__}")
    registry = registry or default_registry()

    preset_name = config.get("extends")
    preset_bindings = []
    if preset_name:
        preset_bindings = load_preset(preset_name, registry) or []

    raw_user = config.get("bindings")
    if raw_user is not None and not isinstance(raw_user, (list, tuple)):
        raise ResolutionError(f"bindings: must be a list, got {type(raw_user).__name__}")
    user_bindings = [coerce_binding(b, registry, i) for i, b in enumerate(raw_user or [])]

    merged = merge_bindings(preset_bindings, user_bindings)
    _check_unique(merged)

    resolved = [
        b.with_resolved(resolve_normalizer(b.normalizer_ref, registry, f"binding '{b.key}'"))
        for b in merged
    ]
    return Settings(resolved, _coerce_rules(config), preset=preset_name or None)

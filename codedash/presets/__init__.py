"""
codedash.presets — built-in catalogs and the Registry that carries them.

A Registry is a read-only bundle of four name → definition catalogs:

    normalizers   percentile, rank
    indexes       churn, lines, params, depth, coverage, cyclomatic,
                  field_count, exported_score, complexity
    percepts      hue, size, border, opacity, clarity, weight, presence
    presets       recommended

It is built once and handed to the settings resolver; nothing mutates it
afterwards.  To add definitions, derive a new Registry:

    reg = default_registry().extend(normalizers={"log": my_log_normalizer})
"""
from __future__ import annotations

from functools import lru_cache
from types import MappingProxyType

from codedash.errors import ConstructionError
from codedash.model.index import IndexDef
from codedash.model.normalizer import NormalizerDef
from codedash.model.percept import PerceptDef

REQUIRED_NORMALIZERS = ("percentile", "rank")


def _check_catalog(label: str, catalog: dict, kind: type) -> None:
    for name, definition in catalog.items():
        if not isinstance(name, str):
            raise ConstructionError(f"{label} catalog: key {name!r} must be a string")
        if not isinstance(definition, kind):
            raise ConstructionError(
                f"{label} catalog: '{name}' must be {kind.__name__}, "
                f"got {type(definition).__name__}"
            )


class Registry:
    __slots__ = ("normalizers", "indexes", "percepts", "presets")

    def __init__(self, normalizers: dict, indexes: dict, percepts: dict, presets: dict):
        _check_catalog("normalizer", normalizers, NormalizerDef)
        _check_catalog("index", indexes, IndexDef)
        _check_catalog("percept", percepts, PerceptDef)
        missing = [n for n in REQUIRED_NORMALIZERS if n not in normalizers]
        if missing:
            raise ConstructionError(
                f"normalizer catalog: missing required normalizer(s) {', '.join(missing)}"
            )
        object.__setattr__(self, "normalizers", MappingProxyType(dict(normalizers)))
        object.__setattr__(self, "indexes",     MappingProxyType(dict(indexes)))
        object.__setattr__(self, "percepts",    MappingProxyType(dict(percepts)))
        object.__setattr__(self, "presets",     MappingProxyType(dict(presets)))

    def extend(self, normalizers=None, indexes=None, percepts=None, presets=None) -> "Registry":
        """New Registry with extra (or replaced) entries."""
        return Registry(
            normalizers={**self.normalizers, **(normalizers or {})},
            indexes={**self.indexes, **(indexes or {})},
            percepts={**self.percepts, **(percepts or {})},
            presets={**self.presets, **(presets or {})},
        )

    def __setattr__(self, name, value):
        raise AttributeError("Registry is immutable")

    def __repr__(self):
        return (
            f"Registry(normalizers={sorted(self.normalizers)}, "
            f"indexes={len(self.indexes)}, percepts={len(self.percepts)}, "
            f"presets={sorted(self.presets)})"
        )


@lru_cache(maxsize=None)
def default_registry() -> Registry:
    """The built-in catalogs.  Constructed on first use, then shared."""
    from codedash.presets.indexes import INDEXES
    from codedash.presets.normalizers import NORMALIZERS
    from codedash.presets.percepts import PERCEPTS
    from codedash.presets.recommended import PRESET as RECOMMENDED

    return Registry(
        normalizers=NORMALIZERS,
        indexes=INDEXES,
        percepts=PERCEPTS,
        presets={"recommended": RECOMMENDED},
    )


__all__ = ["Registry", "default_registry", "REQUIRED_NORMALIZERS"]

"""
Binding — Index × Percept.

"What to measure" paired with "how to perceive it".  Positional parts are
type-dispatched, so order does not matter:

    bind(idx.churn, pct.hue)
    bind(pct.hue, idx.churn, normalize="rank")     # override the index default
    bind(idx.lines, pct.size, label="size-by-lines")

The percept name is the binding's natural key.  Overriding a preset means
supplying another binding for the same percept: "what is measured"
changes, the visual channel stays.
"""
from __future__ import annotations

from codedash.errors import ConstructionError
from codedash.model.index import IndexDef
from codedash.model.normalizer import NormalizerDef
from codedash.model.percept import PerceptDef


class BindingDef:
    __slots__ = ("index", "percept", "normalize", "label", "resolved")

    def __init__(
        self,
        index: IndexDef,
        percept: PerceptDef,
        normalize=None,
        label: str | None = None,
        resolved: NormalizerDef | None = None,
    ):
        ctx = f"bind '{label}'" if label else "bind"
        if not isinstance(index, IndexDef):
            raise ConstructionError(f"{ctx}: IndexDef required")
        if not isinstance(percept, PerceptDef):
            raise ConstructionError(f"{ctx}: PerceptDef required")
        if normalize is not None and not isinstance(normalize, (str, NormalizerDef)):
            raise ConstructionError(
                f"{ctx}: normalize must be string or NormalizerDef, "
                f"got {type(normalize).__name__}"
            )
        object.__setattr__(self, "index", index)
        object.__setattr__(self, "percept", percept)
        object.__setattr__(self, "normalize", normalize)
        object.__setattr__(self, "label", label)
        object.__setattr__(self, "resolved", resolved)

    @property
    def key(self) -> str:
        return self.percept.name

    @property
    def source_label(self) -> str:
        return self.index.name

    @property
    def normalizer_ref(self):
        """Effective normalizer reference: binding override, else index default."""
        return self.normalize if self.normalize is not None else self.index.normalize

    def with_resolved(self, normalizer: NormalizerDef) -> "BindingDef":
        return BindingDef(self.index, self.percept, self.normalize, self.label, normalizer)

    def __setattr__(self, name, value):
        raise AttributeError("BindingDef is immutable")

    def __repr__(self):
        return f"Binding<{self.source_label} -> {self.key}>"

    __str__ = __repr__


def bind(*parts, normalize=None, label: str | None = None) -> BindingDef:
    """Build a BindingDef from exactly one IndexDef and one PerceptDef."""
    ctx = f"bind '{label}'" if label else "bind"
    idx = pct = None
    for part in parts:
        if isinstance(part, IndexDef):
            if idx is not None:
                raise ConstructionError(f"{ctx}: multiple IndexDef provided")
            idx = part
        elif isinstance(part, PerceptDef):
            if pct is not None:
                raise ConstructionError(f"{ctx}: multiple PerceptDef provided")
            pct = part
        else:
            raise ConstructionError(
                f"{ctx}: expected IndexDef or PerceptDef, got {type(part).__name__}"
            )
    return BindingDef(idx, pct, normalize=normalize, label=label)

"""
Index definition — "what to measure".

Every Index has the same shape:

    resolve(node) → float | None

None means *absent*: the node has no value for this metric.  Absence is
not an error.  It drops the node out of the binding's stats and out of
that channel in the report entry.

Four variants, one class each:

    index("lines", source="lines")                     SourceIndex
    index("risk",  compute=lambda n: n.lines / n.depth) ComputeIndex
    index("complexity", combine=(lines, params, f))     CombineIndex
    map_index(churn, math.log1p)                        MapIndex

Compute, combine and map run user code inside a single safe call
boundary: any exception, or a result that is not a finite number,
becomes None.  One bad metric on one node never aborts a batch.
"""
from __future__ import annotations

import math
from typing import Callable

from codedash.errors import ConstructionError
from codedash.model.node import validate_source
from codedash.model.normalizer import NormalizerDef
from codedash.model.range import is_number


DEFAULT_NORMALIZER = "percentile"


def _as_number(value) -> "float | None":
    if is_number(value) and math.isfinite(value):
        return value
    return None


def _safe_call(fn: Callable, *args) -> "float | None":
    """Invoke user code; any failure or non-numeric result → None."""
    try:
        value = fn(*args)
    except Exception:
        return None
    return _as_number(value)


def _check_normalize(label: str, normalize) -> None:
    if normalize is not None and not isinstance(normalize, (str, NormalizerDef)):
        raise ConstructionError(
            f"{label}: normalize must be string or NormalizerDef, "
            f"got {type(normalize).__name__}"
        )


class IndexDef:
    """Base class.  Subclasses implement resolve()."""

    kind = ""
    __slots__ = ("name", "normalize")

    def __init__(self, name: str, normalize=None):
        if not isinstance(name, str) or not name:
            raise ConstructionError(f"index: name must be a non-empty string, got {name!r}")
        _check_normalize(f"index '{name}'", normalize)
        object.__setattr__(self, "name", name)
        object.__setattr__(self, "normalize", normalize or DEFAULT_NORMALIZER)

    def resolve(self, node) -> "float | None":
        raise NotImplementedError(f"{type(self).__name__} must implement resolve(node).")

    @property
    def resolver(self) -> Callable:
        return self.resolve

    def _replace(self, **changes) -> "IndexDef":
        clone = object.__new__(type(self))
        for cls in type(self).__mro__:
            for slot in getattr(cls, "__slots__", ()):
                value = changes[slot] if slot in changes else getattr(self, slot)
                object.__setattr__(clone, slot, value)
        return clone

    def __setattr__(self, name, value):
        raise AttributeError(f"{type(self).__name__} is immutable")

    def __repr__(self):
        return f"{type(self).__name__}({self.name!r}, normalize={_norm_label(self.normalize)!r})"


def _norm_label(normalize) -> str:
    return normalize.name if isinstance(normalize, NormalizerDef) else normalize


class SourceIndex(IndexDef):
    """Reads one numeric Node field."""

    kind = "source"
    __slots__ = ("field",)

    def __init__(self, name: str, field: str, normalize=None):
        super().__init__(name, normalize)
        if not isinstance(field, str):
            raise ConstructionError(
                f"index '{name}': source must be string, got {type(field).__name__}"
            )
        ok, msg = validate_source(field)
        if not ok:
            raise ConstructionError(f"index '{name}': {msg}")
        object.__setattr__(self, "field", field)

    def resolve(self, node):
        return _as_number(getattr(node, self.field, None))


class ComputeIndex(IndexDef):
    """Arbitrary function of a Node."""

    kind = "compute"
    __slots__ = ("fn",)

    def __init__(self, name: str, fn: Callable, normalize=None):
        super().__init__(name, normalize)
        if not callable(fn):
            raise ConstructionError(
                f"index '{name}': compute must be callable, got {type(fn).__name__}"
            )
        object.__setattr__(self, "fn", fn)

    def resolve(self, node):
        return _safe_call(self.fn, node)


class CombineIndex(IndexDef):
    """Binary function of two Indexes.  Absent if either input is absent."""

    kind = "combine"
    __slots__ = ("left", "right", "fn")

    def __init__(self, name: str, left: IndexDef, right: IndexDef, fn: Callable, normalize=None):
        super().__init__(name, normalize)
        if not isinstance(left, IndexDef):
            raise ConstructionError(f"index '{name}': combine[0] must be IndexDef")
        if not isinstance(right, IndexDef):
            raise ConstructionError(f"index '{name}': combine[1] must be IndexDef")
        if not callable(fn):
            raise ConstructionError(
                f"index '{name}': combine[2] must be callable, got {type(fn).__name__}"
            )
        object.__setattr__(self, "left", left)
        object.__setattr__(self, "right", right)
        object.__setattr__(self, "fn", fn)

    def resolve(self, node):
        a = self.left.resolve(node)
        b = self.right.resolve(node)
        if a is None or b is None:
            return None
        return _safe_call(self.fn, a, b)


class MapIndex(IndexDef):
    """Post-transform of another Index's output.  Keeps the source name."""

    kind = "map"
    __slots__ = ("source", "fn")

    def __init__(self, source: IndexDef, fn: Callable, normalize=None):
        if not isinstance(source, IndexDef):
            raise ConstructionError("map_index: first argument must be IndexDef")
        super().__init__(source.name, normalize or source.normalize)
        if not callable(fn):
            raise ConstructionError(
                f"map_index: transform must be callable, got {type(fn).__name__}"
            )
        object.__setattr__(self, "source", source)
        object.__setattr__(self, "fn", fn)

    def resolve(self, node):
        v = self.source.resolve(node)
        if v is None:
            return None
        return _safe_call(self.fn, v)


# ── Constructors ───────────────────────────────────────────────────────────────

def index(name: str, *, source=None, compute=None, combine=None, normalize=None) -> IndexDef:
    """
    Build an IndexDef from exactly one of source / compute / combine.

        index("lines", source="lines")
        index("density", compute=lambda n: n.lines / max(n.params, 1))
        index("complexity", combine=(lines, params, lambda a, b: a * 0.3 + b * 2.0))
        index("lines", source="lines", normalize="rank")
    """
    given = [k for k, v in (("source", source), ("compute", compute), ("combine", combine))
             if v is not None]
    if not given:
        raise ConstructionError(
            f"index '{name}': needs one of 'source', 'compute', 'combine'"
        )
    if len(given) > 1:
        raise ConstructionError(
            f"index '{name}': only one of source/compute/combine allowed, got {', '.join(given)}"
        )

    if source is not None:
        return SourceIndex(name, source, normalize)
    if compute is not None:
        return ComputeIndex(name, compute, normalize)
    if not isinstance(combine, (list, tuple)) or len(combine) != 3:
        raise ConstructionError(
            f"index '{name}': combine must be (IndexDef, IndexDef, function)"
        )
    return CombineIndex(name, combine[0], combine[1], combine[2], normalize)


def map_index(idx: IndexDef, fn: Callable, normalize=None) -> MapIndex:
    """Transform the output of `idx`.  Inherits its normalizer unless overridden."""
    return MapIndex(idx, fn, normalize)


def with_normalize(idx: IndexDef, normalize) -> IndexDef:
    """Copy of `idx` with a different default normalizer."""
    if not isinstance(idx, IndexDef):
        raise ConstructionError("with_normalize: first argument must be IndexDef")
    if not isinstance(normalize, (str, NormalizerDef)):
        raise ConstructionError(
            f"with_normalize: normalize must be string or NormalizerDef, "
            f"got {type(normalize).__name__}"
        )
    return idx._replace(normalize=normalize)

"""
Normalizer definition.

A normalizer is a pair of pure functions:

    stats(values: list[float])  → S          fitted once per binding
    normalize(S)                → (raw → [0, 1])

stats() sees only the *defined* raw values collected across the whole
node set.  An empty distribution must still produce a usable function
(by convention the constant 0.5).

    percentile = NormalizerDef("percentile", stats=_stats, normalize=_normalize)
    fn = percentile.fit([1, 2, 3])
    fn(2)   # 0.5
"""
from __future__ import annotations

from typing import Any, Callable

from codedash.errors import ConstructionError


class NormalizerDef:
    __slots__ = ("name", "stats", "normalize")

    def __init__(
        self,
        name: str,
        stats: Callable[[list], Any],
        normalize: Callable[[Any], Callable[[float], float]],
    ):
        if not isinstance(name, str) or not name:
            raise ConstructionError(f"normalizer: name must be a non-empty string, got {name!r}")
        if not callable(stats):
            raise ConstructionError(
                f"normalizer '{name}': stats must be callable, got {type(stats).__name__}"
            )
        if not callable(normalize):
            raise ConstructionError(
                f"normalizer '{name}': normalize must be callable, got {type(normalize).__name__}"
            )
        object.__setattr__(self, "name", name)
        object.__setattr__(self, "stats", stats)
        object.__setattr__(self, "normalize", normalize)

    def fit(self, values: list) -> Callable[[float], float]:
        """
        Fit stats over `values` and return the normalize function.

        The returned function is clamped to [0, 1] so a misbehaving
        user-defined normalizer cannot leak out-of-range values into
        percept mappers.
        """
        fn = self.normalize(self.stats(list(values)))

        def clamped(raw: float) -> float:
            return min(1.0, max(0.0, fn(raw)))

        return clamped

    def __setattr__(self, name, value):
        raise AttributeError("NormalizerDef is immutable")

    def __repr__(self):
        return f"NormalizerDef({self.name!r})"

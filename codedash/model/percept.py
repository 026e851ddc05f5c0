"""
Percept definition — maps a normalized value in [0, 1] onto a visual range.

    hue  = PerceptDef("hue", range=(240, 0))           # blue → red
    size = PerceptDef("size", range=(0.2, 5.0))
    hue5 = PerceptDef("hue", range=(240, 0), steps=5)  # 5 discrete levels

All validation happens here, once.  mapper() never raises for inputs in
[0, 1].
"""
from __future__ import annotations

import math

from codedash.errors import ConstructionError
from codedash.model.range import Range, is_number


class PerceptDef:
    __slots__ = ("name", "range", "steps")

    def __init__(self, name: str, range, steps: int | None = None):
        if not isinstance(name, str) or not name:
            raise ConstructionError(f"percept: name must be a non-empty string, got {name!r}")
        if range is None:
            raise ConstructionError(
                f"percept '{name}': range is required (e.g. range=(0, 1))"
            )
        r = range if isinstance(range, Range) else Range.from_pair(range, name)

        if steps is not None:
            if (not is_number(steps) or not math.isfinite(steps)
                    or steps < 2 or steps != math.floor(steps)):
                raise ConstructionError(
                    f"percept '{name}': steps must be integer >= 2, got {steps!r}"
                )
            steps = int(steps)

        object.__setattr__(self, "name", name)
        object.__setattr__(self, "range", r)
        object.__setattr__(self, "steps", steps)

    def mapper(self, normalized: float) -> float:
        if self.steps is not None:
            n = self.steps - 1
            normalized = math.floor(normalized * n + 0.5) / n
        return self.range.mapper(normalized)

    def __setattr__(self, name, value):
        raise AttributeError("PerceptDef is immutable")

    def __repr__(self):
        steps = f", steps={self.steps}" if self.steps else ""
        return f"PerceptDef({self.name!r}, ({self.range.lo}, {self.range.hi}){steps})"

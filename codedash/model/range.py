"""
Range value object — validated (lo, hi) with a linear mapper.

    r = Range(240, 0)
    r.lo            # 240
    r.mapper(0.5)   # 120.0

lo > hi is allowed: inverted encodings (e.g. hue 240 → 0, blue → red)
are the common case, not an error.
"""
from __future__ import annotations

from codedash.errors import ConstructionError


def is_number(value) -> bool:
    """True for int/float values.  bool is deliberately not a number here."""
    return isinstance(value, (int, float)) and not isinstance(value, bool)


class Range:
    __slots__ = ("lo", "hi")

    def __init__(self, lo, hi, ctx: str | None = None):
        prefix = f"range({ctx})" if ctx else "range"
        if not is_number(lo):
            raise ConstructionError(f"{prefix}: lo must be number, got {type(lo).__name__}")
        if not is_number(hi):
            raise ConstructionError(f"{prefix}: hi must be number, got {type(hi).__name__}")
        object.__setattr__(self, "lo", lo)
        object.__setattr__(self, "hi", hi)

    @classmethod
    def from_pair(cls, pair, ctx: str | None = None) -> "Range":
        """Parse a (lo, hi) list or tuple."""
        prefix = f"range({ctx})" if ctx else "range"
        if not isinstance(pair, (list, tuple)) or len(pair) != 2:
            raise ConstructionError(f"{prefix}: must be (lo, hi), got {pair!r}")
        return cls(pair[0], pair[1], ctx)

    def mapper(self, normalized: float) -> float:
        return self.lo + normalized * (self.hi - self.lo)

    def __setattr__(self, name, value):
        raise AttributeError("Range is immutable")

    def __eq__(self, other):
        if not isinstance(other, Range):
            return NotImplemented
        return (self.lo, self.hi) == (other.lo, other.hi)

    def __hash__(self):
        return hash((self.lo, self.hi))

    def __repr__(self):
        return f"Range({self.lo!r}, {self.hi!r})"

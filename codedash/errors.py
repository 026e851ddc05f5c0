"""
Error taxonomy.

  ConstructionError  an Index / Percept / Normalizer / Binding / Node
                     definition is invalid.  Raised where the definition
                     is built, never deferred to evaluation time.
  ResolutionError    settings cannot be resolved: duplicate percept
                     channel, unknown normalizer name, malformed preset.

A resolver that fails to produce a number while evaluating is *not* an
error — it yields None and the node simply has no value for that channel.

Both classes derive from ValueError so callers that already guard
``(ValueError, RuntimeError)`` keep reporting them as user errors.
"""


class ConstructionError(ValueError):
    """Invalid definition, detected at construction time."""


class ResolutionError(ValueError):
    """Settings could not be resolved into an evaluable binding list."""

"""
codedash.model — the declarative building blocks.

  from codedash.model import index, map_index, bind, PerceptDef, NormalizerDef
"""

from codedash.model.binding    import BindingDef, bind
from codedash.model.index      import (
    DEFAULT_NORMALIZER, IndexDef, SourceIndex, ComputeIndex, CombineIndex, MapIndex,
    index, map_index, with_normalize,
)
from codedash.model.node       import Node, FIELDS, numeric_fields, validate_source
from codedash.model.normalizer import NormalizerDef
from codedash.model.percept    import PerceptDef
from codedash.model.range      import Range

__all__ = [
    "BindingDef", "bind",
    "DEFAULT_NORMALIZER", "IndexDef", "SourceIndex", "ComputeIndex", "CombineIndex",
    "MapIndex", "index", "map_index", "with_normalize",
    "Node", "FIELDS", "numeric_fields", "validate_source",
    "NormalizerDef", "PerceptDef", "Range",
]

"""
Built-in Index catalog.

Presets pick from these; user configs refer to them by name
(``index: churn``) or import them directly.  All default to the
percentile normalizer.
"""
from codedash.model.index import index


churn          = index("churn",          source="git_churn_30d")
lines          = index("lines",          source="lines")
params         = index("params",         source="params")
depth          = index("depth",          source="depth")
coverage       = index("coverage",       source="coverage")
cyclomatic     = index("cyclomatic",     source="cyclomatic")
field_count    = index("field_count",    source="field_count")
exported_score = index("exported_score", source="exported_score")

# Size and signature width, weighted towards parameters.
complexity = index(
    "complexity",
    combine=(lines, params, lambda n_lines, n_params: n_lines * 0.3 + n_params * 2.0),
)


INDEXES = {
    "churn":          churn,
    "lines":          lines,
    "params":         params,
    "depth":          depth,
    "coverage":       coverage,
    "cyclomatic":     cyclomatic,
    "field_count":    field_count,
    "exported_score": exported_score,
    "complexity":     complexity,
}

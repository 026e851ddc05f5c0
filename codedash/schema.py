"""
Document shapes for the codedash interchange format.

Two documents flow through the pipeline:

  enriched.json  → produced by the AST parser + git enrichment tools
  report.json    → produced by the codedash evaluator

The report carries a "schema" field so downstream tools can verify
compatibility.  The enriched input predates the schema field and is
validated structurally instead.
"""

REPORT_SCHEMA = "codedash.report.v1"
SWEEP_SCHEMA  = "codedash.sweep.v1"


def validate_enriched(doc: dict) -> None:
    """Raise ValueError if the enriched AST document is malformed."""
    if not isinstance(doc, dict):
        raise ValueError(
            f"enriched.json must be a JSON object, got {type(doc).__name__}."
        )
    files = doc.get("files")
    if not isinstance(files, list):
        raise ValueError("enriched.json must contain a 'files' array.")
    for i, f in enumerate(files):
        if not isinstance(f, dict) or not isinstance(f.get("name"), str):
            raise ValueError(f"files[{i}] must be an object with a string 'name'.")
        if not isinstance(f.get("nodes", []), list):
            raise ValueError(f"files[{i}] ({f['name']}): 'nodes' must be an array.")


def validate_report(doc: dict) -> None:
    """Raise ValueError if the report document is malformed."""
    if doc.get("schema") != REPORT_SCHEMA:
        raise ValueError(
            f"Expected schema '{REPORT_SCHEMA}', got {doc.get('schema')!r}."
        )
    for key in ("entries", "groups", "total", "excluded", "bindings"):
        if key not in doc:
            raise ValueError(f"report.json must contain a '{key}' field.")

"""
codedash CLI

Primary usage, driven by a codedash.yaml config file:

    codedash run enriched.json                     # summary + top 10
    codedash run enriched.json --config ci.yaml    # explicit config
    codedash run enriched.json --domain auth       # one domain's breakdown
    codedash run enriched.json --json              # report JSON to stdout
    codedash run enriched.json --out report.json   # also save report JSON

With no config file the recommended preset is used.

Exploration (no config needed):

    codedash sweep enriched.json                   # rank index × normalizer pairs
    codedash sweep enriched.json --top 3 --json
"""

import argparse
import json
import sys


def cmd_run(args):
    """
    Run the full pipeline for one enriched document.

    Reads the config file, evaluates every binding, prints the text report
    (or the report JSON with --json).
    """
    from codedash.report.text import print_report
    from codedash.runner import run_from_config

    try:
        report = run_from_config(
            args.source,
            config=args.config,
            output_path=args.out,
            verbose=args.verbose,
        )
    except FileNotFoundError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1
    except (ValueError, RuntimeError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 1

    if args.json:
        print(json.dumps(report.to_dict(), indent=2))
    else:
        print_report(report, top_n=args.top, domain=args.domain)
    return 0


def cmd_sweep(args):
    """Rank every catalog Index × Normalizer pair and suggest a binding set."""
    from codedash.eval.loader import load_nodes
    from codedash.sweep import print_sweep, run_sweep

    try:
        nodes = load_nodes(args.source)
    except (FileNotFoundError, ValueError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 1

    result = run_sweep(nodes, top_n=args.top)

    if args.json:
        print(json.dumps(result, indent=2))
    else:
        print_sweep(result)
    return 0


def main(argv=None):
    parser = argparse.ArgumentParser(
        prog="codedash",
        description=(
            "Map code metrics to visual channels.\n\n"
            "Quickstart:\n"
            "  codedash run enriched.json     evaluate (reads codedash.yaml)\n"
            "  codedash sweep enriched.json   find informative bindings"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    sub = parser.add_subparsers(dest="command", required=True)

    # ── run ───────────────────────────────────────────────────────────────────
    p_run = sub.add_parser(
        "run",
        help="Evaluate bindings over an enriched document (reads codedash.yaml)",
        description=(
            "Load nodes → resolve settings → classify domains → evaluate.\n"
            "Prints a summary, the top entries and the domain breakdown."
        ),
    )
    p_run.add_argument("source", metavar="SOURCE", help="enriched.json file")
    p_run.add_argument(
        "--config", metavar="FILE",
        help="Config file (default: codedash.yaml in current directory)",
    )
    p_run.add_argument("--top", type=int, default=10, metavar="N",
                       help="Number of top entries to print (default: 10)")
    p_run.add_argument("--domain", metavar="NAME",
                       help="Only show this domain in the breakdown")
    p_run.add_argument("--out", metavar="FILE", help="Save report JSON here")
    p_run.add_argument("--json", action="store_true", help="Print report JSON instead of text")
    p_run.add_argument("--verbose", action="store_true", help="Print stage info to stderr")
    p_run.set_defaults(func=cmd_run)

    # ── sweep ─────────────────────────────────────────────────────────────────
    p_sweep = sub.add_parser(
        "sweep",
        help="Rank index × normalizer pairs by spread and independence",
        description=(
            "Measures spread for every catalog index under every normalizer,\n"
            "correlates the best pair of each index, and greedily picks a set\n"
            "of informative, mutually independent bindings."
        ),
    )
    p_sweep.add_argument("source", metavar="SOURCE", help="enriched.json file")
    p_sweep.add_argument("--top", type=int, default=5, metavar="N",
                         help="Number of bindings to recommend (default: 5)")
    p_sweep.add_argument("--json", action="store_true", help="Output as JSON")
    p_sweep.set_defaults(func=cmd_sweep)

    args = parser.parse_args(argv)
    sys.exit(args.func(args))


if __name__ == "__main__":
    main()

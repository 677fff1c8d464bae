"""
Topology Capacity Analysis CLI

Computes per-node throughput ceilings, bottlenecks and tuning
recommendations for a Java web application deployment topology
(client -> gateway -> host -> runtime -> dependencies).

Input is either a JSON snapshot exported by the topology editor or one of
the bundled demo templates.

Usage:
    analyze-topology --template io-bound-bff
    analyze-topology --input topology.json --json
    analyze-topology --input topology.json --validate
    analyze-topology --list-layers
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from capacity_planner.config.settings import LOG_FORMAT, Settings
from capacity_planner.domain.config.layers import DEFAULT_REGISTRY
from capacity_planner.domain.models import AnalysisInput, WarningLevel
from capacity_planner.domain.services import (
    CapacityAnalyzer,
    list_templates,
    load_template,
    validate_topology,
)
from capacity_planner.exceptions import CapacityPlannerError
from capacity_planner.cli.display import (
    Colors,
    colored,
    display_analysis_result,
    display_warnings,
    print_header,
)

EXIT_OK = 0
EXIT_LOAD_ERROR = 1
EXIT_BOTTLENECK = 2

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# CLI Argument Parsing
# ---------------------------------------------------------------------------

def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with clear grouping."""
    parser = argparse.ArgumentParser(
        prog="analyze-topology",
        description="Capacity analysis of a Java web application deployment topology.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
examples:
  %(prog)s --template io-bound-bff           Analyze the bundled demo
  %(prog)s -i topology.json                  Analyze an exported snapshot
  %(prog)s -i topology.json --json           Print the result as JSON
  %(prog)s -i topology.json --validate       Structural checks only
  %(prog)s -i topology.json --fail-on-bottleneck
  %(prog)s --list-layers                     Show the layer catalogue
  %(prog)s --list-layers --json              Layer catalogue with field schemas
""",
    )

    # --- Input (mutually exclusive) ---
    source = parser.add_mutually_exclusive_group()
    source.add_argument("--input", "-i", metavar="FILE", help="JSON topology snapshot")
    source.add_argument("--template", "-t", metavar="KEY", help="Bundled demo template")
    source.add_argument("--list-layers", action="store_true", help="List available layers and exit")
    source.add_argument("--list-templates", action="store_true", help="List demo templates and exit")

    # --- Mode ---
    mode = parser.add_argument_group("Mode")
    mode.add_argument("--validate", action="store_true",
                      help="Run structural topology checks instead of the analysis")
    mode.add_argument("--fail-on-bottleneck", action="store_true",
                      help=f"Exit with code {EXIT_BOTTLENECK} when the target is not met")

    # --- Output ---
    output = parser.add_argument_group("Output")
    output.add_argument("--output", "-o", metavar="FILE", help="Export results to JSON file")
    output.add_argument("--json", action="store_true", help="Print results as JSON to stdout")
    output.add_argument("--quiet", "-q", action="store_true", help="Suppress console display")
    output.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")

    return parser


# ---------------------------------------------------------------------------
# Input / Output Helpers
# ---------------------------------------------------------------------------

def load_snapshot(args: argparse.Namespace) -> AnalysisInput:
    """
    Snapshot from ``--input`` or ``--template``.

    Raises:
        CapacityPlannerError: malformed snapshot or unknown template
        OSError / ValueError: unreadable file or invalid JSON
    """
    if args.template:
        return load_template(args.template)
    if not args.input:
        raise CapacityPlannerError("Either --input or --template is required")
    with open(args.input, encoding="utf-8") as f:
        data = json.load(f)
    return AnalysisInput.from_dict(data)


def export_json(payload: object, path: str) -> None:
    """Write results to a JSON file, creating parent directories as needed."""
    output_path = Path(path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w", encoding="utf-8") as f:
        json.dump(payload, f, indent=2, default=str)


def print_templates() -> None:
    print_header("DEMO TEMPLATES")
    for template in list_templates():
        print(f"  {colored(template.key, Colors.CYAN, bold=True)}  {template.label}")
        print(f"      {template.description}")


# ---------------------------------------------------------------------------
# Entry Point
# ---------------------------------------------------------------------------

def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    # Informational, then exit
    if args.list_layers:
        if args.json:
            print(json.dumps([layer.to_dict() for layer in DEFAULT_REGISTRY.layers], indent=2))
        else:
            print(DEFAULT_REGISTRY.list_layers())
        return EXIT_OK
    if args.list_templates:
        print_templates()
        return EXIT_OK

    settings = Settings.from_env()
    log_level = (
        logging.DEBUG if args.verbose
        else logging.WARNING if args.quiet
        else settings.log_level_value
    )
    logging.basicConfig(level=log_level, format=LOG_FORMAT, datefmt="%H:%M:%S")

    try:
        snapshot = load_snapshot(args)
    except (CapacityPlannerError, OSError, ValueError) as exc:
        print(colored(f"Error: {exc}", Colors.RED), file=sys.stderr)
        if args.verbose:
            logger.exception("Could not load topology")
        return EXIT_LOAD_ERROR

    if args.validate:
        issues = validate_topology(snapshot.topology, DEFAULT_REGISTRY)
        payload = [w.to_dict() for w in issues]
        if args.output:
            export_json(payload, args.output)
        if args.json:
            print(json.dumps(payload, indent=2))
        elif not args.quiet:
            display_warnings(issues, "Topology Validation")
        has_errors = any(w.level is WarningLevel.ERROR for w in issues)
        return EXIT_LOAD_ERROR if has_errors else EXIT_OK

    analyzer = CapacityAnalyzer(DEFAULT_REGISTRY, settings.calibration())
    result = analyzer.analyze(snapshot)

    if args.output:
        export_json(result.to_dict(), args.output)
        if not args.quiet and not args.json:
            print(colored(f"\nResults exported to: {args.output}", Colors.GREEN))

    if args.json:
        print(json.dumps(result.to_dict(), indent=2, default=str))
    elif not args.quiet:
        display_analysis_result(result, snapshot)

    if args.fail_on_bottleneck and result.bottlenecks:
        return EXIT_BOTTLENECK
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())

#!/usr/bin/env python3
"""
Topology Capacity Analysis CLI

Thin wrapper so the tool runs from a source checkout without installing.
See ``capacity_planner/cli/analyze.py`` for the options.

Usage:
    python bin/analyze_topology.py --template io-bound-bff
    python bin/analyze_topology.py --input topology.json --json
"""
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from capacity_planner.cli.analyze import main


if __name__ == "__main__":
    sys.exit(main())

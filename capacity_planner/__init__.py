"""
Capacity Planner

Rule-based throughput ceiling analysis for Java web application
deployment topologies.

    >>> from capacity_planner import analyze, load_template
    >>> result = analyze(load_template("io-bound-bff"))
    >>> result.overall_ceiling
"""

from capacity_planner.domain.config import (
    Calibration,
    DEFAULT_CALIBRATION,
    DEFAULT_REGISTRY,
    LayerRegistry,
)
from capacity_planner.domain.models import AnalysisInput, AnalysisResult, Topology
from capacity_planner.domain.services import (
    CapacityAnalyzer,
    TopologyBuilder,
    analyze,
    list_templates,
    load_template,
    validate_topology,
)
from capacity_planner.exceptions import (
    CapacityPlannerError,
    SnapshotError,
    TemplateNotFoundError,
    TopologyError,
)

__version__ = "0.1.0"

__all__ = [
    "analyze", "CapacityAnalyzer", "AnalysisInput", "AnalysisResult", "Topology",
    "DEFAULT_REGISTRY", "LayerRegistry", "DEFAULT_CALIBRATION", "Calibration",
    "TopologyBuilder", "validate_topology", "load_template", "list_templates",
    "CapacityPlannerError", "SnapshotError", "TopologyError", "TemplateNotFoundError",
]

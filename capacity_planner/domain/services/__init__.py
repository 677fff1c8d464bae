"""
Domain Services Package

Analysis orchestration, per-layer rules, topology validation and building.
"""

from .capacity_analyzer import CapacityAnalyzer, analyze
from .topology_validator import TopologyValidator, validate_topology
from .topology_builder import TopologyBuilder
from .templates import TEMPLATES, TemplateDefinition, list_templates, load_template

__all__ = [
    "CapacityAnalyzer", "analyze",
    "TopologyValidator", "validate_topology",
    "TopologyBuilder",
    "TEMPLATES", "TemplateDefinition", "list_templates", "load_template",
]

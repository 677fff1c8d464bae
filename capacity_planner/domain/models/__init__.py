"""
Domain Models Package

Pure domain records with no knowledge of the layer catalogue.
Re-exports all domain models for convenient imports.
"""

from .enums import (
    BusinessScenario,
    ClientServerMode,
    DependencyKind,
    DependencyRole,
    HealthStatus,
    HttpClientType,
    LayerId,
    LayerKind,
    RecommendationPriority,
    SchemaCategory,
    WarningLevel,
)
from .topology import AnalysisInput, Topology, TopologyEdge, TopologyNode
from .node_settings import (
    ClientObjectives,
    HostSettings,
    HttpApiClientSettings,
    HttpApiServerSettings,
    RuntimeSettings,
)
from .results import (
    AnalysisResult,
    Bottleneck,
    CeilingDetail,
    DiagnosticWarning,
    NodeCeiling,
    NodeRecommendation,
    NodeStatus,
    Recommendation,
)

__all__ = [
    # Enums
    "LayerId", "LayerKind", "DependencyKind", "DependencyRole", "ClientServerMode",
    "SchemaCategory", "BusinessScenario", "HttpClientType",
    "WarningLevel", "RecommendationPriority", "HealthStatus",
    # Topology
    "AnalysisInput", "Topology", "TopologyNode", "TopologyEdge",
    # Typed settings
    "ClientObjectives", "HostSettings", "RuntimeSettings",
    "HttpApiServerSettings", "HttpApiClientSettings",
    # Results
    "AnalysisResult", "CeilingDetail", "NodeCeiling", "Recommendation",
    "NodeRecommendation", "Bottleneck", "DiagnosticWarning", "NodeStatus",
]

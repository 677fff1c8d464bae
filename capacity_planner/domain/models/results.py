"""
Analysis Result Domain Models

These are the **canonical** output records of a capacity analysis run.
``to_dict()`` produces the camelCase JSON shape the topology UI reads.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List

from capacity_planner.domain.models.enums import (
    HealthStatus,
    RecommendationPriority,
    WarningLevel,
)


@dataclass
class CeilingDetail:
    """Throughput ceiling of a single resource dimension."""
    dimension: str              # bandwidth, pps, port, fd, thread, connection, rate_limit, conn_pool
    label: str
    max_value: int
    formula: str
    inputs: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "dimension": self.dimension,
            "label": self.label,
            "maxValue": self.max_value,
            "formula": self.formula,
            "inputs": dict(self.inputs),
        }


@dataclass
class NodeCeiling:
    """Tightest ceiling of a node plus every dimension that was computed."""
    node_id: str
    max_throughput_rps: int
    limiting_factor: str
    limiting_factor_label: str
    details: List[CeilingDetail] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "nodeId": self.node_id,
            "maxThroughputRps": self.max_throughput_rps,
            "limitingFactor": self.limiting_factor,
            "limitingFactorLabel": self.limiting_factor_label,
            "details": [d.to_dict() for d in self.details],
        }


@dataclass
class Recommendation:
    """A suggested value for one tunable, keyed by its dot path."""
    key: str
    label: str
    current_value: Any
    recommended_value: Any
    reason: str
    priority: RecommendationPriority

    def to_dict(self) -> Dict[str, Any]:
        return {
            "key": self.key,
            "label": self.label,
            "currentValue": self.current_value,
            "recommendedValue": self.recommended_value,
            "reason": self.reason,
            "priority": self.priority.value,
        }


@dataclass
class NodeRecommendation:
    node_id: str
    node_label: str
    items: List[Recommendation] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "nodeId": self.node_id,
            "nodeLabel": self.node_label,
            "items": [i.to_dict() for i in self.items],
        }


@dataclass
class Bottleneck:
    """A node whose ceiling is below the target throughput."""
    node_id: str
    node_label: str
    dimension: str
    dimension_label: str
    current_ceiling: int
    target_throughput: float
    gap_percent: float          # negative = shortfall

    def to_dict(self) -> Dict[str, Any]:
        return {
            "nodeId": self.node_id,
            "nodeLabel": self.node_label,
            "dimension": self.dimension,
            "dimensionLabel": self.dimension_label,
            "currentCeiling": self.current_ceiling,
            "targetThroughput": self.target_throughput,
            "gapPercent": self.gap_percent,
        }


@dataclass
class DiagnosticWarning:
    """
    A diagnostic about one node, or about the whole topology when
    ``node_id`` is empty.
    """
    node_id: str
    node_label: str
    level: WarningLevel
    code: str
    message: str
    suggestion: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "nodeId": self.node_id,
            "nodeLabel": self.node_label,
            "level": self.level.value,
            "code": self.code,
            "message": self.message,
            "suggestion": self.suggestion,
        }


@dataclass
class NodeStatus:
    node_id: str
    status: HealthStatus
    summary: str

    def to_dict(self) -> Dict[str, Any]:
        return {"nodeId": self.node_id, "status": self.status.value, "summary": self.summary}


@dataclass
class AnalysisResult:
    """Complete output of one ``analyze()`` run."""
    ceilings: List[NodeCeiling] = field(default_factory=list)
    recommendations: List[NodeRecommendation] = field(default_factory=list)
    bottlenecks: List[Bottleneck] = field(default_factory=list)
    warnings: List[DiagnosticWarning] = field(default_factory=list)
    node_statuses: List[NodeStatus] = field(default_factory=list)
    target_throughput: float = 0
    overall_ceiling: int = 0
    timestamp: int = 0          # epoch milliseconds

    def to_dict(self) -> Dict[str, Any]:
        return {
            "ceilings": [c.to_dict() for c in self.ceilings],
            "recommendations": [r.to_dict() for r in self.recommendations],
            "bottlenecks": [b.to_dict() for b in self.bottlenecks],
            "warnings": [w.to_dict() for w in self.warnings],
            "nodeStatuses": [s.to_dict() for s in self.node_statuses],
            "targetThroughput": self.target_throughput,
            "overallCeiling": self.overall_ceiling,
            "timestamp": self.timestamp,
        }

    def status_map(self) -> Dict[str, NodeStatus]:
        """node id → status, for quick lookups when colouring a diagram."""
        return {s.node_id: s for s in self.node_statuses}

    def ceiling_for(self, node_id: str) -> NodeCeiling:
        for ceiling in self.ceilings:
            if ceiling.node_id == node_id:
                return ceiling
        raise KeyError(node_id)

    def warnings_for(self, node_id: str) -> List[DiagnosticWarning]:
        return [w for w in self.warnings if w.node_id == node_id]

    @property
    def has_errors(self) -> bool:
        return any(w.level is WarningLevel.ERROR for w in self.warnings)

    @property
    def is_achievable(self) -> bool:
        """The target is reachable when every computed ceiling meets it."""
        return bool(self.ceilings) and self.overall_ceiling >= self.target_throughput

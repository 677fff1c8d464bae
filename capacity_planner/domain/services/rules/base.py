"""
Shared pieces of the per-layer ceiling rules.

Every rule is a pure function of typed settings and a ``Calibration``; it
returns plain data and never raises for bad configuration values.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, List

from capacity_planner.domain.config.calibration import Calibration, DEFAULT_CALIBRATION
from capacity_planner.domain.models import (
    CeilingDetail,
    DiagnosticWarning,
    Recommendation,
    RecommendationPriority,
    TopologyNode,
    WarningLevel,
)


@dataclass
class RuleResult:
    """Ceiling details, diagnostics and recommendations of one rule run."""
    details: List[CeilingDetail] = field(default_factory=list)
    warnings: List[DiagnosticWarning] = field(default_factory=list)
    recommendations: List[Recommendation] = field(default_factory=list)


class CeilingRule:
    """Base class carrying calibration, logger and the result factories."""

    def __init__(self, calibration: Calibration = DEFAULT_CALIBRATION):
        self.calibration = calibration
        self._logger = logging.getLogger(self.__class__.__module__)

    def _warning(
        self,
        node: TopologyNode,
        level: WarningLevel,
        code: str,
        message: str,
        suggestion: str,
    ) -> DiagnosticWarning:
        """Factory method for creating DiagnosticWarning instances."""
        self._logger.debug("%s on %s: %s", code, node.id, message)
        return DiagnosticWarning(
            node_id=node.id,
            node_label=node.label,
            level=level,
            code=code,
            message=message,
            suggestion=suggestion,
        )

    @staticmethod
    def _detail(dimension: str, label: str, max_value: int, formula: str, **inputs: Any) -> CeilingDetail:
        return CeilingDetail(
            dimension=dimension,
            label=label,
            max_value=max_value,
            formula=formula,
            inputs=inputs,
        )

    @staticmethod
    def _recommend(
        key: str,
        label: str,
        current: Any,
        recommended: Any,
        reason: str,
        priority: RecommendationPriority,
    ) -> Recommendation:
        return Recommendation(
            key=key,
            label=label,
            current_value=current,
            recommended_value=recommended,
            reason=reason,
            priority=priority,
        )

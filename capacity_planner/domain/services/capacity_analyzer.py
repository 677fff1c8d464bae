"""
Capacity Analyzer

Main orchestrator of a capacity analysis run. Locates the key nodes of a
topology snapshot, runs the per-layer rules and merges their output into a
single ``AnalysisResult``:

    1. Locate client / host / runtime (first node of each layer)
    2. Gather cross-node context (target RPS, message size, dependency RT)
    3. Host rule, runtime rule, HTTP API rule for every dependency pair
    4. Per-node ceiling = tightest dimension; overall = tightest node
    5. Bottlenecks below target, node health statuses

The analyzer never raises for bad configuration values and never writes the
snapshot; every problem is reported as a ``DiagnosticWarning``.
"""

from __future__ import annotations

import logging
import math
import time
from typing import List, Optional

from capacity_planner.domain.config.calibration import Calibration, DEFAULT_CALIBRATION
from capacity_planner.domain.config.layers import DEFAULT_REGISTRY, LayerRegistry
from capacity_planner.domain.models import (
    AnalysisInput,
    AnalysisResult,
    Bottleneck,
    CeilingDetail,
    ClientObjectives,
    DiagnosticWarning,
    HealthStatus,
    HostSettings,
    HttpApiClientSettings,
    HttpApiServerSettings,
    LayerId,
    NodeCeiling,
    NodeRecommendation,
    NodeStatus,
    RuntimeSettings,
    TopologyNode,
    WarningLevel,
)
from capacity_planner.domain.services.aggregation import (
    NodeData,
    collect_dependency_rt_ms,
    collect_http_api_pairs,
    find_node_by_layer,
    get_message_size_bytes,
)
from capacity_planner.domain.services.parsing import format_number
from capacity_planner.domain.services.rules import (
    HostCeilingRule,
    HttpApiCeilingRule,
    RuntimeCeilingRule,
)

GLOBAL_LABEL = "Global"

_MISSING_NODES = (
    (LayerId.CLIENT, "MISSING_CLIENT", "No client layer node found",
     "Add a client node and set the load objectives"),
    (LayerId.HOST, "MISSING_HOST", "No host layer node found",
     "Add a host node and set the environment constraints"),
    (LayerId.RUNTIME, "MISSING_RUNTIME", "No runtime layer node found",
     "Add a runtime node and set its tunables"),
)


def tightest(node_id: str, details: List[CeilingDetail]) -> NodeCeiling:
    """Node ceiling from its smallest detail; the first one wins a tie."""
    limiting = min(details, key=lambda d: d.max_value)
    return NodeCeiling(
        node_id=node_id,
        max_throughput_rps=limiting.max_value,
        limiting_factor=limiting.dimension,
        limiting_factor_label=limiting.label,
        details=list(details),
    )


class CapacityAnalyzer:
    """
    Deterministic, rule-based capacity analysis of a topology snapshot.

    Example:
        >>> analyzer = CapacityAnalyzer()
        >>> result = analyzer.analyze(load_template("io-bound-bff"))
        >>> result.overall_ceiling, [b.node_id for b in result.bottlenecks]
    """

    def __init__(
        self,
        registry: LayerRegistry = DEFAULT_REGISTRY,
        calibration: Calibration = DEFAULT_CALIBRATION,
    ):
        self._logger = logging.getLogger(__name__)
        self.registry = registry
        self.calibration = calibration
        self.host_rule = HostCeilingRule(calibration)
        self.runtime_rule = RuntimeCeilingRule(calibration)
        self.http_api_rule = HttpApiCeilingRule(calibration)

    def analyze(self, snapshot: AnalysisInput) -> AnalysisResult:
        cal = self.calibration
        result = AnalysisResult()

        # 1. Key nodes
        client = find_node_by_layer(snapshot, LayerId.CLIENT, self.registry)
        host = find_node_by_layer(snapshot, LayerId.HOST, self.registry)
        runtime = find_node_by_layer(snapshot, LayerId.RUNTIME, self.registry)

        for (_, code, message, suggestion), found in zip(_MISSING_NODES, (client, host, runtime)):
            if found is None:
                result.warnings.append(DiagnosticWarning(
                    node_id="", node_label=GLOBAL_LABEL, level=WarningLevel.WARNING,
                    code=code, message=message, suggestion=suggestion,
                ))

        # 2. Cross-node context
        # Raw map: a missing target falls back to the calibrated default
        objectives = ClientObjectives.from_map(
            snapshot.objectives.get(client.node.id) if client else None, cal.default_target_rps)
        target = objectives.target_throughput_rps
        message_size = get_message_size_bytes(snapshot, cal.default_message_size_bytes)
        dependency_rt_ms = collect_dependency_rt_ms(snapshot)
        host_settings = HostSettings.from_maps(
            host.constraints if host else None, host.tunables if host else None)

        # 3. Rules
        if host is not None:
            host_result = self.host_rule.compute(host.node, host_settings, message_size)
            result.warnings.extend(host_result.warnings)
            if host_result.details:
                result.ceilings.append(tightest(host.node.id, host_result.details))

        if runtime is not None:
            runtime_result = self.runtime_rule.compute(
                runtime.node,
                RuntimeSettings.from_map(runtime.tunables),
                host_settings,
                objectives,
                dependency_rt_ms,
            )
            result.warnings.extend(runtime_result.warnings)
            if runtime_result.recommendations:
                result.recommendations.append(NodeRecommendation(
                    node_id=runtime.node.id,
                    node_label=runtime.node.label,
                    items=runtime_result.recommendations,
                ))
            if runtime_result.details:
                result.ceilings.append(tightest(runtime.node.id, runtime_result.details))

        for api_client, api_server in collect_http_api_pairs(snapshot, self.registry):
            self._analyze_http_api(api_client, api_server, result)

        # 4. Overall ceiling
        result.target_throughput = target
        result.overall_ceiling = min((c.max_throughput_rps for c in result.ceilings), default=0)

        # 5. Bottlenecks and statuses
        result.bottlenecks = self._find_bottlenecks(snapshot, result)
        result.node_statuses = self._node_statuses(client.node if client else None, result)
        result.timestamp = int(time.time() * 1000)

        self._logger.info(
            "Analysis complete: %d ceilings, overall %s RPS vs target %s, %d bottlenecks, %d warnings",
            len(result.ceilings), result.overall_ceiling, target,
            len(result.bottlenecks), len(result.warnings),
        )
        return result

    def _analyze_http_api(self, client: NodeData, server: NodeData, result: AnalysisResult) -> None:
        api_result = self.http_api_rule.compute(
            client.node,
            server.node,
            HttpApiClientSettings.from_maps(client.constraints, client.tunables),
            HttpApiServerSettings.from_map(server.constraints),
        )
        result.warnings.extend(api_result.warnings)
        if api_result.server_details:
            result.ceilings.append(tightest(server.node.id, api_result.server_details))
        if api_result.client_details:
            result.ceilings.append(tightest(client.node.id, api_result.client_details))

    def _find_bottlenecks(self, snapshot: AnalysisInput, result: AnalysisResult) -> List[Bottleneck]:
        target = result.target_throughput
        if target <= 0:
            return []
        bottlenecks = []
        for ceiling in result.ceilings:
            if ceiling.max_throughput_rps >= target:
                continue
            node = snapshot.topology.get_node(ceiling.node_id)
            gap = (ceiling.max_throughput_rps - target) / target * 100
            bottlenecks.append(Bottleneck(
                node_id=ceiling.node_id,
                node_label=node.label if node else ceiling.node_id,
                dimension=ceiling.limiting_factor,
                dimension_label=ceiling.limiting_factor_label,
                current_ceiling=ceiling.max_throughput_rps,
                target_throughput=target,
                gap_percent=math.floor(gap * 10 + 0.5) / 10,
            ))
        # Largest shortfall first
        bottlenecks.sort(key=lambda b: b.gap_percent)
        return bottlenecks

    def _node_statuses(self, client: Optional[TopologyNode], result: AnalysisResult) -> List[NodeStatus]:
        target = result.target_throughput
        statuses: List[NodeStatus] = []
        for ceiling in result.ceilings:
            ratio = ceiling.max_throughput_rps / target if target > 0 else math.inf
            statuses.append(self._status_for(ceiling, ratio, result.warnings_for(ceiling.node_id), target))

            # The client gets a synthetic status right after the first ceiling
            if client is not None and all(s.node_id != client.id for s in statuses):
                achievable = result.overall_ceiling >= target
                statuses.append(NodeStatus(
                    node_id=client.id,
                    status=HealthStatus.OK if achievable else HealthStatus.ERROR,
                    summary=(f"Target {format_number(target)} RPS achievable" if achievable
                             else f"Target {format_number(target)} exceeds ceiling"
                                  f" {format_number(result.overall_ceiling)}"),
                ))
        return statuses

    def _status_for(self, ceiling: NodeCeiling, ratio: float,
                    warnings: List[DiagnosticWarning], target: float) -> NodeStatus:
        headroom = self.calibration.headroom_ratio
        value = format_number(ceiling.max_throughput_rps)
        errors = [w for w in warnings if w.level is WarningLevel.ERROR]
        cautions = [w for w in warnings if w.level is WarningLevel.WARNING]

        if ratio < 1 or errors:
            status = HealthStatus.ERROR
            summary = (f"Ceiling {value} < target {format_number(target)}" if ratio < 1
                       else errors[0].message)
        elif ratio < headroom or cautions:
            status = HealthStatus.WARNING
            summary = (f"Ceiling {value}, headroom below {round((headroom - 1) * 100)}%"
                       if ratio < headroom else cautions[0].message)
        else:
            status = HealthStatus.OK
            summary = f"Ceiling {value} RPS"
        return NodeStatus(node_id=ceiling.node_id, status=status, summary=summary)


def analyze(
    snapshot: AnalysisInput,
    registry: LayerRegistry = DEFAULT_REGISTRY,
    calibration: Calibration = DEFAULT_CALIBRATION,
) -> AnalysisResult:
    """Run a full capacity analysis of ``snapshot``."""
    return CapacityAnalyzer(registry, calibration).analyze(snapshot)

"""
Topology Validator

Structural checks of a topology against the layer catalogue. The analyzer
itself tolerates malformed topologies; this validator tells the user what
is wrong with one. It returns diagnostics and never raises.

Checks:
    DUPLICATE_NODE_ID            error    two nodes share an id
    SINGLETON_LAYER_EXCEEDED     error    more nodes than the layer allows
    DEPENDENCY_KIND_MISSING      error    dependency node without a kind
    DEPENDENCY_PAIR_INCOMPLETE   error    client/server kind not exactly one of each per group
    DANGLING_EDGE                error    edge endpoint is not a node
    ILLEGAL_EDGE                 error    layer pair not allowed by the I/O rules
    CYCLE_DETECTED               warning  calls loop back
    ISOLATED_NODE                info     node without any edge
"""

from __future__ import annotations

import logging
from collections import Counter, defaultdict
from typing import Dict, List, Union

import networkx as nx

from capacity_planner.domain.config.layers import DEFAULT_REGISTRY, LayerRegistry
from capacity_planner.domain.models import (
    AnalysisInput,
    ClientServerMode,
    DependencyRole,
    DiagnosticWarning,
    LayerId,
    LayerKind,
    Topology,
    TopologyNode,
    WarningLevel,
)

GLOBAL_LABEL = "Global"


class TopologyValidator:
    """Collects structural diagnostics for one topology."""

    def __init__(self, registry: LayerRegistry = DEFAULT_REGISTRY):
        self.registry = registry
        self._logger = logging.getLogger(__name__)

    def _issue(self, level: WarningLevel, code: str, message: str, suggestion: str,
               node: TopologyNode = None, node_id: str = "") -> DiagnosticWarning:
        """Factory method for creating DiagnosticWarning instances."""
        return DiagnosticWarning(
            node_id=node.id if node else node_id,
            node_label=node.label if node else GLOBAL_LABEL,
            level=level,
            code=code,
            message=message,
            suggestion=suggestion,
        )

    def validate(self, topology: Topology) -> List[DiagnosticWarning]:
        issues: List[DiagnosticWarning] = []
        issues.extend(self._check_node_ids(topology))
        issues.extend(self._check_layer_counts(topology))
        issues.extend(self._check_dependencies(topology))
        issues.extend(self._check_edges(topology))
        issues.extend(self._check_graph_shape(topology))

        self._logger.info(
            "Topology validation: %d nodes, %d edges, %d issues",
            len(topology.nodes), len(topology.edges), len(issues),
        )
        return issues

    def _check_node_ids(self, topology: Topology) -> List[DiagnosticWarning]:
        counts = Counter(n.id for n in topology.nodes)
        return [
            self._issue(
                WarningLevel.ERROR, "DUPLICATE_NODE_ID",
                f"Node id '{node_id}' is used by {count} nodes",
                "Give every node a unique id",
                node_id=node_id,
            )
            for node_id, count in counts.items() if count > 1
        ]

    def _check_layer_counts(self, topology: Topology) -> List[DiagnosticWarning]:
        issues = []
        for layer_id in self.registry.layer_order():
            limit = self.registry.max_count(layer_id)
            nodes = topology.nodes_by_layer(layer_id)
            if limit is not None and len(nodes) > limit:
                label = self.registry.get_layer(layer_id).label
                issues.append(self._issue(
                    WarningLevel.ERROR, "SINGLETON_LAYER_EXCEEDED",
                    f"{label} layer allows {limit} node(s) but has {len(nodes)}",
                    f"Remove the extra {label.lower()} nodes; only the first one is analyzed",
                    node=nodes[limit],
                ))
        return issues

    def _check_dependencies(self, topology: Topology) -> List[DiagnosticWarning]:
        issues = []
        groups: Dict[str, List[TopologyNode]] = defaultdict(list)

        for node in topology.nodes_by_layer(LayerId.DEPENDENCY):
            try:
                LayerKind.of(node.layer_id, node.dependency_kind)
            except ValueError:
                issues.append(self._issue(
                    WarningLevel.ERROR, "DEPENDENCY_KIND_MISSING",
                    f"Dependency node '{node.label}' has no dependency kind",
                    "Set dependencyKind to redis, database or http_api",
                    node=node,
                ))
                continue
            if self.registry.client_server_mode(node.dependency_kind) is not ClientServerMode.CLIENT_AND_SERVER:
                continue
            if not node.dependency_group_id or node.dependency_role is None:
                issues.append(self._issue(
                    WarningLevel.ERROR, "DEPENDENCY_PAIR_INCOMPLETE",
                    f"{node.dependency_kind.value} node '{node.label}' is not part of a client/server pair",
                    "Create the dependency through the builder so both halves share a group id",
                    node=node,
                ))
                continue
            groups[node.dependency_group_id].append(node)

        for group_id, members in groups.items():
            roles = Counter(n.dependency_role for n in members)
            if roles[DependencyRole.SERVER] == 1 and roles[DependencyRole.CLIENT] == 1 and len(members) == 2:
                continue
            issues.append(self._issue(
                WarningLevel.ERROR, "DEPENDENCY_PAIR_INCOMPLETE",
                f"Dependency group '{group_id}' has {roles[DependencyRole.SERVER]} server and"
                f" {roles[DependencyRole.CLIENT]} client node(s); exactly one of each is required",
                "Add or remove nodes so the group holds one server and one client",
                node=members[0],
            ))
        return issues

    def _check_edges(self, topology: Topology) -> List[DiagnosticWarning]:
        issues = []
        nodes = {n.id: n for n in topology.nodes}
        for edge in topology.edges:
            source, target = nodes.get(edge.source), nodes.get(edge.target)
            if source is None or target is None:
                missing = edge.source if source is None else edge.target
                issues.append(self._issue(
                    WarningLevel.ERROR, "DANGLING_EDGE",
                    f"Edge '{edge.id}' points at unknown node '{missing}'",
                    "Remove the edge or add the missing node",
                ))
                continue
            check = self.registry.validate_edge(
                source.layer_id, target.layer_id, source.dependency_kind, target.dependency_kind)
            if not check.valid:
                issues.append(self._issue(
                    WarningLevel.ERROR, "ILLEGAL_EDGE",
                    f"Edge {source.label} -> {target.label}: {check.message}",
                    "Remove the edge; calls must follow client -> gateway -> host -> runtime -> dependency",
                    node=source,
                ))
        return issues

    def _check_graph_shape(self, topology: Topology) -> List[DiagnosticWarning]:
        issues = []
        graph = topology.to_networkx()
        if not nx.is_directed_acyclic_graph(graph):
            cycle = nx.find_cycle(graph)
            path = " -> ".join([u for u, _ in cycle] + [cycle[0][0]])
            issues.append(self._issue(
                WarningLevel.WARNING, "CYCLE_DETECTED",
                f"Call cycle detected: {path}",
                "Calls should flow one way from the client to the dependencies",
            ))
        for node_id in sorted(nx.isolates(graph)):
            node = topology.get_node(node_id)
            # Server halves are reached through their group, not an edge
            if node.is_dependency_server and node.dependency_group_id:
                continue
            issues.append(self._issue(
                WarningLevel.INFO, "ISOLATED_NODE",
                f"Node '{node.label}' has no links",
                "Connect the node or remove it",
                node=node,
            ))
        return issues


def validate_topology(
    topology: Union[Topology, AnalysisInput],
    registry: LayerRegistry = DEFAULT_REGISTRY,
) -> List[DiagnosticWarning]:
    """Validate a topology (or the topology of a snapshot)."""
    if isinstance(topology, AnalysisInput):
        topology = topology.topology
    return TopologyValidator(registry).validate(topology)

"""
Cross-Node Aggregation

Helpers that read across node boundaries of a snapshot: locating the
singleton layers, merging registry defaults under a node's maps, summing
dependency latency and pairing HTTP API client/server halves.
"""

from __future__ import annotations

import copy
import logging
import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple

from capacity_planner.domain.config.layers import DEFAULT_REGISTRY, LayerRegistry
from capacity_planner.domain.models import (
    AnalysisInput,
    DependencyKind,
    DependencyRole,
    LayerId,
    SchemaCategory,
    TopologyNode,
)
from capacity_planner.utils.paths import get_by_path

logger = logging.getLogger(__name__)


@dataclass
class NodeData:
    """A node together with its effective (defaults + snapshot) maps."""
    node: TopologyNode
    constraints: Dict[str, Any] = field(default_factory=dict)
    objectives: Dict[str, Any] = field(default_factory=dict)
    tunables: Dict[str, Any] = field(default_factory=dict)


def _positive_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return value > 0 and not (isinstance(value, float) and math.isinf(value))


def deep_merge(base: Dict[str, Any], overlay: Mapping[str, Any]) -> Dict[str, Any]:
    """Return ``base`` updated recursively with ``overlay``; ``overlay`` wins."""
    merged = dict(base)
    for key, value in overlay.items():
        if isinstance(value, Mapping) and isinstance(merged.get(key), dict):
            merged[key] = deep_merge(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def get_node_data(
    snapshot: AnalysisInput,
    node: TopologyNode,
    registry: LayerRegistry = DEFAULT_REGISTRY,
) -> NodeData:
    """
    Effective configuration of ``node``.

    The snapshot maps are never modified; registry defaults are copied and
    the snapshot values are layered on top.
    """
    maps = {
        SchemaCategory.CONSTRAINTS: snapshot.constraints,
        SchemaCategory.OBJECTIVES: snapshot.objectives,
        SchemaCategory.TUNABLES: snapshot.tunables,
    }
    effective = {}
    for category, source in maps.items():
        defaults = registry.defaults_for(
            category, node.layer_id, node.dependency_kind, node.dependency_role)
        effective[category] = deep_merge(defaults, source.get(node.id) or {})
    return NodeData(
        node=node,
        constraints=effective[SchemaCategory.CONSTRAINTS],
        objectives=effective[SchemaCategory.OBJECTIVES],
        tunables=effective[SchemaCategory.TUNABLES],
    )


def find_node_by_layer(
    snapshot: AnalysisInput,
    layer_id: LayerId,
    registry: LayerRegistry = DEFAULT_REGISTRY,
) -> Optional[NodeData]:
    """First node of ``layer_id`` in topology order, with its data."""
    for node in snapshot.topology.nodes:
        if node.layer_id is layer_id:
            return get_node_data(snapshot, node, registry)
    return None


def collect_dependency_rt_ms(snapshot: AnalysisInput) -> float:
    """
    Sum of the server ``slaRtMs`` objectives behind every dependency the
    runtime calls directly.

    Only values set in the snapshot count; a server without ``slaRtMs`` adds
    nothing. Non-positive, non-numeric and non-finite values are skipped.
    """
    topology = snapshot.topology
    runtime = next(iter(topology.nodes_by_layer(LayerId.RUNTIME)), None)
    if runtime is None:
        return 0

    total = 0.0
    for edge in topology.outgoing_edges(runtime.id):
        target = topology.get_node(edge.target)
        if target is None or target.layer_id is not LayerId.DEPENDENCY:
            continue
        if not target.dependency_group_id:
            continue
        server = next(
            (n for n in topology.group_members(target.dependency_group_id)
             if n.dependency_role is DependencyRole.SERVER),
            None,
        )
        if server is None:
            continue
        sla = get_by_path(snapshot.objectives.get(server.id), "slaRtMs")
        if _positive_number(sla):
            total += sla
    logger.debug("Dependency latency behind runtime %s: %sms", runtime.id, total)
    return total


def collect_http_api_pairs(
    snapshot: AnalysisInput,
    registry: LayerRegistry = DEFAULT_REGISTRY,
) -> List[Tuple[NodeData, NodeData]]:
    """
    Every complete HTTP API dependency pair as ``(client, server)``.

    Halves are matched by ``dependency_group_id``; groups missing either
    half are skipped. Order follows the client nodes in the topology.
    """
    pairs: List[Tuple[NodeData, NodeData]] = []
    topology = snapshot.topology
    for node in topology.nodes:
        if node.dependency_kind is not DependencyKind.HTTP_API or not node.is_dependency_client:
            continue
        if not node.dependency_group_id:
            continue
        server = next(
            (n for n in topology.group_members(node.dependency_group_id)
             if n.is_dependency_server and n.dependency_kind is DependencyKind.HTTP_API),
            None,
        )
        if server is None:
            logger.debug("HTTP API client %s has no server half, skipped", node.id)
            continue
        pairs.append((
            get_node_data(snapshot, node, registry),
            get_node_data(snapshot, server, registry),
        ))
    return pairs


def get_message_size_bytes(snapshot: AnalysisInput, default: int = 1024) -> float:
    """First positive ``messageSizeBytes`` on the client's outbound edges."""
    topology = snapshot.topology
    client = next(iter(topology.nodes_by_layer(LayerId.CLIENT)), None)
    if client is None:
        return default
    for edge in topology.outgoing_edges(client.id):
        size = get_by_path(snapshot.edge_params.get(edge.id), "messageSizeBytes")
        if _positive_number(size):
            return size
    return default

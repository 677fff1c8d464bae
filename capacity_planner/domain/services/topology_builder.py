"""
Topology Builder

Mutable helper that assembles a valid ``AnalysisInput`` step by step. Every
node and edge is created with the registry defaults of its type, so a built
snapshot is complete even before any value is customised.

Example:
    >>> builder = TopologyBuilder()
    >>> client = builder.add_layer_node(LayerId.CLIENT)
    >>> host = builder.add_layer_node(LayerId.HOST)
    >>> builder.connect(client.id, host.id)
    >>> builder.set_value(SchemaCategory.OBJECTIVES, client.id, "targetThroughputRps", 2000)
    >>> snapshot = builder.build()
"""

from __future__ import annotations

import copy
import logging
from typing import Any, Dict, List, Optional, Tuple, Union

from capacity_planner.domain.config.layers import DEFAULT_REGISTRY, LayerRegistry
from capacity_planner.domain.models import (
    AnalysisInput,
    ClientServerMode,
    DependencyKind,
    DependencyRole,
    LayerId,
    SchemaCategory,
    Topology,
    TopologyEdge,
    TopologyNode,
)
from capacity_planner.exceptions import TopologyError
from capacity_planner.utils.paths import set_by_path


class TopologyBuilder:
    """Builds topologies that respect the layer catalogue."""

    def __init__(self, registry: LayerRegistry = DEFAULT_REGISTRY):
        self.registry = registry
        self._logger = logging.getLogger(__name__)
        self._nodes: List[TopologyNode] = []
        self._edges: List[TopologyEdge] = []
        self._maps: Dict[SchemaCategory, Dict[str, Dict[str, Any]]] = {
            category: {} for category in SchemaCategory
        }
        self._edge_params: Dict[str, Dict[str, Any]] = {}
        self._counter = 0
        self._group_counter = 0

    # -- nodes ------------------------------------------------------------

    def _next_id(self, layer_id: LayerId) -> str:
        self._counter += 1
        return f"n-{layer_id.value}-{self._counter}"

    def _add(self, node: TopologyNode) -> TopologyNode:
        self._nodes.append(node)
        for category in SchemaCategory:
            self._maps[category][node.id] = self.registry.defaults_for(
                category, node.layer_id, node.dependency_kind, node.dependency_role)
        self._logger.debug("Added node %s (%s)", node.id, node.label)
        return node

    def add_layer_node(self, layer_id: Union[LayerId, str], label: Optional[str] = None) -> TopologyNode:
        """
        Add a client, gateway, host or runtime node.

        Raises:
            TopologyError: the layer is full, or is the dependency layer
        """
        layer_id = LayerId.from_string(layer_id)
        if layer_id is LayerId.DEPENDENCY:
            raise TopologyError("Use add_dependency() for dependency nodes")
        layer = self.registry.get_layer(layer_id)
        limit = self.registry.max_count(layer_id)
        existing = sum(1 for n in self._nodes if n.layer_id is layer_id)
        if limit is not None and existing >= limit:
            raise TopologyError(f"{layer.label} layer allows at most {limit} node(s)")
        return self._add(TopologyNode(
            id=self._next_id(layer_id),
            layer_id=layer_id,
            label=label or layer.label,
        ))

    def add_dependency(
        self,
        kind: Union[DependencyKind, str],
        label: Optional[str] = None,
    ) -> Tuple[TopologyNode, ...]:
        """
        Add a dependency.

        Client/server kinds produce two nodes sharing one group id and are
        returned as ``(server, client)``; other kinds return a single node.
        """
        kind = DependencyKind(kind)
        dep_type = self.registry.get_dependency_type(kind)
        if dep_type is None:
            raise TopologyError(f"Dependency kind '{kind.value}' is not registered")
        base_label = label or dep_type.label

        if dep_type.client_server is not ClientServerMode.CLIENT_AND_SERVER:
            return (self._add(TopologyNode(
                id=self._next_id(LayerId.DEPENDENCY),
                layer_id=LayerId.DEPENDENCY,
                label=base_label,
                dependency_kind=kind,
            )),)

        self._group_counter += 1
        group_id = f"g-{kind.value}-{self._group_counter}"
        return tuple(
            self._add(TopologyNode(
                id=self._next_id(LayerId.DEPENDENCY),
                layer_id=LayerId.DEPENDENCY,
                label=f"{base_label} {role.value.capitalize()}",
                dependency_kind=kind,
                dependency_role=role,
                dependency_group_id=group_id,
            ))
            for role in (DependencyRole.SERVER, DependencyRole.CLIENT)
        )

    def get_node(self, node_id: str) -> TopologyNode:
        for node in self._nodes:
            if node.id == node_id:
                return node
        raise TopologyError(f"Unknown node '{node_id}'")

    def remove_node(self, node_id: str) -> None:
        """Remove a node and every edge touching it; pair partners go too."""
        node = self.get_node(node_id)
        doomed = {node.id}
        if node.dependency_group_id:
            doomed.update(n.id for n in self._nodes if n.dependency_group_id == node.dependency_group_id)
        self._nodes = [n for n in self._nodes if n.id not in doomed]
        for edge in [e for e in self._edges if e.source in doomed or e.target in doomed]:
            self._edges.remove(edge)
            self._edge_params.pop(edge.id, None)
        for values in self._maps.values():
            for gone in doomed:
                values.pop(gone, None)

    # -- edges ------------------------------------------------------------

    def connect(self, source_id: str, target_id: str) -> TopologyEdge:
        """
        Link two nodes in call direction.

        Raises:
            TopologyError: unknown node, illegal layer pair or duplicate link
        """
        source = self.get_node(source_id)
        target = self.get_node(target_id)
        check = self.registry.validate_edge(
            source.layer_id, target.layer_id, source.dependency_kind, target.dependency_kind)
        if not check.valid:
            raise TopologyError(f"Cannot link {source.label} -> {target.label}: {check.message}")
        if any(e.source == source_id and e.target == target_id for e in self._edges):
            raise TopologyError(f"{source.label} -> {target.label} is already linked")

        edge = TopologyEdge(id=f"e-{source_id}-{target_id}", source=source_id, target=target_id)
        self._edges.append(edge)
        params = self.registry.edge_defaults(source.layer_id, target.layer_id)
        if params:
            self._edge_params[edge.id] = params
        return edge

    # -- values -----------------------------------------------------------

    def set_value(self, category: Union[SchemaCategory, str], node_id: str, path: str, value: Any) -> None:
        self.get_node(node_id)
        record = self._maps[SchemaCategory(category)].setdefault(node_id, {})
        set_by_path(record, path, value)

    def set_edge_value(self, edge_id: str, path: str, value: Any) -> None:
        if not any(e.id == edge_id for e in self._edges):
            raise TopologyError(f"Unknown edge '{edge_id}'")
        set_by_path(self._edge_params.setdefault(edge_id, {}), path, value)

    def build(self) -> AnalysisInput:
        """Snapshot of the current state; later edits do not leak into it."""
        return AnalysisInput(
            topology=Topology(nodes=list(self._nodes), edges=list(self._edges)),
            constraints=copy.deepcopy(self._maps[SchemaCategory.CONSTRAINTS]),
            objectives=copy.deepcopy(self._maps[SchemaCategory.OBJECTIVES]),
            tunables=copy.deepcopy(self._maps[SchemaCategory.TUNABLES]),
            edge_params=copy.deepcopy(self._edge_params),
        )

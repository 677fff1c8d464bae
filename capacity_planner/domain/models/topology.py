"""
Topology Domain Models

Nodes, edges and the read-only analysis snapshot the engine consumes.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

import networkx as nx

from capacity_planner.domain.models.enums import DependencyKind, DependencyRole, LayerId
from capacity_planner.exceptions import SnapshotError


@dataclass(frozen=True)
class TopologyNode:
    """A node of the deployment topology."""
    id: str
    layer_id: LayerId
    label: str
    dependency_kind: Optional[DependencyKind] = None
    dependency_role: Optional[DependencyRole] = None
    dependency_group_id: Optional[str] = None
    x: Optional[float] = None
    y: Optional[float] = None

    @property
    def is_dependency_server(self) -> bool:
        return self.layer_id is LayerId.DEPENDENCY and self.dependency_role is DependencyRole.SERVER

    @property
    def is_dependency_client(self) -> bool:
        return self.layer_id is LayerId.DEPENDENCY and self.dependency_role is DependencyRole.CLIENT

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"id": self.id, "layerId": self.layer_id.value, "label": self.label}
        if self.dependency_kind is not None:
            data["dependencyKind"] = self.dependency_kind.value
        if self.dependency_role is not None:
            data["dependencyRole"] = self.dependency_role.value
        if self.dependency_group_id is not None:
            data["dependencyGroupId"] = self.dependency_group_id
        if self.x is not None:
            data["x"] = self.x
        if self.y is not None:
            data["y"] = self.y
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> TopologyNode:
        if not isinstance(data, Mapping):
            raise SnapshotError(f"Node entry must be an object, got {data!r}")
        try:
            node_id = str(data["id"])
            layer = LayerId.from_string(data.get("layerId", data.get("layer_id", "")))
            kind = data.get("dependencyKind", data.get("dependency_kind"))
            role = data.get("dependencyRole", data.get("dependency_role"))
            return cls(
                id=node_id,
                layer_id=layer,
                label=str(data.get("label") or node_id),
                dependency_kind=DependencyKind(kind) if kind else None,
                dependency_role=DependencyRole(role) if role else None,
                dependency_group_id=data.get("dependencyGroupId", data.get("dependency_group_id")),
                x=data.get("x"),
                y=data.get("y"),
            )
        except KeyError as exc:
            raise SnapshotError(f"Node is missing required field {exc}") from exc
        except ValueError as exc:
            raise SnapshotError(f"Invalid node {data.get('id', '?')}: {exc}") from exc


@dataclass(frozen=True)
class TopologyEdge:
    """A call-direction link between two nodes."""
    id: str
    source: str
    target: str

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "source": self.source, "target": self.target}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> TopologyEdge:
        if not isinstance(data, Mapping):
            raise SnapshotError(f"Edge entry must be an object, got {data!r}")
        try:
            source = str(data["source"])
            target = str(data["target"])
        except KeyError as exc:
            raise SnapshotError(f"Edge is missing required field {exc}") from exc
        return cls(id=str(data.get("id") or f"e-{source}-{target}"), source=source, target=target)


@dataclass
class Topology:
    """Directed graph of nodes and edges."""
    nodes: List[TopologyNode] = field(default_factory=list)
    edges: List[TopologyEdge] = field(default_factory=list)

    def get_node(self, node_id: str) -> Optional[TopologyNode]:
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    def nodes_by_layer(self, layer_id: LayerId) -> List[TopologyNode]:
        return [n for n in self.nodes if n.layer_id is layer_id]

    def outgoing_edges(self, node_id: str) -> List[TopologyEdge]:
        return [e for e in self.edges if e.source == node_id]

    def group_members(self, group_id: str) -> List[TopologyNode]:
        return [n for n in self.nodes if n.dependency_group_id == group_id]

    def to_networkx(self) -> nx.DiGraph:
        """Build a DiGraph; edges pointing at unknown nodes are left out."""
        graph = nx.DiGraph()
        for node in self.nodes:
            graph.add_node(node.id, node=node, layer=node.layer_id.value)
        for edge in self.edges:
            if edge.source in graph and edge.target in graph:
                graph.add_edge(edge.source, edge.target, edge_id=edge.id)
        return graph

    def to_dict(self) -> Dict[str, Any]:
        return {
            "nodes": [n.to_dict() for n in self.nodes],
            "edges": [e.to_dict() for e in self.edges],
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Topology:
        return cls(
            nodes=[TopologyNode.from_dict(n) for n in _entry_list(data, "nodes")],
            edges=[TopologyEdge.from_dict(e) for e in _entry_list(data, "edges")],
        )


def _entry_list(data: Mapping[str, Any], key: str) -> List[Any]:
    raw = data.get(key, [])
    if not isinstance(raw, list):
        raise SnapshotError(f"'{key}' must be a list, got {type(raw).__name__}")
    return raw


ConfigMap = Dict[str, Dict[str, Any]]


@dataclass
class AnalysisInput:
    """
    Read-only snapshot handed to the analyzer.

    ``constraints``, ``objectives`` and ``tunables`` are keyed by node id;
    ``edge_params`` is keyed by edge id.
    """
    topology: Topology = field(default_factory=Topology)
    constraints: ConfigMap = field(default_factory=dict)
    objectives: ConfigMap = field(default_factory=dict)
    tunables: ConfigMap = field(default_factory=dict)
    edge_params: ConfigMap = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "topology": self.topology.to_dict(),
            "nodeConstraints": self.constraints,
            "nodeObjectives": self.objectives,
            "nodeTunables": self.tunables,
            "edgeParams": self.edge_params,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> AnalysisInput:
        """Read the UI export format (camelCase keys; snake_case also accepted)."""
        if not isinstance(data, Mapping):
            raise SnapshotError("Snapshot must be a JSON object")
        topo = data.get("topology", {})
        if not isinstance(topo, Mapping):
            raise SnapshotError("'topology' must be an object with 'nodes' and 'edges'")
        return cls(
            topology=Topology.from_dict(topo),
            constraints=_config_map(data, "nodeConstraints", "constraints"),
            objectives=_config_map(data, "nodeObjectives", "objectives"),
            tunables=_config_map(data, "nodeTunables", "tunables"),
            edge_params=_config_map(data, "edgeParams", "edge_params"),
        )


def _config_map(data: Mapping[str, Any], key: str, alt: str) -> ConfigMap:
    raw = data.get(key, data.get(alt, {})) or {}
    if not isinstance(raw, Mapping):
        raise SnapshotError(f"'{key}' must be an object keyed by id")
    return {str(k): dict(v) if isinstance(v, Mapping) else {} for k, v in raw.items()}

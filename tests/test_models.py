"""
Unit Tests for domain models

Tests for:
    - Snapshot parsing (camelCase export format and snake_case)
    - Typed settings fallbacks
    - Graph conversion
"""

import pytest

from capacity_planner.domain.models import (
    AnalysisInput,
    BusinessScenario,
    ClientObjectives,
    DependencyKind,
    DependencyRole,
    HostSettings,
    HttpApiClientSettings,
    HttpApiServerSettings,
    HttpClientType,
    LayerId,
    RecommendationPriority,
    RuntimeSettings,
    Topology,
    TopologyEdge,
    TopologyNode,
)
from capacity_planner.exceptions import SnapshotError


SNAPSHOT = {
    "topology": {
        "nodes": [
            {"id": "c", "layerId": "client", "label": "Users", "x": 10, "y": 20},
            {"id": "h", "layerId": "host"},
            {"id": "s", "layerId": "dependency", "label": "Geo Server",
             "dependencyKind": "http_api", "dependencyRole": "server", "dependencyGroupId": "g1"},
        ],
        "edges": [
            {"id": "e1", "source": "c", "target": "h"},
            {"source": "h", "target": "s"},
        ],
    },
    "nodeConstraints": {"h": {"network": {"ppsLimit": 1600}}},
    "nodeObjectives": {"c": {"targetThroughputRps": 800}},
    "nodeTunables": {},
    "edgeParams": {"e1": {"messageSizeBytes": 512}},
}


class TestSnapshotParsing:

    def test_camel_case(self):
        snapshot = AnalysisInput.from_dict(SNAPSHOT)
        client, host, server = snapshot.topology.nodes

        assert client.label == "Users"
        assert (client.x, client.y) == (10, 20)
        assert host.label == "h"
        assert server.dependency_kind is DependencyKind.HTTP_API
        assert server.dependency_role is DependencyRole.SERVER
        assert server.dependency_group_id == "g1"
        assert snapshot.topology.edges[1].id == "e-h-s"
        assert snapshot.constraints["h"]["network"]["ppsLimit"] == 1600
        assert snapshot.edge_params["e1"] == {"messageSizeBytes": 512}

    def test_snake_case(self):
        data = {
            "topology": {"nodes": [{"id": "r", "layer_id": "jvm", "dependency_kind": None}], "edges": []},
            "tunables": {"r": {"tomcatMaxThreads": 50}},
        }
        snapshot = AnalysisInput.from_dict(data)
        assert snapshot.topology.nodes[0].layer_id is LayerId.RUNTIME
        assert snapshot.tunables == {"r": {"tomcatMaxThreads": 50}}

    def test_round_trip(self):
        snapshot = AnalysisInput.from_dict(SNAPSHOT)
        assert AnalysisInput.from_dict(snapshot.to_dict()).to_dict() == snapshot.to_dict()

    def test_missing_sections_default_empty(self):
        snapshot = AnalysisInput.from_dict({})
        assert snapshot.topology.nodes == []
        assert snapshot.constraints == {}

    @pytest.mark.parametrize("data", [
        [],
        {"topology": []},
        {"topology": {"nodes": [{"layerId": "host"}]}},
        {"topology": {"nodes": [{"id": "x", "layerId": "database"}]}},
        {"topology": {"nodes": [{"id": "x", "layerId": "dependency", "dependencyKind": "kafka"}]}},
        {"topology": {"edges": [{"source": "a"}]}},
        {"topology": {"nodes": None}},
        {"topology": {"nodes": ["abc"]}},
        {"topology": {"nodes": {"id": "x"}}},
        {"topology": {"edges": [42]}},
        {"nodeConstraints": ["not", "a", "map"]},
    ])
    def test_invalid_snapshot(self, data):
        with pytest.raises(SnapshotError):
            AnalysisInput.from_dict(data)


class TestTopology:

    def test_to_networkx_skips_dangling_edges(self):
        snapshot = AnalysisInput.from_dict(SNAPSHOT)
        snapshot.topology.edges.append(TopologyEdge("e9", "h", "ghost"))
        graph = snapshot.topology.to_networkx()

        assert set(graph.nodes) == {"c", "h", "s"}
        assert set(graph.edges) == {("c", "h"), ("h", "s")}
        assert graph.nodes["s"]["layer"] == "dependency"

    def test_lookups(self):
        topology = AnalysisInput.from_dict(SNAPSHOT).topology
        assert topology.get_node("missing") is None
        assert [n.id for n in topology.nodes_by_layer(LayerId.HOST)] == ["h"]
        assert [e.target for e in topology.outgoing_edges("h")] == ["s"]
        assert [n.id for n in topology.group_members("g1")] == ["s"]

    def test_node_roles(self):
        node = TopologyNode(id="s", layer_id=LayerId.DEPENDENCY, label="S",
                            dependency_kind=DependencyKind.REDIS, dependency_role=DependencyRole.SERVER)
        assert node.is_dependency_server
        assert not node.is_dependency_client
        assert Topology(nodes=[node]).to_dict()["nodes"][0]["dependencyRole"] == "server"


class TestTypedSettings:

    def test_host_from_maps(self):
        host = HostSettings.from_maps(
            {"spec": {"vCpu": 16}, "network": {"ppsLimit": "fast"}},
            {"net": {"ipLocalPortRange": 1024}, "fs": {"ulimitN": True}},
        )
        assert host.vcpu == 16
        assert host.pps_limit == 1_000_000
        assert host.ip_local_port_range == "32768 60999"
        assert host.ulimit_n == 65535

    @pytest.mark.parametrize("value", [float("inf"), float("-inf"), float("nan")])
    def test_non_finite_numbers_use_defaults(self, value):
        host = HostSettings.from_maps({"network": {"nicBandwidthGbps": value}}, {"fs": {"ulimitN": value}})
        assert host.nic_bandwidth_gbps == 10
        assert host.ulimit_n == 65535
        assert RuntimeSettings.from_map({"tomcatMaxThreads": value}).tomcat_max_threads == 200

    def test_large_integers_are_kept(self):
        assert HostSettings.from_maps(None, {"fs": {"fsFileMax": 10 ** 400}}).fs_file_max == 10 ** 400

    def test_host_from_nothing(self):
        assert HostSettings.from_maps(None, None) == HostSettings()

    def test_runtime_virtual_threads_needs_true(self):
        assert not RuntimeSettings.from_map({"virtualThreadsEnabled": "true"}).virtual_threads_enabled
        assert RuntimeSettings.from_map({"virtualThreadsEnabled": True}).virtual_threads_enabled

    def test_client_objectives(self):
        objectives = ClientObjectives.from_map({"businessScenario": "compute", "targetThroughputRps": 2000})
        assert objectives.business_scenario is BusinessScenario.COMPUTE
        assert objectives.target_throughput_rps == 2000

    def test_client_objectives_fallbacks(self):
        objectives = ClientObjectives.from_map({"businessScenario": "batch"}, default_target_rps=750)
        assert objectives.business_scenario is BusinessScenario.IO
        assert objectives.target_throughput_rps == 750

    def test_http_api_settings(self):
        client = HttpApiClientSettings.from_maps({"clientType": "okhttp"}, {"apache": {"maxConnPerRoute": 40}})
        assert client.client_type is HttpClientType.OKHTTP
        assert client.max_conn_per_route == 40
        assert HttpApiClientSettings.from_maps({"clientType": "feign"}, None).client_type is None

        server = HttpApiServerSettings.from_map({"avgRtMs": 80})
        assert (server.avg_rt_ms, server.rate_limit_qps) == (80, 0)

    def test_priority_rank(self):
        ranked = sorted(RecommendationPriority, key=lambda p: -p.rank)
        assert ranked == [RecommendationPriority.CRITICAL, RecommendationPriority.IMPORTANT,
                          RecommendationPriority.OPTIONAL]

"""
Unit Tests for cross-node aggregation helpers
"""

from capacity_planner.domain.models import DependencyKind, LayerId, SchemaCategory
from capacity_planner.domain.services.aggregation import (
    collect_dependency_rt_ms,
    collect_http_api_pairs,
    deep_merge,
    find_node_by_layer,
    get_message_size_bytes,
    get_node_data,
)


class TestDeepMerge:

    def test_overlay_wins(self):
        base = {"apache": {"maxConnPerRoute": 5, "maxConnTotal": 25}, "x": 1}
        merged = deep_merge(base, {"apache": {"maxConnPerRoute": 50}})
        assert merged == {"apache": {"maxConnPerRoute": 50, "maxConnTotal": 25}, "x": 1}

    def test_inputs_untouched(self):
        base = {"fs": {"ulimitN": 1}}
        overlay = {"fs": {"fsNrOpen": 2}}
        deep_merge(base, overlay)
        assert base == {"fs": {"ulimitN": 1}}
        assert overlay == {"fs": {"fsNrOpen": 2}}


class TestNodeData:

    def test_defaults_under_snapshot_values(self, stack):
        builder = stack["builder"]
        snapshot = builder.build()
        host = stack["host"]
        # Simulate a sparse export that only carries one value
        snapshot.constraints[host.id] = {"network": {"ppsLimit": 1600}}

        data = get_node_data(snapshot, host)
        assert data.constraints["network"] == {"nicBandwidthGbps": 10, "ppsLimit": 1600}
        assert data.tunables["fs"]["ulimitN"] == 65535
        assert snapshot.constraints[host.id] == {"network": {"ppsLimit": 1600}}

    def test_find_first_node(self, stack):
        snapshot = stack["builder"].build()
        assert find_node_by_layer(snapshot, LayerId.RUNTIME).node.id == stack["runtime"].id
        assert find_node_by_layer(snapshot, LayerId.GATEWAY) is None


class TestDependencyLatency:

    def test_no_runtime(self, builder):
        assert collect_dependency_rt_ms(builder.build()) == 0

    def test_unset_sla_adds_nothing(self, stack_with_api):
        assert collect_dependency_rt_ms(stack_with_api["builder"].build()) == 0

    def test_sla_from_snapshot(self, stack_with_api):
        builder = stack_with_api["builder"]
        builder.set_value(SchemaCategory.OBJECTIVES, stack_with_api["api_server"].id, "slaRtMs", 200)
        assert collect_dependency_rt_ms(builder.build()) == 200

    def test_infinite_sla_skipped(self, stack_with_api):
        builder = stack_with_api["builder"]
        builder.set_value(SchemaCategory.OBJECTIVES, stack_with_api["api_server"].id, "slaRtMs", float("inf"))
        assert collect_dependency_rt_ms(builder.build()) == 0

    def test_non_positive_sla_skipped(self, stack_with_api):
        builder = stack_with_api["builder"]
        builder.set_value(SchemaCategory.OBJECTIVES, stack_with_api["api_server"].id, "slaRtMs", -5)
        assert collect_dependency_rt_ms(builder.build()) == 0

    def test_non_numeric_sla_skipped(self, stack_with_api):
        builder = stack_with_api["builder"]
        builder.set_value(SchemaCategory.OBJECTIVES, stack_with_api["api_server"].id, "slaRtMs", "fast")
        assert collect_dependency_rt_ms(builder.build()) == 0


class TestHttpApiPairs:

    def test_pairs_in_client_order(self, builder):
        first_server, first_client = builder.add_dependency(DependencyKind.HTTP_API, "A")
        builder.add_dependency(DependencyKind.REDIS)
        second_server, second_client = builder.add_dependency(DependencyKind.HTTP_API, "B")
        pairs = collect_http_api_pairs(builder.build())

        assert [(c.node.id, s.node.id) for c, s in pairs] == [
            (first_client.id, first_server.id),
            (second_client.id, second_server.id),
        ]

    def test_orphan_client_skipped(self, builder):
        server, client = builder.add_dependency(DependencyKind.HTTP_API)
        snapshot = builder.build()
        snapshot.topology.nodes.remove(server)
        assert collect_http_api_pairs(snapshot) == []


class TestMessageSize:

    def test_default_without_client(self, builder):
        assert get_message_size_bytes(builder.build()) == 1024

    def test_edge_value(self, stack):
        builder = stack["builder"]
        builder.set_edge_value(stack["client_edge"].id, "messageSizeBytes", 4096)
        assert get_message_size_bytes(builder.build()) == 4096

    def test_infinite_ignored(self, stack):
        builder = stack["builder"]
        builder.set_edge_value(stack["client_edge"].id, "messageSizeBytes", float("inf"))
        assert get_message_size_bytes(builder.build()) == 1024

    def test_non_positive_ignored(self, stack):
        builder = stack["builder"]
        builder.set_edge_value(stack["client_edge"].id, "messageSizeBytes", 0)
        assert get_message_size_bytes(builder.build(), default=2000) == 2000

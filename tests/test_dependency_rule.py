"""
Unit Tests for the HTTP API dependency rule

Tests for:
    - Remote rate limit (server half) and Apache pool (client half) ceilings
    - Connection pool diagnostics
"""

from capacity_planner.domain.models import (
    HttpApiClientSettings,
    HttpApiServerSettings,
    HttpClientType,
    WarningLevel,
)
from capacity_planner.domain.services.rules import HttpApiCeilingRule, compute_http_api_ceiling


def _run(api_nodes, client=None, server=None):
    client_node, server_node = api_nodes
    return HttpApiCeilingRule().compute(
        client_node,
        server_node,
        client or HttpApiClientSettings(),
        server or HttpApiServerSettings(),
    )


class TestApachePool:

    def test_default_pool(self, api_nodes):
        result = _run(api_nodes)

        assert result.server_details == []
        [pool] = result.client_details
        assert pool.dimension == "conn_pool"
        assert pool.max_value == 25
        assert pool.inputs == {"maxConnPerRoute": 5, "avgRtMs": 200}
        assert result.details == result.client_details

    def test_default_per_route_warning(self, api_nodes):
        result = _run(api_nodes)
        [warning] = result.warnings
        assert warning.code == "APACHE_CONN_PER_ROUTE_DEFAULT"
        assert warning.level is WarningLevel.WARNING
        assert warning.node_id == "api-c"

    def test_slow_server(self, api_nodes):
        result = _run(api_nodes, server=HttpApiServerSettings(avg_rt_ms=500))
        assert result.client_details[0].max_value == 10

    def test_per_route_exceeds_total(self, api_nodes):
        client = HttpApiClientSettings(max_conn_per_route=50, max_conn_total=25)
        result = _run(api_nodes, client=client)

        assert result.client_details[0].max_value == 250
        assert [w.code for w in result.warnings] == ["APACHE_CONN_PER_ROUTE_EXCEEDS_TOTAL"]
        assert result.warnings[0].level is WarningLevel.ERROR

    def test_tuned_pool_is_quiet(self, api_nodes):
        result = _run(api_nodes, client=HttpApiClientSettings(max_conn_per_route=50, max_conn_total=200))
        assert result.warnings == []


class TestOtherClients:

    def test_okhttp_has_no_client_ceiling(self, api_nodes):
        result = _run(api_nodes, client=HttpApiClientSettings(client_type=HttpClientType.OKHTTP))
        assert result.details == []
        assert result.warnings == []

    def test_java_http_has_no_client_ceiling(self, api_nodes):
        result = _run(api_nodes, client=HttpApiClientSettings(client_type=HttpClientType.JAVA_HTTP))
        assert result.client_details == []

    def test_unknown_client_type(self, api_nodes):
        result = _run(api_nodes, client=HttpApiClientSettings(client_type=None))
        assert result.client_details == []


class TestServerSide:

    def test_rate_limit(self, api_nodes):
        result = _run(api_nodes, server=HttpApiServerSettings(rate_limit_qps=300))

        [limit] = result.server_details
        assert limit.dimension == "rate_limit"
        assert limit.max_value == 300
        assert [d.dimension for d in result.details] == ["rate_limit", "conn_pool"]

    def test_zero_rate_limit_means_unlimited(self, api_nodes):
        assert _run(api_nodes, server=HttpApiServerSettings(rate_limit_qps=0)).server_details == []

    def test_invalid_average_rt(self, api_nodes):
        result = _run(api_nodes, server=HttpApiServerSettings(avg_rt_ms=0, rate_limit_qps=300))

        assert result.details == []
        [warning] = result.warnings
        assert warning.code == "INVALID_AVG_RT"
        assert warning.node_id == "api-s"

    def test_functional_shortcut(self, api_nodes):
        client_node, server_node = api_nodes
        result = compute_http_api_ceiling(
            client_node, server_node, HttpApiClientSettings(), HttpApiServerSettings())
        assert result.client_details[0].max_value == 25

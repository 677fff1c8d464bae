"""
Dependency Ceiling Rule (HTTP API)

A third-party HTTP API is modelled as a client/server pair. The server half
carries constraints the application cannot change (remote rate limit); the
client half carries the connection pool, which is tunable.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import List

from capacity_planner.domain.models import (
    CeilingDetail,
    HttpApiClientSettings,
    HttpApiServerSettings,
    HttpClientType,
    TopologyNode,
    WarningLevel,
)
from capacity_planner.domain.services.parsing import format_value
from capacity_planner.domain.services.rules.base import CeilingRule, RuleResult


@dataclass
class HttpApiRuleResult(RuleResult):
    """Details are split by the node they belong to."""
    server_details: List[CeilingDetail] = field(default_factory=list)
    client_details: List[CeilingDetail] = field(default_factory=list)


class HttpApiCeilingRule(CeilingRule):
    """
    Ceilings of an HTTP API dependency pair.

    Only Apache HttpClient has a hard per-route connection limit. OkHttp
    (synchronous) and the JDK HttpClient impose no configurable concurrency
    cap, so their throughput is bounded by the runtime threads instead.
    """

    def compute(
        self,
        client_node: TopologyNode,
        server_node: TopologyNode,
        client: HttpApiClientSettings,
        server: HttpApiServerSettings,
    ) -> HttpApiRuleResult:
        result = HttpApiRuleResult()

        if server.avg_rt_ms <= 0:
            result.warnings.append(self._warning(
                server_node, WarningLevel.WARNING, "INVALID_AVG_RT",
                "Average response time must be greater than 0",
                "Set the measured average response time of the downstream service",
            ))
            return result

        avg_rt_sec = server.avg_rt_ms / 1000

        if server.rate_limit_qps > 0:
            result.server_details.append(self._detail(
                "rate_limit", "Remote rate limit",
                server.rate_limit_qps,
                f"rate limit = {format_value(server.rate_limit_qps)} QPS",
                rateLimitQps=server.rate_limit_qps,
            ))

        if client.client_type is HttpClientType.APACHE:
            self._apache_pool(client_node, client, server, avg_rt_sec, result)

        result.details = result.server_details + result.client_details
        return result

    def _apache_pool(self, node: TopologyNode, client: HttpApiClientSettings,
                     server: HttpApiServerSettings, avg_rt_sec: float,
                     result: HttpApiRuleResult) -> None:
        per_route = client.max_conn_per_route
        total = client.max_conn_total

        result.client_details.append(self._detail(
            "conn_pool", "Connection pool (maxConnPerRoute)",
            math.floor(per_route / avg_rt_sec),
            f"maxConnPerRoute ({format_value(per_route)}) / avgRT"
            f" ({format_value(server.avg_rt_ms)}ms = {format_value(avg_rt_sec)}s)",
            maxConnPerRoute=per_route,
            avgRtMs=server.avg_rt_ms,
        ))

        if per_route <= self.calibration.default_conn_per_route:
            result.warnings.append(self._warning(
                node, WarningLevel.WARNING, "APACHE_CONN_PER_ROUTE_DEFAULT",
                f"Apache HttpClient maxConnPerRoute is {format_value(per_route)} (library default)",
                "For high throughput size the pool as target RPS x avgRT; 20~100 is typical",
            ))

        if per_route > total:
            result.warnings.append(self._warning(
                node, WarningLevel.ERROR, "APACHE_CONN_PER_ROUTE_EXCEEDS_TOTAL",
                f"maxConnPerRoute ({format_value(per_route)}) exceeds maxConnTotal ({format_value(total)})",
                f"Raise maxConnTotal to at least {format_value(per_route)}",
            ))


def compute_http_api_ceiling(client_node, server_node, client, server, calibration=None) -> HttpApiRuleResult:
    """Functional shortcut for ``HttpApiCeilingRule(calibration).compute(...)``."""
    rule = HttpApiCeilingRule(calibration) if calibration is not None else HttpApiCeilingRule()
    return rule.compute(client_node, server_node, client, server)

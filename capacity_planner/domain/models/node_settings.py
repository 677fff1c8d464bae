"""
Typed Node Settings

Strongly typed views over the raw constraint/objective/tunable maps of the
node kinds the rules understand. Dot-path lookups happen only here; the
rule modules work on these structs.

Missing values, and values of the wrong type, fall back to the catalogue
defaults declared in ``domain/config/layers.py``.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from capacity_planner.domain.models.enums import BusinessScenario, HttpClientType
from capacity_planner.utils.paths import get_by_path

logger = logging.getLogger(__name__)

Record = Optional[Mapping[str, Any]]


def _number(record: Record, path: str, default: float) -> float:
    value = get_by_path(record, path)
    if value is None:
        return default
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        logger.debug("Ignoring non-numeric %s=%r, using %s", path, value, default)
        return default
    if isinstance(value, float) and not math.isfinite(value):
        logger.debug("Ignoring non-finite %s=%r, using %s", path, value, default)
        return default
    return value


def _string(record: Record, path: str, default: str) -> str:
    value = get_by_path(record, path)
    if value is None:
        return default
    if not isinstance(value, str):
        logger.debug("Ignoring non-string %s=%r, using %r", path, value, default)
        return default
    return value


@dataclass(frozen=True)
class ClientObjectives:
    target_throughput_rps: float = 500
    business_scenario: BusinessScenario = BusinessScenario.IO
    concurrent_users: float = 100
    expected_failure_rate_percent: float = 0

    @classmethod
    def from_map(cls, objectives: Record, default_target_rps: float = 500) -> ClientObjectives:
        raw = get_by_path(objectives, "businessScenario")
        try:
            scenario = BusinessScenario(raw) if raw is not None else BusinessScenario.IO
        except ValueError:
            logger.debug("Unknown businessScenario %r, assuming io", raw)
            scenario = BusinessScenario.IO
        return cls(
            target_throughput_rps=_number(objectives, "targetThroughputRps", default_target_rps),
            business_scenario=scenario,
            concurrent_users=_number(objectives, "concurrentUsers", 100),
            expected_failure_rate_percent=_number(objectives, "expectedFailureRatePercent", 0),
        )


@dataclass(frozen=True)
class HostSettings:
    vcpu: float = 8
    memory_gb: float = 16
    nic_bandwidth_gbps: float = 10
    pps_limit: float = 1_000_000
    ip_local_port_range: str = "32768 60999"
    ulimit_n: float = 65535
    fs_nr_open: float = 65535
    fs_file_max: float = 2097152

    @classmethod
    def from_maps(cls, constraints: Record, tunables: Record) -> HostSettings:
        return cls(
            vcpu=_number(constraints, "spec.vCpu", 8),
            memory_gb=_number(constraints, "spec.memoryGb", 16),
            nic_bandwidth_gbps=_number(constraints, "network.nicBandwidthGbps", 10),
            pps_limit=_number(constraints, "network.ppsLimit", 1_000_000),
            ip_local_port_range=_string(tunables, "net.ipLocalPortRange", "32768 60999"),
            ulimit_n=_number(tunables, "fs.ulimitN", 65535),
            fs_nr_open=_number(tunables, "fs.fsNrOpen", 65535),
            fs_file_max=_number(tunables, "fs.fsFileMax", 2097152),
        )


@dataclass(frozen=True)
class RuntimeSettings:
    tomcat_max_threads: float = 200
    tomcat_max_connections: float = 10000
    tomcat_accept_count: float = 100
    tomcat_min_spare_threads: float = 10
    jvm_options: str = "-Xms4g -Xmx4g"
    virtual_threads_enabled: bool = False

    @classmethod
    def from_map(cls, tunables: Record) -> RuntimeSettings:
        return cls(
            tomcat_max_threads=_number(tunables, "tomcatMaxThreads", 200),
            tomcat_max_connections=_number(tunables, "tomcatMaxConnections", 10000),
            tomcat_accept_count=_number(tunables, "tomcatAcceptCount", 100),
            tomcat_min_spare_threads=_number(tunables, "tomcatMinSpareThreads", 10),
            jvm_options=_string(tunables, "jvmOptions", "-Xms4g -Xmx4g"),
            virtual_threads_enabled=get_by_path(tunables, "virtualThreadsEnabled") is True,
        )


@dataclass(frozen=True)
class HttpApiServerSettings:
    avg_rt_ms: float = 200
    rate_limit_qps: float = 0

    @classmethod
    def from_map(cls, constraints: Record) -> HttpApiServerSettings:
        return cls(
            avg_rt_ms=_number(constraints, "avgRtMs", 200),
            rate_limit_qps=_number(constraints, "rateLimitQps", 0),
        )


@dataclass(frozen=True)
class HttpApiClientSettings:
    # None for a client library the rules know nothing about
    client_type: Optional[HttpClientType] = HttpClientType.APACHE
    max_conn_per_route: float = 5
    max_conn_total: float = 25

    @classmethod
    def from_maps(cls, constraints: Record, tunables: Record) -> HttpApiClientSettings:
        raw = _string(constraints, "clientType", HttpClientType.APACHE.value)
        try:
            client_type: Optional[HttpClientType] = HttpClientType(raw)
        except ValueError:
            logger.debug("Unknown clientType %r, no client-side ceiling", raw)
            client_type = None
        return cls(
            client_type=client_type,
            max_conn_per_route=_number(tunables, "apache.maxConnPerRoute", 5),
            max_conn_total=_number(tunables, "apache.maxConnTotal", 25),
        )

"""
Runtime Ceiling Rule

Tomcat thread/connection ceilings for the application runtime, Little's Law
sizing recommendations and JVM heap checks.

    avgRT  = sum(dependency SLA RT) + self processing,  or the default when
             no dependency latency is known
    ceiling(thread)     = maxThreads / avgRT
    ceiling(connection) = maxConnections / avgRT
"""

from __future__ import annotations

import math
from typing import List

from capacity_planner.domain.models import (
    BusinessScenario,
    ClientObjectives,
    HostSettings,
    Recommendation,
    RecommendationPriority,
    RuntimeSettings,
    TopologyNode,
    WarningLevel,
)
from capacity_planner.domain.services.parsing import (
    clamp,
    format_value,
    parse_xmx_gb,
    rewrite_heap_options,
)
from capacity_planner.domain.services.rules.base import CeilingRule, RuleResult


class RuntimeCeilingRule(CeilingRule):
    """
    Computes runtime ceilings and Tomcat/JVM tuning recommendations.

    Reads the host settings (vCPU, memory, ulimit) and client objectives
    (target, scenario) as cross-node context.
    """

    def average_rt_ms(self, dependency_rt_ms: float) -> float:
        if dependency_rt_ms > 0:
            return dependency_rt_ms + self.calibration.self_process_ms
        return self.calibration.default_avg_rt_ms

    def recommended_max_threads(self, target_rps: float, avg_rt_sec: float,
                                host: HostSettings, scenario: BusinessScenario) -> float:
        cal = self.calibration
        multiplier = (cal.io_thread_multiplier if scenario is BusinessScenario.IO
                      else cal.compute_thread_multiplier)
        ideal = math.ceil(target_rps * avg_rt_sec)
        return clamp(ideal, cal.min_threads, host.vcpu * multiplier)

    def compute(
        self,
        node: TopologyNode,
        runtime: RuntimeSettings,
        host: HostSettings,
        client: ClientObjectives,
        dependency_rt_ms: float = 0,
    ) -> RuleResult:
        cal = self.calibration
        result = RuleResult()

        avg_rt_ms = self.average_rt_ms(dependency_rt_ms)
        avg_rt_sec = avg_rt_ms / 1000
        rt_text = f"avgRT ({format_value(avg_rt_ms)}ms = {format_value(avg_rt_sec)}s)"

        result.details.append(self._detail(
            "thread", "Tomcat threads",
            math.floor(runtime.tomcat_max_threads / avg_rt_sec),
            f"maxThreads ({format_value(runtime.tomcat_max_threads)}) / {rt_text}",
            tomcatMaxThreads=runtime.tomcat_max_threads,
            avgRtMs=avg_rt_ms,
        ))
        result.details.append(self._detail(
            "connection", "Tomcat connections",
            math.floor(runtime.tomcat_max_connections / avg_rt_sec),
            f"maxConnections ({format_value(runtime.tomcat_max_connections)}) / {rt_text}",
            tomcatMaxConnections=runtime.tomcat_max_connections,
            avgRtMs=avg_rt_ms,
        ))

        rec_threads = self.recommended_max_threads(
            client.target_throughput_rps, avg_rt_sec, host, client.business_scenario)
        result.recommendations.extend(
            self._pool_recommendations(runtime, host, client, avg_rt_ms, avg_rt_sec, rec_threads))
        self._check_heap(node, runtime, host, result)

        # Every accepted connection holds a descriptor
        fd_needed = runtime.tomcat_max_connections + cal.reserved_fd
        if fd_needed > host.ulimit_n:
            result.warnings.append(self._warning(
                node, WarningLevel.ERROR, "FD_INSUFFICIENT",
                f"Tomcat maxConnections ({format_value(runtime.tomcat_max_connections)}) + reserved"
                f" ({cal.reserved_fd}) = {format_value(fd_needed)} exceeds ulimit -n ({format_value(host.ulimit_n)})",
                f"Raise ulimit -n to at least {format_value(fd_needed)} or lower maxConnections",
            ))

        if rec_threads > 0 and runtime.tomcat_max_threads > rec_threads * cal.thread_overprovision_factor:
            result.warnings.append(self._warning(
                node, WarningLevel.WARNING, "THREADS_OVER_RECOMMENDED",
                f"Current threads ({format_value(runtime.tomcat_max_threads)}) are"
                f" {runtime.tomcat_max_threads / rec_threads:.1f}x the recommended value ({format_value(rec_threads)})",
                "Too many threads add context-switch overhead; consider lowering maxThreads",
            ))

        if runtime.virtual_threads_enabled:
            result.warnings.append(self._warning(
                node, WarningLevel.INFO, "VIRTUAL_THREADS_ENABLED",
                "Virtual threads are enabled; Tomcat threads.max does not apply",
                "Virtual threads are scheduled by the JVM, so the thread ceiling does not apply in this mode",
            ))

        self._logger.debug(
            "Runtime %s avgRT=%sms recommended maxThreads=%s", node.id, avg_rt_ms, rec_threads)
        return result

    def _pool_recommendations(self, runtime: RuntimeSettings, host: HostSettings,
                              client: ClientObjectives, avg_rt_ms: float,
                              avg_rt_sec: float, rec_threads: float) -> List[Recommendation]:
        cal = self.calibration
        target = client.target_throughput_rps
        items: List[Recommendation] = []

        ideal = math.ceil(target * avg_rt_sec)
        multiplier = (cal.io_thread_multiplier if client.business_scenario is BusinessScenario.IO
                      else cal.compute_thread_multiplier)
        cpu_bound = host.vcpu * multiplier
        deviation = abs(runtime.tomcat_max_threads - rec_threads)
        if deviation > rec_threads * cal.thread_deviation_ratio:
            reason = (f"Little's Law: target RPS ({format_value(target)}) x avgRT"
                      f" ({format_value(avg_rt_ms)}ms) = {ideal} threads")
            if ideal > cpu_bound:
                reason += (f", capped by CPU bound ({format_value(host.vcpu)} vCPU x {multiplier}"
                           f" = {format_value(cpu_bound)})")
            items.append(self._recommend(
                "tomcatMaxThreads", "server.tomcat.threads.max",
                runtime.tomcat_max_threads, rec_threads, reason,
                RecommendationPriority.CRITICAL if deviation > rec_threads * cal.thread_critical_ratio
                else RecommendationPriority.IMPORTANT,
            ))

        low, high = cal.min_spare_bounds
        rec_spare = clamp(math.ceil(rec_threads * cal.min_spare_ratio), low, high)
        if runtime.tomcat_min_spare_threads < rec_spare * 0.5 or runtime.tomcat_min_spare_threads > rec_threads:
            items.append(self._recommend(
                "tomcatMinSpareThreads", "server.tomcat.threads.min-spare",
                runtime.tomcat_min_spare_threads, rec_spare,
                f"About 10% of maxThreads ({format_value(rec_threads)} x 10% ~ {format_value(rec_spare)})",
                RecommendationPriority.OPTIONAL,
            ))

        rec_connections = clamp(rec_threads * cal.max_connections_factor, rec_threads, cal.max_connections_cap)
        if runtime.tomcat_max_connections < rec_threads:
            items.append(self._recommend(
                "tomcatMaxConnections", "server.tomcat.max-connections",
                runtime.tomcat_max_connections, rec_connections,
                f"maxConnections should not be below maxThreads ({format_value(rec_threads)});"
                f" {cal.max_connections_factor}x or more is advised",
                RecommendationPriority.IMPORTANT,
            ))

        low, high = cal.accept_count_bounds
        rec_accept = clamp(math.ceil(target * cal.accept_count_ratio), low, high)
        if runtime.tomcat_accept_count < low or runtime.tomcat_accept_count > target:
            items.append(self._recommend(
                "tomcatAcceptCount", "server.tomcat.accept-count",
                runtime.tomcat_accept_count, rec_accept,
                f"About 10% of the target RPS, within {low}~{high}",
                RecommendationPriority.OPTIONAL,
            ))

        return items

    def _check_heap(self, node: TopologyNode, runtime: RuntimeSettings,
                    host: HostSettings, result: RuleResult) -> None:
        cal = self.calibration
        current_gb = parse_xmx_gb(runtime.jvm_options)
        if current_gb is None:
            return

        low, high = cal.heap_bounds_gb
        rec_gb = int(clamp(math.floor(host.memory_gb * cal.heap_fraction), low, high))
        over_limit = current_gb > host.memory_gb * cal.heap_danger_fraction

        if over_limit:
            result.warnings.append(self._warning(
                node, WarningLevel.ERROR, "JVM_HEAP_EXCEEDS_MEMORY",
                f"JVM heap -Xmx ({format_value(current_gb)}G) exceeds 85% of host memory"
                f" ({format_value(host.memory_gb)}G)",
                f"Keep -Xmx at or below 75% of host memory, i.e. {rec_gb}G",
            ))

        if abs(current_gb - rec_gb) >= cal.heap_delta_gb:
            result.recommendations.append(self._recommend(
                "jvmOptions", "JVM options",
                runtime.jvm_options, rewrite_heap_options(runtime.jvm_options, rec_gb),
                f"Host memory ({format_value(host.memory_gb)}G) x 75% = {rec_gb}G;"
                " Xms = Xmx avoids heap resizing at runtime",
                RecommendationPriority.CRITICAL if over_limit else RecommendationPriority.IMPORTANT,
            ))


def compute_runtime_ceiling(node, runtime, host, client, dependency_rt_ms=0, calibration=None) -> RuleResult:
    """Functional shortcut for ``RuntimeCeilingRule(calibration).compute(...)``."""
    rule = RuntimeCeilingRule(calibration) if calibration is not None else RuntimeCeilingRule()
    return rule.compute(node, runtime, host, client, dependency_rt_ms)

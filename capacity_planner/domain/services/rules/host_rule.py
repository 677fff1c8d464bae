"""
Host Ceiling Rule

Throughput upper bounds imposed by the host/container: NIC bandwidth, packet
rate, ephemeral ports and file descriptors. Each dimension is an independent
bound; the orchestrator takes the minimum.
"""

from __future__ import annotations

import math

from capacity_planner.domain.models import HostSettings, TopologyNode, WarningLevel
from capacity_planner.domain.services.parsing import format_value, parse_port_range
from capacity_planner.domain.services.rules.base import CeilingRule, RuleResult


class HostCeilingRule(CeilingRule):
    """
    Computes host-level ceilings and kernel limit consistency checks.

    Example:
        >>> rule = HostCeilingRule()
        >>> result = rule.compute(host_node, HostSettings(), message_size_bytes=1024)
        >>> [d.dimension for d in result.details]
        ['bandwidth', 'pps', 'port', 'fd']
    """

    def compute(self, node: TopologyNode, host: HostSettings, message_size_bytes: float) -> RuleResult:
        cal = self.calibration
        result = RuleResult()

        # Bandwidth
        bytes_per_sec = host.nic_bandwidth_gbps * 1e9 / 8
        result.details.append(self._detail(
            "bandwidth", "Network bandwidth",
            math.floor(bytes_per_sec / message_size_bytes),
            f"NIC bandwidth ({format_value(host.nic_bandwidth_gbps)}Gbps) x 1e9 / 8"
            f" / message size ({format_value(message_size_bytes)}B)",
            nicBandwidthGbps=host.nic_bandwidth_gbps,
            messageSizeBytes=message_size_bytes,
        ))

        # Packet rate
        result.details.append(self._detail(
            "pps", "PPS (packet rate)",
            math.floor(host.pps_limit / cal.packets_per_request),
            f"PPS limit ({format_value(host.pps_limit)}) / packets per request ({cal.packets_per_request})",
            ppsLimit=host.pps_limit,
            packetsPerRequest=cal.packets_per_request,
        ))

        # Ephemeral ports
        port_range = parse_port_range(host.ip_local_port_range)
        if port_range is not None:
            available = port_range.available
            result.details.append(self._detail(
                "port", "Ephemeral ports",
                math.floor(available / cal.connection_hold_sec),
                f"available ports ({port_range.high} - {port_range.low} + 1 = {available})"
                f" / connection hold time ({cal.connection_hold_sec}s)",
                portRange=host.ip_local_port_range,
                availablePorts=available,
                connectionHoldTimeSec=cal.connection_hold_sec,
            ))
        else:
            result.warnings.append(self._warning(
                node, WarningLevel.WARNING, "PORT_RANGE_INVALID",
                f'ip_local_port_range is malformed: "{host.ip_local_port_range}"',
                'Use the "low high" form, e.g. "1024 65535"',
            ))

        # File descriptors
        result.details.append(self._detail(
            "fd", "File descriptors",
            max(0, math.floor(host.ulimit_n - cal.reserved_fd)),
            f"ulimit -n ({format_value(host.ulimit_n)}) - reserved ({cal.reserved_fd})",
            ulimitN=host.ulimit_n,
            reservedFd=cal.reserved_fd,
        ))

        # Kernel limit ordering: ulimit -n <= fs.nr_open <= fs.file-max
        if host.ulimit_n > host.fs_nr_open:
            result.warnings.append(self._warning(
                node, WarningLevel.ERROR, "FD_ULIMIT_EXCEEDS_NROPEN",
                f"ulimit -n ({format_value(host.ulimit_n)}) exceeds fs.nr_open ({format_value(host.fs_nr_open)})",
                "Raise fs.nr_open to at least the ulimit -n value",
            ))
        if host.fs_nr_open > host.fs_file_max:
            result.warnings.append(self._warning(
                node, WarningLevel.ERROR, "FD_NROPEN_EXCEEDS_FILEMAX",
                f"fs.nr_open ({format_value(host.fs_nr_open)}) exceeds fs.file-max ({format_value(host.fs_file_max)})",
                "Raise fs.file-max to at least the fs.nr_open value",
            ))

        if port_range is not None and port_range.available < cal.small_port_range:
            result.warnings.append(self._warning(
                node, WarningLevel.WARNING, "PORT_RANGE_SMALL",
                f"Only {port_range.available} ephemeral ports available ({host.ip_local_port_range})",
                'Widen the range to at least "1024 65535" (61512 ports) for high concurrency',
            ))

        self._logger.debug(
            "Host %s ceilings: %s", node.id,
            ", ".join(f"{d.dimension}={d.max_value}" for d in result.details),
        )
        return result


def compute_host_ceiling(node, host, message_size_bytes, calibration=None) -> RuleResult:
    """Functional shortcut for ``HostCeilingRule(calibration).compute(...)``."""
    rule = HostCeilingRule(calibration) if calibration is not None else HostCeilingRule()
    return rule.compute(node, host, message_size_bytes)

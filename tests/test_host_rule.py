"""
Unit Tests for the host ceiling rule

Tests for:
    - Bandwidth, packet rate, ephemeral port and file descriptor ceilings
    - Kernel limit consistency diagnostics
"""

import pytest

from capacity_planner.domain.config.calibration import Calibration
from capacity_planner.domain.models import HostSettings, WarningLevel
from capacity_planner.domain.services.rules import HostCeilingRule, compute_host_ceiling


def _details(result):
    return {d.dimension: d for d in result.details}


def _codes(result):
    return [w.code for w in result.warnings]


class TestHostCeilings:
    """Ceilings computed from default and customised host settings."""

    def test_default_host(self, host_node):
        result = HostCeilingRule().compute(host_node, HostSettings(), 1024)
        details = _details(result)

        assert [d.dimension for d in result.details] == ["bandwidth", "pps", "port", "fd"]
        assert details["bandwidth"].max_value == 1220703
        assert details["pps"].max_value == 250000
        assert details["port"].max_value == 470533
        assert details["fd"].max_value == 65279
        assert result.warnings == []
        assert result.recommendations == []

    def test_bandwidth_scales_with_message_size(self, host_node):
        result = HostCeilingRule().compute(host_node, HostSettings(), 2048)
        assert _details(result)["bandwidth"].max_value == 610351

    def test_pps_limit(self, host_node):
        result = HostCeilingRule().compute(host_node, HostSettings(pps_limit=1600), 1024)
        assert _details(result)["pps"].max_value == 400

    def test_fd_never_negative(self, host_node):
        result = HostCeilingRule().compute(
            host_node, HostSettings(ulimit_n=100, fs_nr_open=100, fs_file_max=100), 1024)
        assert _details(result)["fd"].max_value == 0

    def test_detail_inputs_and_formula(self, host_node):
        fd = _details(HostCeilingRule().compute(host_node, HostSettings(), 1024))["fd"]
        assert fd.inputs == {"ulimitN": 65535, "reservedFd": 256}
        assert "65535" in fd.formula and "256" in fd.formula

    def test_calibration_changes_packets_per_request(self, host_node):
        rule = HostCeilingRule(Calibration(packets_per_request=2))
        assert _details(rule.compute(host_node, HostSettings(), 1024))["pps"].max_value == 500000

    def test_functional_shortcut(self, host_node):
        result = compute_host_ceiling(host_node, HostSettings(), 1024)
        assert len(result.details) == 4


class TestPortRange:
    """Malformed and small ephemeral port ranges."""

    @pytest.mark.parametrize("port_range", ["60999 32768", "abc", "1024", "5000 5000"])
    def test_malformed_range_drops_port_ceiling(self, host_node, port_range):
        result = HostCeilingRule().compute(host_node, HostSettings(ip_local_port_range=port_range), 1024)

        assert "port" not in _details(result)
        assert [d.dimension for d in result.details] == ["bandwidth", "pps", "fd"]
        warning = result.warnings[0]
        assert warning.code == "PORT_RANGE_INVALID"
        assert warning.level is WarningLevel.WARNING
        assert warning.node_id == "h1"
        assert port_range in warning.message

    def test_small_range_warns(self, host_node):
        result = HostCeilingRule().compute(host_node, HostSettings(ip_local_port_range="50000 55000"), 1024)
        assert "port" in _details(result)
        assert _codes(result) == ["PORT_RANGE_SMALL"]
        assert "5001" in result.warnings[0].message

    def test_wide_range_is_quiet(self, host_node):
        result = HostCeilingRule().compute(host_node, HostSettings(ip_local_port_range="1024 65535"), 1024)
        assert result.warnings == []
        assert _details(result)["port"].inputs["availablePorts"] == 64512


class TestKernelLimits:
    """ulimit -n <= fs.nr_open <= fs.file-max ordering checks."""

    def test_ulimit_above_nr_open(self, host_node):
        result = HostCeilingRule().compute(host_node, HostSettings(ulimit_n=100000), 1024)
        assert _codes(result) == ["FD_ULIMIT_EXCEEDS_NROPEN"]
        assert result.warnings[0].level is WarningLevel.ERROR
        # The fd ceiling still uses the configured ulimit
        assert _details(result)["fd"].max_value == 99744

    def test_nr_open_above_file_max(self, host_node):
        result = HostCeilingRule().compute(host_node, HostSettings(fs_nr_open=3000000), 1024)
        assert _codes(result) == ["FD_NROPEN_EXCEEDS_FILEMAX"]
        assert result.warnings[0].level is WarningLevel.ERROR

    def test_both_violations(self, host_node):
        host = HostSettings(ulimit_n=200000, fs_nr_open=100000, fs_file_max=50000)
        result = HostCeilingRule().compute(host_node, host, 1024)
        assert _codes(result) == ["FD_ULIMIT_EXCEEDS_NROPEN", "FD_NROPEN_EXCEEDS_FILEMAX"]


class TestMonotonicity:

    @pytest.mark.parametrize("low, high", [(1, 10), (10, 25), (25, 100)])
    def test_bandwidth_grows_with_nic(self, host_node, low, high):
        rule = HostCeilingRule()
        slow = _details(rule.compute(host_node, HostSettings(nic_bandwidth_gbps=low), 1024))["bandwidth"]
        fast = _details(rule.compute(host_node, HostSettings(nic_bandwidth_gbps=high), 1024))["bandwidth"]
        assert fast.max_value >= slow.max_value

"""
Calibration Constants

Empirical assumptions baked into the ceiling rules. They are not derived
from first principles; they encode how the tool is calibrated and are kept
here as explicit configuration points.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, replace
from typing import Any, Dict


@dataclass(frozen=True)
class Calibration:
    # host
    packets_per_request: int = 4
    connection_hold_sec: float = 0.06       # TCP fast-close hold time per connection
    reserved_fd: int = 256
    small_port_range: int = 10000

    # runtime
    self_process_ms: float = 5
    default_avg_rt_ms: float = 50
    min_threads: int = 10
    io_thread_multiplier: int = 100
    compute_thread_multiplier: int = 4
    thread_deviation_ratio: float = 0.2
    thread_critical_ratio: float = 1.0
    thread_overprovision_factor: float = 3
    min_spare_ratio: float = 0.1
    min_spare_bounds: tuple = (5, 50)
    max_connections_factor: int = 2
    max_connections_cap: int = 10000
    accept_count_ratio: float = 0.1
    accept_count_bounds: tuple = (50, 200)
    heap_fraction: float = 0.75
    heap_danger_fraction: float = 0.85
    heap_bounds_gb: tuple = (1, 32)
    heap_delta_gb: float = 1

    # dependency
    default_conn_per_route: int = 5

    # orchestration
    default_target_rps: float = 500
    default_message_size_bytes: int = 1024
    headroom_ratio: float = 1.3

    def with_overrides(self, **overrides: Any) -> "Calibration":
        """Copy with selected constants replaced; unknown names raise TypeError."""
        return replace(self, **overrides)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


DEFAULT_CALIBRATION = Calibration()

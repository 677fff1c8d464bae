"""
Application Settings

Environment configuration for the command line and library callers.
"""

import logging
import os
from dataclasses import dataclass
from typing import Any, Dict, Optional

from capacity_planner.domain.config.calibration import Calibration, DEFAULT_CALIBRATION

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def _env_number(name: str, cast=float) -> Optional[Any]:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return None
    try:
        return cast(raw)
    except ValueError:
        logger.warning("Ignoring %s=%r: not a number", name, raw)
        return None


@dataclass
class Settings:
    """Application settings from environment."""

    log_level: str = "INFO"

    # Calibration overrides, None = built-in value
    default_target_rps: Optional[float] = None
    packets_per_request: Optional[int] = None
    connection_hold_sec: Optional[float] = None
    reserved_fd: Optional[int] = None
    self_process_ms: Optional[float] = None
    default_avg_rt_ms: Optional[float] = None
    heap_fraction: Optional[float] = None

    @classmethod
    def from_env(cls) -> "Settings":
        """Load settings from environment variables."""
        return cls(
            log_level=os.getenv("CAPACITY_LOG_LEVEL", "INFO").upper(),
            default_target_rps=_env_number("CAPACITY_DEFAULT_TARGET_RPS"),
            packets_per_request=_env_number("CAPACITY_PACKETS_PER_REQUEST", int),
            connection_hold_sec=_env_number("CAPACITY_CONNECTION_HOLD_SEC"),
            reserved_fd=_env_number("CAPACITY_RESERVED_FD", int),
            self_process_ms=_env_number("CAPACITY_SELF_PROCESS_MS"),
            default_avg_rt_ms=_env_number("CAPACITY_DEFAULT_AVG_RT_MS"),
            heap_fraction=_env_number("CAPACITY_HEAP_FRACTION"),
        )

    def calibration_overrides(self) -> Dict[str, Any]:
        names = (
            "default_target_rps", "packets_per_request", "connection_hold_sec",
            "reserved_fd", "self_process_ms", "default_avg_rt_ms", "heap_fraction",
        )
        return {name: getattr(self, name) for name in names if getattr(self, name) is not None}

    def calibration(self, base: Calibration = DEFAULT_CALIBRATION) -> Calibration:
        """``base`` with every configured override applied."""
        overrides = self.calibration_overrides()
        if overrides:
            logger.debug("Calibration overrides: %s", overrides)
        return base.with_overrides(**overrides)

    @property
    def log_level_value(self) -> int:
        level = logging.getLevelName(self.log_level)
        return level if isinstance(level, int) else logging.INFO

"""
Value Parsing Helpers

Small typed parsers for configuration strings. Parsers return ``None`` for
malformed input instead of raising; callers turn that into a diagnostic.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import Optional

_HEAP_UNITS_GB = {
    "g": 1.0,
    "m": 1.0 / 1024,
    "k": 1.0 / (1024 * 1024),
    "": 1.0 / (1024 * 1024 * 1024),     # bare number = bytes
}

_XMX_RE = re.compile(r"-Xmx(\d+)([gmkGMK]?)")
_XMS_RE = re.compile(r"-Xms(\d+)([gmkGMK]?)")


@dataclass(frozen=True)
class PortRange:
    low: int
    high: int

    @property
    def available(self) -> int:
        return self.high - self.low + 1


def clamp(value: float, lower: float, upper: float) -> float:
    """Limit ``value`` to ``[lower, upper]``; ``lower`` wins if the bounds cross."""
    return max(lower, min(upper, value))


def parse_port_range(text: Optional[str]) -> Optional[PortRange]:
    """
    Parse ``net.ipv4.ip_local_port_range`` ("low high").

    Returns None unless there are exactly two integers with low < high.
    """
    if text is None:
        return None
    parts = str(text).split()
    if len(parts) != 2:
        return None
    try:
        low, high = int(parts[0]), int(parts[1])
    except ValueError:
        return None
    if low >= high:
        return None
    return PortRange(low, high)


def parse_xmx_gb(jvm_options: str) -> Optional[float]:
    """Max heap in GB from ``-Xmx4g`` / ``-Xmx4096m`` / ``-Xmx4194304k``."""
    match = _XMX_RE.search(jvm_options or "")
    if not match:
        return None
    return int(match.group(1)) * _HEAP_UNITS_GB[match.group(2).lower()]


def rewrite_heap_options(jvm_options: str, heap_gb: int) -> str:
    """Set ``-Xms`` and ``-Xmx`` to ``heap_gb`` and keep every other flag."""
    others = _XMS_RE.sub("", _XMX_RE.sub("", jvm_options or "")).split()
    heap = f"-Xms{heap_gb}g -Xmx{heap_gb}g"
    return " ".join([heap] + others)


def format_number(n: float) -> str:
    """Compact RPS formatting: 1.2M, 12.5K, 9,999."""
    if n >= 1_000_000:
        return f"{n / 1_000_000:.1f}M"
    if n >= 10_000:
        return f"{n / 1_000:.1f}K"
    return f"{int(math.floor(n + 0.5)):,}"


def format_value(value: float) -> str:
    """Render a number without a trailing ``.0`` for whole values."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)

"""
Dot-Path Utilities

Read and write nested configuration records by symbolic key, e.g.
``"network.nicBandwidthGbps"`` → ``record["network"]["nicBandwidthGbps"]``.

These are only used at the boundary where raw configuration maps are turned
into typed settings; rule code never walks raw maps itself.
"""

from __future__ import annotations

import copy
from typing import Any, Dict, Mapping, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from capacity_planner.domain.config.layers import FormSchema


def get_by_path(record: Optional[Mapping[str, Any]], path: str) -> Any:
    """
    Return the value at ``path`` or ``None``.

    Any missing segment, or an intermediate value that is not a mapping,
    yields ``None`` instead of raising.
    """
    if record is None:
        return None
    current: Any = record
    for part in path.split("."):
        if not isinstance(current, Mapping):
            return None
        if part not in current:
            return None
        current = current[part]
    return current


def set_by_path(record: Dict[str, Any], path: str, value: Any) -> None:
    """Write ``value`` at ``path``, creating intermediate dicts as needed."""
    parts = path.split(".")
    current = record
    for part in parts[:-1]:
        nxt = current.get(part)
        if not isinstance(nxt, dict):
            nxt = {}
            current[part] = nxt
        current = nxt
    current[parts[-1]] = value


def build_defaults(schema: Optional["FormSchema"]) -> Dict[str, Any]:
    """Build a fresh nested record holding every field default of ``schema``."""
    result: Dict[str, Any] = {}
    if schema is None:
        return result
    for section in schema.sections:
        for fld in section.fields:
            set_by_path(result, fld.key, copy.deepcopy(fld.default))
    return result

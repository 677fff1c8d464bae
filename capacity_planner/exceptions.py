"""Error hierarchy for the boundary code around the analysis engine."""
from __future__ import annotations


class CapacityPlannerError(Exception):
    """Base for all package errors."""


class SnapshotError(CapacityPlannerError):
    """A topology snapshot could not be read."""


class TopologyError(CapacityPlannerError):
    """A topology edit would break a structural rule."""


class TemplateNotFoundError(CapacityPlannerError, KeyError):
    """Unknown demo template key."""

    def __str__(self) -> str:
        return Exception.__str__(self)

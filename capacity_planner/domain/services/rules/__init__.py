"""
Per-layer ceiling rules.

Rules are pure: typed settings in, ``RuleResult`` out. Only the
``CapacityAnalyzer`` calls them.
"""

from .base import CeilingRule, RuleResult
from .host_rule import HostCeilingRule, compute_host_ceiling
from .runtime_rule import RuntimeCeilingRule, compute_runtime_ceiling
from .dependency_rule import HttpApiCeilingRule, HttpApiRuleResult, compute_http_api_ceiling

__all__ = [
    "CeilingRule", "RuleResult",
    "HostCeilingRule", "compute_host_ceiling",
    "RuntimeCeilingRule", "compute_runtime_ceiling",
    "HttpApiCeilingRule", "HttpApiRuleResult", "compute_http_api_ceiling",
]

"""
Configuration Package

Environment settings and logging format.
"""

from .settings import LOG_FORMAT, Settings

__all__ = [
    "LOG_FORMAT",
    "Settings",
]

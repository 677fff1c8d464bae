"""Generic helpers with no domain knowledge."""

from .paths import get_by_path, set_by_path, build_defaults

__all__ = ["get_by_path", "set_by_path", "build_defaults"]

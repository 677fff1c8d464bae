from __future__ import annotations

from enum import Enum
from typing import Dict, Optional, Union


class LayerId(str, Enum):
    """Topology layers, in call order."""
    CLIENT = "client"
    GATEWAY = "gateway"
    HOST = "host"
    RUNTIME = "runtime"
    DEPENDENCY = "dependency"

    @classmethod
    def from_string(cls, value: Union[str, "LayerId"]) -> LayerId:
        """Convert a string to LayerId, supporting common aliases."""
        if isinstance(value, LayerId):
            return value
        _ALIASES: Dict[str, LayerId] = {
            "access": cls.GATEWAY,
            "gw": cls.GATEWAY,
            "nginx": cls.GATEWAY,
            "container": cls.HOST,
            "vm": cls.HOST,
            "app": cls.RUNTIME,
            "application": cls.RUNTIME,
            "jvm": cls.RUNTIME,
            "dep": cls.DEPENDENCY,
        }
        key = str(value).lower().strip()
        if key in _ALIASES:
            return _ALIASES[key]
        try:
            return cls(key)
        except ValueError:
            valid = sorted({l.value for l in cls} | set(_ALIASES))
            raise ValueError(f"Unknown layer '{value}'. Valid: {valid}")


class DependencyKind(str, Enum):
    REDIS = "redis"
    DATABASE = "database"
    HTTP_API = "http_api"


class DependencyRole(str, Enum):
    CLIENT = "client"
    SERVER = "server"


class ClientServerMode(str, Enum):
    """Whether a dependency kind is one node or a linked client/server pair."""
    CLIENT_ONLY = "client_only"
    CLIENT_AND_SERVER = "client_and_server"


class SchemaCategory(str, Enum):
    CONSTRAINTS = "constraints"
    OBJECTIVES = "objectives"
    TUNABLES = "tunables"


class BusinessScenario(str, Enum):
    IO = "io"
    COMPUTE = "compute"


class HttpClientType(str, Enum):
    APACHE = "apache"          # pooled, per-route connection cap
    OKHTTP = "okhttp"          # no per-host cap on synchronous calls
    JAVA_HTTP = "java_http"    # pool managed inside the JDK


class WarningLevel(str, Enum):
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


class RecommendationPriority(str, Enum):
    CRITICAL = "critical"
    IMPORTANT = "important"
    OPTIONAL = "optional"

    @property
    def rank(self) -> int:
        """Numeric priority for sorting (higher = more urgent)."""
        return {"critical": 3, "important": 2, "optional": 1}[self.value]


class HealthStatus(str, Enum):
    OK = "ok"
    WARNING = "warning"
    ERROR = "error"


class LayerKind(str, Enum):
    """
    Closed set of node kinds the engine distinguishes.

    A dependency node is only meaningful together with its kind, so the
    pair ``(layer_id, dependency_kind)`` collapses into a single tag here.
    """
    CLIENT = "client"
    GATEWAY = "gateway"
    HOST = "host"
    RUNTIME = "runtime"
    DEPENDENCY_REDIS = "dependency.redis"
    DEPENDENCY_DATABASE = "dependency.database"
    DEPENDENCY_HTTP_API = "dependency.http_api"

    @classmethod
    def of(cls, layer_id: LayerId, dependency_kind: Optional[DependencyKind] = None) -> LayerKind:
        if layer_id is LayerId.CLIENT:
            return cls.CLIENT
        if layer_id is LayerId.GATEWAY:
            return cls.GATEWAY
        if layer_id is LayerId.HOST:
            return cls.HOST
        if layer_id is LayerId.RUNTIME:
            return cls.RUNTIME
        if layer_id is LayerId.DEPENDENCY:
            if dependency_kind is DependencyKind.REDIS:
                return cls.DEPENDENCY_REDIS
            if dependency_kind is DependencyKind.DATABASE:
                return cls.DEPENDENCY_DATABASE
            if dependency_kind is DependencyKind.HTTP_API:
                return cls.DEPENDENCY_HTTP_API
            raise ValueError("Dependency node requires a dependency kind")
        raise ValueError(f"Unknown layer '{layer_id}'")

    @property
    def layer_id(self) -> LayerId:
        return LayerId(self.value.split(".")[0])

    @property
    def dependency_kind(self) -> Optional[DependencyKind]:
        if "." not in self.value:
            return None
        return DependencyKind(self.value.split(".", 1)[1])

"""
Topology Layers

Defines the layer catalogue of a Java web application deployment and the
configuration fields each node type carries. This is the **canonical**
source of node vocabulary and default values used by the analyzer, the
topology builder and the validator.

Layers in call order and their legal outbound links:
    client     → gateway, host          Load source (target RPS, concurrency)
    gateway    → host, runtime          Reverse proxy / API gateway (structural)
    host       → runtime                VM or container (NIC, kernel, fds)
    runtime    → dependency             JVM + Tomcat (threads, heap)
    dependency → (none)                 Redis / database / third-party HTTP API

Every node keeps three independent maps: *constraints* (hard facts),
*objectives* (business targets) and *tunables* (operator knobs). Field keys
are dot paths into those maps.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, FrozenSet, List, Optional, Tuple, Union

from capacity_planner.domain.models.enums import (
    ClientServerMode,
    DependencyKind,
    DependencyRole,
    LayerId,
    SchemaCategory,
)
from capacity_planner.utils.paths import build_defaults


# ---------------------------------------------------------------------------
# Schema definitions
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class FieldOption:
    value: Any
    label: str


@dataclass(frozen=True)
class FieldDefinition:
    """
    A single configuration field.

    Attributes:
        key:         Dot path inside the owning map (e.g. ``spec.vCpu``)
        label:       Display name
        field_type:  ``number`` | ``string`` | ``boolean`` | ``select`` | ``string_list``
        default:     Default value written by ``build_defaults``
        options:     Allowed values for ``select`` fields
    """
    key: str
    label: str
    field_type: str
    default: Any
    options: Tuple[FieldOption, ...] = ()
    description: str = ""
    minimum: Optional[float] = None
    maximum: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "key": self.key,
            "label": self.label,
            "type": self.field_type,
            "default": list(self.default) if isinstance(self.default, tuple) else self.default,
        }
        if self.options:
            data["options"] = [{"value": o.value, "label": o.label} for o in self.options]
        if self.description:
            data["description"] = self.description
        if self.minimum is not None:
            data["min"] = self.minimum
        if self.maximum is not None:
            data["max"] = self.maximum
        return data


@dataclass(frozen=True)
class FormSection:
    id: str
    label: str
    fields: Tuple[FieldDefinition, ...]
    description: str = ""


@dataclass(frozen=True)
class FormSchema:
    sections: Tuple[FormSection, ...]

    def field(self, key: str) -> Optional[FieldDefinition]:
        """Find a field definition by its dot path."""
        for section in self.sections:
            for fld in section.fields:
                if fld.key == key:
                    return fld
        return None

    def keys(self) -> List[str]:
        return [fld.key for section in self.sections for fld in section.fields]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "sections": [
                {
                    "id": s.id,
                    "label": s.label,
                    "description": s.description,
                    "fields": [f.to_dict() for f in s.fields],
                }
                for s in self.sections
            ]
        }


def _num(key: str, label: str, default: float, minimum: Optional[float] = 0, **kw: Any) -> FieldDefinition:
    return FieldDefinition(key=key, label=label, field_type="number", default=default, minimum=minimum, **kw)


def _str(key: str, label: str, default: str, **kw: Any) -> FieldDefinition:
    return FieldDefinition(key=key, label=label, field_type="string", default=default, **kw)


def _select(key: str, label: str, default: Any, options: List[Tuple[Any, str]], **kw: Any) -> FieldDefinition:
    return FieldDefinition(
        key=key,
        label=label,
        field_type="select",
        default=default,
        options=tuple(FieldOption(v, l) for v, l in options),
        **kw,
    )


_NETWORK_ENV_OPTIONS = [
    ("public", "Public internet"),
    ("intra_dc", "Private network (same DC)"),
    ("cross_dc", "Private network (cross DC)"),
]


# ---------------------------------------------------------------------------
# Node I/O rules
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class NodeIoRules:
    """
    Which links a node type may take part in.

    Empty ``allowed_*_layers`` means any layer is accepted.
    """
    has_input: bool = True
    has_output: bool = True
    allowed_input_layers: FrozenSet[LayerId] = frozenset()
    allowed_output_layers: FrozenSet[LayerId] = frozenset()


@dataclass(frozen=True)
class EdgeCheck:
    valid: bool
    message: str = ""


# ---------------------------------------------------------------------------
# Layer and dependency type definitions
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class DependencyNodeType:
    """
    A dependency sub-kind.

    ``CLIENT_ONLY`` kinds use the plain schemas; ``CLIENT_AND_SERVER`` kinds
    are modelled as two linked nodes and use the ``server_*``/``client_*``
    schemas by role.
    """
    kind: DependencyKind
    label: str
    client_server: ClientServerMode
    constraints_schema: Optional[FormSchema] = None
    objectives_schema: Optional[FormSchema] = None
    tunables_schema: Optional[FormSchema] = None
    server_constraints_schema: Optional[FormSchema] = None
    server_objectives_schema: Optional[FormSchema] = None
    server_tunables_schema: Optional[FormSchema] = None
    client_constraints_schema: Optional[FormSchema] = None
    client_objectives_schema: Optional[FormSchema] = None
    client_tunables_schema: Optional[FormSchema] = None
    io_rules: Optional[NodeIoRules] = None

    def schema_for(self, category: SchemaCategory, role: Optional[DependencyRole]) -> Optional[FormSchema]:
        if self.client_server is ClientServerMode.CLIENT_AND_SERVER:
            if role is None:
                return None
            prefix = "server" if role is DependencyRole.SERVER else "client"
            return getattr(self, f"{prefix}_{category.value}_schema")
        return getattr(self, f"{category.value}_schema")


@dataclass(frozen=True)
class LayerDefinition:
    """
    Definition of a topology layer.

    Attributes:
        id:         Layer identifier
        label:      Human-readable layer name
        icon:       One-letter badge used by console output
        max_count:  Maximum nodes of this layer per topology (0 = unlimited)
        io_rules:   Link rules for nodes of this layer
        children:   Dependency sub-kinds (dependency layer only)
    """
    id: LayerId
    label: str
    icon: str
    description: str = ""
    max_count: int = 0
    io_rules: NodeIoRules = NodeIoRules()
    constraints_schema: Optional[FormSchema] = None
    objectives_schema: Optional[FormSchema] = None
    tunables_schema: Optional[FormSchema] = None
    children: Tuple[DependencyNodeType, ...] = ()

    def schema_for(self, category: SchemaCategory) -> Optional[FormSchema]:
        return getattr(self, f"{category.value}_schema")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id.value,
            "label": self.label,
            "icon": self.icon,
            "description": self.description,
            "max_count": self.max_count,
            "children": [c.kind.value for c in self.children],
            "schemas": {
                category.value: self.schema_for(category).to_dict()
                for category in SchemaCategory
                if self.schema_for(category) is not None
            },
        }


@dataclass(frozen=True)
class EdgeTypeDefinition:
    """A link between two layers that carries its own parameters."""
    source_layer: LayerId
    target_layer: LayerId
    description: str = ""
    params_schema: Optional[FormSchema] = None


# ---------------------------------------------------------------------------
# Default schemas
# ---------------------------------------------------------------------------

CLIENT_OBJECTIVES_SCHEMA = FormSchema(sections=(
    FormSection(id="load", label="Load target", fields=(
        _select("businessScenario", "Business scenario", "io",
                [("io", "IO bound"), ("compute", "Compute bound")]),
        _num("concurrentUsers", "Concurrent users", 100, minimum=1),
        _num("targetThroughputRps", "Target throughput (RPS)", 500, minimum=1),
        _num("expectedFailureRatePercent", "Acceptable failure rate (%)", 0, maximum=100,
             description="0 means no failed request is acceptable"),
    )),
))

GATEWAY_CONSTRAINTS_SCHEMA = FormSchema(sections=(
    FormSection(id="main", label="Gateway", fields=(
        FieldDefinition(key="nodes", label="Gateway products", field_type="string_list",
                        default=("Tengine", "Nginx", "API Gateway")),
        _str("note", "Note", "Operated by the platform team; modelled for completeness only."),
    )),
))

HOST_CONSTRAINTS_SCHEMA = FormSchema(sections=(
    FormSection(id="spec", label="Compute specification", fields=(
        _num("spec.vCpu", "vCPU (logical cores)", 8, minimum=1),
        _num("spec.cpuFreqGhz", "Core frequency (GHz)", 2.5, minimum=0.1),
        _num("spec.memoryGb", "Memory (GB)", 16, minimum=1),
        _select("spec.architecture", "Architecture", "x86", [("x86", "x86"), ("arm", "ARM")]),
    )),
    FormSection(id="storage", label="Storage", fields=(
        _select("storage.diskType", "Disk type", "ssd",
                [("ssd", "SSD"), ("nvme", "NVMe"), ("hdd", "HDD")]),
        _num("storage.iopsLimit", "IOPS limit", 10000),
        _num("storage.throughputMbPerSec", "Throughput (MB/s)", 500),
    )),
    FormSection(id="network", label="Network", fields=(
        _num("network.nicBandwidthGbps", "NIC bandwidth (Gbps)", 10),
        _num("network.ppsLimit", "Packet rate limit (PPS)", 1000000),
    )),
    FormSection(id="os", label="OS and kernel", fields=(
        _str("os.osVersion", "OS version", "AlmaLinux 9"),
        _str("os.kernelVersion", "Kernel version", "5.14"),
    )),
))

HOST_TUNABLES_SCHEMA = FormSchema(sections=(
    FormSection(id="net", label="Kernel network", fields=(
        _select("net.tcpTwReuse", "net.ipv4.tcp_tw_reuse", 1,
                [(0, "0: off"), (1, "1: global"), (2, "2: loopback only")]),
        _str("net.ipLocalPortRange", "net.ipv4.ip_local_port_range", "32768 60999"),
        _num("net.tcpMaxTwBuckets", "net.ipv4.tcp_max_tw_buckets", 5000),
    )),
    FormSection(id="fs", label="File descriptors", fields=(
        _num("fs.ulimitN", "ulimit -n", 65535),
        _num("fs.fsNrOpen", "fs.nr_open", 65535),
        _num("fs.fsFileMax", "fs.file-max", 2097152),
    )),
))

RUNTIME_CONSTRAINTS_SCHEMA = FormSchema(sections=(
    FormSection(id="main", label="Runtime", fields=(
        _str("jdkVersion", "JDK version", "21"),
        _num("logLinesPerRequest", "Log lines per request", 5),
        _num("logSizeBytesPerRequest", "Log bytes per request", 512),
    )),
))

RUNTIME_TUNABLES_SCHEMA = FormSchema(sections=(
    FormSection(id="runtime", label="JVM and web container", fields=(
        _str("gc", "Garbage collector", "G1GC"),
        _str("jvmOptions", "JVM options", "-Xms4g -Xmx4g"),
        _select("virtualThreadsEnabled", "spring.threads.virtual.enabled", False,
                [(True, "true (virtual threads)"), (False, "false")]),
        _num("tomcatMaxThreads", "server.tomcat.threads.max", 200, minimum=1),
        _num("tomcatMinSpareThreads", "server.tomcat.threads.min-spare", 10),
        _num("tomcatMaxConnections", "server.tomcat.max-connections", 10000, minimum=1),
        _num("tomcatAcceptCount", "server.tomcat.accept-count", 100),
    )),
    FormSection(id="logback", label="Logback", fields=(
        _str("logbackMaxFileSize", "RollingFileAppender maxFileSize", "100MB"),
        _num("logbackMaxHistory", "maxHistory", 30),
        _num("logbackQueueSize", "AsyncAppender queueSize", 256),
        _num("logbackDiscardingThreshold", "discardingThreshold (%)", 20),
        _num("logbackMaxFlushTimeMs", "maxFlushTime (ms)", 5000),
        _select("logbackNeverBlock", "neverBlock", False,
                [(False, "false (block when queue is full)"), (True, "true (drop)")]),
    )),
))

REDIS_SERVER_CONSTRAINTS_SCHEMA = FormSchema(sections=(
    FormSection(id="redis_server", label="Redis server", fields=(
        _num("memoryGb", "Memory (GB)", 8),
        _num("shardCount", "Shard count", 1, minimum=1),
    )),
))

REDIS_CLIENT_CONSTRAINTS_SCHEMA = FormSchema(sections=(
    FormSection(id="redis_client", label="Redis client", fields=(
        _select("redisClient", "Client library", "lettuce",
                [("jedis", "Jedis"), ("lettuce", "Lettuce"), ("redisson", "Redisson")]),
    )),
))

DATABASE_SERVER_CONSTRAINTS_SCHEMA = FormSchema(sections=(
    FormSection(id="database_server", label="Database server", fields=(
        _str("engine", "Engine", "MySQL"),
        _num("cpu", "CPU", 8),
        _num("memoryGb", "Memory (GB)", 16),
        _num("maxConnections", "Max connections", 500),
        _num("maxIops", "Max IOPS", 5000),
        _num("storageGb", "Storage (GB)", 500),
    )),
))

HTTP_API_SERVER_CONSTRAINTS_SCHEMA = FormSchema(sections=(
    FormSection(id="http_api_server", label="Downstream service", fields=(
        _num("avgRtMs", "Average response time (ms)", 200, minimum=1,
             description="Average latency under normal load"),
        _num("rateLimitQps", "Rate limit (QPS)", 0,
             description="Remote rate limit, 0 means unlimited or unknown"),
        _select("networkEnv", "Network environment", "intra_dc", _NETWORK_ENV_OPTIONS),
    )),
))

HTTP_API_CLIENT_CONSTRAINTS_SCHEMA = FormSchema(sections=(
    FormSection(id="http_api_client", label="HTTP client", fields=(
        _select("clientType", "HTTP client", "apache",
                [("apache", "Apache HttpClient"), ("okhttp", "OkHttp"), ("java_http", "Java HttpClient")]),
    )),
))

HTTP_API_CLIENT_TUNABLES_SCHEMA = FormSchema(sections=(
    FormSection(id="apache_pool", label="Apache connection pool",
                description="PoolingHttpClientConnectionManager", fields=(
        _num("apache.maxConnPerRoute", "maxConnPerRoute", 5, minimum=1),
        _num("apache.maxConnTotal", "maxConnTotal", 25, minimum=1),
        _num("apache.connectTimeoutMs", "connectTimeout (ms)", 10000),
        _num("apache.socketTimeoutMs", "socketTimeout (ms)", 10000),
    )),
    FormSection(id="okhttp_pool", label="OkHttp connection pool",
                description="Synchronous calls have no per-host connection cap", fields=(
        _num("okhttp.maxIdleConnections", "maxIdleConnections", 5),
        _num("okhttp.keepAliveDurationMs", "keepAliveDuration (ms)", 300000),
        _num("okhttp.connectTimeoutMs", "connectTimeout (ms)", 10000),
        _num("okhttp.readTimeoutMs", "readTimeout (ms)", 10000),
    )),
    FormSection(id="java_http", label="Java HttpClient",
                description="Pool is managed inside the JDK and not configurable", fields=(
        _select("javaHttp.version", "HTTP version", "HTTP_2",
                [("HTTP_1_1", "HTTP/1.1"), ("HTTP_2", "HTTP/2")]),
        _num("javaHttp.connectTimeoutMs", "connectTimeout (ms)", 0,
             description="0 means no timeout (JDK default)"),
    )),
))

CLIENT_EDGE_PARAMS_SCHEMA = FormSchema(sections=(
    FormSection(id="network", label="Network", fields=(
        _select("networkEnv", "Network environment", "intra_dc", _NETWORK_ENV_OPTIONS),
        _num("messageSizeBytes", "Message size (bytes)", 1024, minimum=1),
    )),
))


# ---------------------------------------------------------------------------
# Default catalogue
# ---------------------------------------------------------------------------

_DEPENDENCY_TYPES: Tuple[DependencyNodeType, ...] = (
    DependencyNodeType(
        kind=DependencyKind.REDIS,
        label="Redis",
        client_server=ClientServerMode.CLIENT_AND_SERVER,
        server_constraints_schema=REDIS_SERVER_CONSTRAINTS_SCHEMA,
        client_constraints_schema=REDIS_CLIENT_CONSTRAINTS_SCHEMA,
    ),
    DependencyNodeType(
        kind=DependencyKind.DATABASE,
        label="Database",
        client_server=ClientServerMode.CLIENT_AND_SERVER,
        server_constraints_schema=DATABASE_SERVER_CONSTRAINTS_SCHEMA,
    ),
    DependencyNodeType(
        kind=DependencyKind.HTTP_API,
        label="Third-party API",
        client_server=ClientServerMode.CLIENT_AND_SERVER,
        server_constraints_schema=HTTP_API_SERVER_CONSTRAINTS_SCHEMA,
        client_constraints_schema=HTTP_API_CLIENT_CONSTRAINTS_SCHEMA,
        client_tunables_schema=HTTP_API_CLIENT_TUNABLES_SCHEMA,
    ),
)

_LAYERS: Tuple[LayerDefinition, ...] = (
    LayerDefinition(
        id=LayerId.CLIENT,
        label="Client",
        icon="C",
        description="Load source: target throughput and concurrency",
        max_count=1,
        io_rules=NodeIoRules(
            has_input=False,
            allowed_output_layers=frozenset({LayerId.GATEWAY, LayerId.HOST}),
        ),
        objectives_schema=CLIENT_OBJECTIVES_SCHEMA,
    ),
    LayerDefinition(
        id=LayerId.GATEWAY,
        label="Gateway",
        icon="G",
        description="Reverse proxy / API gateway, structural only",
        max_count=1,
        io_rules=NodeIoRules(
            allowed_input_layers=frozenset({LayerId.CLIENT}),
            allowed_output_layers=frozenset({LayerId.HOST, LayerId.RUNTIME}),
        ),
        constraints_schema=GATEWAY_CONSTRAINTS_SCHEMA,
    ),
    LayerDefinition(
        id=LayerId.HOST,
        label="Host",
        icon="H",
        description="VM or container: NIC, packet rate, ports, file descriptors",
        max_count=1,
        io_rules=NodeIoRules(
            allowed_input_layers=frozenset({LayerId.CLIENT, LayerId.GATEWAY}),
            allowed_output_layers=frozenset({LayerId.RUNTIME}),
        ),
        constraints_schema=HOST_CONSTRAINTS_SCHEMA,
        tunables_schema=HOST_TUNABLES_SCHEMA,
    ),
    LayerDefinition(
        id=LayerId.RUNTIME,
        label="Runtime",
        icon="J",
        description="JVM and Tomcat: threads, connections, heap",
        max_count=1,
        io_rules=NodeIoRules(
            allowed_input_layers=frozenset({LayerId.HOST, LayerId.GATEWAY}),
            allowed_output_layers=frozenset({LayerId.DEPENDENCY}),
        ),
        constraints_schema=RUNTIME_CONSTRAINTS_SCHEMA,
        tunables_schema=RUNTIME_TUNABLES_SCHEMA,
    ),
    LayerDefinition(
        id=LayerId.DEPENDENCY,
        label="Dependency",
        icon="D",
        description="Downstream services called by the runtime",
        io_rules=NodeIoRules(
            has_output=False,
            allowed_input_layers=frozenset({LayerId.RUNTIME}),
        ),
        children=_DEPENDENCY_TYPES,
    ),
)

_EDGE_TYPES: Tuple[EdgeTypeDefinition, ...] = (
    EdgeTypeDefinition(LayerId.CLIENT, LayerId.GATEWAY, "Client traffic into the gateway",
                       CLIENT_EDGE_PARAMS_SCHEMA),
    EdgeTypeDefinition(LayerId.CLIENT, LayerId.HOST, "Client traffic straight to the host",
                       CLIENT_EDGE_PARAMS_SCHEMA),
    EdgeTypeDefinition(LayerId.GATEWAY, LayerId.HOST, "Gateway forwards to the host"),
    EdgeTypeDefinition(LayerId.GATEWAY, LayerId.RUNTIME, "Gateway forwards to the runtime"),
    EdgeTypeDefinition(LayerId.HOST, LayerId.RUNTIME, "Runtime runs on the host"),
    EdgeTypeDefinition(LayerId.RUNTIME, LayerId.DEPENDENCY, "Runtime calls a dependency"),
)


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class LayerRegistry:
    """
    Immutable catalogue of layers, dependency kinds and edge types.

    All ``defaults_for``/``edge_defaults`` calls return fresh dicts, so
    callers may mutate what they get back.
    """
    layers: Tuple[LayerDefinition, ...] = _LAYERS
    edge_types: Tuple[EdgeTypeDefinition, ...] = _EDGE_TYPES

    # -- layers ---------------------------------------------------------

    def get_layer(self, layer_id: Union[LayerId, str]) -> LayerDefinition:
        lid = LayerId.from_string(layer_id)
        for layer in self.layers:
            if layer.id is lid:
                return layer
        raise KeyError(f"Layer '{lid.value}' is not registered")

    def layer_order(self) -> List[LayerId]:
        return [layer.id for layer in self.layers]

    def max_count(self, layer_id: LayerId) -> Optional[int]:
        """Maximum nodes of this layer, ``None`` when unlimited."""
        limit = self.get_layer(layer_id).max_count
        return limit if limit > 0 else None

    # -- dependency kinds -------------------------------------------------

    def dependency_types(self) -> Tuple[DependencyNodeType, ...]:
        return self.get_layer(LayerId.DEPENDENCY).children

    def get_dependency_type(self, kind: DependencyKind) -> Optional[DependencyNodeType]:
        for child in self.dependency_types():
            if child.kind is kind:
                return child
        return None

    def client_server_mode(self, kind: DependencyKind) -> ClientServerMode:
        child = self.get_dependency_type(kind)
        return child.client_server if child else ClientServerMode.CLIENT_ONLY

    # -- schemas and defaults ---------------------------------------------

    def schema_for(
        self,
        category: SchemaCategory,
        layer_id: LayerId,
        dependency_kind: Optional[DependencyKind] = None,
        dependency_role: Optional[DependencyRole] = None,
    ) -> Optional[FormSchema]:
        if layer_id is LayerId.DEPENDENCY:
            if dependency_kind is None:
                return None
            child = self.get_dependency_type(dependency_kind)
            return child.schema_for(category, dependency_role) if child else None
        return self.get_layer(layer_id).schema_for(category)

    def defaults_for(
        self,
        category: SchemaCategory,
        layer_id: LayerId,
        dependency_kind: Optional[DependencyKind] = None,
        dependency_role: Optional[DependencyRole] = None,
    ) -> Dict[str, Any]:
        """Default value record for one node type and map category."""
        schema = self.schema_for(category, layer_id, dependency_kind, dependency_role)
        defaults = build_defaults(schema)
        # string_list defaults are stored as tuples to keep the catalogue hashable
        for key, value in list(defaults.items()):
            if isinstance(value, tuple):
                defaults[key] = list(value)
        return defaults

    # -- edges ------------------------------------------------------------

    def edge_type(self, source: LayerId, target: LayerId) -> Optional[EdgeTypeDefinition]:
        for et in self.edge_types:
            if et.source_layer is source and et.target_layer is target:
                return et
        return None

    def edge_defaults(self, source: LayerId, target: LayerId) -> Dict[str, Any]:
        et = self.edge_type(source, target)
        return build_defaults(et.params_schema) if et else {}

    def io_rules(self, layer_id: LayerId, dependency_kind: Optional[DependencyKind] = None) -> NodeIoRules:
        rules = self.get_layer(layer_id).io_rules
        if layer_id is LayerId.DEPENDENCY and dependency_kind is not None:
            child = self.get_dependency_type(dependency_kind)
            if child and child.io_rules:
                rules = child.io_rules
        return rules

    def validate_edge(
        self,
        source_layer: LayerId,
        target_layer: LayerId,
        source_kind: Optional[DependencyKind] = None,
        target_kind: Optional[DependencyKind] = None,
    ) -> EdgeCheck:
        """Check a link against the I/O rules of both endpoints."""
        src = self.io_rules(source_layer, source_kind)
        tgt = self.io_rules(target_layer, target_kind)
        if not src.has_output:
            return EdgeCheck(False, f"{self.get_layer(source_layer).label} nodes have no outbound links")
        if not tgt.has_input:
            return EdgeCheck(False, f"{self.get_layer(target_layer).label} nodes accept no inbound links")
        if tgt.allowed_input_layers and source_layer not in tgt.allowed_input_layers:
            names = ", ".join(self._labels(tgt.allowed_input_layers))
            return EdgeCheck(False, f"{self.get_layer(target_layer).label} only accepts input from: {names}")
        if src.allowed_output_layers and target_layer not in src.allowed_output_layers:
            names = ", ".join(self._labels(src.allowed_output_layers))
            return EdgeCheck(False, f"{self.get_layer(source_layer).label} may only link to: {names}")
        return EdgeCheck(True)

    def _labels(self, layer_ids: FrozenSet[LayerId]) -> List[str]:
        return [layer.label for layer in self.layers if layer.id in layer_ids]

    # -- display ----------------------------------------------------------

    def list_layers(self) -> str:
        """Return a formatted string describing all layers."""
        lines = ["Available topology layers:", ""]
        for layer in self.layers:
            limit = "1 per topology" if layer.max_count == 1 else "unlimited"
            outputs = self.io_rules(layer.id).allowed_output_layers
            links = ", ".join(self._labels(outputs)) if outputs else "-"
            lines.extend([
                f"  {layer.id.value:11} [{layer.icon}] {layer.label}",
                f"              {layer.description}",
                f"              Count: {limit}   Links to: {links}",
            ])
            for child in layer.children:
                lines.append(f"              - {child.kind.value:9} {child.label} ({child.client_server.value})")
            lines.append("")
        return "\n".join(lines)


DEFAULT_REGISTRY = LayerRegistry()


def get_layer_definition(layer_id: Union[LayerId, str]) -> LayerDefinition:
    """Get the default definition for a specific layer."""
    return DEFAULT_REGISTRY.get_layer(layer_id)


def list_layers() -> str:
    return DEFAULT_REGISTRY.list_layers()

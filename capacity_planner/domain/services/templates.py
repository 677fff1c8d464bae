"""
Demo Templates

Ready-made topologies that illustrate typical capacity problems. Each
template is a builder function, so every ``load_template`` call returns a
fresh, independent snapshot.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, List

from capacity_planner.domain.models import (
    AnalysisInput,
    DependencyKind,
    LayerId,
    SchemaCategory,
)
from capacity_planner.domain.services.topology_builder import TopologyBuilder
from capacity_planner.exceptions import TemplateNotFoundError


@dataclass(frozen=True)
class TemplateDefinition:
    key: str
    label: str
    description: str
    build: Callable[[], AnalysisInput]


def _io_bound_bff() -> AnalysisInput:
    builder = TopologyBuilder()
    client = builder.add_layer_node(LayerId.CLIENT)
    host = builder.add_layer_node(LayerId.HOST)
    runtime = builder.add_layer_node(LayerId.RUNTIME, "BFF Service")
    server, api_client = builder.add_dependency(DependencyKind.HTTP_API, "Partner API")

    builder.connect(client.id, host.id)
    builder.connect(host.id, runtime.id)
    builder.connect(runtime.id, api_client.id)

    builder.set_value(SchemaCategory.OBJECTIVES, client.id, "targetThroughputRps", 1000)
    builder.set_value(SchemaCategory.CONSTRAINTS, server.id, "avgRtMs", 500)
    builder.set_value(SchemaCategory.OBJECTIVES, server.id, "slaRtMs", 500)
    # Apache pool left at library defaults (5 per route, 25 total)
    return builder.build()


TEMPLATES: Dict[str, TemplateDefinition] = {
    t.key: t for t in (
        TemplateDefinition(
            key="io-bound-bff",
            label="Case 1: slow dependency starves the middle tier (Tomcat thread pool bottleneck)",
            description=(
                "A small aggregation service calls a third-party API that answers in 500 ms. "
                "At 1,000 RPS the default Apache connection pool and the Tomcat thread pool "
                "are exhausted long before the host runs out of capacity."
            ),
            build=_io_bound_bff,
        ),
    )
}


def load_template(key: str) -> AnalysisInput:
    """
    Fresh snapshot of a bundled template.

    Raises:
        TemplateNotFoundError: unknown key
    """
    try:
        template = TEMPLATES[key]
    except KeyError:
        raise TemplateNotFoundError(
            f"Unknown template '{key}'. Available: {', '.join(sorted(TEMPLATES))}"
        ) from None
    return template.build()


def list_templates() -> List[TemplateDefinition]:
    return list(TEMPLATES.values())

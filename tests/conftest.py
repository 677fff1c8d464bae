"""
Test Configuration and Fixtures
================================

Shared pytest fixtures for the capacity planner tests.

Usage:
    pytest tests/                    # Run all tests
    pytest tests/ -v                 # Verbose output
    pytest tests/ -k "runtime"       # Run only runtime rule tests
    pytest tests/ --quick            # Skip slow tests
"""

import sys
from pathlib import Path
from typing import Dict

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from capacity_planner.domain.models import (
    DependencyKind,
    DependencyRole,
    LayerId,
    TopologyNode,
)
from capacity_planner.domain.services.topology_builder import TopologyBuilder


# =============================================================================
# Custom Markers
# =============================================================================

def pytest_configure(config):
    """Register custom markers"""
    config.addinivalue_line("markers", "slow: marks tests as slow")
    config.addinivalue_line("markers", "integration: marks end-to-end CLI tests")


def pytest_addoption(parser):
    """Add custom command line options"""
    parser.addoption(
        "--quick",
        action="store_true",
        default=False,
        help="Skip slow tests",
    )


def pytest_collection_modifyitems(config, items):
    """Skip slow tests if --quick is specified"""
    if config.getoption("--quick"):
        skip_slow = pytest.mark.skip(reason="Skipped with --quick")
        for item in items:
            if "slow" in item.keywords:
                item.add_marker(skip_slow)


# =============================================================================
# Node Fixtures
# =============================================================================

@pytest.fixture
def host_node() -> TopologyNode:
    return TopologyNode(id="h1", layer_id=LayerId.HOST, label="Host")


@pytest.fixture
def runtime_node() -> TopologyNode:
    return TopologyNode(id="r1", layer_id=LayerId.RUNTIME, label="Runtime")


@pytest.fixture
def api_nodes():
    """(client, server) halves of one HTTP API dependency."""
    server = TopologyNode(
        id="api-s", layer_id=LayerId.DEPENDENCY, label="API Server",
        dependency_kind=DependencyKind.HTTP_API, dependency_role=DependencyRole.SERVER, dependency_group_id="g1",
    )
    client = TopologyNode(
        id="api-c", layer_id=LayerId.DEPENDENCY, label="API Client",
        dependency_kind=DependencyKind.HTTP_API, dependency_role=DependencyRole.CLIENT, dependency_group_id="g1",
    )
    return client, server


# =============================================================================
# Topology Fixtures
# =============================================================================

@pytest.fixture
def builder() -> TopologyBuilder:
    return TopologyBuilder()


@pytest.fixture
def stack(builder) -> Dict[str, object]:
    """
    client -> host -> runtime with registry defaults.

    Returns the builder plus the created nodes so tests can customise
    values before calling ``build()``.
    """
    client = builder.add_layer_node(LayerId.CLIENT)
    host = builder.add_layer_node(LayerId.HOST)
    runtime = builder.add_layer_node(LayerId.RUNTIME)
    edge = builder.connect(client.id, host.id)
    builder.connect(host.id, runtime.id)
    return {"builder": builder, "client": client, "host": host, "runtime": runtime, "client_edge": edge}


@pytest.fixture
def stack_with_api(stack) -> Dict[str, object]:
    """``stack`` plus an HTTP API dependency called by the runtime."""
    builder = stack["builder"]
    server, client = builder.add_dependency(DependencyKind.HTTP_API, "Partner API")
    builder.connect(stack["runtime"].id, client.id)
    return dict(stack, api_server=server, api_client=client)


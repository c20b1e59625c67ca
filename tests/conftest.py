"""Pytest configuration and fixtures."""

import random
from typing import Any, Dict, List, Optional, Tuple

import pytest

from applet_engine.core.applet_registry import AppletRegistry
from applet_engine.core.delays import FixedDelayStrategy
from applet_engine.core.execution_engine import WorkflowExecutionEngine
from applet_engine.core.metrics import StaticMetricsSource
from applet_engine.core.payloads import PayloadFactory
from applet_engine.models.core import Workflow, WorkflowConnection, WorkflowNode
from applet_engine.storage.database import create_database_engine, drop_tables
from applet_engine.storage.history import ExecutionHistoryStore


def make_node(node_id: str, applet_type: str = "djed_monitor",
              condition: Optional[Dict[str, Any]] = None, name: Optional[str] = None,
              **kwargs) -> WorkflowNode:
    """Build a node with sensible defaults."""
    return WorkflowNode(id=node_id, type=applet_type, name=name or node_id,
                        condition=condition, **kwargs)


def make_workflow(nodes: List[WorkflowNode], edges: List[Tuple[str, str]],
                  workflow_id: str = "wf_test", name: str = "Test Workflow") -> Workflow:
    """Build a workflow from nodes and (from, to) pairs."""
    return Workflow(
        id=workflow_id,
        name=name,
        description="Workflow used in tests",
        nodes=nodes,
        connections=[WorkflowConnection(from_node=source, to_node=target) for source, target in edges],
    )


@pytest.fixture
def registry():
    """Create an AppletRegistry with the built-in applets."""
    return AppletRegistry()


@pytest.fixture
def metrics():
    """Healthy, deterministic metrics: DSI 465%, price $1.00."""
    return StaticMetricsSource(reserve_ratio=465.0, price=1.0)


@pytest.fixture
def make_engine(registry):
    """Factory for zero-latency engines with deterministic metrics."""
    def _make(metrics_source=None, **kwargs) -> WorkflowExecutionEngine:
        return WorkflowExecutionEngine(
            registry=registry,
            delay_strategy=FixedDelayStrategy(0),
            metrics_source=metrics_source or StaticMetricsSource(reserve_ratio=465.0, price=1.0),
            payload_factory=PayloadFactory(rng=random.Random(7)),
            **kwargs
        )
    return _make


@pytest.fixture
def engine(make_engine):
    """Create a zero-latency WorkflowExecutionEngine for testing."""
    return make_engine()


@pytest.fixture
def history_store():
    """Create an ExecutionHistoryStore backed by an in-memory SQLite database."""
    db_engine = create_database_engine("sqlite:///:memory:")
    store = ExecutionHistoryStore(engine=db_engine, history_limit=5)
    yield store
    drop_tables(db_engine)
    db_engine.dispose()

"""Core workflow engine components."""

from .exceptions import (
    WorkflowEngineError,
    PolicyBlockedError,
    GraphValidationError,
    NodeExecutionError,
    AppletRegistryError,
    StorageError,
    ConfigurationError,
)
from .logging import setup_logging, configure_logging, get_logger
from .applet_registry import AppletDefinition, AppletRegistry
from .delays import DelayStrategy, RandomDelayStrategy, FixedDelayStrategy
from .metrics import MetricsSample, MetricsSource, RandomMetricsSource, StaticMetricsSource, ScriptedMetricsSource
from .conditions import ConditionEvaluator
from .payloads import PayloadFactory
from .policy_gate import PolicyGate, POLICY_NODE_ID
from .node_executor import NodeExecutor
from .log_builder import ExecutionLogBuilder
from .graph_traversal import GraphTraversalController, find_entry_nodes
from .graph_validator import WorkflowValidator
from .execution_engine import WorkflowExecutionEngine, build_execution_engine

__all__ = [
    "WorkflowEngineError",
    "PolicyBlockedError",
    "GraphValidationError",
    "NodeExecutionError",
    "AppletRegistryError",
    "StorageError",
    "ConfigurationError",
    "setup_logging",
    "configure_logging",
    "get_logger",
    "AppletDefinition",
    "AppletRegistry",
    "DelayStrategy",
    "RandomDelayStrategy",
    "FixedDelayStrategy",
    "MetricsSample",
    "MetricsSource",
    "RandomMetricsSource",
    "StaticMetricsSource",
    "ScriptedMetricsSource",
    "ConditionEvaluator",
    "PayloadFactory",
    "PolicyGate",
    "POLICY_NODE_ID",
    "NodeExecutor",
    "ExecutionLogBuilder",
    "GraphTraversalController",
    "find_entry_nodes",
    "WorkflowValidator",
    "WorkflowExecutionEngine",
    "build_execution_engine",
]

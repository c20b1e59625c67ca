"""Applet Workflow Engine: simulated execution of DeFi monitoring workflows."""

from .config import EngineConfig, get_config, load_config, reset_config
from .core.execution_engine import WorkflowExecutionEngine, build_execution_engine
from .models.core import (
    ExecutionLogEntry,
    NodeExecutionRecord,
    ProtocolStatus,
    Workflow,
    WorkflowConnection,
    WorkflowNode,
)

__version__ = "1.0.0"

__all__ = [
    "EngineConfig",
    "get_config",
    "load_config",
    "reset_config",
    "WorkflowExecutionEngine",
    "build_execution_engine",
    "ExecutionLogEntry",
    "NodeExecutionRecord",
    "ProtocolStatus",
    "Workflow",
    "WorkflowConnection",
    "WorkflowNode",
]

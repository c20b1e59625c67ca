"""Data models for the applet workflow engine."""

from .core import (
    ProtocolStatus,
    AppletType,
    AppletCategory,
    OutputType,
    Chain,
    ConditionType,
    DEFAULT_CONDITION_THRESHOLDS,
    NodeExecutionStatus,
    ExecutionStatusEnum,
    ValidationResult,
    Position,
    BridgeConfig,
    NodeCondition,
    WorkflowNode,
    WorkflowConnection,
    Workflow,
    NodeExecutionRecord,
    ExecutionLogEntry,
    utc_now,
)

__all__ = [
    "ProtocolStatus",
    "AppletType",
    "AppletCategory",
    "OutputType",
    "Chain",
    "ConditionType",
    "DEFAULT_CONDITION_THRESHOLDS",
    "NodeExecutionStatus",
    "ExecutionStatusEnum",
    "ValidationResult",
    "Position",
    "BridgeConfig",
    "NodeCondition",
    "WorkflowNode",
    "WorkflowConnection",
    "Workflow",
    "NodeExecutionRecord",
    "ExecutionLogEntry",
    "utc_now",
]

"""Core Pydantic models for the applet workflow engine."""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator


def utc_now() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


class ProtocolStatus(str, Enum):
    """Health state reported by the protocol monitor."""
    OPTIMAL = "OPTIMAL"
    CRITICAL = "CRITICAL"


class AppletType(str, Enum):
    """Known applet kinds a workflow node may reference."""
    DJED_MONITOR = "djed_monitor"
    DJED_SIM = "djed_sim"
    DJED_SENTINEL = "djed_sentinel"
    DJED_LEDGER = "djed_ledger"
    DJED_ARBITRAGE = "djed_arbitrage"
    TELEPORT_BRIDGE = "teleport_bridge"
    ETH_WALLET = "eth_wallet"
    SOL_WALLET = "sol_wallet"


class AppletCategory(str, Enum):
    """Category of an applet; determines the shape of its output payload."""
    MONITORING = "monitoring"
    SIMULATION = "simulation"
    SECURITY = "security"
    LEDGER = "ledger"
    ARBITRAGE = "arbitrage"
    BRIDGE = "bridge"
    WALLET = "wallet"


class OutputType(str, Enum):
    """Kind of output an applet emits."""
    DATA = "data"
    ALERT = "alert"
    TRANSACTION = "transaction"
    BRIDGE = "bridge"


class Chain(str, Enum):
    """Supported blockchain networks."""
    ETHEREUM = "ethereum"
    WEILCHAIN = "weilchain"
    SOLANA = "solana"


class ConditionType(str, Enum):
    """Guard kinds for a node's conditional branch."""
    DSI_BELOW = "dsi_below"
    DSI_ABOVE = "dsi_above"
    PRICE_BELOW = "price_below"
    PRICE_ABOVE = "price_above"
    ALWAYS = "always"


DEFAULT_CONDITION_THRESHOLDS: Dict[ConditionType, float] = {
    ConditionType.DSI_BELOW: 400.0,
    ConditionType.DSI_ABOVE: 500.0,
    ConditionType.PRICE_BELOW: 0.95,
    ConditionType.PRICE_ABOVE: 1.05,
}


class NodeExecutionStatus(str, Enum):
    """Outcome of a single node execution."""
    SUCCESS = "success"
    FAILED = "failed"
    SKIPPED = "skipped"


class ExecutionStatusEnum(str, Enum):
    """Overall outcome of a workflow execution."""
    COMPLETED = "completed"
    FAILED = "failed"


class ValidationResult(BaseModel):
    """Result of workflow validation."""
    is_valid: bool = Field(..., description="Whether the workflow is valid")
    errors: List[str] = Field(default_factory=list, description="List of validation errors")
    warnings: List[str] = Field(default_factory=list, description="List of validation warnings")


class Position(BaseModel):
    """Canvas position of a node. Layout metadata only."""
    x: float = 0.0
    y: float = 0.0


class BridgeConfig(BaseModel):
    """Configuration for teleport bridge nodes."""
    source_chain: Chain = Field(..., description="Chain assets leave from")
    destination_chain: Chain = Field(..., description="Chain assets arrive on")
    source_token: str = Field(..., description="Token symbol on the source chain")
    destination_token: str = Field(..., description="Token symbol on the destination chain")
    estimated_time: int = Field(60, description="Estimated bridge time in seconds")
    fee: float = Field(0.1, description="Bridge fee as a percentage")


class NodeCondition(BaseModel):
    """Guard evaluated against protocol metrics before a node's branch fires."""
    type: ConditionType = Field(ConditionType.ALWAYS, description="Condition kind")
    value: Optional[float] = Field(None, description="Threshold compared against the sampled metric")

    @property
    def threshold(self) -> Optional[float]:
        """Configured threshold, or the default for this condition kind."""
        if self.value is not None:
            return self.value
        return DEFAULT_CONDITION_THRESHOLDS.get(self.type)

    @property
    def is_unconditional(self) -> bool:
        return self.type == ConditionType.ALWAYS


class WorkflowNode(BaseModel):
    """A typed applet step in a workflow."""
    id: str = Field(..., description="Unique identifier for the node")
    type: str = Field(..., description="Applet kind, normally one of AppletType")
    name: str = Field("", description="Display name chosen in the builder")
    position: Position = Field(default_factory=Position, description="Layout metadata")
    chain: Optional[Chain] = Field(None, description="Chain override; defaults to the applet's chain")
    bridge_config: Optional[BridgeConfig] = Field(None, description="Configuration for bridge nodes")
    condition: Optional[NodeCondition] = Field(None, description="Optional guard for this node")

    @field_validator('id')
    @classmethod
    def validate_id(cls, id_value):
        """Ensure node ID is not blank."""
        if not id_value or not id_value.strip():
            raise ValueError("Node ID cannot be empty")
        return id_value.strip()

    @property
    def applet_type(self) -> Optional[AppletType]:
        """The known applet kind, or None for unrecognized types."""
        try:
            return AppletType(self.type)
        except ValueError:
            return None


class WorkflowConnection(BaseModel):
    """Directed edge between two workflow nodes."""
    model_config = ConfigDict(populate_by_name=True)

    from_node: str = Field(..., alias="from", description="Source node ID")
    to_node: str = Field(..., alias="to", description="Target node ID")
    condition: Optional[str] = Field(None, description="Display-only label; not used by execution")


class Workflow(BaseModel):
    """A saved workflow: applet nodes plus the connections between them."""
    id: str = Field(..., description="Workflow identifier")
    name: str = Field(..., description="Workflow name")
    description: str = Field("", description="Workflow description")
    nodes: List[WorkflowNode] = Field(default_factory=list, description="Nodes in declaration order")
    connections: List[WorkflowConnection] = Field(default_factory=list, description="Directed connections")
    created_at: datetime = Field(default_factory=utc_now, description="Creation timestamp")
    last_executed: Optional[datetime] = Field(None, description="Timestamp of the last execution")
    execution_count: int = Field(0, ge=0, description="Number of recorded executions")

    @field_validator('nodes')
    @classmethod
    def validate_unique_node_ids(cls, nodes):
        """Ensure all node IDs are unique."""
        node_ids = [node.id for node in nodes]
        if len(node_ids) != len(set(node_ids)):
            raise ValueError("All node IDs must be unique")
        return nodes

    def get_node(self, node_id: str) -> Optional[WorkflowNode]:
        """Look up a node by ID; None when the ID is not declared."""
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    def outgoing(self, node_id: str) -> List[WorkflowConnection]:
        """Outgoing connections of a node, in declaration order."""
        return [connection for connection in self.connections if connection.from_node == node_id]

    def with_execution(self, log: "ExecutionLogEntry") -> "Workflow":
        """Return a copy of this workflow with execution stats updated from a log."""
        return self.model_copy(update={
            "last_executed": log.timestamp,
            "execution_count": self.execution_count + 1,
        })


class NodeExecutionRecord(BaseModel):
    """Outcome of one node visit during a run."""
    node_id: str = Field(..., description="ID of the executed node")
    node_name: str = Field(..., description="Display name of the applet")
    status: NodeExecutionStatus = Field(..., description="Node outcome")
    start_time: datetime = Field(..., description="When the node started")
    end_time: datetime = Field(..., description="When the node finished")
    output: Optional[Dict[str, Any]] = Field(None, description="Per-category output payload")
    error: Optional[str] = Field(None, description="Error message for failed nodes")

    @property
    def duration_ms(self) -> float:
        return (self.end_time - self.start_time).total_seconds() * 1000


class ExecutionLogEntry(BaseModel):
    """Aggregated report of a single workflow execution."""
    id: str = Field(..., description="Unique identifier for this execution")
    workflow_id: str = Field(..., description="ID of the executed workflow")
    workflow_name: str = Field(..., description="Name of the executed workflow")
    timestamp: datetime = Field(..., description="When the execution started")
    node_executions: List[NodeExecutionRecord] = Field(default_factory=list, description="Records in traversal order")
    total_duration: float = Field(..., ge=0, description="Total run time in milliseconds")
    status: ExecutionStatusEnum = Field(..., description="Overall execution status")

    def get_record(self, node_id: str) -> Optional[NodeExecutionRecord]:
        """Find the record for a node, if it was visited."""
        for record in self.node_executions:
            if record.node_id == node_id:
                return record
        return None

    @property
    def executed_node_ids(self) -> List[str]:
        return [record.node_id for record in self.node_executions]

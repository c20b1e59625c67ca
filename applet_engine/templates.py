"""Pre-built workflow templates for common monitoring and trading pipelines."""

import uuid
from enum import Enum
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field

from .core.graph_validator import WorkflowValidator
from .core.logging import get_logger
from .models.core import Workflow, WorkflowConnection, WorkflowNode, utc_now

logger = get_logger(__name__)


class TemplateCategory(str, Enum):
    MONITORING = "monitoring"
    TRADING = "trading"
    SECURITY = "security"
    ANALYTICS = "analytics"


class TemplateDifficulty(str, Enum):
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


class WorkflowTemplate(BaseModel):
    """A reusable workflow blueprint."""
    id: str = Field(..., description="Template identifier")
    name: str = Field(..., description="Template display name")
    description: str = Field(..., description="What the template does")
    category: TemplateCategory = Field(..., description="Template category")
    difficulty: TemplateDifficulty = Field(..., description="Template difficulty")
    estimated_cost: int = Field(..., description="Estimated cost in WEIL")
    workflow_name: str = Field(..., description="Name given to instantiated workflows")
    workflow_description: str = Field("", description="Description given to instantiated workflows")
    nodes: List[WorkflowNode] = Field(default_factory=list)
    connections: List[WorkflowConnection] = Field(default_factory=list)


def _node(node_id: str, applet_type: str, name: str, x: float, y: float,
          condition: Optional[Dict[str, Any]] = None) -> WorkflowNode:
    return WorkflowNode(
        id=node_id,
        type=applet_type,
        name=name,
        position={"x": x, "y": y},
        condition=condition or {"type": "always"},
    )


def _link(source: str, target: str) -> WorkflowConnection:
    return WorkflowConnection(from_node=source, to_node=target)


WORKFLOW_TEMPLATES: List[WorkflowTemplate] = [
    WorkflowTemplate(
        id="monitor-alert",
        name="Monitor & Alert",
        description="Continuously monitor Djed protocol health and trigger alerts when reserve ratio drops below safe threshold",
        category=TemplateCategory.MONITORING,
        difficulty=TemplateDifficulty.BEGINNER,
        estimated_cost=120,
        workflow_name="Monitor & Alert",
        workflow_description="Basic health monitoring workflow",
        nodes=[
            _node("node_monitor", "djed_monitor", "Djed Eye", 100, 150),
            _node("node_sentinel", "djed_sentinel", "Sentinel One", 450, 150, {"type": "dsi_below", "value": 400}),
        ],
        connections=[_link("node_monitor", "node_sentinel")],
    ),
    WorkflowTemplate(
        id="arbitrage-hunter",
        name="Arbitrage Opportunity Scanner",
        description="Detect arbitrage opportunities, verify with transaction history, and calculate optimal trade size",
        category=TemplateCategory.TRADING,
        difficulty=TemplateDifficulty.ADVANCED,
        estimated_cost=450,
        workflow_name="Arbitrage Hunter Pro",
        workflow_description="Advanced arbitrage detection workflow",
        nodes=[
            _node("node_arb", "djed_arbitrage", "Arb-Hunter", 100, 100, {"type": "price_below", "value": 0.98}),
            _node("node_ledger", "djed_ledger", "Djed Ledger", 450, 100),
            _node("node_monitor", "djed_monitor", "Djed Eye", 800, 100),
        ],
        connections=[_link("node_arb", "node_ledger"), _link("node_ledger", "node_monitor")],
    ),
    WorkflowTemplate(
        id="risk-analysis",
        name="Comprehensive Risk Analysis",
        description="Run stress tests, simulate scenarios, and monitor protocol stability in a complete risk assessment pipeline",
        category=TemplateCategory.SECURITY,
        difficulty=TemplateDifficulty.ADVANCED,
        estimated_cost=380,
        workflow_name="Risk Analysis Pipeline",
        workflow_description="Full risk assessment workflow",
        nodes=[
            _node("node_sentinel", "djed_sentinel", "Sentinel One", 100, 150),
            _node("node_sim", "djed_sim", "Chrono-Sim", 450, 150),
            _node("node_monitor", "djed_monitor", "Djed Eye", 800, 150, {"type": "dsi_below", "value": 450}),
        ],
        connections=[_link("node_sentinel", "node_sim"), _link("node_sim", "node_monitor")],
    ),
    WorkflowTemplate(
        id="transaction-tracker",
        name="Live Transaction Tracker",
        description="Monitor on-chain transactions, detect large whale movements, and analyze transaction patterns",
        category=TemplateCategory.ANALYTICS,
        difficulty=TemplateDifficulty.BEGINNER,
        estimated_cost=150,
        workflow_name="Transaction Tracker",
        workflow_description="Real-time transaction monitoring",
        nodes=[
            _node("node_ledger", "djed_ledger", "Djed Ledger", 100, 150),
            _node("node_monitor", "djed_monitor", "Djed Eye", 450, 150),
        ],
        connections=[_link("node_ledger", "node_monitor")],
    ),
    WorkflowTemplate(
        id="full-stack",
        name="Full Stack Monitor",
        description="Complete monitoring solution using all 5 applets in a coordinated pipeline",
        category=TemplateCategory.MONITORING,
        difficulty=TemplateDifficulty.ADVANCED,
        estimated_cost=850,
        workflow_name="Full Stack Monitor",
        workflow_description="Complete ecosystem monitoring",
        nodes=[
            _node("node_monitor", "djed_monitor", "Djed Eye", 100, 200),
            _node("node_sentinel", "djed_sentinel", "Sentinel One", 450, 100, {"type": "dsi_below", "value": 450}),
            _node("node_ledger", "djed_ledger", "Djed Ledger", 450, 300),
            _node("node_sim", "djed_sim", "Chrono-Sim", 800, 100),
            _node("node_arb", "djed_arbitrage", "Arb-Hunter", 800, 300, {"type": "price_below", "value": 0.99}),
        ],
        connections=[
            _link("node_monitor", "node_sentinel"),
            _link("node_monitor", "node_ledger"),
            _link("node_sentinel", "node_sim"),
            _link("node_ledger", "node_arb"),
        ],
    ),
]


def get_template_by_id(template_id: str) -> Optional[WorkflowTemplate]:
    """Get a template by ID."""
    for template in WORKFLOW_TEMPLATES:
        if template.id == template_id:
            return template
    return None


def get_templates_by_category(category: TemplateCategory) -> List[WorkflowTemplate]:
    """Get all templates in a category."""
    return [template for template in WORKFLOW_TEMPLATES if template.category == TemplateCategory(category)]


def instantiate_template(template_id: str, workflow_id: Optional[str] = None) -> Workflow:
    """
    Create a new, validated workflow from a template.

    Raises:
        KeyError: If no template has the given ID
        GraphValidationError: If the template's graph is invalid
    """
    template = get_template_by_id(template_id)
    if template is None:
        raise KeyError(f"Unknown workflow template: {template_id}")

    workflow = Workflow(
        id=workflow_id or f"workflow_{uuid.uuid4().hex}",
        name=template.workflow_name,
        description=template.workflow_description,
        nodes=[node.model_copy(deep=True) for node in template.nodes],
        connections=[connection.model_copy() for connection in template.connections],
        created_at=utc_now(),
    )
    WorkflowValidator().validate_or_raise(workflow)
    logger.debug(f"Instantiated template '{template_id}' as workflow {workflow.id}")
    return workflow

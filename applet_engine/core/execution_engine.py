"""Execution Engine for simulated applet workflows."""

import random
from typing import Optional, Union

from ..config import EngineConfig
from ..models.core import ExecutionLogEntry, ProtocolStatus, Workflow
from .applet_registry import AppletRegistry
from .conditions import ConditionEvaluator
from .delays import DelayStrategy, RandomDelayStrategy
from .exceptions import PolicyBlockedError
from .graph_traversal import GraphTraversalController
from .graph_validator import WorkflowValidator
from .log_builder import ExecutionLogBuilder
from .logging import configure_logging, get_logger, reset_logging_context, set_logging_context
from .metrics import MetricsSource, RandomMetricsSource
from .node_executor import NodeExecutor
from .payloads import PayloadFactory
from .policy_gate import PolicyGate, normalize_status

logger = get_logger(__name__)


class WorkflowExecutionEngine:
    """Engine for executing applet workflows with conditional branching and policy enforcement."""

    def __init__(
        self,
        registry: Optional[AppletRegistry] = None,
        delay_strategy: Optional[DelayStrategy] = None,
        metrics_source: Optional[MetricsSource] = None,
        payload_factory: Optional[PayloadFactory] = None,
        policy_gate: Optional[PolicyGate] = None,
        validator: Optional[WorkflowValidator] = None,
        validate_before_run: bool = True
    ):
        """Initialize the execution engine.

        Args:
            registry: Applet definitions; defaults to the built-in applets
            delay_strategy: Simulated node latency; defaults to 300-1000ms uniform
            metrics_source: Metrics consulted by node conditions; defaults to random healthy values
            payload_factory: Builder for node output payloads
            policy_gate: Pre-flight protocol status check
            validator: Structural validator run before traversal
            validate_before_run: Whether to validate and log warnings before each run
        """
        self.registry = registry or AppletRegistry()
        self.policy_gate = policy_gate or PolicyGate()
        self.validator = validator or WorkflowValidator(self.registry)
        self.validate_before_run = validate_before_run

        self.node_executor = NodeExecutor(
            registry=self.registry,
            condition_evaluator=ConditionEvaluator(metrics_source or RandomMetricsSource()),
            payload_factory=payload_factory or PayloadFactory(),
            delay_strategy=delay_strategy or RandomDelayStrategy(),
        )
        self.traversal = GraphTraversalController(self.node_executor)

    async def execute_workflow(
        self,
        workflow: Workflow,
        protocol_status: Union[ProtocolStatus, str, None] = None
    ) -> ExecutionLogEntry:
        """
        Execute a workflow and return its execution log.

        The policy gate is checked once, before traversal. A CRITICAL protocol
        status yields a failed log holding a single POLICY_ENFORCEMENT record.
        Otherwise every node reachable through satisfied branches runs exactly
        once, sequentially.

        Args:
            workflow: Workflow to execute
            protocol_status: Current protocol status from the sentinel monitor

        Returns:
            A new ExecutionLogEntry for this run
        """
        log_builder = ExecutionLogBuilder(workflow)
        context_token = set_logging_context(run_id=log_builder.run_id, workflow_id=workflow.id)

        try:
            status = normalize_status(protocol_status)
            logger.info(
                f"Starting workflow execution '{workflow.name}' ({workflow.id}), "
                f"protocol status: {status.value if status else 'UNKNOWN'}"
            )

            try:
                self.policy_gate.check(status, workflow_id=workflow.id)
            except PolicyBlockedError as e:
                log_builder.add(self.policy_gate.blocked_record(e, log_builder.started_at))
                return log_builder.build()

            if self.validate_before_run:
                result = self.validator.validate(workflow)
                for problem in result.errors + result.warnings:
                    logger.warning(f"Workflow {workflow.id}: {problem}")

            await self.traversal.traverse(workflow, log_builder)

            log = log_builder.build()
            logger.info(
                f"Workflow execution {log.id} finished with status {log.status.value}: "
                f"{len(log.node_executions)} node(s) in {log.total_duration:.1f}ms"
            )
            return log

        finally:
            reset_logging_context(context_token)


def build_execution_engine(
    config: EngineConfig,
    registry: Optional[AppletRegistry] = None,
    configure_logs: bool = False
) -> WorkflowExecutionEngine:
    """
    Build an engine whose simulation sources come from explicit configuration.

    With ``config.random_seed`` set, delays, metrics and payloads each draw from
    their own seeded generator, so repeated runs are reproducible. With
    ``configure_logs`` the config's logging settings replace the root handlers.
    """
    if configure_logs:
        configure_logging(config)

    def make_rng(offset: int) -> random.Random:
        if config.random_seed is None:
            return random.Random()
        return random.Random(config.random_seed + offset)

    return WorkflowExecutionEngine(
        registry=registry,
        delay_strategy=RandomDelayStrategy(config.min_delay_ms, config.max_delay_ms, rng=make_rng(0)),
        metrics_source=RandomMetricsSource(
            reserve_ratio_range=(config.reserve_ratio_min, config.reserve_ratio_max),
            price_range=(config.price_min, config.price_max),
            rng=make_rng(1)
        ),
        payload_factory=PayloadFactory(rng=make_rng(2)),
        validate_before_run=config.validate_before_run,
    )

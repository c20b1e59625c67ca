"""Node Executor: runs a single applet node and records its outcome."""

import logging
import time
from typing import Optional

from ..models.core import NodeExecutionRecord, NodeExecutionStatus, WorkflowNode, utc_now
from .applet_registry import AppletRegistry
from .conditions import ConditionEvaluator
from .delays import DelayStrategy, RandomDelayStrategy
from .exceptions import NodeExecutionError
from .logging import get_logger, log_with_context
from .payloads import PayloadFactory

logger = get_logger(__name__)


class NodeExecutor:
    """Executes one workflow node: latency, condition, payload, record."""

    def __init__(
        self,
        registry: Optional[AppletRegistry] = None,
        condition_evaluator: Optional[ConditionEvaluator] = None,
        payload_factory: Optional[PayloadFactory] = None,
        delay_strategy: Optional[DelayStrategy] = None
    ):
        """Initialize the node executor.

        Args:
            registry: Applet definitions used to name nodes and pick payload shapes
            condition_evaluator: Evaluator for node guards
            payload_factory: Builder for per-category output payloads
            delay_strategy: Latency simulation; defaults to 300-1000ms uniform
        """
        self.registry = registry or AppletRegistry()
        self.condition_evaluator = condition_evaluator or ConditionEvaluator()
        self.payload_factory = payload_factory or PayloadFactory()
        self.delay_strategy = delay_strategy or RandomDelayStrategy()

    async def execute(self, node: WorkflowNode, run_id: Optional[str] = None) -> NodeExecutionRecord:
        """
        Execute a single node.

        A node whose condition holds produces a success record with a payload.
        A node whose condition does not hold produces a skipped record with no
        output. Failures raised by collaborators are contained in a failed
        record rather than propagated.

        Args:
            node: The node to execute
            run_id: ID of the enclosing run, used for log context

        Returns:
            The node's execution record
        """
        start_time = utc_now()
        started = time.perf_counter()

        definition = self.registry.resolve(node)
        node_name = definition.name if definition else (node.name or node.type)

        logger.debug(f"Executing node {node.id} ({node.type}) as '{node_name}'")

        try:
            await self.delay_strategy.wait()
            should_fire = self.condition_evaluator.evaluate(node.condition)
            output = None
            if should_fire:
                output = self.payload_factory.build(
                    definition.category if definition else None,
                    node,
                    self.registry.resolve_chain(node)
                )
        except Exception as e:
            error = NodeExecutionError(
                f"Node {node.id} failed: {e}",
                node_id=node.id,
                run_id=run_id,
                execution_time=time.perf_counter() - started
            )
            logger.error(error.message)
            return NodeExecutionRecord(
                node_id=node.id,
                node_name=node_name,
                status=NodeExecutionStatus.FAILED,
                start_time=start_time,
                end_time=utc_now(),
                error=error.message,
            )

        status = NodeExecutionStatus.SUCCESS if should_fire else NodeExecutionStatus.SKIPPED
        record = NodeExecutionRecord(
            node_id=node.id,
            node_name=node_name,
            status=status,
            start_time=start_time,
            end_time=utc_now(),
            output=output,
        )

        log_with_context(
            logger, logging.INFO,
            f"Node {node.id} finished with status {status.value}",
            node_id=node.id,
            node_type=node.type,
            status=status.value,
            duration_ms=round(record.duration_ms, 2)
        )
        return record

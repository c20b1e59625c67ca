"""Graph Traversal Controller: walks a workflow depth-first from its entry nodes."""

from typing import Dict, List, Optional, Set

from ..models.core import NodeExecutionStatus, Workflow, WorkflowNode
from .log_builder import ExecutionLogBuilder
from .logging import get_logger
from .node_executor import NodeExecutor

logger = get_logger(__name__)


def find_entry_nodes(workflow: Workflow) -> List[WorkflowNode]:
    """
    Find the nodes traversal starts from.

    Entry nodes are nodes that never appear as a connection target, in
    declaration order. When every node has an incoming connection the first
    declared node is the only entry point.
    """
    targets = {connection.to_node for connection in workflow.connections}
    entry_nodes = [node for node in workflow.nodes if node.id not in targets]

    if not entry_nodes and workflow.nodes:
        logger.info(
            f"Workflow {workflow.id} has no node without incoming connections; "
            f"starting from first declared node {workflow.nodes[0].id}"
        )
        entry_nodes = [workflow.nodes[0]]

    return entry_nodes


class GraphTraversalController:
    """Visits every reachable node once, following only satisfied branches."""

    def __init__(self, node_executor: Optional[NodeExecutor] = None):
        self.node_executor = node_executor or NodeExecutor()

    async def traverse(self, workflow: Workflow, log_builder: ExecutionLogBuilder) -> List[str]:
        """
        Execute the reachable subgraph of a workflow.

        Nodes are visited depth-first, children in connection declaration
        order, using an explicit stack. A node already visited is never run
        again, so diamonds and cycles execute each node on first arrival only.
        Only successful nodes propagate to their targets. Connections whose
        target is not a declared node are ignored.

        Args:
            workflow: The workflow to traverse
            log_builder: Collector for node records, appended in visit order

        Returns:
            Node IDs in the order they were executed
        """
        nodes_by_id: Dict[str, WorkflowNode] = {node.id: node for node in workflow.nodes}
        adjacency: Dict[str, List[str]] = {}
        for connection in workflow.connections:
            adjacency.setdefault(connection.from_node, []).append(connection.to_node)

        visited: Set[str] = set()
        order: List[str] = []
        stack: List[str] = [node.id for node in reversed(find_entry_nodes(workflow))]

        while stack:
            node_id = stack.pop()
            if node_id in visited:
                continue

            node = nodes_by_id.get(node_id)
            if node is None:
                logger.debug(f"Ignoring connection to unknown node {node_id}")
                continue

            visited.add(node_id)
            order.append(node_id)

            record = await self.node_executor.execute(node, run_id=log_builder.run_id)
            log_builder.add(record)

            if record.status != NodeExecutionStatus.SUCCESS:
                continue

            # Reversed so the first declared connection is popped first
            targets = [target for target in adjacency.get(node_id, []) if target not in visited]
            stack.extend(reversed(targets))

        return order

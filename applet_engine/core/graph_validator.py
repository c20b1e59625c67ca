"""Structural validation of workflow graphs."""

from typing import Dict, List, Optional, Set

from ..models.core import AppletType, ValidationResult, Workflow
from .applet_registry import AppletRegistry
from .exceptions import GraphValidationError
from .graph_traversal import find_entry_nodes
from .logging import get_logger

logger = get_logger(__name__)


class WorkflowValidator:
    """Checks workflow structure and reports problems.

    Dangling connections are errors; cycles, unknown applet types and
    unbridged cross-chain connections are warnings. The execution engine
    tolerates all of them, so a failed validation never blocks a run.
    """

    def __init__(self, registry: Optional[AppletRegistry] = None):
        self.registry = registry or AppletRegistry()

    def validate(self, workflow: Workflow) -> ValidationResult:
        """
        Validate a workflow for structural correctness.

        Args:
            workflow: The workflow to validate

        Returns:
            ValidationResult: Validation results with errors and warnings
        """
        logger.debug(f"Validating workflow: {workflow.name}")

        errors: List[str] = []
        warnings: List[str] = []

        self._validate_references(workflow, errors)
        self._validate_cycles(workflow, warnings)
        self._validate_applet_types(workflow, warnings)
        self._validate_chains(workflow, warnings)
        self._validate_reachability(workflow, warnings)

        result = ValidationResult(is_valid=not errors, errors=errors, warnings=warnings)
        logger.debug(f"Workflow validation completed. Valid: {result.is_valid}, "
                     f"Errors: {len(result.errors)}, Warnings: {len(result.warnings)}")
        return result

    def validate_or_raise(self, workflow: Workflow) -> ValidationResult:
        """
        Validate a workflow and raise if it has errors.

        Raises:
            GraphValidationError: If the workflow has validation errors
        """
        result = self.validate(workflow)
        if not result.is_valid:
            raise GraphValidationError(
                f"Workflow validation failed: {'; '.join(result.errors)}",
                validation_errors=result.errors,
                workflow_name=workflow.name
            )
        return result

    def _validate_references(self, workflow: Workflow, errors: List[str]):
        node_ids = {node.id for node in workflow.nodes}
        for connection in workflow.connections:
            if connection.from_node not in node_ids:
                errors.append(f"Connection references non-existent source node: '{connection.from_node}'")
            if connection.to_node not in node_ids:
                errors.append(f"Connection references non-existent target node: '{connection.to_node}'")

    def _validate_cycles(self, workflow: Workflow, warnings: List[str]):
        if self.has_cycles(workflow):
            warnings.append(
                "Workflow contains cycles. Each node on a cycle runs at most once, on first arrival."
            )

    def _validate_reachability(self, workflow: Workflow, warnings: List[str]):
        entry_ids = [node.id for node in find_entry_nodes(workflow)]
        unreachable = self.find_unreachable_nodes(workflow, entry_ids)
        if unreachable:
            warnings.append(f"Nodes unreachable from any entry node: {', '.join(sorted(unreachable))}")

    def _validate_applet_types(self, workflow: Workflow, warnings: List[str]):
        for node in workflow.nodes:
            if node.type not in self.registry:
                warnings.append(f"Node '{node.id}' uses unknown applet type '{node.type}'")

    def _validate_chains(self, workflow: Workflow, warnings: List[str]):
        for connection in workflow.connections:
            source = workflow.get_node(connection.from_node)
            target = workflow.get_node(connection.to_node)
            if source is None or target is None:
                continue
            if AppletType.TELEPORT_BRIDGE.value in (source.type, target.type):
                continue
            source_chain = self.registry.resolve_chain(source)
            target_chain = self.registry.resolve_chain(target)
            if source_chain != target_chain:
                warnings.append(
                    f"Connection {source.id} -> {target.id} crosses {source_chain.value} -> "
                    f"{target_chain.value} without a teleport bridge"
                )

    @staticmethod
    def has_cycles(workflow: Workflow) -> bool:
        """Detect cycles among declared nodes using an iterative three-color DFS."""
        graph: Dict[str, List[str]] = {}
        for connection in workflow.connections:
            graph.setdefault(connection.from_node, []).append(connection.to_node)

        white, grey, black = 0, 1, 2
        color: Dict[str, int] = {node.id: white for node in workflow.nodes}

        for start in color:
            if color[start] != white:
                continue
            color[start] = grey
            stack = [(start, iter(graph.get(start, [])))]
            while stack:
                node_id, neighbors = stack[-1]
                advanced = False
                for neighbor in neighbors:
                    state = color.get(neighbor)
                    if state is None:
                        continue
                    if state == grey:
                        return True
                    if state == white:
                        color[neighbor] = grey
                        stack.append((neighbor, iter(graph.get(neighbor, []))))
                        advanced = True
                        break
                if not advanced:
                    color[node_id] = black
                    stack.pop()

        return False

    @staticmethod
    def find_unreachable_nodes(workflow: Workflow, entry_ids: List[str]) -> Set[str]:
        """Declared nodes not reachable from the given entry nodes."""
        graph: Dict[str, List[str]] = {}
        for connection in workflow.connections:
            graph.setdefault(connection.from_node, []).append(connection.to_node)

        reachable: Set[str] = set()
        frontier = list(entry_ids)
        while frontier:
            current = frontier.pop()
            if current in reachable:
                continue
            reachable.add(current)
            frontier.extend(graph.get(current, []))

        return {node.id for node in workflow.nodes} - reachable

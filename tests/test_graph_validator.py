"""Tests for workflow validation and the data models."""

import pytest
from pydantic import ValidationError

from applet_engine.core.exceptions import GraphValidationError
from applet_engine.core.graph_validator import WorkflowValidator
from applet_engine.models.core import AppletType, ConditionType, Workflow, WorkflowConnection

from conftest import make_node, make_workflow


@pytest.fixture
def validator(registry):
    return WorkflowValidator(registry)


class TestWorkflowValidator:
    """Test cases for WorkflowValidator."""

    def test_valid_workflow(self, validator):
        workflow = make_workflow([make_node("A"), make_node("B", "djed_sim")], [("A", "B")])
        result = validator.validate(workflow)

        assert result.is_valid
        assert result.errors == []
        assert result.warnings == []

    def test_dangling_connections_are_errors(self, validator):
        workflow = make_workflow([make_node("A")], [("A", "ghost"), ("phantom", "A")])
        result = validator.validate(workflow)

        assert not result.is_valid
        assert any("ghost" in error for error in result.errors)
        assert any("phantom" in error for error in result.errors)

    def test_cycles_are_warnings(self, validator):
        workflow = make_workflow([make_node("A"), make_node("B")], [("A", "B"), ("B", "A")])
        result = validator.validate(workflow)

        assert result.is_valid
        assert any("cycles" in warning for warning in result.warnings)
        assert WorkflowValidator.has_cycles(workflow)

    def test_acyclic_diamond_has_no_cycle(self):
        workflow = make_workflow(
            [make_node(node_id) for node_id in "ABCD"],
            [("A", "B"), ("A", "C"), ("B", "D"), ("C", "D")],
        )
        assert not WorkflowValidator.has_cycles(workflow)

    def test_unknown_applet_type_warning(self, validator):
        result = validator.validate(make_workflow([make_node("A", "mystery")], []))
        assert any("mystery" in warning for warning in result.warnings)

    def test_unbridged_chain_crossing_warning(self, validator):
        workflow = make_workflow([make_node("eth", "eth_wallet"), make_node("sol", "sol_wallet")], [("eth", "sol")])
        result = validator.validate(workflow)

        assert any("ethereum -> solana" in warning for warning in result.warnings)

    def test_bridged_chain_crossing_is_fine(self, validator):
        workflow = make_workflow(
            [make_node("eth", "eth_wallet"), make_node("tp", "teleport_bridge"), make_node("sol", "sol_wallet")],
            [("eth", "tp"), ("tp", "sol")],
        )
        result = validator.validate(workflow)

        assert not any("teleport" in warning for warning in result.warnings)

    def test_unreachable_nodes_warning(self, validator):
        workflow = make_workflow(
            [make_node("entry"), make_node("X"), make_node("Y")],
            [("X", "Y"), ("Y", "X")],
        )
        result = validator.validate(workflow)

        assert any("X, Y" in warning for warning in result.warnings)

    def test_validate_or_raise(self, validator):
        workflow = make_workflow([make_node("A")], [("A", "ghost")])

        with pytest.raises(GraphValidationError) as exc_info:
            validator.validate_or_raise(workflow)

        assert exc_info.value.validation_errors
        assert exc_info.value.context["workflow_name"] == workflow.name


class TestModels:
    """Test cases for the workflow data models."""

    def test_duplicate_node_ids_rejected(self):
        with pytest.raises(ValidationError):
            make_workflow([make_node("A"), make_node("A")], [])

    def test_blank_node_id_rejected(self):
        with pytest.raises(ValidationError):
            make_node("   ")

    def test_connection_accepts_from_to_aliases(self):
        connection = WorkflowConnection.model_validate({"from": "a", "to": "b", "condition": "on alert"})
        assert connection.from_node == "a"
        assert connection.to_node == "b"

    def test_workflow_from_builder_payload(self):
        workflow = Workflow.model_validate({
            "id": "wf_1",
            "name": "Monitor & Alert",
            "description": "",
            "nodes": [
                {"id": "m", "type": "djed_monitor", "name": "Djed Eye", "position": {"x": 100, "y": 150},
                 "condition": {"type": "always"}},
                {"id": "s", "type": "djed_sentinel", "name": "Sentinel One", "position": {"x": 450, "y": 150},
                 "condition": {"type": "dsi_below", "value": 400}},
            ],
            "connections": [{"from": "m", "to": "s"}],
            "executionCount": 0,
        })

        assert workflow.nodes[0].applet_type == AppletType.DJED_MONITOR
        assert workflow.nodes[1].condition.type == ConditionType.DSI_BELOW
        assert [c.to_node for c in workflow.outgoing("m")] == ["s"]
        assert workflow.get_node("missing") is None

    def test_unknown_type_is_accepted(self):
        node = make_node("x", "custom_applet")
        assert node.applet_type is None

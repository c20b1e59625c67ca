"""Tests for the execution history store."""

import pytest

from applet_engine.config import EngineConfig
from applet_engine.core.exceptions import StorageError
from applet_engine.models.core import ExecutionStatusEnum, NodeExecutionStatus, ProtocolStatus
from applet_engine.storage.database import get_database_engine, reset_database_engine
from applet_engine.storage.history import ExecutionHistoryStore

from conftest import make_node, make_workflow


@pytest.fixture
def workflow():
    return make_workflow(
        [make_node("A"), make_node("B", "djed_ledger")],
        [("A", "B")],
        workflow_id="wf_history",
    )


class TestExecutionHistoryStore:
    """Test cases for ExecutionHistoryStore."""

    @pytest.mark.asyncio
    async def test_append_and_get_round_trip(self, history_store, engine, workflow):
        log = await engine.execute_workflow(workflow, ProtocolStatus.OPTIMAL)
        history_store.append(log)

        stored = history_store.get(log.id)

        assert stored is not None
        assert stored.workflow_id == "wf_history"
        assert stored.status == ExecutionStatusEnum.COMPLETED
        assert [record.node_id for record in stored.node_executions] == ["A", "B"]
        assert stored.node_executions[0].status == NodeExecutionStatus.SUCCESS
        assert stored.node_executions[1].output == log.node_executions[1].output

    @pytest.mark.asyncio
    async def test_history_is_newest_first_and_capped(self, history_store, engine, workflow):
        logs = [await engine.execute_workflow(workflow, ProtocolStatus.OPTIMAL) for _ in range(7)]
        for log in logs:
            history_store.append(log)

        history = history_store.list_history()

        assert history_store.count() == 5
        assert [entry.id for entry in history] == [log.id for log in reversed(logs[-5:])]
        assert history_store.get(logs[0].id) is None

    @pytest.mark.asyncio
    async def test_filter_and_limit(self, history_store, engine, workflow):
        other = make_workflow([make_node("Z")], [], workflow_id="wf_other")
        history_store.append(await engine.execute_workflow(workflow, ProtocolStatus.OPTIMAL))
        history_store.append(await engine.execute_workflow(other, ProtocolStatus.OPTIMAL))
        history_store.append(await engine.execute_workflow(workflow, ProtocolStatus.CRITICAL))

        assert len(history_store.list_history(limit=2)) == 2
        mine = history_store.list_history(workflow_id="wf_history")
        assert len(mine) == 2
        assert mine[0].status == ExecutionStatusEnum.FAILED

    @pytest.mark.asyncio
    async def test_clear(self, history_store, engine, workflow):
        history_store.append(await engine.execute_workflow(workflow, ProtocolStatus.OPTIMAL))
        history_store.append(await engine.execute_workflow(workflow, ProtocolStatus.OPTIMAL))

        assert history_store.clear() == 2
        assert history_store.list_history() == []

    def test_invalid_limit(self, history_store):
        with pytest.raises(StorageError):
            ExecutionHistoryStore(engine=history_store._engine, history_limit=0)

    def test_from_config(self):
        config = EngineConfig(database_url="sqlite:///:memory:", history_limit=3)
        store = ExecutionHistoryStore.from_config(config)

        assert store.history_limit == 3
        assert store.count() == 0

    def test_shared_engine_from_environment(self, monkeypatch):
        monkeypatch.setenv("APPLET_ENGINE_DATABASE_URL", "sqlite:///:memory:")
        reset_database_engine()
        try:
            store = ExecutionHistoryStore()
            assert store._engine is get_database_engine()
            assert store.count() == 0
        finally:
            reset_database_engine()

"""Assembles per-node records and timing into one execution report."""

import time
import uuid
from typing import List

from ..models.core import (
    ExecutionLogEntry, ExecutionStatusEnum, NodeExecutionRecord, NodeExecutionStatus,
    Workflow, utc_now
)


class ExecutionLogBuilder:
    """Accumulates node records for a single run, in traversal order."""

    def __init__(self, workflow: Workflow):
        self.workflow = workflow
        self.run_id = f"exec_{uuid.uuid4().hex}"
        self.started_at = utc_now()
        self._started_counter = time.perf_counter()
        self._records: List[NodeExecutionRecord] = []

    def add(self, record: NodeExecutionRecord) -> None:
        self._records.append(record)

    @property
    def records(self) -> List[NodeExecutionRecord]:
        return list(self._records)

    def status(self) -> ExecutionStatusEnum:
        """Failed if any record failed, else completed."""
        if any(record.status == NodeExecutionStatus.FAILED for record in self._records):
            return ExecutionStatusEnum.FAILED
        return ExecutionStatusEnum.COMPLETED

    def build(self) -> ExecutionLogEntry:
        """Freeze the accumulated records into an ExecutionLogEntry."""
        elapsed_ms = (time.perf_counter() - self._started_counter) * 1000
        return ExecutionLogEntry(
            id=self.run_id,
            workflow_id=self.workflow.id,
            workflow_name=self.workflow.name,
            timestamp=self.started_at,
            node_executions=list(self._records),
            total_duration=elapsed_ms,
            status=self.status(),
        )

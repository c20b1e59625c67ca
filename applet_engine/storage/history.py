"""Execution history store: keeps the most recent workflow execution logs."""

from datetime import timezone
from typing import List, Optional
from sqlalchemy import Engine, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..config import EngineConfig
from ..core.exceptions import StorageError
from ..core.logging import get_logger
from ..models.core import ExecutionLogEntry
from .database import create_database_engine, create_tables, get_database_engine, get_session_factory
from .models import ExecutionLogModel

logger = get_logger(__name__)

DEFAULT_HISTORY_LIMIT = 50


class ExecutionHistoryStore:
    """Persists execution logs, newest first, capped at a fixed number of entries."""

    def __init__(self, engine: Optional[Engine] = None, history_limit: int = DEFAULT_HISTORY_LIMIT):
        """Initialize the history store.

        Args:
            engine: Database engine. Defaults to the shared engine.
            history_limit: Maximum number of logs retained
        """
        if history_limit < 1:
            raise StorageError("History limit must be at least 1", operation="init")

        self._engine = engine or get_database_engine()
        self._session_factory = get_session_factory(self._engine)
        self.history_limit = history_limit

        try:
            create_tables(self._engine)
        except SQLAlchemyError as e:
            logger.error(f"Database error while creating history tables: {str(e)}")
            raise StorageError(f"Failed to initialize history store: {str(e)}", operation="init")

    @classmethod
    def from_config(cls, config: EngineConfig) -> "ExecutionHistoryStore":
        """Create a store with its own engine from configuration."""
        engine = create_database_engine(config.database_url, echo=config.database_echo)
        return cls(engine=engine, history_limit=config.history_limit)

    def _get_session(self) -> Session:
        return self._session_factory()

    def append(self, log: ExecutionLogEntry) -> None:
        """
        Store an execution log and prune the oldest entries beyond the limit.

        Args:
            log: The execution log to store

        Raises:
            StorageError: If the log cannot be stored
        """
        session = self._get_session()
        try:
            next_sequence = (session.query(func.max(ExecutionLogModel.sequence)).scalar() or 0) + 1
            payload = log.model_dump(mode="json")

            session.merge(ExecutionLogModel(
                id=log.id,
                workflow_id=log.workflow_id,
                workflow_name=log.workflow_name,
                timestamp=log.timestamp,
                status=log.status.value,
                total_duration=log.total_duration,
                node_executions=payload["node_executions"],
                sequence=next_sequence,
            ))
            session.flush()

            stale = (
                session.query(ExecutionLogModel)
                .order_by(ExecutionLogModel.sequence.desc())
                .offset(self.history_limit)
                .all()
            )
            for model in stale:
                session.delete(model)

            session.commit()
            logger.debug(f"Stored execution log {log.id}; pruned {len(stale)} old entries")

        except SQLAlchemyError as e:
            session.rollback()
            logger.error(f"Database error while storing execution log: {str(e)}")
            raise StorageError(f"Failed to store execution log: {str(e)}", operation="append", table="execution_logs")
        finally:
            session.close()

    def list_history(self, limit: Optional[int] = None, workflow_id: Optional[str] = None) -> List[ExecutionLogEntry]:
        """
        List stored execution logs, newest first.

        Args:
            limit: Maximum number of logs to return
            workflow_id: Only return logs for this workflow

        Raises:
            StorageError: If the history cannot be read
        """
        session = self._get_session()
        try:
            query = session.query(ExecutionLogModel)
            if workflow_id is not None:
                query = query.filter(ExecutionLogModel.workflow_id == workflow_id)
            query = query.order_by(ExecutionLogModel.sequence.desc())
            if limit is not None:
                query = query.limit(limit)
            return [self._to_entry(model) for model in query.all()]

        except SQLAlchemyError as e:
            logger.error(f"Database error while listing execution history: {str(e)}")
            raise StorageError(f"Failed to list execution history: {str(e)}", operation="list", table="execution_logs")
        finally:
            session.close()

    def get(self, log_id: str) -> Optional[ExecutionLogEntry]:
        """Return a stored execution log by ID, or None if absent."""
        session = self._get_session()
        try:
            model = session.query(ExecutionLogModel).filter(ExecutionLogModel.id == log_id).first()
            return self._to_entry(model) if model else None

        except SQLAlchemyError as e:
            logger.error(f"Database error while retrieving execution log: {str(e)}")
            raise StorageError(f"Failed to retrieve execution log: {str(e)}", operation="get", table="execution_logs")
        finally:
            session.close()

    def clear(self) -> int:
        """Delete all stored execution logs and return how many were removed."""
        session = self._get_session()
        try:
            deleted = session.query(ExecutionLogModel).delete()
            session.commit()
            logger.info(f"Cleared execution history ({deleted} entries)")
            return deleted

        except SQLAlchemyError as e:
            session.rollback()
            logger.error(f"Database error while clearing execution history: {str(e)}")
            raise StorageError(f"Failed to clear execution history: {str(e)}", operation="clear", table="execution_logs")
        finally:
            session.close()

    def count(self) -> int:
        """Number of stored execution logs."""
        session = self._get_session()
        try:
            return session.query(ExecutionLogModel).count()
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to count execution history: {str(e)}", operation="count", table="execution_logs")
        finally:
            session.close()

    @staticmethod
    def _to_entry(model: ExecutionLogModel) -> ExecutionLogEntry:
        timestamp = model.timestamp
        if timestamp.tzinfo is None:
            timestamp = timestamp.replace(tzinfo=timezone.utc)
        return ExecutionLogEntry(
            id=model.id,
            workflow_id=model.workflow_id,
            workflow_name=model.workflow_name,
            timestamp=timestamp,
            node_executions=model.node_executions,
            total_duration=model.total_duration,
            status=model.status,
        )

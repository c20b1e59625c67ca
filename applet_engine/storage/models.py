"""SQLAlchemy database models for execution history."""

from sqlalchemy import Column, String, DateTime, Float, Integer, JSON, Index
from .database import Base


class ExecutionLogModel(Base):
    """Database model for a stored workflow execution log."""
    __tablename__ = "execution_logs"

    id = Column(String, primary_key=True)
    workflow_id = Column(String, nullable=False)
    workflow_name = Column(String, nullable=False)
    timestamp = Column(DateTime(timezone=True), nullable=False)
    status = Column(String, nullable=False)  # completed, failed
    total_duration = Column(Float, nullable=False)  # milliseconds
    node_executions = Column(JSON, nullable=False)  # List of serialized node records
    sequence = Column(Integer, nullable=False)  # Insertion order, newest highest

    __table_args__ = (
        Index("idx_execution_logs_sequence", "sequence"),
        Index("idx_execution_logs_workflow", "workflow_id", "sequence"),
    )

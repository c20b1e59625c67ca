"""Sentinel policy gate: blocks every run while the protocol is critical."""

from datetime import datetime
from typing import Optional, Union

from ..models.core import NodeExecutionRecord, NodeExecutionStatus, ProtocolStatus, utc_now
from .exceptions import PolicyBlockedError
from .logging import get_logger

logger = get_logger(__name__)

POLICY_NODE_ID = "POLICY_ENFORCEMENT"
POLICY_NODE_NAME = "[SENTINEL_POLICY]"
POLICY_BLOCK_MESSAGE = (
    "[BLOCKED] Execution halted by Sentinel Policy: CRITICAL STATE. "
    "Workflow cannot execute while protocol security is compromised."
)


def normalize_status(protocol_status: Union[ProtocolStatus, str, None]) -> Optional[ProtocolStatus]:
    """Coerce a status value to ProtocolStatus; unknown values map to None."""
    if protocol_status is None or isinstance(protocol_status, ProtocolStatus):
        return protocol_status
    try:
        return ProtocolStatus(str(protocol_status).strip().upper())
    except ValueError:
        logger.warning(f"Unrecognized protocol status '{protocol_status}'; treating as unknown")
        return None


class PolicyGate:
    """Pre-flight check run once before graph traversal."""

    def check(
        self,
        protocol_status: Union[ProtocolStatus, str, None],
        workflow_id: Optional[str] = None
    ) -> None:
        """
        Raise if execution must not proceed.

        Raises:
            PolicyBlockedError: If the protocol is in a CRITICAL state
        """
        if normalize_status(protocol_status) == ProtocolStatus.CRITICAL:
            logger.error(f"Execution blocked for workflow {workflow_id}: protocol in CRITICAL state")
            raise PolicyBlockedError(
                POLICY_BLOCK_MESSAGE,
                protocol_status=ProtocolStatus.CRITICAL.value,
                workflow_id=workflow_id
            )

    def blocked_record(self, error: PolicyBlockedError, start_time: datetime) -> NodeExecutionRecord:
        """Build the synthetic record that stands in for the whole blocked run."""
        return NodeExecutionRecord(
            node_id=POLICY_NODE_ID,
            node_name=POLICY_NODE_NAME,
            status=NodeExecutionStatus.FAILED,
            start_time=start_time,
            end_time=utc_now(),
            output=None,
            error=error.message,
        )

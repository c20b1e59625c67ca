"""Condition evaluation for guarded workflow nodes."""

from typing import Optional

from ..models.core import ConditionType, NodeCondition
from .logging import get_logger
from .metrics import MetricsSource, RandomMetricsSource

logger = get_logger(__name__)


class ConditionEvaluator:
    """Decides whether a node's guarded branch should fire."""

    def __init__(self, metrics_source: Optional[MetricsSource] = None):
        self.metrics_source = metrics_source or RandomMetricsSource()

    def evaluate(self, condition: Optional[NodeCondition]) -> bool:
        """
        Evaluate a node condition against a freshly sampled metrics reading.

        Args:
            condition: The node's condition; None means unconditional

        Returns:
            True when the branch should fire
        """
        if condition is None or condition.is_unconditional:
            return True

        sample = self.metrics_source.sample()
        threshold = condition.threshold

        if condition.type == ConditionType.DSI_BELOW:
            result = sample.reserve_ratio < threshold
        elif condition.type == ConditionType.DSI_ABOVE:
            result = sample.reserve_ratio > threshold
        elif condition.type == ConditionType.PRICE_BELOW:
            result = sample.price < threshold
        elif condition.type == ConditionType.PRICE_ABOVE:
            result = sample.price > threshold
        else:
            result = True

        logger.debug(
            f"Condition {condition.type.value} (threshold={threshold}) evaluated to {result} "
            f"with reserve_ratio={sample.reserve_ratio:.2f}, price={sample.price:.4f}"
        )
        return result

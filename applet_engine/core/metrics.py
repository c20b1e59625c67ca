"""Protocol metric sources consulted by condition evaluation.

The random source stands in for a live metrics oracle. Tests and callers that
need repeatable branching inject a static or scripted source instead.
"""

import random
from abc import ABC, abstractmethod
from typing import Iterable, Iterator, Optional, Tuple
from pydantic import BaseModel, Field


class MetricsSample(BaseModel):
    """A single reading of protocol telemetry."""
    reserve_ratio: float = Field(..., description="Reserve ratio (DSI) in percent")
    price: float = Field(..., description="Stablecoin price in USD")


class MetricsSource(ABC):
    """Supplies fresh metric samples on demand."""

    @abstractmethod
    def sample(self) -> MetricsSample:
        """Return a new metrics sample."""


class RandomMetricsSource(MetricsSource):
    """Samples metrics uniformly from a healthy band."""

    def __init__(
        self,
        reserve_ratio_range: Tuple[float, float] = (420.0, 520.0),
        price_range: Tuple[float, float] = (0.98, 1.02),
        rng: Optional[random.Random] = None
    ):
        self.reserve_ratio_range = reserve_ratio_range
        self.price_range = price_range
        self._rng = rng or random.Random()

    def sample(self) -> MetricsSample:
        return MetricsSample(
            reserve_ratio=self._rng.uniform(*self.reserve_ratio_range),
            price=self._rng.uniform(*self.price_range),
        )


class StaticMetricsSource(MetricsSource):
    """Always returns the same reading."""

    def __init__(self, reserve_ratio: float = 465.0, price: float = 1.0):
        self._sample = MetricsSample(reserve_ratio=reserve_ratio, price=price)

    def sample(self) -> MetricsSample:
        return self._sample.model_copy()


class ScriptedMetricsSource(MetricsSource):
    """Replays a fixed sequence of readings, one per call."""

    def __init__(self, samples: Iterable[MetricsSample]):
        self._samples: Iterator[MetricsSample] = iter(list(samples))

    def sample(self) -> MetricsSample:
        try:
            return next(self._samples)
        except StopIteration:
            raise RuntimeError("Scripted metrics source is exhausted") from None

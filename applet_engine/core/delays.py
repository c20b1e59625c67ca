"""Latency strategies used to simulate applet execution time."""

import asyncio
import random
from abc import ABC, abstractmethod
from typing import Optional


class DelayStrategy(ABC):
    """Decides how long a node suspends before producing output."""

    @abstractmethod
    def next_delay_ms(self) -> float:
        """Return the next delay in milliseconds."""

    async def wait(self) -> float:
        """Suspend the caller for the next delay and return it in milliseconds."""
        delay_ms = self.next_delay_ms()
        await asyncio.sleep(delay_ms / 1000)
        return delay_ms


class RandomDelayStrategy(DelayStrategy):
    """Uniformly random latency within a bounded range."""

    def __init__(self, min_ms: float = 300.0, max_ms: float = 1000.0, rng: Optional[random.Random] = None):
        if min_ms < 0 or max_ms < min_ms:
            raise ValueError(f"Invalid delay range: {min_ms}-{max_ms}ms")
        self.min_ms = min_ms
        self.max_ms = max_ms
        self._rng = rng or random.Random()

    def next_delay_ms(self) -> float:
        return self._rng.uniform(self.min_ms, self.max_ms)


class FixedDelayStrategy(DelayStrategy):
    """Constant latency; a zero delay still yields to the event loop."""

    def __init__(self, delay_ms: float = 0.0):
        if delay_ms < 0:
            raise ValueError("Delay cannot be negative")
        self.delay_ms = delay_ms

    def next_delay_ms(self) -> float:
        return self.delay_ms

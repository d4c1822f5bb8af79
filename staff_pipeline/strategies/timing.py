"""Pause policies shared by the browser, the remote client and the batch loop."""

import asyncio
import random
from typing import Optional


class DelayPolicy:
    """Decides how long to pause before the next request."""

    async def delay(self, base_ms: float, jitter_ratio: float = 0.0) -> None:
        raise NotImplementedError


class HumanDelay(DelayPolicy):
    """Sleep around `base_ms`, spread evenly across `jitter_ratio` of it.

    A 0.3 ratio on 2000ms gives 1700-2300ms. Never shorter than `min_ms`.
    """

    def __init__(self, min_ms: float = 100, rng: Optional[random.Random] = None):
        self.min_ms = min_ms
        self.rng = rng or random.Random()

    def compute(self, base_ms: float, jitter_ratio: float = 0.0) -> float:
        variation = base_ms * jitter_ratio
        return max(self.min_ms, base_ms + (self.rng.random() - 0.5) * variation)

    async def delay(self, base_ms: float, jitter_ratio: float = 0.0) -> None:
        if base_ms <= 0:
            return
        await asyncio.sleep(self.compute(base_ms, jitter_ratio) / 1000)


class NoDelay(DelayPolicy):
    """Record requested delays without sleeping."""

    def __init__(self):
        self.requests: list[tuple[float, float]] = []

    async def delay(self, base_ms: float, jitter_ratio: float = 0.0) -> None:
        self.requests.append((base_ms, jitter_ratio))

    @property
    def total_ms(self) -> float:
        return sum(base for base, _ in self.requests)

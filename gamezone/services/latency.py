"""Simulated round-trip latency for the local ledgers."""
import asyncio
from typing import Dict, Optional

from ..settings import DEFAULT_LATENCY


class Latency:
    """Named artificial delays, awaited before each ledger operation.

    A delay of ``0`` still suspends the caller for one event-loop turn, so
    every ledger call behaves like a network call.
    """

    def __init__(self, delays: Optional[Dict[str, float]] = None) -> None:
        self._delays: Dict[str, float] = dict(DEFAULT_LATENCY)
        if delays:
            self._delays.update({k: float(v) for k, v in delays.items()})

    @classmethod
    def none(cls) -> 'Latency':
        """Zero delays everywhere (tests, scripts)."""
        return cls({name: 0.0 for name in DEFAULT_LATENCY})

    def delay(self, name: str) -> float:
        return max(0.0, self._delays.get(name, 0.0))

    async def wait(self, name: str) -> None:
        await asyncio.sleep(self.delay(name))

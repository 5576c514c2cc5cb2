"""In-memory sender for test assertions."""

from __future__ import annotations

import asyncio
from collections.abc import Sequence

from ..codec import Instance, InstanceValue
from .ports import IUpdateSender


class InMemoryUpdateSender(IUpdateSender):
    """
    Test double (Fake) that stores every delivered batch in a list.
    """

    def __init__(self) -> None:
        self.sent_batches: list[list[Instance]] = []
        self._delivered = asyncio.Event()

    async def send(self, batch: Sequence[Sequence[InstanceValue]]) -> None:
        self.sent_batches.append([list(instance) for instance in batch])
        self._delivered.set()

    async def wait_for_batches(self, count: int, timeout: float = 1.0) -> None:
        """Wait until at least *count* batches were delivered."""

        async def _wait() -> None:
            while len(self.sent_batches) < count:
                self._delivered.clear()
                await self._delivered.wait()

        await asyncio.wait_for(_wait(), timeout=timeout)

    @property
    def sent_instances(self) -> list[Instance]:
        return [instance for batch in self.sent_batches for instance in batch]

    def clear(self) -> None:
        """Clear all delivered batches."""
        self.sent_batches.clear()

"""UpdateQueue: pending instances, notice flag and worker wake-ups."""

from __future__ import annotations

import asyncio
import threading
from collections import deque
from collections.abc import Iterable

from ..codec import Instance

DEFAULT_BATCH_SIZE = 100


class UpdateQueue:
    """
    Unbounded FIFO of instances waiting to be shipped to the remote consumer.

    Producers call :meth:`enqueue` or :meth:`notice`; both return at once and
    put a wake-up signal on an unbounded channel. The single consumer blocks
    on :meth:`wait` and takes batches with :meth:`drain_batch`. The pending
    deque and the notice flag are only touched under ``_lock``.

    Producers may run on any thread. Once the consumer waits, wake-ups from
    other threads are handed to its event loop.

    Instances enqueued while a batch is being sent are left for the next
    drain; a drained batch never grows.
    """

    def __init__(self, batch_size: int = DEFAULT_BATCH_SIZE) -> None:
        if batch_size < 1:
            raise ValueError("batch_size must be >= 1")
        self.batch_size = batch_size
        self._pending: deque[Instance] = deque()
        self._notice_required = False
        self._lock = threading.Lock()
        self._wakeups: asyncio.Queue[None] = asyncio.Queue()
        self._loop: asyncio.AbstractEventLoop | None = None

    def __len__(self) -> int:
        with self._lock:
            return len(self._pending)

    @property
    def notice_required(self) -> bool:
        with self._lock:
            return self._notice_required

    # ── Producer side ────────────────────────────────────────────────

    def enqueue(self, instances: Iterable[Instance]) -> None:
        """Append *instances* to the tail and wake the worker."""
        with self._lock:
            self._pending.extend(instances)
        self.signal()

    def notice(self) -> None:
        """Flag an out-of-band change (no payload) and wake the worker."""
        with self._lock:
            self._notice_required = True
        self.signal()

    def signal(self) -> None:
        loop = self._loop
        if loop is None or loop.is_closed() or _running_loop() is loop:
            self._wakeups.put_nowait(None)
        else:
            loop.call_soon_threadsafe(self._wakeups.put_nowait, None)

    # ── Consumer side ────────────────────────────────────────────────

    async def wait(self) -> None:
        """Block until a producer signals."""
        self._loop = asyncio.get_running_loop()
        await self._wakeups.get()

    def drain_batch(self) -> list[Instance] | None:
        """
        Take up to ``batch_size`` instances from the head and clear the flag.

        Returns ``None`` when there is neither pending data nor a notice
        (a spurious wake-up). A notice with no data yields ``[]``.
        """
        with self._lock:
            if not self._notice_required and not self._pending:
                return None
            count = min(self.batch_size, len(self._pending))
            batch = [self._pending.popleft() for _ in range(count)]
            self._notice_required = False
            return batch


def _running_loop() -> asyncio.AbstractEventLoop | None:
    try:
        return asyncio.get_running_loop()
    except RuntimeError:
        return None

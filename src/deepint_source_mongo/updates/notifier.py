"""UpdateNotifier: background worker shipping queued instances to the consumer."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Iterable
from typing import cast

from ..codec import Instance
from .ports import IBackgroundWorker, IUpdateSender
from .queue import UpdateQueue
from .retry import RetryPolicy

logger = logging.getLogger("deepint_source.updates")


class UpdateNotifier(IBackgroundWorker):
    """
    Single background worker that owns delivery of source updates.

    Producers never talk to the remote endpoint: they call :meth:`enqueue`
    (new rows) or :meth:`notice` (the collection changed behind our back)
    and return immediately. The worker loop:

    1. waits for a signal;
    2. drains up to ``batch_size`` instances and clears the notice flag
       (nothing to do on a spurious wake-up);
    3. sends the batch, retrying the very same batch after a fixed delay
       until the remote accepts it.

    Delivery is at-least-once while the process lives; a batch in flight
    when the process dies is lost. Batches go out in enqueue order.

    Usage::

        notifier = UpdateNotifier(HttpUpdateSender(url, pub, secret))
        await notifier.start()

        notifier.enqueue([[5.1, "setosa"]])
    """

    # Explicitly implement the protocol for structural type checking
    _is_background_worker: IBackgroundWorker = cast("UpdateNotifier", None)

    def __init__(
        self,
        sender: IUpdateSender,
        *,
        queue: UpdateQueue | None = None,
        retry_policy: RetryPolicy | None = None,
        log_events: bool = True,
    ) -> None:
        self.sender = sender
        self.queue = queue or UpdateQueue()
        self.retry_policy = retry_policy or RetryPolicy()
        self.log_events = log_events

        self._closed = False
        self._task: asyncio.Task[None] | None = None

    # ── Producer API ─────────────────────────────────────────────────

    def enqueue(self, instances: Iterable[Instance]) -> None:
        """Queue new instances for delivery and wake the worker."""
        self.queue.enqueue(instances)

    def notice(self) -> None:
        """Request an update notice without payload and wake the worker."""
        self.queue.notice()

    # ── Worker Lifecycle ─────────────────────────────────────────────

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        """Start the background delivery loop."""
        if self.running:
            return
        self._closed = False
        self._task = asyncio.create_task(self.run())
        logger.info(
            "UpdateNotifier started (batch: %d, retry delay: %.1fs)",
            self.queue.batch_size,
            self.retry_policy.delay,
        )

    async def stop(self, timeout: float | None = None) -> None:
        """
        Stop the loop after the batch in flight, if any, is delivered.

        With a *timeout*, the worker is cancelled when it has not finished
        in time (for instance while the remote keeps failing).
        """
        self._closed = True
        self.queue.signal()
        if self._task is None:
            return
        try:
            await asyncio.wait_for(asyncio.shield(self._task), timeout=timeout)
        except asyncio.TimeoutError:
            logger.warning("UpdateNotifier did not stop in %.1fs; cancelling", timeout)
            self._task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._task
        self._task = None
        logger.info("UpdateNotifier stopped")

    # ── Internal loop ────────────────────────────────────────────────

    async def run(self) -> None:
        """Worker loop; returns once a stop is requested."""
        while not self._closed:
            await self.queue.wait()
            await self.process_once()

    async def process_once(self) -> bool:
        """
        Drain one batch and deliver it.

        Returns False on a spurious wake-up (nothing queued, no notice).
        """
        batch = self.queue.drain_batch()
        if batch is None:
            logger.debug("UpdateNotifier woke up with nothing to send")
            return False

        await self.deliver(batch)

        # Leftovers beyond one batch must not wait for another producer.
        if len(self.queue) > 0:
            self.queue.signal()
        return True

    async def deliver(self, batch: list[Instance]) -> None:
        """Send *batch*, retrying it unchanged until the remote accepts it."""
        attempt = 0
        while True:
            attempt += 1
            try:
                await self.sender.send(batch)
                break
            except Exception as exc:  # noqa: BLE001
                logger.error(
                    "Source update delivery failed (attempt %d, %d instances): %s",
                    attempt,
                    len(batch),
                    exc,
                )
            await self.retry_policy.wait_before_retry(attempt)

        level = logging.INFO if self.log_events else logging.DEBUG
        logger.log(level, "External source updated (%d instances).", len(batch))

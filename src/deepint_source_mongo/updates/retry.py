"""RetryPolicy: fixed-interval retry without an attempt limit."""

from __future__ import annotations

import asyncio

DEFAULT_RETRY_DELAY = 5.0


class RetryPolicy:
    """Wait a fixed delay between delivery attempts, forever."""

    def __init__(self, *, delay: float = DEFAULT_RETRY_DELAY) -> None:
        """Configure retry behavior.

        Args:
            delay: Seconds to wait after a failed attempt before the next one.
        """
        if delay < 0:
            raise ValueError("delay must be >= 0")
        self.delay = delay

    def delay_for_attempt(self, attempt: int) -> float:
        """Return delay in seconds after the given 1-based failed attempt."""
        if attempt < 1:
            return 0.0
        return self.delay

    async def wait_before_retry(self, attempt: int) -> None:
        """Async sleep for the delay of the given attempt."""
        d = self.delay_for_attempt(attempt)
        if d > 0:
            await _sleep(d)


async def _sleep(seconds: float) -> None:
    """Async sleep (overridable for tests)."""
    await asyncio.sleep(seconds)

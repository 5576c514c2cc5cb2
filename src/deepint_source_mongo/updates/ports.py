"""Ports of the update pipeline."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol, runtime_checkable

from ..codec import InstanceValue


@runtime_checkable
class IUpdateSender(Protocol):
    """
    Delivers one batch of instances to the remote consumer.

    An empty batch is a plain "the source changed" notice. Implementations
    raise :class:`~deepint_source_mongo.exceptions.UpdateDeliveryError`
    when the remote does not accept the batch.
    """

    async def send(self, batch: Sequence[Sequence[InstanceValue]]) -> None: ...


@runtime_checkable
class IBackgroundWorker(Protocol):
    """General lifecycle protocol for background workers."""

    async def start(self) -> None:
        """Start the background process."""
        ...

    async def stop(self) -> None:
        """Stop the background process gracefully."""
        ...

"""Update propagation: queue, retry policy, senders and the notifier worker."""

from __future__ import annotations

from .http import HttpUpdateSender
from .memory import InMemoryUpdateSender
from .notifier import UpdateNotifier
from .ports import IBackgroundWorker, IUpdateSender
from .queue import DEFAULT_BATCH_SIZE, UpdateQueue
from .retry import DEFAULT_RETRY_DELAY, RetryPolicy

__all__ = [
    "UpdateQueue",
    "UpdateNotifier",
    "RetryPolicy",
    "IUpdateSender",
    "IBackgroundWorker",
    "HttpUpdateSender",
    "InMemoryUpdateSender",
    "DEFAULT_BATCH_SIZE",
    "DEFAULT_RETRY_DELAY",
]

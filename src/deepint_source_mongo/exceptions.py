"""Exception hierarchy for the Mongo data source."""

from __future__ import annotations


class DeepintSourceError(Exception):
    """Root exception for the data source."""


class InfrastructureError(DeepintSourceError):
    """Base class for all infrastructure-related errors."""


class PersistenceError(InfrastructureError):
    """Base class for all persistence-related errors."""


class MongoConnectionError(PersistenceError):
    """Raised when connection to MongoDB fails."""


class MongoQueryError(PersistenceError):
    """Raised when a query or its compilation fails."""


class UpdateDeliveryError(InfrastructureError):
    """Raised when the remote update notification is not accepted.

    ``status_code`` is set when the remote answered with a non-success
    status; it is ``None`` for transport failures.
    """

    def __init__(self, reason: str, status_code: int | None = None) -> None:
        self.reason = reason
        self.status_code = status_code
        super().__init__(f"Failed to deliver source update: {reason}")

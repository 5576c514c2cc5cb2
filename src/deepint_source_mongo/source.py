"""DataSource: the service object request handlers talk to."""

from __future__ import annotations

import inspect
import logging
from collections.abc import AsyncIterator, Callable
from typing import TYPE_CHECKING, Any

from .codec import (
    Instance,
    decode_document,
    encode_document,
    sanitize_instances,
    stringify,
)
from .features import Feature, FeatureSchema, FeatureType
from .mongo import MongoCollectionGateway, MongoConnectionManager
from .query import QueryTree, compile_query_tree, sanitize_filter
from .updates import HttpUpdateSender, RetryPolicy, UpdateNotifier, UpdateQueue

if TYPE_CHECKING:
    from .config import SourceSettings

logger = logging.getLogger(__name__)

NOMINAL_VALUES_LIMIT = 128

RowCallback = Callable[[Instance], Any]
StartCallback = Callable[[list[Feature]], Any]


async def _maybe_await(result: Any) -> None:
    if inspect.isawaitable(result):
        await result


class QueryResult:
    """
    Outcome of :meth:`DataSource.stream`: the active features (after
    projection) and an async iterator over the matching rows.

    Rows are fetched lazily and can only be iterated once.
    """

    def __init__(
        self, features: list[Feature], rows: AsyncIterator[Instance]
    ) -> None:
        self.features = features
        self._rows = rows

    def __aiter__(self) -> AsyncIterator[Instance]:
        return self._rows

    async def to_list(self) -> list[Instance]:
        return [row async for row in self._rows]


class DataSource:
    """
    Mongo-backed data source.

    Reads compile the caller's filter against the feature schema and run
    it on the collection; writes insert coerced rows and hand them to the
    :class:`UpdateNotifier`, which tells the remote consumer in the
    background. Construct one per process and pass it to the handlers::

        source = DataSource.from_settings(get_settings())
        await source.start()
        ...
        await source.close()
    """

    def __init__(
        self,
        schema: FeatureSchema,
        gateway: MongoCollectionGateway,
        notifier: UpdateNotifier,
        *,
        connection: MongoConnectionManager | None = None,
    ) -> None:
        self.schema = schema
        self.gateway = gateway
        self.notifier = notifier
        self._connection = connection

    @classmethod
    def from_settings(cls, settings: SourceSettings) -> DataSource:
        """Wire storage, schema and update delivery from *settings*."""
        schema = FeatureSchema.from_names(
            settings.feature_names, settings.feature_types
        )
        connection = MongoConnectionManager(
            settings.mongo_uri, database=settings.mongo_database
        )
        gateway = MongoCollectionGateway(connection, settings.mongo_collection)
        sender = HttpUpdateSender(
            settings.deepint_url,
            settings.pub_key,
            settings.secret_key,
            timeout=settings.delivery_timeout,
        )
        notifier = UpdateNotifier(
            sender,
            queue=UpdateQueue(settings.update_batch_size),
            retry_policy=RetryPolicy(delay=settings.update_retry_delay),
            log_events=settings.log_events,
        )
        return cls(schema, gateway, notifier, connection=connection)

    @property
    def fields(self) -> list[Feature]:
        return list(self.schema)

    # ── Lifecycle ────────────────────────────────────────────────────

    async def start(self) -> None:
        """Start the update notifier worker."""
        await self.notifier.start()

    async def close(self, timeout: float | None = None) -> None:
        """Stop the worker, then release the HTTP and Motor clients."""
        await self.notifier.stop(timeout=timeout)
        aclose = getattr(self.notifier.sender, "aclose", None)
        if aclose is not None:
            await aclose()
        if self._connection is not None:
            self._connection.close()

    async def health_check(self) -> bool:
        if self._connection is None:
            return False
        return await self._connection.health_check()

    # ── Sanitizers ───────────────────────────────────────────────────

    def sanitize_filter(self, raw: Any) -> QueryTree | None:
        return sanitize_filter(raw)

    def sanitize_projection(self, raw: Any) -> list[int]:
        return self.schema.sanitize_projection(raw)

    def sanitize_instances(self, raw: Any) -> list[Instance]:
        return sanitize_instances(raw, self.schema)

    def _match(self, filter: Any) -> dict[str, Any]:
        predicate = compile_query_tree(self.schema, sanitize_filter(filter))
        return self.gateway.query_builder.build_match(predicate)

    # ── Writes ───────────────────────────────────────────────────────

    async def push(self, raw: Any) -> int:
        """
        Coerce caller rows, store them and schedule the remote update.

        The remote consumer is notified even when no row was stored.
        """
        inserted = await self.push_instances(self.sanitize_instances(raw))
        self.notifier.notice()
        return inserted

    async def push_instances(self, instances: list[Instance]) -> int:
        """
        Insert already coerced *instances* and enqueue them for delivery.

        Storage errors propagate and nothing is enqueued. An empty list
        inserts nothing but still wakes the worker.
        """
        documents = [encode_document(instance, self.schema) for instance in instances]
        inserted = await self.gateway.insert_many(documents)
        self.notifier.enqueue(instances)
        return inserted

    def notice_update(self) -> None:
        """Tell the remote consumer the collection changed out of band."""
        self.notifier.notice()

    # ── Reads ────────────────────────────────────────────────────────

    async def count_instances(self, filter: Any = None) -> int:
        return await self.gateway.count(self._match(filter))

    def stream(
        self,
        filter: Any = None,
        *,
        order: int = -1,
        direction: str = "asc",
        skip: int | None = None,
        limit: int | None = None,
        projection: Any = None,
    ) -> QueryResult:
        """
        Query instances.

        Args:
            filter: Raw or sanitized filter expression.
            order: Index of the feature to sort by; ``-1`` keeps storage order.
            direction: ``"desc"`` sorts descending, anything else ascending.
            skip: Instances to skip; ignored unless positive.
            limit: Maximum instances to return; ignored unless positive.
            projection: Feature indices (list or comma-separated string).
                Without a valid index every feature is returned.

        Returns:
            A :class:`QueryResult` whose rows are aligned to its features.
        """
        features = self.fields
        fields: list[str] | None = None
        indices = self.sanitize_projection(projection)
        if indices:
            features = self.schema.project(indices)
            fields = [f.name for f in features]

        sort: list[tuple[str, int]] | None = None
        sort_feature = self.schema.get(order)
        if sort_feature is not None:
            sort = self.gateway.query_builder.build_sort(
                [(sort_feature.name, direction)]
            )

        documents = self.gateway.stream(
            match=self._match(filter),
            sort=sort,
            skip=skip,
            limit=limit,
            fields=fields,
        )

        async def rows() -> AsyncIterator[Instance]:
            async for document in documents:
                yield decode_document(document, features)

        return QueryResult(features, rows())

    async def query(
        self,
        filter: Any,
        order: int,
        direction: str,
        skip: int | None,
        limit: int | None,
        projection: Any,
        on_start: StartCallback,
        on_row: RowCallback,
    ) -> None:
        """Callback form of :meth:`stream`: features first, then every row."""
        result = self.stream(
            filter,
            order=order,
            direction=direction,
            skip=skip,
            limit=limit,
            projection=projection,
        )
        await _maybe_await(on_start(result.features))
        async for row in result:
            await _maybe_await(on_row(row))

    async def get_nominal_values(
        self, filter: Any, query: str | None, feature: int
    ) -> list[str]:
        """
        Up to 128 distinct, non-empty values of a nominal feature, sorted
        ascending. Other feature types give an empty list.

        *query* is accepted for compatibility but does not narrow the result.
        """
        target = self.schema.get(feature)
        if target is None or target.type is not FeatureType.NOMINAL:
            return []

        query = (query or "").lower()
        logger.debug("Nominal values of %s requested (query=%r)", target.name, query)

        values = await self.gateway.distinct_values(
            target.name, match=self._match(filter), limit=NOMINAL_VALUES_LIMIT
        )
        return [stringify(value) for value in values if value]

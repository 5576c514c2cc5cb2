"""HTTP sender for source update notifications."""

from __future__ import annotations

import logging
from collections.abc import Sequence

import httpx

from ..codec import InstanceValue, encode_instance
from ..exceptions import UpdateDeliveryError
from .ports import IUpdateSender

logger = logging.getLogger(__name__)

UPDATE_PATH = "external/source/update"


class HttpUpdateSender(IUpdateSender):
    """
    POSTs a batch as a JSON array of instances to the remote consumer's
    ``external/source/update`` endpoint, resolved against ``base_url``.

    The request carries the source's public and secret keys in the
    ``x-public-key`` and ``x-secret-key`` headers. Any status other than
    200, and any transport error, raises :class:`UpdateDeliveryError`.
    No timeout is applied unless one is configured.
    """

    def __init__(
        self,
        base_url: str,
        public_key: str,
        secret_key: str,
        *,
        timeout: float | None = None,
        user_agent: str = "deepint-source-mongo/1.0.0",
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.url = str(httpx.URL(base_url).join(UPDATE_PATH))
        self.public_key = public_key
        self.secret_key = secret_key
        self.user_agent = user_agent
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout)

    async def send(self, batch: Sequence[Sequence[InstanceValue]]) -> None:
        payload = [encode_instance(instance) for instance in batch]
        headers = {
            "User-Agent": self.user_agent,
            "x-public-key": self.public_key,
            "x-secret-key": self.secret_key,
        }
        try:
            response = await self._client.post(self.url, json=payload, headers=headers)
        except httpx.HTTPError as e:
            raise UpdateDeliveryError(str(e) or type(e).__name__) from e

        if response.status_code != 200:
            raise UpdateDeliveryError(
                f"Status code: {response.status_code}",
                status_code=response.status_code,
            )
        logger.debug("Sent %d instances to %s", len(payload), self.url)

    async def aclose(self) -> None:
        """Close the HTTP client if this sender created it."""
        if self._owns_client:
            await self._client.aclose()

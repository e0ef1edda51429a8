"""Qdrant engine adapter: async client, collection ensure/validate on connect."""
from __future__ import annotations

import logging

from qdrant_client import AsyncQdrantClient
from qdrant_client.http import models as qdrant_http

from vector_storage.backends.base import BaseVectorStore
from vector_storage.config import QdrantBackendConfig
from vector_storage.constants import DEFAULT_QDRANT_PORT
from vector_storage.errors import VectorSchemaMismatchError
from vector_storage.types import DistanceMetric

logger = logging.getLogger(__name__)

_QDRANT_DISTANCE: dict[DistanceMetric, qdrant_http.Distance] = {
    DistanceMetric.COSINE: qdrant_http.Distance.COSINE,
    DistanceMetric.EUCLIDEAN: qdrant_http.Distance.EUCLID,
    DistanceMetric.DOT: qdrant_http.Distance.DOT,
}


def build_qdrant_client(config: QdrantBackendConfig) -> AsyncQdrantClient:
    """Create AsyncQdrantClient. url wins over host/port when both are set."""
    timeout = config.connection_timeout_ms / 1000 if config.connection_timeout_ms else None
    if config.url:
        return AsyncQdrantClient(url=config.url, api_key=config.api_key, timeout=timeout)
    return AsyncQdrantClient(
        host=config.host,
        port=config.port or DEFAULT_QDRANT_PORT,
        api_key=config.api_key,
        timeout=timeout,
    )


class QdrantVectorStore(BaseVectorStore[QdrantBackendConfig]):
    """One Qdrant collection."""

    def __init__(self, config: QdrantBackendConfig, client: AsyncQdrantClient | None = None) -> None:
        super().__init__(config)
        self._client = client

    async def connect(self) -> None:
        """Connect and ensure the collection exists with the configured size and distance.

        Raises VectorSchemaMismatchError if an existing collection has a different schema.
        """
        if self._client is None:
            self._client = build_qdrant_client(self.config)
        await self._ensure_collection()
        self._connected = True

    async def _ensure_collection(self) -> None:
        assert self._client is not None
        name = self.collection_name
        distance = _QDRANT_DISTANCE[self.config.distance]
        if not await self._client.collection_exists(name):
            await self._client.create_collection(
                collection_name=name,
                vectors_config=qdrant_http.VectorParams(
                    size=self.dimension,
                    distance=distance,
                    on_disk=self.config.on_disk,
                ),
            )
            logger.info("Created Qdrant collection %s (size=%s)", name, self.dimension)
            return

        info = await self._client.get_collection(name)
        vectors_config = info.config.params.vectors
        if isinstance(vectors_config, qdrant_http.VectorParams):
            if vectors_config.size != self.dimension or vectors_config.distance != distance:
                raise VectorSchemaMismatchError(
                    f"Collection {name} has size={vectors_config.size} distance={vectors_config.distance}, "
                    f"expected size={self.dimension} distance={distance}. "
                    "Migration (new collection + reindex) required.",
                    backend=self.backend_type,
                )

    async def disconnect(self) -> None:
        self._connected = False
        client, self._client = self._client, None
        if client is not None:
            await client.close()

    async def count(self) -> int:
        self._require_connected()
        assert self._client is not None
        result = await self._client.count(collection_name=self.collection_name, exact=True)
        return result.count

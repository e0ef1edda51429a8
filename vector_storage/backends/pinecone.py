"""Pinecone engine adapter (pinecone SDK, optional extra). Sync SDK runs in a worker thread."""
from __future__ import annotations

import asyncio
import logging
from typing import Any

from vector_storage.backends.base import BaseVectorStore
from vector_storage.config import PineconeBackendConfig
from vector_storage.errors import VectorSchemaMismatchError
from vector_storage.types import DistanceMetric

logger = logging.getLogger(__name__)

_PINECONE_METRIC: dict[DistanceMetric, str] = {
    DistanceMetric.COSINE: "cosine",
    DistanceMetric.EUCLIDEAN: "euclidean",
    DistanceMetric.DOT: "dotproduct",
}


class PineconeVectorStore(BaseVectorStore[PineconeBackendConfig]):
    """One Pinecone index (and namespace)."""

    def __init__(self, config: PineconeBackendConfig, client: Any = None) -> None:
        super().__init__(config)
        self._client = client
        self._index: Any = None

    async def connect(self) -> None:
        self._index = await asyncio.to_thread(self._open_index)
        self._connected = True

    def _open_index(self) -> Any:
        """Build the client, ensure the index, return its handle. Blocking; runs in a worker thread."""
        if self._client is None:
            from pinecone import Pinecone

            self._client = Pinecone(api_key=self.config.api_key)
        self._ensure_index()
        return self._client.Index(self.config.index_name)

    def _ensure_index(self) -> None:
        name = self.config.index_name
        if name not in self._client.list_indexes().names():
            from pinecone import ServerlessSpec

            self._client.create_index(
                name=name,
                dimension=self.dimension,
                metric=_PINECONE_METRIC[self.config.metric],
                spec=ServerlessSpec(cloud=self.config.cloud, region=self.config.region),
            )
            logger.info("Created Pinecone index %s (dim=%s)", name, self.dimension)
            return
        description = self._client.describe_index(name)
        if description.dimension != self.dimension:
            raise VectorSchemaMismatchError(
                f"Index {name} has dimension={description.dimension}, expected {self.dimension}",
                backend=self.backend_type,
            )

    async def disconnect(self) -> None:
        self._connected = False
        self._index = None
        self._client = None

    async def count(self) -> int:
        self._require_connected()
        stats = await asyncio.to_thread(self._index.describe_index_stats)
        if self.config.namespace:
            summary = stats.namespaces.get(self.config.namespace)
            return summary.vector_count if summary else 0
        return stats.total_vector_count

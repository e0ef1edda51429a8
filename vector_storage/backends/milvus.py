"""Milvus engine adapter (pymilvus, optional extra). The sync client runs in a worker thread."""
from __future__ import annotations

import asyncio
import logging
from typing import Any

from vector_storage.backends.base import BaseVectorStore
from vector_storage.config import MilvusBackendConfig
from vector_storage.constants import DEFAULT_MILVUS_PORT
from vector_storage.errors import VectorSchemaMismatchError

logger = logging.getLogger(__name__)

_METRIC_TYPE = "COSINE"


def milvus_uri(config: MilvusBackendConfig) -> str:
    if config.url:
        return config.url
    return f"http://{config.host}:{config.port or DEFAULT_MILVUS_PORT}"


def vector_dimension(description: dict[str, Any]) -> int | None:
    """Dimension of the first vector field in a describe_collection result."""
    for field in description.get("fields", []):
        dim = (field.get("params") or {}).get("dim")
        if dim is not None:
            return int(dim)
    return None


class MilvusVectorStore(BaseVectorStore[MilvusBackendConfig]):
    """One Milvus collection."""

    def __init__(self, config: MilvusBackendConfig, client: Any = None) -> None:
        super().__init__(config)
        self._client = client

    async def connect(self) -> None:
        if self._client is None:
            self._client = await asyncio.to_thread(self._build_client)
        exists = await asyncio.to_thread(self._client.has_collection, self.collection_name)
        if not exists:
            await asyncio.to_thread(
                self._client.create_collection,
                collection_name=self.collection_name,
                dimension=self.dimension,
                metric_type=_METRIC_TYPE,
            )
            logger.info("Created Milvus collection %s (dim=%s)", self.collection_name, self.dimension)
        else:
            description = await asyncio.to_thread(self._client.describe_collection, self.collection_name)
            existing = vector_dimension(description)
            if existing is not None and existing != self.dimension:
                raise VectorSchemaMismatchError(
                    f"Collection {self.collection_name} has dim={existing}, expected {self.dimension}. "
                    "Migration (new collection + reindex) required.",
                    backend=self.backend_type,
                )
        self._connected = True

    def _build_client(self) -> Any:
        from pymilvus import MilvusClient

        kwargs: dict[str, Any] = {"uri": milvus_uri(self.config)}
        if self.config.token:
            kwargs["token"] = self.config.token
        if self.config.username:
            kwargs["user"] = self.config.username
        if self.config.password:
            kwargs["password"] = self.config.password
        if self.config.connection_timeout_ms:
            kwargs["timeout"] = self.config.connection_timeout_ms / 1000
        return MilvusClient(**kwargs)

    async def disconnect(self) -> None:
        self._connected = False
        client, self._client = self._client, None
        if client is not None:
            await asyncio.to_thread(client.close)

    async def count(self) -> int:
        self._require_connected()
        stats = await asyncio.to_thread(self._client.get_collection_stats, self.collection_name)
        return int(stats.get("row_count", 0))

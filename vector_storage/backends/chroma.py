"""ChromaDB engine adapter (chromadb AsyncHttpClient, optional extra)."""
from __future__ import annotations

import logging
from typing import Any

from pydantic import AnyHttpUrl, TypeAdapter

from vector_storage.backends.base import BaseVectorStore
from vector_storage.config import ChromaBackendConfig
from vector_storage.constants import DEFAULT_CHROMA_PORT
from vector_storage.errors import VectorSchemaMismatchError
from vector_storage.types import DistanceMetric

logger = logging.getLogger(__name__)

_HTTP_URL = TypeAdapter(AnyHttpUrl)

# hnsw:space values
_CHROMA_SPACE: dict[DistanceMetric, str] = {
    DistanceMetric.COSINE: "cosine",
    DistanceMetric.EUCLIDEAN: "l2",
    DistanceMetric.DOT: "ip",
}


def chroma_endpoint(config: ChromaBackendConfig) -> tuple[str, int, bool]:
    """(host, port, ssl) from url when set, else from host/port/ssl."""
    if config.url:
        url = _HTTP_URL.validate_python(config.url)
        ssl = url.scheme == "https"
        return url.host or "localhost", url.port or (443 if ssl else DEFAULT_CHROMA_PORT), ssl
    return config.host or "localhost", config.port or DEFAULT_CHROMA_PORT, config.ssl


class ChromaVectorStore(BaseVectorStore[ChromaBackendConfig]):
    """One Chroma collection."""

    def __init__(self, config: ChromaBackendConfig, client: Any = None) -> None:
        super().__init__(config)
        self._client = client
        self._collection: Any = None

    async def connect(self) -> None:
        if self._client is None:
            import chromadb

            host, port, ssl = chroma_endpoint(self.config)
            self._client = await chromadb.AsyncHttpClient(
                host=host,
                port=port,
                ssl=ssl,
                headers=self.config.headers,
            )
        space = _CHROMA_SPACE[self.config.distance]
        collection = await self._client.get_or_create_collection(
            name=self.collection_name,
            metadata={"hnsw:space": space},
        )
        existing = (collection.metadata or {}).get("hnsw:space")
        if existing is not None and existing != space:
            raise VectorSchemaMismatchError(
                f"Collection {self.collection_name} has hnsw:space={existing}, expected {space}. "
                "Migration (new collection + reindex) required.",
                backend=self.backend_type,
            )
        self._collection = collection
        self._connected = True

    async def disconnect(self) -> None:
        # HTTP client holds no persistent connection to close
        self._connected = False
        self._collection = None
        self._client = None

    async def count(self) -> int:
        self._require_connected()
        return await self._collection.count()

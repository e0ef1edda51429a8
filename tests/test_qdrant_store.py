"""Unit tests for the Qdrant adapter against a stub async client."""
from types import SimpleNamespace

import pytest
from qdrant_client.http import models as qdrant_http

from vector_storage.backends import QdrantVectorStore
from vector_storage.config import QdrantBackendConfig
from vector_storage.errors import VectorSchemaMismatchError
from vector_storage.types import DistanceMetric


class StubQdrantClient:
    """Implements only the AsyncQdrantClient calls the adapter makes."""

    def __init__(self, existing: qdrant_http.VectorParams | None = None, points: int = 0) -> None:
        self.existing = existing
        self.points = points
        self.created: list[tuple[str, qdrant_http.VectorParams]] = []
        self.closed = False

    async def collection_exists(self, name: str) -> bool:
        return self.existing is not None

    async def create_collection(self, collection_name: str, vectors_config: qdrant_http.VectorParams) -> bool:
        self.created.append((collection_name, vectors_config))
        return True

    async def get_collection(self, name: str):
        return SimpleNamespace(config=SimpleNamespace(params=SimpleNamespace(vectors=self.existing)))

    async def count(self, collection_name: str, exact: bool = True):
        return SimpleNamespace(count=self.points)

    async def close(self) -> None:
        self.closed = True


def make_config(**kwargs) -> QdrantBackendConfig:
    return QdrantBackendConfig(collection_name="docs", host="q", dimension=4, **kwargs)


@pytest.mark.asyncio
async def test_connect_creates_missing_collection() -> None:
    client = StubQdrantClient()
    store = QdrantVectorStore(make_config(distance=DistanceMetric.DOT, on_disk=True), client=client)
    await store.connect()
    assert store.is_connected()
    [(name, params)] = client.created
    assert name == "docs"
    assert params.size == 4
    assert params.distance == qdrant_http.Distance.DOT
    assert params.on_disk is True


@pytest.mark.asyncio
async def test_connect_accepts_matching_collection() -> None:
    existing = qdrant_http.VectorParams(size=4, distance=qdrant_http.Distance.COSINE)
    client = StubQdrantClient(existing=existing, points=7)
    store = QdrantVectorStore(make_config(), client=client)
    await store.connect()
    assert client.created == []
    assert await store.count() == 7


@pytest.mark.asyncio
async def test_schema_mismatch() -> None:
    existing = qdrant_http.VectorParams(size=8, distance=qdrant_http.Distance.COSINE)
    store = QdrantVectorStore(make_config(), client=StubQdrantClient(existing=existing))
    with pytest.raises(VectorSchemaMismatchError) as exc_info:
        await store.connect()
    assert exc_info.value.code == "SCHEMA_MISMATCH"
    assert not store.is_connected()


@pytest.mark.asyncio
async def test_disconnect_closes_client() -> None:
    client = StubQdrantClient()
    store = QdrantVectorStore(make_config(), client=client)
    await store.connect()
    await store.disconnect()
    assert client.closed
    assert not store.is_connected()

"""Unit tests for the Pinecone adapter against a stub client."""
from types import SimpleNamespace

import pytest

from vector_storage.backends import PineconeVectorStore
from vector_storage.backends.pinecone import _PINECONE_METRIC
from vector_storage.config import PineconeBackendConfig
from vector_storage.errors import VectorSchemaMismatchError
from vector_storage.types import DistanceMetric


class StubIndex:
    def describe_index_stats(self):
        return SimpleNamespace(
            namespaces={"tenant": SimpleNamespace(vector_count=3)},
            total_vector_count=10,
        )


class StubPinecone:
    """Implements only the Pinecone client calls the adapter makes."""

    def __init__(self, existing_dim: int | None = None) -> None:
        self.existing_dim = existing_dim
        self.created: list[dict] = []
        self.opened: list[str] = []

    def list_indexes(self):
        names = ["docs"] if self.existing_dim is not None else []
        return SimpleNamespace(names=lambda: names)

    def create_index(self, name: str, dimension: int, metric: str, spec) -> None:
        self.created.append({"name": name, "dimension": dimension, "metric": metric, "spec": spec})

    def describe_index(self, name: str):
        return SimpleNamespace(dimension=self.existing_dim)

    def Index(self, name: str) -> StubIndex:
        self.opened.append(name)
        return StubIndex()


def make_config(**kwargs) -> PineconeBackendConfig:
    return PineconeBackendConfig(collection_name="docs", api_key="pk", dimension=4, **kwargs)


def test_metric_names() -> None:
    assert _PINECONE_METRIC == {
        DistanceMetric.COSINE: "cosine",
        DistanceMetric.EUCLIDEAN: "euclidean",
        DistanceMetric.DOT: "dotproduct",
    }


@pytest.mark.asyncio
async def test_connect_existing_index() -> None:
    client = StubPinecone(existing_dim=4)
    store = PineconeVectorStore(make_config(), client=client)
    await store.connect()
    assert store.is_connected()
    assert client.created == []
    assert client.opened == ["docs"]
    assert await store.count() == 10


@pytest.mark.asyncio
async def test_count_is_per_namespace() -> None:
    store = PineconeVectorStore(make_config(namespace="tenant"), client=StubPinecone(existing_dim=4))
    await store.connect()
    assert await store.count() == 3

    other = PineconeVectorStore(make_config(namespace="empty"), client=StubPinecone(existing_dim=4))
    await other.connect()
    assert await other.count() == 0


@pytest.mark.asyncio
async def test_schema_mismatch() -> None:
    store = PineconeVectorStore(make_config(), client=StubPinecone(existing_dim=8))
    with pytest.raises(VectorSchemaMismatchError):
        await store.connect()
    assert not store.is_connected()


@pytest.mark.asyncio
async def test_connect_creates_serverless_index() -> None:
    pytest.importorskip("pinecone")
    client = StubPinecone()
    store = PineconeVectorStore(make_config(metric=DistanceMetric.DOT, region="eu-west-1"), client=client)
    await store.connect()
    [created] = client.created
    assert created["name"] == "docs"
    assert created["dimension"] == 4
    assert created["metric"] == "dotproduct"


@pytest.mark.asyncio
async def test_disconnect() -> None:
    store = PineconeVectorStore(make_config(), client=StubPinecone(existing_dim=4))
    await store.connect()
    await store.disconnect()
    assert not store.is_connected()

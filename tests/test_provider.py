"""Unit tests for VectorStoreProvider (validation, env creation, cached multi-collection stores)."""
import asyncio

import pytest

from vector_storage.backends import InMemoryVectorStore
from vector_storage.config import ChromaBackendConfig, InMemoryBackendConfig, QdrantBackendConfig
from vector_storage.errors import VectorStoreConfigError, VectorStoreConnectionError
from vector_storage.provider import (
    VectorStoreProvider,
    dual_collection_cache_key,
    multi_collection_cache_key,
)
from vector_storage.resolver import resolve_backend_config, resolve_workspace_backend_config
from vector_storage.settings import ResolutionContext


def ctx(**source: str) -> ResolutionContext:
    return ResolutionContext(source=source)


@pytest.mark.asyncio
async def test_create_vector_store_from_mapping(storage_factory, builder) -> None:
    provider = VectorStoreProvider(storage_factory=storage_factory)
    handle = await provider.create_vector_store(
        {"type": "qdrant", "collection_name": "docs", "url": "http://q:6333"}
    )
    assert isinstance(handle.manager.config, QdrantBackendConfig)
    assert handle.store is builder.built[0]
    assert handle.manager.is_connected()


@pytest.mark.asyncio
async def test_invalid_config_fails_before_connecting(storage_factory, builder) -> None:
    provider = VectorStoreProvider(storage_factory=storage_factory)
    with pytest.raises(VectorStoreConfigError):
        await provider.create_vector_store({"type": "qdrant", "collection_name": "docs"})
    assert builder.built == []


@pytest.mark.asyncio
async def test_create_vector_store_failure_releases_handle(storage_factory, builder) -> None:
    builder.fail_connect["docs"] = TimeoutError("slow")
    provider = VectorStoreProvider(storage_factory=storage_factory)
    with pytest.raises(VectorStoreConnectionError):
        await provider.create_vector_store(InMemoryBackendConfig(collection_name="docs"))
    assert builder.disconnected() == ["docs"]


@pytest.mark.asyncio
async def test_create_default_vector_store() -> None:
    provider = VectorStoreProvider()
    handle = await provider.create_default_vector_store("scratch", 16)
    assert isinstance(handle.store, InMemoryVectorStore)
    assert handle.store.dimension == 16
    assert handle.store.collection_name == "scratch"
    await handle.manager.disconnect()


@pytest.mark.asyncio
async def test_create_from_env_contexts(storage_factory, builder) -> None:
    provider = VectorStoreProvider(storage_factory=storage_factory)
    source = ctx(VECTOR_STORE_TYPE="qdrant", VECTOR_STORE_HOST="q", WORKSPACE_VECTOR_STORE_COLLECTION="ws")
    knowledge = await provider.create_vector_store_from_env(source)
    workspace = await provider.create_workspace_vector_store_from_env(source)
    assert knowledge.store.collection_name == "knowledge_memory"
    assert workspace.store.collection_name == "ws"
    assert workspace.manager.config.host == "q"


@pytest.mark.asyncio
async def test_multi_collection_concurrent_calls_deduplicate(storage_factory, builder) -> None:
    provider = VectorStoreProvider(storage_factory=storage_factory)
    builder.gate = asyncio.Event()
    context = ctx(REFLECTION_VECTOR_STORE_COLLECTION="reflections", USE_WORKSPACE_MEMORY="true")

    tasks = [
        asyncio.create_task(provider.create_multi_collection_vector_store_from_env(context))
        for _ in range(3)
    ]
    await asyncio.sleep(0)
    builder.gate.set()
    results = await asyncio.gather(*tasks)

    assert results[0] is results[1] is results[2]
    assert builder.connected() == ["knowledge_memory", "reflections", "workspace_memory"]
    stores = results[0]
    assert stores.reflection_store is not None
    assert stores.workspace_store is not None


@pytest.mark.asyncio
async def test_multi_collection_result_is_reused(storage_factory, builder) -> None:
    provider = VectorStoreProvider(storage_factory=storage_factory)
    first = await provider.create_multi_collection_vector_store_from_env(ctx())
    # Same semantics, different spelling
    second = await provider.create_multi_collection_vector_store_from_env(
        ctx(VECTOR_STORE_COLLECTION=" knowledge_memory ", REFLECTION_VECTOR_STORE_COLLECTION="  ")
    )
    assert first is second
    assert len(builder.built) == 1


@pytest.mark.asyncio
async def test_distinct_requests_get_distinct_stores(storage_factory, builder) -> None:
    provider = VectorStoreProvider(storage_factory=storage_factory)
    a = await provider.create_multi_collection_vector_store_from_env(ctx())
    b = await provider.create_multi_collection_vector_store_from_env(ctx(USE_WORKSPACE_MEMORY="true"))
    assert a is not b
    assert len(provider.cache) == 2


@pytest.mark.asyncio
async def test_failed_multi_collection_is_retried(storage_factory, builder) -> None:
    provider = VectorStoreProvider(storage_factory=storage_factory)
    builder.fail_connect["reflections"] = ConnectionError("down")
    context = ctx(REFLECTION_VECTOR_STORE_COLLECTION="reflections")

    with pytest.raises(VectorStoreConnectionError):
        await provider.create_multi_collection_vector_store_from_env(context)
    assert len(provider.cache) == 0

    stores = await provider.create_multi_collection_vector_store_from_env(context)
    assert stores.manager.is_connected()
    assert stores.reflection_store.collection_name == "reflections"


@pytest.mark.asyncio
async def test_dual_collection_ignores_workspace_flag(storage_factory, builder) -> None:
    provider = VectorStoreProvider(storage_factory=storage_factory)
    stores = await provider.create_dual_collection_vector_store_from_env(
        ctx(REFLECTION_VECTOR_STORE_COLLECTION="reflections", USE_WORKSPACE_MEMORY="true")
    )
    assert stores.workspace_store is None
    assert builder.connected() == ["knowledge_memory", "reflections"]


def test_cache_keys() -> None:
    plain = ctx()
    with_workspace = ctx(USE_WORKSPACE_MEMORY="true")
    config = resolve_backend_config(plain)
    workspace = resolve_workspace_backend_config(with_workspace)

    assert multi_collection_cache_key(config, plain) != multi_collection_cache_key(
        config, with_workspace, workspace
    )
    assert dual_collection_cache_key(config, plain) == dual_collection_cache_key(config, with_workspace)
    assert multi_collection_cache_key(config, plain).startswith("multiCollectionVectorStore:")
    assert dual_collection_cache_key(config, plain).startswith("dualCollectionVectorStore:")


def test_cache_keys_cover_full_configs() -> None:
    context = ctx()
    a = QdrantBackendConfig(collection_name="docs", host="qdrant-a")
    b = QdrantBackendConfig(collection_name="docs", host="qdrant-b")
    assert multi_collection_cache_key(a, context) != multi_collection_cache_key(b, context)
    assert dual_collection_cache_key(a, context) != dual_collection_cache_key(b, context)

    local = InMemoryBackendConfig(collection_name="workspace_memory")
    remote = ChromaBackendConfig(collection_name="workspace_memory", host="chroma")
    assert multi_collection_cache_key(a, context, local) != multi_collection_cache_key(a, context, remote)


@pytest.mark.asyncio
async def test_workspace_backend_is_part_of_the_cache_key(storage_factory, builder) -> None:
    provider = VectorStoreProvider(storage_factory=storage_factory)
    local = await provider.create_multi_collection_vector_store_from_env(ctx(USE_WORKSPACE_MEMORY="true"))
    remote = await provider.create_multi_collection_vector_store_from_env(
        ctx(
            USE_WORKSPACE_MEMORY="true",
            WORKSPACE_VECTOR_STORE_TYPE="chroma",
            WORKSPACE_VECTOR_STORE_HOST="chroma",
        )
    )
    assert local is not remote
    assert isinstance(local.workspace_store.config, InMemoryBackendConfig)
    assert isinstance(remote.workspace_store.config, ChromaBackendConfig)
    assert len(provider.cache) == 2


@pytest.mark.asyncio
async def test_env_multi_collection_rejects_invalid_fallback_name(storage_factory, builder) -> None:
    provider = VectorStoreProvider(storage_factory=storage_factory)
    context = ctx(VECTOR_STORE_TYPE="qdrant", VECTOR_STORE_COLLECTION="my docs!")
    with pytest.raises(VectorStoreConfigError):
        await provider.create_multi_collection_vector_store_from_env(context)
    with pytest.raises(VectorStoreConfigError):
        await provider.create_dual_collection_vector_store_from_env(context)
    assert builder.built == []
    assert len(provider.cache) == 0

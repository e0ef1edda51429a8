"""VectorStoreProvider: composition root for creating stores from configs or the environment.

The provider owns its StorageFactory and ServiceCache. Multi-collection stores created
from the environment are deduplicated through the cache for the provider's lifetime.
"""
from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from vector_storage.cache import ServiceCache, config_fingerprint, create_service_key
from vector_storage.config import BackendConfig, InMemoryBackendConfig
from vector_storage.constants import DEFAULT_DIMENSION, DEFAULT_KNOWLEDGE_COLLECTION, DEFAULT_MAX_VECTORS
from vector_storage.manager import MultiCollectionVectorManager, VectorStoreManager
from vector_storage.ports import VectorStorePort
from vector_storage.resolver import resolve_backend_config, resolve_workspace_backend_config
from vector_storage.settings import ResolutionContext
from vector_storage.storage_factory import StorageFactory
from vector_storage.types import CollectionKind
from vector_storage.validation import validate_backend_config

logger = logging.getLogger(__name__)

DUAL_COLLECTION_SERVICE = "dualCollectionVectorStore"
MULTI_COLLECTION_SERVICE = "multiCollectionVectorStore"


@dataclass(frozen=True)
class VectorStoreHandle:
    """Manager for lifecycle control plus its connected store."""

    manager: VectorStoreManager
    store: VectorStorePort


@dataclass(frozen=True)
class MultiCollectionVectorStores:
    """Manager plus its connected stores. Disabled stores are None."""

    manager: MultiCollectionVectorManager
    knowledge_store: VectorStorePort
    reflection_store: VectorStorePort | None = None
    workspace_store: VectorStorePort | None = None


def multi_collection_cache_key(
    config: BackendConfig,
    context: ResolutionContext,
    workspace_config: BackendConfig | None = None,
) -> str:
    """Key over the knowledge config, the reflection name and the workspace config (None when disabled)."""
    enabled = workspace_config is not None
    return create_service_key(
        MULTI_COLLECTION_SERVICE,
        {
            "type": config.backend_type,
            "collection": config.collection_name,
            "dimension": config.dimension,
            "config": config_fingerprint(config),
            "reflection_collection": context.reflection_collection,
            "workspace_enabled": enabled,
            "workspace_type": workspace_config.backend_type if enabled else None,
            "workspace_collection": workspace_config.collection_name if enabled else None,
            "workspace_dimension": workspace_config.dimension if enabled else None,
            "workspace_config": config_fingerprint(workspace_config) if enabled else None,
        },
    )


def dual_collection_cache_key(config: BackendConfig, context: ResolutionContext) -> str:
    return create_service_key(
        DUAL_COLLECTION_SERVICE,
        {
            "type": config.backend_type,
            "collection": config.collection_name,
            "dimension": config.dimension,
            "config": config_fingerprint(config),
            "reflection_collection": context.reflection_collection,
        },
    )


class VectorStoreProvider:
    """Creates single and multi-collection stores. Pass one instance to whoever needs stores."""

    def __init__(
        self,
        *,
        storage_factory: StorageFactory | None = None,
        cache: ServiceCache[MultiCollectionVectorStores] | None = None,
    ) -> None:
        self._factory = storage_factory or StorageFactory()
        self._cache: ServiceCache[MultiCollectionVectorStores] = cache if cache is not None else ServiceCache()

    @property
    def cache(self) -> ServiceCache[MultiCollectionVectorStores]:
        return self._cache

    @property
    def storage_factory(self) -> StorageFactory:
        return self._factory

    async def create_vector_store(self, config: BackendConfig | Mapping[str, Any]) -> VectorStoreHandle:
        """Validate config and connect one store.

        Raises VectorStoreConfigError before any connection attempt if config is invalid.
        """
        typed = validate_backend_config(config)
        logger.debug(
            "Creating vector storage system",
            extra={"backend": typed.backend_type.value, "collection": typed.collection_name},
        )
        manager = VectorStoreManager(typed, storage_factory=self._factory)
        try:
            store = await manager.connect()
        except Exception as e:
            await manager.disconnect()
            logger.error("Failed to create vector storage system: %s", e)
            raise
        logger.info(
            "Vector storage system created",
            extra={"backend": typed.backend_type.value, "collection": typed.collection_name},
        )
        return VectorStoreHandle(manager=manager, store=store)

    async def create_default_vector_store(
        self,
        collection_name: str = DEFAULT_KNOWLEDGE_COLLECTION,
        dimension: int = DEFAULT_DIMENSION,
    ) -> VectorStoreHandle:
        """In-memory store with default settings (development, tests)."""
        return await self.create_vector_store(
            InMemoryBackendConfig(
                collection_name=collection_name,
                dimension=dimension,
                max_vectors=DEFAULT_MAX_VECTORS,
            )
        )

    async def create_vector_store_from_env(self, context: ResolutionContext | None = None) -> VectorStoreHandle:
        context = context or ResolutionContext.from_env()
        return await self.create_vector_store(resolve_backend_config(context))

    async def create_workspace_vector_store_from_env(
        self,
        context: ResolutionContext | None = None,
    ) -> VectorStoreHandle:
        context = context or ResolutionContext.from_env()
        return await self.create_vector_store(resolve_workspace_backend_config(context))

    async def create_dual_collection_vector_store_from_env(
        self,
        context: ResolutionContext | None = None,
    ) -> MultiCollectionVectorStores:
        """Knowledge + optional reflection (workspace disabled regardless of the flag). Cached."""
        context = context or ResolutionContext.from_env()
        config = resolve_backend_config(context)
        key = dual_collection_cache_key(config, context)
        return await self._cache.get_or_create(
            key,
            lambda: self._connect_collections(config, context, None),
        )

    async def create_multi_collection_vector_store_from_env(
        self,
        context: ResolutionContext | None = None,
    ) -> MultiCollectionVectorStores:
        """Knowledge + optional reflection + optional workspace. Cached."""
        context = context or ResolutionContext.from_env()
        config = resolve_backend_config(context)
        workspace = resolve_workspace_backend_config(context) if context.workspace_enabled else None
        key = multi_collection_cache_key(config, context, workspace)
        return await self._cache.get_or_create(
            key,
            lambda: self._connect_collections(config, context, workspace),
        )

    async def _connect_collections(
        self,
        config: BackendConfig,
        context: ResolutionContext,
        workspace: BackendConfig | None,
    ) -> MultiCollectionVectorStores:
        logger.info(
            "Creating multi collection vector storage",
            extra={
                "backend": config.backend_type.value,
                "collection": config.collection_name,
                "reflection_collection": context.reflection_collection or "disabled",
                "workspace_collection": workspace.collection_name if workspace is not None else "disabled",
            },
        )
        manager = MultiCollectionVectorManager(
            config,
            context,
            workspace_enabled=workspace is not None,
            workspace_config=workspace,
            storage_factory=self._factory,
        )
        collections = await manager.connect()
        return MultiCollectionVectorStores(
            manager=manager,
            knowledge_store=collections.knowledge,
            reflection_store=collections.get(CollectionKind.REFLECTION),
            workspace_store=collections.get(CollectionKind.WORKSPACE),
        )

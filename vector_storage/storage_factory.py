"""StorageFactory: one config in, one connected engine handle out."""
from __future__ import annotations

import asyncio
import logging

from vector_storage.backends import (
    ChromaVectorStore,
    InMemoryVectorStore,
    MilvusVectorStore,
    PineconeVectorStore,
    QdrantVectorStore,
)
from vector_storage.config import BackendConfig
from vector_storage.errors import VectorStoreConnectionError, VectorStoreError
from vector_storage.ports import StoreBuilder, VectorStorePort
from vector_storage.telemetry import log_store_event
from vector_storage.types import BackendType

logger = logging.getLogger(__name__)

# Builder per backend: used by StorageFactory for dispatch
DEFAULT_BUILDERS: dict[BackendType, StoreBuilder] = {
    BackendType.IN_MEMORY: InMemoryVectorStore,
    BackendType.QDRANT: QdrantVectorStore,
    BackendType.MILVUS: MilvusVectorStore,
    BackendType.CHROMA: ChromaVectorStore,
    BackendType.PINECONE: PineconeVectorStore,
}


class StorageFactory:
    """Builds and connects engine handles. create() is one attempt; disconnect() never raises."""

    def __init__(self, builders: dict[BackendType, StoreBuilder] | None = None) -> None:
        self._builders: dict[BackendType, StoreBuilder] = dict(DEFAULT_BUILDERS)
        if builders:
            self._builders.update(builders)

    def register(self, backend: BackendType, builder: StoreBuilder) -> None:
        """Replace the builder for backend (tests, custom engines)."""
        self._builders[backend] = builder

    async def create(self, config: BackendConfig) -> VectorStorePort:
        """Build a handle for config and connect it.

        Raises VectorStoreConnectionError (chained to the cause) if the connection attempt
        fails; domain errors such as VectorSchemaMismatchError propagate unchanged. The
        half-built handle is disconnected before raising.
        """
        backend = config.backend_type
        builder = self._builders.get(backend)
        if builder is None:
            raise VectorStoreConnectionError(
                f"No storage engine registered for backend {backend.value!r}",
                backend=backend,
            )
        handle = builder(config)
        try:
            await handle.connect()
        except VectorStoreError:
            log_store_event(
                "vector_store_connect_failed",
                backend=backend.value,
                collection=config.collection_name,
                level=logging.ERROR,
            )
            await self.disconnect(handle)
            raise
        except asyncio.CancelledError:
            await self.disconnect(handle)
            raise
        except Exception as e:
            log_store_event(
                "vector_store_connect_failed",
                backend=backend.value,
                collection=config.collection_name,
                level=logging.ERROR,
                error=type(e).__name__,
            )
            await self.disconnect(handle)
            raise VectorStoreConnectionError(
                f"Failed to connect {backend.value} store for collection {config.collection_name!r}: {e}",
                backend=backend,
                details=type(e).__name__,
            ) from e
        fallback = getattr(config, "fallback_from", None)
        log_store_event(
            "vector_store_connected",
            backend=backend.value,
            collection=config.collection_name,
            dimension=config.dimension,
            fallback_from=fallback.value if fallback else None,
        )
        return handle

    async def disconnect(self, handle: VectorStorePort) -> None:
        """Disconnect handle. Failures are logged and swallowed so cleanup paths stay safe."""
        try:
            await handle.disconnect()
        except Exception as e:
            logger.warning(
                "Ignoring error while disconnecting %s store %s: %s",
                handle.backend_type.value,
                handle.collection_name,
                e,
            )
            return
        log_store_event(
            "vector_store_disconnected",
            backend=handle.backend_type.value,
            collection=handle.collection_name,
        )

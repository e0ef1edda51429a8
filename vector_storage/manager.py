"""Store managers: single-collection lifecycle and the multi-collection orchestrator.

MultiCollectionVectorManager connects knowledge, then reflection (if named), then
workspace (if enabled), one at a time. Any failure tears down what this call already
connected and propagates; no partial collection set is ever exposed.
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any

from vector_storage.config import BackendConfig
from vector_storage.ports import VectorStorePort
from vector_storage.resolver import resolve_workspace_backend_config
from vector_storage.settings import ResolutionContext
from vector_storage.storage_factory import StorageFactory
from vector_storage.telemetry import redact_config
from vector_storage.types import CollectionKind
from vector_storage.validation import validate_backend_config

logger = logging.getLogger(__name__)


class VectorStoreManager:
    """Owns one engine handle for one config."""

    def __init__(self, config: BackendConfig, *, storage_factory: StorageFactory | None = None) -> None:
        self._config = config
        self._factory = storage_factory or StorageFactory()
        self._store: VectorStorePort | None = None

    @property
    def config(self) -> BackendConfig:
        return self._config

    async def connect(self) -> VectorStorePort:
        """Connect (once). Returns the connected handle."""
        if self._store is None:
            self._store = await self._factory.create(self._config)
        return self._store

    async def disconnect(self) -> None:
        store, self._store = self._store, None
        if store is not None:
            await self._factory.disconnect(store)

    def is_connected(self) -> bool:
        return self._store is not None and self._store.is_connected()

    def get_store(self) -> VectorStorePort | None:
        return self._store

    def get_info(self) -> dict[str, Any]:
        return {
            "backend": {
                "type": self._config.backend_type.value,
                "collection": self._config.collection_name,
                "dimension": self._config.dimension,
                "fallback_from": _fallback_of(self._config),
            },
            "connected": self.is_connected(),
        }


class OrchestrationState(str, Enum):
    """Per-call state of MultiCollectionVectorManager.connect()."""

    IDLE = "idle"
    CONNECTING_KNOWLEDGE = "connecting_knowledge"
    CONNECTING_REFLECTION = "connecting_reflection"
    CONNECTING_WORKSPACE = "connecting_workspace"
    READY = "ready"
    FAILED = "failed"


_CONNECTING: dict[CollectionKind, OrchestrationState] = {
    CollectionKind.KNOWLEDGE: OrchestrationState.CONNECTING_KNOWLEDGE,
    CollectionKind.REFLECTION: OrchestrationState.CONNECTING_REFLECTION,
    CollectionKind.WORKSPACE: OrchestrationState.CONNECTING_WORKSPACE,
}


@dataclass(frozen=True)
class CollectionSet:
    """Connected handles per slot. Disabled slots are None, never a broken handle."""

    knowledge: VectorStorePort
    reflection: VectorStorePort | None = None
    workspace: VectorStorePort | None = None

    def get(self, kind: CollectionKind | str) -> VectorStorePort | None:
        return getattr(self, CollectionKind(kind).value)

    def enabled(self) -> list[CollectionKind]:
        return [kind for kind in CollectionKind if self.get(kind) is not None]


class MultiCollectionVectorManager:
    """Knowledge + optional reflection + optional workspace collections, all-or-nothing."""

    def __init__(
        self,
        base_config: BackendConfig,
        context: ResolutionContext | None = None,
        *,
        workspace_enabled: bool | None = None,
        workspace_config: BackendConfig | None = None,
        storage_factory: StorageFactory | None = None,
    ) -> None:
        self._base = base_config
        self._context = context or ResolutionContext()
        self._workspace_enabled = (
            self._context.workspace_enabled if workspace_enabled is None else workspace_enabled
        )
        # Pre-resolved workspace config; resolved from the context at plan time when absent
        self._workspace_config = workspace_config
        self._factory = storage_factory or StorageFactory()
        self._collections: CollectionSet | None = None
        self._state = OrchestrationState.IDLE

    @property
    def state(self) -> OrchestrationState:
        return self._state

    @property
    def collections(self) -> CollectionSet | None:
        return self._collections

    @property
    def workspace_enabled(self) -> bool:
        return self._workspace_enabled

    def plan(self) -> dict[CollectionKind, BackendConfig]:
        """Configs to connect, in connection order. Raises VectorStoreConfigError before any I/O."""
        planned: dict[CollectionKind, BackendConfig] = {
            CollectionKind.KNOWLEDGE: validate_backend_config(self._base),
        }

        reflection_name = self._context.reflection_collection
        if reflection_name:
            derived = self._base.model_copy(update={"collection_name": reflection_name})
            planned[CollectionKind.REFLECTION] = validate_backend_config(derived)
        else:
            logger.info(
                "Reflection collection not set; reflection store disabled",
                extra={"backend": self._base.backend_type.value, "collection": self._base.collection_name},
            )

        if self._workspace_enabled:
            workspace = self._workspace_config or resolve_workspace_backend_config(self._context)
            planned[CollectionKind.WORKSPACE] = validate_backend_config(workspace)
        return planned

    async def connect(self) -> CollectionSet:
        """Connect every planned collection in order. Returns the existing set if already connected."""
        if self._collections is not None:
            return self._collections

        planned = self.plan()
        connected: list[tuple[CollectionKind, VectorStorePort]] = []
        for kind, config in planned.items():
            self._state = _CONNECTING[kind]
            try:
                handle = await self._factory.create(config)
            except (Exception, asyncio.CancelledError) as e:
                self._state = OrchestrationState.FAILED
                logger.error(
                    "Failed to connect %s collection %s; tearing down %d connected collection(s): %s",
                    kind.value,
                    config.collection_name,
                    len(connected),
                    e,
                )
                await self._teardown(connected)
                raise
            connected.append((kind, handle))

        handles = {kind.value: handle for kind, handle in connected}
        self._collections = CollectionSet(**handles)
        self._state = OrchestrationState.READY
        logger.info(
            "Multi collection vector storage connected",
            extra={"collections": [kind.value for kind, _ in connected]},
        )
        return self._collections

    async def disconnect(self) -> None:
        """Disconnect every collection (reverse order). Never raises."""
        collections, self._collections = self._collections, None
        if collections is not None:
            await self._teardown([(kind, collections.get(kind)) for kind in collections.enabled()])
        self._state = OrchestrationState.IDLE

    async def _teardown(self, connected: list[tuple[CollectionKind, VectorStorePort]]) -> None:
        for _, handle in reversed(connected):
            await self._factory.disconnect(handle)

    def get_store(self, kind: CollectionKind | str) -> VectorStorePort | None:
        if self._collections is None:
            return None
        return self._collections.get(kind)

    def is_connected(self) -> bool:
        return self._state is OrchestrationState.READY

    def get_info(self) -> dict[str, Any]:
        stores: dict[str, Any] = {}
        for kind in CollectionKind:
            handle = self.get_store(kind)
            stores[kind.value] = handle.info() if handle is not None else None
        return {
            "state": self._state.value,
            "base": redact_config(self._base),
            "workspace_enabled": self._workspace_enabled,
            "stores": stores,
        }


def _fallback_of(config: BackendConfig) -> str | None:
    fallback = getattr(config, "fallback_from", None)
    return fallback.value if fallback is not None else None

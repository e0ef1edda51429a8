"""Pytest config and fixtures for vector storage tests."""
from __future__ import annotations

import asyncio
from typing import Any

import pytest

from vector_storage.config import BackendConfig
from vector_storage.constants import (
    DEFAULT_PREFIX,
    PINECONE_METRIC,
    PINECONE_NAMESPACE,
    REFLECTION_COLLECTION,
    USE_WORKSPACE_MEMORY,
    VECTOR_STORE_FIELDS,
    WORKSPACE_PREFIX,
)
from vector_storage.storage_factory import StorageFactory
from vector_storage.types import BackendType


class FakeStore:
    """Engine handle that records lifecycle calls into a shared event list."""

    def __init__(self, config: BackendConfig, builder: "RecordingBuilder") -> None:
        self.config = config
        self._builder = builder
        self._connected = False

    @property
    def backend_type(self) -> BackendType:
        return self.config.backend_type

    @property
    def collection_name(self) -> str:
        return self.config.collection_name

    @property
    def dimension(self) -> int:
        return self.config.dimension

    async def connect(self) -> None:
        self._builder.events.append(("connect", self.collection_name))
        if self.collection_name in self._builder.hang:
            await asyncio.Event().wait()
        if self._builder.gate is not None:
            await self._builder.gate.wait()
        error = self._builder.fail_connect.pop(self.collection_name, None)
        if error is not None:
            raise error
        self._connected = True

    async def disconnect(self) -> None:
        self._builder.events.append(("disconnect", self.collection_name))
        self._connected = False
        error = self._builder.fail_disconnect.get(self.collection_name)
        if error is not None:
            raise error

    def is_connected(self) -> bool:
        return self._connected

    async def count(self) -> int:
        return 0

    def info(self) -> dict[str, Any]:
        return {"backend": self.backend_type.value, "collection": self.collection_name}


class RecordingBuilder:
    """StoreBuilder that hands out FakeStores. fail_connect entries fire once per collection."""

    def __init__(self) -> None:
        self.built: list[FakeStore] = []
        self.events: list[tuple[str, str]] = []
        self.fail_connect: dict[str, Exception] = {}
        self.fail_disconnect: dict[str, Exception] = {}
        self.gate: asyncio.Event | None = None
        self.hang: set[str] = set()

    def __call__(self, config: BackendConfig) -> FakeStore:
        store = FakeStore(config, self)
        self.built.append(store)
        return store

    def connected(self) -> list[str]:
        return [name for event, name in self.events if event == "connect"]

    def disconnected(self) -> list[str]:
        return [name for event, name in self.events if event == "disconnect"]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the developer's shell environment out of resolution."""
    for prefix in (DEFAULT_PREFIX, WORKSPACE_PREFIX):
        for field in VECTOR_STORE_FIELDS:
            monkeypatch.delenv(prefix + field, raising=False)
    for key in (PINECONE_NAMESPACE, PINECONE_METRIC, REFLECTION_COLLECTION, USE_WORKSPACE_MEMORY):
        monkeypatch.delenv(key, raising=False)


@pytest.fixture
def builder() -> RecordingBuilder:
    return RecordingBuilder()


@pytest.fixture
def storage_factory(builder: RecordingBuilder) -> StorageFactory:
    """StorageFactory with every backend routed to the recording builder."""
    factory = StorageFactory()
    for backend in BackendType:
        factory.register(backend, builder)
    return factory


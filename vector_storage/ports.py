"""Port interfaces for storage engines. Managers depend on these, not on adapters."""
from __future__ import annotations

from collections.abc import Callable
from typing import Any, Protocol, runtime_checkable

from vector_storage.config import BackendConfig
from vector_storage.types import BackendType


@runtime_checkable
class VectorStorePort(Protocol):
    """A storage-engine handle for one collection. Lifecycle is connect -> use -> disconnect."""

    config: BackendConfig

    @property
    def backend_type(self) -> BackendType:
        ...

    @property
    def collection_name(self) -> str:
        ...

    @property
    def dimension(self) -> int:
        ...

    async def connect(self) -> None:
        """One connection attempt. Raises on failure."""
        ...

    async def disconnect(self) -> None:
        ...

    def is_connected(self) -> bool:
        ...

    async def count(self) -> int:
        """Number of vectors stored in the collection."""
        ...

    def info(self) -> dict[str, Any]:
        """Log-safe description (no secrets)."""
        ...


StoreBuilder = Callable[[BackendConfig], VectorStorePort]

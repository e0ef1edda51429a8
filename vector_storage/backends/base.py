"""Shared plumbing for engine adapters."""
from __future__ import annotations

from typing import Any, Generic, TypeVar

from vector_storage.config import BaseBackendConfig
from vector_storage.errors import VectorStoreNotConnectedError
from vector_storage.telemetry import redact_config
from vector_storage.types import BackendType

C = TypeVar("C", bound=BaseBackendConfig)


class BaseVectorStore(Generic[C]):
    """Holds the config and connection flag; adapters implement connect/disconnect/count."""

    def __init__(self, config: C) -> None:
        self.config = config
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

    def is_connected(self) -> bool:
        return self._connected

    def info(self) -> dict[str, Any]:
        return {
            "backend": self.backend_type.value,
            "collection": self.collection_name,
            "dimension": self.dimension,
            "connected": self._connected,
            "config": redact_config(self.config),
        }

    def _require_connected(self) -> None:
        if not self._connected:
            raise VectorStoreNotConnectedError(
                f"{self.backend_type.value} store for {self.collection_name!r} is not connected",
                backend=self.backend_type,
            )

    def __repr__(self) -> str:
        state = "connected" if self._connected else "disconnected"
        return f"<{type(self).__name__} {self.collection_name!r} {state}>"

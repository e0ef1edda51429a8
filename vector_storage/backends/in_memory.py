"""Process-local vector store. Enforces dimension and the max_vectors cap; no eviction."""
from __future__ import annotations

import logging
from typing import Any

from pydantic import BaseModel, Field

from vector_storage.backends.base import BaseVectorStore
from vector_storage.config import InMemoryBackendConfig
from vector_storage.errors import VectorDimensionError, VectorStoreCapacityError

logger = logging.getLogger(__name__)


class VectorRecord(BaseModel):
    """A stored vector and its payload."""

    id: str = Field(..., description="Caller-supplied vector id")
    vector: list[float] = Field(..., description="Embedding vector")
    payload: dict[str, Any] = Field(default_factory=dict, description="Metadata stored alongside")


class InMemoryVectorStore(BaseVectorStore[InMemoryBackendConfig]):
    """Dict-backed store. Contents are dropped on disconnect."""

    def __init__(self, config: InMemoryBackendConfig) -> None:
        super().__init__(config)
        self._records: dict[str, VectorRecord] = {}

    @property
    def max_vectors(self) -> int:
        return self.config.max_vectors

    async def connect(self) -> None:
        self._connected = True
        if self.config.is_fallback:
            logger.info(
                "In-memory store %s standing in for %s",
                self.collection_name,
                self.config.fallback_from.value,
            )

    async def disconnect(self) -> None:
        self._records.clear()
        self._connected = False

    async def count(self) -> int:
        self._require_connected()
        return len(self._records)

    async def insert(
        self,
        vectors: list[list[float]],
        ids: list[str],
        payloads: list[dict[str, Any]] | None = None,
    ) -> None:
        """Insert or replace vectors. All-or-nothing: nothing is written if any check fails."""
        self._require_connected()
        if len(vectors) != len(ids):
            raise ValueError(f"vectors ({len(vectors)}) and ids ({len(ids)}) differ in length")
        if payloads is not None and len(payloads) != len(ids):
            raise ValueError(f"payloads ({len(payloads)}) and ids ({len(ids)}) differ in length")
        for vid, vector in zip(ids, vectors):
            if len(vector) != self.dimension:
                raise VectorDimensionError(
                    f"Vector {vid!r} has dimension {len(vector)}, expected {self.dimension}",
                    backend=self.backend_type,
                )
        new_ids = {vid for vid in ids if vid not in self._records}
        if len(self._records) + len(new_ids) > self.max_vectors:
            raise VectorStoreCapacityError(
                f"Insert of {len(new_ids)} new vectors exceeds max_vectors={self.max_vectors} "
                f"(currently {len(self._records)})",
                backend=self.backend_type,
            )
        for i, (vid, vector) in enumerate(zip(ids, vectors)):
            payload = payloads[i] if payloads is not None else {}
            self._records[vid] = VectorRecord(id=vid, vector=vector, payload=payload)

    async def get(self, vector_id: str) -> VectorRecord | None:
        self._require_connected()
        return self._records.get(vector_id)

    async def delete(self, ids: list[str]) -> int:
        """Delete by id. Returns number removed."""
        self._require_connected()
        removed = 0
        for vid in ids:
            if self._records.pop(vid, None) is not None:
                removed += 1
        return removed

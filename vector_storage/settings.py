"""Environment configuration (pydantic-settings) and the per-call ResolutionContext.

Every key is loaded as a raw optional string; deciding what is valid is the resolver's
job, so a malformed variable degrades to a default instead of failing settings load.
"""
from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from pydantic import Field, PositiveInt, TypeAdapter, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from vector_storage.constants import (
    DEFAULT_WORKSPACE_COLLECTION,
    FIELD_COLLECTION,
    REFLECTION_COLLECTION,
    USE_WORKSPACE_MEMORY,
    WORKSPACE_PREFIX,
)

_POSITIVE_INT = TypeAdapter(PositiveInt)
_BOOL = TypeAdapter(bool)


class VectorStoreEnvSettings(BaseSettings):
    """Raw vector store variables. Field names map 1:1 to upper-case env keys."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    vector_store_type: str | None = Field(default=None, description="in-memory|qdrant|milvus|chroma|pinecone")
    vector_store_host: str | None = Field(default=None, description="Remote host")
    vector_store_port: str | None = Field(default=None, description="Remote port")
    vector_store_url: str | None = Field(default=None, description="Remote URL (overrides host/port)")
    vector_store_api_key: str | None = Field(default=None, description="API key / Milvus token")
    vector_store_collection: str | None = Field(default=None, description="Knowledge collection name")
    vector_store_dimension: str | None = Field(default=None, description="Vector dimension")
    vector_store_distance: str | None = Field(default=None, description="Distance metric")
    vector_store_on_disk: str | None = Field(default=None, description="Qdrant on-disk vectors")
    vector_store_max_vectors: str | None = Field(default=None, description="In-memory vector cap")
    vector_store_username: str | None = Field(default=None, description="Milvus username")
    vector_store_password: str | None = Field(default=None, description="Milvus password")

    workspace_vector_store_type: str | None = Field(default=None, description="Workspace backend type")
    workspace_vector_store_host: str | None = Field(default=None, description="Workspace host")
    workspace_vector_store_port: str | None = Field(default=None, description="Workspace port")
    workspace_vector_store_url: str | None = Field(default=None, description="Workspace URL")
    workspace_vector_store_api_key: str | None = Field(default=None, description="Workspace API key")
    workspace_vector_store_collection: str | None = Field(default=None, description="Workspace collection name")
    workspace_vector_store_dimension: str | None = Field(default=None, description="Workspace dimension")
    workspace_vector_store_distance: str | None = Field(default=None, description="Workspace distance metric")
    workspace_vector_store_on_disk: str | None = Field(default=None, description="Workspace on-disk vectors")
    workspace_vector_store_max_vectors: str | None = Field(default=None, description="Workspace vector cap")
    workspace_vector_store_username: str | None = Field(default=None, description="Workspace username")
    workspace_vector_store_password: str | None = Field(default=None, description="Workspace password")

    pinecone_namespace: str | None = Field(default=None, description="Pinecone namespace")
    pinecone_metric: str | None = Field(default=None, description="Pinecone metric (overrides distance)")
    reflection_vector_store_collection: str | None = Field(
        default=None,
        description="Reflection collection name; blank disables the reflection store",
    )
    use_workspace_memory: str | None = Field(default=None, description="Enable the workspace store")

    def as_source(self) -> dict[str, str]:
        """Return set variables keyed by their env name."""
        return {name.upper(): value for name, value in self.model_dump().items() if value is not None}


def clean(value: Any) -> str | None:
    """Trim; blank and absent are the same thing."""
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def parse_positive_int(value: str | None) -> int | None:
    """Positive integer or None (never raises)."""
    if value is None:
        return None
    try:
        return _POSITIVE_INT.validate_python(value)
    except ValidationError:
        return None


def parse_bool(value: str | None) -> bool | None:
    """Boolean per pydantic's lax rules (true/false, 1/0, yes/no, on/off) or None."""
    if value is None:
        return None
    try:
        return _BOOL.validate_python(value)
    except ValidationError:
        return None


def is_positive_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


def embedding_dimension(agent_config: Any) -> Any:
    """Pull embedding.dimensions from an agent config (mapping or attribute style)."""
    if agent_config is None:
        return None
    embedding = (
        agent_config.get("embedding")
        if isinstance(agent_config, Mapping)
        else getattr(agent_config, "embedding", None)
    )
    if embedding is None:
        return None
    if isinstance(embedding, Mapping):
        return embedding.get("dimensions")
    return getattr(embedding, "dimensions", None)


@dataclass(frozen=True)
class ResolutionContext:
    """Key/value source plus an optional embedding dimension override. Immutable."""

    source: Mapping[str, str] = field(default_factory=dict)
    dimension_override: Any = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "source", MappingProxyType(dict(self.source)))

    @classmethod
    def from_env(
        cls,
        *,
        dimension_override: Any = None,
        agent_config: Any = None,
        env_file: str | None = ".env",
    ) -> "ResolutionContext":
        """Build from the process environment (and .env when present)."""
        settings = VectorStoreEnvSettings(_env_file=env_file)
        if dimension_override is None:
            dimension_override = embedding_dimension(agent_config)
        return cls(source=settings.as_source(), dimension_override=dimension_override)

    def get(self, key: str) -> str | None:
        return clean(self.source.get(key))

    @property
    def valid_dimension_override(self) -> int | None:
        return self.dimension_override if is_positive_int(self.dimension_override) else None

    @property
    def reflection_collection(self) -> str | None:
        return self.get(REFLECTION_COLLECTION)

    @property
    def workspace_enabled(self) -> bool:
        return bool(parse_bool(self.get(USE_WORKSPACE_MEMORY)))

    @property
    def workspace_collection(self) -> str:
        return self.get(WORKSPACE_PREFIX + FIELD_COLLECTION) or DEFAULT_WORKSPACE_COLLECTION

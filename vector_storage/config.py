"""Typed backend configuration (Pydantic v2 discriminated union on `type`).

Models are permissive about which connection fields are present; the per-backend
required-field table lives in vector_storage.validation and is applied once at the
boundary (resolver output or caller-supplied config).
"""
from __future__ import annotations

from typing import Annotated, Any, Literal, Union

from pydantic import (
    AfterValidator,
    AnyHttpUrl,
    BaseModel,
    ConfigDict,
    Field,
    PositiveInt,
    TypeAdapter,
    ValidationError,
)

from vector_storage.constants import DEFAULT_DIMENSION, DEFAULT_MAX_VECTORS
from vector_storage.types import BackendType, DistanceMetric

_HTTP_URL = TypeAdapter(AnyHttpUrl)


def _check_url(value: str | None) -> str | None:
    """Require an absolute http(s) URL but keep the caller's spelling."""
    if value is not None:
        try:
            _HTTP_URL.validate_python(value)
        except ValidationError as e:
            raise ValueError(f"url must be an absolute http(s) URL, got {value!r}") from e
    return value


ConnectionUrl = Annotated[str | None, AfterValidator(_check_url)]


class BaseBackendConfig(BaseModel):
    """Fields shared by every backend."""

    model_config = ConfigDict(
        extra="forbid",
        frozen=True,
        str_strip_whitespace=True,
        populate_by_name=True,
    )

    collection_name: str = Field(..., description="Collection / index name")
    dimension: PositiveInt = Field(default=DEFAULT_DIMENSION, description="Vector dimension")
    max_connections: PositiveInt | None = Field(default=None, description="Maximum connections")
    connection_timeout_ms: PositiveInt | None = Field(default=None, description="Connection timeout")
    options: dict[str, Any] | None = Field(default=None, description="Backend-specific options")

    @property
    def backend_type(self) -> BackendType:
        return BackendType(self.type)  # type: ignore[attr-defined]

    @property
    def is_fallback(self) -> bool:
        return False


class InMemoryBackendConfig(BaseBackendConfig):
    """Process-local store for development and tests. Data is lost on exit."""

    type: Literal["in-memory"] = "in-memory"
    max_vectors: PositiveInt = Field(default=DEFAULT_MAX_VECTORS, description="Hard cap on stored vectors")
    fallback_from: BackendType | None = Field(
        default=None,
        alias="_fallbackFrom",
        description="Requested backend this config was substituted for (None if requested directly)",
    )

    @property
    def is_fallback(self) -> bool:
        return self.fallback_from is not None


class QdrantBackendConfig(BaseBackendConfig):
    """Qdrant server. url overrides host/port when both are given."""

    type: Literal["qdrant"] = "qdrant"
    url: ConnectionUrl = Field(default=None, description="Qdrant connection URL")
    host: str | None = Field(default=None, description="Qdrant host")
    port: PositiveInt | None = Field(default=None, description="Qdrant REST port (adapter default 6333)")
    api_key: str | None = Field(default=None, description="Qdrant API key")
    on_disk: bool | None = Field(default=None, description="Store vectors on disk")
    path: str | None = Field(default=None, description="Local storage path")
    distance: DistanceMetric = Field(default=DistanceMetric.COSINE, description="Distance metric")


class MilvusBackendConfig(BaseBackendConfig):
    """Milvus / Zilliz Cloud."""

    type: Literal["milvus"] = "milvus"
    url: ConnectionUrl = Field(default=None, description="Milvus connection URL")
    host: str | None = Field(default=None, description="Milvus host")
    port: PositiveInt | None = Field(default=None, description="Milvus port (adapter default 19530)")
    username: str | None = Field(default=None, description="Milvus username")
    password: str | None = Field(default=None, description="Milvus password")
    token: str | None = Field(default=None, description="Milvus API token")


class ChromaBackendConfig(BaseBackendConfig):
    """ChromaDB HTTP server."""

    type: Literal["chroma"] = "chroma"
    url: ConnectionUrl = Field(default=None, description="ChromaDB connection URL")
    host: str | None = Field(default=None, description="ChromaDB host")
    port: PositiveInt | None = Field(default=None, description="ChromaDB port (adapter default 8000)")
    ssl: bool = Field(default=False, description="Use TLS")
    headers: dict[str, str] | None = Field(default=None, description="Extra HTTP headers")
    path: str | None = Field(default=None, description="Custom API path")
    distance: DistanceMetric = Field(default=DistanceMetric.COSINE, description="Distance metric")


class PineconeBackendConfig(BaseBackendConfig):
    """Pinecone managed index. The index name is the collection name."""

    type: Literal["pinecone"] = "pinecone"
    api_key: str | None = Field(default=None, description="Pinecone API key (required)")
    namespace: str | None = Field(default=None, description="Namespace for multi-tenancy")
    metric: DistanceMetric = Field(default=DistanceMetric.COSINE, description="Distance metric")
    pod_type: str | None = Field(default=None, description="Pod type")
    replicas: PositiveInt | None = Field(default=None, description="Number of replicas")
    source_collection: str | None = Field(default=None, description="Source collection for cloning")
    cloud: str = Field(default="aws", description="Serverless cloud used when creating the index")
    region: str = Field(default="us-east-1", description="Serverless region used when creating the index")

    @property
    def index_name(self) -> str:
        return self.collection_name


BackendConfig = Annotated[
    Union[
        InMemoryBackendConfig,
        QdrantBackendConfig,
        MilvusBackendConfig,
        ChromaBackendConfig,
        PineconeBackendConfig,
    ],
    Field(discriminator="type"),
]

BACKEND_CONFIG_ADAPTER: TypeAdapter[BackendConfig] = TypeAdapter(BackendConfig)

CONFIG_MODELS: dict[BackendType, type[BaseBackendConfig]] = {
    BackendType.IN_MEMORY: InMemoryBackendConfig,
    BackendType.QDRANT: QdrantBackendConfig,
    BackendType.MILVUS: MilvusBackendConfig,
    BackendType.CHROMA: ChromaBackendConfig,
    BackendType.PINECONE: PineconeBackendConfig,
}

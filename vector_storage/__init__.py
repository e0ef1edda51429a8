"""Vector storage: config resolution, engine factory, and deduplicated multi-collection stores."""

from vector_storage.cache import ServiceCache, config_fingerprint, create_service_key
from vector_storage.config import (
    BackendConfig,
    ChromaBackendConfig,
    InMemoryBackendConfig,
    MilvusBackendConfig,
    PineconeBackendConfig,
    QdrantBackendConfig,
)
from vector_storage.errors import (
    VectorDimensionError,
    VectorSchemaMismatchError,
    VectorStoreCapacityError,
    VectorStoreConfigError,
    VectorStoreConnectionError,
    VectorStoreError,
    VectorStoreNotConnectedError,
)
from vector_storage.manager import (
    CollectionSet,
    MultiCollectionVectorManager,
    OrchestrationState,
    VectorStoreManager,
)
from vector_storage.ports import VectorStorePort
from vector_storage.provider import MultiCollectionVectorStores, VectorStoreHandle, VectorStoreProvider
from vector_storage.resolver import (
    get_vector_store_config_from_env,
    get_workspace_vector_store_config_from_env,
    is_qdrant_config_available,
    resolve_backend_config,
    resolve_workspace_backend_config,
)
from vector_storage.settings import ResolutionContext, VectorStoreEnvSettings, embedding_dimension
from vector_storage.storage_factory import StorageFactory
from vector_storage.types import BackendType, CollectionKind, DistanceMetric, normalize_distance
from vector_storage.validation import ConfigIssue, collect_config_issues, validate_backend_config

__all__ = [
    "BackendConfig",
    "BackendType",
    "ChromaBackendConfig",
    "CollectionKind",
    "CollectionSet",
    "ConfigIssue",
    "DistanceMetric",
    "InMemoryBackendConfig",
    "MilvusBackendConfig",
    "MultiCollectionVectorManager",
    "MultiCollectionVectorStores",
    "OrchestrationState",
    "PineconeBackendConfig",
    "QdrantBackendConfig",
    "ResolutionContext",
    "ServiceCache",
    "StorageFactory",
    "VectorDimensionError",
    "VectorSchemaMismatchError",
    "VectorStoreCapacityError",
    "VectorStoreConfigError",
    "VectorStoreConnectionError",
    "VectorStoreEnvSettings",
    "VectorStoreError",
    "VectorStoreHandle",
    "VectorStoreManager",
    "VectorStoreNotConnectedError",
    "VectorStorePort",
    "VectorStoreProvider",
    "collect_config_issues",
    "config_fingerprint",
    "create_service_key",
    "embedding_dimension",
    "get_vector_store_config_from_env",
    "get_workspace_vector_store_config_from_env",
    "is_qdrant_config_available",
    "normalize_distance",
    "resolve_backend_config",
    "resolve_workspace_backend_config",
    "validate_backend_config",
]

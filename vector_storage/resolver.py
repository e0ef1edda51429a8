"""Resolve a BackendConfig from an environment-like source.

Resolution order: backend type -> dimension (override, source, default) -> backend fields
-> reachability (required-field table) -> validated config, or a validated in-memory
substitute when the backend is unreachable.
Missing connection info is never an error here; it degrades to the in-memory store.
"""
from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

from vector_storage.config import BackendConfig
from vector_storage.constants import (
    DEFAULT_DIMENSION,
    DEFAULT_KNOWLEDGE_COLLECTION,
    DEFAULT_MAX_VECTORS,
    DEFAULT_PREFIX,
    DEFAULT_WORKSPACE_COLLECTION,
    DEFAULT_WORKSPACE_NAMESPACE,
    FIELD_API_KEY,
    FIELD_COLLECTION,
    FIELD_DIMENSION,
    FIELD_DISTANCE,
    FIELD_HOST,
    FIELD_MAX_VECTORS,
    FIELD_ON_DISK,
    FIELD_PASSWORD,
    FIELD_PORT,
    FIELD_TYPE,
    FIELD_URL,
    FIELD_USERNAME,
    PINECONE_METRIC,
    PINECONE_NAMESPACE,
    WORKSPACE_PREFIX,
)
from vector_storage.settings import (
    ResolutionContext,
    clean,
    parse_bool,
    parse_positive_int,
)
from vector_storage.telemetry import log_fallback
from vector_storage.types import BackendType, normalize_distance, parse_backend_type
from vector_storage.validation import missing_required_fields, validate_backend_config

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _Scope:
    """Which variable set a resolution reads, and its hard defaults."""

    name: str
    prefixes: tuple[str, ...]
    default_collection: str


DEFAULT_SCOPE = _Scope("default", (DEFAULT_PREFIX,), DEFAULT_KNOWLEDGE_COLLECTION)
WORKSPACE_SCOPE = _Scope("workspace", (WORKSPACE_PREFIX, DEFAULT_PREFIX), DEFAULT_WORKSPACE_COLLECTION)


class _ScopedReader:
    """Reads <prefix><FIELD>, trying each prefix in order. Each field falls back on its own."""

    def __init__(self, context: ResolutionContext, scope: _Scope) -> None:
        self._context = context
        self._scope = scope

    def text(self, field: str) -> str | None:
        for prefix in self._scope.prefixes:
            value = self._context.get(prefix + field)
            if value is not None:
                return value
        return None

    def positive_int(self, field: str) -> int | None:
        for prefix in self._scope.prefixes:
            value = parse_positive_int(self._context.get(prefix + field))
            if value is not None:
                return value
        return None

    def flag(self, field: str) -> bool | None:
        for prefix in self._scope.prefixes:
            value = parse_bool(self._context.get(prefix + field))
            if value is not None:
                return value
        return None

    def own(self, field: str) -> str | None:
        """Value from the scope's first prefix only (no inheritance)."""
        return self._context.get(self._scope.prefixes[0] + field)


def _in_memory_fields(reader: _ScopedReader, context: ResolutionContext, scope: _Scope) -> dict[str, Any]:
    return {"max_vectors": reader.positive_int(FIELD_MAX_VECTORS) or DEFAULT_MAX_VECTORS}


def _qdrant_fields(reader: _ScopedReader, context: ResolutionContext, scope: _Scope) -> dict[str, Any]:
    return {
        "url": reader.text(FIELD_URL),
        "host": reader.text(FIELD_HOST),
        "port": reader.positive_int(FIELD_PORT),
        "api_key": reader.text(FIELD_API_KEY),
        "distance": normalize_distance(reader.text(FIELD_DISTANCE)),
        "on_disk": reader.flag(FIELD_ON_DISK),
    }


def _milvus_fields(reader: _ScopedReader, context: ResolutionContext, scope: _Scope) -> dict[str, Any]:
    return {
        "url": reader.text(FIELD_URL),
        "host": reader.text(FIELD_HOST),
        "port": reader.positive_int(FIELD_PORT),
        "username": reader.text(FIELD_USERNAME),
        "password": reader.text(FIELD_PASSWORD),
        "token": reader.text(FIELD_API_KEY),
    }


def _chroma_fields(reader: _ScopedReader, context: ResolutionContext, scope: _Scope) -> dict[str, Any]:
    return {
        "url": reader.text(FIELD_URL),
        "host": reader.text(FIELD_HOST),
        "port": reader.positive_int(FIELD_PORT),
        "distance": normalize_distance(reader.text(FIELD_DISTANCE)),
    }


def _pinecone_fields(reader: _ScopedReader, context: ResolutionContext, scope: _Scope) -> dict[str, Any]:
    namespace = context.get(PINECONE_NAMESPACE)
    if scope is WORKSPACE_SCOPE:
        # Workspace vectors never share a namespace with knowledge vectors
        namespace = f"{namespace}-workspace" if namespace else DEFAULT_WORKSPACE_NAMESPACE
    return {
        "api_key": reader.text(FIELD_API_KEY),
        "namespace": namespace,
        "metric": normalize_distance(context.get(PINECONE_METRIC) or reader.text(FIELD_DISTANCE)),
    }


_FieldReader = Callable[[_ScopedReader, ResolutionContext, _Scope], dict[str, Any]]

BACKEND_FIELD_READERS: dict[BackendType, _FieldReader] = {
    BackendType.IN_MEMORY: _in_memory_fields,
    BackendType.QDRANT: _qdrant_fields,
    BackendType.MILVUS: _milvus_fields,
    BackendType.CHROMA: _chroma_fields,
    BackendType.PINECONE: _pinecone_fields,
}


def resolve_backend_config(context: ResolutionContext | None = None) -> BackendConfig:
    """Resolve the default (knowledge) store config from VECTOR_STORE_* variables."""
    return _resolve(context or ResolutionContext(), DEFAULT_SCOPE)


def resolve_workspace_backend_config(context: ResolutionContext | None = None) -> BackendConfig:
    """Resolve the workspace store config.

    Each field reads WORKSPACE_VECTOR_STORE_<FIELD>, then VECTOR_STORE_<FIELD>, then the
    hard default. The collection name does not inherit; it defaults to workspace_memory.
    """
    return _resolve(context or ResolutionContext(), WORKSPACE_SCOPE)


def _resolve(context: ResolutionContext, scope: _Scope) -> BackendConfig:
    reader = _ScopedReader(context, scope)

    raw_type = reader.text(FIELD_TYPE)
    backend = parse_backend_type(raw_type)
    if backend is None:
        if raw_type is not None:
            logger.warning(
                "Unknown vector store type %r for %s store; using in-memory",
                raw_type,
                scope.name,
            )
        backend = BackendType.IN_MEMORY

    collection_name = reader.own(FIELD_COLLECTION) or scope.default_collection
    dimension = _resolve_dimension(context, reader, scope)

    fields = BACKEND_FIELD_READERS[backend](reader, context, scope)
    missing = missing_required_fields(backend, fields)
    if missing:
        log_fallback(
            requested=backend.value,
            scope=scope.name,
            collection=collection_name,
            reason="; ".join(issue.message for issue in missing),
        )
        # Substitute is trivially valid except for the caller-supplied collection name
        return validate_backend_config(
            {
                "type": BackendType.IN_MEMORY.value,
                "collection_name": collection_name,
                "dimension": dimension,
                "max_vectors": reader.positive_int(FIELD_MAX_VECTORS) or DEFAULT_MAX_VECTORS,
                "fallback_from": backend,
            }
        )

    logger.debug(
        "Resolved %s store config",
        scope.name,
        extra={"backend": backend.value, "collection": collection_name, "dimension": dimension},
    )
    data: dict[str, Any] = {
        "type": backend.value,
        "collection_name": collection_name,
        "dimension": dimension,
    }
    data.update({k: v for k, v in fields.items() if v is not None})
    return validate_backend_config(data)


def _resolve_dimension(context: ResolutionContext, reader: _ScopedReader, scope: _Scope) -> int:
    source_dimension = reader.positive_int(FIELD_DIMENSION)
    override = context.valid_dimension_override
    if override is not None:
        if source_dimension is not None and source_dimension != override:
            logger.debug(
                "Overriding %s store dimension from embedding config (%s -> %s)",
                scope.name,
                source_dimension,
                override,
            )
        return override
    if context.dimension_override is not None:
        logger.debug("Ignoring invalid dimension override %r", context.dimension_override)
    return source_dimension or DEFAULT_DIMENSION


def is_qdrant_config_available(source: Mapping[str, str]) -> bool:
    """True when any Qdrant connection variable (url, host, port) is set."""
    return any(clean(source.get(DEFAULT_PREFIX + f)) for f in (FIELD_URL, FIELD_HOST, FIELD_PORT))


def get_vector_store_config_from_env(
    agent_config: Any = None,
    *,
    env_file: str | None = ".env",
) -> BackendConfig:
    """Config that create_vector_store_from_env would use, without connecting."""
    return resolve_backend_config(ResolutionContext.from_env(agent_config=agent_config, env_file=env_file))


def get_workspace_vector_store_config_from_env(
    agent_config: Any = None,
    *,
    env_file: str | None = ".env",
) -> BackendConfig:
    """Workspace config from the environment, without connecting."""
    return resolve_workspace_backend_config(
        ResolutionContext.from_env(agent_config=agent_config, env_file=env_file)
    )

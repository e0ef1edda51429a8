"""Enumerations shared by config, resolver, engines and managers."""
from __future__ import annotations

from enum import Enum


class BackendType(str, Enum):
    """Supported storage engines. Value is the discriminator used in configs and env."""

    IN_MEMORY = "in-memory"
    QDRANT = "qdrant"
    MILVUS = "milvus"
    CHROMA = "chroma"
    PINECONE = "pinecone"

    @property
    def is_remote(self) -> bool:
        return self is not BackendType.IN_MEMORY


class DistanceMetric(str, Enum):
    """Canonical distance metric. Engines translate to their native names."""

    COSINE = "cosine"
    EUCLIDEAN = "euclidean"
    DOT = "dot"


class CollectionKind(str, Enum):
    """Named collection slots managed together."""

    KNOWLEDGE = "knowledge"
    REFLECTION = "reflection"
    WORKSPACE = "workspace"


_DISTANCE_ALIASES: dict[str, DistanceMetric] = {
    "cosine": DistanceMetric.COSINE,
    "l2": DistanceMetric.EUCLIDEAN,
    "euclidean": DistanceMetric.EUCLIDEAN,
    "euclid": DistanceMetric.EUCLIDEAN,
    "ip": DistanceMetric.DOT,
    "dot": DistanceMetric.DOT,
    "dotproduct": DistanceMetric.DOT,
}


def normalize_distance(raw: str | DistanceMetric | None) -> DistanceMetric:
    """Map a user-supplied metric name to DistanceMetric. Unknown or unset -> cosine."""
    if isinstance(raw, DistanceMetric):
        return raw
    if not raw:
        return DistanceMetric.COSINE
    return _DISTANCE_ALIASES.get(raw.strip().lower(), DistanceMetric.COSINE)


def parse_backend_type(raw: str | None) -> BackendType | None:
    """Return the BackendType for raw, or None if raw is unset or unknown."""
    if raw is None:
        return None
    try:
        return BackendType(raw.strip().lower())
    except ValueError:
        return None

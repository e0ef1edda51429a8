"""Boundary validation for backend configs: report every violation, not just the first."""
from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ValidationError

from vector_storage.config import BACKEND_CONFIG_ADAPTER, BackendConfig
from vector_storage.constants import COLLECTION_NAME_PATTERN
from vector_storage.errors import VectorStoreConfigError
from vector_storage.settings import clean
from vector_storage.types import BackendType, parse_backend_type

_COLLECTION_NAME_RE = re.compile(COLLECTION_NAME_PATTERN)

INVALID_TYPE_MESSAGE = (
    "Invalid backend type. Expected 'in-memory', 'qdrant', 'milvus', 'chroma', or 'pinecone'."
)

# Per-backend required fields. Each rule is (fields, message): at least one of fields must be set.
REQUIRED_FIELDS: dict[BackendType, tuple[tuple[tuple[str, ...], str], ...]] = {
    BackendType.IN_MEMORY: (),
    BackendType.QDRANT: (
        (("url", "host"), "Qdrant backend requires either 'url' or 'host' to be specified"),
    ),
    BackendType.MILVUS: (
        (("url", "host"), "Milvus backend requires either 'url' or 'host' to be specified"),
    ),
    BackendType.CHROMA: (
        (("url", "host"), "ChromaDB backend requires either 'url' or 'host' to be specified"),
    ),
    BackendType.PINECONE: (
        (("api_key",), "Pinecone backend requires 'api_key' to be specified"),
    ),
}


@dataclass(frozen=True)
class ConfigIssue:
    """One validation failure. path is the dotted field path ('' for the whole config)."""

    path: str
    message: str
    code: str = "invalid"

    def __str__(self) -> str:
        return f"{self.path}: {self.message}" if self.path else self.message


def is_valid_collection_name(name: str) -> bool:
    """Letters, digits, underscore and hyphen only; checked after trimming."""
    return bool(_COLLECTION_NAME_RE.match(name.strip()))


def missing_required_fields(backend: BackendType, values: Mapping[str, Any]) -> list[ConfigIssue]:
    """Apply the required-field table for backend to values."""
    issues: list[ConfigIssue] = []
    for fields, message in REQUIRED_FIELDS[backend]:
        if not any(clean(values.get(f)) for f in fields):
            issues.append(ConfigIssue(path=fields[0], message=message, code="required"))
    return issues


def collect_config_issues(data: BackendConfig | Mapping[str, Any]) -> list[ConfigIssue]:
    """Return every violation in data (empty list when valid)."""
    issues, _ = _check(data)
    return issues


def validate_backend_config(data: BackendConfig | Mapping[str, Any]) -> BackendConfig:
    """Return the typed config or raise VectorStoreConfigError listing all issues."""
    issues, config = _check(data)
    if issues or config is None:
        raw = _as_mapping(data)
        backend = parse_backend_type(raw["type"]) if isinstance(raw.get("type"), str) else None
        raise VectorStoreConfigError(issues=issues, backend=backend)
    return config


def _as_mapping(data: BackendConfig | Mapping[str, Any]) -> dict[str, Any]:
    if isinstance(data, BaseModel):
        return data.model_dump()
    return dict(data)


def _check(data: BackendConfig | Mapping[str, Any]) -> tuple[list[ConfigIssue], BackendConfig | None]:
    raw = _as_mapping(data)
    issues: list[ConfigIssue] = []

    # Format is checked regardless of backend type or other failures
    name = raw.get("collection_name")
    if isinstance(name, str) and not is_valid_collection_name(name):
        issues.append(
            ConfigIssue(
                path="collection_name",
                message="Collection name must contain only letters, numbers, underscores, and hyphens",
                code="collection_name_format",
            )
        )

    config: BackendConfig | None = None
    try:
        config = BACKEND_CONFIG_ADAPTER.validate_python(raw)
    except ValidationError as e:
        issues.extend(_issues_from_pydantic(e, raw.get("type")))

    backend = parse_backend_type(raw["type"]) if isinstance(raw.get("type"), str) else None
    if backend is not None:
        issues.extend(missing_required_fields(backend, raw))

    return issues, (None if issues else config)


def _issues_from_pydantic(error: ValidationError, tag: Any) -> list[ConfigIssue]:
    out: list[ConfigIssue] = []
    for err in error.errors():
        loc = list(err.get("loc", ()))
        if loc and loc[0] == tag:
            loc = loc[1:]
        path = ".".join(str(p) for p in loc)
        kind = err.get("type", "invalid")
        if kind == "union_tag_invalid":
            out.append(ConfigIssue(path="type", message=INVALID_TYPE_MESSAGE, code=kind))
        elif kind == "union_tag_not_found":
            out.append(ConfigIssue(path="type", message="Backend 'type' is required", code=kind))
        else:
            out.append(ConfigIssue(path=path, message=err.get("msg", "invalid value"), code=kind))
    return out

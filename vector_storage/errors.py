"""Error taxonomy for vector storage. Codes are stable for logs and callers' retry decisions."""
from __future__ import annotations

from typing import TYPE_CHECKING

from vector_storage.types import BackendType

if TYPE_CHECKING:
    from vector_storage.validation import ConfigIssue


class VectorStoreError(Exception):
    """Base for all vector storage errors. details must not leak secrets."""

    def __init__(
        self,
        message: str,
        *,
        code: str = "UNKNOWN",
        retryable: bool = False,
        backend: BackendType | None = None,
        details: str | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.retryable = retryable
        self.backend = backend
        self.details = details or ""


class VectorStoreConfigError(VectorStoreError):
    """Configuration failed validation. issues holds every violation found."""

    def __init__(
        self,
        message: str = "Invalid vector store configuration",
        *,
        issues: list[ConfigIssue] | None = None,
        **kwargs: object,
    ) -> None:
        self.issues = list(issues or [])
        if self.issues:
            message = f"{message}: " + "; ".join(str(i) for i in self.issues)
        super().__init__(message, code="CONFIG_INVALID", retryable=False, **kwargs)


class VectorStoreConnectionError(VectorStoreError):
    """Connecting to a storage engine failed (transient from the caller's point of view)."""

    def __init__(self, message: str = "Vector store connection failed", **kwargs: object) -> None:
        super().__init__(message, code="CONNECTION_FAILED", retryable=True, **kwargs)


class VectorSchemaMismatchError(VectorStoreError):
    """Existing collection has a different vector size or distance than configured.

    Indicates a migration (new collection + reindex) is required.
    """

    def __init__(self, message: str = "Vector collection schema mismatch", **kwargs: object) -> None:
        super().__init__(message, code="SCHEMA_MISMATCH", retryable=False, **kwargs)


class VectorStoreCapacityError(VectorStoreError):
    """Insert would exceed the store's max_vectors cap."""

    def __init__(self, message: str = "Vector store capacity exceeded", **kwargs: object) -> None:
        super().__init__(message, code="CAPACITY_EXCEEDED", retryable=False, **kwargs)


class VectorDimensionError(VectorStoreError):
    """Vector length does not match the collection dimension."""

    def __init__(self, message: str = "Vector dimension mismatch", **kwargs: object) -> None:
        super().__init__(message, code="DIMENSION_MISMATCH", retryable=False, **kwargs)


class VectorStoreNotConnectedError(VectorStoreError):
    """Operation requires a connected store."""

    def __init__(self, message: str = "Vector store is not connected", **kwargs: object) -> None:
        super().__init__(message, code="NOT_CONNECTED", retryable=False, **kwargs)

"""Observability: redaction and structured log events. No ad hoc config dumps elsewhere."""
from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel

logger = logging.getLogger(__name__)

# Never log or print these raw
_SECRET_FIELDS = frozenset({"api_key", "password", "token"})
_REDACTED = "[REDACTED]"


def redact_config(config: BaseModel | Mapping[str, Any]) -> dict[str, Any]:
    """Return a JSON-friendly copy of config with secrets and header values masked."""
    if isinstance(config, BaseModel):
        data = config.model_dump(mode="json", exclude_none=True)
    else:
        data = {k: v for k, v in config.items() if v is not None}
    out: dict[str, Any] = {}
    for key, value in data.items():
        if key in _SECRET_FIELDS:
            out[key] = _REDACTED
        elif key == "headers" and isinstance(value, Mapping):
            out[key] = {h: _REDACTED for h in value}
        else:
            out[key] = value
    return out


def log_fallback(
    *,
    requested: str,
    scope: str,
    collection: str,
    reason: str,
) -> None:
    """Warn that a remote backend was replaced by the in-memory store."""
    logger.warning(
        "%s backend not configured for %s store (%s); falling back to in-memory storage",
        requested,
        scope,
        reason,
        extra={
            "event": "vector_store_fallback",
            "requested_backend": requested,
            "scope": scope,
            "collection": collection,
            "reason": reason,
        },
    )


def log_store_event(
    event: str,
    *,
    backend: str,
    collection: str,
    level: int = logging.INFO,
    **fields: Any,
) -> None:
    """Emit one structured lifecycle record (connect, disconnect, failure)."""
    extra: dict[str, Any] = {
        "event": event,
        "backend": backend,
        "collection": collection,
    }
    extra.update({k: v for k, v in fields.items() if v is not None})
    logger.log(level, "%s backend=%s collection=%s", event, backend, collection, extra=extra)

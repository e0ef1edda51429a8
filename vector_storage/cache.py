"""Process-lifetime service cache with single-flight construction.

Concurrent get_or_create calls for one key share a single in-flight construction task.
A successful result is reused for the cache's lifetime; a failure clears the key so the
next call constructs again. The cache is an owned object, passed to whoever needs it.
"""
from __future__ import annotations

import asyncio
import hashlib
import json
import logging
from collections.abc import Awaitable, Callable, Mapping
from enum import Enum
from typing import Any, Generic, TypeVar

from pydantic import BaseModel

logger = logging.getLogger(__name__)

T = TypeVar("T")


def create_service_key(service: str, params: Mapping[str, Any]) -> str:
    """Canonical key: sorted fields, None as "", booleans as true/false.

    Semantically identical requests collide; differing ones do not.
    """
    normalized: dict[str, str] = {}
    for name, value in params.items():
        if value is None:
            normalized[name] = ""
        elif isinstance(value, bool):
            normalized[name] = "true" if value else "false"
        elif isinstance(value, Enum):
            normalized[name] = str(value.value)
        else:
            normalized[name] = str(value)
    return f"{service}:{json.dumps(normalized, sort_keys=True, separators=(',', ':'))}"


def config_fingerprint(config: BaseModel) -> str:
    """SHA256 of the canonical JSON dump; distinguishes configs without putting secrets in keys."""
    return hashlib.sha256(config.model_dump_json().encode("utf-8")).hexdigest()


class ServiceCache(Generic[T]):
    """Keyed memoization of async constructions (at most one in flight per key)."""

    def __init__(self) -> None:
        self._entries: dict[str, asyncio.Task[T]] = {}
        self._hits = 0
        self._misses = 0

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def in_flight(self) -> int:
        return sum(1 for task in self._entries.values() if not task.done())

    def stats(self) -> dict[str, int]:
        return {
            "hits": self._hits,
            "misses": self._misses,
            "in_flight": self.in_flight,
            "ready": len(self._entries) - self.in_flight,
        }

    async def get_or_create(self, key: str, factory: Callable[[], Awaitable[T]]) -> T:
        """Return the value for key, constructing it with factory at most once at a time.

        Waiters on a failed construction all see the same exception; the key is then
        absent so a later call retries from scratch. Cancelling one waiter does not
        cancel the shared construction.
        """
        task = self._entries.get(key)
        if task is not None:
            self._hits += 1
            logger.debug("Service cache hit for %s (ready=%s)", key, task.done())
            return await asyncio.shield(task)

        self._misses += 1
        logger.debug("Service cache miss for %s; constructing", key)
        task = asyncio.ensure_future(factory())
        self._entries[key] = task
        task.add_done_callback(lambda t: self._on_done(key, t))
        return await asyncio.shield(task)

    def _on_done(self, key: str, task: asyncio.Task[T]) -> None:
        if task.cancelled():
            failed = True
        else:
            # Reading the exception also marks it retrieved for the event loop
            failed = task.exception() is not None
        if failed and self._entries.get(key) is task:
            del self._entries[key]
            logger.warning("Service construction failed for %s; entry cleared", key)

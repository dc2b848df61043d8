"""Runtime context shared by the webauthz operations.

The context bundles the injected capabilities (store, HTTP client,
logger, clock) and is passed explicitly to every operation.

Concurrency: unless ``settings.single_flight`` is enabled, nothing here
serializes work per key. Two concurrent refreshes of the same token, or
two concurrent cache fills for the same authorization server, will both
reach the network and both write records. Callers that share a context
across tasks should enable ``single_flight`` or hold their own per-key
lock.
"""

import asyncio
import contextlib
import logging
import time
import weakref
from collections.abc import AsyncIterator, Callable
from dataclasses import dataclass, field

import httpx

from .config import WebauthzSettings
from .storage.base import WebauthzStore

Clock = Callable[[], float]


class KeyedLocks:
    """Per-key asyncio locks that disappear once nobody holds or waits on them."""

    def __init__(self) -> None:
        self._locks: weakref.WeakValueDictionary[str, asyncio.Lock] = (
            weakref.WeakValueDictionary()
        )

    def get(self, key: str) -> asyncio.Lock:
        lock = self._locks.get(key)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[key] = lock
        return lock


@dataclass
class WebauthzContext:
    """Capabilities and settings for the webauthz operations."""

    store: WebauthzStore
    settings: WebauthzSettings
    http: httpx.AsyncClient | None = None
    logger: logging.Logger = field(default_factory=lambda: logging.getLogger("webauthz"))
    clock: Clock = time.time
    locks: KeyedLocks = field(default_factory=KeyedLocks)

    def __post_init__(self) -> None:
        if self.http is None:
            self.http = httpx.AsyncClient(timeout=self.settings.http_timeout)

    def now(self) -> float:
        """Current time in epoch seconds."""
        return self.clock()

    @contextlib.asynccontextmanager
    async def guard(self, key: str) -> AsyncIterator[None]:
        """Hold the lock for ``key`` when single-flight is enabled."""
        if not self.settings.single_flight:
            yield
            return
        async with self.locks.get(key):
            yield

    async def aclose(self) -> None:
        """Close the HTTP client."""
        assert self.http is not None
        await self.http.aclose()

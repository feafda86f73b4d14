"""Per-environment route cache with TTL and in-flight fetch coalescing."""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Awaitable, Callable, Dict, Optional, Tuple

from .models import Environment, Route

RouteLoader = Callable[[Environment], Awaitable[Tuple[Route, ...]]]

DEFAULT_ROUTE_TTL_SECONDS = 300


@dataclass(frozen=True)
class CacheEntry:
    routes: Tuple[Route, ...]
    fetched_at: float


def _consume_exception(task: asyncio.Task) -> None:
    # A load whose callers were all cancelled may fail with nobody awaiting it
    if not task.cancelled():
        task.exception()


class RouteCache:
    """Holds one route set per environment.

    Entries are replaced wholesale; a failed load never touches the previous
    entry. Concurrent misses for the same environment share one load, which
    runs as its own task so a cancelled caller never cancels the others.
    ``invalidate`` bumps the environment's epoch: loads started before it
    still answer their callers but never write the cache.
    """

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_ROUTE_TTL_SECONDS,
        *,
        clock: Callable[[], float] = time.monotonic,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._logger = logger or logging.getLogger(__name__)
        self._entries: Dict[Environment, CacheEntry] = {}
        self._inflight: Dict[Environment, asyncio.Task] = {}
        self._epochs: Dict[Environment, int] = {}

    def peek(self, environment: Environment) -> Optional[CacheEntry]:
        return self._entries.get(environment)

    def is_fresh(self, environment: Environment) -> bool:
        entry = self._entries.get(environment)
        if entry is None or not entry.routes:
            return False
        return (self._clock() - entry.fetched_at) < self.ttl_seconds

    def invalidate(self, environment: Environment) -> None:
        """Drop the cached entry and detach any in-flight load from the cache."""
        self._epochs[environment] = self._epochs.get(environment, 0) + 1
        self._inflight.pop(environment, None)
        if self._entries.pop(environment, None) is not None:
            self._logger.debug("Route cache invalidated for %s", environment.value)

    async def get_or_load(
        self,
        environment: Environment,
        loader: RouteLoader,
        *,
        force: bool = False,
    ) -> Tuple[Route, ...]:
        if not force and self.is_fresh(environment):
            return self._entries[environment].routes

        task = self._inflight.get(environment)
        if task is None:
            task = asyncio.create_task(self._load(environment, loader, self._epochs.get(environment, 0)))
            task.add_done_callback(_consume_exception)
            self._inflight[environment] = task
        return await asyncio.shield(task)

    async def _load(self, environment: Environment, loader: RouteLoader, epoch: int) -> Tuple[Route, ...]:
        try:
            routes = await loader(environment)
        finally:
            if self._inflight.get(environment) is asyncio.current_task():
                del self._inflight[environment]

        if self._epochs.get(environment, 0) != epoch:
            self._logger.debug("Route load for %s finished after invalidation; not cached", environment.value)
            return routes
        self._entries[environment] = CacheEntry(routes=routes, fetched_at=self._clock())
        return routes

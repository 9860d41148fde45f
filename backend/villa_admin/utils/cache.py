import asyncio
import logging
import threading
import time
from collections import OrderedDict
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)


class TTLCache:
    """
    Small in-process cache with per-entry expiry.

    When full, the oldest inserted entry is dropped to make room.
    """

    def __init__(self, max_size: int = 100, default_ttl: int = 300, clock: Callable[[], float] = time.monotonic):
        self.max_size = max_size
        self.default_ttl = default_ttl
        self._clock = clock
        self._entries = OrderedDict()
        self._lock = threading.RLock()
        self._generation = 0

    def get(self, key: str, default: Any = None) -> Any:
        with self._lock:
            return self._get(key, default)

    def _get(self, key, default):
        entry = self._entries.get(key)
        if entry is None:
            return default

        value, expires_at = entry
        if self._clock() > expires_at:
            del self._entries[key]
            return default
        return value

    def set(self, key: str, value: Any, ttl: Optional[int] = None) -> None:
        ttl = self.default_ttl if ttl is None else ttl
        with self._lock:
            if key in self._entries:
                del self._entries[key]
            elif len(self._entries) >= self.max_size:
                self._entries.popitem(last=False)
            self._entries[key] = (value, self._clock() + ttl)

    @property
    def generation(self) -> int:
        """Bumped whenever entries are dropped on purpose."""
        return self._generation

    def set_if_current(self, key: str, value: Any, generation: int, ttl: Optional[int] = None) -> bool:
        """Store only if nothing was invalidated since `generation` was read."""
        with self._lock:
            if generation != self._generation:
                return False
            self.set(key, value, ttl)
        return True

    def get_or_set(self, key: str, factory: Callable[[], Any], ttl: Optional[int] = None) -> Any:
        marker = object()
        value = self.get(key, marker)
        if value is marker:
            generation = self._generation
            value = factory()
            self.set_if_current(key, value, generation, ttl)
        return value

    def delete(self, key: str) -> bool:
        with self._lock:
            self._generation += 1
            return self._entries.pop(key, None) is not None

    def invalidate(self, prefix: str) -> int:
        with self._lock:
            keys = [key for key in self._entries if key.startswith(prefix)]
            self._generation += 1
            for key in keys:
                del self._entries[key]
        return len(keys)

    def clear(self) -> None:
        with self._lock:
            self._generation += 1
            self._entries.clear()

    def cleanup(self) -> int:
        now = self._clock()
        with self._lock:
            expired = [key for key, (_, expires_at) in self._entries.items() if now > expires_at]
            for key in expired:
                del self._entries[key]
        return len(expired)

    def __contains__(self, key: str) -> bool:
        marker = object()
        return self.get(key, marker) is not marker

    def __len__(self) -> int:
        return len(self._entries)


class CacheLifecycle:
    """
    Owns the application cache plus its two timers: the expiry sweep and
    the dashboard refresh poll. Created at startup, stopped at shutdown.
    """

    def __init__(self, cache: TTLCache, sweep_seconds: int = 3600, poll_seconds: int = 60):
        self.cache = cache
        self.sweep_seconds = sweep_seconds
        self.poll_seconds = poll_seconds
        self._refreshers = []
        self._tasks = []

    @property
    def running(self) -> bool:
        return any(not task.done() for task in self._tasks)

    def add_refresher(self, refresher: Callable[[TTLCache], None]) -> None:
        self._refreshers.append(refresher)

    def refresh(self) -> None:
        for refresher in self._refreshers:
            try:
                refresher(self.cache)
            except Exception as exc:
                logger.error("Cache refresh failed: %s", exc)

    async def start(self) -> None:
        if self.running:
            return
        self._tasks = [
            asyncio.create_task(self._every(self.sweep_seconds, self._sweep)),
            asyncio.create_task(self._every(self.poll_seconds, self.refresh)),
        ]
        logger.info(
            "Cache timers started (sweep every %ss, refresh every %ss)",
            self.sweep_seconds,
            self.poll_seconds,
        )

    async def stop(self) -> None:
        for task in self._tasks:
            task.cancel()
        for task in self._tasks:
            try:
                await task
            except asyncio.CancelledError:
                pass
        self._tasks = []
        self.cache.clear()
        logger.info("Cache timers stopped")

    def _sweep(self) -> None:
        removed = self.cache.cleanup()
        if removed:
            logger.info("Cache sweep removed %s expired entries", removed)

    async def _every(self, seconds: int, job: Callable[[], None]) -> None:
        while True:
            await asyncio.sleep(seconds)
            await asyncio.to_thread(job)


def get_cache(request) -> Optional[TTLCache]:
    lifecycle = getattr(request.app.state, "cache_lifecycle", None)
    return lifecycle.cache if lifecycle else None


def invalidate_dashboard(request) -> None:
    cache = get_cache(request)
    if cache is not None:
        cache.invalidate("dashboard:")

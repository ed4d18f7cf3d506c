from __future__ import annotations
import os, asyncio, logging, threading, time
from typing import Any, Callable, Dict, NamedTuple, Optional

log = logging.getLogger(__name__)

DEFAULT_TTL = float(os.getenv("CACHE_DEFAULT_TTL", "300"))          # 5 min
SWEEP_INTERVAL = float(os.getenv("CACHE_SWEEP_INTERVAL", "600"))    # 10 min

class CacheEntry(NamedTuple):
    value: Any
    created_at: float
    ttl: float

    def expired(self, now: float) -> bool:
        return now - self.created_at > self.ttl

class TTLCache:
    """In-memory cache with per-entry TTL (seconds).

    Expired entries are dropped when read and by a periodic sweep
    (``start_sweeper``). Misses are never errors: ``get`` returns ``default``.
    """

    def __init__(self, ttl: float = DEFAULT_TTL, clock: Callable[[], float] = time.monotonic):
        self.ttl = ttl
        self._clock = clock
        self._store: Dict[str, CacheEntry] = {}
        self._lock = threading.Lock()
        self._task: Optional[asyncio.Task] = None

    def get(self, key: str, default: Any = None):
        with self._lock:
            e = self._store.get(key)
            if e is None:
                return default
            if e.expired(self._clock()):
                self._store.pop(key, None)
                return default
            return e.value

    def set(self, key: str, value: Any, ttl: Optional[float] = None):
        with self._lock:
            self._store[key] = CacheEntry(value, self._clock(), self.ttl if ttl is None else ttl)

    def clear(self, key: Optional[str] = None):
        with self._lock:
            if key is None:
                self._store.clear()
            else:
                self._store.pop(key, None)

    def cleanup(self) -> int:
        with self._lock:
            now = self._clock()
            dead = [k for k, e in self._store.items() if e.expired(now)]
            for k in dead:
                del self._store[k]
        return len(dead)

    def __len__(self) -> int:
        """Live entries only; expired ones still awaiting the sweep are not counted."""
        with self._lock:
            now = self._clock()
            return sum(1 for e in self._store.values() if not e.expired(now))

    def __contains__(self, key: str) -> bool:
        with self._lock:
            e = self._store.get(key)
            return e is not None and not e.expired(self._clock())

    # --- barrido periódico ---

    async def _sweep(self, interval: float):
        while True:
            await asyncio.sleep(interval)
            try:
                n = self.cleanup()
                if n:
                    log.debug("cache sweep evicted %d entries", n)
            except Exception:
                log.exception("cache sweep failed")

    def start_sweeper(self, interval: float = SWEEP_INTERVAL):
        if not self._task or self._task.done():
            self._task = asyncio.create_task(self._sweep(interval))

    async def stop_sweeper(self):
        task, self._task = self._task, None
        if task and not task.done():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass

    @property
    def sweeping(self) -> bool:
        return self._task is not None and not self._task.done()

default_cache = TTLCache()

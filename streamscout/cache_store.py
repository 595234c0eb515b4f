from __future__ import annotations

"""
streamscout/cache_store.py

Caché en memoria key -> value con TTL por entrada + LRU opcional + sweeper.

- get(): si la entrada ha caducado la elimina y devuelve None.
- put(): reemplaza la entrada completa (nunca se muta in-place).
- sweep(): elimina todas las caducadas (el sweeper lo ejecuta periódicamente).
- Thread-safe: un único RLock protege el OrderedDict.

Solo vive lo que vive el proceso. Es una optimización, nunca una dependencia
de corrección.
"""

import threading
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Final

from streamscout import logger

DEFAULT_TTL_SECONDS: Final[float] = 24 * 60 * 60
DEFAULT_SWEEP_INTERVAL_SECONDS: Final[float] = 60 * 60
DEFAULT_MAX_ENTRIES: Final[int] = 5000


@dataclass(frozen=True)
class CacheEntry:
    """
    - value: objeto cacheado (se devuelve tal cual, sin copias).
    - stored_at: time.monotonic() en el momento del put.
    """

    value: object
    stored_at: float


class CacheStore:
    def __init__(
        self,
        *,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        max_entries: int = DEFAULT_MAX_ENTRIES,
    ) -> None:
        self._ttl_seconds = max(0.0, float(ttl_seconds))
        self._max_entries = max(0, int(max_entries))

        self._lock = threading.RLock()
        self._entries: "OrderedDict[str, CacheEntry]" = OrderedDict()

        self._stats: dict[str, int] = {
            "hits": 0,
            "misses": 0,
            "expired": 0,
            "evictions": 0,
            "sweeps": 0,
        }

        self._sweeper: threading.Thread | None = None
        self._sweeper_stop = threading.Event()

    @property
    def ttl_seconds(self) -> float:
        return self._ttl_seconds

    def _is_expired(self, entry: CacheEntry, now: float) -> bool:
        return (now - entry.stored_at) > self._ttl_seconds

    def get(self, key: str) -> object | None:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                self._stats["misses"] += 1
                return None

            if self._is_expired(entry, time.monotonic()):
                del self._entries[key]
                self._stats["expired"] += 1
                self._stats["misses"] += 1
                return None

            self._entries.move_to_end(key)
            self._stats["hits"] += 1
            return entry.value

    def put(self, key: str, value: object) -> None:
        with self._lock:
            self._entries[key] = CacheEntry(value=value, stored_at=time.monotonic())
            self._entries.move_to_end(key)
            if self._max_entries <= 0:
                return
            while len(self._entries) > self._max_entries:
                self._entries.popitem(last=False)
                self._stats["evictions"] += 1

    def sweep(self) -> int:
        """Elimina todas las entradas caducadas. Devuelve cuántas se borraron."""
        now = time.monotonic()
        with self._lock:
            expired = [k for k, e in self._entries.items() if self._is_expired(e, now)]
            for k in expired:
                del self._entries[k]
            self._stats["expired"] += len(expired)
            self._stats["sweeps"] += 1
        if expired:
            logger.debug_ctx("CACHE", f"sweep removed {len(expired)} expired entries")
        return len(expired)

    def size(self) -> int:
        with self._lock:
            return len(self._entries)

    def __len__(self) -> int:
        return self.size()

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def stats(self) -> dict[str, int]:
        with self._lock:
            out = dict(self._stats)
            out["entries"] = len(self._entries)
            return out

    # ------------------------------------------------------------
    # Sweeper en background
    # ------------------------------------------------------------

    def _sweep_loop(self, interval_seconds: float) -> None:
        while not self._sweeper_stop.wait(interval_seconds):
            try:
                self.sweep()
            except Exception as exc:
                logger.error(f"cache sweep failed: {exc!r}")

    def start_sweeper(self, interval_seconds: float = DEFAULT_SWEEP_INTERVAL_SECONDS) -> None:
        """Arranca el sweeper (idempotente)."""
        with self._lock:
            if self._sweeper is not None and self._sweeper.is_alive():
                return
            self._sweeper_stop.clear()
            self._sweeper = threading.Thread(
                target=self._sweep_loop,
                args=(max(0.05, float(interval_seconds)),),
                name="streamscout-cache-sweeper",
                daemon=True,
            )
            self._sweeper.start()

    def stop_sweeper(self, timeout: float | None = 2.0) -> None:
        with self._lock:
            thread = self._sweeper
            self._sweeper = None
        self._sweeper_stop.set()
        if thread is not None:
            thread.join(timeout=timeout)

    @property
    def sweeper_running(self) -> bool:
        thread = self._sweeper
        return thread is not None and thread.is_alive()

from __future__ import annotations

"""
streamscout/quota_tracker.py

Contadores de uso de los proveedores (solo observabilidad).

- OMDb: contador diario estimado; se resetea de forma perezosa cuando han
  pasado más de 24h desde el último reset (se comprueba al incrementar/leer).
- RapidAPI: remaining/limit = últimos valores vistos en las cabeceras
  x-ratelimit-*; None hasta la primera observación.

Nunca bloquea ni throttlea llamadas.
"""

import threading
import time
from typing import Final

from streamscout.models import QuotaSnapshot

_DAY_SECONDS: Final[float] = 24 * 60 * 60

DEFAULT_OMDB_DAILY_LIMIT: Final[int] = 1000


class QuotaTracker:
    def __init__(self, *, search_daily_limit: int | None = DEFAULT_OMDB_DAILY_LIMIT) -> None:
        self._lock = threading.Lock()
        self._search_daily_limit = search_daily_limit

        self._search_daily_count = 0
        self._search_last_reset = time.time()

        self._availability_remaining: int | None = None
        self._availability_limit: int | None = None

    def _maybe_reset_unlocked(self, now: float) -> None:
        if now - self._search_last_reset > _DAY_SECONDS:
            self._search_daily_count = 0
            self._search_last_reset = now

    def record_search_call(self) -> int:
        now = time.time()
        with self._lock:
            self._maybe_reset_unlocked(now)
            self._search_daily_count += 1
            return self._search_daily_count

    def record_availability_telemetry(
        self, *, remaining: int | None, limit: int | None
    ) -> None:
        with self._lock:
            if remaining is not None:
                self._availability_remaining = remaining
            if limit is not None:
                self._availability_limit = limit

    def snapshot(self) -> QuotaSnapshot:
        now = time.time()
        with self._lock:
            self._maybe_reset_unlocked(now)
            return QuotaSnapshot(
                search_daily_count=self._search_daily_count,
                search_reset_at=self._search_last_reset + _DAY_SECONDS,
                search_daily_limit=self._search_daily_limit,
                availability_remaining=self._availability_remaining,
                availability_limit=self._availability_limit,
            )

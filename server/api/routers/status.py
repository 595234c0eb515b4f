from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends

from server.api.deps import get_cache_store, get_quota_tracker
from server.api.services.payloads import status_payload
from streamscout.cache_store import CacheStore
from streamscout.quota_tracker import QuotaTracker

router = APIRouter(prefix="/api")


@router.get("/status")
def api_status(
    quota: QuotaTracker = Depends(get_quota_tracker),
    cache: CacheStore = Depends(get_cache_store),
) -> dict[str, Any]:
    """Uso estimado de cuotas + tamaño de la caché. Nunca llama a los proveedores."""
    return status_payload(
        quota.snapshot(),
        cache_entries=cache.size(),
        cache_ttl_seconds=cache.ttl_seconds,
    )

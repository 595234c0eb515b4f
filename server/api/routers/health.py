from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Response

from server.api.deps import get_cache_store, get_settings
from server.api.services import metrics
from server.api.settings import Settings
from streamscout.cache_store import CacheStore

router = APIRouter()


@router.get("/health")
def health() -> dict[str, Any]:
    return {"ok": True, "ts": datetime.now(timezone.utc).isoformat()}


@router.get("/ready")
def ready(settings: Settings = Depends(get_settings)) -> dict[str, Any]:
    """
    Readiness: ambas API keys configuradas. No llama a los proveedores.
    """
    issues: dict[str, str] = {}
    if not settings.omdb_api_key:
        issues["omdb"] = "OMDB_API_KEY not configured"
    if not settings.rapidapi_key:
        issues["rapidapi"] = "RAPIDAPI_KEY not configured"

    if issues:
        raise HTTPException(status_code=503, detail={"ready": False, "issues": issues})
    return {"ready": True, "ts": datetime.now(timezone.utc).isoformat()}


@router.get("/metrics")
def metrics_endpoint(cache: CacheStore = Depends(get_cache_store)) -> Response:
    gauges = {f"cache_{k}": v for k, v in cache.stats().items()}
    body = metrics.render_prometheus(gauges)
    return Response(content=body, media_type="text/plain; version=0.0.4")

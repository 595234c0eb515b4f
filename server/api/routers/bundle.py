from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Depends

from server.api.deps import get_bundle_analyzer
from server.api.services import metrics
from server.api.services.payloads import bundle_payload
from streamscout.bundle_analyzer import BundleAnalyzer
from streamscout.errors import InvalidInputError

router = APIRouter(prefix="/api")


@router.post("/bundle")
def bundle(
    payload: Any = Body(None),
    analyzer: BundleAnalyzer = Depends(get_bundle_analyzer),
) -> dict[str, Any]:
    """
    Body: {"movies": ["...", ...]} (1..10).

    Body sin esquema: cualquier forma inválida => InvalidInputError (400).
    """
    metrics.inc("bundle_requests_total", 1)

    movies = payload.get("movies") if isinstance(payload, dict) else None
    if not isinstance(movies, list):
        raise InvalidInputError("Please provide 1-10 movie names")

    return bundle_payload(analyzer.analyze(movies))

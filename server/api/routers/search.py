from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from server.api.deps import get_movie_resolver
from server.api.services.payloads import movie_payload
from streamscout.movie_resolver import MovieResolver

router = APIRouter(prefix="/api")


@router.get("/search")
def search_movies(
    q: str | None = Query(None, description="Texto libre (título)"),
    resolver: MovieResolver = Depends(get_movie_resolver),
) -> Any:
    """
    Top-5 de OMDb. Los UpstreamError los traduce el handler global
    (401/429/500).
    """
    query = (q or "").strip()
    if not query:
        return JSONResponse(status_code=400, content={"error": "Query required"})

    return [movie_payload(m) for m in resolver.search(query)]

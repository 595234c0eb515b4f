from __future__ import annotations

from typing import Protocol

from streamscout.models import MovieSummary


class SearchGateway(Protocol):
    def search(self, query: str) -> list[MovieSummary]: ...


class MovieResolver:
    """
    Texto libre -> MovieSummary.

    - search(): top-5 completo (endpoint /api/search).
    - resolve(): mejor coincidencia (bundle) o None si no hay resultados.

    Los fallos del gateway se propagan tal cual (UpstreamError). La caché vive
    en el gateway: repetir la misma query dentro del TTL no vuelve a la red.
    """

    def __init__(self, gateway: SearchGateway) -> None:
        self._gateway = gateway

    def search(self, query: str) -> list[MovieSummary]:
        return self._gateway.search(query)

    def resolve(self, query: str) -> MovieSummary | None:
        results = self._gateway.search(query)
        return results[0] if results else None

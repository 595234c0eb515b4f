from __future__ import annotations

"""
streamscout/omdb_gateway.py

Gateway de búsqueda de metadatos (OMDb, endpoint `?s=`).

Contrato:
- search(query) -> list[MovieSummary] (máx. 5, orden del proveedor)
- Sin resultados ("Movie not found!", "Too many results.", ...) => [] (éxito).
- Fallos clasificados como UpstreamError:
    - RATE_LIMITED: "Request limit reached!" (con cualquier status) / HTTP 429
    - AUTH_INVALID: "Invalid API key!" / HTTP 401 sin Error / key no configurada
    - UPSTREAM_UNAVAILABLE: red, timeout, status inesperado, JSON inválido

Cache-first:
- key "search:<query normalizada>" (lower + strip).
- Se cachea toda respuesta válida, también la vacía; los fallos nunca.

Cada round-trip HTTP incrementa el contador diario del QuotaTracker.

OMDb devuelve los errores en el body, con HTTP 200 o no (la cuota diaria
agotada llega como 401):
  {"Response": "False", "Error": "..."}
"""

from collections.abc import Mapping
from typing import Final

import requests
from requests.exceptions import RequestException, Timeout

from streamscout import logger
from streamscout.cache_store import CacheStore
from streamscout.errors import SERVICE_OMDB, ErrorKind, UpstreamError
from streamscout.models import MovieSummary
from streamscout.quota_tracker import QuotaTracker

DEFAULT_BASE_URL: Final[str] = "https://www.omdbapi.com/"
DEFAULT_TIMEOUT_SECONDS: Final[float] = 10.0
MAX_RESULTS: Final[int] = 5

_CACHE_PREFIX: Final[str] = "search:"


def normalize_query(query: str) -> str:
    return (query or "").strip().lower()


def search_cache_key(query: str) -> str:
    return f"{_CACHE_PREFIX}{normalize_query(query)}"


def _is_rate_limit_error(err: str) -> bool:
    return "limit" in err.lower()


def _is_invalid_api_key(err: str) -> bool:
    return "api key" in err.lower()


def _error_field(resp: requests.Response) -> str:
    """`Error` del body JSON si lo hay (OMDb lo manda también con status != 200)."""
    try:
        data = resp.json()
    except ValueError:
        return ""
    if isinstance(data, Mapping):
        err = data.get("Error")
        if isinstance(err, str):
            return err
    return ""


def _poster_or_none(value: object) -> str | None:
    if not isinstance(value, str):
        return None
    s = value.strip()
    if not s or s.upper() == "N/A":
        return None
    return s


def parse_search_results(data: Mapping[str, object]) -> list[MovieSummary]:
    """Mapea `Search[]` de OMDb a MovieSummary (top-N). Ignora items sin imdbID."""
    raw = data.get("Search")
    if not isinstance(raw, list):
        return []

    out: list[MovieSummary] = []
    for item in raw:
        if not isinstance(item, Mapping):
            continue
        imdb_id = str(item.get("imdbID") or "").strip()
        if not imdb_id:
            continue
        out.append(
            MovieSummary(
                id=imdb_id,
                title=str(item.get("Title") or ""),
                year=str(item.get("Year") or ""),
                poster_url=_poster_or_none(item.get("Poster")),
            )
        )
        if len(out) >= MAX_RESULTS:
            break
    return out


class OmdbSearchGateway:
    def __init__(
        self,
        *,
        api_key: str | None,
        cache: CacheStore,
        quota: QuotaTracker,
        session: requests.Session,
        base_url: str = DEFAULT_BASE_URL,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        self._api_key = (api_key or "").strip()
        self._cache = cache
        self._quota = quota
        self._session = session
        self._base_url = (base_url or "").strip() or DEFAULT_BASE_URL
        self._timeout_seconds = max(0.5, float(timeout_seconds))

    def _fail(self, kind: ErrorKind, query: str, *, status: int | None, detail: str) -> UpstreamError:
        logger.warning(
            f"OMDb search failed: kind={kind.value} status={status} query={query!r} ({detail})"
        )
        return UpstreamError(kind, service=SERVICE_OMDB, status=status, detail=detail)

    def _request(self, query: str) -> Mapping[str, object]:
        params = {"apikey": self._api_key, "s": query}
        try:
            resp = self._session.get(self._base_url, params=params, timeout=self._timeout_seconds)
        except Timeout:
            raise self._fail(ErrorKind.UPSTREAM_UNAVAILABLE, query, status=None, detail="timeout")
        except RequestException as exc:
            # Nunca el mensaje de la excepción: incluye la URL con la apikey.
            raise self._fail(
                ErrorKind.UPSTREAM_UNAVAILABLE, query, status=None, detail=type(exc).__name__
            )

        self._quota.record_search_call()

        status = int(resp.status_code)
        if status != 200:
            # OMDb agota la cuota diaria con HTTP 401 + "Request limit reached!"
            failure = self._classify_error_field(_error_field(resp), query, status=status)
            if failure is not None:
                raise failure
            if status == 401:
                raise self._fail(ErrorKind.AUTH_INVALID, query, status=status, detail="invalid api key")
            if status == 429:
                raise self._fail(ErrorKind.RATE_LIMITED, query, status=status, detail="http 429")
            raise self._fail(ErrorKind.UPSTREAM_UNAVAILABLE, query, status=status, detail="unexpected status")

        try:
            data = resp.json()
        except ValueError:
            raise self._fail(ErrorKind.UPSTREAM_UNAVAILABLE, query, status=status, detail="invalid json")

        if not isinstance(data, Mapping):
            raise self._fail(ErrorKind.UPSTREAM_UNAVAILABLE, query, status=status, detail="json is not an object")
        return data

    def _classify_error_field(self, err: str, query: str, *, status: int) -> UpstreamError | None:
        if _is_rate_limit_error(err):
            return self._fail(ErrorKind.RATE_LIMITED, query, status=status, detail="request limit reached")
        if _is_invalid_api_key(err):
            return self._fail(ErrorKind.AUTH_INVALID, query, status=status, detail="invalid api key")
        return None

    def search(self, query: str) -> list[MovieSummary]:
        key = search_cache_key(query)
        cached = self._cache.get(key)
        if isinstance(cached, tuple):
            logger.debug_ctx("OMDB", f"cache hit {key!r}")
            return list(cached)

        if not self._api_key:
            raise self._fail(ErrorKind.AUTH_INVALID, query, status=None, detail="OMDB_API_KEY not configured")

        data = self._request(query.strip())

        err = data.get("Error")
        if data.get("Response") == "False" or isinstance(err, str):
            err_s = str(err or "")
            failure = self._classify_error_field(err_s, query, status=200)
            if failure is not None:
                raise failure
            # "Movie not found!" / "Too many results." => respuesta válida sin resultados
            logger.debug_ctx("OMDB", f"no results for {query!r}: {err_s}")
            results: list[MovieSummary] = []
        else:
            results = parse_search_results(data)

        self._cache.put(key, tuple(results))
        return results

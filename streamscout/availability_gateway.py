from __future__ import annotations

"""
streamscout/availability_gateway.py

Gateway de disponibilidad en streaming (RapidAPI "Streaming Availability",
GET /shows/{imdb_id}).

Contrato:
- lookup(title_id) -> AvailabilityResult
    - 404 => not_found=True (éxito: el título no está en su base de datos)
    - 429 => RATE_LIMITED
    - 402 => QUOTA_EXCEEDED (cuota mensual)
    - 403 => ACCESS_DENIED
    - 401 => AUTH_INVALID
    - red / timeout / otro status / JSON inválido => UPSTREAM_UNAVAILABLE
- lookup_or_degraded(title_id): igual, pero UPSTREAM_UNAVAILABLE se convierte
  en un resultado vacío con degraded=True.

Las opciones se leen de streamingOptions[<país>] y se clasifican por igualdad
exacta del campo `type` (subscription/rent/buy); el resto se descarta.

Telemetría: cabeceras x-ratelimit-requests-remaining / -limit => QuotaTracker.
"""

from collections.abc import Mapping
from typing import Final
from urllib.parse import quote

import requests
from requests.exceptions import RequestException, Timeout

from streamscout import logger
from streamscout.cache_store import CacheStore
from streamscout.errors import SERVICE_RAPIDAPI, ErrorKind, UpstreamError
from streamscout.models import AvailabilityResult, OfferType, ProviderOption
from streamscout.quota_tracker import QuotaTracker

DEFAULT_HOST: Final[str] = "streaming-availability.p.rapidapi.com"
DEFAULT_COUNTRY: Final[str] = "in"
DEFAULT_TIMEOUT_SECONDS: Final[float] = 10.0

HEADER_REMAINING: Final[str] = "x-ratelimit-requests-remaining"
HEADER_LIMIT: Final[str] = "x-ratelimit-requests-limit"

_CACHE_PREFIX: Final[str] = "providers:"

_STATUS_KINDS: Final[dict[int, ErrorKind]] = {
    401: ErrorKind.AUTH_INVALID,
    402: ErrorKind.QUOTA_EXCEEDED,
    403: ErrorKind.ACCESS_DENIED,
    429: ErrorKind.RATE_LIMITED,
}


def providers_cache_key(title_id: str) -> str:
    return f"{_CACHE_PREFIX}{title_id}"


def _safe_int(value: object) -> int | None:
    if value is None:
        return None
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        return None


def _opt_str(value: object) -> str | None:
    if value is None:
        return None
    s = str(value).strip()
    return s or None


def parse_provider_option(raw: Mapping[str, object]) -> ProviderOption | None:
    """Clasifica una opción cruda. Devuelve None si el tipo no se reconoce."""
    try:
        offer_type = OfferType(str(raw.get("type") or ""))
    except ValueError:
        return None

    service = raw.get("service")
    if not isinstance(service, Mapping):
        service = {}

    service_id = _opt_str(service.get("id"))
    service_name = _opt_str(service.get("name"))

    return ProviderOption(
        service_id=service_id or service_name or "",
        service_name=service_name,
        offer_type=offer_type,
        link=_opt_str(raw.get("link")),
    )


def classify_options(raw_options: object) -> dict[OfferType, tuple[ProviderOption, ...]]:
    buckets: dict[OfferType, list[ProviderOption]] = {t: [] for t in OfferType}
    if isinstance(raw_options, list):
        for raw in raw_options:
            if not isinstance(raw, Mapping):
                continue
            opt = parse_provider_option(raw)
            if opt is not None:
                buckets[opt.offer_type].append(opt)
    return {t: tuple(opts) for t, opts in buckets.items()}


def parse_show(data: Mapping[str, object], *, country: str) -> AvailabilityResult:
    streaming = data.get("streamingOptions")
    raw_options = streaming.get(country) if isinstance(streaming, Mapping) else None
    buckets = classify_options(raw_options)
    return AvailabilityResult(
        imdb_link=str(data.get("imdbLink") or ""),
        subscription_options=buckets[OfferType.SUBSCRIPTION],
        rent_options=buckets[OfferType.RENT],
        buy_options=buckets[OfferType.BUY],
    )


class StreamingAvailabilityGateway:
    def __init__(
        self,
        *,
        api_key: str | None,
        cache: CacheStore,
        quota: QuotaTracker,
        session: requests.Session,
        host: str = DEFAULT_HOST,
        country: str = DEFAULT_COUNTRY,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        self._api_key = (api_key or "").strip()
        self._cache = cache
        self._quota = quota
        self._session = session
        self._host = (host or "").strip() or DEFAULT_HOST
        self._country = (country or "").strip().lower() or DEFAULT_COUNTRY
        self._timeout_seconds = max(0.5, float(timeout_seconds))

    @property
    def country(self) -> str:
        return self._country

    def _fail(self, kind: ErrorKind, title_id: str, *, status: int | None, detail: str) -> UpstreamError:
        logger.warning(
            f"RapidAPI lookup failed: kind={kind.value} status={status} id={title_id!r} ({detail})"
        )
        return UpstreamError(kind, service=SERVICE_RAPIDAPI, status=status, detail=detail)

    def _record_telemetry(self, headers: Mapping[str, str]) -> None:
        remaining = _safe_int(headers.get(HEADER_REMAINING))
        limit = _safe_int(headers.get(HEADER_LIMIT))
        if remaining is None and limit is None:
            return
        self._quota.record_availability_telemetry(remaining=remaining, limit=limit)

    def lookup(self, title_id: str) -> AvailabilityResult:
        key = providers_cache_key(title_id)
        cached = self._cache.get(key)
        if isinstance(cached, AvailabilityResult):
            logger.debug_ctx("RAPIDAPI", f"cache hit {key!r}")
            return cached

        if not self._api_key:
            raise self._fail(ErrorKind.AUTH_INVALID, title_id, status=None, detail="RAPIDAPI_KEY not configured")

        url = f"https://{self._host}/shows/{quote(title_id, safe='')}"
        try:
            resp = self._session.get(
                url,
                params={"output_language": "en", "series_granularity": "show"},
                headers={"X-RapidAPI-Key": self._api_key, "X-RapidAPI-Host": self._host},
                timeout=self._timeout_seconds,
            )
        except Timeout:
            raise self._fail(ErrorKind.UPSTREAM_UNAVAILABLE, title_id, status=None, detail="timeout")
        except RequestException as exc:
            raise self._fail(
                ErrorKind.UPSTREAM_UNAVAILABLE, title_id, status=None, detail=type(exc).__name__
            )

        self._record_telemetry(resp.headers)

        status = int(resp.status_code)
        if status == 404:
            logger.debug_ctx("RAPIDAPI", f"title not found {title_id!r}")
            result = AvailabilityResult.not_found_result()
            self._cache.put(key, result)
            return result

        kind = _STATUS_KINDS.get(status)
        if kind is not None:
            raise self._fail(kind, title_id, status=status, detail=f"http {status}")
        if status != 200:
            raise self._fail(ErrorKind.UPSTREAM_UNAVAILABLE, title_id, status=status, detail="unexpected status")

        try:
            data = resp.json()
        except ValueError:
            raise self._fail(ErrorKind.UPSTREAM_UNAVAILABLE, title_id, status=status, detail="invalid json")
        if not isinstance(data, Mapping):
            raise self._fail(ErrorKind.UPSTREAM_UNAVAILABLE, title_id, status=status, detail="json is not an object")

        result = parse_show(data, country=self._country)
        self._cache.put(key, result)
        return result

    def lookup_or_degraded(self, title_id: str) -> AvailabilityResult:
        try:
            return self.lookup(title_id)
        except UpstreamError as exc:
            if exc.kind is not ErrorKind.UPSTREAM_UNAVAILABLE:
                raise
            return AvailabilityResult.degraded_result()

from __future__ import annotations

from dataclasses import dataclass

from server.api.settings import Settings
from streamscout.availability_gateway import StreamingAvailabilityGateway
from streamscout.bundle_analyzer import BundleAnalyzer
from streamscout.cache_store import CacheStore
from streamscout.http_session import build_session
from streamscout.movie_resolver import MovieResolver
from streamscout.omdb_gateway import OmdbSearchGateway
from streamscout.quota_tracker import QuotaTracker


@dataclass(frozen=True)
class Services:
    """
    Estado compartido del proceso, construido explícitamente una vez.

    CacheStore y QuotaTracker son los únicos objetos mutables compartidos
    entre requests; el resto son adaptadores sin estado propio.
    """

    cache: CacheStore
    quota: QuotaTracker
    search_gateway: OmdbSearchGateway
    availability_gateway: StreamingAvailabilityGateway
    resolver: MovieResolver
    analyzer: BundleAnalyzer


def build_services(settings: Settings) -> Services:
    cache = CacheStore(
        ttl_seconds=settings.cache_ttl_seconds,
        max_entries=settings.cache_max_entries,
    )
    quota = QuotaTracker(search_daily_limit=settings.omdb_daily_limit)
    session = build_session(
        pool_size=settings.bundle_max_workers * 2,
        user_agent=settings.http_user_agent,
    )

    search_gateway = OmdbSearchGateway(
        api_key=settings.omdb_api_key,
        cache=cache,
        quota=quota,
        session=session,
        base_url=settings.omdb_base_url,
        timeout_seconds=settings.http_timeout_seconds,
    )
    availability_gateway = StreamingAvailabilityGateway(
        api_key=settings.rapidapi_key,
        cache=cache,
        quota=quota,
        session=session,
        host=settings.rapidapi_host,
        country=settings.streaming_country,
        timeout_seconds=settings.http_timeout_seconds,
    )
    resolver = MovieResolver(search_gateway)
    analyzer = BundleAnalyzer(
        resolver=resolver,
        availability=availability_gateway,
        max_workers=settings.bundle_max_workers,
    )
    return Services(
        cache=cache,
        quota=quota,
        search_gateway=search_gateway,
        availability_gateway=availability_gateway,
        resolver=resolver,
        analyzer=analyzer,
    )


_SETTINGS = Settings.from_env()
_SERVICES = build_services(_SETTINGS)


def get_settings() -> Settings:
    return _SETTINGS


def get_services() -> Services:
    return _SERVICES


def get_cache_store() -> CacheStore:
    return _SERVICES.cache


def get_quota_tracker() -> QuotaTracker:
    return _SERVICES.quota


def get_movie_resolver() -> MovieResolver:
    return _SERVICES.resolver


def get_availability_gateway() -> StreamingAvailabilityGateway:
    return _SERVICES.availability_gateway


def get_bundle_analyzer() -> BundleAnalyzer:
    return _SERVICES.analyzer

# dominio -> JSON de las respuestas públicas
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from streamscout.models import (
    AvailabilityResult,
    BundleReport,
    MovieDetail,
    MovieSummary,
    ProviderOption,
    QuotaSnapshot,
    ServiceCoverage,
)


def movie_payload(movie: MovieSummary) -> dict[str, Any]:
    return {
        "id": movie.id,
        "title": movie.title,
        "year": movie.year,
        "poster": movie.poster_url,
    }


def option_payload(opt: ProviderOption) -> dict[str, Any]:
    return {
        "service": {"id": opt.service_id, "name": opt.service_name},
        "type": opt.offer_type.value,
        "link": opt.link,
    }


def availability_payload(result: AvailabilityResult) -> dict[str, Any]:
    """
    "flatrate" = opciones de suscripción (nombre histórico de la API pública).
    """
    payload: dict[str, Any] = {
        "link": result.imdb_link,
        "flatrate": [option_payload(o) for o in result.subscription_options],
        "rent": [option_payload(o) for o in result.rent_options],
        "buy": [option_payload(o) for o in result.buy_options],
        "notFound": result.not_found,
        "degraded": result.degraded,
    }
    if result.degraded:
        payload["message"] = "Provider data unavailable"
    return payload


def service_payload(coverage: ServiceCoverage) -> dict[str, Any]:
    return {
        "service": coverage.service_name,
        "serviceId": coverage.service_id,
        "movieCount": coverage.movie_count,
        "movies": list(coverage.covered_titles),
        "coverage": coverage.coverage_percent,
    }


def movie_detail_payload(detail: MovieDetail) -> dict[str, Any]:
    return {
        "searchQuery": detail.query_name,
        "title": detail.resolved_title,
        "year": detail.resolved_year,
        "found": detail.found,
        "subscriptionServices": list(detail.subscription_service_names),
        "degraded": detail.degraded,
    }


def bundle_payload(report: BundleReport) -> dict[str, Any]:
    best = report.best_service
    return {
        "totalMovies": report.total_requested,
        "foundMovies": report.found_count,
        "notFoundMovies": list(report.not_found_names),
        "bestService": service_payload(best) if best is not None else None,
        "allServices": [service_payload(s) for s in report.service_ranking],
        "notOnAnySubscription": list(report.uncovered_titles),
        "movieDetails": [movie_detail_payload(d) for d in report.movie_details],
    }


def status_payload(
    snapshot: QuotaSnapshot,
    *,
    cache_entries: int,
    cache_ttl_seconds: float,
) -> dict[str, Any]:
    return {
        "rapidApi": {
            "remaining": snapshot.availability_remaining,
            "limit": snapshot.availability_limit,
        },
        "omdb": {
            "estimatedDailyUsage": snapshot.search_daily_count,
            "limit": snapshot.search_daily_limit,
            "resetAt": datetime.fromtimestamp(snapshot.search_reset_at, tz=timezone.utc).isoformat(),
        },
        "cache": {
            "entries": cache_entries,
            "ttlHours": round(cache_ttl_seconds / 3600.0, 2),
        },
    }

from __future__ import annotations

"""
streamscout/bundle_analyzer.py

"Bundle": dada una lista de películas, qué servicio de suscripción cubre más.

Flujo (fan-out / fan-in con ThreadPoolExecutor):
1) Validación: 1..10 nombres no vacíos (InvalidInputError).
2) Resolución de cada nombre en paralelo; se espera a todas.
3) Disponibilidad de cada película encontrada en paralelo; se espera a todas.
4) Agrupación servicio -> títulos (sin duplicados por servicio).
5) Ranking descendente estable (empates: orden de primera aparición).
6) Títulos encontrados sin ninguna suscripción.

Política de fallos:
- RATE_LIMITED / QUOTA_EXCEEDED (SYSTEMIC_KINDS) abortan el batch completo:
  se propaga el primero en orden de entrada. No hay informe parcial.
- Cualquier otro UpstreamError degrada solo ese item:
    - en resolución => la película cuenta como no encontrada (degraded=True)
    - en disponibilidad => resultado vacío (degraded=True)
"""

import math
from collections.abc import Callable, Sequence
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from typing import Final, Protocol, TypeVar

from streamscout import logger
from streamscout.errors import InvalidInputError, UpstreamError
from streamscout.models import (
    AvailabilityResult,
    BundleReport,
    MovieDetail,
    MovieSummary,
    ServiceCoverage,
)
from streamscout.movie_resolver import MovieResolver

MIN_MOVIES: Final[int] = 1
MAX_MOVIES: Final[int] = 10
DEFAULT_MAX_WORKERS: Final[int] = 5

T = TypeVar("T")
R = TypeVar("R")


class AvailabilityLookup(Protocol):
    def lookup(self, title_id: str) -> AvailabilityResult: ...


@dataclass(frozen=True)
class _Resolved:
    query_name: str
    movie: MovieSummary | None
    degraded: bool = False


@dataclass(frozen=True)
class _WithProviders:
    resolved: _Resolved
    availability: AvailabilityResult | None


def coverage_percent(covered: int, total: int) -> int:
    """round(100 * covered / total) con redondeo half-up (12.5 -> 13)."""
    if total <= 0:
        return 0
    return int(math.floor(100.0 * covered / total + 0.5))


def validate_names(names: object) -> list[str]:
    if not isinstance(names, (list, tuple)):
        raise InvalidInputError("Please provide 1-10 movie names")
    if not (MIN_MOVIES <= len(names) <= MAX_MOVIES):
        raise InvalidInputError("Please provide 1-10 movie names")
    out: list[str] = []
    for name in names:
        if not isinstance(name, str) or not name.strip():
            raise InvalidInputError("Movie names must be non-empty strings")
        out.append(name)
    return out


def _fan_out(
    items: Sequence[T],
    fn: Callable[[T], R],
    on_error: Callable[[T, UpstreamError], R],
    *,
    max_workers: int,
) -> list[R]:
    """
    Ejecuta fn(item) en paralelo y devuelve resultados en orden de entrada.

    - UpstreamError sistémico: cancela lo pendiente y se propaga.
    - UpstreamError no sistémico: on_error(item, exc) sustituye el resultado.
    """
    if not items:
        return []

    workers = max(1, min(int(max_workers), len(items)))
    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="bundle") as pool:
        futures: list[Future[R]] = [pool.submit(fn, item) for item in items]
        out: list[R] = []
        for item, fut in zip(items, futures):
            try:
                out.append(fut.result())
            except UpstreamError as exc:
                if exc.is_systemic:
                    for pending in futures:
                        pending.cancel()
                    raise
                out.append(on_error(item, exc))
        return out


class BundleAnalyzer:
    def __init__(
        self,
        *,
        resolver: MovieResolver,
        availability: AvailabilityLookup,
        max_workers: int = DEFAULT_MAX_WORKERS,
    ) -> None:
        self._resolver = resolver
        self._availability = availability
        self._max_workers = max(1, int(max_workers))

    def _resolve_one(self, name: str) -> _Resolved:
        return _Resolved(query_name=name, movie=self._resolver.resolve(name))

    def _providers_one(self, item: _Resolved) -> _WithProviders:
        if item.movie is None:
            return _WithProviders(resolved=item, availability=None)
        return _WithProviders(resolved=item, availability=self._availability.lookup(item.movie.id))

    def analyze(self, names: Sequence[str]) -> BundleReport:
        movie_names = validate_names(names)

        resolved = _fan_out(
            movie_names,
            self._resolve_one,
            lambda name, exc: _Resolved(query_name=name, movie=None, degraded=True),
            max_workers=self._max_workers,
        )

        with_providers = _fan_out(
            resolved,
            self._providers_one,
            lambda item, exc: _WithProviders(
                resolved=item, availability=AvailabilityResult.degraded_result()
            ),
            max_workers=self._max_workers,
        )

        report = build_report(with_providers, total_requested=len(movie_names))
        logger.info(
            f"bundle analyzed: requested={report.total_requested} found={report.found_count} "
            f"services={len(report.service_ranking)}"
        )
        return report


def build_report(items: Sequence[_WithProviders], *, total_requested: int) -> BundleReport:
    # service_id -> (display name, títulos). dict preserva orden de primera aparición.
    service_names: dict[str, str] = {}
    service_titles: dict[str, list[str]] = {}

    details: list[MovieDetail] = []
    not_found: list[str] = []
    found_titles: list[str] = []

    for item in items:
        movie = item.resolved.movie
        if movie is None:
            not_found.append(item.resolved.query_name)
            details.append(
                MovieDetail(
                    query_name=item.resolved.query_name,
                    resolved_title=None,
                    resolved_year=None,
                    found=False,
                    degraded=item.resolved.degraded,
                )
            )
            continue

        found_titles.append(movie.title)
        availability = item.availability or AvailabilityResult()

        names_for_movie: list[str] = []
        for opt in availability.subscription_options:
            display = opt.display_name
            key = opt.service_id or display
            if not key:
                continue

            if key not in service_titles:
                service_titles[key] = []
                service_names[key] = display
            elif opt.service_name and service_names[key] == key:
                service_names[key] = opt.service_name

            if movie.title not in service_titles[key]:
                service_titles[key].append(movie.title)
            if display not in names_for_movie:
                names_for_movie.append(display)

        details.append(
            MovieDetail(
                query_name=item.resolved.query_name,
                resolved_title=movie.title,
                resolved_year=movie.year,
                found=True,
                subscription_service_names=tuple(names_for_movie),
                degraded=availability.degraded,
            )
        )

    coverages = [
        ServiceCoverage(
            service_id=key,
            service_name=service_names[key],
            covered_titles=tuple(titles),
            coverage_percent=coverage_percent(len(titles), total_requested),
        )
        for key, titles in service_titles.items()
    ]
    # sorted() es estable: empates conservan el orden de primera aparición
    ranking = sorted(coverages, key=lambda c: c.movie_count, reverse=True)

    covered: set[str] = {t for titles in service_titles.values() for t in titles}
    uncovered: list[str] = []
    for title in found_titles:
        if title not in covered and title not in uncovered:
            uncovered.append(title)

    return BundleReport(
        total_requested=total_requested,
        found_count=len(found_titles),
        not_found_names=tuple(not_found),
        service_ranking=tuple(ranking),
        uncovered_titles=tuple(uncovered),
        movie_details=tuple(details),
    )

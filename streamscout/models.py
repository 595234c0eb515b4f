from __future__ import annotations

"""
streamscout/models.py

Modelos inmutables del dominio.

Notas:
- Los "sets" del dominio se representan como tuplas sin duplicados que
  preservan el orden de primera aparición (salida JSON determinista).
- Estos objetos se guardan tal cual en CacheStore: al ser frozen, compartirlos
  entre threads es seguro.
"""

from dataclasses import dataclass, field
from enum import Enum


class OfferType(str, Enum):
    SUBSCRIPTION = "subscription"
    RENT = "rent"
    BUY = "buy"


@dataclass(frozen=True)
class MovieSummary:
    id: str
    title: str
    year: str
    poster_url: str | None = None


@dataclass(frozen=True)
class ProviderOption:
    service_id: str
    service_name: str | None
    offer_type: OfferType
    link: str | None = None

    @property
    def display_name(self) -> str:
        return self.service_name or self.service_id


@dataclass(frozen=True)
class AvailabilityResult:
    imdb_link: str = ""
    subscription_options: tuple[ProviderOption, ...] = ()
    rent_options: tuple[ProviderOption, ...] = ()
    buy_options: tuple[ProviderOption, ...] = ()
    not_found: bool = False
    degraded: bool = False

    @classmethod
    def not_found_result(cls) -> "AvailabilityResult":
        return cls(not_found=True)

    @classmethod
    def degraded_result(cls) -> "AvailabilityResult":
        """Resultado vacío que sustituye a un fallo transitorio del proveedor."""
        return cls(degraded=True)


@dataclass(frozen=True)
class ServiceCoverage:
    service_id: str
    service_name: str
    covered_titles: tuple[str, ...]
    coverage_percent: int

    @property
    def movie_count(self) -> int:
        return len(self.covered_titles)


@dataclass(frozen=True)
class MovieDetail:
    query_name: str
    resolved_title: str | None
    resolved_year: str | None
    found: bool
    subscription_service_names: tuple[str, ...] = ()
    degraded: bool = False


@dataclass(frozen=True)
class BundleReport:
    total_requested: int
    found_count: int
    not_found_names: tuple[str, ...] = ()
    service_ranking: tuple[ServiceCoverage, ...] = ()
    uncovered_titles: tuple[str, ...] = ()
    movie_details: tuple[MovieDetail, ...] = field(default_factory=tuple)

    @property
    def best_service(self) -> ServiceCoverage | None:
        return self.service_ranking[0] if self.service_ranking else None


@dataclass(frozen=True)
class QuotaSnapshot:
    search_daily_count: int
    search_reset_at: float
    search_daily_limit: int | None
    availability_remaining: int | None
    availability_limit: int | None

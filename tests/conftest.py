from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable

import pytest

from streamscout.cache_store import CacheStore
from streamscout.models import AvailabilityResult, MovieSummary, OfferType, ProviderOption
from streamscout.quota_tracker import QuotaTracker


@dataclass(slots=True)
class FakeResponse:
    status_code: int = 200
    payload: Any = None
    headers: dict[str, str] = field(default_factory=dict)

    def json(self) -> Any:
        if isinstance(self.payload, Exception):
            raise self.payload
        return self.payload


@dataclass(slots=True)
class SessionCall:
    url: str
    params: dict[str, Any] | None
    headers: dict[str, Any] | None
    timeout: float | None


class FakeSession:
    """
    Minimal requests.Session mock with programmable routing.

    The router receives the SessionCall and returns a FakeResponse or raises.
    """

    def __init__(self, router: Callable[[SessionCall], FakeResponse]) -> None:
        self._router = router
        self.calls: list[SessionCall] = []

    def get(self, url, params=None, headers=None, timeout=None) -> FakeResponse:
        call = SessionCall(url=url, params=params, headers=headers, timeout=timeout)
        self.calls.append(call)
        return self._router(call)


def omdb_search_payload(*items: tuple[str, str, str]) -> dict[str, Any]:
    return {
        "Search": [
            {"imdbID": imdb_id, "Title": title, "Year": year, "Poster": "N/A"}
            for imdb_id, title, year in items
        ],
        "totalResults": str(len(items)),
        "Response": "True",
    }


def sub(service_id: str, name: str | None = None) -> ProviderOption:
    return ProviderOption(
        service_id=service_id,
        service_name=name,
        offer_type=OfferType.SUBSCRIPTION,
    )


class FakeSearchGateway:
    """Search gateway keyed by exact query; values may be lists or exceptions."""

    def __init__(self, table: dict[str, Any]) -> None:
        self._table = table
        self.calls: list[str] = []

    def search(self, query: str) -> list[MovieSummary]:
        self.calls.append(query)
        value = self._table.get(query, [])
        if isinstance(value, Exception):
            raise value
        return list(value)


class FakeAvailability:
    def __init__(self, table: dict[str, Any]) -> None:
        self._table = table
        self.calls: list[str] = []

    def lookup(self, title_id: str) -> AvailabilityResult:
        self.calls.append(title_id)
        value = self._table.get(title_id, AvailabilityResult())
        if isinstance(value, Exception):
            raise value
        return value


@pytest.fixture()
def cache() -> CacheStore:
    return CacheStore(ttl_seconds=60.0, max_entries=100)


@pytest.fixture()
def quota() -> QuotaTracker:
    return QuotaTracker(search_daily_limit=1000)


@pytest.fixture()
def make_response() -> Callable[..., FakeResponse]:
    return FakeResponse


@pytest.fixture()
def make_session() -> Callable[[Callable[[SessionCall], FakeResponse]], FakeSession]:
    return FakeSession


@pytest.fixture()
def omdb_payload() -> Callable[..., dict[str, Any]]:
    return omdb_search_payload


@pytest.fixture()
def subscription() -> Callable[..., ProviderOption]:
    return sub


@pytest.fixture()
def make_search_gateway() -> Callable[[dict[str, Any]], FakeSearchGateway]:
    return FakeSearchGateway


@pytest.fixture()
def make_availability() -> Callable[[dict[str, Any]], FakeAvailability]:
    return FakeAvailability

import pytest
from requests.exceptions import ConnectionError as RequestsConnectionError
from requests.exceptions import Timeout

from streamscout.errors import ErrorKind, UpstreamError
from streamscout.omdb_gateway import OmdbSearchGateway, parse_search_results, search_cache_key


def _gateway(session, cache, quota, api_key="secret-key") -> OmdbSearchGateway:
    return OmdbSearchGateway(
        api_key=api_key,
        cache=cache,
        quota=quota,
        session=session,
        base_url="https://omdb.test/",
        timeout_seconds=3.0,
    )


def test_search_maps_top_five_results(cache, quota, make_session, make_response, omdb_payload):
    items = [(f"tt{i}", f"Movie {i}", "1999") for i in range(7)]
    session = make_session(lambda call: make_response(payload=omdb_payload(*items)))

    results = _gateway(session, cache, quota).search("  Movie ")

    assert [m.id for m in results] == ["tt0", "tt1", "tt2", "tt3", "tt4"]
    assert results[0].poster_url is None
    assert session.calls[0].params == {"apikey": "secret-key", "s": "Movie"}
    assert session.calls[0].timeout == 3.0
    assert quota.snapshot().search_daily_count == 1


def test_same_query_is_served_from_cache(cache, quota, make_session, make_response, omdb_payload):
    session = make_session(lambda call: make_response(payload=omdb_payload(("tt1", "Heat", "1995"))))
    gateway = _gateway(session, cache, quota)

    first = gateway.search("Heat")
    second = gateway.search("  heat ")

    assert first == second
    assert len(session.calls) == 1
    assert cache.get(search_cache_key("HEAT")) is not None


def test_movie_not_found_is_cached_empty_success(cache, quota, make_session, make_response):
    session = make_session(
        lambda call: make_response(payload={"Response": "False", "Error": "Movie not found!"})
    )
    gateway = _gateway(session, cache, quota)

    assert gateway.search("Zzzzznotreal") == []
    assert gateway.search("zzzzznotreal ") == []
    assert len(session.calls) == 1
    assert quota.snapshot().search_daily_count == 1
    assert cache.get(search_cache_key("Zzzzznotreal")) == ()


@pytest.mark.parametrize(
    "status, payload, kind",
    [
        (200, {"Response": "False", "Error": "Request limit reached!"}, ErrorKind.RATE_LIMITED),
        (401, {"Response": "False", "Error": "Request limit reached!"}, ErrorKind.RATE_LIMITED),
        (429, {}, ErrorKind.RATE_LIMITED),
        (401, {"Response": "False", "Error": "Invalid API key!"}, ErrorKind.AUTH_INVALID),
        (401, ValueError("no body"), ErrorKind.AUTH_INVALID),
        (200, {"Response": "False", "Error": "Invalid API key!"}, ErrorKind.AUTH_INVALID),
        (503, {}, ErrorKind.UPSTREAM_UNAVAILABLE),
        (503, {"Response": "False", "Error": "Service down"}, ErrorKind.UPSTREAM_UNAVAILABLE),
        (200, ValueError("bad json"), ErrorKind.UPSTREAM_UNAVAILABLE),
        (200, ["not", "a", "dict"], ErrorKind.UPSTREAM_UNAVAILABLE),
    ],
)
def test_failures_are_classified_and_never_cached(
    cache, quota, make_session, make_response, status, payload, kind
):
    session = make_session(lambda call: make_response(status_code=status, payload=payload))

    with pytest.raises(UpstreamError) as info:
        _gateway(session, cache, quota).search("Heat")

    assert info.value.kind is kind
    assert info.value.service == "omdb"
    assert info.value.status == status
    assert "secret-key" not in str(info.value)
    assert cache.size() == 0


def test_daily_limit_on_401_is_rate_limited(cache, quota, make_session, make_response):
    session = make_session(
        lambda call: make_response(
            status_code=401, payload={"Response": "False", "Error": "Request limit reached!"}
        )
    )

    with pytest.raises(UpstreamError) as info:
        _gateway(session, cache, quota).search("Heat")

    assert info.value.kind is ErrorKind.RATE_LIMITED
    assert info.value.is_systemic is True
    assert info.value.is_rate_limited is True


@pytest.mark.parametrize("exc", [Timeout("slow"), RequestsConnectionError("https://omdb.test/?apikey=secret-key")])
def test_network_errors_are_upstream_unavailable(cache, quota, make_session, exc):
    def router(call):
        raise exc

    with pytest.raises(UpstreamError) as info:
        _gateway(make_session(router), cache, quota).search("Heat")

    assert info.value.kind is ErrorKind.UPSTREAM_UNAVAILABLE
    assert "secret-key" not in str(info.value)
    assert quota.snapshot().search_daily_count == 0


def test_missing_api_key_fails_without_network(cache, quota, make_session, make_response):
    session = make_session(lambda call: make_response(payload={}))

    with pytest.raises(UpstreamError) as info:
        _gateway(session, cache, quota, api_key=None).search("Heat")

    assert info.value.kind is ErrorKind.AUTH_INVALID
    assert session.calls == []


def test_parse_search_results_skips_items_without_id():
    data = {
        "Search": [
            {"Title": "No id"},
            {"imdbID": "tt9", "Title": "Ok", "Year": "2001", "Poster": "http://img/9.jpg"},
        ]
    }
    results = parse_search_results(data)

    assert len(results) == 1
    assert results[0].poster_url == "http://img/9.jpg"

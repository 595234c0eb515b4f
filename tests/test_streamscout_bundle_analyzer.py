import pytest

from streamscout.bundle_analyzer import BundleAnalyzer, coverage_percent
from streamscout.errors import ErrorKind, InvalidInputError, UpstreamError
from streamscout.models import AvailabilityResult, MovieSummary
from streamscout.movie_resolver import MovieResolver


def _movie(n: int) -> MovieSummary:
    return MovieSummary(id=f"tt{n}", title=f"Movie {n}", year="2000")


@pytest.fixture()
def build_analyzer(make_search_gateway, make_availability):
    def _build(search_table, availability_table, max_workers=4):
        search = make_search_gateway(search_table)
        availability = make_availability(availability_table)
        analyzer = BundleAnalyzer(
            resolver=MovieResolver(search),
            availability=availability,
            max_workers=max_workers,
        )
        return analyzer, search, availability

    return _build


def test_coverage_ranking_and_percentages(build_analyzer, subscription):
    search = {f"m{n}": [_movie(n)] for n in range(1, 5)}
    availability = {
        "tt1": AvailabilityResult(subscription_options=(subscription("a", "Service A"),)),
        "tt2": AvailabilityResult(subscription_options=(subscription("a", "Service A"), subscription("b", "Service B"))),
        "tt3": AvailabilityResult(subscription_options=(subscription("a", "Service A"),)),
        "tt4": AvailabilityResult(subscription_options=(subscription("b", "Service B"),)),
    }
    analyzer, _, _ = build_analyzer(search, availability)

    report = analyzer.analyze(["m1", "m2", "m3", "m4"])

    assert [(s.service_name, s.movie_count, s.coverage_percent) for s in report.service_ranking] == [
        ("Service A", 3, 75),
        ("Service B", 2, 50),
    ]
    assert report.service_ranking[0].covered_titles == ("Movie 1", "Movie 2", "Movie 3")
    assert report.best_service is report.service_ranking[0]
    assert report.uncovered_titles == ()
    assert report.found_count == 4
    assert report.total_requested == 4


@pytest.mark.parametrize("names", [[], [f"m{n}" for n in range(11)], "m1", ["ok", ""], ["ok", 3]])
def test_invalid_input(build_analyzer, names):
    analyzer, search, _ = build_analyzer({}, {})

    with pytest.raises(InvalidInputError):
        analyzer.analyze(names)

    assert search.calls == []


def test_exactly_ten_names_are_accepted(build_analyzer):
    analyzer, search, _ = build_analyzer({}, {})

    report = analyzer.analyze([f"m{n}" for n in range(10)])

    assert report.total_requested == 10
    assert len(search.calls) == 10


def test_not_found_movie_is_excluded_from_coverage(build_analyzer, subscription):
    search = {"m1": [_movie(1)]}
    availability = {"tt1": AvailabilityResult(subscription_options=(subscription("a", "A"),))}
    analyzer, _, avail = build_analyzer(search, availability)

    report = analyzer.analyze(["m1", "Zzzzznotreal"])

    assert report.found_count == 1
    assert report.not_found_names == ("Zzzzznotreal",)
    assert report.service_ranking[0].covered_titles == ("Movie 1",)
    assert report.service_ranking[0].coverage_percent == 50
    assert report.uncovered_titles == ()
    assert avail.calls == ["tt1"]
    detail = report.movie_details[1]
    assert detail.found is False
    assert detail.resolved_title is None


def test_rate_limited_search_short_circuits_batch(build_analyzer):
    error = UpstreamError(ErrorKind.RATE_LIMITED, service="omdb", status=429)
    search = {f"m{n}": [_movie(n)] for n in range(5)}
    search["m1"] = error
    analyzer, _, avail = build_analyzer(search, {})

    with pytest.raises(UpstreamError) as info:
        analyzer.analyze([f"m{n}" for n in range(5)])

    assert info.value.kind is ErrorKind.RATE_LIMITED
    assert avail.calls == []


def test_quota_exceeded_availability_short_circuits_batch(build_analyzer):
    search = {f"m{n}": [_movie(n)] for n in range(3)}
    availability = {"tt2": UpstreamError(ErrorKind.QUOTA_EXCEEDED, service="rapidapi", status=402)}
    analyzer, _, _ = build_analyzer(search, availability)

    with pytest.raises(UpstreamError) as info:
        analyzer.analyze(["m0", "m1", "m2"])

    assert info.value.kind is ErrorKind.QUOTA_EXCEEDED


def test_transient_failures_degrade_single_items(build_analyzer, subscription):
    search = {
        "m1": [_movie(1)],
        "m2": UpstreamError(ErrorKind.UPSTREAM_UNAVAILABLE, service="omdb"),
        "m3": [_movie(3)],
    }
    availability = {
        "tt1": AvailabilityResult(subscription_options=(subscription("a", "A"),)),
        "tt3": UpstreamError(ErrorKind.UPSTREAM_UNAVAILABLE, service="rapidapi"),
    }
    analyzer, _, _ = build_analyzer(search, availability)

    report = analyzer.analyze(["m1", "m2", "m3"])

    assert report.found_count == 2
    assert report.not_found_names == ("m2",)
    assert report.uncovered_titles == ("Movie 3",)
    details = {d.query_name: d for d in report.movie_details}
    assert details["m2"].degraded is True
    assert details["m3"].degraded is True
    assert details["m3"].found is True
    assert details["m1"].subscription_service_names == ("A",)


def test_movie_without_subscriptions_is_uncovered(build_analyzer, subscription):
    search = {"m1": [_movie(1)], "m2": [_movie(2)]}
    availability = {
        "tt1": AvailabilityResult(subscription_options=(subscription("a", "A"),)),
        "tt2": AvailabilityResult(not_found=True),
    }
    analyzer, _, _ = build_analyzer(search, availability)

    report = analyzer.analyze(["m1", "m2"])

    assert report.not_found_names == ()
    assert report.uncovered_titles == ("Movie 2",)
    assert [s.service_id for s in report.service_ranking] == ["a"]


def test_duplicate_service_for_same_movie_counts_once(build_analyzer, subscription):
    search = {"m1": [_movie(1)]}
    availability = {
        "tt1": AvailabilityResult(subscription_options=(subscription("a", "A"), subscription("a", "A"))),
    }
    analyzer, _, _ = build_analyzer(search, availability)

    report = analyzer.analyze(["m1"])

    assert report.service_ranking[0].covered_titles == ("Movie 1",)
    assert report.service_ranking[0].coverage_percent == 100
    assert report.movie_details[0].subscription_service_names == ("A",)


def test_duplicate_names_are_processed_independently(build_analyzer, subscription):
    search = {"m1": [_movie(1)]}
    availability = {"tt1": AvailabilityResult(subscription_options=(subscription("a", "A"),))}
    analyzer, search_gw, _ = build_analyzer(search, availability)

    report = analyzer.analyze(["m1", "m1"])

    assert len(search_gw.calls) == 2
    assert report.found_count == 2
    assert report.service_ranking[0].covered_titles == ("Movie 1",)
    assert report.service_ranking[0].coverage_percent == 50


def test_tie_break_preserves_first_seen_order(build_analyzer, subscription):
    search = {"m1": [_movie(1)], "m2": [_movie(2)]}
    availability = {
        "tt1": AvailabilityResult(subscription_options=(subscription("z", "Zeta"), subscription("y", "Ypsilon"))),
        "tt2": AvailabilityResult(subscription_options=(subscription("x", "Xi"),)),
    }

    for _ in range(5):
        analyzer, _, _ = build_analyzer(search, availability, max_workers=3)
        report = analyzer.analyze(["m1", "m2"])
        assert [s.service_id for s in report.service_ranking] == ["z", "y", "x"]


def test_service_without_name_uses_id_as_display(build_analyzer, subscription):
    search = {"m1": [_movie(1)]}
    availability = {"tt1": AvailabilityResult(subscription_options=(subscription("prime"),))}
    analyzer, _, _ = build_analyzer(search, availability)

    report = analyzer.analyze(["m1"])

    assert report.service_ranking[0].service_name == "prime"
    assert report.movie_details[0].subscription_service_names == ("prime",)


def test_coverage_percent_rounds_half_up():
    assert coverage_percent(1, 8) == 13
    assert coverage_percent(1, 3) == 33
    assert coverage_percent(2, 3) == 67
    assert coverage_percent(0, 0) == 0

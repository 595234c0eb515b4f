from server.api.services import metrics


def test_inc_is_visible_in_snapshot_and_rendering(monkeypatch):
    monkeypatch.setattr(metrics, "_METRICS", {"http_requests_total": 0})

    metrics.inc("http_requests_total")
    metrics.inc("bundle_requests_total", 2)

    snap = metrics.snapshot()
    assert snap == {"http_requests_total": 1, "bundle_requests_total": 2}

    snap["http_requests_total"] = 99
    assert metrics.snapshot()["http_requests_total"] == 1

    body = metrics.render_prometheus({"cache_entries": 3})
    assert "# TYPE bundle_requests_total counter\nbundle_requests_total 2\n" in body
    assert "http_requests_total 1\n" in body
    assert "# TYPE cache_entries gauge\ncache_entries 3\n" in body

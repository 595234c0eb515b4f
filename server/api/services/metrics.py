from __future__ import annotations

from collections.abc import Mapping
from threading import RLock

_LOCK = RLock()
_METRICS: dict[str, int] = {
    "http_requests_total": 0,
    "http_errors_5xx_total": 0,
    "upstream_errors_total": 0,
    "upstream_rate_limited_total": 0,
    "providers_degraded_total": 0,
    "bundle_requests_total": 0,
}


def inc(name: str, value: int = 1) -> None:
    with _LOCK:
        _METRICS[name] = _METRICS.get(name, 0) + value


def snapshot() -> dict[str, int]:
    with _LOCK:
        return dict(_METRICS)


def render_prometheus(extra_gauges: Mapping[str, int] | None = None) -> str:
    """
    Formato texto Prometheus.

    extra_gauges: valores leídos en el momento (p.ej. stats del CacheStore),
    no acumulados aquí.
    """
    lines: list[str] = []
    for k, v in sorted(snapshot().items()):
        lines.append(f"# TYPE {k} counter")
        lines.append(f"{k} {v}")
    for k, v in sorted((extra_gauges or {}).items()):
        lines.append(f"# TYPE {k} gauge")
        lines.append(f"{k} {int(v)}")
    return "\n".join(lines) + "\n"

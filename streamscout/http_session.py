from __future__ import annotations

"""
streamscout/http_session.py

Fábrica de requests.Session compartida por los gateways.

Política:
- Pool de conexiones dimensionado a la concurrencia esperada (fan-out de bundle
  + threadpool del servidor).
- Sin reintentos automáticos: Retry(total=0). El core nunca reintenta; la
  política de reintento es del caller.
"""

from typing import Final

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

DEFAULT_USER_AGENT: Final[str] = "streamscout/1.0"


def _cap_int(value: int, *, min_v: int, max_v: int) -> int:
    if value < min_v:
        return min_v
    if value > max_v:
        return max_v
    return value


def build_session(*, pool_size: int = 10, user_agent: str = DEFAULT_USER_AGENT) -> requests.Session:
    size = _cap_int(int(pool_size), min_v=1, max_v=64)

    session = requests.Session()
    retries = Retry(total=0, raise_on_status=False, respect_retry_after_header=False)
    adapter = HTTPAdapter(max_retries=retries, pool_connections=size, pool_maxsize=size)
    session.mount("https://", adapter)
    session.mount("http://", adapter)

    session.headers.update(
        {
            "User-Agent": (user_agent or "").strip() or DEFAULT_USER_AGENT,
            "Accept": "application/json,text/plain,*/*",
        }
    )
    return session

from __future__ import annotations

"""
server/api/middleware/request_id.py

Middleware:
- Inyecta/propaga X-Request-ID (request.state.request_id)
- Cuenta la request y loguea método/path/status/duración

La query string no se loguea.
"""

import time
import uuid
from collections.abc import Awaitable, Callable

from fastapi import Request, Response

from server.api.logging_config import configure_logging
from server.api.services import metrics
from server.api.settings import Settings

REQUEST_ID_HEADER = "X-Request-ID"

CallNext = Callable[[Request], Awaitable[Response]]
Middleware = Callable[[Request, CallNext], Awaitable[Response]]


def _incoming_request_id(request: Request) -> str:
    raw = (request.headers.get(REQUEST_ID_HEADER.lower()) or "").strip()
    # ids absurdamente largos no se propagan
    if raw and len(raw) <= 128:
        return raw
    return uuid.uuid4().hex


def build_request_id_middleware(settings: Settings) -> Middleware:
    logger = configure_logging(settings)

    async def middleware(request: Request, call_next: CallNext) -> Response:
        start = time.monotonic()
        req_id = _incoming_request_id(request)
        request.state.request_id = req_id

        metrics.inc("http_requests_total", 1)

        response: Response | None = None
        status_code = 500
        try:
            response = await call_next(request)
            status_code = int(getattr(response, "status_code", 500))
            return response
        finally:
            logger.info(
                "request",
                extra={
                    "request_id": req_id,
                    "method": request.method,
                    "path": request.url.path,
                    "status": status_code,
                    "duration_ms": int((time.monotonic() - start) * 1000),
                },
            )
            if response is not None:
                response.headers[REQUEST_ID_HEADER] = req_id

    return middleware

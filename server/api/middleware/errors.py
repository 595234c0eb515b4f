# exception handlers (error_id + errores de upstream/cliente)
from __future__ import annotations

import uuid
from typing import Any

from fastapi import Request
from fastapi.responses import JSONResponse

from server.api.logging_config import configure_logging
from server.api.services import metrics
from server.api.settings import Settings
from streamscout.errors import ErrorKind, InvalidInputError, UpstreamError

_SERVICE_LABELS = {"omdb": "OMDb", "rapidapi": "RapidAPI"}

# kind -> (status HTTP, mensaje para el cliente)
_UPSTREAM_RESPONSES: dict[ErrorKind, tuple[int, str]] = {
    ErrorKind.AUTH_INVALID: (401, "Invalid {label} API key"),
    ErrorKind.QUOTA_EXCEEDED: (402, "{label} quota exceeded. Please try again later."),
    ErrorKind.ACCESS_DENIED: (403, "{label} access denied. Check your API key or subscription."),
    ErrorKind.RATE_LIMITED: (429, "{label} rate limit exceeded. Please try again later."),
    ErrorKind.UPSTREAM_UNAVAILABLE: (500, "{label} is unavailable right now"),
}


def upstream_error_response(exc: UpstreamError) -> JSONResponse:
    """
    Traduce un UpstreamError a respuesta HTTP.

    El body solo contiene campos estructurados: nunca credenciales ni payload
    crudo del proveedor.
    """
    status, template = _UPSTREAM_RESPONSES.get(exc.kind, (500, "{label} request failed"))
    label = _SERVICE_LABELS.get(exc.service, exc.service)
    payload: dict[str, Any] = {
        "error": template.format(label=label),
        "kind": exc.kind.value,
        "service": exc.service,
        "rateLimited": exc.is_rate_limited,
    }
    return JSONResponse(status_code=status, content=payload)


def build_upstream_error_handler(settings: Settings):
    logger = configure_logging(settings)

    async def handler(request: Request, exc: UpstreamError) -> JSONResponse:
        metrics.inc("upstream_errors_total", 1)
        if exc.is_rate_limited:
            metrics.inc("upstream_rate_limited_total", 1)

        logger.warning(
            "upstream_error",
            extra={
                "request_id": getattr(request.state, "request_id", None),
                "path": request.url.path,
                "kind": exc.kind.value,
                "service": exc.service,
                "upstream_status": exc.status,
            },
        )
        return upstream_error_response(exc)

    return handler


def build_invalid_input_handler():
    async def handler(request: Request, exc: InvalidInputError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"error": str(exc)})

    return handler


def build_exception_handler(settings: Settings):
    logger = configure_logging(settings)

    async def handler(request: Request, exc: Exception) -> JSONResponse:
        error_id = uuid.uuid4().hex
        req_id = getattr(request.state, "request_id", None)

        logger.exception(
            "unhandled_exception",
            extra={"error_id": error_id, "request_id": req_id, "path": request.url.path},
        )
        metrics.inc("http_errors_5xx_total", 1)

        payload: dict[str, Any] = {"detail": "Internal Server Error", "error_id": error_id}
        if isinstance(req_id, str) and req_id:
            payload["request_id"] = req_id

        return JSONResponse(status_code=500, content=payload)

    return handler

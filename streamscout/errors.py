from __future__ import annotations

"""
streamscout/errors.py

Errores del core.

- UpstreamError: variante "tagged" con discriminante `kind` (ErrorKind)
  y campos estructurados (service/status/detail). Nunca contiene API keys
  ni el payload crudo del proveedor.
- InvalidInputError: error de cliente (400), nunca se reintenta.
"""

from enum import Enum
from typing import Final


class ErrorKind(str, Enum):
    RATE_LIMITED = "rate_limited"
    QUOTA_EXCEEDED = "quota_exceeded"
    AUTH_INVALID = "auth_invalid"
    ACCESS_DENIED = "access_denied"
    UPSTREAM_UNAVAILABLE = "upstream_unavailable"


# Fallos que aplican a todas las llamadas restantes de un batch
SYSTEMIC_KINDS: Final[frozenset[ErrorKind]] = frozenset(
    {ErrorKind.RATE_LIMITED, ErrorKind.QUOTA_EXCEEDED}
)

SERVICE_OMDB: Final[str] = "omdb"
SERVICE_RAPIDAPI: Final[str] = "rapidapi"


class UpstreamError(Exception):
    """Fallo de un proveedor externo, ya clasificado."""

    def __init__(
        self,
        kind: ErrorKind,
        *,
        service: str,
        status: int | None = None,
        detail: str = "",
    ) -> None:
        self.kind = kind
        self.service = service
        self.status = status
        self.detail = detail
        super().__init__(self.__str__())

    @property
    def is_systemic(self) -> bool:
        return self.kind in SYSTEMIC_KINDS

    @property
    def is_rate_limited(self) -> bool:
        return self.kind in (ErrorKind.RATE_LIMITED, ErrorKind.QUOTA_EXCEEDED)

    def __str__(self) -> str:
        parts = [f"{self.service}:{self.kind.value}"]
        if self.status is not None:
            parts.append(f"status={self.status}")
        if self.detail:
            parts.append(self.detail)
        return " ".join(parts)

    def __repr__(self) -> str:
        return (
            f"UpstreamError(kind={self.kind.value!r}, service={self.service!r}, "
            f"status={self.status!r})"
        )


class InvalidInputError(ValueError):
    """Entrada de cliente inválida (p.ej. bundle con 0 o >10 películas)."""

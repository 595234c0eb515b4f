from __future__ import annotations

"""
streamscout/logger.py

Logger central del core (fachada sobre `logging`).

API estable
-----------
- get_logger()
- debug / info / warning / error
- debug_ctx(tag, msg) (diagnóstico contextual: "[OMDB] ...")

Política
--------
- El core nunca configura handlers: eso lo hace quien lo ejecuta
  (uvicorn, server/api/logging_config.py, tests...).
- Silenciamos loggers HTTP ruidosos (urllib3/requests) salvo HTTP_DEBUG=1.
- El logging nunca debe romper una petición.
"""

import logging
import os
import threading
from typing import Final, Mapping, TypedDict

LOGGER_NAME: Final[str] = "streamscout"

_LOGGER: logging.Logger | None = None
_LOCK = threading.Lock()

_NOISY_LOGGERS: Final[tuple[str, ...]] = ("urllib3", "requests", "urllib3.connectionpool")


class LogKwargs(TypedDict, total=False):
    exc_info: bool | BaseException | None
    stack_info: bool
    stacklevel: int
    extra: Mapping[str, object] | None


def _filter_log_kwargs(kwargs: Mapping[str, object]) -> LogKwargs:
    """Best-effort: reenvía solo kwargs que `logging` acepta."""
    out: LogKwargs = {}

    if "exc_info" in kwargs:
        v = kwargs.get("exc_info")
        if v is None or isinstance(v, (bool, BaseException)):
            out["exc_info"] = v

    if "stack_info" in kwargs:
        v = kwargs.get("stack_info")
        if isinstance(v, bool):
            out["stack_info"] = v

    if "stacklevel" in kwargs:
        v = kwargs.get("stacklevel")
        if isinstance(v, int):
            out["stacklevel"] = v

    if "extra" in kwargs:
        v = kwargs.get("extra")
        if v is None or isinstance(v, Mapping):
            out["extra"] = v  # type: ignore[assignment]

    return out


def _http_debug_enabled() -> bool:
    return (os.getenv("HTTP_DEBUG") or "").strip() == "1"


def _configure_external_loggers() -> None:
    if _http_debug_enabled():
        return
    for name in _NOISY_LOGGERS:
        try:
            logging.getLogger(name).setLevel(logging.WARNING)
        except Exception:
            pass


def get_logger() -> logging.Logger:
    """Logger del paquete (inicialización idempotente)."""
    global _LOGGER
    if _LOGGER is not None:
        return _LOGGER

    with _LOCK:
        if _LOGGER is None:
            _configure_external_loggers()
            _LOGGER = logging.getLogger(LOGGER_NAME)
        return _LOGGER


def debug(msg: str, *args: object, **kwargs: object) -> None:
    get_logger().debug(msg, *args, **_filter_log_kwargs(kwargs))


def info(msg: str, *args: object, **kwargs: object) -> None:
    get_logger().info(msg, *args, **_filter_log_kwargs(kwargs))


def warning(msg: str, *args: object, **kwargs: object) -> None:
    get_logger().warning(msg, *args, **_filter_log_kwargs(kwargs))


def error(msg: str, *args: object, **kwargs: object) -> None:
    get_logger().error(msg, *args, **_filter_log_kwargs(kwargs))


def debug_ctx(tag: str, msg: object) -> None:
    """Diagnóstico con prefijo de contexto: debug_ctx("OMDB", "cache hit")."""
    t = (tag or "").strip().upper() or "CORE"
    get_logger().debug(f"[{t}] {msg}")

# logger del API + fichero de log opcional
from __future__ import annotations

import logging
import os
from datetime import datetime
from pathlib import Path

from server.api.settings import Settings, _env_bool, _env_str
from streamscout.logger import LOGGER_NAME as CORE_LOGGER_NAME

API_LOGGER_NAME = "streamscout_api"

_FILE_HANDLER_TAG = "_streamscout_api_file_handler"
_LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

# se resuelve una vez por proceso (con o sin fichero)
_RESOLVED = False
_LOG_FILE: Path | None = None

SERVER_DIR = Path(__file__).resolve().parents[1]


def _sanitize_filename_component(value: str) -> str:
    s = (value or "").strip()
    if not s:
        return ""
    cleaned = "".join(ch if (ch.isalnum() or ch in "-_.") else "_" for ch in s)
    return cleaned.strip("._-")


def _resolve_dir(raw: str, *, base: Path) -> Path:
    p = Path(raw)
    return p if p.is_absolute() else (base / p)


def _reset_log_file_cache() -> None:
    global _RESOLVED, _LOG_FILE
    _RESOLVED = False
    _LOG_FILE = None


def log_file_path() -> Path | None:
    """
    Fichero de log (resuelto una vez por proceso).

    Prioridad:
      1) LOGGER_FILE_ENABLED=0 -> sin fichero
      2) LOGGER_FILE_PATH explícito
      3) LOGGER_FILE_DIR/<prefix>_<timestamp>[_<pid>].log
    """
    global _RESOLVED, _LOG_FILE
    if _RESOLVED:
        return _LOG_FILE

    _RESOLVED = True
    if not _env_bool("LOGGER_FILE_ENABLED", False):
        _LOG_FILE = None
        return None

    explicit = _env_str("LOGGER_FILE_PATH", "")
    if explicit:
        _LOG_FILE = _resolve_dir(explicit, base=SERVER_DIR).resolve()
        return _LOG_FILE

    log_dir = _resolve_dir(_env_str("LOGGER_FILE_DIR", "logs"), base=SERVER_DIR)
    prefix = _sanitize_filename_component(_env_str("LOGGER_FILE_PREFIX", "api")) or "api"
    stamp = datetime.now().strftime(_env_str("LOGGER_FILE_TIMESTAMP_FORMAT", "%Y-%m-%d_%H-%M-%S"))
    pid_part = f"_{os.getpid()}" if _env_bool("LOGGER_FILE_INCLUDE_PID", True) else ""

    _LOG_FILE = (log_dir / f"{prefix}_{stamp}{pid_part}.log").resolve()
    return _LOG_FILE


def _our_file_handlers(root: logging.Logger) -> list[logging.Handler]:
    return [h for h in root.handlers if getattr(h, _FILE_HANDLER_TAG, False)]


def _ensure_file_handler(root: logging.Logger, *, level: str) -> None:
    path = log_file_path()
    if path is None:
        return

    existing = _our_file_handlers(root)
    if existing:
        for handler in existing:
            handler.setLevel(level)
        return

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(path, mode="a", encoding="utf-8", delay=True)
    except OSError:
        # best-effort: sin fichero seguimos con los handlers del runner
        return

    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(_LOG_FORMAT))
    setattr(handler, _FILE_HANDLER_TAG, True)
    root.addHandler(handler)


def configure_logging(settings: Settings) -> logging.Logger:
    """
    Configuración mínima:
    - Respetamos handlers/format de quien ejecute (uvicorn, gunicorn, etc.).
    - Ajustamos nivel global, el del core (streamscout) y el del API.
    """
    root = logging.getLogger()
    root.setLevel(settings.log_level)
    _ensure_file_handler(root, level=settings.log_level)

    logging.getLogger(CORE_LOGGER_NAME).setLevel(settings.log_level)

    logger = logging.getLogger(API_LOGGER_NAME)
    logger.setLevel(settings.log_level)
    return logger

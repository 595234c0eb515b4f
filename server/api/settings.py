# lectura de env vars + defaults
from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

# En producción suele ser deseable NO sobre-escribir env vars ya definidas.
load_dotenv(override=False)

_TRUE_SET = {"1", "true", "t", "yes", "y", "on"}
_FALSE_SET = {"0", "false", "f", "no", "n", "off"}


def _env_str(name: str, default: str) -> str:
    raw = os.getenv(name)
    if raw is None:
        return default
    val = raw.strip()
    return val if val else default


def _env_opt_str(name: str) -> str | None:
    raw = os.getenv(name)
    if raw is None:
        return None
    val = raw.strip().strip('"').strip("'").strip()
    return val or None


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return int(raw.strip())
    except Exception:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return float(raw.strip())
    except Exception:
        return default


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    s = raw.strip().lower()
    if s in _TRUE_SET:
        return True
    if s in _FALSE_SET:
        return False
    return default


@dataclass(frozen=True)
class Settings:
    """
    Settings centralizados (env vars). Esto evita `os.getenv(...)` disperso.

    Notas importantes:
    - CORS: si CORS_ORIGINS="*" -> allow_credentials=False para compatibilidad browser.
    - Las API keys solo viajan hacia los gateways; nunca se loguean ni se
      devuelven en respuestas.
    - El core (streamscout/) no lee env vars: recibe estos valores por constructor
      desde server/api/deps.py.
    """

    log_level: str

    cors_origins_raw: str
    cors_allow_credentials: bool

    gzip_min_size: int

    omdb_api_key: str | None = None
    omdb_base_url: str = "https://www.omdbapi.com/"
    omdb_daily_limit: int = 1000

    rapidapi_key: str | None = None
    rapidapi_host: str = "streaming-availability.p.rapidapi.com"
    streaming_country: str = "in"

    http_timeout_seconds: float = 10.0
    http_user_agent: str = "streamscout/1.0"

    cache_ttl_seconds: float = 24 * 60 * 60
    cache_sweep_interval_seconds: float = 60 * 60
    cache_max_entries: int = 5000

    bundle_max_workers: int = 5

    def cors_allow_origins(self) -> list[str]:
        raw = self.cors_origins_raw.strip()
        if raw == "*":
            return ["*"]
        parts = [p.strip() for p in raw.split(",")]
        return [p for p in parts if p]

    @staticmethod
    def from_env() -> "Settings":
        cors_raw = _env_str("CORS_ORIGINS", "*")
        allow_origins = ["*"] if cors_raw.strip() == "*" else [p.strip() for p in cors_raw.split(",") if p.strip()]

        # Regla browser: "*" + credentials=True no es válido
        cors_allow_credentials = True
        if allow_origins == ["*"]:
            cors_allow_credentials = False

        return Settings(
            log_level=_env_str("LOG_LEVEL", "INFO").upper(),
            cors_origins_raw=cors_raw,
            cors_allow_credentials=cors_allow_credentials,
            gzip_min_size=_env_int("GZIP_MIN_SIZE", 800),
            omdb_api_key=_env_opt_str("OMDB_API_KEY"),
            omdb_base_url=_env_str("OMDB_BASE_URL", "https://www.omdbapi.com/"),
            omdb_daily_limit=max(1, _env_int("OMDB_DAILY_LIMIT", 1000)),
            rapidapi_key=_env_opt_str("RAPIDAPI_KEY"),
            rapidapi_host=_env_str("RAPIDAPI_HOST", "streaming-availability.p.rapidapi.com"),
            streaming_country=_env_str("STREAMING_COUNTRY", "in").lower(),
            http_timeout_seconds=min(120.0, max(0.5, _env_float("HTTP_TIMEOUT_SECONDS", 10.0))),
            http_user_agent=_env_str("HTTP_USER_AGENT", "streamscout/1.0"),
            cache_ttl_seconds=max(0.0, _env_float("CACHE_TTL_SECONDS", 24 * 60 * 60)),
            cache_sweep_interval_seconds=max(1.0, _env_float("CACHE_SWEEP_INTERVAL_SECONDS", 60 * 60)),
            cache_max_entries=max(0, _env_int("CACHE_MAX_ENTRIES", 5000)),
            bundle_max_workers=min(32, max(1, _env_int("BUNDLE_MAX_WORKERS", 5))),
        )

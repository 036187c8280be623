from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from persistence.paths import project_root


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw.strip())
    except ValueError as e:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from e


def _env_list(name: str, default: list[str]) -> list[str]:
    raw = os.getenv(name)
    if raw is None:
        return list(default)
    items = [s.strip() for s in raw.split(",")]
    return [s for s in items if s] or list(default)


@dataclass(frozen=True)
class Settings:
    # Deployment
    app_env: str

    # Persistence
    data_dir: Path
    site_data_file: str

    # Cache
    cache_ttl_ms: int

    # HTTP
    cors_allow_origins: list[str]
    gzip_minimum_size: int
    max_body_bytes: int

    # Debug
    debug_log_requests: bool

    @property
    def is_development(self) -> bool:
        return self.app_env == "development"


def get_settings() -> Settings:
    app_env = os.getenv("APP_ENV", "production").strip().lower() or "production"

    raw_data_dir = os.getenv("DATA_DIR", "").strip()
    data_dir = Path(raw_data_dir) if raw_data_dir else project_root() / "data"
    site_data_file = os.getenv("SITE_DATA_FILE", "site_data.json").strip() or "site_data.json"

    cache_ttl_ms = _env_int("CACHE_TTL_MS", 60_000)

    cors_allow_origins = _env_list("CORS_ALLOW_ORIGINS", ["*"])
    gzip_minimum_size = _env_int("GZIP_MINIMUM_SIZE", 1000)
    max_body_bytes = _env_int("MAX_BODY_BYTES", 10 * 1024 * 1024)

    debug_log_requests = _env_bool("DEBUG_LOG_REQUESTS", False)

    return Settings(
        app_env=app_env,
        data_dir=data_dir,
        site_data_file=site_data_file,
        cache_ttl_ms=cache_ttl_ms,
        cors_allow_origins=cors_allow_origins,
        gzip_minimum_size=gzip_minimum_size,
        max_body_bytes=max_body_bytes,
        debug_log_requests=debug_log_requests,
    )

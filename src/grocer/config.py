"""Application configuration helpers."""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

ENV_FILE_CANDIDATES = (Path(".env"), Path(".env.local"))

DEFAULT_STORES = ("Unassigned", "Supermarket", "Farmers Market", "Specialty Store")


class Settings(BaseModel):
    """Global application settings loaded from environment variables or .env files."""

    database_path: Path = Field(
        default=Path("./data/grocer.db"),
        description="SQLite database backing the key-value store.",
    )
    api_token: Optional[str] = Field(
        default=None,
        description="Bearer token required for mutating endpoints.",
    )
    log_level: str = Field(default="INFO", description="Logging level (DEBUG/INFO/WARNING/ERROR)")
    log_format: str = Field(
        default="plain",
        description="Logging format (plain/json).",
    )
    log_requests: bool = Field(
        default=True,
        description="Emit request access logs when true.",
    )
    default_stores: tuple[str, ...] = Field(
        default=DEFAULT_STORES,
        description="Store catalog used until the user saves their own.",
    )
    undo_limit: int = Field(
        default=100,
        ge=1,
        description="Maximum number of actions kept on the undo stack.",
    )

    model_config = ConfigDict(frozen=True)


def _coerce_bool(value: str) -> bool:
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _split_list(value: str) -> tuple[str, ...]:
    return tuple(part.strip() for part in value.split(",") if part.strip())


def _parse_env_file(path: Path) -> dict[str, str]:
    payload: dict[str, str] = {}
    try:
        with path.open("r", encoding="utf-8") as handle:
            for raw_line in handle:
                line = raw_line.strip()
                if not line or line.startswith("#") or "=" not in line:
                    continue
                key, raw_value = line.split("=", 1)
                payload[key.strip()] = raw_value.strip()
    except FileNotFoundError:
        return {}
    return payload


def _load_env_file_values() -> dict[str, str]:
    values: dict[str, str] = {}
    for candidate in ENV_FILE_CANDIDATES:
        values.update(_parse_env_file(candidate))
    return values


def _load_from_env() -> dict[str, object]:
    """Load optional overrides from env vars (with .env fallbacks)."""

    file_values = _load_env_file_values()

    def _env(key: str) -> Optional[str]:
        return os.environ.get(key) or file_values.get(key)

    payload: dict[str, object] = {}
    if (db_path := _env("GROCER_DATABASE_PATH")):
        payload["database_path"] = Path(db_path)
    if (api_token := _env("GROCER_API_TOKEN")):
        payload["api_token"] = api_token
    if (log_level := _env("GROCER_LOG_LEVEL")):
        payload["log_level"] = log_level
    if (log_format := _env("GROCER_LOG_FORMAT")):
        payload["log_format"] = log_format
    if (log_requests := _env("GROCER_LOG_REQUESTS")):
        payload["log_requests"] = _coerce_bool(log_requests)
    if (stores := _env("GROCER_DEFAULT_STORES")):
        parsed = _split_list(stores)
        if parsed:
            payload["default_stores"] = parsed
    if (undo_limit := _env("GROCER_UNDO_LIMIT")):
        try:
            payload["undo_limit"] = int(undo_limit)
        except ValueError:
            pass
    return payload


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings."""

    return Settings(**_load_from_env())

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path


def _default_db_path() -> Path:
    return Path.home() / ".crmpro" / "crmpro.db"


def _as_int(value: str | None, default: int) -> int:
    if value is None or not value.strip():
        return default
    return int(value)


@dataclass
class Settings:
    db_path: Path = field(
        default_factory=lambda: Path(os.environ["CRMPRO_DB_PATH"])
        if os.environ.get("CRMPRO_DB_PATH")
        else _default_db_path()
    )
    anthropic_api_key: str = field(default_factory=lambda: os.environ.get("ANTHROPIC_API_KEY", ""))
    model: str = field(default_factory=lambda: os.environ.get("CRMPRO_MODEL", "claude-sonnet-4-20250514"))
    max_tokens: int = field(default_factory=lambda: _as_int(os.environ.get("CRMPRO_MAX_TOKENS"), 1024))
    log_level: str = field(default_factory=lambda: os.environ.get("CRMPRO_LOG_LEVEL", "INFO").upper())


_settings: Settings | None = None


def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Drop the cached settings so the next call re-reads the environment."""
    global _settings
    _settings = None

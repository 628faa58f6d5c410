"""
config.py
Typed application settings (env vars prefixed with GYM_, optional .env file).
"""

from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Attributes:
        db_file: SQLite database path
        db_timeout: seconds to wait on a locked database
        bcrypt_rounds: bcrypt cost factor (10..16)
        log_level: root logging level name
        log_file: log file path; empty string disables file logging
    """

    model_config = SettingsConfigDict(env_prefix="GYM_", env_file=".env", extra="ignore")

    db_file: Path = Path("gym.db")
    db_timeout: float = Field(default=5.0, gt=0)
    bcrypt_rounds: int = Field(default=12, ge=10, le=16)
    log_level: str = "INFO"
    log_file: str = "gym-app.log"

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.strip().upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"unknown log level: {v}")
        return level


@lru_cache
def get_settings() -> Settings:
    return Settings()

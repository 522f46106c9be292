"""
Application configuration via pydantic-settings.

All settings are loaded from environment variables (or a .env file in dev).
This is the single source of truth for configuration - nothing is hardcoded
elsewhere.
"""

from __future__ import annotations

from enum import StrEnum
from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Environment(StrEnum):
    DEV = "dev"
    PROD = "prod"
    TEST = "test"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ------------------------------------------------------------------ #
    # Application
    # ------------------------------------------------------------------ #
    environment: Environment = Environment.DEV
    debug: bool = False

    # ------------------------------------------------------------------ #
    # Logging
    # ------------------------------------------------------------------ #
    log_level: str = Field(
        default="INFO",
        description="Minimum log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )
    json_logs: bool | None = Field(
        default=None,
        description="Emit JSON logs. Defaults to on in prod, off elsewhere.",
    )

    # ------------------------------------------------------------------ #
    # Model Routing
    # ------------------------------------------------------------------ #
    routing_default_cost_ceiling: float = Field(
        default=100.0,
        gt=0,
        description="Cost ceiling (USD per 1M tokens) assumed when a request has no cap",
    )
    routing_relaxation_prefix_size: int = Field(
        default=10,
        ge=1,
        description="Catalog prefix used as candidates when every filter stage is empty",
    )
    routing_max_fallbacks: int = Field(
        default=3,
        ge=0,
        le=3,
        description="Number of fallback models returned with each decision",
    )
    routing_catalog_path: str | None = Field(
        default=None,
        description="JSON file replacing the built-in model catalog",
    )
    routing_tables_path: str | None = Field(
        default=None,
        description="JSON file overriding the built-in routing tables",
    )

    @field_validator("log_level")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {value}")
        return level

    @field_validator("routing_catalog_path", "routing_tables_path")
    @classmethod
    def _path_must_exist(cls, value: str | None) -> str | None:
        if value is not None and not Path(value).is_file():
            raise ValueError(f"File not found: {value}")
        return value

    # ------------------------------------------------------------------ #
    # Derived / Computed
    # ------------------------------------------------------------------ #
    @model_validator(mode="after")
    def _set_debug_from_env(self) -> Settings:
        if self.environment == Environment.DEV:
            self.debug = True
        return self

    @model_validator(mode="after")
    def _set_json_logs_from_env(self) -> Settings:
        if self.json_logs is None:
            self.json_logs = self.environment == Environment.PROD
        return self

    @property
    def is_dev(self) -> bool:
        return self.environment in (Environment.DEV, Environment.TEST)

    @property
    def is_prod(self) -> bool:
        return self.environment == Environment.PROD


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings singleton.

    Use FastAPI dependency injection via Depends(get_settings) in endpoints,
    or call directly in non-request contexts (startup, scripts).
    """
    return Settings()

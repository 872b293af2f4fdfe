from __future__ import annotations

import os
from collections.abc import Mapping
from typing import Literal

from pydantic import BaseModel, Field, field_validator


ENV_PREFIX = "MCP_DICE_"

Transport = Literal["stdio", "sse", "streamable-http"]


class Settings(BaseModel):
    """Server settings, read from ``MCP_DICE_*`` environment variables."""

    log_level: str = Field("INFO", description="Logging level name")
    transport: Transport = Field("stdio", description="MCP transport to serve on")
    max_dice_count: int = Field(1000, ge=1, description="Most dice a single term may roll")
    max_die_sides: int = Field(10000, ge=1, description="Largest die size accepted")
    max_terms: int = Field(50, ge=1, description="Most terms in one expression")

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        value = value.upper()
        if value not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"unknown log level {value!r}")
        return value

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Settings:
        environ = os.environ if environ is None else environ
        values = {
            name: environ[ENV_PREFIX + name.upper()]
            for name in cls.model_fields
            if ENV_PREFIX + name.upper() in environ
        }
        return cls.model_validate(values)

    def limits(self) -> dict[str, int]:
        return {
            "max_dice_count": self.max_dice_count,
            "max_die_sides": self.max_die_sides,
            "max_terms": self.max_terms,
        }


_settings: Settings | None = None


def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = Settings.from_env()
    return _settings


def reload_settings() -> Settings:
    global _settings
    _settings = Settings.from_env()
    return _settings

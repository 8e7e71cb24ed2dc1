"""
Configuration for Image Render Flow.

Settings are read once from RENDER_FLOW_* environment variables and cached.
"""

import logging
import os
from functools import lru_cache
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

from core.constants import BatchConstants
from core.enums import SurfaceBackend

ENV_PREFIX = "RENDER_FLOW_"

_LOG_LEVELS = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}


def _env(name: str, default: Any = None) -> Optional[str]:
    return os.getenv(f"{ENV_PREFIX}{name}", default)


def _env_bool(name: str, default: bool) -> bool:
    value = _env(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


class SystemConfig(BaseModel):
    log_level: str = "INFO"
    debug: bool = False

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalize_level(cls, value: Any) -> str:
        level = str(value or "INFO").strip().upper()
        return level if level in _LOG_LEVELS else "INFO"


class APIConfig(BaseModel):
    host: str = "0.0.0.0"
    port: int = 8000
    cors_enabled: bool = True
    cors_origins: List[str] = Field(default_factory=lambda: ["*"])


class RenderConfig(BaseModel):
    backend: SurfaceBackend = SurfaceBackend.OPENCV
    max_workers: int = Field(
        BatchConstants.DEFAULT_MAX_WORKERS, ge=1, le=BatchConstants.MAX_WORKERS_LIMIT
    )
    max_upload_mb: int = Field(50, ge=1)
    font_path: Optional[str] = Field(None, description="TrueType font for text watermarks")


class Settings(BaseModel):
    """Application settings."""

    environment: str = "development"
    system: SystemConfig = Field(default_factory=SystemConfig)
    api: APIConfig = Field(default_factory=APIConfig)
    render: RenderConfig = Field(default_factory=RenderConfig)

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from environment variables, keeping defaults for unset ones."""
        system: Dict[str, Any] = {"debug": _env_bool("DEBUG", False)}
        if _env("LOG_LEVEL"):
            system["log_level"] = _env("LOG_LEVEL")

        api: Dict[str, Any] = {"cors_enabled": _env_bool("CORS_ENABLED", True)}
        if _env("HOST"):
            api["host"] = _env("HOST")
        if _env("PORT"):
            api["port"] = _env("PORT")
        if _env("CORS_ORIGINS"):
            api["cors_origins"] = [o.strip() for o in _env("CORS_ORIGINS").split(",") if o.strip()]

        render: Dict[str, Any] = {}
        if _env("BACKEND"):
            render["backend"] = _env("BACKEND").strip().lower()
        if _env("MAX_WORKERS"):
            render["max_workers"] = _env("MAX_WORKERS")
        if _env("MAX_UPLOAD_MB"):
            render["max_upload_mb"] = _env("MAX_UPLOAD_MB")
        if _env("FONT_PATH"):
            render["font_path"] = _env("FONT_PATH")

        return cls(
            environment=_env("ENVIRONMENT", "development"),
            system=SystemConfig(**system),
            api=APIConfig(**api),
            render=RenderConfig(**render),
        )

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json")


@lru_cache()
def get_settings() -> Settings:
    """Get cached application settings."""
    settings = Settings.from_env()
    logging.getLogger(__name__).debug(f"Loaded settings for {settings.environment}")
    return settings

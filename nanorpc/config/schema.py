"""Configuration schema using Pydantic.

Values come from ~/.nanorpc/config.json (camelCase or snake_case keys) and
from NANORPC_* environment variables; the environment wins.
"""

from typing import Literal

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ServerConfig(BaseModel):
    """HTTP listener configuration."""
    host: str = "0.0.0.0"
    port: int = 4000
    cors_origins: list[str] = Field(default_factory=lambda: ["*"])
    log_level: Literal["critical", "error", "warning", "info", "debug", "trace"] = "info"  # uvicorn log level


class LoggingConfig(BaseModel):
    """Loguru sink configuration for CLI runs."""
    level: str = "INFO"
    file: str | None = None  # Extra rotating file sink when set


class Config(BaseSettings):
    """Root configuration for nanorpc."""
    secret: str = ""  # Shared HMAC secret; callers must sign with the same value
    queued: bool = False  # Serialize every handler call through one FIFO lock
    freshness_window_ms: int = Field(default=60_000, ge=0)  # Max |now - timestamp| accepted
    server: ServerConfig = Field(default_factory=ServerConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = SettingsConfigDict(
        env_prefix="NANORPC_",
        env_nested_delimiter="__",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls,
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        return env_settings, init_settings, dotenv_settings, file_secret_settings

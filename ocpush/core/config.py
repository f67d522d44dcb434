"""Runtime settings for the push exporter.

Values come from ``OCPUSH_*`` environment variables or a ``.env`` file.
"""

from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings


class ExporterSettings(BaseSettings):
    NAMESPACE: str = "ocpush"
    PUSH_ADDR: str = "http://localhost"
    PUSH_PORT: str = "9091"
    JOB_NAME: str = ""
    INSTANCE_NAME: str = ""

    PUSH_INTERVAL_SECONDS: float = Field(default=10.0, gt=0)
    PUSH_TIMEOUT_SECONDS: float = Field(default=5.0, gt=0)
    BODY_FORMAT: Literal["text", "json"] = "text"

    LOG_LEVEL: str = "INFO"
    # Log every request body at DEBUG level
    DEBUG: bool = False

    model_config = {
        "env_prefix": "OCPUSH_",
        "env_file": ".env",
        "case_sensitive": False,
        "extra": "ignore",
    }

    @property
    def endpoint(self) -> str:
        return join_endpoint(self.PUSH_ADDR, self.PUSH_PORT)


def join_endpoint(push_addr: str, push_port: str = "") -> str:
    """Join a push address and port into the endpoint base URL."""
    addr = push_addr.rstrip("/")
    port = str(push_port).lstrip(":")
    if not port:
        return addr
    return f"{addr}:{port}"


_settings_cache: Optional[ExporterSettings] = None


def get_settings() -> ExporterSettings:
    """Get cached settings instance."""
    global _settings_cache
    if _settings_cache is None:
        _settings_cache = ExporterSettings()
    return _settings_cache


def reset_settings() -> None:
    """Drop the cached settings so the next call re-reads the environment."""
    global _settings_cache
    _settings_cache = None

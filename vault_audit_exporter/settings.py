from typing import Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from vault_audit_exporter.utils.durations import parse_duration
from vault_audit_exporter.utils.network import STREAM_NETWORKS


class Settings(BaseSettings):
    model_config = SettingsConfigDict(case_sensitive=True)

    # Audit log listener
    AUDIT_NETWORK: str = "tcp"
    AUDIT_ADDR: str = ":9090"
    AUDIT_MAX_LINE_BYTES: int = 1024 * 1024

    # HTTP server (/metrics, /healthz)
    HTTP_ADDR: str = ":8080"

    # Request timestamp cache, in seconds (accepts "5m", "90s", ...)
    CACHE_TTL: float = 300.0
    CACHE_CLEANUP: float = 60.0

    # Event processing worker pool
    DISPATCH_WORKERS: int = 8
    DISPATCH_QUEUE_MAX_SIZE: int = 10000

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: Literal["text", "json"] = "text"
    LOG_EXCLUDED_PATHS: list[str] = ["/metrics", "/healthz"]

    @field_validator("CACHE_TTL", "CACHE_CLEANUP", mode="before")
    @classmethod
    def _parse_duration(cls, value):
        if isinstance(value, str):
            return parse_duration(value)
        return value

    @field_validator("AUDIT_NETWORK")
    @classmethod
    def _check_network(cls, value: str) -> str:
        value = value.lower()
        if value not in STREAM_NETWORKS:
            raise ValueError(
                f"unsupported network {value!r}, expected one of "
                f"{', '.join(sorted(STREAM_NETWORKS))}"
            )
        return value

    @field_validator("DISPATCH_WORKERS", "DISPATCH_QUEUE_MAX_SIZE")
    @classmethod
    def _check_positive(cls, value: int) -> int:
        if value < 1:
            raise ValueError("must be at least 1")
        return value


app_settings = Settings()

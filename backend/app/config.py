from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Annotated, Any, List, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    """Daemon configuration sourced from environment variables and ``.env``."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore", populate_by_name=True)

    app_title: str = Field(default="Sentinel Surveillance", alias="APP_TITLE")

    mongo_url: str = Field(default="mongodb://127.0.0.1:27017", alias="MONGO_URL")
    mongo_database: str = Field(default="develop", alias="MONGO_DATABASE")
    mongo_tls: bool = Field(default=False, alias="MONGO_TLS")
    mongo_timeout_ms: int = Field(default=5000, alias="MONGO_TIMEOUT_MS")

    sink_backend: Literal["mongo", "ndjson"] = Field(default="mongo", alias="SINK_BACKEND")
    records_dir: Path = Field(default=Path("data/records"), alias="RECORDS_DIR")
    sightings_collection: str = Field(default="bluetooth_frames", alias="SIGHTINGS_COLLECTION")
    heartbeats_collection: str = Field(default="heartbeats", alias="HEARTBEATS_COLLECTION")
    insert_timeout_s: float | None = Field(default=None, alias="INSERT_TIMEOUT_S")
    recorder_retention_hours: float | None = Field(default=None, alias="RECORDER_RETENTION_HOURS")

    udp_host: str = Field(default="0.0.0.0", alias="UDP_HOST")
    udp_port: int = Field(default=8080, alias="UDP_PORT")
    udp_recv_size: int = Field(default=1024, alias="UDP_RECV_SIZE")
    udp_queue_max: int = Field(default=4096, alias="UDP_QUEUE_MAX")
    udp_target_host: str = Field(default="127.0.0.1", alias="UDP_TARGET_HOST")

    admission_enabled: bool = Field(default=False, alias="ADMISSION_ENABLED")
    sensor_prefixes: Annotated[List[str], NoDecode] = Field(default_factory=list, alias="SENSOR_PREFIXES")
    beacon_prefixes: Annotated[List[str], NoDecode] = Field(default_factory=list, alias="BEACON_PREFIXES")

    http_host: str = Field(default="0.0.0.0", alias="HTTP_HOST")
    http_port: int = Field(default=8000, alias="HTTP_PORT")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    json_logs: bool | None = Field(default=None, alias="JSON_LOGS")
    environment: str = Field(default="dev", alias="ENV")

    @field_validator("sensor_prefixes", "beacon_prefixes", mode="before")
    @classmethod
    def _split_csv(cls, value: Any) -> List[str] | Any:
        if isinstance(value, str):
            if not value.strip():
                return []
            return [item.strip() for item in value.split(",") if item.strip()]
        return value

    @field_validator("mongo_url", mode="before")
    @classmethod
    def _strip_url(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip()
        return value

    @field_validator("insert_timeout_s", mode="before")
    @classmethod
    def _normalize_timeout(cls, value: Any) -> Any:
        if value in ("", None):
            return None
        try:
            number = float(value)
        except (TypeError, ValueError):
            raise ValueError("insert_timeout_s must be numeric") from None
        if number <= 0:
            raise ValueError("insert_timeout_s must be greater than zero")
        return number

    @field_validator("recorder_retention_hours", mode="before")
    @classmethod
    def _normalize_retention(cls, value: Any) -> Any:
        if value in ("", None):
            return None
        try:
            number = float(value)
        except (TypeError, ValueError):
            raise ValueError("recorder_retention_hours must be numeric") from None
        if number <= 0:
            raise ValueError("recorder_retention_hours must be greater than zero")
        return number

    @field_validator("json_logs", mode="before")
    @classmethod
    def _blank_is_auto(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("udp_recv_size", "udp_queue_max", mode="after")
    @classmethod
    def _positive(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("must be greater than zero")
        return value

    def simulator_target_host(self) -> str:
        for candidate in (self.udp_target_host, self.udp_host):
            if isinstance(candidate, str) and candidate.strip() and candidate != "0.0.0.0":
                return candidate.strip()
        return "127.0.0.1"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()


settings = get_settings()

APP_TITLE = settings.app_title
UDP_HOST = settings.udp_host
UDP_PORT = settings.udp_port
UDP_RECV_SIZE = settings.udp_recv_size
UDP_QUEUE_MAX = settings.udp_queue_max
SINK_BACKEND = settings.sink_backend
SIGHTINGS_COLLECTION = settings.sightings_collection
HEARTBEATS_COLLECTION = settings.heartbeats_collection
INSERT_TIMEOUT_S = settings.insert_timeout_s
ENVIRONMENT = settings.environment


__all__ = [
    "APP_TITLE",
    "ENVIRONMENT",
    "HEARTBEATS_COLLECTION",
    "INSERT_TIMEOUT_S",
    "SIGHTINGS_COLLECTION",
    "SINK_BACKEND",
    "Settings",
    "UDP_HOST",
    "UDP_PORT",
    "UDP_QUEUE_MAX",
    "UDP_RECV_SIZE",
    "get_settings",
    "settings",
]

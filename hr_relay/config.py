"""Configuration settings for the heart rate relay."""

import os
from datetime import timezone, tzinfo
from typing import Dict, Mapping, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Line protocol record layout
MEASUREMENT = "heart_rate"
VALUE_FIELD = "value"
DEVICE_TAG = "device_id"
SOURCE_TAG = "source"

# Nanoseconds per unit for each precision the write endpoint accepts
PRECISIONS: Dict[str, int] = {
    "ns": 1,
    "us": 1_000,
    "ms": 1_000_000,
    "s": 1_000_000_000,
}

WRITE_PATH = "/v1/influxdb/api/v2/write"

# Defaults, overridable through the environment
DEFAULT_GREPTIME_URL = "http://127.0.0.1"
DEFAULT_GREPTIME_DB = "heartbeat_test"
DEFAULT_PRECISION = "ns"
DEFAULT_TIMEZONE = "UTC"
DEFAULT_TIMEOUT_SECONDS = 10.0
DEFAULT_PORT = 3000


class RelayConfig(BaseModel):
    """Immutable relay settings, read once at startup."""

    model_config = ConfigDict(frozen=True)

    base_url: str = Field(DEFAULT_GREPTIME_URL, description="GreptimeDB base URL")
    database: str = Field(DEFAULT_GREPTIME_DB, description="GreptimeDB database name")
    username: Optional[str] = Field(None, description="Basic auth user, unset for no auth")
    password: Optional[str] = Field(None, repr=False, description="Basic auth password")
    precision: str = Field(DEFAULT_PRECISION, description="Timestamp unit written downstream")
    timezone: str = Field(DEFAULT_TIMEZONE, description="Zone for timestamps without an offset")
    default_device_id: Optional[str] = Field(None, description="Tag used when the request has none")
    request_timeout: float = Field(DEFAULT_TIMEOUT_SECONDS, gt=0)
    port: int = Field(DEFAULT_PORT, gt=0, lt=65536)

    @field_validator("base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @field_validator("precision")
    @classmethod
    def validate_precision(cls, v: str) -> str:
        """Validate the precision is one the write endpoint understands."""
        if v not in PRECISIONS:
            raise ValueError(f"Precision must be one of {', '.join(PRECISIONS)}")
        return v

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, v: str) -> str:
        """Validate the timezone name resolves."""
        load_timezone(v)
        return v

    @property
    def write_url(self) -> str:
        return f"{self.base_url}{WRITE_PATH}"

    @property
    def tz(self) -> tzinfo:
        return load_timezone(self.timezone)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "RelayConfig":
        """Build the configuration from environment variables."""
        env = os.environ if environ is None else environ
        values = {
            "base_url": env.get("GREPTIME_URL", DEFAULT_GREPTIME_URL),
            "database": env.get("GREPTIME_DB", DEFAULT_GREPTIME_DB),
            "username": env.get("GREPTIME_USERNAME") or None,
            "password": env.get("GREPTIME_PASSWORD") or None,
            "precision": env.get("HEART_RATE_PRECISION", DEFAULT_PRECISION),
            "timezone": env.get("HEART_RATE_TIMEZONE", DEFAULT_TIMEZONE),
            "default_device_id": env.get("HEART_RATE_DEVICE_ID") or None,
            "request_timeout": env.get("GREPTIME_TIMEOUT", DEFAULT_TIMEOUT_SECONDS),
            "port": env.get("PORT", DEFAULT_PORT),
        }
        return cls(**values)


def load_timezone(name: str) -> tzinfo:
    """Resolve a timezone name, accepting UTC without tz database lookups."""
    if name.upper() in ("UTC", "Z"):
        return timezone.utc
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError, OSError) as e:
        raise ValueError(f"Unknown timezone: {name}") from e

"""Configuration module — frozen dataclass loaded from environment variables or YAML."""

import logging
import os
from dataclasses import dataclass
from datetime import datetime, timedelta, tzinfo
from zoneinfo import ZoneInfo

import yaml

logger = logging.getLogger(__name__)

LOCALTIME_FILE = "/etc/localtime"


def local_timezone() -> tzinfo:
    """The host's zone, falling back to its current fixed UTC offset."""
    try:
        with open(LOCALTIME_FILE, "rb") as f:
            return ZoneInfo.from_file(f, key="localtime")
    except (OSError, ValueError):
        return datetime.now().astimezone().tzinfo


def resolve_timezone(name: str) -> tzinfo:
    if not name:
        return local_timezone()
    return ZoneInfo(name)


@dataclass(frozen=True)
class StreamConfig:
    path: str = "./logs/application.log"
    max_age_seconds: int = 24 * 3600
    max_size_bytes: int = 10 * 1024 * 1024  # 10 MB
    max_backups: int = 10
    timezone: str = ""

    @property
    def max_age(self) -> timedelta:
        return timedelta(seconds=self.max_age_seconds)

    @property
    def zone(self) -> tzinfo:
        return resolve_timezone(self.timezone)

    @classmethod
    def from_dict(cls, d: dict) -> "StreamConfig":
        return cls(
            path=d.get("path", cls.path),
            max_age_seconds=int(d.get("max_age_seconds", cls.max_age_seconds)),
            max_size_bytes=int(d.get("max_size_bytes", cls.max_size_bytes)),
            max_backups=int(d.get("max_backups", cls.max_backups)),
            timezone=d.get("timezone") or "",
        )


def load_yaml_config(path: str | None = None) -> dict:
    """Load a YAML config file. Returns empty dict if there is nothing to load.

    The path can be overridden via the ``CONFIG_PATH`` environment variable.
    """
    path = os.environ.get("CONFIG_PATH", path)
    if not path:
        return {}
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        logger.info("Loaded YAML config from %s", path)
        return data
    except FileNotFoundError:
        logger.warning("Config file %s not found, using defaults", path)
        return {}


def load_config() -> StreamConfig:
    """Build StreamConfig from environment variables with sensible defaults."""
    # MAX_SIZE_BYTES takes precedence over MAX_SIZE_MB
    raw_bytes = os.environ.get("MAX_SIZE_BYTES")
    raw_mb = os.environ.get("MAX_SIZE_MB")
    if raw_bytes is not None:
        max_size = int(raw_bytes)
    elif raw_mb is not None:
        max_size = int(float(raw_mb) * 1024 * 1024)
    else:
        max_size = StreamConfig.max_size_bytes

    return StreamConfig(
        path=os.environ.get("LOG_PATH", StreamConfig.path),
        max_age_seconds=int(
            os.environ.get("MAX_AGE_SECONDS", StreamConfig.max_age_seconds)
        ),
        max_size_bytes=max_size,
        max_backups=int(os.environ.get("MAX_BACKUPS", StreamConfig.max_backups)),
        timezone=os.environ.get("ROTATE_TIMEZONE", StreamConfig.timezone),
    )

"""Agent configuration loaded from environment variables."""

import os
from dataclasses import dataclass
from typing import Optional
from urllib.parse import urlparse

from ._packages import DEFAULT_COMMAND_TIMEOUT
from .exceptions import ConfigurationError
from .history import DEFAULT_HISTORY_KEEP_INTERVAL
from .host import DEFAULT_UUID_FILE
from .pillars import DEFAULT_TELEMETRY_ROOT_PATH, HISTORY_DIRECTORY
from .platform_client import DEFAULT_PLATFORM_URL, DEFAULT_RESEND_INTERVAL

ENV_ROOT_PATH = "PERCONA_TELEMETRY_ROOT_PATH"
ENV_URL = "PERCONA_TELEMETRY_URL"
ENV_CHECK_INTERVAL = "PERCONA_TELEMETRY_CHECK_INTERVAL"
ENV_RESEND_INTERVAL = "PERCONA_TELEMETRY_RESEND_INTERVAL"
ENV_HISTORY_KEEP_INTERVAL = "PERCONA_TELEMETRY_HISTORY_KEEP_INTERVAL"
ENV_COMMAND_TIMEOUT = "PERCONA_TELEMETRY_COMMAND_TIMEOUT"
ENV_LOG_LEVEL = "PERCONA_TELEMETRY_LOG_LEVEL"
ENV_INSTANCE_ID = "PERCONA_TELEMETRY_INSTANCE_ID"
ENV_UUID_FILE = "PERCONA_TELEMETRY_UUID_FILE"

DEFAULT_CHECK_INTERVAL = 24 * 60 * 60  # seconds
VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


@dataclass
class AgentConfig:
    """Configuration settings for the telemetry agent."""

    root_path: str = DEFAULT_TELEMETRY_ROOT_PATH
    url: str = DEFAULT_PLATFORM_URL
    check_interval: int = DEFAULT_CHECK_INTERVAL
    resend_interval: int = DEFAULT_RESEND_INTERVAL
    history_keep_interval: int = DEFAULT_HISTORY_KEEP_INTERVAL
    command_timeout: int = DEFAULT_COMMAND_TIMEOUT
    log_level: str = "INFO"
    instance_id: Optional[str] = None
    uuid_file: str = DEFAULT_UUID_FILE

    @property
    def history_path(self) -> str:
        return os.path.join(self.root_path, HISTORY_DIRECTORY)

    def validate(self) -> None:
        """
        Validate configuration settings.

        Raises:
            ConfigurationError: If configuration is invalid
        """
        if not self.root_path:
            raise ConfigurationError(
                f"No telemetry root path was specified. Set it with the {ENV_ROOT_PATH} environment variable"
            )
        self._validate_url()

        if self.check_interval <= 0:
            raise ConfigurationError(f"{ENV_CHECK_INTERVAL} must be a positive number of seconds")
        if self.resend_interval < 0:
            raise ConfigurationError(f"{ENV_RESEND_INTERVAL} must not be negative")
        if self.history_keep_interval <= 0:
            raise ConfigurationError(f"{ENV_HISTORY_KEEP_INTERVAL} must be a positive number of seconds")
        if self.command_timeout <= 0:
            raise ConfigurationError(f"{ENV_COMMAND_TIMEOUT} must be a positive number of seconds")

        self.log_level = self.log_level.upper()
        if self.log_level not in VALID_LOG_LEVELS:
            raise ConfigurationError(f"Invalid log level {self.log_level!r}, expected one of {', '.join(VALID_LOG_LEVELS)}")

    def _validate_url(self) -> None:
        if not self.url:
            raise ConfigurationError(
                f"No Percona Platform URL was specified. Set it with --url or the {ENV_URL} environment variable"
            )

        parsed = urlparse(self.url)
        if parsed.scheme not in ("http", "https"):
            raise ConfigurationError("Percona Platform URL must start with http:// or https://")
        if not parsed.netloc:
            raise ConfigurationError("Percona Platform URL must include a valid hostname")


def _int_from_env(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    try:
        return int(value)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got {value!r}")


def load_config() -> AgentConfig:
    """
    Load and validate configuration from environment variables.

    Returns:
        Validated configuration object

    Raises:
        ConfigurationError: If configuration is invalid
    """
    config = AgentConfig(
        root_path=os.getenv(ENV_ROOT_PATH, DEFAULT_TELEMETRY_ROOT_PATH),
        url=os.getenv(ENV_URL, DEFAULT_PLATFORM_URL),
        check_interval=_int_from_env(ENV_CHECK_INTERVAL, DEFAULT_CHECK_INTERVAL),
        resend_interval=_int_from_env(ENV_RESEND_INTERVAL, DEFAULT_RESEND_INTERVAL),
        history_keep_interval=_int_from_env(ENV_HISTORY_KEEP_INTERVAL, DEFAULT_HISTORY_KEEP_INTERVAL),
        command_timeout=_int_from_env(ENV_COMMAND_TIMEOUT, DEFAULT_COMMAND_TIMEOUT),
        log_level=os.getenv(ENV_LOG_LEVEL, "INFO"),
        instance_id=os.getenv(ENV_INSTANCE_ID) or None,
        uuid_file=os.getenv(ENV_UUID_FILE, DEFAULT_UUID_FILE),
    )
    config.validate()
    return config

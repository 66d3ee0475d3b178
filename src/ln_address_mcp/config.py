"""
Configuration Service

Loads server settings from ~/.ln-address-mcp/config.json, with environment
variable overrides. Configuration is READ-ONLY at runtime - tools cannot
modify it.
"""

import json
import logging
import math
import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Optional

logger = logging.getLogger("ln-address-mcp.config")

DEFAULT_TIMEOUT_SECONDS = 15.0
MAX_TIMEOUT_SECONDS = 120.0
DEFAULT_USER_AGENT = "ln-address-mcp/0.1"
DEFAULT_LOG_LEVEL = "INFO"

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

ENV_TIMEOUT = "LN_ADDRESS_HTTP_TIMEOUT"
ENV_USER_AGENT = "LN_ADDRESS_USER_AGENT"
ENV_LOG_LEVEL = "LN_ADDRESS_LOG_LEVEL"


@dataclass(frozen=True)
class HttpSettings:
    """
    Outbound HTTP settings for the discovery and callback requests.

    Note: This dataclass is frozen (immutable) - tools cannot modify at runtime.
    """

    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    """
    Per-request timeout. Always finite; an expired request is reported as
    an unreachable endpoint or callback.
    Default: 15 seconds
    """

    user_agent: str = DEFAULT_USER_AGENT
    """User-Agent header sent to LNURL servers."""

    follow_redirects: bool = True
    """Follow HTTP redirects from LNURL servers."""

    @classmethod
    def from_dict(cls, data: dict) -> "HttpSettings":
        """Create HttpSettings from a dictionary."""
        return cls(
            timeout_seconds=float(data.get("timeoutSeconds", DEFAULT_TIMEOUT_SECONDS)),
            user_agent=str(data.get("userAgent", DEFAULT_USER_AGENT)),
            follow_redirects=bool(data.get("followRedirects", True)),
        )

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "timeoutSeconds": self.timeout_seconds,
            "userAgent": self.user_agent,
            "followRedirects": self.follow_redirects,
        }


@dataclass(frozen=True)
class ServerConfiguration:
    """
    Settings stored in ~/.ln-address-mcp/config.json.

    Note: This dataclass is frozen (immutable) - tools cannot modify at runtime.
    """

    http: HttpSettings = field(default_factory=HttpSettings)
    """Outbound HTTP settings."""

    log_level: str = DEFAULT_LOG_LEVEL
    """Root log level: DEBUG, INFO, WARNING, ERROR or CRITICAL."""

    @classmethod
    def from_dict(cls, data: dict) -> "ServerConfiguration":
        """Create ServerConfiguration from a dictionary."""
        return cls(
            http=HttpSettings.from_dict(data.get("http", {})),
            log_level=str(data.get("logLevel", DEFAULT_LOG_LEVEL)).upper(),
        )

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "http": self.http.to_dict(),
            "logLevel": self.log_level,
        }


class ConfigurationService:
    """
    Service for loading server configuration.
    Configuration is READ-ONLY at runtime - no tool can modify it.
    """

    def __init__(self, config_file_path: Path | None = None) -> None:
        """
        Initialize the configuration service.

        Args:
            config_file_path: Override for ~/.ln-address-mcp/config.json
        """
        self._config_file_path = (
            config_file_path or Path.home() / ".ln-address-mcp" / "config.json"
        )
        self._config_file_exists = False
        self._configuration = self._load_configuration()

    @property
    def configuration(self) -> ServerConfiguration:
        """Gets the server configuration (read-only)."""
        return self._configuration

    @property
    def config_file_path(self) -> str:
        """Gets the path to the configuration file."""
        return str(self._config_file_path)

    @property
    def config_file_exists(self) -> bool:
        """Whether the configuration was loaded from an existing file."""
        return self._config_file_exists

    def reload(self) -> None:
        """Reloads configuration from disk and environment."""
        self._configuration = self._load_configuration()

    def _load_configuration(self) -> ServerConfiguration:
        """Load configuration from file, then apply environment overrides."""
        config = ServerConfiguration()
        self._config_file_exists = self._config_file_path.exists()

        if self._config_file_exists:
            try:
                with open(self._config_file_path, "r", encoding="utf-8") as f:
                    data = json.load(f)
                config = ServerConfiguration.from_dict(data)
                logger.info(f"Loaded config from {self._config_file_path}")
            except (OSError, ValueError, TypeError, AttributeError) as e:
                logger.warning(
                    f"Could not load config from {self._config_file_path}: {e}. "
                    "Using default configuration."
                )
                config = ServerConfiguration()

        config = self._apply_environment(config)
        return self._validate_configuration(config)

    @staticmethod
    def _apply_environment(config: ServerConfiguration) -> ServerConfiguration:
        """Environment variables take precedence over the config file."""
        http = config.http

        timeout = os.getenv(ENV_TIMEOUT)
        if timeout:
            try:
                http = replace(http, timeout_seconds=float(timeout))
            except ValueError:
                logger.warning(f"Ignoring {ENV_TIMEOUT}={timeout!r}: not a number")

        user_agent = os.getenv(ENV_USER_AGENT)
        if user_agent:
            http = replace(http, user_agent=user_agent)

        log_level = os.getenv(ENV_LOG_LEVEL)
        if log_level:
            config = replace(config, log_level=log_level.upper())

        return replace(config, http=http)

    @staticmethod
    def _validate_configuration(config: ServerConfiguration) -> ServerConfiguration:
        """
        Validate configuration values.

        Since config is frozen, invalid values are replaced with defaults on a
        new instance after logging a warning.
        """
        timeout = config.http.timeout_seconds
        if not math.isfinite(timeout) or timeout <= 0 or timeout > MAX_TIMEOUT_SECONDS:
            logger.warning(
                f"timeoutSeconds must be in (0, {MAX_TIMEOUT_SECONDS:g}], got {timeout}. "
                f"Using {DEFAULT_TIMEOUT_SECONDS:g}."
            )
            config = replace(
                config, http=replace(config.http, timeout_seconds=DEFAULT_TIMEOUT_SECONDS)
            )

        if config.log_level not in _LOG_LEVELS:
            logger.warning(
                f"logLevel must be one of {', '.join(_LOG_LEVELS)}, got {config.log_level!r}. "
                f"Using {DEFAULT_LOG_LEVEL}."
            )
            config = replace(config, log_level=DEFAULT_LOG_LEVEL)

        return config


# Singleton instance for easy access
_config_service: Optional[ConfigurationService] = None


def get_config_service() -> ConfigurationService:
    """
    Get the singleton ConfigurationService instance.

    Returns:
        The global ConfigurationService instance.
    """
    global _config_service
    if _config_service is None:
        _config_service = ConfigurationService()
    return _config_service


def get_configuration() -> ServerConfiguration:
    """
    Get the current server configuration.

    Returns:
        The current ServerConfiguration (read-only).
    """
    return get_config_service().configuration

"""
Configuration management for the Terminal Session Client.

This module handles loading, validation, and management of application
configuration from YAML files and environment variables.
"""

import os
import re
import yaml
from dataclasses import dataclass, field
from typing import Any, Dict, Optional
from urllib.parse import urlparse

from .exceptions import ConfigurationError


VALID_AUTH_MODES = ("none", "bearer", "local")
VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
ENV_VAR_PATTERN = re.compile(r"\$\{([^}]+)\}")

DEFAULT_CONFIG_PATHS = [
    "terminal-session-client.yaml",
    "~/.terminal-session-client/config.yaml",
    "/etc/terminal-session-client/config.yaml",
]


@dataclass
class ServerConfig:
    """Connection settings for the terminal-hosting server."""
    base_url: str = "http://127.0.0.1"
    port: int = 4020
    host_header: str = "localhost"
    sessions_endpoint: str = "/api/sessions"
    cleanup_endpoint: str = "/api/cleanup-exited"
    health_endpoint: str = "/api/health"
    request_timeout: float = 30.0
    auth_mode: str = "none"  # "none", "bearer" or "local"
    auth_token: str = ""


@dataclass
class MonitorConfig:
    """Session list polling settings."""
    refresh_interval: float = 3.0
    hide_exited: bool = False


@dataclass
class Config:
    """Main application configuration."""
    server: ServerConfig = field(default_factory=ServerConfig)
    monitor: MonitorConfig = field(default_factory=MonitorConfig)
    log_level: str = "INFO"
    log_file: Optional[str] = None
    structured_logs: bool = False

    def __post_init__(self):
        """Post-initialization to expand paths."""
        if self.log_file:
            self.log_file = os.path.expanduser(self.log_file)

    def validate(self) -> None:
        """Validate configuration and raise ConfigurationError if invalid."""
        errors = []

        parsed = urlparse(self.server.base_url)
        if parsed.scheme not in ("http", "https"):
            errors.append("server.base_url must use http or https")
        elif not parsed.hostname:
            errors.append("server.base_url must include a host name")

        if not isinstance(self.server.port, int) or not 0 < self.server.port <= 65535:
            errors.append("server.port must be between 1 and 65535")

        for name in ("sessions_endpoint", "cleanup_endpoint", "health_endpoint"):
            if not getattr(self.server, name).startswith("/"):
                errors.append(f"server.{name} must start with '/'")

        if not self.server.host_header:
            errors.append("server.host_header is required")

        if self.server.request_timeout <= 0:
            errors.append("server.request_timeout must be positive")

        if self.server.auth_mode not in VALID_AUTH_MODES:
            errors.append(f"server.auth_mode must be one of: {', '.join(VALID_AUTH_MODES)}")
        elif self.server.auth_mode != "none":
            if not self.server.auth_token:
                errors.append(f"server.auth_token is required for auth_mode '{self.server.auth_mode}'")
            elif ENV_VAR_PATTERN.search(self.server.auth_token):
                errors.append(f"server.auth_token references an unset variable: {self.server.auth_token}")

        if self.monitor.refresh_interval <= 0:
            errors.append("monitor.refresh_interval must be positive")

        if self.log_level not in VALID_LOG_LEVELS:
            errors.append(f"log_level must be one of: {', '.join(VALID_LOG_LEVELS)}")

        if errors:
            raise ConfigurationError("Configuration validation failed", "; ".join(errors))

    @property
    def server_address(self) -> str:
        """Base URL and port as a single string, for display."""
        return f"{self.server.base_url.rstrip('/')}:{self.server.port}"


def expand_env_vars(value: Any) -> Any:
    """Recursively replace ``${VAR}`` references with environment values."""
    if isinstance(value, str):
        return ENV_VAR_PATTERN.sub(lambda match: os.getenv(match.group(1), match.group(0)), value)
    if isinstance(value, dict):
        return {key: expand_env_vars(item) for key, item in value.items()}
    if isinstance(value, list):
        return [expand_env_vars(item) for item in value]
    return value


def load_config(config_path: Optional[str] = None) -> Config:
    """
    Load configuration from YAML file and environment variables.

    Args:
        config_path: Path to configuration file. If None, uses default locations.

    Returns:
        Config: Loaded and validated configuration.

    Raises:
        ConfigurationError: If configuration cannot be loaded or is invalid.
    """
    config = Config()

    if config_path is None:
        for path in DEFAULT_CONFIG_PATHS:
            expanded_path = os.path.expanduser(path)
            if os.path.exists(expanded_path):
                config_path = expanded_path
                break
    elif not os.path.exists(os.path.expanduser(config_path)):
        raise ConfigurationError(f"Config file not found: {config_path}")

    if config_path:
        try:
            with open(os.path.expanduser(config_path), 'r', encoding='utf-8') as f:
                yaml_data = expand_env_vars(yaml.safe_load(f))
        except (OSError, yaml.YAMLError) as e:
            raise ConfigurationError(f"Failed to load config file {config_path}", str(e))

        if yaml_data:
            if not isinstance(yaml_data, dict):
                raise ConfigurationError(f"Config file {config_path} must contain a mapping")
            config = _merge_config_data(config, yaml_data)

    config = _load_env_overrides(config)
    config.validate()

    return config


def _merge_config_data(config: Config, data: Dict[str, Any]) -> Config:
    """Merge YAML data into configuration object."""

    server_data = data.get('server') or {}
    for key in ('base_url', 'host_header', 'sessions_endpoint', 'cleanup_endpoint',
                'health_endpoint', 'auth_mode', 'auth_token'):
        if key in server_data:
            setattr(config.server, key, str(server_data[key]))
    if 'port' in server_data:
        config.server.port = _coerce(int, server_data['port'], 'server.port')
    if 'request_timeout' in server_data:
        config.server.request_timeout = _coerce(float, server_data['request_timeout'],
                                                'server.request_timeout')

    monitor_data = data.get('monitor') or {}
    if 'refresh_interval' in monitor_data:
        config.monitor.refresh_interval = _coerce(float, monitor_data['refresh_interval'],
                                                  'monitor.refresh_interval')
    if 'hide_exited' in monitor_data:
        config.monitor.hide_exited = _coerce_bool(monitor_data['hide_exited'], 'monitor.hide_exited')

    if 'log_level' in data:
        config.log_level = str(data['log_level']).upper()
    if data.get('log_file'):
        config.log_file = os.path.expanduser(str(data['log_file']))
    if 'structured_logs' in data:
        config.structured_logs = _coerce_bool(data['structured_logs'], 'structured_logs')

    return config


def _coerce(kind, value: Any, name: str):
    try:
        return kind(value)
    except (TypeError, ValueError):
        raise ConfigurationError(f"Invalid value for {name}", repr(value))


def _coerce_bool(value: Any, name: str) -> bool:
    if not isinstance(value, bool):
        raise ConfigurationError(f"Invalid value for {name}", f"expected true or false, got {value!r}")
    return value


def _load_env_overrides(config: Config) -> Config:
    """Load configuration overrides from environment variables."""

    base_url = os.getenv('TSC_BASE_URL')
    if base_url:
        config.server.base_url = base_url

    port = os.getenv('TSC_PORT')
    if port:
        try:
            config.server.port = int(port)
        except ValueError:
            pass

    auth_mode = os.getenv('TSC_AUTH_MODE')
    if auth_mode:
        config.server.auth_mode = auth_mode

    auth_token = os.getenv('TSC_AUTH_TOKEN')
    if auth_token:
        config.server.auth_token = auth_token

    request_timeout = os.getenv('TSC_REQUEST_TIMEOUT')
    if request_timeout:
        try:
            config.server.request_timeout = float(request_timeout)
        except ValueError:
            pass

    refresh_interval = os.getenv('TSC_REFRESH_INTERVAL')
    if refresh_interval:
        try:
            config.monitor.refresh_interval = float(refresh_interval)
        except ValueError:
            pass

    log_level = os.getenv('LOG_LEVEL')
    if log_level:
        config.log_level = log_level.upper()

    return config


def create_default_config_file(path: str) -> None:
    """Create a default configuration file at the specified path."""

    default_config = {
        'server': {
            'base_url': 'http://127.0.0.1',
            'port': 4020,
            'host_header': 'localhost',
            'sessions_endpoint': '/api/sessions',
            'cleanup_endpoint': '/api/cleanup-exited',
            'health_endpoint': '/api/health',
            'request_timeout': 30,
            'auth_mode': 'none',  # Options: none, bearer, local
            'auth_token': '${TSC_AUTH_TOKEN}',
        },
        'monitor': {
            'refresh_interval': 3,
            'hide_exited': False,
        },
        'log_level': 'INFO',
    }

    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)

    with open(path, 'w', encoding='utf-8') as f:
        yaml.safe_dump(default_config, f, default_flow_style=False, sort_keys=False)

"""
Configuration management for StateBridge.

Handles loading, validation, and access to configuration settings.
"""

import os
import json
import logging
import re
from pathlib import Path
from typing import Any, Dict, Literal, Optional
from enum import Enum

import yaml
from pydantic import BaseModel, Field, field_validator, ValidationError, ConfigDict

logger = logging.getLogger(__name__)

DEFAULT_SIDECAR_PORT = 3500


class LogLevel(str, Enum):
    """Valid log levels."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


def sidecar_endpoint(port: int = DEFAULT_SIDECAR_PORT, host: str = "localhost") -> str:
    """Build the sidecar HTTP API base URL for a given port."""
    return f"http://{host}:{port}/v1.0"


class StateEndpointConfig(BaseModel):
    """Sidecar state endpoint configuration."""
    endpoint: str = Field(
        default_factory=sidecar_endpoint,
        description="Sidecar HTTP API base URL; the state API lives under '<endpoint>/state'"
    )
    timeout_seconds: Optional[float] = Field(
        default=5.0,
        gt=0.0,
        description="Per-request timeout in seconds (None disables it)"
    )
    verify_before_delete: bool = Field(
        default=True,
        description="Read the current state before issuing a delete"
    )

    @field_validator("endpoint")
    @classmethod
    def validate_endpoint(cls, v: str) -> str:
        """Require an absolute http(s) URL without a trailing slash."""
        if not v.startswith(("http://", "https://")):
            raise ValueError("State endpoint must be an http:// or https:// URL")
        return v.rstrip("/")


_SIZE_PATTERN = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*([KMG]?B)?\s*$", re.IGNORECASE)
_SIZE_UNITS = {"B": 1, "KB": 1024, "MB": 1024 ** 2, "GB": 1024 ** 3}


def parse_size(value: str) -> int:
    """Parse a human-readable size such as "10MB" or "512 kb" into bytes."""
    match = _SIZE_PATTERN.match(value)
    if not match:
        raise ValueError(f"Invalid size '{value}', expected e.g. '10MB'")
    number, unit = match.groups()
    return int(float(number) * _SIZE_UNITS[(unit or "B").upper()])


class LoggingConfig(BaseModel):
    """Logging configuration."""
    level: LogLevel = LogLevel.INFO
    format: Literal["json", "text"] = "json"
    file: Optional[str] = None
    rotation_size: int = Field(
        default=10 * 1024 ** 2,
        gt=0,
        description="Log file size in bytes before rotation; accepts sizes like '10MB'"
    )
    rotation_count: int = Field(default=5, ge=0)
    module_levels: Optional[Dict[str, LogLevel]] = Field(
        default=None,
        description="Per-module log levels, e.g., {'statebridge.state.client': 'DEBUG'}"
    )

    @field_validator("rotation_size", mode="before")
    @classmethod
    def validate_rotation_size(cls, v: Any) -> Any:
        if isinstance(v, str):
            return parse_size(v)
        return v

    @field_validator("level", mode="before")
    @classmethod
    def normalize_level(cls, v: Any) -> Any:
        return v.upper() if isinstance(v, str) else v

    @field_validator("module_levels", mode="before")
    @classmethod
    def normalize_module_levels(cls, v: Any) -> Any:
        if isinstance(v, dict):
            return {name: lvl.upper() if isinstance(lvl, str) else lvl for name, lvl in v.items()}
        return v


class ServerConfig(BaseModel):
    """HTTP server configuration."""
    host: str = "0.0.0.0"
    port: int = 8000


class StateBridgeConfig(BaseModel):
    """Main StateBridge configuration schema."""

    version: str = Field(default="0.1.0", description="Configuration version")

    server: ServerConfig = Field(default_factory=ServerConfig)

    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    state: StateEndpointConfig = Field(default_factory=StateEndpointConfig)

    @field_validator("version")
    @classmethod
    def validate_version(cls, v: str) -> str:
        """Validate version format."""
        parts = v.split(".")
        if len(parts) != 3:
            raise ValueError("Version must be in format x.y.z")
        for part in parts:
            if not part.isdigit():
                raise ValueError("Version components must be numeric")
        return v

    model_config = ConfigDict(use_enum_values=True)


class ConfigManager:
    """
    Manages StateBridge configuration loading and validation.

    Configuration precedence (highest to lowest):
    1. CLI arguments
    2. Environment variables (STATEBRIDGE_*, DAPR_HTTP_PORT)
    3. Configuration file (YAML/JSON)
    4. Defaults
    """

    def __init__(self):
        self._config: Optional[StateBridgeConfig] = None
        self._config_file: Optional[Path] = None

    def load(
        self,
        config_file: Optional[str] = None,
        cli_overrides: Optional[Dict[str, Any]] = None
    ) -> StateBridgeConfig:
        """
        Load and validate configuration from multiple sources.

        Args:
            config_file: Path to configuration file (YAML or JSON)
            cli_overrides: Dictionary of CLI argument overrides

        Returns:
            Validated StateBridgeConfig instance

        Raises:
            ValidationError: If configuration is invalid
            FileNotFoundError: If specified config file doesn't exist
        """
        logger.info("Loading StateBridge configuration")

        config_dict: Dict[str, Any] = {}

        if config_file:
            config_dict = self._load_from_file(config_file)
            self._config_file = Path(config_file)
            logger.info(f"Loaded configuration from file: {config_file}")

        env_config = self._load_from_env()
        config_dict = self._merge_configs(config_dict, env_config)
        if env_config:
            logger.info(f"Applied {len(env_config)} environment variable overrides")

        if cli_overrides:
            config_dict = self._merge_configs(config_dict, cli_overrides)
            logger.info(f"Applied {len(cli_overrides)} CLI argument overrides")

        try:
            self._config = StateBridgeConfig(**config_dict)
            logger.info("Configuration validated successfully")
            self._log_configuration()
            return self._config
        except ValidationError as e:
            logger.error(f"Configuration validation failed: {e}")
            raise

    def _load_from_file(self, file_path: str) -> Dict[str, Any]:
        """Load configuration from YAML or JSON file."""
        path = Path(file_path)

        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {file_path}")

        with open(path, 'r') as f:
            if path.suffix in ['.yaml', '.yml']:
                return yaml.safe_load(f) or {}
            elif path.suffix == '.json':
                return json.load(f)
            else:
                raise ValueError(f"Unsupported config file format: {path.suffix}")

    def _load_from_env(self) -> Dict[str, Any]:
        """Load configuration from environment variables."""
        config: Dict[str, Any] = {}

        if host := os.getenv("STATEBRIDGE_HOST"):
            config.setdefault("server", {})["host"] = host
        if port := os.getenv("STATEBRIDGE_PORT"):
            config.setdefault("server", {})["port"] = int(port)

        if log_level := os.getenv("STATEBRIDGE_LOG_LEVEL"):
            config.setdefault("logging", {})["level"] = log_level.upper()
        if log_file := os.getenv("STATEBRIDGE_LOG_FILE"):
            config.setdefault("logging", {})["file"] = log_file
        if log_format := os.getenv("STATEBRIDGE_LOG_FORMAT"):
            config.setdefault("logging", {})["format"] = log_format.lower()

        # An explicit endpoint wins over the port the sidecar injector exports
        if endpoint := os.getenv("STATEBRIDGE_STATE_ENDPOINT"):
            config.setdefault("state", {})["endpoint"] = endpoint
        elif dapr_port := os.getenv("DAPR_HTTP_PORT"):
            config.setdefault("state", {})["endpoint"] = sidecar_endpoint(int(dapr_port))
        if timeout := os.getenv("STATEBRIDGE_STATE_TIMEOUT"):
            config.setdefault("state", {})["timeout_seconds"] = float(timeout)
        if verify := os.getenv("STATEBRIDGE_VERIFY_BEFORE_DELETE"):
            config.setdefault("state", {})["verify_before_delete"] = verify.lower() in ['true', '1', 'yes']

        return config

    def _merge_configs(self, base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        """Deep merge two configuration dictionaries."""
        result = base.copy()

        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._merge_configs(result[key], value)
            else:
                result[key] = value

        return result

    def _log_configuration(self) -> None:
        """Log the loaded configuration."""
        if not self._config:
            return

        config_dict = self._config.model_dump()
        logger.info(f"Active configuration: {json.dumps(config_dict, indent=2)}")

    def get_config(self) -> StateBridgeConfig:
        """
        Get the loaded configuration.

        Raises:
            RuntimeError: If configuration hasn't been loaded
        """
        if self._config is None:
            raise RuntimeError("Configuration not loaded. Call load() first.")
        return self._config

    def reload(self) -> StateBridgeConfig:
        """Reload configuration from the same sources."""
        config_file = str(self._config_file) if self._config_file else None
        return self.load(config_file=config_file)

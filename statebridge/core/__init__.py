"""Core module initialization."""

from .config_manager import ConfigManager, StateBridgeConfig, StateEndpointConfig
from .logging_config import setup_logging, get_logger
from .runtime import StateBridgeRuntime, create_app

__all__ = [
    "ConfigManager",
    "StateBridgeConfig",
    "StateEndpointConfig",
    "setup_logging",
    "get_logger",
    "StateBridgeRuntime",
    "create_app",
]

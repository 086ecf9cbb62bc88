"""Configuration management for the debug protocol bridge."""

from diagbridge.config.bridge_config import DEFAULT_CONFIG
from diagbridge.config.bridge_config import BridgeConfig
from diagbridge.config.config_manager import ConfigContext
from diagbridge.config.config_manager import config_context
from diagbridge.config.config_manager import get_config
from diagbridge.config.config_manager import reset_config
from diagbridge.config.config_manager import set_config
from diagbridge.config.config_manager import update_config

__all__ = [
    "DEFAULT_CONFIG",
    "BridgeConfig",
    "ConfigContext",
    "config_context",
    "get_config",
    "reset_config",
    "set_config",
    "update_config",
]

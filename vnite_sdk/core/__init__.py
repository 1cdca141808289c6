"""Core managers shared by the SDK's command-line tools."""

from vnite_sdk.core.base import VniteManager
from vnite_sdk.core.config_manager import ConfigManager, ConfigSchema, PackagingSettings
from vnite_sdk.core.logging_manager import LoggingManager, get_logger

__all__ = [
    "VniteManager",
    "ConfigManager",
    "ConfigSchema",
    "PackagingSettings",
    "LoggingManager",
    "get_logger",
]

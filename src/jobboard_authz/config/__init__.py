"""
Authorization Service Configuration Module

Provides centralized configuration management for the service.
"""

from .schema import AppConfig, ServerConfig, StorageConfig, AuthConfig, LoggingConfig
from .loader import load_config, load_config_from_file

__all__ = [
    "AppConfig",
    "ServerConfig",
    "StorageConfig",
    "AuthConfig",
    "LoggingConfig",
    "load_config",
    "load_config_from_file",
]

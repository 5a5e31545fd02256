"""
Configuration module for Pattern Engine
Centralized configuration management with environment-specific settings
"""

from .settings import Config, EngineConfig, LoggingConfig

# Global configuration instance
config = Config()

# Export commonly used configurations
ENGINE_CONFIG = config.engine
LOGGING_CONFIG = config.logging

__all__ = [
    "Config",
    "EngineConfig",
    "LoggingConfig",
    "config",
    "ENGINE_CONFIG",
    "LOGGING_CONFIG",
]

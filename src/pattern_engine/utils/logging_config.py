"""
Centralized logging configuration for Pattern Engine
"""

import logging
import logging.config
import os
from pathlib import Path
from typing import Optional

import yaml

from ..constants import LOGGING_CONFIG_ENV


def setup_logging(
    config_path: Optional[str] = None,
    log_level: Optional[str] = None,
    log_dir: Optional[str] = None
) -> None:
    """
    Setup centralized logging configuration

    Args:
        config_path: Path to logging configuration YAML file
        log_level: Override log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_dir: Directory for log files
    """
    if config_path is None:
        if LOGGING_CONFIG_ENV in os.environ:
            config_path = Path(os.environ[LOGGING_CONFIG_ENV])
        else:
            config_path = Path(__file__).parent.parent / "config" / "logging.yml"

    if log_dir is None:
        log_dir = Path.cwd() / "logs"
    log_dir = Path(log_dir)

    if Path(config_path).exists():
        try:
            with open(config_path, "r", encoding="utf-8") as f:
                config = yaml.safe_load(f)

            # File handlers get absolute paths under log_dir
            for handler_config in config.get("handlers", {}).values():
                if "filename" in handler_config:
                    filename = handler_config["filename"]
                    if not os.path.isabs(filename):
                        log_dir.mkdir(parents=True, exist_ok=True)
                        handler_config["filename"] = str(log_dir / filename)

            if log_level:
                level = log_level.upper()
                config.setdefault("root", {})["level"] = level
                for logger_config in config.get("loggers", {}).values():
                    logger_config["level"] = level

            logging.config.dictConfig(config)
            return
        except (OSError, ValueError, TypeError, yaml.YAMLError) as e:
            logging.getLogger(__name__).warning(f"Failed to load logging config: {e}")

    logging.basicConfig(
        level=getattr(logging, log_level.upper() if log_level else "INFO", logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger with proper configuration

    Args:
        name: Logger name (usually __name__)

    Returns:
        Configured logger instance
    """
    return logging.getLogger(name)


def log_error(logger: logging.Logger, error: Exception, context: str = "") -> None:
    """
    Log error with context

    Args:
        logger: Logger instance
        error: Exception instance
        context: Additional context information
    """
    error_msg = f"{type(error).__name__}: {str(error)}"
    if context:
        error_msg = f"{context} - {error_msg}"

    logger.error(error_msg, exc_info=True)


def log_performance(logger: logging.Logger, operation: str, duration: float) -> None:
    """Log performance metrics"""
    logger.debug(f"Performance: {operation} completed in {duration:.3f}s")


class LoggingMixin:
    """
    Mixin class to add logging capabilities to any class
    """

    @property
    def logger(self) -> logging.Logger:
        """Get logger for this class"""
        if not hasattr(self, "_logger"):
            self._logger = get_logger(f"{self.__module__}.{self.__class__.__name__}")
        return self._logger

    @logger.setter
    def logger(self, value: logging.Logger) -> None:
        self._logger = value

    def log_error(self, error: Exception, context: str = "") -> None:
        """Log error"""
        log_error(self.logger, error, context)

    def log_performance(self, operation: str, duration: float) -> None:
        """Log performance"""
        log_performance(self.logger, operation, duration)

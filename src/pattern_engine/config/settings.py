"""
Configuration settings for Pattern Engine
Structured configuration classes with validation and type hints
"""

import os
from dataclasses import dataclass
from typing import Any, Dict

from pydantic import BaseModel, Field, field_validator, model_validator

from ..constants import (
    CONFIDENCE_STEP,
    DEFAULT_CONTEXT_WINDOW,
    DEFAULT_PRECISION_THRESHOLD,
    DEFAULT_REGEX_TIMEOUT,
    ENV_PREFIX,
    FALLBACK_EXCLUSION_MIN_OCCURRENCES,
    MAX_CONFIDENCE_THRESHOLD,
    MAX_REGEX_LENGTH,
    NEGATIVE_SAMPLE_LIMIT,
)


def _env(name: str, default: str) -> str:
    return os.getenv(f"{ENV_PREFIX}{name}", default)


@dataclass
class LoggingConfig:
    """Logging configuration settings"""

    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    date_format: str = "%Y-%m-%d %H:%M:%S"
    file_logging: bool = False
    console_logging: bool = True
    log_dir: str = "logs"
    environment: str = "development"

    def __post_init__(self):
        """Post-initialization setup"""
        if self.environment == "production":
            self.level = "WARNING"
            self.console_logging = False
        elif self.environment == "staging":
            self.level = "INFO"

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        return {
            "level": self.level,
            "format": self.format,
            "date_format": self.date_format,
            "file_logging": self.file_logging,
            "console_logging": self.console_logging,
            "log_dir": self.log_dir,
            "environment": self.environment,
        }


class EngineConfig(BaseModel):
    """Matching and refinement settings with ENV override support"""

    model_config = {"validate_assignment": True}

    # Refinement eligibility (global, not per pattern)
    precision_threshold: float = Field(default_factory=lambda: float(_env("PRECISION_THRESHOLD", str(DEFAULT_PRECISION_THRESHOLD))))

    # Matching
    context_window: int = Field(default_factory=lambda: int(_env("CONTEXT_WINDOW", str(DEFAULT_CONTEXT_WINDOW))))
    regex_timeout_seconds: float = Field(default_factory=lambda: float(_env("REGEX_TIMEOUT_SECONDS", str(DEFAULT_REGEX_TIMEOUT))))
    max_regex_length: int = Field(default_factory=lambda: int(_env("MAX_REGEX_LENGTH", str(MAX_REGEX_LENGTH))))
    max_text_length: int = Field(default_factory=lambda: int(_env("MAX_TEXT_LENGTH", "0")))

    # Suggestion policy
    negative_sample_limit: int = Field(default_factory=lambda: int(_env("NEGATIVE_SAMPLE_LIMIT", str(NEGATIVE_SAMPLE_LIMIT))))
    confidence_step: float = Field(default_factory=lambda: float(_env("CONFIDENCE_STEP", str(CONFIDENCE_STEP))))
    max_confidence_threshold: float = Field(default_factory=lambda: float(_env("MAX_CONFIDENCE_THRESHOLD", str(MAX_CONFIDENCE_THRESHOLD))))
    fallback_exclusion_min_occurrences: int = Field(
        default_factory=lambda: int(_env("FALLBACK_EXCLUSION_MIN_OCCURRENCES", str(FALLBACK_EXCLUSION_MIN_OCCURRENCES)))
    )

    @field_validator("precision_threshold", "confidence_step", "max_confidence_threshold")
    @classmethod
    def validate_thresholds(cls, v: float) -> float:
        """Validate threshold values"""
        if not 0.0 <= v <= 1.0:
            raise ValueError("Thresholds must be between 0.0 and 1.0")
        return v

    @field_validator("regex_timeout_seconds")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        """Validate regex timeout"""
        if v <= 0:
            raise ValueError("Regex timeout must be positive")
        if v > 60:
            raise ValueError("Regex timeout must not exceed 60 seconds")
        return v

    @field_validator("context_window", "max_text_length")
    @classmethod
    def validate_non_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError("Value must not be negative")
        return v

    @field_validator("max_regex_length", "negative_sample_limit", "fallback_exclusion_min_occurrences")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("Value must be positive")
        return v

    @model_validator(mode="after")
    def validate_configuration_consistency(self) -> "EngineConfig":
        """Validate configuration consistency"""
        if self.max_confidence_threshold < self.confidence_step:
            raise ValueError("max_confidence_threshold must not be lower than confidence_step")
        return self


class Config:
    """Main configuration class for Pattern Engine"""

    def __init__(self, environment: str = None):
        """
        Initialize configuration

        Args:
            environment: Environment name (development, staging, production)
        """
        self.environment = environment or os.getenv("APP_ENV", "development")
        self._load_config()

    def _load_config(self) -> None:
        """Load configuration based on environment"""
        self.engine = EngineConfig()
        self.logging = LoggingConfig(environment=self.environment)

    def get_all_config(self) -> Dict[str, Any]:
        """Get all configuration as dictionary"""
        return {
            "environment": self.environment,
            "engine": self.engine.model_dump(),
            "logging": self.logging.to_dict(),
        }

    def validate(self) -> bool:
        """Validate configuration"""
        try:
            EngineConfig.model_validate(self.engine.model_dump())
        except ValueError:
            return False
        return self.logging.level.upper() in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

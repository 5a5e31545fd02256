"""
Custom exceptions for Pattern Engine
Centralized exception handling with proper error codes and messages
"""

from typing import Any, Dict, Optional


class PatternEngineException(Exception):
    """Base exception for Pattern Engine"""

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        """
        Initialize exception

        Args:
            message: Error message
            error_code: Error code for responses to calling services
            details: Additional error details
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}


class ConfigurationError(PatternEngineException):
    """Configuration related errors"""
    pass


class ServiceInitializationError(PatternEngineException):
    """Service initialization errors"""
    pass


class ValidationError(PatternEngineException):
    """Input validation errors"""
    pass


class PatternError(PatternEngineException):
    """Invalid pattern definition"""
    pass


class RefinementError(PatternEngineException):
    """Refinement rejected before anything was persisted"""
    pass


class PatternNotFoundError(PatternEngineException):
    """Unknown pattern id"""

    def __init__(self, pattern_id: str):
        super().__init__(
            f"Pattern not found: {pattern_id}",
            "PATTERN_NOT_FOUND",
            {"pattern_id": pattern_id},
        )
        self.pattern_id = pattern_id


class RegexTimeoutError(PatternEngineException):
    """Regex scan exceeded the guard timeout"""

    def __init__(self, regex_source: str, timeout: float):
        super().__init__(
            f"Regex scan exceeded {timeout}s",
            "REGEX_TIMEOUT",
            {"regex": regex_source, "timeout": timeout},
        )


def handle_exception(exception: Exception) -> PatternEngineException:
    """
    Convert generic exceptions to PatternEngineException

    Args:
        exception: Original exception

    Returns:
        PatternEngineException instance
    """
    if isinstance(exception, PatternEngineException):
        return exception

    if isinstance(exception, ValueError):
        return ValidationError(str(exception))
    elif isinstance(exception, KeyError):
        return ConfigurationError(f"Missing configuration: {str(exception)}")
    elif isinstance(exception, FileNotFoundError):
        return ConfigurationError(f"File not found: {str(exception)}")
    elif isinstance(exception, ImportError):
        return ServiceInitializationError(f"Import error: {str(exception)}")
    else:
        return PatternEngineException(
            f"Unexpected error: {str(exception)}",
            error_code="UNEXPECTED_ERROR",
            details={"original_type": type(exception).__name__}
        )


def create_error_response(exception: PatternEngineException) -> Dict[str, Any]:
    """
    Create standardized error response

    Args:
        exception: PatternEngineException instance

    Returns:
        Dictionary with error response
    """
    return {
        "error": True,
        "error_code": exception.error_code,
        "message": exception.message,
        "details": exception.details
    }

"""
Core services of the Pattern Engine
"""

from .base_service import BaseService
from .pattern_engine import PatternEngineService

__all__ = ["BaseService", "PatternEngineService"]

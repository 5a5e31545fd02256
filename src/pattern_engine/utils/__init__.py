"""
Utility modules for Pattern Engine
"""

from .logging_config import LoggingMixin, get_logger, setup_logging
from .pii_masking import mask_pii_for_logging, safe_text_preview

__all__ = [
    "setup_logging",
    "get_logger",
    "LoggingMixin",
    "mask_pii_for_logging",
    "safe_text_preview",
]

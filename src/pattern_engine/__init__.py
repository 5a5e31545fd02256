"""
Pattern Engine - sensitive-data pattern matching with feedback-driven refinement.
"""

__version__ = "0.1.0"
__all__ = ["__version__"]

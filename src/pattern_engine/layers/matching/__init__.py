from .matcher import PatternMatcher, extract_surrounding_context, resolve_overlaps
from .regex_guard import RegexGuard, clear_regex_cache

__all__ = [
    "PatternMatcher",
    "RegexGuard",
    "clear_regex_cache",
    "extract_surrounding_context",
    "resolve_overlaps",
]

"""
Static data for Pattern Engine
"""

from .templates import (
    PATTERN_TEMPLATES,
    PatternTemplate,
    build_pattern_from_template,
    find_matching_template,
    generate_template_regexes,
    get_template,
)

__all__ = [
    "PATTERN_TEMPLATES",
    "PatternTemplate",
    "build_pattern_from_template",
    "find_matching_template",
    "generate_template_regexes",
    "get_template",
]

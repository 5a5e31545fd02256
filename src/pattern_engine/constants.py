"""
Constants for Pattern Engine
Centralized constants and default values
"""

from typing import Dict, List

# Match confidence by detection strategy (regex evidence is stronger)
REGEX_MATCH_CONFIDENCE = 0.9
EXAMPLE_MATCH_CONFIDENCE = 0.85

# Pattern defaults
DEFAULT_CONFIDENCE_THRESHOLD = 0.7
DEFAULT_AUTO_REFINE_THRESHOLD = 3

# Global refinement eligibility
DEFAULT_PRECISION_THRESHOLD = 0.7

# Characters captured on each side of a match for surrounding context
DEFAULT_CONTEXT_WINDOW = 50

# Confidence threshold raise policy
CONFIDENCE_STEP = 0.1
MAX_CONFIDENCE_THRESHOLD = 0.95

# Feedback analysis
NEGATIVE_SAMPLE_LIMIT = 50
COMMON_FALSE_POSITIVE_LIMIT = 5
FALLBACK_EXCLUSION_MIN_OCCURRENCES = 3
DEFAULT_HISTORY_PAGE_SIZE = 100

# Regex guard
MAX_REGEX_LENGTH = 1000
DEFAULT_REGEX_TIMEOUT = 1.0
REGEX_CACHE_SIZE = 512

# Default user for feedback without an explicit author
SYSTEM_USER = "system"

# Reason codes, lowest-risk remediation first. Used to break ties between
# equally frequent reasons.
REASON_SEVERITY_ORDER: List[str] = [
    "too_broad",
    "invalid_data",
    "not_sensitive",
    "wrong_format",
    "missing_context",
]

REASON_DESCRIPTIONS: Dict[str, str] = {
    "wrong_format": "Wrong format (e.g., missing dashes)",
    "missing_context": "No context indicating sensitive data",
    "invalid_data": "Invalid/test data (e.g., 123456789)",
    "not_sensitive": "Not actually sensitive information",
    "too_broad": "Pattern matching too broadly",
}

# Separators considered when describing the structural shape of a matched text
SHAPE_SEPARATORS = "-./ ()"

# Logging
LOGGING_CONFIG_ENV = "PATTERN_ENGINE_LOGGING_CONFIG"
ENV_PREFIX = "PATTERN_ENGINE__"

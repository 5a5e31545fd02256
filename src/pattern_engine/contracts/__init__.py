"""
Contracts shared across the pattern engine layers
"""

from .feedback_contracts import (
    FeedbackContext,
    FeedbackEvent,
    FeedbackStatistics,
    FeedbackType,
    PatternFeedbackStats,
    PatternMetrics,
    ReasonCode,
    RefinementCandidate,
)
from .pattern_contracts import Match, MatchStrategy, Pattern, PatternType
from .refinement_contracts import Refinement, RefinementSuggestion, ShapeGroup

__all__ = [
    "FeedbackContext",
    "FeedbackEvent",
    "FeedbackStatistics",
    "FeedbackType",
    "Match",
    "MatchStrategy",
    "Pattern",
    "PatternFeedbackStats",
    "PatternMetrics",
    "PatternType",
    "ReasonCode",
    "Refinement",
    "RefinementCandidate",
    "RefinementSuggestion",
    "ShapeGroup",
]

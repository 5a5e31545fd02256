"""
Refinement contracts: suggestions produced from negative feedback and the
refinements an operator applies.
"""

from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from .feedback_contracts import ReasonCode


class ShapeGroup(BaseModel):
    """Offending matched texts sharing one structural shape"""

    signature: str
    digit_runs: List[int] = Field(default_factory=list)
    has_separators: bool = False
    texts: List[str] = Field(default_factory=list)
    count: int = 0


class RefinementSuggestion(BaseModel):
    """
    Proposed edits for one pattern.

    ``confidence_adjustment`` is the proposed new confidence threshold, not a
    delta. ``reasoning`` explains, in order, which evidence drove each field.
    """

    pattern_id: str
    exclude_patterns: Optional[List[str]] = None
    confidence_adjustment: Optional[float] = None
    reasoning: List[str] = Field(min_length=1)
    dominant_reason: Optional[ReasonCode] = None
    reason_counts: Dict[str, int] = Field(default_factory=dict)
    shape_groups: List[ShapeGroup] = Field(default_factory=list)
    precision: float = 1.0

    @property
    def has_changes(self) -> bool:
        return bool(self.exclude_patterns) or self.confidence_adjustment is not None


class Refinement(BaseModel):
    """Edits to commit to a pattern"""

    exclude_patterns: List[str] = Field(default_factory=list)
    confidence_threshold: Optional[float] = None

    @classmethod
    def from_suggestion(cls, suggestion: RefinementSuggestion) -> "Refinement":
        return cls(
            exclude_patterns=list(suggestion.exclude_patterns or []),
            confidence_threshold=suggestion.confidence_adjustment,
        )

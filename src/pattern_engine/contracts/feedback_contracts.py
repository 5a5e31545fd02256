"""
Feedback contracts: immutable feedback events and the metrics derived from them.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from ..constants import SYSTEM_USER
from ..exceptions import ValidationError
from .pattern_contracts import Pattern


class FeedbackType(str, Enum):
    POSITIVE = "positive"
    NEGATIVE = "negative"


class ReasonCode(str, Enum):
    """Why a match was judged a false positive"""

    WRONG_FORMAT = "wrong_format"
    MISSING_CONTEXT = "missing_context"
    INVALID_DATA = "invalid_data"
    NOT_SENSITIVE = "not_sensitive"
    TOO_BROAD = "too_broad"


class FeedbackContext(str, Enum):
    """Where the judgment was made"""

    ANNOTATION = "annotation"
    REDACTION = "redaction"
    TESTING = "testing"
    PIPELINE = "pipeline"


def _parse_enum(enum_cls, value, label: str):
    if value is None or isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(str(value).strip().lower())
    except ValueError:
        raise ValidationError(
            f"Unknown {label}: {value}",
            details={"allowed": [member.value for member in enum_cls]},
        )


@dataclass(frozen=True)
class FeedbackEvent:
    """Human judgment about one match. Immutable once created."""

    pattern_id: str
    feedback_type: FeedbackType
    matched_text: str
    surrounding_context: str = ""
    original_confidence: Optional[float] = None
    reason_code: Optional[ReasonCode] = None
    context: FeedbackContext = FeedbackContext.ANNOTATION
    user_comment: Optional[str] = None
    user_id: str = SYSTEM_USER
    session_id: Optional[str] = None
    data_source_id: Optional[str] = None
    id: Optional[str] = None
    created_at: Optional[datetime] = None

    def __post_init__(self):
        # frozen dataclass: normalize through object.__setattr__
        feedback_type = _parse_enum(FeedbackType, self.feedback_type, "feedback type")
        if feedback_type is None:
            raise ValidationError("Feedback type is required")
        reason_code = _parse_enum(ReasonCode, self.reason_code, "reason code")
        context = _parse_enum(FeedbackContext, self.context, "feedback context") or FeedbackContext.ANNOTATION
        object.__setattr__(self, "feedback_type", feedback_type)
        object.__setattr__(self, "reason_code", reason_code)
        object.__setattr__(self, "context", context)

        if not self.pattern_id:
            raise ValidationError("Feedback requires a pattern id")
        if reason_code is not None and feedback_type is FeedbackType.POSITIVE:
            raise ValidationError(
                "Reason code is only allowed on negative feedback",
                details={"reason_code": reason_code.value},
            )
        if self.original_confidence is not None and not 0.0 <= self.original_confidence <= 1.0:
            raise ValidationError(
                "Original confidence must be between 0.0 and 1.0",
                details={"original_confidence": self.original_confidence},
            )

    @property
    def is_negative(self) -> bool:
        return self.feedback_type is FeedbackType.NEGATIVE

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "pattern_id": self.pattern_id,
            "feedback_type": self.feedback_type.value,
            "matched_text": self.matched_text,
            "surrounding_context": self.surrounding_context,
            "original_confidence": self.original_confidence,
            "reason_code": self.reason_code.value if self.reason_code else None,
            "context": self.context.value,
            "user_comment": self.user_comment,
            "user_id": self.user_id,
            "session_id": self.session_id,
            "data_source_id": self.data_source_id,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FeedbackEvent":
        created_at = data.get("created_at")
        if isinstance(created_at, str):
            created_at = datetime.fromisoformat(created_at)
        return cls(
            id=data.get("id"),
            pattern_id=data["pattern_id"],
            feedback_type=data["feedback_type"],
            matched_text=data.get("matched_text", ""),
            surrounding_context=data.get("surrounding_context") or "",
            original_confidence=data.get("original_confidence"),
            reason_code=data.get("reason_code"),
            context=data.get("context") or FeedbackContext.ANNOTATION,
            user_comment=data.get("user_comment"),
            user_id=data.get("user_id") or SYSTEM_USER,
            session_id=data.get("session_id"),
            data_source_id=data.get("data_source_id"),
            created_at=created_at,
        )


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class PatternMetrics(BaseModel):
    """Accuracy metrics recomputed from the feedback log"""

    pattern_id: str
    positive: int = 0
    negative: int = 0
    total: int = 0
    precision: float = 1.0
    common_false_positives: List[str] = Field(default_factory=list)
    last_updated: datetime = Field(default_factory=utc_now)


class PatternFeedbackStats(BaseModel):
    """Per-pattern line of the global feedback statistics"""

    pattern_id: str
    category: str = ""
    feedback_count: int
    positive_count: int
    negative_count: int
    accuracy: float


class FeedbackStatistics(BaseModel):
    total_feedback: int = 0
    positive_feedback: int = 0
    negative_feedback: int = 0
    pattern_stats: List[PatternFeedbackStats] = Field(default_factory=list)


@dataclass
class RefinementCandidate:
    """A pattern currently eligible for refinement, with its metrics"""

    pattern: Pattern
    metrics: PatternMetrics

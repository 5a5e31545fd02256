"""
Pattern and match contracts.

A Pattern is a named detector combining regular expressions and literal
examples with exclusion and confidence settings. A Match is a transient,
located span attributed to exactly one pattern.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Set

from ..constants import DEFAULT_AUTO_REFINE_THRESHOLD, DEFAULT_CONFIDENCE_THRESHOLD
from ..exceptions import ValidationError


class PatternType(str, Enum):
    """Closed set of pattern types"""

    IDENTITY_DATA = "identity_data"
    FINANCIAL_DATA = "financial_data"
    HEALTH_DATA = "health_data"
    CLASSIFICATION_LABEL = "classification_label"
    CUSTOM = "custom"

    @classmethod
    def parse(cls, value: Any) -> "PatternType":
        if isinstance(value, cls):
            return value
        normalized = str(value).strip().lower().replace("-", "_")
        try:
            return cls(normalized)
        except ValueError:
            raise ValidationError(
                f"Unknown pattern type: {value}",
                details={"allowed": [t.value for t in cls]},
            )


class MatchStrategy(str, Enum):
    """Detection strategy that produced a candidate"""

    REGEX = "regex"
    EXAMPLE = "example"


def _parse_datetime(value: Any) -> Optional[datetime]:
    if value is None or isinstance(value, datetime):
        return value
    return datetime.fromisoformat(value)


@dataclass
class Pattern:
    """Named detector definition"""

    id: str
    category: str
    type: PatternType = PatternType.CUSTOM
    name: str = ""
    description: str = ""
    regex_set: List[str] = field(default_factory=list)
    examples: Set[str] = field(default_factory=set)
    excluded_examples: Set[str] = field(default_factory=set)
    confidence_threshold: float = DEFAULT_CONFIDENCE_THRESHOLD
    auto_refine_threshold: int = DEFAULT_AUTO_REFINE_THRESHOLD
    is_active: bool = True
    last_refined_at: Optional[datetime] = None

    def __post_init__(self):
        self.type = PatternType.parse(self.type)
        self.regex_set = list(self.regex_set)
        self.examples = set(self.examples)
        self.excluded_examples = set(self.excluded_examples)
        if not self.name:
            self.name = self.id

    def is_excluded(self, text: str) -> bool:
        """Case-insensitive exact comparison against the exclusion set"""
        folded = text.casefold()
        return any(folded == excluded.casefold() for excluded in self.excluded_examples)

    def has_detectors(self) -> bool:
        return bool(self.regex_set) or any(example for example in self.examples)

    def copy(self) -> "Pattern":
        return replace(
            self,
            regex_set=list(self.regex_set),
            examples=set(self.examples),
            excluded_examples=set(self.excluded_examples),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Serialize; examples and exclusions as sorted lists, regexes in order"""
        return {
            "id": self.id,
            "category": self.category,
            "type": self.type.value,
            "name": self.name,
            "description": self.description,
            "regex_set": list(self.regex_set),
            "examples": sorted(self.examples),
            "excluded_examples": sorted(self.excluded_examples),
            "confidence_threshold": self.confidence_threshold,
            "auto_refine_threshold": self.auto_refine_threshold,
            "is_active": self.is_active,
            "last_refined_at": self.last_refined_at.isoformat() if self.last_refined_at else None,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Pattern":
        return cls(
            id=data["id"],
            category=data.get("category", ""),
            type=data.get("type", PatternType.CUSTOM),
            name=data.get("name", ""),
            description=data.get("description", ""),
            regex_set=data.get("regex_set") or [],
            examples=data.get("examples") or [],
            excluded_examples=data.get("excluded_examples") or [],
            confidence_threshold=data.get("confidence_threshold", DEFAULT_CONFIDENCE_THRESHOLD),
            auto_refine_threshold=data.get("auto_refine_threshold", DEFAULT_AUTO_REFINE_THRESHOLD),
            is_active=data.get("is_active", True),
            last_refined_at=_parse_datetime(data.get("last_refined_at")),
        )


@dataclass(frozen=True)
class Match:
    """Resolved match; half-open [start, end) character offsets"""

    pattern_id: str
    text: str
    start: int
    end: int
    confidence: float
    strategy: MatchStrategy = MatchStrategy.REGEX
    excluded: bool = False

    def overlaps(self, other: "Match") -> bool:
        return self.start < other.end and other.start < self.end

    def to_dict(self) -> Dict[str, Any]:
        return {
            "pattern_id": self.pattern_id,
            "text": self.text,
            "start": self.start,
            "end": self.end,
            "confidence": self.confidence,
            "strategy": self.strategy.value,
            "excluded": self.excluded,
        }

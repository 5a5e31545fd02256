"""
Pattern Registry

Owns pattern definitions and their mutable refinement state. No matching or
feedback logic lives here.
"""

import threading
from abc import ABC, abstractmethod
from typing import Dict, Iterable, List, Optional

from ...contracts import Pattern
from ...exceptions import PatternError, PatternNotFoundError
from ...utils.logging_config import get_logger
from ..matching.regex_guard import RegexGuard


class PatternRegistry(ABC):
    """Storage contract for pattern definitions"""

    @abstractmethod
    def get(self, pattern_id: str) -> Pattern:
        """Return the pattern or raise PatternNotFoundError"""

    @abstractmethod
    def list_all(self) -> List[Pattern]:
        pass

    @abstractmethod
    def save(self, pattern: Pattern) -> Pattern:
        """Upsert. ``last_refined_at`` is stored exactly as given."""

    @abstractmethod
    def delete(self, pattern_id: str) -> None:
        pass

    def exists(self, pattern_id: str) -> bool:
        try:
            self.get(pattern_id)
        except PatternNotFoundError:
            return False
        return True

    def list_active(self) -> List[Pattern]:
        return [pattern for pattern in self.list_all() if pattern.is_active]

    def get_many(self, pattern_ids: Iterable[str]) -> List[Pattern]:
        """Known patterns among ``pattern_ids``, in request order; unknown ids are skipped"""
        patterns = []
        seen = set()
        for pattern_id in pattern_ids:
            if pattern_id in seen:
                continue
            seen.add(pattern_id)
            try:
                patterns.append(self.get(pattern_id))
            except PatternNotFoundError:
                continue
        return patterns


logger = get_logger(__name__)


def validate_pattern(pattern: Pattern, guard: Optional[RegexGuard] = None) -> List[int]:
    """
    Raise PatternError if the definition cannot be stored.

    Regexes the guard rejects do not block storage; the matcher skips them.

    Returns:
        Positions of rejected regexes in ``regex_set``
    """
    if not pattern.id or not str(pattern.id).strip():
        raise PatternError("Pattern id is required")
    if not 0.0 <= pattern.confidence_threshold <= 1.0:
        raise PatternError(
            "Confidence threshold must be between 0.0 and 1.0",
            details={"pattern_id": pattern.id, "confidence_threshold": pattern.confidence_threshold},
        )
    if pattern.auto_refine_threshold < 0:
        raise PatternError(
            "Auto-refine threshold must not be negative",
            details={"pattern_id": pattern.id, "auto_refine_threshold": pattern.auto_refine_threshold},
        )
    guard = guard or RegexGuard()
    rejected = []
    for index, source in enumerate(pattern.regex_set):
        try:
            guard.compile(source)
        except PatternError as e:
            rejected.append(index)
            logger.warning(f"Pattern {pattern.id} regex #{index} will be skipped when matching: {e.message}")
    return rejected


class InMemoryPatternRegistry(PatternRegistry):
    """Thread-safe in-memory registry. Stored and returned patterns are copies."""

    def __init__(self, patterns: Optional[Iterable[Pattern]] = None, guard: Optional[RegexGuard] = None):
        self.logger = get_logger(__name__)
        self._guard = guard or RegexGuard()
        self._patterns: Dict[str, Pattern] = {}
        self._lock = threading.Lock()
        for pattern in patterns or []:
            self.save(pattern)

    def get(self, pattern_id: str) -> Pattern:
        with self._lock:
            pattern = self._patterns.get(pattern_id)
            if pattern is None:
                raise PatternNotFoundError(pattern_id)
            return pattern.copy()

    def list_all(self) -> List[Pattern]:
        with self._lock:
            return [pattern.copy() for pattern in self._patterns.values()]

    def save(self, pattern: Pattern) -> Pattern:
        validate_pattern(pattern, self._guard)
        stored = pattern.copy()
        with self._lock:
            created = stored.id not in self._patterns
            self._patterns[stored.id] = stored
        self.logger.info(f"{'Created' if created else 'Updated'} pattern {stored.id}")
        return stored.copy()

    def delete(self, pattern_id: str) -> None:
        with self._lock:
            if pattern_id not in self._patterns:
                raise PatternNotFoundError(pattern_id)
            del self._patterns[pattern_id]
        self.logger.info(f"Deleted pattern {pattern_id}")

    def __len__(self) -> int:
        with self._lock:
            return len(self._patterns)

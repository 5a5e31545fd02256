"""
Feedback Store

Append-only log of feedback events. Corrections are new events; nothing is
updated in place, so metrics derived from the log never race.
"""

import threading
import uuid
from abc import ABC, abstractmethod
from dataclasses import replace
from typing import Dict, List, Optional

from ...contracts import FeedbackEvent
from ...contracts.feedback_contracts import utc_now
from ...utils.logging_config import get_logger
from ...utils.pii_masking import log_feedback_recorded


class FeedbackStore(ABC):
    """Storage contract for feedback events"""

    @abstractmethod
    def record(self, event: FeedbackEvent) -> FeedbackEvent:
        """Persist the event, assigning ``id`` and ``created_at``"""

    @abstractmethod
    def list_by_pattern(
        self,
        pattern_id: str,
        limit: Optional[int] = None,
        offset: int = 0,
        newest_first: bool = False,
    ) -> List[FeedbackEvent]:
        """Events of one pattern in recording order (or reversed)"""

    @abstractmethod
    def list_all(self) -> List[FeedbackEvent]:
        pass

    @abstractmethod
    def count_by_pattern(self, pattern_id: str) -> int:
        pass

    @abstractmethod
    def delete_by_pattern(self, pattern_id: str) -> int:
        """Cascade removal when a pattern is retired; returns the number removed"""


class InMemoryFeedbackStore(FeedbackStore):
    """Thread-safe in-memory feedback log"""

    def __init__(self):
        self.logger = get_logger(__name__)
        self._events: Dict[str, List[FeedbackEvent]] = {}
        self._order: List[FeedbackEvent] = []
        self._lock = threading.Lock()

    def record(self, event: FeedbackEvent) -> FeedbackEvent:
        stored = replace(
            event,
            id=event.id or str(uuid.uuid4()),
            created_at=event.created_at or utc_now(),
        )
        with self._lock:
            self._events.setdefault(stored.pattern_id, []).append(stored)
            self._order.append(stored)
        self.logger.debug(
            log_feedback_recorded(stored.pattern_id, stored.feedback_type.value, stored.matched_text)
        )
        return stored

    def list_by_pattern(
        self,
        pattern_id: str,
        limit: Optional[int] = None,
        offset: int = 0,
        newest_first: bool = False,
    ) -> List[FeedbackEvent]:
        with self._lock:
            events = list(self._events.get(pattern_id, []))
        if newest_first:
            events.reverse()
        offset = max(0, offset)
        if limit is None:
            return events[offset:]
        return events[offset:offset + max(0, limit)]

    def list_all(self) -> List[FeedbackEvent]:
        with self._lock:
            return list(self._order)

    def count_by_pattern(self, pattern_id: str) -> int:
        with self._lock:
            return len(self._events.get(pattern_id, []))

    def delete_by_pattern(self, pattern_id: str) -> int:
        with self._lock:
            removed = self._events.pop(pattern_id, [])
            if removed:
                self._order = [e for e in self._order if e.pattern_id != pattern_id]
        if removed:
            self.logger.info(f"Removed {len(removed)} feedback events of pattern {pattern_id}")
        return len(removed)

    def __len__(self) -> int:
        with self._lock:
            return len(self._order)

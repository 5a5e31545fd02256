"""
Accuracy Calculator

Metrics are recomputed from the full feedback log on every query. No running
counters are kept.
"""

from collections import Counter
from typing import Dict, Iterable, List, Optional

from ...constants import COMMON_FALSE_POSITIVE_LIMIT, DEFAULT_PRECISION_THRESHOLD
from ...contracts import (
    FeedbackEvent,
    FeedbackStatistics,
    FeedbackType,
    Pattern,
    PatternFeedbackStats,
    PatternMetrics,
    RefinementCandidate,
)
from ...utils.logging_config import LoggingMixin
from .feedback_store import FeedbackStore


def compute_precision(positive: int, negative: int) -> float:
    """positive / (positive + negative); 1.0 when there is no feedback"""
    total = positive + negative
    if total == 0:
        return 1.0
    return positive / total


def common_false_positives(events: Iterable[FeedbackEvent], limit: int = COMMON_FALSE_POSITIVE_LIMIT) -> List[str]:
    """Most frequently rejected matched texts; equal counts keep first-report order"""
    counts = Counter(event.matched_text for event in events if event.is_negative)
    # Counter preserves insertion order and most_common sorts stably
    return [text for text, _ in counts.most_common(limit)]


class AccuracyCalculator(LoggingMixin):
    """Aggregates feedback into per-pattern metrics on demand"""

    def __init__(self, store: FeedbackStore, precision_threshold: float = DEFAULT_PRECISION_THRESHOLD):
        self.store = store
        self.precision_threshold = precision_threshold

    def compute_metrics(self, pattern_id: str) -> PatternMetrics:
        events = self.store.list_by_pattern(pattern_id)
        return self.metrics_from_events(pattern_id, events)

    @staticmethod
    def metrics_from_events(pattern_id: str, events: List[FeedbackEvent]) -> PatternMetrics:
        positive = sum(1 for e in events if e.feedback_type is FeedbackType.POSITIVE)
        negative = sum(1 for e in events if e.feedback_type is FeedbackType.NEGATIVE)
        return PatternMetrics(
            pattern_id=pattern_id,
            positive=positive,
            negative=negative,
            total=positive + negative,
            precision=compute_precision(positive, negative),
            common_false_positives=common_false_positives(events),
        )

    def needs_refinement(
        self,
        pattern: Pattern,
        metrics: Optional[PatternMetrics] = None,
        precision_threshold: Optional[float] = None,
    ) -> bool:
        """
        True iff the pattern has at least ``auto_refine_threshold`` negative
        events and its precision is below the global threshold.
        """
        if metrics is None:
            metrics = self.compute_metrics(pattern.id)
        threshold = self.precision_threshold if precision_threshold is None else precision_threshold
        return metrics.negative >= pattern.auto_refine_threshold and metrics.precision < threshold

    def list_patterns_needing_refinement(
        self,
        patterns: Iterable[Pattern],
        threshold_override: Optional[float] = None,
    ) -> List[RefinementCandidate]:
        """
        Eligible patterns with their metrics, lowest precision first.

        Args:
            patterns: Patterns to evaluate
            threshold_override: Precision threshold replacing the global one
        """
        candidates = []
        for pattern in patterns:
            metrics = self.compute_metrics(pattern.id)
            if self.needs_refinement(pattern, metrics, threshold_override):
                candidates.append(RefinementCandidate(pattern=pattern, metrics=metrics))

        candidates.sort(key=lambda c: c.metrics.precision)
        self.logger.debug(f"{len(candidates)} patterns eligible for refinement")
        return candidates

    def feedback_statistics(self, patterns: Iterable[Pattern] = ()) -> FeedbackStatistics:
        """Totals and per-pattern accuracy for every pattern with feedback"""
        categories: Dict[str, str] = {p.id: p.category for p in patterns}
        grouped: Dict[str, List[FeedbackEvent]] = {}
        for event in self.store.list_all():
            grouped.setdefault(event.pattern_id, []).append(event)

        pattern_stats = []
        for pattern_id, events in grouped.items():
            metrics = self.metrics_from_events(pattern_id, events)
            pattern_stats.append(
                PatternFeedbackStats(
                    pattern_id=pattern_id,
                    category=categories.get(pattern_id, ""),
                    feedback_count=metrics.total,
                    positive_count=metrics.positive,
                    negative_count=metrics.negative,
                    accuracy=metrics.precision,
                )
            )
        pattern_stats.sort(key=lambda s: s.feedback_count, reverse=True)

        return FeedbackStatistics(
            total_feedback=sum(s.feedback_count for s in pattern_stats),
            positive_feedback=sum(s.positive_count for s in pattern_stats),
            negative_feedback=sum(s.negative_count for s in pattern_stats),
            pattern_stats=pattern_stats,
        )

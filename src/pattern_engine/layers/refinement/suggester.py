"""
Refinement Suggester

Turns the recent negative feedback of a pattern into proposed edits. The
dominant reason code selects exactly one handler; every handler explains its
proposal in the reasoning list, which is what an operator reviews before
applying anything.
"""

from collections import Counter
from typing import Callable, Dict, List, Optional, Sequence

from ...constants import (
    CONFIDENCE_STEP,
    DEFAULT_PRECISION_THRESHOLD,
    FALLBACK_EXCLUSION_MIN_OCCURRENCES,
    MAX_CONFIDENCE_THRESHOLD,
    NEGATIVE_SAMPLE_LIMIT,
    REASON_DESCRIPTIONS,
    REASON_SEVERITY_ORDER,
)
from ...contracts import FeedbackEvent, Pattern, PatternMetrics, ReasonCode, RefinementSuggestion
from ...utils.logging_config import LoggingMixin
from .shape_analysis import NO_SEPARATORS, count_flags, describe_shape, group_by_shape


def dominant_reason(reason_counts: Dict[ReasonCode, int]) -> Optional[ReasonCode]:
    """
    Most frequent reason. Equal counts are broken by severity, lowest-risk
    remediation first: too_broad, invalid_data, not_sensitive, wrong_format,
    missing_context.
    """
    voting = {reason: count for reason, count in reason_counts.items() if count > 0}
    if not voting:
        return None
    return min(voting, key=lambda r: (-voting[r], REASON_SEVERITY_ORDER.index(r.value)))


def _distinct(texts: Sequence[str]) -> List[str]:
    """Distinct texts, case-insensitively, keeping the first spelling seen"""
    seen = set()
    result = []
    for text in texts:
        folded = text.casefold()
        if folded not in seen:
            seen.add(folded)
            result.append(text)
    return result


class _Draft:
    """Mutable accumulator for one suggestion"""

    def __init__(self, pattern: Pattern, metrics: PatternMetrics):
        self.pattern = pattern
        self.metrics = metrics
        self.reasoning: List[str] = []
        self.exclude_patterns: List[str] = []
        self.confidence_adjustment: Optional[float] = None
        self.shape_groups = []


class RefinementSuggester(LoggingMixin):
    """Proposes exclusions and threshold changes from negative feedback"""

    def __init__(
        self,
        precision_threshold: float = DEFAULT_PRECISION_THRESHOLD,
        confidence_step: float = CONFIDENCE_STEP,
        max_confidence_threshold: float = MAX_CONFIDENCE_THRESHOLD,
        negative_sample_limit: int = NEGATIVE_SAMPLE_LIMIT,
        fallback_exclusion_min_occurrences: int = FALLBACK_EXCLUSION_MIN_OCCURRENCES,
    ):
        self.precision_threshold = precision_threshold
        self.confidence_step = confidence_step
        self.max_confidence_threshold = max_confidence_threshold
        self.negative_sample_limit = negative_sample_limit
        self.fallback_exclusion_min_occurrences = fallback_exclusion_min_occurrences

        self._handlers: Dict[ReasonCode, Callable[[_Draft, List[FeedbackEvent]], None]] = {
            ReasonCode.TOO_BROAD: self._handle_too_broad,
            ReasonCode.WRONG_FORMAT: self._handle_wrong_format,
            ReasonCode.INVALID_DATA: self._handle_invalid_or_not_sensitive,
            ReasonCode.NOT_SENSITIVE: self._handle_invalid_or_not_sensitive,
            ReasonCode.MISSING_CONTEXT: self._handle_missing_context,
        }
        missing = set(ReasonCode) - set(self._handlers)
        if missing:
            raise NotImplementedError(f"No refinement handler for {sorted(r.value for r in missing)}")

    def recent_negatives(self, events: Sequence[FeedbackEvent]) -> List[FeedbackEvent]:
        """Most recent ``negative_sample_limit`` negative events, oldest first"""
        negatives = [event for event in events if event.is_negative]
        return negatives[-self.negative_sample_limit:]

    def suggest(
        self,
        pattern: Pattern,
        events: Sequence[FeedbackEvent],
        metrics: PatternMetrics,
    ) -> RefinementSuggestion:
        """
        Build a suggestion for ``pattern``.

        Args:
            pattern: Current pattern definition
            events: Feedback log of the pattern in recording order
            metrics: Metrics computed from the full log

        Returns:
            RefinementSuggestion; ``reasoning`` is never empty
        """
        negatives = self.recent_negatives(events)
        draft = _Draft(pattern, metrics)

        counts = Counter(event.reason_code for event in negatives if event.reason_code is not None)
        reason_counts = {
            reason: counts[reason]
            for reason in sorted(counts, key=lambda r: (-counts[r], REASON_SEVERITY_ORDER.index(r.value)))
        }
        dominant = dominant_reason(reason_counts)

        if not negatives:
            draft.reasoning.append("No negative feedback recorded; no refinement proposed")
        elif dominant is None:
            draft.reasoning.append(
                f"{len(negatives)} recent negative feedback events carry no reason code"
            )
            self._handle_unclassified(draft, negatives)
        else:
            summary = ", ".join(f"{reason.value}={count}" for reason, count in reason_counts.items())
            draft.reasoning.append(
                f"Reason counts over {len(negatives)} recent negative feedback events: {summary}; "
                f"dominant reason {dominant.value} ({REASON_DESCRIPTIONS[dominant.value]})"
            )
            evidence = [event for event in negatives if event.reason_code is dominant]
            self._handlers[dominant](draft, evidence)

        suggestion = RefinementSuggestion(
            pattern_id=pattern.id,
            exclude_patterns=draft.exclude_patterns or None,
            confidence_adjustment=draft.confidence_adjustment,
            reasoning=draft.reasoning,
            dominant_reason=dominant,
            reason_counts={reason.value: count for reason, count in reason_counts.items()},
            shape_groups=draft.shape_groups,
            precision=metrics.precision,
        )
        self.logger.info(
            f"Suggested refinement for pattern {pattern.id}: "
            f"dominant={dominant.value if dominant else None}, "
            f"exclusions={len(draft.exclude_patterns)}, "
            f"threshold={draft.confidence_adjustment}"
        )
        return suggestion

    # Handlers

    def _handle_too_broad(self, draft: _Draft, evidence: List[FeedbackEvent]) -> None:
        self._propose_exclusions(draft, [e.matched_text for e in evidence], "too broad")

    def _handle_invalid_or_not_sensitive(self, draft: _Draft, evidence: List[FeedbackEvent]) -> None:
        label = evidence[0].reason_code.value.replace("_", " ")
        self._propose_exclusions(draft, [e.matched_text for e in evidence], label)
        self._propose_threshold_raise(draft)

    def _handle_wrong_format(self, draft: _Draft, evidence: List[FeedbackEvent]) -> None:
        texts = [e.matched_text for e in evidence if e.matched_text]
        draft.shape_groups = group_by_shape(texts)
        for group in draft.shape_groups[:3]:
            draft.reasoning.append(
                f"Shape {group.signature} ({describe_shape(group)}) reported {group.count} times"
            )
        flags = count_flags(texts)
        if texts and flags[NO_SEPARATORS] > len(texts) * 0.6:
            draft.reasoning.append(
                f"{flags[NO_SEPARATORS]} of {len(texts)} offending texts have no separators; "
                f"consider requiring delimiters in the regex"
            )
        draft.reasoning.append(
            "No automatic change proposed; tighten the regex using the shape evidence"
        )

    def _handle_missing_context(self, draft: _Draft, evidence: List[FeedbackEvent]) -> None:
        draft.reasoning.append(
            f"{len(evidence)} matches lacked context indicating sensitive data; "
            f"no safe automatic change is available"
        )

    def _handle_unclassified(self, draft: _Draft, negatives: List[FeedbackEvent]) -> None:
        counts = Counter(event.matched_text for event in negatives if event.matched_text)
        frequent = [text for text, count in counts.items() if count >= self.fallback_exclusion_min_occurrences]
        if frequent:
            self._propose_exclusions(draft, frequent, "a false positive", counts)
        else:
            draft.reasoning.append(
                f"No text reported at least {self.fallback_exclusion_min_occurrences} times; "
                f"no exclusion proposed"
            )
        self._propose_threshold_raise(draft)

    # Field proposals

    def _propose_exclusions(
        self,
        draft: _Draft,
        texts: Sequence[str],
        label: str,
        counts: Optional[Dict[str, int]] = None,
    ) -> None:
        counts = counts or Counter(texts)
        candidates = [text for text in _distinct(texts) if text and text.strip()]
        new = [text for text in candidates if not draft.pattern.is_excluded(text)]
        draft.shape_groups = draft.shape_groups or group_by_shape([t for t in texts if t])

        if not new:
            draft.reasoning.append(f"All texts reported as {label} are already excluded")
            return

        draft.exclude_patterns = new
        details = ", ".join(f'"{text}" ({counts.get(text, 1)}x)' for text in new)
        draft.reasoning.append(f"exclude_patterns: reported as {label}: {details}")

    def _propose_threshold_raise(self, draft: _Draft) -> None:
        current = draft.pattern.confidence_threshold
        precision = draft.metrics.precision
        if precision >= self.precision_threshold:
            return
        if current >= self.max_confidence_threshold:
            draft.reasoning.append(
                f"Confidence threshold already at the {self.max_confidence_threshold:.2f} cap; no raise proposed"
            )
            return

        raised = round(min(current + self.confidence_step, self.max_confidence_threshold), 4)
        draft.confidence_adjustment = raised
        draft.reasoning.append(
            f"confidence_adjustment: raise threshold from {current:.2f} to {raised:.2f} "
            f"due to precision of {precision * 100:.1f}%"
        )

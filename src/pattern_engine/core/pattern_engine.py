"""
Pattern Engine Service

Single entry point used by calling services. Wires the registry, feedback
store, matcher, accuracy calculator, suggester and applier together.
"""

import time
from contextlib import contextmanager
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple, Union

from ..config import ENGINE_CONFIG, EngineConfig
from ..constants import DEFAULT_HISTORY_PAGE_SIZE
from ..contracts import (
    FeedbackContext,
    FeedbackEvent,
    FeedbackStatistics,
    FeedbackType,
    Match,
    Pattern,
    PatternMetrics,
    ReasonCode,
    Refinement,
    RefinementCandidate,
    RefinementSuggestion,
)
from ..data.templates import build_pattern_from_template
from ..exceptions import PatternError, PatternNotFoundError, ValidationError
from ..layers.feedback import AccuracyCalculator, FeedbackStore, InMemoryFeedbackStore
from ..layers.matching import PatternMatcher, RegexGuard, extract_surrounding_context
from ..layers.refinement import RefinementApplier, RefinementSuggester
from ..layers.registry import InMemoryPatternRegistry, PatternRegistry
from .base_service import BaseService


class PatternEngineService(BaseService):
    """
    Pattern matching and feedback-driven refinement.

    Matching never fails because of a single bad pattern. Feedback and
    refinement operations on an unknown pattern id raise
    PatternNotFoundError before anything is written.
    """

    def __init__(
        self,
        registry: Optional[PatternRegistry] = None,
        feedback_store: Optional[FeedbackStore] = None,
        config: Optional[EngineConfig] = None,
    ):
        super().__init__("PatternEngineService")
        self.config = config or ENGINE_CONFIG

        guard = RegexGuard(
            max_length=self.config.max_regex_length,
            timeout=self.config.regex_timeout_seconds,
        )
        self.registry = registry if registry is not None else InMemoryPatternRegistry(guard=guard)
        self.feedback_store = feedback_store if feedback_store is not None else InMemoryFeedbackStore()
        self.matcher = PatternMatcher(guard=guard)
        self.calculator = AccuracyCalculator(self.feedback_store, self.config.precision_threshold)
        self.suggester = RefinementSuggester(
            precision_threshold=self.config.precision_threshold,
            confidence_step=self.config.confidence_step,
            max_confidence_threshold=self.config.max_confidence_threshold,
            negative_sample_limit=self.config.negative_sample_limit,
            fallback_exclusion_min_occurrences=self.config.fallback_exclusion_min_occurrences,
        )
        self.applier = RefinementApplier(self.registry)

    def _do_initialize(self) -> None:
        self.logger.info(
            f"Pattern registry holds {len(self.registry.list_all())} patterns, "
            f"precision threshold {self.config.precision_threshold}"
        )

    @contextmanager
    def _request(self, operation: str):
        """Initialize lazily and record request statistics"""
        if not self._initialized:
            self.initialize()
        start_time = time.time()
        success = False
        try:
            yield
            success = True
        finally:
            duration = time.time() - start_time
            self._update_stats(success, duration)
            self.log_performance(operation, duration)

    def _require_pattern(self, pattern_id: str) -> Pattern:
        return self.registry.get(pattern_id)

    # Matching

    def match(self, text: str, pattern_ids: Optional[Iterable[str]] = None) -> List[Match]:
        """
        Find sensitive-data spans in ``text``.

        Args:
            text: Document text
            pattern_ids: Patterns to apply; all active patterns when omitted.
                Unknown or inactive ids are ignored.

        Returns:
            Non-overlapping matches ordered by start offset
        """
        with self._request("match"):
            if text and self.config.max_text_length and len(text) > self.config.max_text_length:
                raise ValidationError(
                    f"Text exceeds {self.config.max_text_length} characters",
                    details={"length": len(text), "max_text_length": self.config.max_text_length},
                )
            if pattern_ids is None:
                patterns = self.registry.list_active()
            else:
                requested = list(pattern_ids)
                patterns = self.registry.get_many(requested)
                unknown = set(requested) - {p.id for p in patterns}
                if unknown:
                    self.logger.warning(f"Ignoring unknown pattern ids: {sorted(unknown)}")
                patterns = [p for p in patterns if p.is_active]
            return self.matcher.find_matches(text, patterns)

    # Patterns

    def create_pattern(self, pattern: Union[Pattern, Dict[str, Any]]) -> Pattern:
        with self._request("create_pattern"):
            if isinstance(pattern, dict):
                pattern = Pattern.from_dict(pattern)
            if self.registry.exists(pattern.id):
                raise PatternError(f"Pattern already exists: {pattern.id}", details={"pattern_id": pattern.id})
            return self.registry.save(pattern)

    def create_pattern_from_template(
        self,
        template_name: str,
        pattern_id: str,
        category: Optional[str] = None,
        examples: Sequence[str] = (),
        **overrides,
    ) -> Pattern:
        pattern = build_pattern_from_template(template_name, pattern_id, category, examples, **overrides)
        return self.create_pattern(pattern)

    def get_pattern(self, pattern_id: str) -> Pattern:
        with self._request("get_pattern"):
            return self._require_pattern(pattern_id)

    def list_patterns(self, active_only: bool = False) -> List[Pattern]:
        with self._request("list_patterns"):
            return self.registry.list_active() if active_only else self.registry.list_all()

    def delete_pattern(self, pattern_id: str) -> int:
        """Retire a pattern together with its feedback; returns removed event count"""
        with self._request("delete_pattern"):
            self.registry.delete(pattern_id)
            removed = self.feedback_store.delete_by_pattern(pattern_id)
            self.logger.info(f"Retired pattern {pattern_id} with {removed} feedback events")
            return removed

    def get_excluded_examples(self, pattern_id: str) -> List[str]:
        with self._request("get_excluded_examples"):
            return sorted(self._require_pattern(pattern_id).excluded_examples)

    # Feedback

    def submit_feedback(
        self,
        pattern_id: str,
        matched_text: str,
        surrounding_context: Optional[str],
        feedback_type: Union[FeedbackType, str],
        reason_code: Optional[Union[ReasonCode, str]] = None,
        original_confidence: Optional[float] = None,
        document_text: Optional[str] = None,
        start: Optional[int] = None,
        end: Optional[int] = None,
        context: Union[FeedbackContext, str] = FeedbackContext.ANNOTATION,
        **audit,
    ) -> FeedbackEvent:
        """
        Record a human judgment about one match.

        When ``surrounding_context`` is empty and ``document_text`` with the
        match span is given, the context is cut from the document.

        Args:
            audit: Optional ``user_comment``, ``user_id``, ``session_id``,
                ``data_source_id``

        Raises:
            PatternNotFoundError: unknown pattern id
            ValidationError: invalid feedback fields
        """
        with self._request("submit_feedback"):
            self._require_pattern(pattern_id)

            if not surrounding_context and document_text is not None and start is not None and end is not None:
                surrounding_context = extract_surrounding_context(
                    document_text, start, end, self.config.context_window
                )

            event = FeedbackEvent(
                pattern_id=pattern_id,
                feedback_type=feedback_type,
                matched_text=matched_text or "",
                surrounding_context=surrounding_context or "",
                original_confidence=original_confidence,
                reason_code=reason_code,
                context=context,
                **audit,
            )
            return self.feedback_store.record(event)

    def get_feedback_history(
        self,
        pattern_id: str,
        limit: int = DEFAULT_HISTORY_PAGE_SIZE,
        offset: int = 0,
    ) -> Tuple[List[FeedbackEvent], int]:
        """Page of feedback events, newest first, with the total count"""
        with self._request("get_feedback_history"):
            self._require_pattern(pattern_id)
            events = self.feedback_store.list_by_pattern(pattern_id, limit=limit, offset=offset, newest_first=True)
            return events, self.feedback_store.count_by_pattern(pattern_id)

    def get_feedback_statistics(self) -> FeedbackStatistics:
        with self._request("get_feedback_statistics"):
            return self.calculator.feedback_statistics(self.registry.list_all())

    # Accuracy

    def get_accuracy(self, pattern_id: str) -> PatternMetrics:
        with self._request("get_accuracy"):
            self._require_pattern(pattern_id)
            return self.calculator.compute_metrics(pattern_id)

    def needs_refinement(self, pattern_id: str) -> bool:
        with self._request("needs_refinement"):
            return self.calculator.needs_refinement(self._require_pattern(pattern_id))

    def list_patterns_needing_refinement(self, threshold_override: Optional[float] = None) -> List[RefinementCandidate]:
        with self._request("list_patterns_needing_refinement"):
            if threshold_override is not None and not 0.0 <= threshold_override <= 1.0:
                raise ValidationError(
                    "Threshold override must be between 0.0 and 1.0",
                    details={"threshold_override": threshold_override},
                )
            return self.calculator.list_patterns_needing_refinement(self.registry.list_all(), threshold_override)

    # Refinement

    def suggest_refinement(self, pattern_id: str) -> RefinementSuggestion:
        with self._request("suggest_refinement"):
            pattern = self._require_pattern(pattern_id)
            events = self.feedback_store.list_by_pattern(pattern_id)
            metrics = self.calculator.metrics_from_events(pattern_id, events)
            return self.suggester.suggest(pattern, events, metrics)

    def apply_refinement(
        self,
        pattern_id: str,
        refinement: Union[Refinement, RefinementSuggestion],
    ) -> Pattern:
        """
        Commit a reviewed refinement. Callers serialize refinement of the
        same pattern; concurrent calls are not coordinated.
        """
        with self._request("apply_refinement"):
            return self.applier.apply(pattern_id, refinement)

    def add_exclusion(self, pattern_id: str, text: str) -> Pattern:
        with self._request("add_exclusion"):
            return self.applier.add_exclusion(pattern_id, text)

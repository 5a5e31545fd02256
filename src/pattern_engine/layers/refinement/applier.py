"""
Refinement Applier

Commits reviewed refinements to the registry. A refinement either fully
succeeds or leaves the stored pattern untouched; feedback history is never
modified.
"""

from typing import List, Union

from ...contracts import Pattern, Refinement, RefinementSuggestion
from ...contracts.feedback_contracts import utc_now
from ...exceptions import RefinementError
from ...utils.logging_config import LoggingMixin
from ...utils.pii_masking import safe_text_preview
from ..registry.pattern_registry import PatternRegistry


def merge_exclusions(existing: set, additions: List[str]) -> List[str]:
    """Additions not already present, compared case-insensitively"""
    folded = {text.casefold() for text in existing}
    added = []
    for text in additions:
        key = text.casefold()
        if key not in folded:
            folded.add(key)
            added.append(text)
    return added


class RefinementApplier(LoggingMixin):
    """Validates and applies refinements to stored patterns"""

    def __init__(self, registry: PatternRegistry):
        self.registry = registry

    def apply(self, pattern_id: str, refinement: Union[Refinement, RefinementSuggestion]) -> Pattern:
        """
        Merge exclusions, replace the confidence threshold when given, stamp
        ``last_refined_at`` and save.

        Raises:
            PatternNotFoundError: unknown pattern id
            RefinementError: invalid refinement; nothing is saved
        """
        if isinstance(refinement, RefinementSuggestion):
            refinement = Refinement.from_suggestion(refinement)

        pattern = self.registry.get(pattern_id)
        self._validate(pattern_id, refinement)

        additions = [text.strip() for text in refinement.exclude_patterns]
        added = merge_exclusions(pattern.excluded_examples, additions)
        pattern.excluded_examples.update(added)
        if refinement.confidence_threshold is not None:
            pattern.confidence_threshold = refinement.confidence_threshold
        pattern.last_refined_at = utc_now()

        saved = self.registry.save(pattern)
        self.logger.info(
            f"Refined pattern {pattern_id}: {len(added)} exclusions added, "
            f"confidence threshold {saved.confidence_threshold:.2f}"
        )
        return saved

    def add_exclusion(self, pattern_id: str, text: str) -> Pattern:
        """Exclude a single text from future matches of the pattern"""
        self.logger.debug(f"Adding exclusion {safe_text_preview(text)} to pattern {pattern_id}")
        return self.apply(pattern_id, Refinement(exclude_patterns=[text]))

    @staticmethod
    def _validate(pattern_id: str, refinement: Refinement) -> None:
        threshold = refinement.confidence_threshold
        if threshold is not None and not 0.0 <= threshold <= 1.0:
            raise RefinementError(
                "Confidence threshold must be between 0.0 and 1.0",
                details={"pattern_id": pattern_id, "confidence_threshold": threshold},
            )
        blank = [i for i, text in enumerate(refinement.exclude_patterns) if not text or not text.strip()]
        if blank:
            raise RefinementError(
                "Exclusions must not be empty",
                details={"pattern_id": pattern_id, "positions": blank},
            )

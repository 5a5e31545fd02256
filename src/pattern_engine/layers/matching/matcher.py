"""
Pattern Matcher

Produces candidate matches from regex and literal-example strategies,
filters exclusions and low-confidence candidates, and resolves overlaps
into an ordered, non-overlapping sequence.

Matching is pure: identical text and patterns always yield identical output,
and no state is shared between calls.
"""

import time
from typing import Iterable, List, Optional, Sequence

from ...constants import (
    DEFAULT_REGEX_TIMEOUT,
    EXAMPLE_MATCH_CONFIDENCE,
    MAX_REGEX_LENGTH,
    REGEX_MATCH_CONFIDENCE,
)
from ...contracts import Match, MatchStrategy, Pattern
from ...exceptions import PatternError, RegexTimeoutError
from ...utils.logging_config import get_logger
from ...utils.pii_masking import log_matching_start
from .regex_guard import RegexGuard


def resolve_overlaps(candidates: Iterable[Match]) -> List[Match]:
    """
    Resolve overlapping candidates, keeping the highest confidence.

    Candidates are ordered by start ascending, then confidence descending;
    the sort is stable so equal keys keep first-seen order. A candidate that
    overlaps the last kept match replaces it only with strictly greater
    confidence.
    """
    ordered = sorted(candidates, key=lambda c: (c.start, -c.confidence))
    resolved: List[Match] = []
    last_end = -1

    for candidate in ordered:
        if candidate.start >= last_end:
            resolved.append(candidate)
            last_end = candidate.end
        elif candidate.confidence > resolved[-1].confidence:
            resolved[-1] = candidate
            last_end = candidate.end

    return resolved


def extract_surrounding_context(text: str, start: int, end: int, window: int) -> str:
    """Bounded window of text around [start, end)"""
    if not text:
        return ""
    start = max(0, min(start, len(text)))
    end = max(start, min(end, len(text)))
    return text[max(0, start - window):min(len(text), end + window)]


class PatternMatcher:
    """Locates sensitive-data spans for a set of active patterns"""

    def __init__(
        self,
        guard: Optional[RegexGuard] = None,
        regex_timeout: float = DEFAULT_REGEX_TIMEOUT,
        max_regex_length: int = MAX_REGEX_LENGTH,
    ):
        self.logger = get_logger(__name__)
        self.guard = guard or RegexGuard(max_length=max_regex_length, timeout=regex_timeout)

    def find_matches(self, text: str, patterns: Sequence[Pattern]) -> List[Match]:
        """
        Find resolved matches of ``patterns`` in ``text``.

        Args:
            text: Document text
            patterns: Active patterns; inactive ones are ignored

        Returns:
            Non-overlapping matches ordered by start offset
        """
        if not text or not patterns:
            return []

        start_time = time.time()
        self.logger.debug(log_matching_start(text, len(patterns)))

        candidates: List[Match] = []
        for pattern in patterns:
            if not pattern.is_active:
                self.logger.debug(f"Skipping inactive pattern {pattern.id}")
                continue
            candidates.extend(self.collect_candidates(text, pattern))

        resolved = resolve_overlaps(candidates)
        self.logger.debug(
            f"Resolved {len(candidates)} candidates into {len(resolved)} matches "
            f"in {time.time() - start_time:.3f}s"
        )
        return resolved

    def collect_candidates(self, text: str, pattern: Pattern) -> List[Match]:
        """
        Candidates for one pattern after exclusion, threshold and
        duplicate-span filtering. Regex candidates precede example candidates.
        """
        raw = self._regex_candidates(text, pattern) + self._example_candidates(text, pattern)

        kept: List[Match] = []
        seen_spans = set()
        for candidate in raw:
            # Exclusions always win
            if pattern.is_excluded(candidate.text):
                continue
            if candidate.confidence < pattern.confidence_threshold:
                continue
            span = (candidate.start, candidate.end)
            if span in seen_spans:
                continue
            seen_spans.add(span)
            kept.append(candidate)
        return kept

    def _regex_candidates(self, text: str, pattern: Pattern) -> List[Match]:
        candidates: List[Match] = []
        for index, source in enumerate(pattern.regex_set):
            try:
                occurrences = self.guard.find_all(source, text)
            except (PatternError, RegexTimeoutError) as e:
                self.logger.warning(
                    f"Skipping regex #{index} of pattern {pattern.id}: {e.message}"
                )
                continue

            candidates.extend(
                Match(
                    pattern_id=pattern.id,
                    text=matched,
                    start=start,
                    end=end,
                    confidence=REGEX_MATCH_CONFIDENCE,
                    strategy=MatchStrategy.REGEX,
                )
                for start, end, matched in occurrences
            )
        return candidates

    def _example_candidates(self, text: str, pattern: Pattern) -> List[Match]:
        candidates: List[Match] = []
        # Longest example first so set iteration order never changes the result
        for example in sorted(pattern.examples, key=lambda e: (-len(e), e.casefold(), e)):
            if not example:
                continue
            candidates.extend(
                Match(
                    pattern_id=pattern.id,
                    text=matched,
                    start=start,
                    end=end,
                    confidence=EXAMPLE_MATCH_CONFIDENCE,
                    strategy=MatchStrategy.EXAMPLE,
                )
                for start, end, matched in self.guard.find_literal(example, text)
            )
        return candidates

"""
Unit tests for RefinementSuggester
"""

import pytest

from pattern_engine.contracts import FeedbackEvent, Pattern, ReasonCode
from pattern_engine.layers.feedback import AccuracyCalculator
from pattern_engine.layers.refinement import RefinementSuggester, dominant_reason


def _events(*specs):
    """specs: (feedback_type, text, reason, times)"""
    events = []
    for feedback_type, text, reason, times in specs:
        for _ in range(times):
            events.append(
                FeedbackEvent(pattern_id="ssn", feedback_type=feedback_type, matched_text=text, reason_code=reason)
            )
    return events


class TestDominantReason:
    """Tests for dominant reason selection"""

    def test_highest_count_wins(self):
        counts = {ReasonCode.WRONG_FORMAT: 3, ReasonCode.TOO_BROAD: 1}
        assert dominant_reason(counts) is ReasonCode.WRONG_FORMAT

    @pytest.mark.parametrize(
        "tied,expected",
        [
            ([ReasonCode.WRONG_FORMAT, ReasonCode.TOO_BROAD], ReasonCode.TOO_BROAD),
            ([ReasonCode.MISSING_CONTEXT, ReasonCode.NOT_SENSITIVE], ReasonCode.NOT_SENSITIVE),
            ([ReasonCode.NOT_SENSITIVE, ReasonCode.INVALID_DATA], ReasonCode.INVALID_DATA),
            ([ReasonCode.MISSING_CONTEXT, ReasonCode.WRONG_FORMAT], ReasonCode.WRONG_FORMAT),
        ],
    )
    def test_ties_broken_by_severity(self, tied, expected):
        assert dominant_reason({reason: 2 for reason in tied}) is expected

    def test_no_reasons(self):
        assert dominant_reason({}) is None


class TestRefinementSuggester:
    """Tests for reason-driven suggestions"""

    @pytest.fixture
    def suggester(self):
        return RefinementSuggester(
            precision_threshold=0.7,
            confidence_step=0.1,
            max_confidence_threshold=0.95,
            negative_sample_limit=50,
            fallback_exclusion_min_occurrences=3,
        )

    def _suggest(self, suggester, pattern, events):
        metrics = AccuracyCalculator.metrics_from_events(pattern.id, events)
        return suggester.suggest(pattern, events, metrics)

    def test_every_reason_code_has_a_handler(self, suggester):
        assert set(suggester._handlers) == set(ReasonCode)

    def test_too_broad_proposes_exclusions_only(self, suggester, ssn_pattern):
        events = _events(("positive", "123-45-6789", None, 2), ("negative", "555-55-5555", "too_broad", 5))

        suggestion = self._suggest(suggester, ssn_pattern, events)

        assert suggestion.exclude_patterns == ["555-55-5555"]
        assert suggestion.confidence_adjustment is None
        assert suggestion.dominant_reason is ReasonCode.TOO_BROAD
        assert suggestion.reason_counts == {"too_broad": 5}
        assert suggestion.reasoning[0].startswith("Reason counts")
        assert suggestion.reasoning[0].endswith("dominant reason too_broad (Pattern matching too broadly)")
        assert "555-55-5555" in suggestion.reasoning[1]
        assert suggestion.precision == pytest.approx(2 / 7)

    def test_exclusions_are_case_insensitively_distinct(self, suggester):
        pattern = Pattern(id="ssn", category="Custom", examples={"abc-1"})
        events = _events(("negative", "ABC-1", "too_broad", 2), ("negative", "abc-1", "too_broad", 1))

        suggestion = self._suggest(suggester, pattern, events)

        assert suggestion.exclude_patterns == ["ABC-1"]

    def test_already_excluded_texts_not_proposed(self, suggester, ssn_pattern):
        ssn_pattern.excluded_examples = {"555-55-5555"}
        events = _events(("negative", "555-55-5555", "too_broad", 3))

        suggestion = self._suggest(suggester, ssn_pattern, events)

        assert suggestion.exclude_patterns is None
        assert not suggestion.has_changes
        assert "already excluded" in suggestion.reasoning[-1]

    def test_invalid_data_raises_threshold_and_excludes(self, suggester, ssn_pattern):
        events = _events(("negative", "000-00-0000", "invalid_data", 2), ("negative", "111-11-1111", "invalid_data", 1))

        suggestion = self._suggest(suggester, ssn_pattern, events)

        assert suggestion.exclude_patterns == ["000-00-0000", "111-11-1111"]
        assert suggestion.confidence_adjustment == 0.8
        assert suggestion.reasoning[1].startswith("exclude_patterns")
        assert suggestion.reasoning[2].startswith("confidence_adjustment")

    def test_not_sensitive_without_low_precision_keeps_threshold(self, suggester, ssn_pattern):
        events = _events(("positive", "123-45-6789", None, 9), ("negative", "999-99-9999", "not_sensitive", 1))

        suggestion = self._suggest(suggester, ssn_pattern, events)

        assert suggestion.exclude_patterns == ["999-99-9999"]
        assert suggestion.confidence_adjustment is None

    @pytest.mark.parametrize("current,expected", [(0.7, 0.8), (0.9, 0.95), (0.86, 0.95)])
    def test_threshold_raise_is_capped(self, suggester, current, expected):
        pattern = Pattern(id="ssn", category="Custom", confidence_threshold=current)
        events = _events(("negative", "x", "not_sensitive", 3))

        suggestion = self._suggest(suggester, pattern, events)

        assert suggestion.confidence_adjustment == pytest.approx(expected)

    def test_no_raise_when_threshold_at_cap(self, suggester):
        pattern = Pattern(id="ssn", category="Custom", confidence_threshold=0.95)
        events = _events(("negative", "x", "invalid_data", 3))

        suggestion = self._suggest(suggester, pattern, events)

        assert suggestion.confidence_adjustment is None
        assert "cap" in suggestion.reasoning[-1]

    def test_wrong_format_returns_shape_evidence_only(self, suggester, ssn_pattern):
        events = _events(
            ("negative", "123456789", "wrong_format", 1),
            ("negative", "987654321", "wrong_format", 1),
            ("negative", "111-22-3333", "wrong_format", 1),
        )

        suggestion = self._suggest(suggester, ssn_pattern, events)

        assert not suggestion.has_changes
        assert suggestion.dominant_reason is ReasonCode.WRONG_FORMAT
        assert suggestion.shape_groups[0].signature == "999999999"
        assert suggestion.shape_groups[0].count == 2
        assert suggestion.shape_groups[0].texts == ["123456789", "987654321"]
        assert any("no separators" in line for line in suggestion.reasoning)

    def test_missing_context_emits_note_only(self, suggester, ssn_pattern):
        events = _events(("negative", "123-45-6789", "missing_context", 4))

        suggestion = self._suggest(suggester, ssn_pattern, events)

        assert not suggestion.has_changes
        assert len(suggestion.reasoning) == 2
        assert "no safe automatic change" in suggestion.reasoning[1]

    def test_unclassified_feedback_uses_occurrence_fallback(self, suggester, ssn_pattern):
        events = _events(("negative", "a", None, 3), ("negative", "b", None, 2))

        suggestion = self._suggest(suggester, ssn_pattern, events)

        assert suggestion.dominant_reason is None
        assert suggestion.exclude_patterns == ["a"]
        assert suggestion.confidence_adjustment == 0.8
        assert "no reason code" in suggestion.reasoning[0]

    def test_no_negative_feedback(self, suggester, ssn_pattern):
        events = _events(("positive", "123-45-6789", None, 3))

        suggestion = self._suggest(suggester, ssn_pattern, events)

        assert not suggestion.has_changes
        assert suggestion.reasoning == ["No negative feedback recorded; no refinement proposed"]

    def test_only_recent_negatives_considered(self, ssn_pattern):
        suggester = RefinementSuggester(negative_sample_limit=3)
        events = _events(("negative", "old", "too_broad", 5), ("negative", "new", "not_sensitive", 3))

        suggestion = self._suggest(suggester, ssn_pattern, events)

        assert suggestion.dominant_reason is ReasonCode.NOT_SENSITIVE
        assert suggestion.exclude_patterns == ["new"]
        assert suggestion.reason_counts == {"not_sensitive": 3}

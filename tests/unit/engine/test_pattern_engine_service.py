"""
Unit tests for PatternEngineService
"""

import logging
import threading

import pytest

from pattern_engine.config import EngineConfig
from pattern_engine.contracts import FeedbackType, Pattern, Refinement
from pattern_engine.core import PatternEngineService
from pattern_engine.exceptions import PatternError, PatternNotFoundError, ValidationError, create_error_response


class TestPatternEngineService:
    """End-to-end tests of the engine operations"""

    TEXT = "SSN: 123-45-6789 and 123456789"

    def test_match_all_active_patterns(self, engine_with_ssn):
        matches = engine_with_ssn.match(self.TEXT)

        assert [(m.text, m.confidence) for m in matches] == [("123-45-6789", 0.9)]

    def test_match_after_exclusion(self, engine_with_ssn):
        engine_with_ssn.add_exclusion("ssn", "123-45-6789")

        assert engine_with_ssn.match(self.TEXT) == []
        assert engine_with_ssn.get_excluded_examples("ssn") == ["123-45-6789"]

    def test_match_with_explicit_ids_ignores_unknown_and_inactive(self, engine_with_ssn, caplog):
        engine_with_ssn.create_pattern(Pattern(id="off", category="Custom", examples={"SSN"}, is_active=False))

        with caplog.at_level(logging.WARNING):
            matches = engine_with_ssn.match(self.TEXT, ["missing", "off", "ssn"])

        assert [m.pattern_id for m in matches] == ["ssn"]
        assert "missing" in caplog.text

    def test_match_empty_text(self, engine_with_ssn):
        assert engine_with_ssn.match("") == []

    def test_max_text_length(self, engine_config, ssn_pattern):
        engine_config.max_text_length = 10
        engine = PatternEngineService(config=engine_config)
        engine.create_pattern(ssn_pattern)

        with pytest.raises(ValidationError):
            engine.match(self.TEXT)

    def test_feedback_refinement_cycle(self, engine_with_ssn):
        """2 positive and 5 too_broad negatives make the pattern eligible and excluded"""
        for _ in range(2):
            engine_with_ssn.submit_feedback("ssn", "123-45-6789", "SSN: 123-45-6789", "positive")
        for _ in range(5):
            engine_with_ssn.submit_feedback("ssn", "555-55-5555", "ref 555-55-5555", "negative", "too_broad")

        metrics = engine_with_ssn.get_accuracy("ssn")
        assert (metrics.positive, metrics.negative) == (2, 5)
        assert metrics.precision == pytest.approx(2 / 7)
        assert engine_with_ssn.needs_refinement("ssn")

        suggestion = engine_with_ssn.suggest_refinement("ssn")
        assert "555-55-5555" in suggestion.exclude_patterns

        refined = engine_with_ssn.apply_refinement("ssn", suggestion)
        assert "555-55-5555" in refined.excluded_examples
        assert refined.last_refined_at is not None
        assert engine_with_ssn.match("ref 555-55-5555") == []

        # history is preserved after refinement
        events, total = engine_with_ssn.get_feedback_history("ssn")
        assert total == 7
        assert events[0].feedback_type is FeedbackType.NEGATIVE

    def test_listing_patterns_needing_refinement(self, engine_with_ssn):
        for _ in range(3):
            engine_with_ssn.submit_feedback("ssn", "000-00-0000", "", "negative", "invalid_data")

        candidates = engine_with_ssn.list_patterns_needing_refinement()

        assert [c.pattern.id for c in candidates] == ["ssn"]
        assert candidates[0].metrics.precision == 0.0

        with pytest.raises(ValidationError):
            engine_with_ssn.list_patterns_needing_refinement(threshold_override=2.0)

    def test_surrounding_context_cut_from_document(self, engine_with_ssn):
        text = "x" * 100 + "123-45-6789" + "y" * 100

        event = engine_with_ssn.submit_feedback(
            "ssn", "123-45-6789", None, "negative", "not_sensitive",
            document_text=text, start=100, end=111, user_id="reviewer-1",
        )

        assert event.surrounding_context == "x" * 50 + "123-45-6789" + "y" * 50
        assert event.user_id == "reviewer-1"

    def test_unknown_pattern_rejected_before_write(self, engine):
        with pytest.raises(PatternNotFoundError):
            engine.submit_feedback("missing", "x", "", "negative", "too_broad")
        with pytest.raises(PatternNotFoundError):
            engine.apply_refinement("missing", Refinement(exclude_patterns=["x"]))
        with pytest.raises(PatternNotFoundError):
            engine.suggest_refinement("missing")

        assert engine.feedback_store.list_all() == []

    def test_invalid_feedback_rejected(self, engine_with_ssn):
        with pytest.raises(ValidationError):
            engine_with_ssn.submit_feedback("ssn", "x", "", "positive", "too_broad")

        assert engine_with_ssn.get_accuracy("ssn").total == 0

    def test_create_pattern_duplicate_and_dict(self, engine_with_ssn):
        with pytest.raises(PatternError):
            engine_with_ssn.create_pattern({"id": "ssn", "category": "Identity"})

        created = engine_with_ssn.create_pattern({"id": "email", "category": "Contact", "type": "identity-data"})
        assert created.type.value == "identity_data"

    def test_create_pattern_from_template(self, engine):
        pattern = engine.create_pattern_from_template("Email", "email", category="Contact")

        matches = engine.match("write to jane.doe@example.org today")

        assert pattern.category == "Contact"
        assert [m.text for m in matches] == ["jane.doe@example.org"]

    def test_delete_pattern_cascades_feedback(self, engine_with_ssn):
        engine_with_ssn.submit_feedback("ssn", "123-45-6789", "", "positive")
        engine_with_ssn.submit_feedback("ssn", "123-45-6789", "", "negative", "too_broad")

        assert engine_with_ssn.delete_pattern("ssn") == 2
        assert engine_with_ssn.feedback_store.list_all() == []
        with pytest.raises(PatternNotFoundError):
            engine_with_ssn.get_pattern("ssn")

    def test_feedback_history_pagination(self, engine_with_ssn):
        for i in range(5):
            engine_with_ssn.submit_feedback("ssn", f"text-{i}", "", "negative")

        events, total = engine_with_ssn.get_feedback_history("ssn", limit=2, offset=0)

        assert total == 5
        assert [e.matched_text for e in events] == ["text-4", "text-3"]

    def test_feedback_statistics(self, engine_with_ssn):
        engine_with_ssn.submit_feedback("ssn", "123-45-6789", "", "positive")
        engine_with_ssn.submit_feedback("ssn", "123-45-6789", "", "negative")

        stats = engine_with_ssn.get_feedback_statistics()

        assert stats.total_feedback == 2
        assert stats.pattern_stats[0].category == "Identity"

    def test_error_response_for_not_found(self, engine):
        with pytest.raises(PatternNotFoundError) as exc_info:
            engine.get_accuracy("missing")

        response = create_error_response(exc_info.value)
        assert response == {
            "error": True,
            "error_code": "PATTERN_NOT_FOUND",
            "message": "Pattern not found: missing",
            "details": {"pattern_id": "missing"},
        }

    def test_stats_and_health_check(self, engine_with_ssn):
        engine_with_ssn.reset_stats()
        engine_with_ssn.match(self.TEXT)
        with pytest.raises(PatternNotFoundError):
            engine_with_ssn.apply_refinement("missing", Refinement())

        stats = engine_with_ssn.get_stats()
        health = engine_with_ssn.health_check()

        assert stats["successful_requests"] == 1
        assert stats["failed_requests"] == 1
        assert health["status"] == "healthy"

    def test_every_operation_recorded_in_stats(self, engine_with_ssn):
        engine_with_ssn.reset_stats()
        engine_with_ssn.submit_feedback("ssn", "123-45-6789", "", "positive")
        engine_with_ssn.get_feedback_history("ssn")
        engine_with_ssn.get_accuracy("ssn")
        engine_with_ssn.needs_refinement("ssn")
        engine_with_ssn.list_patterns_needing_refinement()
        with pytest.raises(PatternNotFoundError):
            engine_with_ssn.delete_pattern("missing")
        engine_with_ssn.delete_pattern("ssn")

        stats = engine_with_ssn.get_stats()

        assert stats["total_requests"] == 7
        assert stats["successful_requests"] == 6
        assert stats["failed_requests"] == 1

    def test_concurrent_matching_counts_every_request(self, engine_with_ssn):
        engine_with_ssn.reset_stats()

        def worker():
            for _ in range(200):
                engine_with_ssn.match(self.TEXT)

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        stats = engine_with_ssn.get_stats()
        assert stats["total_requests"] == 1600
        assert stats["successful_requests"] == 1600

    def test_lazy_initialization(self):
        engine = PatternEngineService(config=EngineConfig())

        assert not engine.is_initialized()
        engine.match("anything")
        assert engine.is_initialized()

    @pytest.mark.parametrize(
        "operation",
        [
            lambda engine: engine.create_pattern(Pattern(id="p", category="Custom")),
            lambda engine: engine.list_patterns(),
            lambda engine: engine.list_patterns_needing_refinement(),
            lambda engine: engine.get_feedback_statistics(),
        ],
    )
    def test_lazy_initialization_on_any_operation(self, operation):
        engine = PatternEngineService(config=EngineConfig())

        operation(engine)

        assert engine.is_initialized()

    def test_pattern_with_unusable_regex_still_matches(self, engine, caplog):
        with caplog.at_level(logging.WARNING):
            engine.create_pattern(
                Pattern(id="ssn", category="Identity", regex_set=[r"\d{3}-\d{2}-\d{4}", "([bad"], examples={"secret"})
            )

        matches = engine.match("123-45-6789 secret")

        assert [(m.text, m.confidence) for m in matches] == [("123-45-6789", 0.9), ("secret", 0.85)]
        assert engine.get_pattern("ssn").regex_set == [r"\d{3}-\d{2}-\d{4}", "([bad"]
        assert "regex #1 will be skipped" in caplog.text

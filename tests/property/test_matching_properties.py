"""
Property-based tests for matching and accuracy invariants.

Random texts and pattern sets are generated with hypothesis; the
invariants below must hold for every input.
"""

from hypothesis import given, settings, strategies as st

from pattern_engine.contracts import FeedbackEvent, Pattern
from pattern_engine.layers.feedback import AccuracyCalculator, InMemoryFeedbackStore
from pattern_engine.layers.matching import PatternMatcher

ALPHABET = "ab12- "
REGEX_POOL = [r"\d+", r"[a-z]{2}", r"a+b", r"\d-\d", r"b", r"\d{2}\s?a"]

MATCHER = PatternMatcher()

texts = st.text(alphabet=ALPHABET + "AB", max_size=60)
snippets = st.text(alphabet=ALPHABET, min_size=1, max_size=4)


@st.composite
def pattern_sets(draw):
    count = draw(st.integers(min_value=1, max_value=4))
    return [
        Pattern(
            id=f"p{index}",
            category="Generated",
            regex_set=draw(st.lists(st.sampled_from(REGEX_POOL), max_size=3)),
            examples=draw(st.sets(snippets, max_size=3)),
            excluded_examples=draw(st.sets(snippets, max_size=3)),
            confidence_threshold=draw(st.sampled_from([0.0, 0.7, 0.88])),
        )
        for index in range(count)
    ]


class TestMatchingProperties:
    """Property-based tests for matcher invariants"""

    @given(texts, pattern_sets())
    @settings(max_examples=200, deadline=None)
    def test_returned_matches_never_overlap(self, text, patterns):
        matches = MATCHER.find_matches(text, patterns)

        for left, right in zip(matches, matches[1:]):
            assert left.end <= right.start
        for i, a in enumerate(matches):
            for b in matches[i + 1:]:
                assert a.end <= b.start or b.end <= a.start

    @given(texts, pattern_sets())
    @settings(max_examples=200, deadline=None)
    def test_excluded_texts_never_returned(self, text, patterns):
        by_id = {pattern.id: pattern for pattern in patterns}

        for match in MATCHER.find_matches(text, patterns):
            excluded = {e.casefold() for e in by_id[match.pattern_id].excluded_examples}
            assert match.text.casefold() not in excluded

    @given(texts, pattern_sets())
    @settings(max_examples=100, deadline=None)
    def test_matching_is_idempotent(self, text, patterns):
        assert MATCHER.find_matches(text, patterns) == MATCHER.find_matches(text, patterns)

    @given(texts, pattern_sets())
    @settings(max_examples=100, deadline=None)
    def test_matches_are_exact_slices_above_threshold(self, text, patterns):
        by_id = {pattern.id: pattern for pattern in patterns}

        for match in MATCHER.find_matches(text, patterns):
            assert text[match.start:match.end] == match.text
            assert match.end > match.start
            assert match.confidence >= by_id[match.pattern_id].confidence_threshold

    @given(st.text(alphabet="xy ", max_size=20), st.text(alphabet="xy ", max_size=20), st.booleans())
    @settings(deadline=None)
    def test_regex_confidence_wins_over_example_on_overlap(self, prefix, suffix, regex_first):
        regex_pattern = Pattern(id="regex", category="Phone", regex_set=[r"\d{3}-\d{4}"])
        example_pattern = Pattern(id="example", category="Phone", examples={"555-1234"})
        patterns = [regex_pattern, example_pattern] if regex_first else [example_pattern, regex_pattern]

        matches = MATCHER.find_matches(f"{prefix}555-1234{suffix}", patterns)

        assert [(m.pattern_id, m.confidence) for m in matches] == [("regex", 0.9)]


class TestAccuracyProperties:
    """Property-based tests for metric recomputation"""

    @given(st.integers(min_value=0, max_value=30), st.integers(min_value=0, max_value=30))
    @settings(deadline=None)
    def test_precision_recomputed_from_log(self, positive, negative):
        store = InMemoryFeedbackStore()
        for _ in range(positive):
            store.record(FeedbackEvent(pattern_id="p", feedback_type="positive", matched_text="x"))
        for _ in range(negative):
            store.record(FeedbackEvent(pattern_id="p", feedback_type="negative", matched_text="y"))

        metrics = AccuracyCalculator(store).compute_metrics("p")

        assert metrics.positive == positive
        assert metrics.negative == negative
        if positive + negative == 0:
            assert metrics.precision == 1.0
        else:
            assert metrics.precision == positive / (positive + negative)

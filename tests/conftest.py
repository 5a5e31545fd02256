"""
Pytest configuration for Pattern Engine tests
"""

import sys
from pathlib import Path

import pytest

# Add src to path for module imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from pattern_engine.config import EngineConfig  # noqa: E402
from pattern_engine.contracts import Pattern, PatternType  # noqa: E402
from pattern_engine.core import PatternEngineService  # noqa: E402
from pattern_engine.layers.feedback import InMemoryFeedbackStore  # noqa: E402
from pattern_engine.layers.matching import PatternMatcher  # noqa: E402
from pattern_engine.layers.registry import InMemoryPatternRegistry  # noqa: E402

SSN_REGEX = r"\d{3}-\d{2}-\d{4}"


@pytest.fixture
def engine_config():
    """Engine configuration with the documented defaults"""
    return EngineConfig(
        precision_threshold=0.7,
        context_window=50,
        regex_timeout_seconds=1.0,
        max_regex_length=1000,
        max_text_length=0,
        negative_sample_limit=50,
        confidence_step=0.1,
        max_confidence_threshold=0.95,
        fallback_exclusion_min_occurrences=3,
    )


@pytest.fixture
def ssn_pattern():
    return Pattern(
        id="ssn",
        category="Identity",
        type=PatternType.IDENTITY_DATA,
        regex_set=[SSN_REGEX],
        auto_refine_threshold=3,
    )


@pytest.fixture
def matcher():
    return PatternMatcher()


@pytest.fixture
def registry():
    return InMemoryPatternRegistry()


@pytest.fixture
def feedback_store():
    return InMemoryFeedbackStore()


@pytest.fixture
def engine(engine_config):
    service = PatternEngineService(config=engine_config)
    service.initialize()
    return service


@pytest.fixture
def engine_with_ssn(engine, ssn_pattern):
    engine.create_pattern(ssn_pattern)
    return engine

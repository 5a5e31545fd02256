from .accuracy import AccuracyCalculator
from .feedback_store import FeedbackStore, InMemoryFeedbackStore

__all__ = ["AccuracyCalculator", "FeedbackStore", "InMemoryFeedbackStore"]

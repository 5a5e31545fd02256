from .pattern_registry import InMemoryPatternRegistry, PatternRegistry, validate_pattern

__all__ = ["InMemoryPatternRegistry", "PatternRegistry", "validate_pattern"]

"""Masking utilities for logging matched texts safely."""

import hashlib


def mask_pii_for_logging(text: str, preserve_length: bool = True) -> str:
    """
    Mask sensitive text for safe logging.

    Args:
        text: Input text that may contain sensitive data
        preserve_length: If True, preserves the original text length with asterisks

    Returns:
        Masked text safe for logging
    """
    if not text or not isinstance(text, str):
        return str(text)

    if len(text) <= 3:
        return "*" * len(text)

    # Deterministic hash prefix for correlating log lines
    hash_prefix = hashlib.sha256(text.encode()).hexdigest()[:8]

    if preserve_length:
        if len(text) <= 6:
            masked = "*" * len(text)
        else:
            masked = text[0] + "*" * (len(text) - 2) + text[-1]
        return f"[{hash_prefix}]{masked}"
    return f"[{hash_prefix}]({len(text)} chars)"


def safe_text_preview(text: str, max_chars: int = 20) -> str:
    """
    Create a safe preview of text for logging.

    Args:
        text: Input text
        max_chars: Maximum characters to show

    Returns:
        Safe preview with sensitive data masked
    """
    if not text:
        return "[empty]"

    if len(text) <= max_chars:
        return mask_pii_for_logging(text, preserve_length=True)

    truncated = text[:max_chars]
    masked = mask_pii_for_logging(truncated, preserve_length=True)
    return f"{masked}..."


def log_matching_start(text: str, pattern_count: int) -> str:
    """Generate safe log message for the start of a matching pass."""
    return f"Matching {pattern_count} patterns against {mask_pii_for_logging(text, preserve_length=False)}"


def log_feedback_recorded(pattern_id: str, feedback_type: str, matched_text: str) -> str:
    """Generate safe log message for a recorded feedback event."""
    return f"Feedback {feedback_type} for pattern {pattern_id}: {safe_text_preview(matched_text)}"

"""
Regex guard.

Operator-authored expressions are compiled with the ``regex`` module, which
supports a per-call timeout, so a catastrophically backtracking expression is
abandoned instead of stalling the matching pass.
"""

from functools import lru_cache
from typing import List, Tuple

import regex

from ...constants import DEFAULT_REGEX_TIMEOUT, MAX_REGEX_LENGTH, REGEX_CACHE_SIZE
from ...exceptions import PatternError, RegexTimeoutError


@lru_cache(maxsize=REGEX_CACHE_SIZE)
def _compile(source: str) -> "regex.Pattern":
    return regex.compile(source, regex.IGNORECASE)


class RegexGuard:
    """Compiles and scans untrusted-ish regular expressions"""

    def __init__(self, max_length: int = MAX_REGEX_LENGTH, timeout: float = DEFAULT_REGEX_TIMEOUT):
        self.max_length = max_length
        self.timeout = timeout

    def compile(self, source: str) -> "regex.Pattern":
        """
        Compile a regex case-insensitively.

        Raises:
            PatternError: empty, too long or syntactically invalid expression
        """
        if not source:
            raise PatternError("Empty regular expression", details={"regex": source})
        if len(source) > self.max_length:
            raise PatternError(
                f"Regular expression exceeds {self.max_length} characters",
                details={"regex": source[:50], "length": len(source)},
            )
        try:
            return _compile(source)
        except regex.error as e:
            raise PatternError(f"Invalid regular expression: {e}", details={"regex": source})

    def find_all(self, source: str, text: str) -> List[Tuple[int, int, str]]:
        """
        Return (start, end, text) for every non-overlapping occurrence.

        Zero-length occurrences are dropped. Either the whole scan completes
        or nothing is returned.

        Raises:
            PatternError: expression rejected by ``compile``
            RegexTimeoutError: scan exceeded the timeout
        """
        compiled = self.compile(source)
        found: List[Tuple[int, int, str]] = []
        try:
            for m in compiled.finditer(text, timeout=self.timeout):
                if m.end() > m.start():
                    found.append((m.start(), m.end(), m.group(0)))
        except TimeoutError:
            raise RegexTimeoutError(source, self.timeout)
        return found

    def find_literal(self, literal: str, text: str) -> List[Tuple[int, int, str]]:
        """
        Case-insensitive substring search returning every occurrence,
        including occurrences that overlap a previous one.
        """
        if not literal:
            return []
        compiled = _compile(regex.escape(literal))
        return [
            (m.start(), m.end(), m.group(0))
            for m in compiled.finditer(text, overlapped=True)
        ]


def clear_regex_cache() -> None:
    _compile.cache_clear()

"""
Structural shape analysis of falsely matched texts.

The engine never writes regexes on its own. Offending texts are grouped by
shape (digit runs, separators) so an operator can author a tighter regex.
"""

import re
from typing import Dict, List, Sequence

from ...constants import SHAPE_SEPARATORS
from ...contracts import ShapeGroup

_DIGIT_RUN = re.compile(r"\d+")
_REPEATED_DIGITS = re.compile(r"(\d)\1+")

ALL_DIGITS = "all_digits"
REPEATED_DIGITS = "repeated_digits"
NO_SEPARATORS = "no_separators"
LEADING_ZEROS = "leading_zeros"


def shape_signature(text: str) -> str:
    """
    Character-class signature: digits become ``9``, letters ``A``,
    separators are kept and anything else becomes ``?``.

    >>> shape_signature("123-45-6789")
    '999-99-9999'
    """
    chars = []
    for char in text:
        if char.isdigit():
            chars.append("9")
        elif char.isalpha():
            chars.append("A")
        elif char in SHAPE_SEPARATORS:
            chars.append(char)
        else:
            chars.append("?")
    return "".join(chars)


def digit_runs(text: str) -> List[int]:
    return [len(run) for run in _DIGIT_RUN.findall(text)]


def has_separators(text: str) -> bool:
    return any(char in SHAPE_SEPARATORS for char in text)


def shape_flags(text: str) -> List[str]:
    """Format flags of a single text"""
    flags = []
    if text.isdigit():
        flags.append(ALL_DIGITS)
    if _REPEATED_DIGITS.fullmatch(text):
        flags.append(REPEATED_DIGITS)
    if not has_separators(text):
        flags.append(NO_SEPARATORS)
    if text.startswith("0"):
        flags.append(LEADING_ZEROS)
    return flags


def count_flags(texts: Sequence[str]) -> Dict[str, int]:
    counts = {ALL_DIGITS: 0, REPEATED_DIGITS: 0, NO_SEPARATORS: 0, LEADING_ZEROS: 0}
    for text in texts:
        for flag in shape_flags(text):
            counts[flag] += 1
    return counts


def group_by_shape(texts: Sequence[str]) -> List[ShapeGroup]:
    """
    Group texts by shape signature, largest group first.

    ``count`` is the number of occurrences; ``texts`` lists distinct texts in
    first-seen order. Equal counts keep first-seen group order.
    """
    groups: Dict[str, ShapeGroup] = {}
    for text in texts:
        signature = shape_signature(text)
        group = groups.get(signature)
        if group is None:
            group = ShapeGroup(
                signature=signature,
                digit_runs=digit_runs(text),
                has_separators=has_separators(text),
            )
            groups[signature] = group
        group.count += 1
        if text not in group.texts:
            group.texts.append(text)
    return sorted(groups.values(), key=lambda g: g.count, reverse=True)


def describe_shape(group: ShapeGroup) -> str:
    """Human-readable summary, e.g. ``9 digits, no separators``"""
    if group.digit_runs:
        runs = "+".join(str(run) for run in group.digit_runs)
        digits = f"{runs} digits"
    else:
        digits = "no digits"
    separators = "with separators" if group.has_separators else "no separators"
    return f"{digits}, {separators}"

"""
Pattern Templates

Built-in detectors for common sensitive data types. A template recognizes
examples of its type and generates a generalized regex set, so patterns
created from examples detect the format rather than the exact strings.
"""

import re
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence

from ..contracts import Pattern, PatternType
from ..exceptions import ValidationError


@dataclass
class PatternTemplate:
    """Template definition for a common data type"""
    name: str
    description: str
    pattern_type: PatternType
    recognizers: List[str]
    regexes: List[str] = field(default_factory=list)
    context_keywords: List[str] = field(default_factory=list)
    regex_builder: Optional[Callable[[Sequence[str]], List[str]]] = None
    validator: Optional[Callable[[str], bool]] = None

    def test(self, example: str) -> bool:
        """True if the example looks like this data type"""
        candidate = example.strip()
        if not any(re.fullmatch(r, candidate, re.IGNORECASE) for r in self.recognizers):
            return False
        return self.validator is None or self.validator(candidate)

    def generate_regexes(self, examples: Sequence[str]) -> List[str]:
        if self.regex_builder is not None:
            return self.regex_builder(examples)
        return list(self.regexes)


def _has_phone_digits(example: str) -> bool:
    return 10 <= len(re.sub(r"\D", "", example)) <= 15


def _account_regexes(examples: Sequence[str]) -> List[str]:
    lengths = [len(e.strip()) for e in examples if e.strip()] or [6, 20]
    low, high = min(lengths), max(lengths)
    return [
        rf"\b[A-Z0-9]{{{low},{high}}}\b",
        rf"\b\d{{{low},{high}}}\b",
    ]


_MONTHS = "January|February|March|April|May|June|July|August|September|October|November|December"
_MONTHS_SHORT = "Jan|Feb|Mar|Apr|May|Jun|Jul|Aug|Sep|Oct|Nov|Dec"


PATTERN_TEMPLATES: List[PatternTemplate] = [
    PatternTemplate(
        name="Date",
        description="Various date formats",
        pattern_type=PatternType.IDENTITY_DATA,
        recognizers=[
            r"\d{4}[-/]\d{1,2}[-/]\d{1,2}",
            r"\d{1,2}[-/]\d{1,2}[-/]\d{2,4}",
            rf"(?:{_MONTHS_SHORT})[a-z]*\s+\d{{1,2}},?\s+\d{{2,4}}",
            rf"\d{{1,2}}\s+(?:{_MONTHS_SHORT})[a-z]*\s+\d{{2,4}}",
        ],
        regexes=[
            r"\b\d{4}[-/]\d{1,2}[-/]\d{1,2}\b",
            r"\b\d{1,2}[-/]\d{1,2}[-/]\d{4}\b",
            rf"\b(?:{_MONTHS}|{_MONTHS_SHORT})\s+\d{{1,2}},?\s+\d{{2,4}}\b",
            rf"\b\d{{1,2}}\s+(?:{_MONTHS}|{_MONTHS_SHORT})\s+\d{{2,4}}\b",
        ],
        context_keywords=["date", "birth", "dob", "born", "birthday", "expiry", "expires", "issued", "valid"],
    ),
    PatternTemplate(
        name="SSN",
        description="Social Security Numbers",
        pattern_type=PatternType.IDENTITY_DATA,
        recognizers=[r"\d{3}-\d{2}-\d{4}", r"\d{9}"],
        regexes=[r"\b\d{3}-\d{2}-\d{4}\b", r"\b\d{9}\b"],
        context_keywords=["ssn", "social", "security", "tin", "taxpayer", "identification"],
    ),
    PatternTemplate(
        name="Phone",
        description="Phone numbers",
        pattern_type=PatternType.IDENTITY_DATA,
        recognizers=[r"[\d\s\-()+.]{10,}"],
        regexes=[
            r"\(?\b\d{3}\)?[\s.-]?\d{3}[\s.-]?\d{4}\b",
            r"\+?1?[\s.-]?\(?\b\d{3}\)?[\s.-]?\d{3}[\s.-]?\d{4}\b",
            r"\b\d{10,15}\b",
        ],
        context_keywords=["phone", "mobile", "cell", "telephone", "contact", "number", "tel"],
        validator=_has_phone_digits,
    ),
    PatternTemplate(
        name="Email",
        description="Email addresses",
        pattern_type=PatternType.IDENTITY_DATA,
        recognizers=[r"[^\s@]+@[^\s@]+\.[^\s@]+"],
        regexes=[r"\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}\b"],
        context_keywords=["email", "e-mail", "mail", "address", "contact"],
    ),
    PatternTemplate(
        name="CreditCard",
        description="Credit card numbers",
        pattern_type=PatternType.FINANCIAL_DATA,
        recognizers=[r"(?:\d[\s-]?){12,18}\d"],
        regexes=[r"\b\d{4}[\s-]?\d{4}[\s-]?\d{4}[\s-]?\d{4}\b", r"\b\d{13,19}\b"],
        context_keywords=["card", "credit", "debit", "payment", "account", "number"],
    ),
    PatternTemplate(
        name="IPAddress",
        description="IP addresses",
        pattern_type=PatternType.CUSTOM,
        recognizers=[r"(?:\d{1,3}\.){3}\d{1,3}"],
        regexes=[
            r"\b(?:(?:25[0-5]|2[0-4][0-9]|[01]?[0-9][0-9]?)\.){3}(?:25[0-5]|2[0-4][0-9]|[01]?[0-9][0-9]?)\b"
        ],
        context_keywords=["ip", "address", "host", "server", "client"],
    ),
    PatternTemplate(
        name="ZipCode",
        description="Postal/ZIP codes",
        pattern_type=PatternType.IDENTITY_DATA,
        recognizers=[r"\d{5}(?:-\d{4})?", r"[A-Z]\d[A-Z]\s?\d[A-Z]\d"],
        regexes=[r"\b\d{5}(?:-\d{4})?\b", r"\b[A-Z]\d[A-Z]\s?\d[A-Z]\d\b"],
        context_keywords=["zip", "postal", "code", "postcode", "address"],
    ),
    PatternTemplate(
        name="Currency",
        description="Currency amounts",
        pattern_type=PatternType.FINANCIAL_DATA,
        recognizers=[
            r"[$€£¥]?\s?\d+(?:[,\d]+)?(?:\.\d{1,2})?",
            r"\d+(?:[,\d]+)?(?:\.\d{1,2})?\s?[$€£¥]?",
        ],
        regexes=[
            r"\$\s?\d{1,3}(?:,\d{3})*(?:\.\d{2})?\b",
            r"\b\d{1,3}(?:,\d{3})*(?:\.\d{2})?\s?\$",
            r"€\s?\d{1,3}(?:,\d{3})*(?:\.\d{2})?\b",
            r"£\s?\d{1,3}(?:,\d{3})*(?:\.\d{2})?\b",
        ],
        context_keywords=["amount", "price", "cost", "payment", "salary", "wage", "fee", "balance"],
    ),
    PatternTemplate(
        name="AccountNumber",
        description="Bank account or ID numbers",
        pattern_type=PatternType.FINANCIAL_DATA,
        recognizers=[r"[A-Z0-9]{6,20}"],
        context_keywords=["account", "number", "id", "identifier", "reference", "code"],
        regex_builder=_account_regexes,
    ),
]


def get_template(name: str) -> PatternTemplate:
    for template in PATTERN_TEMPLATES:
        if template.name.lower() == name.strip().lower():
            return template
    raise ValidationError(
        f"Unknown pattern template: {name}",
        details={"available": [t.name for t in PATTERN_TEMPLATES]},
    )


def find_matching_template(examples: Sequence[str]) -> Optional[PatternTemplate]:
    """
    Template recognizing the most examples, provided it recognizes at least
    half of them. Earlier templates win ties.
    """
    examples = [e for e in examples if e and e.strip()]
    if not examples:
        return None

    best: Optional[PatternTemplate] = None
    best_count = 0
    for template in PATTERN_TEMPLATES:
        count = sum(1 for example in examples if template.test(example))
        if count >= len(examples) * 0.5 and count > best_count:
            best, best_count = template, count
    return best


def generate_template_regexes(examples: Sequence[str]) -> List[str]:
    """Regex set of the matching template, or an empty list"""
    template = find_matching_template(examples)
    if template is None:
        return []
    return template.generate_regexes(examples)


def build_pattern_from_template(
    template_name: str,
    pattern_id: str,
    category: Optional[str] = None,
    examples: Sequence[str] = (),
    **overrides,
) -> Pattern:
    """
    Create a Pattern from a named template.

    Args:
        template_name: Name from PATTERN_TEMPLATES (case-insensitive)
        pattern_id: Identifier for the new pattern
        category: Grouping label, defaults to the template name
        examples: Literal examples kept on the pattern
        **overrides: Any other Pattern field
    """
    template = get_template(template_name)
    fields = {
        "id": pattern_id,
        "category": category or template.name,
        "type": template.pattern_type,
        "name": template.name,
        "description": template.description,
        "regex_set": template.generate_regexes(examples),
        "examples": set(examples),
    }
    fields.update(overrides)
    return Pattern(**fields)

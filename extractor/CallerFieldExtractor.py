# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-10-13
# Description: CallerFieldExtractor
# -----------------------------------------------------------------------------
import re
from dataclasses import dataclass
from typing import List, Optional, Pattern, Sequence

from record.VMRecord import ExtractedFields

_NAME = r"([A-Z][a-z]+ ?([A-Z][a-z]+)?)"
_COMPANY = r"([A-Za-z0-9\s&]+)"


@dataclass(frozen=True)
class CallerRule:
    """One entry of the caller rule table: a pattern plus the groups it binds."""
    pattern: Pattern[str]
    name_group: Optional[int] = None
    company_group: Optional[int] = None


# Priority order: most specific first, bare "<Name> from <Company>" last.
# Patterns are case-insensitive, so the fallback also matches ordinary prose
# such as "Thanks from all of us". Such false positives are accepted.
CALLER_RULES: Sequence[CallerRule] = (
    CallerRule(re.compile(rf"this is {_NAME} from {_COMPANY}", re.IGNORECASE), 1, 3),
    CallerRule(re.compile(rf"(?:it'?s|it is) {_NAME} from {_COMPANY}", re.IGNORECASE), 1, 3),
    CallerRule(re.compile(rf"(?:this is|it'?s|it is) {_NAME}", re.IGNORECASE), 1, None),
    CallerRule(re.compile(rf"{_NAME} from {_COMPANY}", re.IGNORECASE), 1, 3),
)

PHONE_PATTERN: Pattern[str] = re.compile(
    r"\(?\d{3}\)?[-.\s]?\d{3}[-.\s]?\d{4}"
    r"|extension\s+\d{3,4}"
    r"|ext\.?\s+\d{3,4}",
    re.IGNORECASE,
)


def _group(match: "re.Match[str]", index: Optional[int]) -> Optional[str]:
    if index is None:
        return None
    value = match.group(index)
    if value is None:
        return None
    value = value.strip()
    return value or None


def extract_phone_numbers(text: str) -> List[str]:
    """All non-overlapping phone / extension tokens, in order of appearance."""
    return [m.group(0) for m in PHONE_PATTERN.finditer(text or "")]


def extract(text: str, rules: Sequence[CallerRule] = CALLER_RULES) -> ExtractedFields:
    """
    Pull caller name, company and phone numbers out of a transcript.

    The first caller rule that matches decides name/company; the phone scan runs
    over the whole text regardless. Never raises for unmatched input.
    """
    text = text or ""
    name: Optional[str] = None
    company: Optional[str] = None

    for rule in rules:
        match = rule.pattern.search(text)
        if match:
            name = _group(match, rule.name_group)
            company = _group(match, rule.company_group)
            break

    return ExtractedFields(
        name=name,
        company=company,
        phone_numbers=extract_phone_numbers(text),
    )


class CallerFieldExtractor:
    """Thin object wrapper so the extractor can be injected like the other collaborators."""

    def __init__(self, rules: Sequence[CallerRule] = CALLER_RULES):
        self.rules = tuple(rules)

    def extract(self, text: str) -> ExtractedFields:
        return extract(text, self.rules)

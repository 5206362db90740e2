"""
Clinical safety lexicons and shared enumerations.

Both lexicons are matched as case-insensitive substrings with no word
boundaries, so "cutting" also matches "cutting the grass". Matchers are
compiled once at import time.
"""

from __future__ import annotations

import re
from enum import StrEnum


class HazardId(StrEnum):
    """Clinical hazard identifiers used for audit correlation."""

    HAZ_001 = "HAZ-001"  # unsafe clinical phrasing in AI output
    HAZ_002 = "HAZ-002"  # crisis indicator present


class Severity(StrEnum):
    """Hazard severity classes (DCB0129 scale)."""

    MINOR = "minor"
    MODERATE = "moderate"
    MAJOR = "major"
    CATASTROPHIC = "catastrophic"

    @property
    def requires_alert(self) -> bool:
        return self in (Severity.MAJOR, Severity.CATASTROPHIC)


class SuggestedAction(StrEnum):
    """Graded response to crisis language in user text."""

    NORMAL = "normal"
    SUPPORT = "support"
    EMERGENCY = "emergency"


# Dismissive language, unsolicited diagnoses, medication directives
BANNED_PHRASES: tuple[str, ...] = (
    "just calm down",
    "just relax",
    "just breathe",
    "it's not that bad",
    "others have it worse",
    "snap out of it",
    "cheer up",
    "think positive",
    "get over it",
    "you have depression",
    "you have anxiety",
    "you are bipolar",
    "you should take",
    "stop taking your",
    "you don't need medication",
    "you're overreacting",
    "it's all in your head",
    "you're being dramatic",
)

CRISIS_INDICATORS: tuple[str, ...] = (
    "want to die",
    "kill myself",
    "end my life",
    "suicide",
    "no point living",
    "better off dead",
    "hurt myself",
    "self harm",
    "cutting",
    "overdose",
    "can't go on",
    "give up",
    "end it all",
)

REDACTION_MARKER = "[removed for safety]"


def _compile(phrases: tuple[str, ...]) -> tuple[tuple[str, re.Pattern[str]], ...]:
    return tuple((phrase, re.compile(re.escape(phrase), re.IGNORECASE)) for phrase in phrases)


BANNED_PHRASE_MATCHERS = _compile(BANNED_PHRASES)
CRISIS_INDICATOR_MATCHERS = _compile(CRISIS_INDICATORS)

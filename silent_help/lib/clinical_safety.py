"""
Clinical output safety filter for Silent Help.

Last-line check on every AI-generated message immediately before it is
displayed, independent of any safeguards in the generation step.

Components:
- SafetyCheckResult: outcome of a check, including the text to display
- SafetyFilter: banned-phrase redaction plus a crisis-content flag

Usage:
    from silent_help.lib.clinical_safety import SafetyFilter

    result = SafetyFilter.check_response_safety(llm_response)
    display(result.safe_text)
    if result.crisis_detected:
        ...  # caller may switch to crisis resources
"""

from __future__ import annotations

from dataclasses import dataclass, field

import structlog

from silent_help.lib.lexicon import (
    BANNED_PHRASE_MATCHERS,
    CRISIS_INDICATOR_MATCHERS,
    REDACTION_MARKER,
    HazardId,
)

logger = structlog.get_logger(__name__)


@dataclass
class SafetyCheckResult:
    """Result of an AI output safety check."""

    passed: bool
    modified: bool
    safe_text: str
    original_text: str | None = None
    blocked_reasons: list[str] = field(default_factory=list)
    hazard_ids: list[HazardId] = field(default_factory=list)
    crisis_detected: bool = False


class SafetyFilter:
    """
    Scans AI responses for clinically unsafe phrasing.

    Two scans run over the same text:
    1. Banned phrases: exhaustive. Every phrase found adds a reason and
       HAZ-001, and all its occurrences are replaced with the redaction
       marker.
    2. Crisis indicators: stops at the first hit, sets crisis_detected
       and adds HAZ-002. The text is left as is.

    ``passed`` only reflects the banned-phrase scan.
    """

    @classmethod
    def check_response_safety(cls, text: str) -> SafetyCheckResult:
        """
        Check one AI-generated message.

        Args:
            text: Response text as produced by the model

        Returns:
            SafetyCheckResult; safe_text is what should be displayed
        """
        blocked_reasons: list[str] = []
        hazard_ids: list[HazardId] = []
        safe_text = text
        modified = False
        crisis_detected = False

        for phrase, pattern in BANNED_PHRASE_MATCHERS:
            if pattern.search(text):
                blocked_reasons.append(f'Contains banned phrase: "{phrase}"')
                hazard_ids.append(HazardId.HAZ_001)
                safe_text = pattern.sub(REDACTION_MARKER, safe_text)
                modified = True

        for _indicator, pattern in CRISIS_INDICATOR_MATCHERS:
            if pattern.search(text):
                crisis_detected = True
                hazard_ids.append(HazardId.HAZ_002)
                break

        if blocked_reasons or crisis_detected:
            logger.warning(
                "clinical_safety_response_flagged",
                reason_count=len(blocked_reasons),
                hazard_ids=[h.value for h in hazard_ids],
                crisis_detected=crisis_detected,
            )

        return SafetyCheckResult(
            passed=not blocked_reasons,
            modified=modified,
            safe_text=safe_text,
            original_text=text if modified else None,
            blocked_reasons=blocked_reasons,
            hazard_ids=hazard_ids,
            crisis_detected=crisis_detected,
        )


def check_response_safety(text: str) -> SafetyCheckResult:
    """Convenience wrapper around SafetyFilter.check_response_safety."""
    return SafetyFilter.check_response_safety(text)

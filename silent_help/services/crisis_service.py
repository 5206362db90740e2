"""
Crisis detection for user-authored text.

Every user message and journal entry passes through this gate. The
result is a graded action rather than a yes/no flag:

- no indicators       -> normal
- one indicator       -> support (contextual nudge, avoids alarm fatigue
                         from a single ambiguous phrase)
- two or more         -> emergency (direct crisis-resource escalation)

IMPORTANT: This is a SAFETY FEATURE. It must never be rate-limited or
skipped by normal request handling.

Usage:
    assessment = CrisisDetector.check_user_input_for_crisis(entry_text)
    if assessment.suggested_action == SuggestedAction.EMERGENCY:
        response = CrisisDetector.build_response(assessment)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from silent_help.lib.lexicon import CRISIS_INDICATOR_MATCHERS, SuggestedAction

logger = logging.getLogger(__name__)


# =============================================================================
# Data Classes
# =============================================================================


@dataclass(frozen=True)
class CrisisAssessment:
    """
    Graded crisis assessment of one piece of user text.

    Attributes:
        is_crisis: True if any indicator matched
        indicators: Distinct matched indicators, in lexicon order
        suggested_action: normal, support or emergency
    """

    is_crisis: bool
    indicators: list[str] = field(default_factory=list)
    suggested_action: SuggestedAction = SuggestedAction.NORMAL


@dataclass(frozen=True)
class CrisisResource:
    """A crisis line or service."""

    name: str
    number: str
    description: str


@dataclass
class CrisisResponse:
    """
    Crisis resources to show instead of (or ahead of) an AI reply.

    Attributes:
        suggested_action: The action that produced this response
        message: Empathetic safety message
        resources: Crisis lines, most urgent first
        show_crisis_pathway: Whether the UI should move to the crisis pathway
    """

    suggested_action: SuggestedAction
    message: str
    resources: list[CrisisResource]
    show_crisis_pathway: bool

    def to_dict(self) -> dict[str, object]:
        """Convert to dictionary representation."""
        return {
            "suggested_action": self.suggested_action.value,
            "message": self.message,
            "resources": [
                {"name": r.name, "number": r.number, "description": r.description}
                for r in self.resources
            ],
            "show_crisis_pathway": self.show_crisis_pathway,
        }


# =============================================================================
# Crisis Detector
# =============================================================================


class CrisisDetector:
    """
    Deterministic crisis keyword gate.

    The scan is exhaustive: every indicator in the lexicon is checked and
    all matches are collected. Matching is case-insensitive and
    boundary-free.
    """

    # UK services; order is escalation order
    UK_CRISIS_RESOURCES: tuple[CrisisResource, ...] = (
        CrisisResource("Emergency Services", "999", "For immediate danger"),
        CrisisResource("Samaritans", "116 123", "24/7 emotional support, free to call"),
        CrisisResource("Shout", "Text SHOUT to 85258", "Free 24/7 text support"),
        CrisisResource("NHS 111", "111", "Mental health advice"),
        CrisisResource("CALM", "0800 58 58 58", "Campaign Against Living Miserably"),
    )

    SAFETY_MESSAGE = (
        "I hear you, and I want you to know that support is available right now. "
        "You don't have to face this alone. Please reach out to one of these services, "
        "they're free, confidential, and available 24/7."
    )

    SUPPORT_MESSAGE = (
        "Thank you for sharing how you're feeling. It takes courage to be honest "
        "about difficult emotions. If things ever feel overwhelming, these services can help."
    )

    @classmethod
    def check_user_input_for_crisis(cls, text: str) -> CrisisAssessment:
        """
        Scan user text for crisis indicators.

        Args:
            text: User message or journal entry

        Returns:
            CrisisAssessment with the graded suggested action
        """
        found = [indicator for indicator, pattern in CRISIS_INDICATOR_MATCHERS if pattern.search(text)]

        if len(found) >= 2:
            action = SuggestedAction.EMERGENCY
        elif len(found) == 1:
            action = SuggestedAction.SUPPORT
        else:
            return CrisisAssessment(is_crisis=False, indicators=[], suggested_action=SuggestedAction.NORMAL)

        logger.warning(
            "crisis_indicators_detected count=%d action=%s",
            len(found),
            action.value,
        )
        return CrisisAssessment(is_crisis=True, indicators=found, suggested_action=action)

    @classmethod
    def build_response(cls, assessment: CrisisAssessment) -> CrisisResponse | None:
        """
        Build the crisis-resource response for an assessment.

        Returns None for a normal assessment. Emergency responses lead
        with emergency services and request the crisis pathway; support
        responses offer listening services without escalating.
        """
        if assessment.suggested_action == SuggestedAction.EMERGENCY:
            return CrisisResponse(
                suggested_action=SuggestedAction.EMERGENCY,
                message=cls.SAFETY_MESSAGE,
                resources=list(cls.UK_CRISIS_RESOURCES),
                show_crisis_pathway=True,
            )
        if assessment.suggested_action == SuggestedAction.SUPPORT:
            return CrisisResponse(
                suggested_action=SuggestedAction.SUPPORT,
                message=cls.SUPPORT_MESSAGE,
                resources=[r for r in cls.UK_CRISIS_RESOURCES if r.name != "Emergency Services"],
                show_crisis_pathway=False,
            )
        return None


def check_user_input_for_crisis(text: str) -> CrisisAssessment:
    """Convenience wrapper around CrisisDetector.check_user_input_for_crisis."""
    return CrisisDetector.check_user_input_for_crisis(text)

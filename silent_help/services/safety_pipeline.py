"""
Safety & privacy pipeline.

Thin composition of the encryption codec, the AI output filter, the
crisis detector and the hazard log. Chat and journal handlers call it
around their own I/O; none of the components know about each other.

Usage:
    pipeline = SafetyPipeline(codec=EncryptionCodec(), hazard_logger=HazardLogger())

    # journal handler
    assessment = pipeline.screen_user_input(entry_text, SafetyContext(user_state="journaling"))
    blob = pipeline.protect(entry_text, user_id)

    # chat handler, before display
    result = pipeline.screen_ai_response(llm_text)
"""

from __future__ import annotations

import json
import logging

from silent_help.lib.clinical_safety import SafetyCheckResult, SafetyFilter
from silent_help.lib.encryption import DecryptResult, EncryptedBlob, EncryptionCodec
from silent_help.lib.lexicon import HazardId, Severity, SuggestedAction
from silent_help.services.crisis_service import CrisisAssessment, CrisisDetector, CrisisResponse
from silent_help.services.hazard_log import (
    HazardEventType,
    HazardLogger,
    HazardOutcome,
    SafetyContext,
)

logger = logging.getLogger(__name__)


class SafetyPipeline:
    """
    Composes the safety core for request handlers.

    Args:
        codec: Encryption codec for sensitive fields.
        hazard_logger: Audit trail that receives every flagged event.
    """

    def __init__(self, codec: EncryptionCodec, hazard_logger: HazardLogger) -> None:
        self._codec = codec
        self._hazard_logger = hazard_logger

    @property
    def hazard_logger(self) -> HazardLogger:
        return self._hazard_logger

    def protect(self, plaintext: str, user_id: str) -> EncryptedBlob:
        """Encrypt sensitive content before it is persisted."""
        return self._codec.encrypt(plaintext, user_id)

    def reveal(self, blob: EncryptedBlob, user_id: str) -> DecryptResult:
        """Decrypt stored content; callers show "content unavailable" on failure."""
        return self._codec.decrypt(blob, user_id)

    def screen_ai_response(self, text: str) -> SafetyCheckResult:
        """
        Run the output filter on an AI message and record what it found.

        The snapshot carries the reasons only, never the response text.
        """
        result = SafetyFilter.check_response_safety(text)

        if not result.passed:
            self._hazard_logger.log(
                event_type=HazardEventType.UNSAFE_RESPONSE_REDACTED,
                severity=Severity.MODERATE,
                context_snapshot=json.dumps({"blocked_reasons": result.blocked_reasons}),
                action_taken="redacted_before_display",
                outcome=HazardOutcome.REDACTED,
                hazard_ids=[HazardId.HAZ_001],
            )

        if result.crisis_detected:
            self._hazard_logger.log(
                event_type=HazardEventType.RESPONSE_CRISIS_CONTENT,
                severity=Severity.MAJOR,
                context_snapshot=json.dumps({"source": "ai_response"}),
                action_taken="flagged_for_crisis_resources",
                outcome=HazardOutcome.FLAGGED,
                hazard_ids=[HazardId.HAZ_002],
            )

        return result

    def screen_user_input(
        self,
        text: str,
        context: SafetyContext | None = None,
    ) -> CrisisAssessment:
        """
        Assess a user message or journal entry for crisis language.

        Non-normal assessments are written to the hazard log with the
        suggested action as the action taken.
        """
        assessment = CrisisDetector.check_user_input_for_crisis(text)

        if assessment.suggested_action != SuggestedAction.NORMAL:
            self._hazard_logger.log_crisis_detection(
                assessment.indicators,
                context or SafetyContext(),
                assessment.suggested_action,
            )
            if assessment.suggested_action == SuggestedAction.EMERGENCY:
                logger.warning("crisis_pathway_escalation_signalled")

        return assessment

    def crisis_response(self, assessment: CrisisAssessment) -> CrisisResponse | None:
        """Crisis resources to show for an assessment, or None when normal."""
        return CrisisDetector.build_response(assessment)

"""
Tests for the SafetyPipeline composition.

Tests cover:
- protect / reveal round trip through the codec
- AI responses: redaction and crisis flags are written to the hazard log
- User input: support and emergency are logged, normal is not
- Crisis responses for the UI
"""

from __future__ import annotations

import json

from silent_help.lib.lexicon import REDACTION_MARKER, HazardId, Severity, SuggestedAction
from silent_help.services.hazard_log import HazardEventType, HazardOutcome, SafetyContext


class TestProtectReveal:
    """Encryption wrappers."""

    def test_round_trip(self, pipeline, user_a):
        blob = pipeline.protect("Today I felt lighter after the walk.", user_a)
        result = pipeline.reveal(blob, user_a)

        assert result.success is True
        assert result.content == "Today I felt lighter after the walk."

    def test_other_user_cannot_reveal(self, pipeline, user_a, user_b):
        blob = pipeline.protect("private", user_a)
        result = pipeline.reveal(blob, user_b)

        assert result.success is False
        assert result.content == ""

    def test_protect_does_not_touch_hazard_log(self, pipeline, user_a):
        pipeline.protect("I want to die", user_a)
        assert len(pipeline.hazard_logger) == 0


class TestScreenAiResponse:
    """Filtered AI output is recorded in the hazard log."""

    def test_clean_response_logs_nothing(self, pipeline):
        result = pipeline.screen_ai_response("That sounds hard. I'm here with you.")

        assert result.passed is True
        assert len(pipeline.hazard_logger) == 0

    def test_redaction_logged_without_text(self, pipeline, alerts):
        result = pipeline.screen_ai_response("Just calm down, your week sounds heavy.")

        assert result.passed is False
        assert REDACTION_MARKER in result.safe_text

        (entry,) = pipeline.hazard_logger.entries()
        assert entry.event_type == HazardEventType.UNSAFE_RESPONSE_REDACTED
        assert entry.severity == Severity.MODERATE
        assert entry.outcome == HazardOutcome.REDACTED
        assert entry.hazard_ids == (HazardId.HAZ_001,)
        assert json.loads(entry.context_snapshot)["blocked_reasons"] == result.blocked_reasons
        assert "week sounds heavy" not in entry.context_snapshot
        # Moderate does not page anyone
        assert alerts == []

    def test_crisis_content_flagged(self, pipeline, alerts):
        result = pipeline.screen_ai_response("If suicide feels close, Samaritans are on 116 123.")

        assert result.crisis_detected is True
        (entry,) = pipeline.hazard_logger.entries()
        assert entry.event_type == HazardEventType.RESPONSE_CRISIS_CONTENT
        assert entry.severity == Severity.MAJOR
        assert entry.outcome == HazardOutcome.FLAGGED
        assert alerts == [entry]

    def test_both_events_logged_in_order(self, pipeline):
        pipeline.screen_ai_response("Cheer up and don't give up.")

        event_types = [e.event_type for e in pipeline.hazard_logger.entries()]
        assert event_types == [
            HazardEventType.UNSAFE_RESPONSE_REDACTED,
            HazardEventType.RESPONSE_CRISIS_CONTENT,
        ]


class TestScreenUserInput:
    """Crisis assessments of user text."""

    def test_normal_not_logged(self, pipeline):
        assessment = pipeline.screen_user_input("I had a lovely walk today")

        assert assessment.suggested_action == SuggestedAction.NORMAL
        assert len(pipeline.hazard_logger) == 0

    def test_support_logged(self, pipeline, alerts):
        context = SafetyContext(user_state="journaling", session_duration=90)
        assessment = pipeline.screen_user_input("I feel like I want to die", context)

        assert assessment.suggested_action == SuggestedAction.SUPPORT
        (entry,) = pipeline.hazard_logger.entries()
        assert entry.event_type == HazardEventType.CRISIS_DETECTED
        assert entry.action_taken == "support"
        assert json.loads(entry.context_snapshot)["context"]["user_state"] == "journaling"
        assert alerts == [entry]

    def test_emergency_logged(self, pipeline):
        assessment = pipeline.screen_user_input("I want to kill myself, I'm better off dead")

        assert assessment.suggested_action == SuggestedAction.EMERGENCY
        (entry,) = pipeline.hazard_logger.entries()
        assert entry.action_taken == "emergency"
        assert entry.outcome == HazardOutcome.ESCALATED
        assert set(json.loads(entry.context_snapshot)["indicators"]) == {"kill myself", "better off dead"}

    def test_default_context(self, pipeline):
        pipeline.screen_user_input("suicide")

        (entry,) = pipeline.hazard_logger.entries()
        assert json.loads(entry.context_snapshot)["context"]["user_state"] == "unknown"


class TestCrisisResponse:
    def test_emergency_shows_pathway(self, pipeline):
        assessment = pipeline.screen_user_input("no point living, end it all")
        response = pipeline.crisis_response(assessment)

        assert response is not None
        assert response.show_crisis_pathway is True

    def test_normal_has_none(self, pipeline):
        assessment = pipeline.screen_user_input("good day")
        assert pipeline.crisis_response(assessment) is None

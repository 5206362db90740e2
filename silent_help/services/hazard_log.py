"""
Clinical hazard log for Silent Help.

Append-only audit trail of safety-relevant events (crisis detections,
redacted AI output). Entries are never mutated or deleted; production
deployments export them to a durable audit store.

The logger is an explicit handle: construct one per process (or per
request scope in tests) and pass it to whatever needs to record events.

Usage:
    hazard_logger = HazardLogger()
    hazard_logger.log_crisis_detection(
        assessment.indicators,
        SafetyContext(user_state="journaling"),
        assessment.suggested_action,
    )
    for entry in hazard_logger.entries():
        ...
"""

from __future__ import annotations

import json
import logging
import secrets
import threading
import time
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum

from silent_help.lib.lexicon import HazardId, Severity

logger = logging.getLogger(__name__)


# =============================================================================
# Enums and Data Classes
# =============================================================================


class HazardEventType(StrEnum):
    """Kinds of safety event recorded in the hazard log."""

    CRISIS_DETECTED = "crisis_detected"
    UNSAFE_RESPONSE_REDACTED = "unsafe_response_redacted"
    RESPONSE_CRISIS_CONTENT = "response_crisis_content"


class HazardOutcome(StrEnum):
    """What happened as a result of the event."""

    ESCALATED = "escalated"
    REDACTED = "redacted"
    FLAGGED = "flagged"


@dataclass
class SafetyContext:
    """
    Ambient session context captured with a hazard event.

    Attributes:
        user_state: What the user was doing (e.g. "journaling", "chatting")
        cognitive_load: Self-reported or inferred load ("low", "high", "unknown")
        recent_actions: Recent UI actions, most recent last
        time_of_day: Local time string at the moment of the event
        session_duration: Seconds since the session started
    """

    user_state: str = "unknown"
    cognitive_load: str = "unknown"
    recent_actions: list[str] = field(default_factory=list)
    time_of_day: str = field(default_factory=lambda: datetime.now().strftime("%H:%M:%S"))
    session_duration: int = 0

    def to_dict(self) -> dict[str, object]:
        return {
            "user_state": self.user_state,
            "cognitive_load": self.cognitive_load,
            "recent_actions": list(self.recent_actions),
            "time_of_day": self.time_of_day,
            "session_duration": self.session_duration,
        }


@dataclass(frozen=True)
class HazardLogEntry:
    """
    One immutable hazard log record.

    Enum fields accept their string values and are coerced on
    construction; unknown values raise ValueError.
    """

    id: str
    timestamp: datetime
    event_type: HazardEventType
    severity: Severity
    context_snapshot: str
    action_taken: str
    outcome: HazardOutcome
    hazard_ids: tuple[HazardId, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "event_type", HazardEventType(self.event_type))
        object.__setattr__(self, "severity", Severity(self.severity))
        object.__setattr__(self, "outcome", HazardOutcome(self.outcome))
        object.__setattr__(self, "hazard_ids", tuple(HazardId(h) for h in self.hazard_ids))

    def to_dict(self) -> dict[str, object]:
        """JSON-ready record for an external audit sink."""
        return {
            "id": self.id,
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "context_snapshot": self.context_snapshot,
            "action_taken": self.action_taken,
            "outcome": self.outcome.value,
            "hazard_ids": [h.value for h in self.hazard_ids],
        }


AlertHandler = Callable[[HazardLogEntry], None]


# =============================================================================
# Hazard Logger
# =============================================================================


class HazardLogger:
    """
    Thread-safe append-only store of HazardLogEntry records.

    Id assignment and append happen under one lock, so concurrent writers
    never lose entries and ids stay distinct within the instance. Entries
    from a single caller keep their invocation order.

    Entries with severity major or catastrophic also raise an
    out-of-band alert: the injected alert_handler if given, otherwise a
    WARNING/CRITICAL log record. Alerts never include the context
    snapshot.

    Args:
        alert_handler: Optional callable invoked with each high-severity entry.
    """

    ID_PREFIX = "SL"

    def __init__(self, alert_handler: AlertHandler | None = None) -> None:
        self._alert_handler = alert_handler
        self._entries: list[HazardLogEntry] = []
        self._ids: set[str] = set()
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def _next_id(self) -> str:
        # Caller holds the lock
        while True:
            entry_id = f"{self.ID_PREFIX}-{int(time.time() * 1000)}-{secrets.token_hex(3)}"
            if entry_id not in self._ids:
                return entry_id

    def log(
        self,
        *,
        event_type: HazardEventType | str,
        severity: Severity | str,
        context_snapshot: str,
        action_taken: str,
        outcome: HazardOutcome | str,
        hazard_ids: Iterable[HazardId | str] = (),
    ) -> HazardLogEntry:
        """
        Append a new entry.

        Args:
            event_type: Kind of safety event
            severity: minor, moderate, major or catastrophic
            context_snapshot: Serialized ambient context (no user text)
            action_taken: What the system did in response
            outcome: Result of the action
            hazard_ids: Hazard rules that were triggered

        Returns:
            The stored HazardLogEntry with its id and timestamp

        Raises:
            ValueError: If an enum field has an unknown value
        """
        hazard_ids = tuple(hazard_ids)

        with self._lock:
            entry = HazardLogEntry(
                id=self._next_id(),
                timestamp=datetime.now(UTC),
                event_type=event_type,
                severity=severity,
                context_snapshot=context_snapshot,
                action_taken=str(action_taken),
                outcome=outcome,
                hazard_ids=hazard_ids,
            )
            self._ids.add(entry.id)
            self._entries.append(entry)

        logger.info(
            "hazard_logged id=%s event_type=%s severity=%s",
            entry.id,
            entry.event_type.value,
            entry.severity.value,
        )

        if entry.severity.requires_alert:
            self._alert(entry)

        return entry

    def log_crisis_detection(
        self,
        indicators: Iterable[str],
        context: SafetyContext | Mapping[str, object],
        action_taken: str,
    ) -> HazardLogEntry:
        """
        Record a crisis detection in user text.

        Args:
            indicators: Crisis indicators that matched
            context: Ambient session context
            action_taken: Typically the suggested action (support/emergency)

        Returns:
            The stored entry (crisis_detected, major, HAZ-002, escalated)
        """
        context_dict = context.to_dict() if isinstance(context, SafetyContext) else dict(context)
        snapshot = json.dumps(
            {"context": context_dict, "indicators": list(indicators)},
            default=str,
        )
        return self.log(
            event_type=HazardEventType.CRISIS_DETECTED,
            severity=Severity.MAJOR,
            context_snapshot=snapshot,
            action_taken=str(action_taken),
            outcome=HazardOutcome.ESCALATED,
            hazard_ids=[HazardId.HAZ_002],
        )

    def _alert(self, entry: HazardLogEntry) -> None:
        """Emit the out-of-band alert for a high-severity entry."""
        if self._alert_handler is None:
            log_level = logging.CRITICAL if entry.severity == Severity.CATASTROPHIC else logging.WARNING
            logger.log(
                log_level,
                "clinical_safety_high_severity_event id=%s event_type=%s severity=%s hazard_ids=%s",
                entry.id,
                entry.event_type.value,
                entry.severity.value,
                ",".join(h.value for h in entry.hazard_ids),
            )
            return

        try:
            self._alert_handler(entry)
        except Exception:
            # The entry is already stored; a broken pager must not hide it
            logger.exception("hazard_alert_handler_failed id=%s", entry.id)

    # -------------------------------------------------------------------------
    # Retrieval
    # -------------------------------------------------------------------------

    def entries(self) -> tuple[HazardLogEntry, ...]:
        """All entries in insertion order."""
        with self._lock:
            return tuple(self._entries)

    def entries_by_severity(self, severity: Severity | str) -> list[HazardLogEntry]:
        severity = Severity(severity)
        return [e for e in self.entries() if e.severity == severity]

    def entries_by_event_type(self, event_type: HazardEventType | str) -> list[HazardLogEntry]:
        event_type = HazardEventType(event_type)
        return [e for e in self.entries() if e.event_type == event_type]

    def export(self) -> list[dict[str, object]]:
        """Serialize all entries for an external audit store."""
        return [e.to_dict() for e in self.entries()]

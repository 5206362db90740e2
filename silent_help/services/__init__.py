"""
Services for Silent Help.

Services:
    - CrisisDetector: Graded crisis detection on user text
    - HazardLogger: Append-only clinical hazard audit trail
    - SafetyPipeline: Composition used by chat and journal handlers
"""

from .crisis_service import (
    CrisisAssessment,
    CrisisDetector,
    CrisisResource,
    CrisisResponse,
    check_user_input_for_crisis,
)
from .hazard_log import (
    HazardEventType,
    HazardLogEntry,
    HazardLogger,
    HazardOutcome,
    SafetyContext,
)
from .safety_pipeline import SafetyPipeline

__all__ = [
    # Crisis detection
    "CrisisAssessment",
    "CrisisDetector",
    "CrisisResource",
    "CrisisResponse",
    "check_user_input_for_crisis",
    # Hazard log
    "HazardEventType",
    "HazardLogEntry",
    "HazardLogger",
    "HazardOutcome",
    "SafetyContext",
    # Pipeline
    "SafetyPipeline",
]

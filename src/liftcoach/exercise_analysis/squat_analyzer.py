from typing import List

from .base_analyzer import (
    FORM_CONFIG,
    BaseFormAnalyzer,
    BodyMeasurements,
    Exercise,
    FormIssue,
    Phase,
    PhaseTracker,
    register_analyzer,
)

_SQUAT_CONFIG = FORM_CONFIG["squat"]

STANDING_KNEE_ANGLE = _SQUAT_CONFIG["standing_knee_angle"]
BOTTOM_KNEE_ANGLE_MIN = _SQUAT_CONFIG["bottom_knee_angle_min"]  # below this = too deep
BOTTOM_KNEE_ANGLE_MAX = _SQUAT_CONFIG["bottom_knee_angle_max"]
FORWARD_LEAN_ANGLE = _SQUAT_CONFIG["forward_lean_angle"]  # torso from vertical
KNEE_CAVE_THRESHOLD = _SQUAT_CONFIG["knee_cave_threshold"]
KNEE_FORWARD_THRESHOLD = _SQUAT_CONFIG["knee_forward_threshold"]


@register_analyzer(Exercise.SQUAT)
class SquatAnalyzer(BaseFormAnalyzer):
    """Knee-driven phase detection with depth, knee tracking and torso checks."""

    exercise = Exercise.SQUAT
    standing_threshold = STANDING_KNEE_ANGLE
    bottom_threshold = BOTTOM_KNEE_ANGLE_MAX

    def primary_angle(self, body: BodyMeasurements) -> float:
        return body.knee_angle

    def detect_issues(self, phase: Phase, body: BodyMeasurements,
                      tracker: PhaseTracker) -> List[FormIssue]:
        issues = []

        # Depth
        if phase == Phase.BOTTOM:
            if body.knee_angle > BOTTOM_KNEE_ANGLE_MAX:
                issues.append(FormIssue.NOT_DEEP_ENOUGH)
            elif body.knee_angle < BOTTOM_KNEE_ANGLE_MIN:
                issues.append(FormIssue.TOO_DEEP)

        # Knees collapsing toward the midline relative to the ankles (front view)
        left_offset = body.left_knee.x - body.left_ankle.x
        right_offset = body.right_knee.x - body.right_ankle.x
        if phase != Phase.STANDING and abs(left_offset - right_offset) > KNEE_CAVE_THRESHOLD:
            issues.append(FormIssue.KNEES_CAVING)

        if phase != Phase.STANDING and body.torso_angle > FORWARD_LEAN_ANGLE:
            issues.append(FormIssue.FORWARD_LEAN)

        # Knees past the toes; depends on camera angle
        if phase in (Phase.BOTTOM, Phase.DESCENDING):
            if abs(body.knee.x - body.ankle.x) > KNEE_FORWARD_THRESHOLD:
                issues.append(FormIssue.KNEES_TOO_FAR_FORWARD)

        return issues

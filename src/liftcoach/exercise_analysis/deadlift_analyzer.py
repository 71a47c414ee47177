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

_DEADLIFT_CONFIG = FORM_CONFIG["deadlift"]

STANDING_HIP_ANGLE = _DEADLIFT_CONFIG["standing_hip_angle"]
BOTTOM_HIP_ANGLE = _DEADLIFT_CONFIG["bottom_hip_angle"] + _DEADLIFT_CONFIG["bottom_margin"]
LOCKOUT_HIP_ANGLE = STANDING_HIP_ANGLE - _DEADLIFT_CONFIG["lockout_tolerance"]
# Camera-angle dependent heuristics, kept at their historical values
ROUNDED_BACK_THRESHOLD = _DEADLIFT_CONFIG["rounded_back_threshold"]
KNEE_TRAVEL_MAX = _DEADLIFT_CONFIG["knee_travel_max"]


@register_analyzer(Exercise.DEADLIFT)
class DeadliftAnalyzer(BaseFormAnalyzer):
    """
    Hip-hinge analysis: phases follow the hip angle rather than the knee.

    The tracker's baseline knee angle is captured when a pull begins so that
    knee travel during the ascent can be bounded.
    """

    exercise = Exercise.DEADLIFT
    standing_threshold = STANDING_HIP_ANGLE
    bottom_threshold = BOTTOM_HIP_ANGLE

    def primary_angle(self, body: BodyMeasurements) -> float:
        return body.hip_angle

    def _on_frame_start(self, body: BodyMeasurements, tracker: PhaseTracker) -> None:
        if tracker.baseline_knee_angle is None:
            tracker.baseline_knee_angle = body.knee_angle

    def _on_rep_started(self, body: BodyMeasurements, tracker: PhaseTracker) -> None:
        tracker.baseline_knee_angle = body.knee_angle

    def _on_rep_completed(self, tracker: PhaseTracker) -> None:
        tracker.baseline_knee_angle = None

    def detect_issues(self, phase: Phase, body: BodyMeasurements,
                      tracker: PhaseTracker) -> List[FormIssue]:
        issues = []

        # Shoulders dropping below the hip line in a side view
        if phase != Phase.STANDING and (body.shoulder.y - body.hip.y) > ROUNDED_BACK_THRESHOLD:
            issues.append(FormIssue.ROUNDED_BACK)

        if (
            phase == Phase.ASCENDING
            and tracker.baseline_knee_angle is not None
            and abs(body.knee_angle - tracker.baseline_knee_angle) > KNEE_TRAVEL_MAX
        ):
            issues.append(FormIssue.KNEES_TOO_FAR_FORWARD)

        if phase == Phase.STANDING and body.hip_angle < LOCKOUT_HIP_ANGLE:
            issues.append(FormIssue.LOCKOUT_INCOMPLETE)

        return issues

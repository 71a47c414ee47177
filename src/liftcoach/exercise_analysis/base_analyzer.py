from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple
import logging

from .config_utils import load_form_config
from .pose_utils import (
    FrameLandmarks,
    Landmark,
    Point,
    PoseLandmark,
    angle_at,
    get_landmark,
    midpoint,
    torso_angle,
)

FORM_CONFIG = load_form_config()

# --- Logger Setup ---
logger = logging.getLogger("FormAnalyzer")
if not logger.hasHandlers():
    handler = logging.StreamHandler()
    formatter = logging.Formatter('%(asctime)s %(levelname)s %(message)s')
    handler.setFormatter(formatter)
    logger.addHandler(handler)
logger.setLevel(logging.INFO)


class Exercise(Enum):
    """Exercises the form checker understands."""
    SQUAT = "squat"
    DEADLIFT = "deadlift"

    @classmethod
    def parse(cls, value) -> "Exercise":
        """Resolve an Exercise or its string tag; anything else is rejected."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            raise ValueError(f"Unsupported exercise type: {value!r}") from None


class Phase(Enum):
    """Repetition cycle: standing -> descending -> bottom -> ascending -> standing."""
    STANDING = "standing"
    DESCENDING = "descending"
    BOTTOM = "bottom"
    ASCENDING = "ascending"


class FormIssue(Enum):
    KNEES_CAVING = "knees_caving"
    NOT_DEEP_ENOUGH = "not_deep_enough"
    TOO_DEEP = "too_deep"
    FORWARD_LEAN = "forward_lean"
    ROUNDED_BACK = "rounded_back"
    KNEES_TOO_FAR_FORWARD = "knees_too_far_forward"
    LOCKOUT_INCOMPLETE = "lockout_incomplete"

    @property
    def message(self) -> str:
        return FEEDBACK_MESSAGES[self]


# Spoken cue for each issue
FEEDBACK_MESSAGES: Dict[FormIssue, str] = {
    FormIssue.KNEES_CAVING: "Push your knees out",
    FormIssue.NOT_DEEP_ENOUGH: "Go deeper",
    FormIssue.TOO_DEEP: "Don't go so deep",
    FormIssue.FORWARD_LEAN: "Keep your chest up",
    FormIssue.ROUNDED_BACK: "Straighten your back",
    FormIssue.KNEES_TOO_FAR_FORWARD: "Sit back more",
    FormIssue.LOCKOUT_INCOMPLETE: "Stand up fully",
}


@dataclass
class PhaseTracker:
    """
    Cross-frame memory for one workout session.

    previous_primary_angle holds whichever angle drives phase detection for
    the bound exercise: the knee angle for squats, the hip angle for
    deadlifts. Binding the tracker to an exercise keeps that slot from being
    read with the wrong meaning.
    """
    previous_phase: Phase = Phase.STANDING
    previous_primary_angle: float = 180.0
    rep_in_progress: bool = False
    bottom_reached: bool = False
    baseline_knee_angle: Optional[float] = None  # deadlift only
    exercise: Optional[Exercise] = None


def create_tracker(exercise: Optional[Exercise] = None) -> PhaseTracker:
    """Fresh tracker for a new workout, optionally bound to an exercise up front."""
    return PhaseTracker(exercise=Exercise.parse(exercise) if exercise is not None else None)


@dataclass(frozen=True)
class BodyMeasurements:
    """Bilateral midpoints and the joint angles derived from them for one frame."""
    shoulder: Point
    hip: Point
    knee: Point
    ankle: Point
    left_knee: Landmark
    right_knee: Landmark
    left_ankle: Landmark
    right_ankle: Landmark
    knee_angle: float
    hip_angle: float
    torso_angle: float


def measure_body(landmarks: FrameLandmarks) -> BodyMeasurements:
    """Derive midpoints and angles; visibility is deliberately ignored here."""
    left_shoulder = get_landmark(landmarks, PoseLandmark.LEFT_SHOULDER)
    right_shoulder = get_landmark(landmarks, PoseLandmark.RIGHT_SHOULDER)
    left_hip = get_landmark(landmarks, PoseLandmark.LEFT_HIP)
    right_hip = get_landmark(landmarks, PoseLandmark.RIGHT_HIP)
    left_knee = get_landmark(landmarks, PoseLandmark.LEFT_KNEE)
    right_knee = get_landmark(landmarks, PoseLandmark.RIGHT_KNEE)
    left_ankle = get_landmark(landmarks, PoseLandmark.LEFT_ANKLE)
    right_ankle = get_landmark(landmarks, PoseLandmark.RIGHT_ANKLE)

    shoulder = midpoint(left_shoulder.point, right_shoulder.point)
    hip = midpoint(left_hip.point, right_hip.point)
    knee = midpoint(left_knee.point, right_knee.point)
    ankle = midpoint(left_ankle.point, right_ankle.point)

    return BodyMeasurements(
        shoulder=shoulder,
        hip=hip,
        knee=knee,
        ankle=ankle,
        left_knee=left_knee,
        right_knee=right_knee,
        left_ankle=left_ankle,
        right_ankle=right_ankle,
        knee_angle=angle_at(hip, knee, ankle),
        hip_angle=angle_at(shoulder, hip, knee),
        torso_angle=torso_angle(shoulder, hip),
    )


@dataclass(frozen=True)
class FormAnalysis:
    """Result of analyzing a single frame."""
    phase: Phase
    issues: Tuple[FormIssue, ...]
    rep_completed: bool
    knee_angle: float
    hip_angle: float
    torso_angle: float

    @property
    def is_good_form(self) -> bool:
        return not self.issues

    def feedback_messages(self) -> List[str]:
        return [issue.message for issue in self.issues]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "is_good_form": self.is_good_form,
            "issues": [issue.value for issue in self.issues],
            "phase": self.phase.value,
            "rep_completed": self.rep_completed,
            "knee_angle": self.knee_angle,
            "hip_angle": self.hip_angle,
            "torso_angle": self.torso_angle,
        }


# --- Analyzer Registry ---
ANALYZER_REGISTRY = {}


def register_analyzer(exercise: Exercise):
    def decorator(cls):
        ANALYZER_REGISTRY[exercise] = cls
        return cls
    return decorator


class BaseFormAnalyzer(ABC):
    """
    Base class for the per-exercise form analyzers.

    Analyzers hold no state of their own: everything that must survive from
    one frame to the next lives in the PhaseTracker the caller passes in.
    Subclasses choose the primary angle and thresholds that drive phase
    detection and implement the defect checks.
    """

    exercise: Exercise
    standing_threshold: float
    bottom_threshold: float

    REQUIRED_LANDMARKS = [
        PoseLandmark.LEFT_SHOULDER, PoseLandmark.RIGHT_SHOULDER,
        PoseLandmark.LEFT_HIP, PoseLandmark.RIGHT_HIP,
        PoseLandmark.LEFT_KNEE, PoseLandmark.RIGHT_KNEE,
        PoseLandmark.LEFT_ANKLE, PoseLandmark.RIGHT_ANKLE,
    ]

    def get_exercise_name(self) -> str:
        return self.exercise.value

    def get_required_landmarks(self) -> List[PoseLandmark]:
        return list(self.REQUIRED_LANDMARKS)

    @abstractmethod
    def primary_angle(self, body: BodyMeasurements) -> float:
        """The angle phase classification keys off for this exercise."""
        pass

    @abstractmethod
    def detect_issues(self, phase: Phase, body: BodyMeasurements,
                      tracker: PhaseTracker) -> List[FormIssue]:
        """Technique defects for this frame, in detection order."""
        pass

    def _on_frame_start(self, body: BodyMeasurements, tracker: PhaseTracker) -> None:
        pass

    def _on_rep_started(self, body: BodyMeasurements, tracker: PhaseTracker) -> None:
        pass

    def _on_rep_completed(self, tracker: PhaseTracker) -> None:
        pass

    def _bind_tracker(self, tracker: PhaseTracker) -> None:
        if tracker.exercise is None:
            tracker.exercise = self.exercise
        elif tracker.exercise is not self.exercise:
            raise ValueError(
                f"Tracker bound to {tracker.exercise.value} cannot analyze {self.exercise.value}"
            )

    def classify_phase(self, body: BodyMeasurements, tracker: PhaseTracker) -> Tuple[Phase, bool]:
        """
        Ordered decision on the primary angle; the first matching rule wins.

        Returns:
            Tuple of (phase, rep_completed). rep_completed is only True on the
            frame that returns to standing after the bottom was reached.
        """
        angle = self.primary_angle(body)
        rep_completed = False

        if angle >= self.standing_threshold:
            phase = Phase.STANDING
            if tracker.bottom_reached and tracker.rep_in_progress:
                rep_completed = True
                tracker.rep_in_progress = False
                tracker.bottom_reached = False
                self._on_rep_completed(tracker)
        elif angle <= self.bottom_threshold:
            phase = Phase.BOTTOM
            tracker.bottom_reached = True
            tracker.rep_in_progress = True
        elif angle < tracker.previous_primary_angle:
            phase = Phase.DESCENDING
            if not tracker.rep_in_progress:
                tracker.rep_in_progress = True
                self._on_rep_started(body, tracker)
        else:
            phase = Phase.ASCENDING

        return phase, rep_completed

    def analyze_frame(self, landmarks: FrameLandmarks, tracker: PhaseTracker) -> FormAnalysis:
        """
        Analyze a single frame and advance the tracker.

        Args:
            landmarks: One frame of pose landmarks (indexed or keyed by name)
            tracker: The session's PhaseTracker, mutated in place

        Returns:
            FormAnalysis for this frame
        """
        self._bind_tracker(tracker)
        body = measure_body(landmarks)
        self._on_frame_start(body, tracker)

        phase, rep_completed = self.classify_phase(body, tracker)
        issues = tuple(dict.fromkeys(self.detect_issues(phase, body, tracker)))

        tracker.previous_phase = phase
        tracker.previous_primary_angle = self.primary_angle(body)

        logger.debug(
            f"[{self.exercise.value}] phase={phase.value} knee={body.knee_angle:.1f} "
            f"hip={body.hip_angle:.1f} issues={[i.value for i in issues]}"
        )
        if rep_completed:
            logger.info(f"[{self.exercise.value}] Repetition completed")

        return FormAnalysis(
            phase=phase,
            issues=issues,
            rep_completed=rep_completed,
            knee_angle=body.knee_angle,
            hip_angle=body.hip_angle,
            torso_angle=body.torso_angle,
        )

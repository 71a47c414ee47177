"""
Exercise analysis package: per-frame form checking and repetition phases.
"""

from .base_analyzer import (
    ANALYZER_REGISTRY,
    FEEDBACK_MESSAGES,
    BaseFormAnalyzer,
    BodyMeasurements,
    Exercise,
    FormAnalysis,
    FormIssue,
    Phase,
    PhaseTracker,
    create_tracker,
    measure_body,
)
from .deadlift_analyzer import DeadliftAnalyzer
from .pose_utils import FrameLandmarks, Landmark, Point, PoseLandmark
from .squat_analyzer import SquatAnalyzer

_missing = [exercise.value for exercise in Exercise if exercise not in ANALYZER_REGISTRY]
if _missing:
    raise RuntimeError(f"No form analyzer registered for: {', '.join(_missing)}")

_ANALYZERS = {exercise: cls() for exercise, cls in ANALYZER_REGISTRY.items()}


def get_analyzer(exercise) -> BaseFormAnalyzer:
    """Analyzer for an Exercise or its string tag; unknown tags raise ValueError."""
    return _ANALYZERS[Exercise.parse(exercise)]


def analyze(exercise, landmarks: FrameLandmarks, tracker: PhaseTracker) -> FormAnalysis:
    """Route one frame to the analyzer for the given exercise."""
    return get_analyzer(exercise).analyze_frame(landmarks, tracker)


__all__ = [
    'ANALYZER_REGISTRY',
    'FEEDBACK_MESSAGES',
    'BaseFormAnalyzer',
    'BodyMeasurements',
    'DeadliftAnalyzer',
    'Exercise',
    'FormAnalysis',
    'FormIssue',
    'FrameLandmarks',
    'Landmark',
    'Phase',
    'PhaseTracker',
    'Point',
    'PoseLandmark',
    'SquatAnalyzer',
    'analyze',
    'create_tracker',
    'get_analyzer',
    'measure_body',
]

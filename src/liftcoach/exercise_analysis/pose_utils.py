"""
pose_utils.py - Landmark types and shared geometry for form analysis.
"""
from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Union

import numpy as np


class PoseLandmark(IntEnum):
    """MediaPipe Pose landmark indices."""
    NOSE = 0
    LEFT_EYE_INNER = 1
    LEFT_EYE = 2
    LEFT_EYE_OUTER = 3
    RIGHT_EYE_INNER = 4
    RIGHT_EYE = 5
    RIGHT_EYE_OUTER = 6
    LEFT_EAR = 7
    RIGHT_EAR = 8
    MOUTH_LEFT = 9
    MOUTH_RIGHT = 10
    LEFT_SHOULDER = 11
    RIGHT_SHOULDER = 12
    LEFT_ELBOW = 13
    RIGHT_ELBOW = 14
    LEFT_WRIST = 15
    RIGHT_WRIST = 16
    LEFT_PINKY = 17
    RIGHT_PINKY = 18
    LEFT_INDEX = 19
    RIGHT_INDEX = 20
    LEFT_THUMB = 21
    RIGHT_THUMB = 22
    LEFT_HIP = 23
    RIGHT_HIP = 24
    LEFT_KNEE = 25
    RIGHT_KNEE = 26
    LEFT_ANKLE = 27
    RIGHT_ANKLE = 28
    LEFT_HEEL = 29
    RIGHT_HEEL = 30
    LEFT_FOOT_INDEX = 31
    RIGHT_FOOT_INDEX = 32


LANDMARK_NAMES = [lm.name.lower() for lm in PoseLandmark]


@dataclass(frozen=True)
class Point:
    """A coordinate in normalized image space (y grows downward)."""
    x: float
    y: float
    z: Optional[float] = None


@dataclass(frozen=True)
class Landmark:
    """A point reported by the pose model together with its visibility score."""
    x: float
    y: float
    z: Optional[float] = None
    visibility: Optional[float] = None

    @property
    def point(self) -> Point:
        return Point(self.x, self.y, self.z)


# Stand-in for body parts the pose model did not report
MISSING_LANDMARK = Landmark(0.0, 0.0, None, 0.0)

RawLandmark = Union[Landmark, Mapping[str, Any], Sequence[float], None]
FrameLandmarks = Union[Sequence[RawLandmark], Mapping[str, RawLandmark]]


# --- Math & Geometry Utilities ---
def angle_at(a: Point, b: Point, c: Point) -> float:
    """
    Calculate the angle at point b formed by the rays b->a and b->c.

    Point ordering convention:
    - a: First point (e.g., hip for knee angle)
    - b: Vertex (e.g., knee for knee angle)
    - c: Last point (e.g., ankle for knee angle)

    Returns:
        Angle in degrees in [0, 180]. Coincident points are not rejected, and
        non-finite coordinates give NaN.
    """
    radians = np.arctan2(c.y - b.y, c.x - b.x) - np.arctan2(a.y - b.y, a.x - b.x)
    angle = abs(float(np.degrees(radians)))
    if angle > 180.0:
        angle = 360.0 - angle
    return angle


def midpoint(a: Point, b: Point) -> Point:
    """Component-wise average; depth only when both points carry it."""
    z = None
    if a.z is not None and b.z is not None:
        z = (a.z + b.z) / 2
    return Point((a.x + b.x) / 2, (a.y + b.y) / 2, z)


def distance(a: Point, b: Point) -> float:
    """Calculate Euclidean distance between two points."""
    return float(np.linalg.norm(np.array([b.x - a.x, b.y - a.y])))


def is_visible(landmark: Landmark, threshold: float = 0.5) -> bool:
    """A landmark without a visibility score is treated as visible."""
    visibility = 1.0 if landmark.visibility is None else landmark.visibility
    return visibility >= threshold


def torso_angle(shoulder: Point, hip: Point) -> float:
    """Angle of the hip->shoulder line away from true vertical."""
    vertical_point = Point(hip.x, hip.y - 1.0)
    return angle_at(vertical_point, hip, shoulder)


# --- Landmark access ---
def to_landmark(raw: RawLandmark) -> Landmark:
    """Normalize one landmark record from any of the accepted input shapes."""
    if raw is None:
        return MISSING_LANDMARK
    if isinstance(raw, Landmark):
        return raw
    if isinstance(raw, Mapping):
        if "x" not in raw or "y" not in raw:
            return MISSING_LANDMARK
        return Landmark(float(raw["x"]), float(raw["y"]), raw.get("z"), raw.get("visibility"))
    # MediaPipe NormalizedLandmark and similar attribute records
    if hasattr(raw, "x") and hasattr(raw, "y"):
        return Landmark(float(raw.x), float(raw.y), getattr(raw, "z", None), getattr(raw, "visibility", None))
    if len(raw) < 2:
        return MISSING_LANDMARK
    z = raw[2] if len(raw) > 2 else None
    visibility = raw[3] if len(raw) > 3 else None
    return Landmark(float(raw[0]), float(raw[1]), z, visibility)


def get_landmark(landmarks: FrameLandmarks, index: PoseLandmark) -> Landmark:
    """
    Safely fetch a landmark from a frame.

    Frames may be indexed sequences (pose model order) or dictionaries keyed
    by lowercase landmark name. Anything absent becomes MISSING_LANDMARK.
    """
    if isinstance(landmarks, Mapping):
        return to_landmark(landmarks.get(PoseLandmark(index).name.lower()))
    if index >= len(landmarks):
        return MISSING_LANDMARK
    return to_landmark(landmarks[index])


def landmarks_from_mediapipe(pose_landmarks) -> List[Landmark]:
    """Convert a MediaPipe NormalizedLandmarkList into an indexed Landmark list."""
    return [
        Landmark(lm.x, lm.y, lm.z, lm.visibility)
        for lm in pose_landmarks.landmark
    ]


def required_landmarks_visible(landmarks: FrameLandmarks,
                               indices: Iterable[PoseLandmark],
                               threshold: float = 0.5) -> bool:
    """Check that every listed landmark is present and visible above threshold."""
    return all(is_visible(get_landmark(landmarks, idx), threshold) for idx in indices)

"""Synthetic pose frames built from target joint angles."""

import math
from typing import List, Optional

import pytest

from liftcoach.exercise_analysis import Landmark, PoseLandmark

ANKLE = (0.5, 0.9)
SHIN = 0.2
THIGH = 0.2
TORSO = 0.3


def make_frame(knee_angle: float, hip_angle: Optional[float] = None, *,
               knee_cave: float = 0.0, shoulder_drop: Optional[float] = None,
               visibility: float = 1.0) -> List[Landmark]:
    """
    Build a 33-landmark frame seen from the side with both legs overlapping.

    The shin is vertical; the thigh is rotated so the hip-knee-ankle angle
    equals knee_angle. Without hip_angle the torso stands straight up from
    the hip (so the hip angle equals the knee angle and the torso is
    vertical); with it the torso is rotated to give that shoulder-hip-knee
    angle. knee_cave moves the knees toward each other by that total amount
    (their midpoint stays put). shoulder_drop places the shoulders that far
    below the hips.
    """
    ankle = ANKLE
    knee = (ankle[0], ankle[1] - SHIN)
    k = math.radians(knee_angle)
    hip = (knee[0] + THIGH * math.sin(k), knee[1] + THIGH * math.cos(k))

    if shoulder_drop is not None:
        shoulder = (hip[0], hip[1] + shoulder_drop)
    elif hip_angle is None:
        shoulder = (hip[0], hip[1] - TORSO)
    else:
        ux, uy = -math.sin(k), -math.cos(k)
        h = math.radians(hip_angle)
        dx = ux * math.cos(h) - uy * math.sin(h)
        dy = ux * math.sin(h) + uy * math.cos(h)
        shoulder = (hip[0] + TORSO * dx, hip[1] + TORSO * dy)

    frame = [Landmark(0.0, 0.0, 0.0, visibility) for _ in PoseLandmark]

    def put(index, xy):
        frame[index] = Landmark(xy[0], xy[1], 0.0, visibility)

    put(PoseLandmark.LEFT_SHOULDER, shoulder)
    put(PoseLandmark.RIGHT_SHOULDER, shoulder)
    put(PoseLandmark.LEFT_HIP, hip)
    put(PoseLandmark.RIGHT_HIP, hip)
    put(PoseLandmark.LEFT_KNEE, (knee[0] + knee_cave / 2, knee[1]))
    put(PoseLandmark.RIGHT_KNEE, (knee[0] - knee_cave / 2, knee[1]))
    put(PoseLandmark.LEFT_ANKLE, ankle)
    put(PoseLandmark.RIGHT_ANKLE, ankle)
    return frame


@pytest.fixture
def frame_factory():
    return make_frame

"""Tests for routing frames to the right analyzer and tracker binding."""

import pytest

from liftcoach.exercise_analysis import (
    ANALYZER_REGISTRY,
    DeadliftAnalyzer,
    Exercise,
    FormAnalysis,
    Landmark,
    PoseLandmark,
    SquatAnalyzer,
    analyze,
    create_tracker,
    get_analyzer,
)
from liftcoach.exercise_analysis.config_utils import load_form_config


def test_every_exercise_has_an_analyzer():
    assert set(ANALYZER_REGISTRY) == set(Exercise)
    assert isinstance(get_analyzer("squat"), SquatAnalyzer)
    assert isinstance(get_analyzer(Exercise.DEADLIFT), DeadliftAnalyzer)


def test_unknown_exercise_rejected(frame_factory):
    with pytest.raises(ValueError, match="Unsupported exercise type"):
        analyze("bench_press", frame_factory(170), create_tracker())
    with pytest.raises(ValueError):
        Exercise.parse("Squat")


def test_enum_and_tag_are_equivalent(frame_factory):
    frame = frame_factory(130)
    by_tag = analyze("squat", frame, create_tracker())
    by_enum = analyze(Exercise.SQUAT, frame, create_tracker())
    assert by_tag == by_enum


def test_tracker_binds_to_first_exercise(frame_factory):
    tracker = create_tracker()
    analyze("squat", frame_factory(170), tracker)
    assert tracker.exercise is Exercise.SQUAT
    with pytest.raises(ValueError):
        analyze("deadlift", frame_factory(170), tracker)


def test_pre_bound_tracker(frame_factory):
    tracker = create_tracker("deadlift")
    with pytest.raises(ValueError):
        analyze("squat", frame_factory(170), tracker)
    analyze("deadlift", frame_factory(170), tracker)


def test_separate_trackers_do_not_interfere(frame_factory):
    first, second = create_tracker(), create_tracker()
    analyze("squat", frame_factory(90), first)
    assert first.bottom_reached
    assert not second.bottom_reached
    assert second.previous_primary_angle == 180.0


@pytest.mark.parametrize("exercise", ["squat", "deadlift"])
def test_invisible_landmarks_still_analyzed(frame_factory, exercise):
    result = analyze(exercise, frame_factory(170, visibility=0.0), create_tracker())
    assert isinstance(result, FormAnalysis)
    assert result.knee_angle == pytest.approx(170)


@pytest.mark.parametrize("frame", [[], [Landmark(0.0, 0.0)] * len(PoseLandmark), {}])
def test_degenerate_frames_do_not_crash(frame):
    result = analyze("squat", frame, create_tracker())
    assert isinstance(result, FormAnalysis)
    assert result.is_good_form == (result.issues == ())


def test_required_landmarks():
    analyzer = get_analyzer("squat")
    assert analyzer.get_exercise_name() == "squat"
    assert PoseLandmark.LEFT_KNEE in analyzer.get_required_landmarks()
    assert PoseLandmark.NOSE not in analyzer.get_required_landmarks()


def test_form_config_values():
    config = load_form_config()
    assert config["squat"]["standing_knee_angle"] == 165
    assert config["squat"]["bottom_knee_angle_max"] == 100
    assert config["deadlift"]["bottom_hip_angle"] + config["deadlift"]["bottom_margin"] == 110

"""Tests for the command-line entry point."""

import json

from liftcoach.cli import build_parser, main, write_summary
from liftcoach.session.workout_session import WorkoutSummary


def test_parser_defaults():
    args = build_parser().parse_args([])
    assert args.mode == "camera"
    assert args.exercise == "squat"
    assert args.camera == 0
    assert args.no_voice is False
    assert args.summary_out is None


def test_video_mode_requires_path(capsys):
    assert main(["--mode", "video"]) == 1
    assert "--video" in capsys.readouterr().out


def test_video_mode_missing_file(tmp_path, capsys):
    assert main(["--mode", "video", "--video", str(tmp_path / "nope.mp4")]) == 1
    assert "not found" in capsys.readouterr().out


def test_write_summary(tmp_path):
    summary = WorkoutSummary(exercise_type="squat", total_reps=3, good_form_reps=2,
                             bad_form_reps=1, duration_seconds=42, mistakes=["forward_lean"])
    path = tmp_path / "summary.json"
    write_summary(summary, str(path))
    assert json.loads(path.read_text())["mistakes"] == ["forward_lean"]

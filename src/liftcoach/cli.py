import argparse
import json
import os
import traceback

from .trainer import WorkoutTrainer


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Lift Coach - live squat and deadlift form feedback")
    parser.add_argument('--mode', type=str, choices=['camera', 'video'], default='camera',
                        help='Run mode: camera (default) or video')
    parser.add_argument('--exercise', type=str, default='squat', choices=["squat", "deadlift"],
                        help='Exercise to analyze (default: squat)')
    parser.add_argument('--camera', type=int, default=0, help='Camera device ID')
    parser.add_argument('--video', type=str, help='Path to the video file to analyze (required if mode=video)')
    parser.add_argument('--no-voice', action='store_true', help='Disable spoken feedback')
    parser.add_argument('--summary-out', type=str, help='Write the workout summary as JSON to this path')
    return parser


def write_summary(summary, path: str) -> None:
    with open(path, "w") as f:
        json.dump(summary.to_record(), f, indent=2)


def main(argv=None) -> int:
    """Main entry point for Lift Coach."""
    args = build_parser().parse_args(argv)

    if args.mode == 'video':
        if not args.video:
            print("Error: --video argument is required when mode is 'video'.")
            return 1
        if not os.path.isfile(args.video):
            print(f"Video file not found: {args.video}")
            return 1

    try:
        print(f"Initializing Lift Coach ({args.exercise})...")
        trainer = WorkoutTrainer(exercise=args.exercise, voice=not args.no_voice)
        if args.mode == 'video':
            summary = trainer.run_video(args.video)
        else:
            print("Press 'p' to pause or resume, 'q' to finish.")
            summary = trainer.start(camera_id=args.camera)
    except Exception as e:
        print(f"Error running trainer: {e}")
        traceback.print_exc()
        return 1

    print(f"Workout complete: {summary.total_reps} reps "
          f"({summary.good_form_reps} good, {summary.bad_form_reps} bad) in {summary.format_duration()}")
    if summary.mistakes:
        print("Mistakes: " + ", ".join(summary.mistakes))
    if args.summary_out:
        write_summary(summary, args.summary_out)
        print(f"Summary written to {args.summary_out}")
    return 0

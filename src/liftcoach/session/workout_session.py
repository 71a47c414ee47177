import logging
import time
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

from pydantic import BaseModel, Field

from ..exercise_analysis import (
    Exercise,
    FormAnalysis,
    FormIssue,
    FrameLandmarks,
    Phase,
    analyze,
    create_tracker,
)

# --- Logger Setup ---
logger = logging.getLogger("WorkoutSession")
if not logger.hasHandlers():
    handler = logging.StreamHandler()
    formatter = logging.Formatter('%(asctime)s %(levelname)s %(message)s')
    handler.setFormatter(formatter)
    logger.addHandler(handler)
logger.setLevel(logging.INFO)


def format_duration(seconds: int) -> str:
    """Format whole seconds as m:ss."""
    minutes, secs = divmod(int(seconds), 60)
    return f"{minutes}:{secs:02d}"


class WorkoutSummary(BaseModel):
    """End-of-workout record, in the shape workouts are stored."""
    exercise_type: Exercise
    total_reps: int = Field(ge=0)
    good_form_reps: int = Field(ge=0)
    bad_form_reps: int = Field(ge=0)
    duration_seconds: int = Field(ge=0)
    mistakes: List[str] = Field(default_factory=list)

    def format_duration(self) -> str:
        return format_duration(self.duration_seconds)

    def to_record(self) -> dict:
        return {
            "exercise_type": self.exercise_type.value,
            "total_reps": self.total_reps,
            "good_form_reps": self.good_form_reps,
            "bad_form_reps": self.bad_form_reps,
            "duration_seconds": self.duration_seconds,
            "mistakes": list(self.mistakes),
        }


@dataclass(frozen=True)
class RepResult:
    """Emitted when a repetition boundary is crossed."""
    rep_number: int
    good_form: bool
    issues: Tuple[FormIssue, ...]


class WorkoutSession:
    """
    Aggregates per-frame analyses for one workout.

    A repetition is counted as bad when any issue was seen at any frame since
    the previous repetition boundary, not only on the completing frame. Each
    session owns its own PhaseTracker; sessions never share state.
    """

    def __init__(self, exercise, clock: Callable[[], float] = time.monotonic):
        self.exercise = Exercise.parse(exercise)
        self._clock = clock
        self.reset()

    def reset(self) -> None:
        """Discard all progress and return to the not-started state."""
        self.tracker = create_tracker(self.exercise)
        self.total_reps = 0
        self.good_form_reps = 0
        self.bad_form_reps = 0
        self._all_mistakes = {}
        self._current_rep_issues = {}
        self.current_phase = Phase.STANDING
        self.last_analysis: Optional[FormAnalysis] = None
        self.last_rep: Optional[RepResult] = None
        self.is_active = False
        self.is_paused = False
        self._start_time: Optional[float] = None
        self._end_time: Optional[float] = None

    # --- Lifecycle ---
    def start(self) -> None:
        self.reset()
        self.is_active = True
        self._start_time = self._clock()
        logger.info(f"Workout started: {self.exercise.value}")

    def pause(self) -> None:
        if not self.is_active:
            logger.warning("pause() called on a workout that is not active")
            return
        self.is_paused = True

    def resume(self) -> None:
        if not self.is_active:
            logger.warning("resume() called on a workout that is not active")
            return
        self.is_paused = False

    def end(self) -> WorkoutSummary:
        if self.is_active:
            self._end_time = self._clock()
        self.is_active = False
        self.is_paused = False
        summary = self.summary()
        logger.info(
            f"Workout ended: {summary.total_reps} reps "
            f"({summary.good_form_reps} good, {summary.bad_form_reps} bad) in {summary.format_duration()}"
        )
        return summary

    @property
    def elapsed_seconds(self) -> int:
        """Whole seconds since start(), frozen once the workout has ended."""
        if self._start_time is None:
            return 0
        end = self._end_time if self._end_time is not None else self._clock()
        return int(end - self._start_time)

    # --- Frame handling ---
    def analyze_landmarks(self, landmarks: FrameLandmarks) -> Optional[FormAnalysis]:
        """
        Analyze one frame with this session's tracker and fold it into the totals.

        Returns None for empty frames and for frames arriving while the
        workout is not running.
        """
        if not self.is_active or self.is_paused:
            return None
        if landmarks is None or len(landmarks) == 0:
            return None
        analysis = analyze(self.exercise, landmarks, self.tracker)
        self.record(analysis)
        return analysis

    def record(self, analysis: FormAnalysis) -> Optional[RepResult]:
        """Fold a per-frame analysis into the session counters."""
        self.last_analysis = analysis
        self.current_phase = analysis.phase
        for issue in analysis.issues:
            self._current_rep_issues[issue] = None

        if not analysis.rep_completed:
            return None

        rep_issues = tuple(self._current_rep_issues)
        good_form = not rep_issues
        self.total_reps += 1
        if good_form:
            self.good_form_reps += 1
        else:
            self.bad_form_reps += 1
            for issue in rep_issues:
                self._all_mistakes[issue] = None
        self._current_rep_issues = {}

        self.last_rep = RepResult(self.total_reps, good_form, rep_issues)
        logger.info(
            f"Rep {self.total_reps}: {'good' if good_form else 'bad'} form"
            + (f" ({', '.join(i.value for i in rep_issues)})" if rep_issues else "")
        )
        return self.last_rep

    # --- Manual corrections ---
    def add_manual_rep(self, good_form: bool) -> None:
        self.total_reps += 1
        if good_form:
            self.good_form_reps += 1
        else:
            self.bad_form_reps += 1

    def remove_rep(self) -> None:
        """Undo one counted rep, taking it from the good reps first."""
        if self.total_reps == 0:
            return
        self.total_reps -= 1
        if self.good_form_reps > 0:
            self.good_form_reps -= 1
        elif self.bad_form_reps > 0:
            self.bad_form_reps -= 1

    # --- Reporting ---
    @property
    def all_mistakes(self) -> List[FormIssue]:
        return list(self._all_mistakes)

    @property
    def current_mistakes(self) -> List[FormIssue]:
        return list(self._current_rep_issues)

    def summary(self) -> WorkoutSummary:
        return WorkoutSummary(
            exercise_type=self.exercise,
            total_reps=self.total_reps,
            good_form_reps=self.good_form_reps,
            bad_form_reps=self.bad_form_reps,
            duration_seconds=self.elapsed_seconds,
            mistakes=[issue.value for issue in self._all_mistakes],
        )

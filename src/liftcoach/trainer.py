import logging
from typing import Dict, List, Optional

import cv2
import numpy as np

from .exercise_analysis import FormAnalysis, Landmark, PoseLandmark, get_analyzer
from .exercise_analysis.pose_utils import is_visible, required_landmarks_visible
from .session.workout_session import WorkoutSession, WorkoutSummary

logger = logging.getLogger("WorkoutTrainer")
if not logger.hasHandlers():
    handler = logging.StreamHandler()
    formatter = logging.Formatter('%(asctime)s %(levelname)s %(message)s')
    handler.setFormatter(formatter)
    logger.addHandler(handler)
logger.setLevel(logging.INFO)

WINDOW_NAME = "Lift Coach"

SKELETON_CONNECTIONS = [
    (PoseLandmark.LEFT_SHOULDER, PoseLandmark.RIGHT_SHOULDER),
    (PoseLandmark.LEFT_SHOULDER, PoseLandmark.LEFT_ELBOW),
    (PoseLandmark.LEFT_ELBOW, PoseLandmark.LEFT_WRIST),
    (PoseLandmark.RIGHT_SHOULDER, PoseLandmark.RIGHT_ELBOW),
    (PoseLandmark.RIGHT_ELBOW, PoseLandmark.RIGHT_WRIST),
    (PoseLandmark.LEFT_SHOULDER, PoseLandmark.LEFT_HIP),
    (PoseLandmark.RIGHT_SHOULDER, PoseLandmark.RIGHT_HIP),
    (PoseLandmark.LEFT_HIP, PoseLandmark.RIGHT_HIP),
    (PoseLandmark.LEFT_HIP, PoseLandmark.LEFT_KNEE),
    (PoseLandmark.LEFT_KNEE, PoseLandmark.LEFT_ANKLE),
    (PoseLandmark.RIGHT_HIP, PoseLandmark.RIGHT_KNEE),
    (PoseLandmark.RIGHT_KNEE, PoseLandmark.RIGHT_ANKLE),
]


class WorkoutTrainer:
    """Runs a workout: camera or video frames in, counted reps and spoken cues out."""

    def __init__(self, exercise: str = "squat", voice: bool = True, pose_detector=None,
                 voice_feedback=None, min_visibility: float = 0.5):
        """
        Initialize the trainer.

        Args:
            exercise: Exercise to analyze ("squat" or "deadlift")
            voice: Whether to speak feedback
            pose_detector: Detector to use; MediaPipe when omitted
            voice_feedback: Voice feedback to use; pyttsx3-backed when omitted and voice is on
            min_visibility: Frames whose analyzed joints fall below this are skipped
        """
        self.session = WorkoutSession(exercise)
        self.analyzer = get_analyzer(self.session.exercise)

        if pose_detector is None:
            from .pose_detection.mediapipe_detector import MediaPipePoseDetector
            pose_detector = MediaPipePoseDetector()
        self.pose_detector = pose_detector

        if voice_feedback is None and voice:
            from .feedback.voice_feedback import VoiceFeedback
            voice_feedback = VoiceFeedback()
        self.voice_feedback = voice_feedback

        self.min_visibility = min_visibility
        self.cap = None
        self.is_running = False
        self._stopped = False
        self.missing_landmarks_counter = 0
        self.missing_landmarks_threshold = 30  # ~1 second at 30fps

    def start(self, camera_id: int = 0) -> WorkoutSummary:
        """
        Run the workout on a live camera until 'q' is pressed.

        Args:
            camera_id: Camera device ID
        """
        self.cap = cv2.VideoCapture(camera_id)
        if not self.cap.isOpened():
            raise RuntimeError("Failed to open camera")
        return self._run()

    def run_video(self, video_path: str, display: bool = True) -> WorkoutSummary:
        """Analyze a recorded video end to end."""
        self.cap = cv2.VideoCapture(video_path)
        if not self.cap.isOpened():
            raise RuntimeError(f"Failed to open video: {video_path}")
        return self._run(display=display)

    def _run(self, display: bool = True) -> WorkoutSummary:
        self.session.start()
        self.is_running = True
        frame_count = 0
        try:
            while self.is_running:
                ret, frame = self.cap.read()
                if not ret:
                    break
                frame_count += 1
                result = self.process_frame(frame)
                if not display:
                    continue
                self._display_results(frame, result)
                key = cv2.waitKey(1) & 0xFF
                if key == ord('q'):
                    break
                if key == ord('p'):
                    self.toggle_pause()
        except KeyboardInterrupt:
            logger.info("KeyboardInterrupt received. Exiting gracefully...")
        finally:
            logger.info(f"Processed {frame_count} frames.")
            summary = self.stop()
        return summary

    def toggle_pause(self) -> None:
        if self.session.is_paused:
            self.session.resume()
            logger.info("Workout resumed")
        else:
            self.session.pause()
            logger.info("Workout paused")

    def stop(self) -> WorkoutSummary:
        """Stop the trainer, release resources and close out the session."""
        if self._stopped:
            return self.session.summary()
        self._stopped = True
        self.is_running = False
        if self.cap is not None:
            self.cap.release()
            self.cap = None
        cv2.destroyAllWindows()
        self.pose_detector.close()
        if self.voice_feedback is not None:
            self.voice_feedback.shutdown()
        return self.session.end()

    def process_frame(self, frame: np.ndarray) -> Dict:
        """
        Process a single frame.

        Args:
            frame: Input BGR frame

        Returns:
            Dictionary containing processing results
        """
        success, landmarks = self.pose_detector.detect(frame)
        if not success:
            return {"error": "No pose detected"}

        if not required_landmarks_visible(landmarks, self.analyzer.get_required_landmarks(), self.min_visibility):
            self.missing_landmarks_counter += 1
            error = None
            if self.missing_landmarks_counter >= self.missing_landmarks_threshold:
                error = "We can't see your full body. Please adjust your position or camera."
                logger.warning(error)
            return {"landmarks": landmarks, "skipped": True, "error": error}
        self.missing_landmarks_counter = 0

        analysis = self.session.analyze_landmarks(landmarks)
        feedback = self._give_feedback(analysis)

        return {
            "landmarks": landmarks,
            "analysis": analysis,
            "feedback": feedback,
            "rep_count": self.session.total_reps,
        }

    def _give_feedback(self, analysis: Optional[FormAnalysis]) -> Optional[str]:
        if analysis is None or self.voice_feedback is None:
            return None
        if analysis.rep_completed and self.session.last_rep is not None:
            good_form = self.session.last_rep.good_form
            if self.voice_feedback.speak_rep_complete(good_form):
                return "Good rep!" if good_form else "Watch your form"
            return None
        for issue in analysis.issues:
            if self.voice_feedback.speak_issue(issue):
                return issue.message
        return None

    def _draw_skeleton(self, frame: np.ndarray, landmarks: List[Landmark], color) -> None:
        h, w = frame.shape[:2]
        for start, end in SKELETON_CONNECTIONS:
            a, b = landmarks[start], landmarks[end]
            if is_visible(a) and is_visible(b):
                cv2.line(frame, (int(a.x * w), int(a.y * h)), (int(b.x * w), int(b.y * h)), color, 2)
        for lm in landmarks:
            if is_visible(lm):
                cv2.circle(frame, (int(lm.x * w), int(lm.y * h)), 4, color, -1)

    def _display_results(self, frame: np.ndarray, result: Dict) -> None:
        """
        Display results on the frame.

        Args:
            frame: Input frame
            result: Processing results
        """
        error_msg = result.get("error")
        if error_msg:
            cv2.putText(frame, error_msg, (10, 30), cv2.FONT_HERSHEY_SIMPLEX, 0.6, (0, 0, 255), 2)
            cv2.imshow(WINDOW_NAME, frame)
            return

        analysis = result.get("analysis")
        good = analysis is None or analysis.is_good_form
        color = (0, 255, 0) if good else (0, 0, 255)
        if result.get("landmarks"):
            self._draw_skeleton(frame, result["landmarks"], color)

        session = self.session
        cv2.putText(frame, f"Exercise: {session.exercise.value}", (10, 30),
                    cv2.FONT_HERSHEY_SIMPLEX, 0.6, (0, 255, 0), 2)
        cv2.putText(frame, f"Reps: {session.total_reps}  Good: {session.good_form_reps}  Bad: {session.bad_form_reps}",
                    (10, 60), cv2.FONT_HERSHEY_SIMPLEX, 0.6, (0, 255, 0), 2)
        cv2.putText(frame, f"Phase: {session.current_phase.value}", (10, 90),
                    cv2.FONT_HERSHEY_SIMPLEX, 0.6, (0, 255, 0), 2)
        if session.is_paused:
            cv2.putText(frame, "Paused - press p to resume", (10, 120),
                        cv2.FONT_HERSHEY_SIMPLEX, 0.6, (0, 200, 255), 2)
        elif analysis is not None and analysis.issues:
            cv2.putText(frame, f"Form: {analysis.issues[0].message}", (10, 120),
                        cv2.FONT_HERSHEY_SIMPLEX, 0.6, (0, 0, 255), 2)
        elif analysis is not None:
            cv2.putText(frame, "Form: Correct", (10, 120),
                        cv2.FONT_HERSHEY_SIMPLEX, 0.6, (0, 255, 0), 2)
        cv2.imshow(WINDOW_NAME, frame)

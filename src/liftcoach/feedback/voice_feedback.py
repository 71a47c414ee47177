import logging
import queue
import threading
import time
from typing import Callable, Dict, Optional

import pyttsx3

from ..exercise_analysis import FEEDBACK_MESSAGES, FormIssue

logger = logging.getLogger("VoiceFeedback")
if not logger.hasHandlers():
    handler = logging.StreamHandler()
    formatter = logging.Formatter('%(asctime)s %(levelname)s %(message)s')
    handler.setFormatter(formatter)
    logger.addHandler(handler)
logger.setLevel(logging.INFO)

REP_COMPLETE_KEY = "rep_complete"


class VoiceFeedback:
    """Spoken coaching cues for form issues and completed reps."""

    def __init__(self, rate: int = 150, volume: float = 1.0, engine=None,
                 clock: Callable[[], float] = time.monotonic):
        """
        Initialize the voice feedback system.

        Args:
            rate: Speech rate (words per minute)
            volume: Speech volume (0.0 to 1.0)
            engine: Text-to-speech engine; a pyttsx3 engine is created when omitted
            clock: Time source used for debouncing
        """
        self.engine = engine if engine is not None else pyttsx3.init()
        self.engine.setProperty('rate', rate)
        self.engine.setProperty('volume', volume)
        self._clock = clock

        self.enabled = True
        self.feedback_cooldown = 3.0  # same cue is not repeated within this window
        self.rep_feedback_cooldown = 1.5
        self._last_spoken: Dict[str, float] = {}

        self._tts_queue = queue.Queue()
        self._tts_thread = threading.Thread(target=self._tts_worker, daemon=True)
        self._tts_thread.start()

    def _recently_spoken(self, key: str, cooldown: float, now: float) -> bool:
        last = self._last_spoken.get(key)
        return last is not None and now - last < cooldown

    def speak(self, message: str, key: Optional[str] = None) -> bool:
        """
        Queue the given message for the background TTS thread.

        Args:
            message: Message to speak
            key: Debounce key; defaults to the message text

        Returns:
            True if the message was queued
        """
        if not self.enabled:
            return False
        feedback_key = key or message
        now = self._clock()
        if self._recently_spoken(feedback_key, self.feedback_cooldown, now):
            return False
        self._last_spoken[feedback_key] = now
        self._tts_queue.put(message)
        return True

    def speak_issue(self, issue: FormIssue) -> bool:
        message = FEEDBACK_MESSAGES.get(issue)
        if not message:
            return False
        return self.speak(message, issue.value)

    def speak_rep_complete(self, good_form: bool) -> bool:
        if self._recently_spoken(REP_COMPLETE_KEY, self.rep_feedback_cooldown, self._clock()):
            return False
        message = "Good rep!" if good_form else "Watch your form"
        return self.speak(message, REP_COMPLETE_KEY)

    def stop(self) -> None:
        """Drop queued cues and interrupt the current utterance."""
        try:
            while True:
                self._tts_queue.get_nowait()
        except queue.Empty:
            pass
        self.engine.stop()

    def shutdown(self) -> None:
        self._tts_queue.put(None)

    def _tts_worker(self):
        while True:
            msg = self._tts_queue.get()
            if msg is None:
                break
            try:
                self.engine.say(msg)
                self.engine.runAndWait()
            except RuntimeError as e:
                logger.error(f"Speech engine error: {e}")

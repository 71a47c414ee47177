"""Tests for debounced spoken feedback, using a fake TTS engine."""

import pytest

from liftcoach.exercise_analysis import FormIssue
from liftcoach.feedback.voice_feedback import VoiceFeedback


class FakeEngine:
    def __init__(self):
        self.properties = {}
        self.said = []
        self.stopped = False

    def setProperty(self, name, value):
        self.properties[name] = value

    def say(self, text):
        self.said.append(text)

    def runAndWait(self):
        pass

    def stop(self):
        self.stopped = True


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def voice(clock):
    v = VoiceFeedback(engine=FakeEngine(), clock=clock)
    yield v
    v.shutdown()


def drain(voice):
    voice.shutdown()
    voice._tts_thread.join(timeout=2)
    return voice.engine.said


def test_engine_configured(voice):
    assert voice.engine.properties == {"rate": 150, "volume": 1.0}


def test_same_cue_debounced(voice, clock):
    assert voice.speak_issue(FormIssue.KNEES_CAVING)
    clock.now = 2.9
    assert not voice.speak_issue(FormIssue.KNEES_CAVING)
    assert voice.speak_issue(FormIssue.FORWARD_LEAN)
    clock.now = 3.1
    assert voice.speak_issue(FormIssue.KNEES_CAVING)
    assert drain(voice) == ["Push your knees out", "Keep your chest up", "Push your knees out"]


def test_rep_cues(voice, clock):
    assert voice.speak_rep_complete(True)
    clock.now = 1.0
    assert not voice.speak_rep_complete(False)
    clock.now = 3.5
    assert voice.speak_rep_complete(False)
    assert drain(voice) == ["Good rep!", "Watch your form"]


def test_disabled_voice_is_silent(voice):
    voice.enabled = False
    assert not voice.speak("Hello")
    assert not voice.speak_issue(FormIssue.ROUNDED_BACK)
    assert drain(voice) == []


def test_stop_interrupts_engine(voice):
    voice.stop()
    assert voice.engine.stopped

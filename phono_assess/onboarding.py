"""Guided practice intro: a voice-led tutorial shown once before practice.

The narrator asks the test-taker to tap the speaker control, then the
microphone control, and records a throwaway answer. Each step waits for
exactly one event; anything else is ignored.
"""
from __future__ import annotations

from enum import Enum


class IntroStep(Enum):
    PLAYING_WELCOME = "playing_welcome"
    WAITING_SPEAKER_TAP = "waiting_speaker_tap"
    PLAYING_WELL_DONE = "playing_well_done"
    PLAYING_MIC_HOWTO = "playing_mic_howto"
    WAITING_MIC_TAP = "waiting_mic_tap"
    RECORDING = "recording"
    PLAYING_ALL_DONE = "playing_all_done"
    READY = "ready"


class IntroEvent(Enum):
    SPEECH_ENDED = "speech_ended"
    SPEAKER_TAP = "speaker_tap"
    MIC_TAP = "mic_tap"
    RECORDING_STARTED = "recording_started"
    RECORDING_FAILED = "recording_failed"
    RECORDING_COMPLETE = "recording_complete"


MESSAGES = {
    IntroStep.PLAYING_WELCOME: (
        "지금부터 음운처리능력 검사를 안내합니다. "
        "첫째, 묻는 말을 다시 듣고 싶으면 스피커 모양을 누르면 됩니다. 지금 눌러 보세요."
    ),
    IntroStep.PLAYING_WELL_DONE: "잘 했습니다.",
    IntroStep.PLAYING_MIC_HOWTO: (
        "둘째, 묻는 말에 답을 할 때는 마이크 모양을 누릅니다. "
        "그리고 잠시 후 답을 말하고, 말이 끝나면 멈춤 버튼을 누르면 됩니다. "
        "마이크 모양을 눌러 보세요."
    ),
    IntroStep.PLAYING_ALL_DONE: (
        "모두 잘 했습니다. 준비가 다 되었으면 연습1로 이동 버튼을 눌러 주세요."
    ),
}

_TRANSITIONS = {
    (IntroStep.PLAYING_WELCOME, IntroEvent.SPEECH_ENDED): IntroStep.WAITING_SPEAKER_TAP,
    (IntroStep.WAITING_SPEAKER_TAP, IntroEvent.SPEAKER_TAP): IntroStep.PLAYING_WELL_DONE,
    (IntroStep.PLAYING_WELL_DONE, IntroEvent.SPEECH_ENDED): IntroStep.PLAYING_MIC_HOWTO,
    (IntroStep.PLAYING_MIC_HOWTO, IntroEvent.SPEECH_ENDED): IntroStep.WAITING_MIC_TAP,
    (IntroStep.WAITING_MIC_TAP, IntroEvent.RECORDING_STARTED): IntroStep.RECORDING,
    (IntroStep.RECORDING, IntroEvent.RECORDING_COMPLETE): IntroStep.PLAYING_ALL_DONE,
    (IntroStep.PLAYING_ALL_DONE, IntroEvent.SPEECH_ENDED): IntroStep.READY,
}

# Steps during which the speaker or microphone is busy.
_BUSY = {
    IntroStep.PLAYING_WELCOME,
    IntroStep.PLAYING_WELL_DONE,
    IntroStep.PLAYING_MIC_HOWTO,
    IntroStep.RECORDING,
    IntroStep.PLAYING_ALL_DONE,
}


def next_step(step: IntroStep, event: IntroEvent) -> IntroStep:
    """Return the step that follows ``step`` when ``event`` arrives.

    A speaker tap while idle outside WAITING_SPEAKER_TAP replays the whole
    tutorial. MIC_TAP never moves the step by itself: the host reacts to it
    by starting the recorder and reports RECORDING_STARTED or
    RECORDING_FAILED.
    """
    target = _TRANSITIONS.get((step, event))
    if target is not None:
        return target
    if event is IntroEvent.SPEAKER_TAP and step not in _BUSY:
        return IntroStep.PLAYING_WELCOME
    return step


def message_for(step: IntroStep) -> str | None:
    return MESSAGES.get(step)


def accepts_mic_tap(step: IntroStep) -> bool:
    return step in (IntroStep.WAITING_MIC_TAP, IntroStep.RECORDING)


def can_proceed(step: IntroStep) -> bool:
    return step is IntroStep.READY

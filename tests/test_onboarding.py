"""Tests for the guided practice intro transitions."""
from __future__ import annotations

import pytest

from phono_assess.onboarding import (
    IntroEvent,
    IntroStep,
    accepts_mic_tap,
    can_proceed,
    message_for,
    next_step,
)

E = IntroEvent
S = IntroStep

HAPPY_PATH = [
    (E.SPEECH_ENDED, S.WAITING_SPEAKER_TAP),
    (E.SPEAKER_TAP, S.PLAYING_WELL_DONE),
    (E.SPEECH_ENDED, S.PLAYING_MIC_HOWTO),
    (E.SPEECH_ENDED, S.WAITING_MIC_TAP),
    (E.RECORDING_STARTED, S.RECORDING),
    (E.RECORDING_COMPLETE, S.PLAYING_ALL_DONE),
    (E.SPEECH_ENDED, S.READY),
]


def run_events(events, start=S.PLAYING_WELCOME):
    step = start
    for event in events:
        step = next_step(step, event)
    return step


class TestHappyPath:
    def test_full_sequence(self):
        step = S.PLAYING_WELCOME
        for event, expected in HAPPY_PATH:
            step = next_step(step, event)
            assert step is expected

    def test_only_ready_can_proceed(self):
        step = S.PLAYING_WELCOME
        assert not can_proceed(step)
        for event, _ in HAPPY_PATH:
            step = next_step(step, event)
            assert can_proceed(step) == (step is S.READY)


class TestOutOfTurn:
    def test_mic_tap_before_waiting_is_noop(self):
        assert next_step(S.WAITING_SPEAKER_TAP, E.RECORDING_STARTED) is S.WAITING_SPEAKER_TAP
        assert not accepts_mic_tap(S.WAITING_SPEAKER_TAP)

    def test_mic_tap_never_moves_step(self):
        for step in S:
            assert next_step(step, E.MIC_TAP) is step

    def test_recording_failure_keeps_waiting(self):
        assert next_step(S.WAITING_MIC_TAP, E.RECORDING_FAILED) is S.WAITING_MIC_TAP

    @pytest.mark.parametrize("step", [
        S.PLAYING_WELCOME, S.PLAYING_WELL_DONE, S.PLAYING_MIC_HOWTO,
        S.RECORDING, S.PLAYING_ALL_DONE,
    ])
    def test_speaker_tap_ignored_while_busy(self, step):
        assert next_step(step, E.SPEAKER_TAP) is step

    def test_speech_end_while_waiting_is_noop(self):
        assert next_step(S.WAITING_MIC_TAP, E.SPEECH_ENDED) is S.WAITING_MIC_TAP

    def test_completion_without_recording_is_noop(self):
        assert next_step(S.WAITING_MIC_TAP, E.RECORDING_COMPLETE) is S.WAITING_MIC_TAP


class TestReplay:
    def test_speaker_tap_when_ready_restarts(self):
        ready = run_events([e for e, _ in HAPPY_PATH])
        assert ready is S.READY
        assert next_step(ready, E.SPEAKER_TAP) is S.PLAYING_WELCOME

    def test_speaker_tap_while_waiting_for_mic_restarts(self):
        assert next_step(S.WAITING_MIC_TAP, E.SPEAKER_TAP) is S.PLAYING_WELCOME


class TestMessages:
    def test_playing_steps_have_messages(self):
        for step in (S.PLAYING_WELCOME, S.PLAYING_WELL_DONE, S.PLAYING_MIC_HOWTO, S.PLAYING_ALL_DONE):
            assert message_for(step)

    def test_waiting_steps_are_silent(self):
        for step in (S.WAITING_SPEAKER_TAP, S.WAITING_MIC_TAP, S.RECORDING, S.READY):
            assert message_for(step) is None

    def test_welcome_mentions_speaker(self):
        assert "스피커" in message_for(S.PLAYING_WELCOME)

"""Terminal host for an assessment run.

Wires one SessionStateMachine to a Speaker, Recorder and Transcriber and
turns typed commands into session events. All callbacks run on the asyncio
event loop.
"""
from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Any

from phono_assess.config import Settings
from phono_assess.models import AnswerRow, Phase, Question, SpeakOptions
from phono_assess.onboarding import IntroEvent, IntroStep, accepts_mic_tap, message_for
from phono_assess.providers.base import Recorder, RecordingComplete, Speaker, Transcriber
from phono_assess.session import SessionStateMachine

log = logging.getLogger("phono_assess.runner")

CORRECT_MESSAGE = "정답입니다."
TRY_AGAIN_MESSAGE = "다시 생각해 보세요."
TO_MAIN_MESSAGE = "본 문항으로 이동하려면 아래 본 문항으로 이동 버튼을 눌러 주세요."
COMPLETE_MESSAGE = (
    "검사가 모두 끝났습니다. 검사 결과를 보려면 아래 검사 결과 보기 버튼을 눌러 주세요. "
    "수고했습니다."
)

HELP = """\
Commands:
  start          begin the guided intro
  speaker        tap the speaker (listen again)
  mic            tap the microphone (start / stop recording)
  heard TEXT     type what the test-taker said
  proceed        leave the guided intro and start practice
  play           play back the last practice answer
  play N         play the recording of scored item N (results screen)
  next           go to the next item
  go N           jump to item N (practice items first, then scored items)
  results        show the results table
  restart        discard everything and start over
  quit"""

STATUS_LABELS = {"correct": "✓ 정답", "incorrect": "✗ 오답", "no_answer": "미답변"}


def build_tts(settings: Settings):
    if settings.tts_provider == "edge-tts":
        from phono_assess.providers.tts_edge import EdgeTTSProvider
        return EdgeTTSProvider(voice=settings.tts_voice)
    elif settings.tts_provider == "elevenlabs":
        from phono_assess.providers.tts_elevenlabs import ElevenLabsProvider
        return ElevenLabsProvider(voice_id=settings.tts_voice, model_id=settings.elevenlabs_model)
    elif settings.tts_provider == "piper":
        from phono_assess.providers.tts_piper import PiperTTSProvider
        return PiperTTSProvider(model=settings.tts_voice)
    raise ValueError(f"Unknown TTS provider: {settings.tts_provider}")


def format_time(seconds: int) -> str:
    return f"{seconds // 60:02d}:{seconds % 60:02d}"


def format_results(session: SessionStateMachine) -> str:
    summary = session.summarize()
    rows: list[AnswerRow] = session.main_answers_report()
    lines = ["검사 결과", f"  {summary.main.correct} / {summary.main.total}", ""]
    for row in rows:
        audio = "  [녹음]" if row.audio_handle is not None else ""
        lines.append(f"문항 {row.question_number}: {STATUS_LABELS[row.status]}{audio}")
        lines.append(f"    {row.prompt_text}")
        lines.append(f"    정답: {row.expected_answer} | 답변: {row.user_answer or '(없음)'}")
    if any(row.audio_handle is not None for row in rows):
        lines.append("")
        lines.append("('play N': 녹음 듣기)")
    return "\n".join(lines)


def discard_recording(handle: Any) -> None:
    if isinstance(handle, Path):
        handle.unlink(missing_ok=True)


class AssessmentRunner:
    def __init__(
        self,
        session: SessionStateMachine,
        speaker: Speaker,
        recorder: Recorder,
        transcriber: Transcriber,
        rate: float = 0.8,
        out=print,
    ):
        self.session = session
        self.speaker = speaker
        self.recorder = recorder
        self.transcriber = transcriber
        self.rate = rate
        self.out = out
        self.practice_recording: Any = None
        # Bumped on restart; completions tagged with an older value are dropped.
        self._generation = 0

    # ── Speech ───────────────────────────────────────────────────────────

    def _say(self, text: str, on_end=None) -> None:
        self.speaker.speak(text, SpeakOptions(
            rate=self.rate,
            on_end=on_end,
            on_error=lambda e: log.warning("Speech failed: %s", e),
        ))

    # ── Recordings ───────────────────────────────────────────────────────

    def _for_this_session(self, callback: RecordingComplete) -> RecordingComplete:
        generation = self._generation

        def on_complete(handle: Any, seconds: int) -> None:
            if generation != self._generation:
                log.info("Discarding recording from before the restart")
                discard_recording(handle)
                return
            callback(handle, seconds)

        return on_complete

    def _keep_practice_recording(self, handle: Any) -> None:
        if self.practice_recording is not None and self.practice_recording != handle:
            discard_recording(self.practice_recording)
        self.practice_recording = handle

    def _release_recordings(self) -> None:
        discard_recording(self.practice_recording)
        self.practice_recording = None
        for released in self.session.restart():
            discard_recording(released)

    # ── Guided intro ─────────────────────────────────────────────────────

    def _intro_event(self, event: IntroEvent) -> None:
        before = self.session.intro_step
        after = self.session.handle_intro(event)
        if after is not before:
            self._enter_intro_step(after)

    def _enter_intro_step(self, step: IntroStep) -> None:
        message = message_for(step)
        if message:
            self._say(message, on_end=lambda: self._intro_event(IntroEvent.SPEECH_ENDED))
        elif step is IntroStep.WAITING_SPEAKER_TAP:
            self.out("(tap the speaker: 'speaker')")
        elif step is IntroStep.WAITING_MIC_TAP:
            self.out("(tap the microphone: 'mic')")
        elif step is IntroStep.READY:
            self.out("(ready: 'proceed' to start practice 1)")

    def _intro_mic_tap(self) -> None:
        if self.recorder.is_recording:
            self.recorder.stop_recording()
            return
        if not accepts_mic_tap(self.session.intro_step):
            return
        started = self.recorder.start_recording(
            None, self._for_this_session(self._intro_recording_complete),
        )
        if started:
            self._intro_event(IntroEvent.RECORDING_STARTED)
            self.out("● recording... ('mic' to stop)")
        else:
            self._intro_event(IntroEvent.RECORDING_FAILED)
            self._report_mic_failure()

    def _intro_recording_complete(self, handle: Any, seconds: int) -> None:
        # The guide only checks that the microphone works.
        discard_recording(handle)
        self._intro_event(IntroEvent.RECORDING_COMPLETE)

    # ── Items ────────────────────────────────────────────────────────────

    def present_question(self) -> None:
        q = self.session.current_question()
        if q is None:
            return
        if self.session.phase is Phase.PRACTICE:
            title = f"연습{self.session.phase_index + 1}"
        else:
            title = f"문항 {self.session.phase_index + 1}"
        self.out(f"\n── {title} ──")
        self._say(q.prompt_text)

    def _toggle_recording(self) -> None:
        if self.recorder.is_recording:
            self.recorder.stop_recording()
            self.transcriber.stop()
            return

        question = self.session.current_question()
        started = self.recorder.start_recording(
            lambda seconds: log.debug("Recording %s", format_time(seconds)),
            self._for_this_session(
                lambda handle, seconds: self.on_recording_complete(question, handle, seconds)
            ),
        )
        if not started:
            self._report_mic_failure()
            return
        if not self.transcriber.start():
            log.warning("Transcription unavailable; answer will be recorded without text")
        self.out("● recording... ('heard TEXT' to transcribe, 'mic' to stop)")

    def on_recording_complete(self, question: Question, handle: Any, seconds: int) -> None:
        text = self.transcriber.get_recognized_text()
        practice = question.is_practice
        # The test-taker may have navigated away while the recorder was finishing.
        still_current = self.session.current_question() == question

        if seconds <= 0 and not text:
            discard_recording(handle)
            if not still_current:
                return
            if practice:
                self.out("(no answer heard, try again)")
            else:
                self._after_scored_answer()
            return

        # Practice recordings stay with the runner for playback, not in the report.
        if practice:
            self._keep_practice_recording(handle)
        response = self.session.submit_answer(text, None if practice else handle, question=question)
        if not still_current:
            log.info("Recorded late answer for %s", question.id)
        elif practice:
            self._practice_feedback(response.is_correct, text)
        else:
            self._after_scored_answer()

    def _practice_feedback(self, is_correct: bool | None, text: str) -> None:
        if is_correct is None:
            self.out("(no answer recognized, try again)")
            return
        self.out(f"인식된 답변: {text}")
        if is_correct:
            self.out("정답입니다!")
            if self.session.is_last_practice_item:
                self._say(CORRECT_MESSAGE, on_end=lambda: self._say(TO_MAIN_MESSAGE))
            else:
                self._say(CORRECT_MESSAGE)
        else:
            self.out("다시 생각해보세요")
            self._say(TRY_AGAIN_MESSAGE)
        label = "본 문항으로 이동" if self.session.is_last_practice_item else (
            f"연습{self.session.phase_index + 2}로 이동"
        )
        self.out(f"('play': 내 답변 듣기, 'next': {label})")

    def _after_scored_answer(self) -> None:
        if self.session.is_last_scored_item:
            self._say(COMPLETE_MESSAGE, on_end=lambda: self.out("('next': 검사 결과 보기)"))
        else:
            self.out("('next': 다음 문제로)")

    def _report_mic_failure(self) -> None:
        self.out(
            "녹음을 시작할 수 없습니다. 마이크 권한과 입력 장치를 확인해 주세요."
        )

    def quiesce(self) -> None:
        """Stop capture and transcription before moving the session."""
        if self.recorder.is_recording:
            self.recorder.stop_recording()
        if self.transcriber.is_recognizing:
            self.transcriber.stop()

    # ── Playback ─────────────────────────────────────────────────────────

    def _play(self, arg: str) -> None:
        if not arg:
            if self.session.phase is not Phase.PRACTICE or self.practice_recording is None:
                self.out("(no practice answer to play)")
                return
            handle = self.practice_recording
        else:
            if self.session.phase is not Phase.RESULT:
                self.out("(results are available after the last item)")
                return
            try:
                number = int(arg)
            except ValueError:
                self.out("usage: play [N]")
                return
            rows = self.session.main_answers_report()
            if not 1 <= number <= len(rows):
                self.out(f"(no item {number})")
                return
            handle = rows[number - 1].audio_handle
            if handle is None:
                self.out(f"(no recording for item {number})")
                return

        self.quiesce()
        self.speaker.play(Path(handle), SpeakOptions(
            rate=1.0,
            on_error=lambda e: log.warning("Playback failed: %s", e),
        ))

    # ── Commands ─────────────────────────────────────────────────────────

    async def handle_command(self, line: str) -> bool:
        """Apply one typed command. Returns False when the run should end."""
        command, _, arg = line.strip().partition(" ")
        command = command.lower()
        arg = arg.strip()
        phase = self.session.phase

        if command in ("quit", "exit"):
            return False
        if command in ("", "help"):
            self.out(HELP)
        elif command == "start":
            if phase is Phase.INTRO:
                self.speaker.cancel()
                self.session.begin()
                self._enter_intro_step(self.session.intro_step)
        elif command == "speaker":
            if phase is Phase.PRACTICE_INTRO:
                self._intro_event(IntroEvent.SPEAKER_TAP)
            elif self.session.current_question() is not None:
                self._say(self.session.current_question().prompt_text)
        elif command == "mic":
            if phase is Phase.PRACTICE_INTRO:
                self._intro_mic_tap()
            elif self.session.current_question() is not None:
                self._toggle_recording()
        elif command == "heard":
            if self.transcriber.is_recognizing:
                self.transcriber.feed(arg)
            else:
                self.out("(start recording first: 'mic')")
        elif command == "proceed":
            if self.session.start_practice():
                self.speaker.cancel()
                self.present_question()
            elif phase is Phase.PRACTICE_INTRO:
                self.out("(finish the guide first)")
        elif command == "play":
            self._play(arg)
        elif command == "next":
            self.quiesce()
            self.session.advance()
            self._show_position()
        elif command == "go":
            try:
                target = int(arg) - 1
            except ValueError:
                self.out("usage: go N")
                return True
            self.quiesce()
            if self.session.jump_to(target):
                self._show_position()
        elif command == "results":
            if phase is Phase.RESULT:
                self.out(format_results(self.session))
            else:
                self.out("(results are available after the last item)")
        elif command == "restart":
            self.restart()
        else:
            self.out(f"Unknown command: {command}")
        return True

    def _show_position(self) -> None:
        if self.session.phase is Phase.RESULT:
            self.speaker.cancel()
            self.out(format_results(self.session))
        else:
            self.present_question()

    def restart(self) -> None:
        self.speaker.cancel()
        self.quiesce()
        self._generation += 1
        self._release_recordings()
        self.out("처음 화면으로 돌아갑니다. ('start')")

    async def run(self) -> None:
        loop = asyncio.get_running_loop()
        self.out(HELP)
        try:
            while True:
                try:
                    line = await loop.run_in_executor(None, input, "> ")
                except EOFError:
                    break
                if not await self.handle_command(line):
                    break
        finally:
            self.speaker.cancel()
            self.quiesce()
            self.recorder.dispose()
            # Nothing outlives the run.
            self._generation += 1
            self._release_recordings()

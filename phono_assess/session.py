"""Assessment session state machine.

Tracks where the test-taker is (phase and position within it), gates the
guided intro, keeps the append-only response log, and builds the results
views from it.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from phono_assess.models import (
    PRACTICE_PREFIX,
    SCORED_PREFIX,
    AnswerRow,
    Phase,
    Question,
    QuestionSet,
    Response,
    Summary,
    Tally,
)
from phono_assess.onboarding import IntroEvent, IntroStep, can_proceed, next_step
from phono_assess.verifier import SIMILARITY_THRESHOLD, check_answer

log = logging.getLogger("phono_assess.session")


class EmptyQuestionSetError(ValueError):
    """Raised when a session is constructed without usable questions."""


@dataclass
class SessionState:
    phase: Phase = Phase.INTRO
    phase_index: int = 0
    intro_step: IntroStep | None = None
    responses: list[Response] = field(default_factory=list)
    last_seq: int = 0


class SessionStateMachine:
    def __init__(self, questions: QuestionSet | None, threshold: float = SIMILARITY_THRESHOLD):
        if questions is None or not questions.practice_items or not questions.scored_items:
            raise EmptyQuestionSetError("Question set is missing or has no items")
        self.questions = questions
        self.threshold = threshold
        self.state = SessionState()

    # ── Position ─────────────────────────────────────────────────────────

    @property
    def phase(self) -> Phase:
        return self.state.phase

    @property
    def phase_index(self) -> int:
        return self.state.phase_index

    @property
    def intro_step(self) -> IntroStep | None:
        return self.state.intro_step

    @property
    def responses(self) -> list[Response]:
        return list(self.state.responses)

    @property
    def total_items(self) -> int:
        return self.questions.total

    def _items(self, phase: Phase) -> list[Question]:
        if phase is Phase.PRACTICE:
            return self.questions.practice_items
        if phase is Phase.MAIN:
            return self.questions.scored_items
        return []

    @property
    def global_index(self) -> int | None:
        """Position in the flattened practice-then-scored sequence."""
        if self.phase is Phase.PRACTICE:
            return self.phase_index
        if self.phase is Phase.MAIN:
            return len(self.questions.practice_items) + self.phase_index
        return None

    def position_for(self, global_index: int) -> tuple[Phase, int] | None:
        if not 0 <= global_index < self.total_items:
            return None
        n_practice = len(self.questions.practice_items)
        if global_index < n_practice:
            return Phase.PRACTICE, global_index
        return Phase.MAIN, global_index - n_practice

    def current_question(self) -> Question | None:
        items = self._items(self.phase)
        if not items:
            return None
        return items[self.phase_index]

    @property
    def feedback_visible(self) -> bool:
        """Verdicts are shown immediately in practice, only in the report for scored items."""
        return self.phase is Phase.PRACTICE

    @property
    def is_last_practice_item(self) -> bool:
        return (
            self.phase is Phase.PRACTICE
            and self.phase_index == len(self.questions.practice_items) - 1
        )

    @property
    def is_last_scored_item(self) -> bool:
        return (
            self.phase is Phase.MAIN
            and self.phase_index == len(self.questions.scored_items) - 1
        )

    # ── Transitions ──────────────────────────────────────────────────────

    def begin(self) -> None:
        """Leave the intro screen and start the guided practice intro."""
        if self.phase is not Phase.INTRO:
            return
        self.state.phase = Phase.PRACTICE_INTRO
        self.state.intro_step = IntroStep.PLAYING_WELCOME
        log.info("Session started: guided intro")

    def handle_intro(self, event: IntroEvent) -> IntroStep | None:
        if self.phase is not Phase.PRACTICE_INTRO:
            return self.intro_step
        before = self.state.intro_step
        after = next_step(before, event)
        if after is not before:
            log.debug("Intro %s --%s--> %s", before.name, event.name, after.name)
        self.state.intro_step = after
        return after

    def start_practice(self) -> bool:
        if self.phase is not Phase.PRACTICE_INTRO or not can_proceed(self.intro_step):
            return False
        self.state.phase = Phase.PRACTICE
        self.state.phase_index = 0
        log.info("Practice items started")
        return True

    def advance(self) -> None:
        phase = self.phase
        if phase not in (Phase.PRACTICE, Phase.MAIN):
            return
        self.state.phase_index += 1
        if self.state.phase_index < len(self._items(phase)):
            return
        if phase is Phase.PRACTICE:
            self.state.phase = Phase.MAIN
            self.state.phase_index = 0
            log.info("Practice complete, scored items started")
        else:
            self.state.phase = Phase.RESULT
            self.state.phase_index = 0
            log.info("Scored items complete")

    def jump_to(self, global_index: int) -> bool:
        """Move to an item by flattened index. Out-of-range indices are ignored.

        Callers must stop any in-flight recording or transcription first.
        """
        position = self.position_for(global_index)
        if position is None:
            log.debug("Ignoring jump to out-of-range index %d", global_index)
            return False
        self.state.phase, self.state.phase_index = position
        log.info("Jumped to %s item %d", self.phase.value, self.phase_index + 1)
        return True

    def restart(self) -> list[Any]:
        """Discard the whole session. Returns the audio handles that were released."""
        released = [r.audio_handle for r in self.state.responses if r.audio_handle is not None]
        self.state = SessionState()
        log.info("Session restarted (%d recordings released)", len(released))
        return released

    # ── Responses ────────────────────────────────────────────────────────

    def record_response(
        self,
        question_id: str,
        text: str | None,
        verdict: bool | None,
        audio_handle: Any = None,
    ) -> Response:
        self.state.last_seq += 1
        response = Response(
            question_id=question_id,
            transcribed_text=text or "",
            is_correct=verdict,
            audio_handle=audio_handle,
            timestamp=datetime.now(timezone.utc).isoformat(),
            seq=self.state.last_seq,
        )
        self.state.responses.append(response)
        return response

    def submit_answer(
        self,
        text: str | None,
        audio_handle: Any = None,
        question: Question | None = None,
    ) -> Response | None:
        """Verify and record an answer, by default for the current question.

        Empty transcriptions are stored without a verdict so the report can
        tell them apart from wrong answers.
        """
        if question is None:
            question = self.current_question()
        if question is None:
            return None
        if not text or not text.strip():
            verdict = None
        else:
            verdict = check_answer(text, question.expected_answer, self.threshold)
        response = self.record_response(question.id, text, verdict, audio_handle)
        log.info(
            "Answer for %s: %r (%s)",
            question.id, response.transcribed_text,
            {True: "correct", False: "incorrect", None: "no answer"}[verdict],
        )
        return response

    # ── Results ──────────────────────────────────────────────────────────

    def summarize(self) -> Summary:
        practice = Tally()
        main = Tally()
        for r in self.state.responses:
            if r.question_id.startswith(PRACTICE_PREFIX):
                bucket = practice
            elif r.question_id.startswith(SCORED_PREFIX):
                bucket = main
            else:
                continue
            bucket.total += 1
            if r.is_correct is True:
                bucket.correct += 1
        overall = Tally(practice.total + main.total, practice.correct + main.correct)
        return Summary(practice=practice, main=main, overall=overall)

    def latest_responses(self) -> dict[str, Response]:
        latest: dict[str, Response] = {}
        for r in self.state.responses:
            current = latest.get(r.question_id)
            if current is None or r.seq > current.seq:
                latest[r.question_id] = r
        return latest

    def main_answers_report(self) -> list[AnswerRow]:
        latest = self.latest_responses()
        rows = []
        for number, q in enumerate(self.questions.scored_items, 1):
            r = latest.get(q.id)
            row = AnswerRow(
                question_number=number,
                prompt_text=q.prompt_text,
                expected_answer=q.expected_answer,
            )
            if r is not None:
                row.user_answer = r.transcribed_text
                row.is_correct = r.is_correct
                row.audio_handle = r.audio_handle
            rows.append(row)
        return rows

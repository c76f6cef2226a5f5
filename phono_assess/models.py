from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any

PRACTICE_PREFIX = "ex_"
SCORED_PREFIX = "del_"


class Phase(str, Enum):
    INTRO = "intro"
    PRACTICE_INTRO = "practice_intro"
    PRACTICE = "practice"
    MAIN = "main"
    RESULT = "result"


@dataclass(frozen=True)
class Question:
    id: str
    prompt_text: str
    expected_answer: str

    @property
    def is_practice(self) -> bool:
        return self.id.startswith(PRACTICE_PREFIX)

    @property
    def is_scored(self) -> bool:
        return self.id.startswith(SCORED_PREFIX)


@dataclass
class QuestionSet:
    practice_items: list[Question]
    scored_items: list[Question]

    @property
    def total(self) -> int:
        return len(self.practice_items) + len(self.scored_items)


@dataclass
class Response:
    question_id: str
    transcribed_text: str
    is_correct: bool | None  # None = no verification attempted
    audio_handle: Any = None
    timestamp: str = ""
    seq: int = 0


@dataclass
class Tally:
    total: int = 0
    correct: int = 0


@dataclass
class Summary:
    practice: Tally
    main: Tally
    overall: Tally


@dataclass
class AnswerRow:
    question_number: int
    prompt_text: str
    expected_answer: str
    user_answer: str = ""
    is_correct: bool | None = None
    audio_handle: Any = None

    @property
    def status(self) -> str:
        if self.is_correct is True:
            return "correct"
        if self.is_correct is False:
            return "incorrect"
        return "no_answer"


@dataclass
class SpeakOptions:
    rate: float = 0.8  # playback-speed multiplier
    on_start: Callable[[], None] | None = None
    on_end: Callable[[], None] | None = None
    on_error: Callable[[Exception], None] | None = None

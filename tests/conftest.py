"""Shared test fixtures."""
from __future__ import annotations

import pytest

from phono_assess.models import Question, QuestionSet
from phono_assess.session import SessionStateMachine


def _question_set(n_practice: int = 3, n_scored: int = 20) -> QuestionSet:
    practice = [
        Question(f"ex_{i}", f"연습 문항 {i}", f"연습정답{i}") for i in range(1, n_practice + 1)
    ]
    scored = [
        Question(f"del_{i}", f"본 문항 {i}", f"정답{i}") for i in range(1, n_scored + 1)
    ]
    return QuestionSet(practice_items=practice, scored_items=scored)


@pytest.fixture
def make_question_set():
    """Factory for question sets of any size: ex_i / del_i ids, answers 연습정답i / 정답i."""
    return _question_set


@pytest.fixture
def questions():
    return _question_set()


@pytest.fixture
def session(questions):
    return SessionStateMachine(questions)


@pytest.fixture
def practice_session(session):
    """A session sitting on practice item 1."""
    session.jump_to(0)
    return session


@pytest.fixture
def question_bank_data():
    return {
        "examples": [
            {"itemId": "ex_1", "question": "고추잠자리에서 고추 소리를 빼고 나머지 소리를 말해 주세요.",
             "correctAnswer": "잠자리"},
            {"itemId": "ex_2", "question": "종이접기에서 종이 소리를 빼고 나머지 소리를 말해 주세요.",
             "correctAnswer": "접기"},
        ],
        "main": [
            {"itemId": "del_1", "question": "눈사람에서 눈 소리를 빼고 나머지 소리를 말해 주세요.",
             "correctAnswer": "사람"},
            {"itemId": "del_2", "question": "솜사탕에서 솜 소리를 빼고 나머지 소리를 말해 주세요.",
             "correctAnswer": "사탕"},
            {"itemId": "del_3", "question": "물고기에서 물 소리를 빼고 나머지 소리를 말해 주세요.",
             "correctAnswer": "고기"},
        ],
    }

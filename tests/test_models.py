"""Tests for data models."""
from __future__ import annotations

from phono_assess.models import AnswerRow, Phase, Question, QuestionSet, SpeakOptions


class TestQuestion:
    def test_practice_namespace(self):
        q = Question("ex_1", "prompt", "답")
        assert q.is_practice
        assert not q.is_scored

    def test_scored_namespace(self):
        q = Question("del_7", "prompt", "답")
        assert q.is_scored
        assert not q.is_practice


class TestQuestionSet:
    def test_total(self):
        qs = QuestionSet([Question("ex_1", "", "")], [Question("del_1", "", ""), Question("del_2", "", "")])
        assert qs.total == 3


class TestAnswerRow:
    def test_status(self):
        assert AnswerRow(1, "p", "a", "a", True).status == "correct"
        assert AnswerRow(1, "p", "a", "b", False).status == "incorrect"
        assert AnswerRow(1, "p", "a").status == "no_answer"


class TestPhase:
    def test_values(self):
        assert Phase("practice_intro") is Phase.PRACTICE_INTRO
        assert [p.value for p in Phase] == ["intro", "practice_intro", "practice", "main", "result"]


class TestSpeakOptions:
    def test_defaults(self):
        opts = SpeakOptions()
        assert opts.rate == 0.8
        assert opts.on_start is None and opts.on_end is None and opts.on_error is None

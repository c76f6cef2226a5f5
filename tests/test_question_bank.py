"""Tests for question bank parsing."""
from __future__ import annotations

import json

import pytest

from phono_assess.config import Settings
from phono_assess.parsers.question_bank import (
    QuestionBankError,
    parse_question_bank,
    parse_question_data,
)


class TestParseQuestionData:
    def test_parses_both_sections(self, question_bank_data):
        qs = parse_question_data(question_bank_data)
        assert len(qs.practice_items) == 2
        assert len(qs.scored_items) == 3
        assert qs.total == 5

    def test_field_mapping(self, question_bank_data):
        q = parse_question_data(question_bank_data).practice_items[0]
        assert q.id == "ex_1"
        assert q.expected_answer == "잠자리"
        assert q.prompt_text.startswith("고추잠자리")
        assert q.is_practice and not q.is_scored

    def test_preserves_order(self, question_bank_data):
        qs = parse_question_data(question_bank_data)
        assert [q.id for q in qs.scored_items] == ["del_1", "del_2", "del_3"]

    def test_missing_section(self, question_bank_data):
        del question_bank_data["main"]
        with pytest.raises(QuestionBankError, match="main"):
            parse_question_data(question_bank_data)

    def test_empty_section(self, question_bank_data):
        question_bank_data["examples"] = []
        with pytest.raises(QuestionBankError):
            parse_question_data(question_bank_data)

    def test_missing_field(self, question_bank_data):
        del question_bank_data["main"][0]["correctAnswer"]
        with pytest.raises(QuestionBankError, match="missing"):
            parse_question_data(question_bank_data)

    def test_wrong_namespace(self, question_bank_data):
        question_bank_data["main"][0]["itemId"] = "ex_9"
        with pytest.raises(QuestionBankError, match="del_"):
            parse_question_data(question_bank_data)

    def test_duplicate_id(self, question_bank_data):
        question_bank_data["main"][1]["itemId"] = "del_1"
        with pytest.raises(QuestionBankError, match="Duplicate"):
            parse_question_data(question_bank_data)

    def test_not_an_object(self):
        with pytest.raises(QuestionBankError):
            parse_question_data([])


class TestParseQuestionBank:
    def test_reads_file(self, tmp_path, question_bank_data):
        path = tmp_path / "questions.json"
        path.write_text(json.dumps(question_bank_data, ensure_ascii=False), encoding="utf-8")
        qs = parse_question_bank(path)
        assert qs.scored_items[2].expected_answer == "고기"

    def test_missing_file(self, tmp_path):
        with pytest.raises(QuestionBankError):
            parse_question_bank(tmp_path / "nope.json")

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text("{not json")
        with pytest.raises(QuestionBankError):
            parse_question_bank(path)

    def test_bundled_bank(self):
        qs = parse_question_bank(Settings().questions_full_path)
        assert len(qs.practice_items) == 3
        assert len(qs.scored_items) == 20
        assert qs.practice_items[0].expected_answer == "잠자리"

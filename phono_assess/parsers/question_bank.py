"""Parse a questions.json bank into a QuestionSet.

Expected shape:
  {"examples": [{"itemId": "ex_1", "question": "...", "correctAnswer": "..."}],
   "main":     [{"itemId": "del_1", ...}]}

Practice ids must start with ``ex_`` and scored ids with ``del_`` so that a
response can be attributed to its phase from the id alone.
"""
from __future__ import annotations

import json
from pathlib import Path

from phono_assess.models import PRACTICE_PREFIX, SCORED_PREFIX, Question, QuestionSet


class QuestionBankError(ValueError):
    pass


def parse_question_bank(path: Path) -> QuestionSet:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise QuestionBankError(f"Cannot read question bank {path}: {e}") from e
    return parse_question_data(data)


def parse_question_data(data: dict) -> QuestionSet:
    if not isinstance(data, dict):
        raise QuestionBankError("Question bank must be a JSON object")
    practice = _parse_items(data.get("examples"), "examples", PRACTICE_PREFIX)
    scored = _parse_items(data.get("main"), "main", SCORED_PREFIX)
    return QuestionSet(practice_items=practice, scored_items=scored)


def _parse_items(raw, key: str, prefix: str) -> list[Question]:
    if not isinstance(raw, list) or not raw:
        raise QuestionBankError(f"'{key}' must be a non-empty list")

    items: list[Question] = []
    seen: set[str] = set()
    for i, entry in enumerate(raw):
        try:
            item_id = str(entry["itemId"]).strip()
            question = str(entry["question"]).strip()
            answer = str(entry["correctAnswer"]).strip()
        except (KeyError, TypeError) as e:
            raise QuestionBankError(f"{key}[{i}] is missing a field: {e}") from e
        if not item_id.startswith(prefix):
            raise QuestionBankError(f"{key}[{i}] id {item_id!r} must start with {prefix!r}")
        if item_id in seen:
            raise QuestionBankError(f"Duplicate item id {item_id!r}")
        seen.add(item_id)
        items.append(Question(id=item_id, prompt_text=question, expected_answer=answer))
    return items

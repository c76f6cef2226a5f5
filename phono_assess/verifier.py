"""Answer verification: text normalization and edit-distance similarity.

Spoken answers come back from speech recognition with stray spaces and
punctuation, so both sides are normalized before comparison. Anything that
is not an exact match after normalization is accepted when its Levenshtein
similarity reaches the threshold.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass

log = logging.getLogger("phono_assess.verifier")

PUNCTUATION = ".,!?;:"
SIMILARITY_THRESHOLD = 0.8

_STRIP_RE = re.compile(r"\s+|[" + re.escape(PUNCTUATION) + r"]")


@dataclass(frozen=True)
class Verdict:
    is_correct: bool
    similarity: float
    heard: str
    expected: str


def normalize(text: str | None) -> str:
    if not text:
        return ""
    return _STRIP_RE.sub("", text).casefold()


def levenshtein(a: str, b: str) -> int:
    """Edit distance over code points (insert, delete, substitute cost 1).

    Rows follow b, columns follow a: table[i][j] is the distance between
    b[:i] and a[:j].
    """
    if a == b:
        return 0
    if not a:
        return len(b)
    if not b:
        return len(a)

    table = [[0] * (len(a) + 1) for _ in range(len(b) + 1)]
    for i in range(len(b) + 1):
        table[i][0] = i
    for j in range(len(a) + 1):
        table[0][j] = j

    for i in range(1, len(b) + 1):
        for j in range(1, len(a) + 1):
            if b[i - 1] == a[j - 1]:
                table[i][j] = table[i - 1][j - 1]
            else:
                table[i][j] = 1 + min(
                    table[i - 1][j - 1],  # substitute
                    table[i][j - 1],      # insert
                    table[i - 1][j],      # delete
                )
    return table[len(b)][len(a)]


def similarity(a: str, b: str) -> float:
    """Closeness in [0, 1] of two already-normalized strings."""
    if a == b:
        return 1.0
    if not a or not b:
        return 0.0
    return 1.0 - levenshtein(a, b) / max(len(a), len(b))


def score_answer(
    transcribed: str | None,
    expected: str | None,
    threshold: float = SIMILARITY_THRESHOLD,
) -> Verdict:
    heard = normalize(transcribed)
    target = normalize(expected)

    if heard == target:
        log.debug("Exact match: %r == %r", heard, target)
        return Verdict(True, 1.0, heard, target)

    score = similarity(heard, target)
    is_correct = score >= threshold
    log.debug(
        "Similarity %.3f (threshold %.2f) for %r vs %r -> %s",
        score, threshold, transcribed, expected,
        "correct" if is_correct else "incorrect",
    )
    return Verdict(is_correct, score, heard, target)


def check_answer(
    transcribed: str | None,
    expected: str | None,
    threshold: float = SIMILARITY_THRESHOLD,
) -> bool:
    """Return True when the transcribed answer matches the expected one."""
    return score_answer(transcribed, expected, threshold).is_correct

"""CLI entry point for phono-assess.

Usage:
  python -m phono_assess run [--questions PATH] [--no-audio]
  python -m phono_assess check EXPECTED HEARD
  python -m phono_assess questions [--questions PATH]
  python -m phono_assess settings
"""
from __future__ import annotations

import asyncio
import json
import logging
import sys
from pathlib import Path


def main():
    logging.basicConfig(level=logging.INFO, format="%(name)s | %(message)s")
    args = sys.argv[1:]
    command = args[0] if args else "run"

    if command == "run":
        _run(args[1:])
    elif command == "check":
        _check(args[1:])
    elif command == "questions":
        _questions(args[1:])
    elif command == "settings":
        _settings()
    else:
        print(f"Unknown command: {command}")
        print("Commands: run, check, questions, settings")
        sys.exit(1)


def _parse_flag(args: list[str], name: str, default: str) -> str:
    for i, a in enumerate(args):
        if a == name and i + 1 < len(args):
            return args[i + 1]
    return default


def _load_questions(args: list[str]):
    from phono_assess.config import load_settings
    from phono_assess.parsers.question_bank import QuestionBankError, parse_question_bank

    settings = load_settings()
    path = Path(_parse_flag(args, "--questions", str(settings.questions_full_path)))
    try:
        return settings, parse_question_bank(path)
    except QuestionBankError as e:
        print(f"Cannot load questions: {e}")
        sys.exit(1)


def _run(args: list[str]):
    from phono_assess.providers.recorder_sounddevice import SoundDeviceRecorder
    from phono_assess.providers.speaker import PrintSpeaker, SynthSpeaker
    from phono_assess.providers.transcriber_console import ConsoleTranscriber
    from phono_assess.runner import AssessmentRunner, build_tts
    from phono_assess.session import SessionStateMachine

    settings, questions = _load_questions(args)
    session = SessionStateMachine(questions, threshold=settings.similarity_threshold)

    if "--no-audio" in args:
        speaker = PrintSpeaker()
    else:
        try:
            tts = build_tts(settings)
        except (ValueError, RuntimeError) as e:
            print(f"TTS unavailable ({e}); falling back to printed prompts.")
            speaker = PrintSpeaker()
        else:
            speaker = SynthSpeaker(tts, settings.audio_cache_full_path, settings.player_command)

    recorder = SoundDeviceRecorder(
        settings.recordings_full_path,
        sample_rate=settings.sample_rate,
    )
    runner = AssessmentRunner(
        session, speaker, recorder, ConsoleTranscriber(), rate=settings.speech_rate,
    )
    print(f"Phonological processing assessment: {len(questions.practice_items)} practice, "
          f"{len(questions.scored_items)} scored items")
    try:
        asyncio.run(runner.run())
    except KeyboardInterrupt:
        pass


def _check(args: list[str]):
    from phono_assess.config import load_settings
    from phono_assess.verifier import score_answer

    if len(args) < 2:
        print("Usage: check EXPECTED HEARD")
        sys.exit(1)
    expected, heard = args[0], " ".join(args[1:])
    threshold = load_settings().similarity_threshold
    v = score_answer(heard, expected, threshold)

    print(f"Expected:   {expected!r} -> {v.expected!r}")
    print(f"Heard:      {heard!r} -> {v.heard!r}")
    print(f"Similarity: {v.similarity:.3f} (threshold {threshold})")
    print(f"Verdict:    {'correct' if v.is_correct else 'incorrect'}")


def _questions(args: list[str]):
    _, questions = _load_questions(args)
    print("Practice items")
    for i, q in enumerate(questions.practice_items, 1):
        print(f"  {i:2d}. [{q.id}] {q.prompt_text} -> {q.expected_answer}")
    print("Scored items")
    for i, q in enumerate(questions.scored_items, 1):
        print(f"  {i:2d}. [{q.id}] {q.prompt_text} -> {q.expected_answer}")


def _settings():
    from phono_assess.config import CONFIG_PATH, load_settings

    source = CONFIG_PATH if CONFIG_PATH.exists() else "defaults"
    print(f"Settings ({source})")
    print(json.dumps(load_settings().to_dict(), indent=2, ensure_ascii=False))


if __name__ == "__main__":
    main()

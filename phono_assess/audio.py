"""Prompt audio caching."""
from __future__ import annotations

import hashlib
import logging
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from phono_assess.providers.base import TTSProvider

log = logging.getLogger("phono_assess.audio")


def sentence_hash(text: str) -> str:
    return hashlib.sha256(text.encode()).hexdigest()[:16]


def cache_key(text: str, tts: TTSProvider, rate: float) -> str:
    """Same sentence in another voice or speed is a different file."""
    return sentence_hash(f"{tts.name()}|{rate:.2f}|{text}")


async def get_or_create_audio(
    text: str,
    tts: TTSProvider,
    cache_dir: Path,
    rate: float = 1.0,
) -> Path | None:
    """Get cached audio or synthesize it."""
    cache_dir.mkdir(parents=True, exist_ok=True)
    output_path = cache_dir / f"{cache_key(text, tts, rate)}.mp3"
    if output_path.exists() and output_path.stat().st_size > 0:
        return output_path

    try:
        await tts.synthesize(text, output_path, rate=rate)
        return output_path
    except Exception as e:
        log.warning("TTS error (%s): %s", tts.name(), e)
        output_path.unlink(missing_ok=True)
        return None

from __future__ import annotations

import asyncio
import shutil
from pathlib import Path

from phono_assess.providers.base import TTSProvider


class PiperTTSProvider(TTSProvider):
    def __init__(self, model: str):
        self.model = model
        if not shutil.which("piper"):
            raise RuntimeError(
                "Piper not found. Install from https://github.com/rhasspy/piper"
            )

    async def synthesize(self, text: str, output_path: Path, rate: float = 1.0) -> Path:
        wav_path = output_path.with_suffix(".wav")
        # Piper stretches phoneme length; slower speech is a larger scale
        length_scale = 1.0 / rate if rate > 0 else 1.0
        proc = await asyncio.create_subprocess_exec(
            "piper",
            "--model", self.model,
            "--length_scale", f"{length_scale:.2f}",
            "--output_file", str(wav_path),
            stdin=asyncio.subprocess.PIPE,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
        await proc.communicate(input=text.encode())
        if proc.returncode != 0:
            raise RuntimeError(f"Piper failed with code {proc.returncode}")

        # Convert WAV to MP3 via ffmpeg
        proc2 = await asyncio.create_subprocess_exec(
            "ffmpeg", "-y", "-i", str(wav_path),
            "-codec:a", "libmp3lame", "-qscale:a", "2",
            str(output_path),
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
        await proc2.communicate()
        wav_path.unlink(missing_ok=True)
        if proc2.returncode != 0:
            raise RuntimeError(f"ffmpeg failed with code {proc2.returncode}")
        return output_path

    def name(self) -> str:
        return f"piper/{self.model}"

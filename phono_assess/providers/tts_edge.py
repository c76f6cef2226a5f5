from __future__ import annotations

from pathlib import Path

from phono_assess.providers.base import TTSProvider


def rate_to_percent(rate: float) -> str:
    """edge-tts takes speed as a signed percentage: 0.8 -> '-20%'."""
    pct = round((rate - 1.0) * 100)
    return f"{pct:+d}%"


class EdgeTTSProvider(TTSProvider):
    def __init__(self, voice: str = "ko-KR-SunHiNeural"):
        self.voice = voice

    async def synthesize(self, text: str, output_path: Path, rate: float = 1.0) -> Path:
        import edge_tts

        communicate = edge_tts.Communicate(text, self.voice, rate=rate_to_percent(rate))
        await communicate.save(str(output_path))
        return output_path

    def name(self) -> str:
        return f"edge-tts/{self.voice}"

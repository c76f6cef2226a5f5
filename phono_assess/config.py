from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path

CONFIG_PATH = Path(__file__).resolve().parent.parent / "config.json"

DEFAULTS = {
    "questions_file": "",
    "tts_provider": "edge-tts",
    "tts_voice": "ko-KR-SunHiNeural",
    "elevenlabs_model": "eleven_multilingual_v2",
    "speech_rate": 0.8,
    "similarity_threshold": 0.8,
    "audio_cache_dir": "audio_cache",
    "recordings_dir": "recordings",
    "player_command": ["ffplay", "-nodisp", "-autoexit", "-loglevel", "quiet"],
    "sample_rate": 16000,
}


@dataclass
class Settings:
    questions_file: str = DEFAULTS["questions_file"]
    tts_provider: str = DEFAULTS["tts_provider"]
    tts_voice: str = DEFAULTS["tts_voice"]
    elevenlabs_model: str = DEFAULTS["elevenlabs_model"]
    speech_rate: float = DEFAULTS["speech_rate"]
    similarity_threshold: float = DEFAULTS["similarity_threshold"]
    audio_cache_dir: str = DEFAULTS["audio_cache_dir"]
    recordings_dir: str = DEFAULTS["recordings_dir"]
    player_command: list[str] = field(default_factory=lambda: list(DEFAULTS["player_command"]))
    sample_rate: int = DEFAULTS["sample_rate"]

    @property
    def project_root(self) -> Path:
        return Path(__file__).resolve().parent.parent

    @property
    def questions_full_path(self) -> Path:
        if self.questions_file:
            return self.project_root / self.questions_file
        return Path(__file__).resolve().parent / "data" / "questions.json"

    @property
    def audio_cache_full_path(self) -> Path:
        return self.project_root / self.audio_cache_dir

    @property
    def recordings_full_path(self) -> Path:
        return self.project_root / self.recordings_dir

    def to_dict(self) -> dict:
        return {
            "questions_file": self.questions_file,
            "tts_provider": self.tts_provider,
            "tts_voice": self.tts_voice,
            "elevenlabs_model": self.elevenlabs_model,
            "speech_rate": self.speech_rate,
            "similarity_threshold": self.similarity_threshold,
            "audio_cache_dir": self.audio_cache_dir,
            "recordings_dir": self.recordings_dir,
            "player_command": self.player_command,
            "sample_rate": self.sample_rate,
        }


def load_settings() -> Settings:
    if CONFIG_PATH.exists():
        raw = json.loads(CONFIG_PATH.read_text())
        # Player used to be a single executable name
        if isinstance(raw.get("player_command"), str):
            raw["player_command"] = raw["player_command"].split()
        known = {f.name for f in Settings.__dataclass_fields__.values()}
        filtered = {k: v for k, v in raw.items() if k in known}
        return Settings(**filtered)
    return Settings()


def save_settings(settings: Settings) -> None:
    CONFIG_PATH.write_text(json.dumps(settings.to_dict(), indent=4, ensure_ascii=False) + "\n")

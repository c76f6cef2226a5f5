"""Tests for configuration loading and saving."""
from __future__ import annotations

import json
from unittest.mock import patch

from phono_assess.config import DEFAULTS, Settings, load_settings, save_settings


class TestSettings:
    def test_defaults(self):
        s = Settings()
        assert s.tts_provider == "edge-tts"
        assert s.speech_rate == 0.8
        assert s.similarity_threshold == 0.8

    def test_to_dict(self):
        d = Settings().to_dict()
        assert d["tts_voice"] == DEFAULTS["tts_voice"]
        assert isinstance(d["player_command"], list)
        assert set(d) == set(DEFAULTS)

    def test_to_dict_roundtrip(self):
        s = Settings(tts_provider="piper", speech_rate=1.0)
        s2 = Settings(**s.to_dict())
        assert s2.tts_provider == "piper"
        assert s2.speech_rate == 1.0

    def test_player_command_not_shared(self):
        a, b = Settings(), Settings()
        a.player_command.append("-x")
        assert "-x" not in b.player_command

    def test_default_questions_path_is_bundled(self):
        path = Settings().questions_full_path
        assert path.name == "questions.json"
        assert path.parent.name == "data"

    def test_custom_questions_path_relative_to_root(self):
        s = Settings(questions_file="banks/custom.json")
        assert s.questions_full_path == s.project_root / "banks" / "custom.json"


class TestLoadSaveSettings:
    def test_load_from_file(self, tmp_path):
        config_path = tmp_path / "config.json"
        config_path.write_text(json.dumps({"tts_provider": "elevenlabs", "similarity_threshold": 0.7}))

        with patch("phono_assess.config.CONFIG_PATH", config_path):
            s = load_settings()
        assert s.tts_provider == "elevenlabs"
        assert s.similarity_threshold == 0.7
        assert s.speech_rate == 0.8

    def test_load_missing_file(self, tmp_path):
        with patch("phono_assess.config.CONFIG_PATH", tmp_path / "nonexistent.json"):
            s = load_settings()
        assert s.tts_provider == "edge-tts"

    def test_string_player_command_migrated(self, tmp_path):
        config_path = tmp_path / "config.json"
        config_path.write_text(json.dumps({"player_command": "mpv --no-video"}))
        with patch("phono_assess.config.CONFIG_PATH", config_path):
            s = load_settings()
        assert s.player_command == ["mpv", "--no-video"]

    def test_save_creates_file(self, tmp_path):
        config_path = tmp_path / "config.json"
        with patch("phono_assess.config.CONFIG_PATH", config_path):
            save_settings(Settings(tts_voice="ko-KR-InJoonNeural"))
        data = json.loads(config_path.read_text())
        assert data["tts_voice"] == "ko-KR-InJoonNeural"

    def test_unknown_keys_ignored(self, tmp_path):
        config_path = tmp_path / "config.json"
        config_path.write_text(json.dumps({"tts_provider": "piper", "unknown_key": "value"}))
        with patch("phono_assess.config.CONFIG_PATH", config_path):
            s = load_settings()
        assert s.tts_provider == "piper"
        assert not hasattr(s, "unknown_key")

"""Speaker backed by a TTS provider and an external audio player."""
from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from phono_assess.audio import get_or_create_audio
from phono_assess.models import SpeakOptions
from phono_assess.providers.base import Speaker, TTSProvider

log = logging.getLogger("phono_assess.speaker")


class SynthSpeaker(Speaker):
    def __init__(self, tts: TTSProvider, cache_dir: Path, player_command: list[str]):
        self.tts = tts
        self.cache_dir = cache_dir
        self.player_command = list(player_command)
        self._task: asyncio.Task | None = None
        self._proc: asyncio.subprocess.Process | None = None

    @property
    def is_speaking(self) -> bool:
        return self._task is not None and not self._task.done()

    def speak(self, text: str, options: SpeakOptions | None = None) -> None:
        self.cancel()
        options = options or SpeakOptions()
        self._task = asyncio.get_running_loop().create_task(self._speak(text, options))

    def play(self, path: Path, options: SpeakOptions | None = None) -> None:
        self.cancel()
        options = options or SpeakOptions()
        self._task = asyncio.get_running_loop().create_task(self._run_player(path, options))

    def cancel(self) -> None:
        if self._proc is not None and self._proc.returncode is None:
            try:
                self._proc.kill()
            except ProcessLookupError:
                pass
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None
        self._proc = None

    def _finish(self) -> None:
        if self._task is asyncio.current_task():
            self._task = None
        self._proc = None

    async def _speak(self, text: str, options: SpeakOptions) -> None:
        path = await get_or_create_audio(text, self.tts, self.cache_dir, options.rate)
        if path is None:
            self._finish()
            _fire_error(options, RuntimeError(f"Could not synthesize: {text[:40]}"))
            return
        await self._run_player(path, options)

    async def _run_player(self, path: Path, options: SpeakOptions) -> None:
        try:
            proc = await asyncio.create_subprocess_exec(
                *self.player_command, str(path),
                stdout=asyncio.subprocess.DEVNULL,
                stderr=asyncio.subprocess.DEVNULL,
            )
        except OSError as e:
            log.warning("Audio player %r failed to start: %s", self.player_command[0], e)
            self._finish()
            _fire_error(options, e)
            return

        self._proc = proc
        if options.on_start:
            options.on_start()
        try:
            returncode = await proc.wait()
        except asyncio.CancelledError:
            if proc.returncode is None:
                proc.kill()
            raise

        self._finish()
        if returncode != 0:
            _fire_error(options, RuntimeError(f"Audio player exited with code {returncode}"))
            return
        if options.on_end:
            options.on_end()


class PrintSpeaker(Speaker):
    """Writes the text to the console instead of playing it."""

    def __init__(self, out=print):
        self.out = out
        self._handle: asyncio.Handle | None = None

    @property
    def is_speaking(self) -> bool:
        return self._handle is not None

    def speak(self, text: str, options: SpeakOptions | None = None) -> None:
        self._show(f"  🔊 {text}", options)

    def play(self, path: Path, options: SpeakOptions | None = None) -> None:
        self._show(f"  ▶ {path}", options)

    def _show(self, line: str, options: SpeakOptions | None) -> None:
        self.cancel()
        options = options or SpeakOptions()
        if options.on_start:
            options.on_start()
        self.out(line)
        self._handle = asyncio.get_running_loop().call_soon(self._done, options)

    def _done(self, options: SpeakOptions) -> None:
        self._handle = None
        if options.on_end:
            options.on_end()

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None


def _fire_error(options: SpeakOptions, error: Exception) -> None:
    if options.on_error:
        options.on_error(error)

"""Microphone capture with sounddevice, saved as WAV with soundfile."""
from __future__ import annotations

import asyncio
import logging
import uuid
from pathlib import Path

import numpy as np
import soundfile as sf

from phono_assess.providers.base import DurationTick, Recorder, RecordingComplete

log = logging.getLogger("phono_assess.recorder")


def _default_stream_factory(**kwargs):
    import sounddevice as sd
    return sd.InputStream(**kwargs)


class SoundDeviceRecorder(Recorder):
    def __init__(
        self,
        output_dir: Path,
        sample_rate: int = 16000,
        channels: int = 1,
        stream_factory=None,
    ):
        self.output_dir = output_dir
        self.sample_rate = sample_rate
        self.channels = channels
        self.stream_factory = stream_factory or _default_stream_factory
        self.duration = 0
        self._stream = None
        self._chunks: list[np.ndarray] = []
        self._ticker: asyncio.Task | None = None
        self._on_complete: RecordingComplete | None = None

    @property
    def is_recording(self) -> bool:
        return self._stream is not None

    def start_recording(self, on_tick: DurationTick | None, on_complete: RecordingComplete) -> bool:
        if self.is_recording:
            log.warning("Already recording")
            return False

        self._chunks = []
        self.duration = 0
        try:
            stream = self.stream_factory(
                samplerate=self.sample_rate,
                channels=self.channels,
                dtype="int16",
                callback=self._on_audio,
            )
            stream.start()
        except Exception as e:
            log.error("Could not open microphone: %s", e)
            return False

        self._stream = stream
        self._on_complete = on_complete
        self._ticker = asyncio.get_running_loop().create_task(self._tick(on_tick))
        log.info("Recording started (%d Hz)", self.sample_rate)
        return True

    def _on_audio(self, indata, frames, time_info, status) -> None:
        # PortAudio thread
        if status:
            log.debug("Input status: %s", status)
        self._chunks.append(indata.copy())

    async def _tick(self, on_tick: DurationTick | None) -> None:
        while True:
            await asyncio.sleep(1.0)
            self.duration += 1
            if on_tick:
                on_tick(self.duration)

    def stop_recording(self) -> None:
        if not self.is_recording:
            log.warning("Not recording")
            return

        if self._ticker is not None:
            self._ticker.cancel()
            self._ticker = None
        stream, self._stream = self._stream, None
        try:
            stream.stop()
            stream.close()
        except Exception as e:
            log.warning("Error closing input stream: %s", e)

        on_complete, self._on_complete = self._on_complete, None
        handle, seconds = self._finalize()
        on_complete(handle, seconds)

    def _finalize(self) -> tuple[Path | None, int]:
        chunks, self._chunks = self._chunks, []
        if not chunks:
            log.warning("No audio captured")
            return None, 0
        self.output_dir.mkdir(parents=True, exist_ok=True)
        path = self.output_dir / f"{uuid.uuid4().hex[:12]}.wav"
        try:
            sf.write(str(path), np.concatenate(chunks), self.sample_rate)
        except Exception as e:
            log.error("Could not save recording: %s", e)
            return None, 0
        log.info("Recording saved: %s (%ds)", path.name, self.duration)
        return path, self.duration

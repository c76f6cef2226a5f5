from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable
from pathlib import Path
from typing import Any

from phono_assess.models import SpeakOptions

DurationTick = Callable[[int], None]
RecordingComplete = Callable[[Any, int], None]
ResultCallback = Callable[[str, bool], None]


class TTSProvider(ABC):
    @abstractmethod
    async def synthesize(self, text: str, output_path: Path, rate: float = 1.0) -> Path:
        ...

    @abstractmethod
    def name(self) -> str:
        ...


class Speaker(ABC):
    """Plays text aloud. One utterance at a time."""

    @abstractmethod
    def speak(self, text: str, options: SpeakOptions | None = None) -> None:
        """Start speaking ``text``, cancelling any utterance in progress.

        ``options.on_end`` fires exactly once on natural completion.
        """

    @abstractmethod
    def play(self, path: Path, options: SpeakOptions | None = None) -> None:
        """Play a recorded audio file, with the same callbacks as ``speak``."""

    @abstractmethod
    def cancel(self) -> None:
        """Stop immediately; the pending ``on_end`` is not fired."""

    @property
    @abstractmethod
    def is_speaking(self) -> bool:
        ...


class Recorder(ABC):
    @abstractmethod
    def start_recording(self, on_tick: DurationTick | None, on_complete: RecordingComplete) -> bool:
        """Begin capture. Returns False if the device could not be opened.

        ``on_tick(seconds)`` fires about once a second while recording;
        ``on_complete(handle, seconds)`` fires once, before ``stop_recording``
        returns, with ``(None, 0)`` when nothing was captured.
        """

    @abstractmethod
    def stop_recording(self) -> None:
        ...

    @property
    @abstractmethod
    def is_recording(self) -> bool:
        ...

    def dispose(self) -> None:
        if self.is_recording:
            self.stop_recording()


class Transcriber(ABC):
    on_result: ResultCallback | None = None

    @abstractmethod
    def start(self) -> bool:
        ...

    @abstractmethod
    def stop(self) -> None:
        ...

    @abstractmethod
    def feed(self, text: str, is_final: bool = True) -> None:
        """Deliver a recognition result. Ignored unless recognizing."""

    @abstractmethod
    def get_recognized_text(self) -> str:
        """Last final text of the current session, or "" if none arrived."""

    @property
    @abstractmethod
    def is_recognizing(self) -> bool:
        ...

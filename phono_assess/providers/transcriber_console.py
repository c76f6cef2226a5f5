"""Transcriber fed by hand: the proctor types what the test-taker said."""
from __future__ import annotations

import logging

from phono_assess.providers.base import Transcriber

log = logging.getLogger("phono_assess.transcriber")


class ConsoleTranscriber(Transcriber):
    def __init__(self):
        self.on_result = None
        self._recognizing = False
        self._text = ""

    @property
    def is_recognizing(self) -> bool:
        return self._recognizing

    def start(self) -> bool:
        if self._recognizing:
            log.warning("Already recognizing")
            return False
        self._text = ""
        self._recognizing = True
        return True

    def stop(self) -> None:
        self._recognizing = False

    def feed(self, text: str, is_final: bool = True) -> None:
        if not self._recognizing:
            log.debug("Ignoring text while not recognizing: %r", text)
            return
        text = text.strip()
        if is_final:
            self._text = text
        if self.on_result:
            self.on_result(text, is_final)

    def get_recognized_text(self) -> str:
        return self._text

"""Text-driven recognizer: each input line is a recognition result."""

import sys
import logging
from threading import Thread, Event
from typing import Any, Optional, TextIO

from ..models.events import RecognitionEvent, RecognitionResult
from .base import AbstractSpeechRecognizer, AUDIO_CAPTURE

logger = logging.getLogger(__name__)


class ConsoleRecognizer(AbstractSpeechRecognizer):
    """Reads utterances from a text stream.

    Lines starting with `~` are interim results for the utterance in
    progress; any other non-blank line is a final result. End of input is
    reported as an `audio-capture` error followed by `on_end`.
    """

    name = "console"
    INTERIM_PREFIX = "~"

    def __init__(self, locale: str, stream: Optional[TextIO] = None):
        super().__init__(locale)
        self.stream = stream if stream is not None else sys.stdin
        self._reader: Optional[Thread] = None
        self._stop_event = Event()

    @classmethod
    def create(cls, locale: str, config: Any = None) -> "ConsoleRecognizer":
        return cls(locale)

    def start(self) -> None:
        self._bind_loop()
        self._stop_event.clear()
        self._reader = Thread(target=self._read_lines, daemon=True)
        self._reader.name = "ConsoleRecognizerThread"
        self._dispatch("on_start")
        self._reader.start()

    def stop(self) -> None:
        # A blocked readline cannot be interrupted; the reader exits on its next line
        self._stop_event.set()

    @classmethod
    def parse_line(cls, line: str) -> Optional[RecognitionEvent]:
        text = line.rstrip("\r\n")
        is_final = True
        if text.startswith(cls.INTERIM_PREFIX):
            text = text[len(cls.INTERIM_PREFIX):]
            is_final = False
        if not text.strip():
            return None
        return RecognitionEvent(results=[RecognitionResult(is_final=is_final, alternatives=[text])])

    def _read_lines(self) -> None:
        for line in iter(self.stream.readline, ""):
            if self._stop_event.is_set():
                return
            event = self.parse_line(line)
            if event is not None:
                self._dispatch("on_result", event)

        if not self._stop_event.is_set():
            logger.info("Console input closed")
            self._dispatch("on_error", AUDIO_CAPTURE, "End of input")
            self._dispatch("on_end")

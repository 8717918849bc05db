"""Speech recognition capability interface."""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, Optional

from ..models.events import RecognitionEvent

logger = logging.getLogger(__name__)

# Error codes reported through on_error
NO_SPEECH = "no-speech"
ABORTED = "aborted"
NOT_ALLOWED = "not-allowed"
SERVICE_NOT_ALLOWED = "service-not-allowed"
AUDIO_CAPTURE = "audio-capture"
NETWORK = "network"

RECOVERABLE_ERRORS = frozenset({NO_SPEECH, ABORTED})
PERMISSION_ERRORS = frozenset({NOT_ALLOWED, SERVICE_NOT_ALLOWED})


class AbstractSpeechRecognizer(ABC):
    """Continuous recognizer with interim results for one locale.

    The owner assigns the `on_*` callbacks before calling `start()`.
    Implementations that work on other threads must deliver callbacks via
    `_dispatch`, which hops onto the event loop that called `start()`.
    """

    name = "abstract"

    def __init__(self, locale: str):
        """Initialize recognizer with the speech locale (e.g. 'en-US')."""
        self.locale = locale
        self.on_start: Optional[Callable[[], None]] = None
        self.on_result: Optional[Callable[[RecognitionEvent], None]] = None
        self.on_error: Optional[Callable[[str, Optional[str]], None]] = None
        self.on_end: Optional[Callable[[], None]] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None

    @classmethod
    def is_available(cls, config: Any = None) -> bool:
        """Whether this variant can run with the given configuration."""
        return True

    @classmethod
    def create(cls, locale: str, config: Any = None) -> "AbstractSpeechRecognizer":
        return cls(locale)

    @abstractmethod
    def start(self) -> None:
        """Begin (or resume) recognition. Called on the event loop thread."""
        pass

    @abstractmethod
    def stop(self) -> None:
        """Stop recognition and release the audio source."""
        pass

    def detach(self) -> None:
        """Drop all callbacks so late events from a stopped recognizer go nowhere."""
        self.on_start = None
        self.on_result = None
        self.on_error = None
        self.on_end = None

    def _bind_loop(self) -> None:
        self._loop = asyncio.get_running_loop()

    def _dispatch(self, callback_name: str, *args: Any) -> None:
        """Schedule a callback on the owner's event loop from any thread."""
        if self._loop is None or self._loop.is_closed():
            logger.debug(f"Dropping {callback_name}: event loop is not available")
            return
        try:
            self._loop.call_soon_threadsafe(self._emit, callback_name, *args)
        except RuntimeError as e:
            logger.debug(f"Dropping {callback_name}: {e}")

    def _emit(self, callback_name: str, *args: Any) -> None:
        callback = getattr(self, callback_name)
        if callback is not None:
            callback(*args)

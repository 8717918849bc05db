"""Selects the speech recognizer variant a session will use."""

import importlib
import logging
from typing import Any, Optional, Sequence, Type

from ..errors import CapabilityUnavailable, ConfigurationError
from .base import AbstractSpeechRecognizer

logger = logging.getLogger(__name__)

RECOGNIZER_VARIANTS = {
    "google": "hanasu.speech.google_streaming.GoogleStreamingRecognizer",
    "console": "hanasu.speech.console.ConsoleRecognizer",
}

DEFAULT_PREFERENCE = ("google", "console")


class RecognizerResolver:
    """Builds the first available recognizer from an ordered preference list.

    Variants are imported lazily so optional speech dependencies are only
    needed when that variant is actually chosen.
    """

    def __init__(self, preference: Sequence[str] = DEFAULT_PREFERENCE, config: Any = None):
        unknown = [name for name in preference if name not in RECOGNIZER_VARIANTS]
        if unknown:
            raise ConfigurationError(f"Unknown speech recognizer(s): {', '.join(unknown)}")
        if not preference:
            raise ConfigurationError("At least one speech recognizer must be configured")
        self.preference = list(preference)
        self.config = config

    @staticmethod
    def load_variant(name: str) -> Optional[Type[AbstractSpeechRecognizer]]:
        module_path, class_name = RECOGNIZER_VARIANTS[name].rsplit(".", 1)
        try:
            module = importlib.import_module(module_path)
        except ImportError as e:
            logger.info(f"Speech recognizer '{name}' unavailable: {e}")
            return None
        return getattr(module, class_name)

    def __call__(self, locale: str) -> AbstractSpeechRecognizer:
        """Return a recognizer for `locale`.

        Raises:
            CapabilityUnavailable: If no preferred variant can run
        """
        for name in self.preference:
            recognizer_class = self.load_variant(name)
            if recognizer_class is None or not recognizer_class.is_available(self.config):
                logger.debug(f"Skipping speech recognizer '{name}'")
                continue
            logger.info(f"Using speech recognizer '{name}' for {locale}")
            return recognizer_class.create(locale, self.config)

        raise CapabilityUnavailable(
            f"Speech recognition is not available (tried: {', '.join(self.preference)})"
        )

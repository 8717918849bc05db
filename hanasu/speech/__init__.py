"""Speech recognition capability and its variants."""

from .base import (
    AbstractSpeechRecognizer,
    NO_SPEECH,
    ABORTED,
    NOT_ALLOWED,
    SERVICE_NOT_ALLOWED,
    AUDIO_CAPTURE,
    NETWORK,
)
from .console import ConsoleRecognizer
from .registry import RecognizerResolver, RECOGNIZER_VARIANTS

__all__ = [
    'AbstractSpeechRecognizer',
    'ConsoleRecognizer',
    'RecognizerResolver',
    'RECOGNIZER_VARIANTS',
    'NO_SPEECH',
    'ABORTED',
    'NOT_ALLOWED',
    'SERVICE_NOT_ALLOWED',
    'AUDIO_CAPTURE',
    'NETWORK',
]

"""Data models for the Hanasu application."""

from .transcript import LogEntry, TRANSLATION_ERROR_MARKER
from .glossary import GlossaryEntry, WILDCARD
from .session import SessionStatus, LanguagePair, SessionState
from .events import (
    Delta,
    Done,
    Failed,
    TranslationEvent,
    RecognitionResult,
    RecognitionEvent,
    AudioEvent,
)

__all__ = [
    "LogEntry",
    "TRANSLATION_ERROR_MARKER",
    "GlossaryEntry",
    "WILDCARD",
    "SessionStatus",
    "LanguagePair",
    "SessionState",
    # Streaming and recognition events
    "Delta",
    "Done",
    "Failed",
    "TranslationEvent",
    "RecognitionResult",
    "RecognitionEvent",
    "AudioEvent",
]

"""Live translation session: state machine, transcript log and event fan-out."""

from .controller import SessionController, TranslationRequest
from .publisher import SessionPublisher, STATUS_TOPIC, ENTRY_TOPIC, CLEARED_TOPIC
from .transcript_log import TranscriptLog

__all__ = [
    'SessionController',
    'TranslationRequest',
    'SessionPublisher',
    'STATUS_TOPIC',
    'ENTRY_TOPIC',
    'CLEARED_TOPIC',
    'TranscriptLog',
]

"""Transcript log data models."""

from dataclasses import dataclass, field
from datetime import datetime

TRANSLATION_ERROR_MARKER = "[Translation Error]"


@dataclass
class LogEntry:
    """One utterance in the transcript log.

    `original` and `translated` are mutated in place by the session
    controller while the entry is pending; `is_final` freezes it.
    """
    id: str
    original: str
    translated: str = ""
    is_final: bool = False
    created_at: datetime = field(default_factory=datetime.now)

"""Session state models."""

import asyncio
from dataclasses import dataclass
from enum import Enum
from typing import Optional


class SessionStatus(Enum):
    """Status of the capture session."""
    IDLE = "idle"
    CONNECTING = "connecting"
    LISTENING = "listening"
    TRANSLATING = "translating"
    ERROR = "error"


@dataclass(frozen=True)
class LanguagePair:
    """Source and target language codes for a session."""
    source: str
    target: str


@dataclass
class SessionState:
    """Mutable state of the single active session, owned by the controller."""
    language_pair: LanguagePair
    status: SessionStatus = SessionStatus.IDLE
    current_entry_id: Optional[str] = None
    pending_debounce_handle: Optional[asyncio.TimerHandle] = None
    active_translation_token: int = 0
    error_reason: Optional[str] = None

    @property
    def is_active(self) -> bool:
        """True while capture is connecting or running."""
        return self.status in (
            SessionStatus.CONNECTING,
            SessionStatus.LISTENING,
            SessionStatus.TRANSLATING,
        )

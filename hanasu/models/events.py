"""Event models exchanged between the speech, LLM and session layers."""

from dataclasses import dataclass, field
from typing import List, Union


@dataclass(frozen=True)
class Delta:
    """An incremental text fragment from a streaming response."""
    text: str


@dataclass(frozen=True)
class Done:
    """The streaming response finished normally."""


@dataclass(frozen=True)
class Failed:
    """The request failed; `reason` is human readable."""
    reason: str


TranslationEvent = Union[Delta, Done, Failed]


@dataclass
class RecognitionResult:
    """One result of a recognition window with its alternative transcripts."""
    is_final: bool
    alternatives: List[str] = field(default_factory=list)

    @property
    def transcript(self) -> str:
        return self.alternatives[0] if self.alternatives else ""


@dataclass
class RecognitionEvent:
    """A speech recognizer update.

    Results before `result_index` are unchanged since the previous event
    and are not reprocessed.
    """
    results: List[RecognitionResult]
    result_index: int = 0

    def split_transcripts(self):
        """Return (interim_text, final_text) for the changed results."""
        interim = ""
        final = ""
        for result in self.results[self.result_index:]:
            if result.is_final:
                final += result.transcript
            else:
                interim += result.transcript
        return interim, final


@dataclass
class AudioEvent:
    """Audio chunk captured from the microphone."""
    chunk_id: str
    audio_data: bytes
    timestamp: float  # Unix timestamp when chunk was captured
    sequence_number: int
    sample_rate: int = 16000
    channels: int = 1
    final: bool = False  # True if this is the last chunk before capture stopped

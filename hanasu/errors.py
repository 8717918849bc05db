"""Exception hierarchy for Hanasu."""

from typing import Optional


class HanasuError(Exception):
    """Base class for all Hanasu errors."""


class ConfigurationError(HanasuError):
    """Missing or invalid configuration (e.g. no API key). Never retried."""


class CapabilityUnavailable(HanasuError):
    """No speech recognition capability can be used on this machine."""


class PermissionDenied(HanasuError):
    """Microphone or speech service access was refused."""


class UpstreamError(HanasuError):
    """A translation/question request failed at the network or provider level."""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status


class MalformedStreamChunk(HanasuError):
    """A single streamed record could not be decoded."""


class InvalidSessionOperation(HanasuError):
    """An operation was attempted in a session state that does not allow it."""


class KeywordExtractionError(HanasuError):
    """Keywords could not be extracted from a reference page."""

"""Terminal presentation for sessions."""

from .transcript_view import TranscriptView, render_log

__all__ = ['TranscriptView', 'render_log']

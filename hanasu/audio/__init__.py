"""Microphone capture."""

from .capture import AudioCapture

__all__ = ['AudioCapture']

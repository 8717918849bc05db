"""Hanasu - live conference translation with streaming LLM output."""

__version__ = "0.1.0"

"""Keyword glossary: lookup, substitution, storage and URL extraction."""

from .glossary import KeywordGlossary, lookup_entries, apply_entries
from .storage import KeywordStore, JsonKeywordStore, InMemoryKeywordStore
from .keyword_extractor import KeywordExtractor

__all__ = [
    "KeywordGlossary",
    "lookup_entries",
    "apply_entries",
    "KeywordStore",
    "JsonKeywordStore",
    "InMemoryKeywordStore",
    "KeywordExtractor",
]

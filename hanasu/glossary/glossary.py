"""Keyword glossary lookup and text substitution."""

import re
import time
import uuid
import logging
from typing import Iterable, List, Optional

from ..models.glossary import GlossaryEntry, WILDCARD
from .storage import KeywordStore

logger = logging.getLogger(__name__)


def lookup_entries(entries: Iterable[GlossaryEntry], source_lang: str, target_lang: str) -> List[GlossaryEntry]:
    """Return entries for the exact language pair plus universal entries."""
    return [entry for entry in entries if entry.matches_pair(source_lang, target_lang)]


def apply_entries(text: str, entries: Iterable[GlossaryEntry]) -> str:
    """Replace whole-word, case-insensitive occurrences of each term.

    Longer terms are applied first so a short term cannot pre-empt a longer
    one it overlaps. Replacements are applied in sequence, so a shorter
    term may still match inside an earlier replacement.
    """
    ordered = sorted(entries, key=lambda entry: len(entry.term), reverse=True)
    result = text
    for entry in ordered:
        if not entry.term:
            continue
        pattern = re.compile(r"(?<!\w)" + re.escape(entry.term) + r"(?!\w)", re.IGNORECASE)
        replacement = entry.replacement
        result = pattern.sub(lambda _match: replacement, result)
    return result


class KeywordGlossary:
    """CRUD over a keyword store plus the lookup/apply contract used by sessions."""

    def __init__(self, store: KeywordStore):
        self.store = store

    @staticmethod
    def _new_id() -> str:
        return f"keyword-{int(time.time() * 1000)}-{uuid.uuid4().hex[:9]}"

    def list(self) -> List[GlossaryEntry]:
        return self.store.load()

    def add(self, term: str, replacement: str,
            source_lang: str = WILDCARD, target_lang: str = WILDCARD) -> GlossaryEntry:
        """Add a keyword and persist the collection."""
        term = term.strip()
        if not term:
            raise ValueError("Keyword term must not be empty")

        entry = GlossaryEntry(
            id=self._new_id(),
            term=term,
            replacement=replacement,
            source_lang=source_lang,
            target_lang=target_lang,
        )
        entries = self.store.load()
        entries.append(entry)
        self.store.save(entries)
        logger.info(f"Added keyword '{term}' -> '{replacement}' ({source_lang}->{target_lang})")
        return entry

    def import_entries(self, drafts: Iterable[GlossaryEntry]) -> List[GlossaryEntry]:
        """Persist drafts (e.g. from KeywordExtractor) under fresh ids."""
        entries = self.store.load()
        added = []
        for draft in drafts:
            if not draft.term.strip():
                continue
            entry = GlossaryEntry(
                id=self._new_id(),
                term=draft.term.strip(),
                replacement=draft.replacement,
                source_lang=draft.source_lang,
                target_lang=draft.target_lang,
            )
            entries.append(entry)
            added.append(entry)
        self.store.save(entries)
        logger.info(f"Imported {len(added)} keywords")
        return added

    def update(self, entry_id: str, **changes) -> Optional[GlossaryEntry]:
        """Update fields of an existing keyword. Returns None for an unknown id."""
        allowed = {"term", "replacement", "source_lang", "target_lang"}
        unknown = set(changes) - allowed
        if unknown:
            raise ValueError(f"Unknown keyword fields: {', '.join(sorted(unknown))}")

        entries = self.store.load()
        for entry in entries:
            if entry.id == entry_id:
                for name, value in changes.items():
                    setattr(entry, name, value)
                self.store.save(entries)
                return entry
        return None

    def remove(self, entry_id: str) -> bool:
        """Delete a keyword. Returns False if it did not exist."""
        entries = self.store.load()
        remaining = [entry for entry in entries if entry.id != entry_id]
        if len(remaining) == len(entries):
            return False
        self.store.save(remaining)
        logger.info(f"Removed keyword {entry_id}")
        return True

    def lookup(self, source_lang: str, target_lang: str) -> List[GlossaryEntry]:
        return lookup_entries(self.store.load(), source_lang, target_lang)

    @staticmethod
    def apply(text: str, entries: Iterable[GlossaryEntry]) -> str:
        return apply_entries(text, entries)

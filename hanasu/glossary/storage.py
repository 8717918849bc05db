"""Keyword glossary persistence."""

import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import List

from ..models.glossary import GlossaryEntry

logger = logging.getLogger(__name__)


class KeywordStore(ABC):
    """Get/set of the full glossary entry collection."""

    @abstractmethod
    def load(self) -> List[GlossaryEntry]:
        pass

    @abstractmethod
    def save(self, entries: List[GlossaryEntry]) -> None:
        pass


class InMemoryKeywordStore(KeywordStore):
    """Keeps entries for the lifetime of the process."""

    def __init__(self, entries: List[GlossaryEntry] = None):
        self._entries = [GlossaryEntry.from_dict(e.to_dict()) for e in (entries or [])]

    def load(self) -> List[GlossaryEntry]:
        # Hand out copies so callers cannot mutate stored entries without save()
        return [GlossaryEntry.from_dict(e.to_dict()) for e in self._entries]

    def save(self, entries: List[GlossaryEntry]) -> None:
        self._entries = [GlossaryEntry.from_dict(e.to_dict()) for e in entries]


class JsonKeywordStore(KeywordStore):
    """Stores the whole collection as one JSON document."""

    def __init__(self, path: str):
        self.path = Path(path)

    def load(self) -> List[GlossaryEntry]:
        if not self.path.exists():
            return []

        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Failed to load keywords from {self.path}: {e}")
            return []

        entries = []
        for item in data if isinstance(data, list) else []:
            try:
                entries.append(GlossaryEntry.from_dict(item))
            except (KeyError, TypeError, AttributeError) as e:
                logger.warning(f"Skipping invalid keyword record {item!r}: {e}")
        return entries

    def save(self, entries: List[GlossaryEntry]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, 'w', encoding='utf-8') as f:
            json.dump([entry.to_dict() for entry in entries], f, indent=2, ensure_ascii=False)
        logger.debug(f"Saved {len(entries)} keywords to {self.path}")

"""Ordered, append-mostly container of transcript entries."""

import threading
import logging
from typing import Callable, Dict, List, Optional

from ..models.transcript import LogEntry

logger = logging.getLogger(__name__)


class TranscriptLog:
    """Passive container: the session controller owns every mutation.

    Ordering is insertion order; updating an entry never moves it.
    """

    def __init__(self):
        self._entries: Dict[str, LogEntry] = {}
        self._order: List[str] = []
        self.lock = threading.RLock()

    def append(self, entry: LogEntry) -> None:
        with self.lock:
            if entry.id in self._entries:
                raise ValueError(f"Duplicate log entry id: {entry.id}")
            self._entries[entry.id] = entry
            self._order.append(entry.id)

    def update_by_id(self, entry_id: str, mutator: Callable[[LogEntry], None]) -> Optional[LogEntry]:
        """Apply `mutator` to the entry in place.

        Returns:
            The updated entry, or None if no entry has that id
        """
        with self.lock:
            entry = self._entries.get(entry_id)
            if entry is None:
                logger.debug(f"Ignoring update for unknown log entry {entry_id}")
                return None
            mutator(entry)
            return entry

    def get(self, entry_id: str) -> Optional[LogEntry]:
        with self.lock:
            return self._entries.get(entry_id)

    def clear(self) -> int:
        """Remove all entries and return how many there were."""
        with self.lock:
            count = len(self._order)
            self._entries.clear()
            self._order.clear()
            return count

    def list_ordered(self) -> List[LogEntry]:
        with self.lock:
            return [self._entries[entry_id] for entry_id in self._order]

    def __len__(self) -> int:
        with self.lock:
            return len(self._order)

"""Console view of a live translation session.

Subscribes to the session topics and prints status changes and finalized
entries as they happen. `render_log` builds a table of the whole log for
the end-of-session summary.
"""

import logging
import threading
from typing import Dict, Iterable, Optional

from pubsub import pub
from rich.console import Console
from rich.table import Table
from rich.text import Text

from ..models.session import SessionStatus
from ..models.transcript import LogEntry, TRANSLATION_ERROR_MARKER
from ..session.publisher import STATUS_TOPIC, ENTRY_TOPIC, CLEARED_TOPIC

logger = logging.getLogger(__name__)

STATUS_STYLES = {
    SessionStatus.IDLE: ("⏹️  Idle", "bold yellow"),
    SessionStatus.CONNECTING: ("🔌 Connecting", "bold cyan"),
    SessionStatus.LISTENING: ("🔴 Listening", "bold red"),
    SessionStatus.TRANSLATING: ("🔄 Translating", "bold magenta"),
    SessionStatus.ERROR: ("❌ Error", "bold red"),
}


def render_log(entries: Iterable[LogEntry], title: str = "📝 Transcript") -> Table:
    """Build a rich table of log entries in order."""
    table = Table(title=title, show_header=True, header_style="bold magenta", expand=True)
    table.add_column("#", style="dim", width=4)
    table.add_column("Original", style="white", ratio=1)
    table.add_column("Translation", ratio=1)
    table.add_column("", width=3)

    for index, entry in enumerate(entries, start=1):
        if entry.translated == TRANSLATION_ERROR_MARKER:
            translated = Text(entry.translated, style="bold red")
        elif entry.is_final:
            translated = Text(entry.translated, style="green")
        else:
            translated = Text(entry.translated or "…", style="yellow italic")
        table.add_row(str(index), entry.original, translated, "✅" if entry.is_final else "⏳")
    return table


class TranscriptView:
    """Prints session progress to the terminal."""

    def __init__(self, console: Optional[Console] = None,
                 status_topic: str = STATUS_TOPIC,
                 entry_topic: str = ENTRY_TOPIC,
                 cleared_topic: str = CLEARED_TOPIC):
        self.console = console or Console()
        self.status_topic = status_topic
        self.entry_topic = entry_topic
        self.cleared_topic = cleared_topic

        # Latest snapshot per entry id, in arrival order
        self.entries: Dict[str, LogEntry] = {}
        self.lock = threading.RLock()
        self._printed_final = set()

        pub.subscribe(self._on_status, status_topic)
        pub.subscribe(self._on_entry, entry_topic)
        pub.subscribe(self._on_cleared, cleared_topic)
        logger.info(f"TranscriptView subscribed to {status_topic}, {entry_topic}, {cleared_topic}")

    def _on_status(self, status: SessionStatus, reason: Optional[str] = None) -> None:
        label, style = STATUS_STYLES[status]
        if status is SessionStatus.TRANSLATING:
            # Flips on every request; too noisy for the console
            return
        message = Text(label, style=style)
        if reason:
            message.append(f"  {reason}", style="red")
        self.console.print(message)

    def _on_entry(self, entry: LogEntry) -> None:
        with self.lock:
            self.entries[entry.id] = entry
            if not entry.is_final or entry.id in self._printed_final:
                return
            self._printed_final.add(entry.id)

        style = "bold red" if entry.translated == TRANSLATION_ERROR_MARKER else "green"
        self.console.print(Text.assemble(
            ("🗣️  ", ""),
            (entry.original, "white"),
            ("  →  ", "dim"),
            (entry.translated, style),
        ))

    def _on_cleared(self, count: int) -> None:
        with self.lock:
            self.entries.clear()
            self._printed_final.clear()
        self.console.print(f"🔄 Log cleared ({count} entries)", style="bold blue")

    def print_summary(self, entries: Iterable[LogEntry]) -> None:
        self.console.print(render_log(entries))

    def close(self) -> None:
        for listener, topic in (
            (self._on_status, self.status_topic),
            (self._on_entry, self.entry_topic),
            (self._on_cleared, self.cleared_topic),
        ):
            if pub.isSubscribed(listener, topic):
                pub.unsubscribe(listener, topic)
        logger.info("TranscriptView unsubscribed")

"""Unit tests for the rich console view."""

import io
import pytest
from rich.console import Console

from hanasu.models.session import SessionStatus
from hanasu.models.transcript import LogEntry, TRANSLATION_ERROR_MARKER
from hanasu.session import SessionPublisher
from hanasu.ui import TranscriptView, render_log


def make_view():
    output = io.StringIO()
    return TranscriptView(Console(file=output, width=120)), output


@pytest.mark.unit
class TestTranscriptView:

    def test_prints_finalized_entries_once(self):
        publisher = SessionPublisher()
        view, output = make_view()

        entry = LogEntry(id="log-1", original="Hello")
        publisher.publish_entry(entry)
        entry.translated = "こんにちは"
        publisher.publish_entry(entry)
        assert "こんにちは" not in output.getvalue()

        entry.is_final = True
        publisher.publish_entry(entry)
        publisher.publish_entry(entry)

        assert output.getvalue().count("こんにちは") == 1
        assert view.entries["log-1"].is_final
        view.close()

    def test_status_and_reason(self):
        publisher = SessionPublisher()
        view, output = make_view()

        publisher.publish_status(SessionStatus.LISTENING)
        publisher.publish_status(SessionStatus.TRANSLATING)
        publisher.publish_status(SessionStatus.ERROR, "Microphone access was denied.")

        printed = output.getvalue()
        assert "Listening" in printed
        assert "Translating" not in printed
        assert "Microphone access was denied." in printed
        view.close()

    def test_cleared(self):
        publisher = SessionPublisher()
        view, output = make_view()

        publisher.publish_entry(LogEntry(id="log-1", original="Hello", is_final=True))
        publisher.publish_cleared(1)

        assert view.entries == {}
        assert "Log cleared (1 entries)" in output.getvalue()
        view.close()

    def test_close_unsubscribes(self):
        publisher = SessionPublisher()
        view, output = make_view()
        view.close()

        publisher.publish_status(SessionStatus.LISTENING)
        assert output.getvalue() == ""


@pytest.mark.unit
def test_render_log_table():
    entries = [
        LogEntry(id="1", original="Hello", translated="こんにちは", is_final=True),
        LogEntry(id="2", original="Broken", translated=TRANSLATION_ERROR_MARKER, is_final=True),
        LogEntry(id="3", original="Still talking"),
    ]
    output = io.StringIO()
    Console(file=output, width=120).print(render_log(entries))

    printed = output.getvalue()
    assert render_log(entries).row_count == 3
    for text in ("Hello", "こんにちは", "Broken", "Translation Error", "Still talking"):
        assert text in printed

"""Unit tests for TranscriptLog."""

import pytest

from hanasu.models.transcript import LogEntry
from hanasu.session import TranscriptLog


@pytest.mark.unit
class TestTranscriptLog:

    def test_insertion_order_survives_updates(self):
        log = TranscriptLog()
        log.append(LogEntry(id="a", original="one"))
        log.append(LogEntry(id="b", original="two"))

        log.update_by_id("a", lambda entry: setattr(entry, "translated", "いち"))

        assert [e.id for e in log.list_ordered()] == ["a", "b"]
        assert log.get("a").translated == "いち"

    def test_duplicate_id_rejected(self):
        log = TranscriptLog()
        log.append(LogEntry(id="a", original="one"))
        with pytest.raises(ValueError):
            log.append(LogEntry(id="a", original="again"))

    def test_update_unknown_id_is_ignored(self):
        log = TranscriptLog()
        assert log.update_by_id("missing", lambda entry: None) is None

    def test_clear_returns_count(self):
        log = TranscriptLog()
        log.append(LogEntry(id="a", original="one"))
        log.append(LogEntry(id="b", original="two"))

        assert log.clear() == 2
        assert len(log) == 0
        assert log.list_ordered() == []

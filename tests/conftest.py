"""Pytest configuration and fixtures for Hanasu tests."""

import json
import pytest
import tempfile
import logging
from pathlib import Path
from typing import List, Optional

from pubsub import pub

from hanasu.glossary import KeywordGlossary, InMemoryKeywordStore
from hanasu.models.events import RecognitionEvent
from hanasu.speech.base import AbstractSpeechRecognizer


# Configure logging for tests
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def pytest_configure(config):
    config.addinivalue_line("markers", "unit: fast isolated tests")
    config.addinivalue_line("markers", "integration: tests spanning several components")


@pytest.fixture(autouse=True)
def reset_pubsub():
    """Drop listeners left behind by a previous test."""
    yield
    pub.unsubAll()


@pytest.fixture
def temp_data_dir():
    """Create temporary directory for test data."""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield temp_dir


@pytest.fixture
def glossary():
    """Empty in-memory keyword glossary."""
    return KeywordGlossary(InMemoryKeywordStore())


@pytest.fixture
def config_file(temp_data_dir):
    """Write a minimal hanasu.yaml and return its path."""
    def write(content: str) -> str:
        path = Path(temp_data_dir) / "hanasu.yaml"
        path.write_text(content, encoding="utf-8")
        return str(path)
    return write


def _sse_body(fragments: List[str], done: bool = True) -> bytes:
    """Build an OpenAI-style event-stream body."""
    lines = []
    for fragment in fragments:
        record = {"choices": [{"delta": {"content": fragment}}]}
        lines.append(f"data: {json.dumps(record, ensure_ascii=False)}\n\n")
    if done:
        lines.append("data: [DONE]\n\n")
    return "".join(lines).encode("utf-8")


class FakeRecognizer(AbstractSpeechRecognizer):
    """Recognizer driven directly by the test."""

    name = "fake"

    def __init__(self, locale: str = "en-US", fail_on_start: Optional[Exception] = None):
        super().__init__(locale)
        self.start_count = 0
        self.stop_count = 0
        self.fail_on_start = fail_on_start

    def start(self) -> None:
        self.start_count += 1
        if self.fail_on_start is not None:
            raise self.fail_on_start

    def stop(self) -> None:
        self.stop_count += 1

    def emit_start(self) -> None:
        self._emit("on_start")

    def emit_result(self, event: RecognitionEvent) -> None:
        self._emit("on_result", event)

    def emit_error(self, code: str, message: Optional[str] = None) -> None:
        self._emit("on_error", code, message)

    def emit_end(self) -> None:
        self._emit("on_end")


@pytest.fixture
def sse_body():
    """Builder for OpenAI-style event-stream bodies."""
    return _sse_body


@pytest.fixture
def fake_recognizer():
    return FakeRecognizer()

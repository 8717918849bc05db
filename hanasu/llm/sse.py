"""Reassembly of server-sent-event records from arbitrary byte chunks."""

import codecs
from typing import List

DONE_MARKER = "[DONE]"


class ServerSentEventBuffer:
    """Turns a byte stream into complete `data` payloads.

    Chunk boundaries may fall anywhere, including inside a multi-byte
    character or a JSON record; incomplete lines are held until the rest
    arrives. Bare JSON lines (no `data:` prefix) are accepted as payloads.
    """

    def __init__(self):
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._pending = ""

    def feed(self, chunk: bytes) -> List[str]:
        self._pending += self._decoder.decode(chunk)
        *lines, self._pending = self._pending.split("\n")
        return self._payloads(lines)

    def flush(self) -> List[str]:
        """Return payloads from any trailing line that had no newline."""
        self._pending += self._decoder.decode(b"", final=True)
        lines, self._pending = [self._pending], ""
        return self._payloads(lines)

    @staticmethod
    def _payloads(lines: List[str]) -> List[str]:
        payloads = []
        for line in lines:
            line = line.rstrip("\r")
            if not line.strip() or line.startswith(":"):
                continue
            if line.startswith("data:"):
                payloads.append(line[5:].strip())
            elif line.lstrip().startswith("{"):
                payloads.append(line.strip())
            # event:, id:, retry: fields carry nothing we use
        return payloads

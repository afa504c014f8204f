"""Server-sent event parsing for build log streams."""

import json
from dataclasses import dataclass
from typing import Iterable, Iterator

DEFAULT_EVENT = "log"
END_EVENT = "end"


@dataclass
class ServerSentEvent:
    event: str
    data: str


def parse_event_stream(lines: Iterable[str]) -> Iterator[ServerSentEvent]:
    """Yield events from raw stream lines until `event: end` or EOF.

    Every non-empty `data:` line is its own event. A blank line resets the
    current event name.
    """
    event = ""
    for raw in lines:
        line = raw.strip()
        if not line:
            event = ""
            continue

        if line.startswith("event:"):
            event = line[len("event:"):].strip()
            if event == END_EVENT:
                return
            continue

        if line.startswith("data:"):
            data = line[len("data:"):].strip()
            if data:
                yield ServerSentEvent(event=event or DEFAULT_EVENT, data=data)


def iter_log_lines(lines: Iterable[str]) -> Iterator[str]:
    """Log line contents from a build log stream; malformed payloads are skipped."""
    for sse in parse_event_stream(lines):
        if sse.event != DEFAULT_EVENT:
            continue
        try:
            payload = json.loads(sse.data)
        except json.JSONDecodeError:
            continue
        if not isinstance(payload, dict):
            continue
        content = payload.get("content")
        if content:
            yield str(content)

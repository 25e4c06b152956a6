from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Iterator

from tsserver_analyzer.models import TraceEvent


def is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def parse_trace_line(line: str) -> TraceEvent | None:
    """Parse one line of a tsserver ``trace.*.json`` file.

    The server writes a JSON array with one event object per line, so array
    brackets and trailing commas are stripped first. Anything that is not a
    trace event object yields None.
    """
    text = line.strip().rstrip(",")
    if text.startswith("["):
        text = text[1:]
    if text.endswith("]"):
        text = text[:-1].rstrip().rstrip(",")
    if not text:
        return None
    try:
        data = json.loads(text)
    except json.JSONDecodeError:
        return None
    if not isinstance(data, dict):
        return None

    name = data.get("name")
    phase = data.get("ph")
    timestamp = data.get("ts")
    if not isinstance(name, str) or not isinstance(phase, str) or not is_number(timestamp):
        return None

    duration = data.get("dur")
    args = data.get("args")
    return TraceEvent(
        name=name,
        phase=phase,
        timestamp=timestamp,
        duration=duration if is_number(duration) else None,
        args=args if isinstance(args, dict) else {},
    )


def iter_trace_events(path: Path) -> Iterator[TraceEvent]:
    with open(path, encoding="utf-8", errors="replace") as f:
        for line in f:
            event = parse_trace_line(line)
            if event is not None:
                yield event

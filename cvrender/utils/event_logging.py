"""
Render event logging (Tier 2 logging).

Appends one JSON object per line to the render events file so completed and
failed renders can be streamed, filtered and counted without parsing the
detailed loguru output.

For detailed within-context logging (Tier 1), use cvrender.utils.logger instead.

Usage:
    from cvrender.utils.event_logging import log_render_event

    log_render_event(
        event_type="render_completed",
        request_id="9f6c...",
        source="rendering",
        events_file=Path("outs/logs/render_events.log"),
        template_id="engineering",
        size_bytes=48211,
    )
"""

import json
from pathlib import Path
from typing import Optional

from cvrender.utils.timestamp import now_exact


def log_render_event(
    event_type: str,
    request_id: str,
    source: str,
    events_file: Optional[Path],
    **extra_fields,
) -> None:
    """
    Log an event to the render event log.

    Does nothing when events_file is None, so callers can log unconditionally.

    Args:
        event_type: Type of event (e.g., "render_completed", "render_failed")
        request_id: Identifier of the render request
        source: Event source (e.g., "rendering", "cli")
        events_file: JSON Lines file to append to
        **extra_fields: Additional event-specific fields
    """
    if events_file is None:
        return

    events_file = Path(events_file)
    events_file.parent.mkdir(parents=True, exist_ok=True)

    event = {
        "timestamp": now_exact(),
        "event_type": event_type,
        "request_id": request_id,
        "source": source,
        **extra_fields,
    }

    with open(events_file, "a", encoding="utf-8") as f:
        f.write(json.dumps(event, default=str) + "\n")


def read_render_events(events_file: Path, event_type: Optional[str] = None) -> list[dict]:
    """
    Read events back from the log, optionally filtered by type.

    Returns:
        List of event dicts in file order (empty if the file does not exist)
    """
    events_file = Path(events_file)
    if not events_file.exists():
        return []

    events = []
    with open(events_file, encoding="utf-8") as f:
        for line in f:
            line = line.strip()
            if not line:
                continue
            event = json.loads(line)
            if event_type is None or event.get("event_type") == event_type:
                events.append(event)
    return events

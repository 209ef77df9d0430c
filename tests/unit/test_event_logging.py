"""Unit tests for the render event log."""

import pytest

from cvrender.utils.event_logging import log_render_event, read_render_events


@pytest.mark.unit
def test_events_are_appended_as_json_lines(tmp_path):
    """Test appending events as JSON Lines."""
    events_file = tmp_path / "logs" / "render_events.log"

    log_render_event("render_completed", "req-1", "rendering", events_file, size_bytes=10)
    log_render_event("render_failed", "req-2", "rendering", events_file, error_type="X")

    lines = events_file.read_text().splitlines()
    assert len(lines) == 2

    events = read_render_events(events_file)
    assert [e["request_id"] for e in events] == ["req-1", "req-2"]
    assert events[0]["size_bytes"] == 10
    assert "timestamp" in events[0]


@pytest.mark.unit
def test_read_filters_by_type(tmp_path):
    """Test filtering events by type."""
    events_file = tmp_path / "events.log"
    log_render_event("render_completed", "a", "rendering", events_file)
    log_render_event("render_failed", "b", "rendering", events_file)

    failed = read_render_events(events_file, event_type="render_failed")

    assert [e["request_id"] for e in failed] == ["b"]


@pytest.mark.unit
def test_no_events_file_is_a_no_op(tmp_path):
    """Test that logging without an events file does nothing."""
    log_render_event("render_completed", "a", "rendering", None)
    assert read_render_events(tmp_path / "missing.log") == []

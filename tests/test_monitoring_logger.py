#tests/test_monitoring_logger.py
"""
Tests for monitoring.logger.JsonFileLogger and log_event.

Covers:
- JSON structure validity
- Correct field encoding
- Parent directory creation
- Navigator events landing in the JSONL sink
"""

from __future__ import annotations

import json
from pathlib import Path

from monitoring.bus import EventBus
from monitoring.events import NavEventType
from monitoring.logger import JsonFileLogger, log_event
from navigation import Cell, NavigationStateMachine


def test_json_file_logger_writes_valid_json(tmp_path: Path):
    bus = EventBus()
    log_path = tmp_path / "events.log"

    logger = JsonFileLogger(log_path, bus)

    log_event(
        bus=bus,
        module="test.module",
        event_type=NavEventType.LOG,
        message="hello world",
        payload={"a": 1, "b": "x"},
        correlation_id="session-123",
    )

    # Explicit close to ensure file handle is flushed
    logger.close()

    lines = log_path.read_text(encoding="utf-8").strip().splitlines()
    assert len(lines) == 1

    data = json.loads(lines[0])

    assert data["module"] == "test.module"
    assert data["event_type"] == "LOG"
    assert data["message"] == "hello world"
    assert data["payload"] == {"a": 1, "b": "x"}
    assert data["correlation_id"] == "session-123"
    assert isinstance(data["ts"], (int, float))


def test_logger_parent_dir_created(tmp_path: Path):
    log_path = tmp_path / "nested" / "logs" / "events.log"

    bus = EventBus()
    logger = JsonFileLogger(log_path, bus)

    log_event(
        bus=bus,
        module="test.module",
        event_type=NavEventType.LOG,
        message="hello",
    )
    logger.close()

    assert log_path.exists()
    assert log_path.read_text(encoding="utf-8").strip()


def test_logger_stops_after_close(tmp_path: Path):
    bus = EventBus()
    log_path = tmp_path / "events.log"
    logger = JsonFileLogger(log_path, bus)
    logger.close()

    # Must not raise even though the file is closed.
    log_event(bus=bus, module="test", event_type=NavEventType.LOG, message="late")

    assert log_path.read_text(encoding="utf-8") == ""


def test_navigator_events_are_logged(tmp_path: Path):
    bus = EventBus()
    log_path = tmp_path / "events.log"
    logger = JsonFileLogger(log_path, bus)

    machine = NavigationStateMachine(bus=bus)
    machine.set_target(Cell(5, 64, 0))
    machine.next_action()
    machine.handle_feedback({"type": "position", "x": 0, "y": 64, "z": 0})
    logger.close()

    records = [json.loads(line) for line in log_path.read_text(encoding="utf-8").splitlines()]
    kinds = [r["event_type"] for r in records]

    assert kinds[0] == "TARGET_SET"
    assert "PATH_PLANNED" in kinds
    assert {r["correlation_id"] for r in records} == {machine.session_id}
    assert records[0]["payload"]["target"] == [5, 64, 0]

"""
Tests for the mock calendar source.
"""

import json

import pendulum

from freetime.adapters.mock_calendar_client import MockCalendarClient
from freetime.domain.availability import AvailabilityComputer

MONDAY = pendulum.date(2026, 2, 2)


def test_sample_data_is_relative_to_anchor():
    client = MockCalendarClient()

    intervals = client.get_busy_intervals(MONDAY, 7)

    assert intervals
    assert {i.date for i in intervals} <= {MONDAY.add(days=n).to_date_string() for n in range(7)}


def test_horizon_limits_events():
    intervals = MockCalendarClient().get_busy_intervals(MONDAY, 1)

    assert {i.date for i in intervals} == {"2026-02-02"}


def test_calendar_filter_and_invalid_entries(tmp_path):
    data_file = tmp_path / "events.json"
    data_file.write_text(
        json.dumps(
            [
                {"calendarId": "a@example.com", "dayOffset": 0, "start": "11:00", "end": "12:00"},
                {"calendarId": "b@example.com", "dayOffset": 0, "start": "13:00", "end": "14:00"},
                {"calendarId": "a@example.com", "dayOffset": 1, "allDay": True},
                {"calendarId": "a@example.com", "dayOffset": 2, "start": "bad", "end": "12:00"},
            ]
        ),
        encoding="utf-8",
    )

    client = MockCalendarClient(calendar_ids=["a@example.com"], data_file=data_file)
    intervals = client.get_busy_intervals(MONDAY, 7)

    assert [(i.date, i.start_minutes, i.end_minutes) for i in intervals] == [
        ("2026-02-02", 660, 720),
        ("2026-02-03", 0, 1439),
    ]


def test_missing_data_file(tmp_path):
    client = MockCalendarClient(data_file=tmp_path / "missing.json")

    assert client.get_busy_intervals(MONDAY, 7) == []


def test_sample_week_produces_free_slots():
    computer = AvailabilityComputer(clock=lambda: MONDAY)

    slots = computer.compute_free_slots(MockCalendarClient().get_busy_intervals(MONDAY, 7), 7)

    assert slots
    assert "2026-02-03" not in {s.date for s in slots}  # alice is out all day
    assert all(s.duration_minutes() >= 60 for s in slots)

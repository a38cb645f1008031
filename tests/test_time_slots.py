"""Tests für die Zeit-Auflösung: Labels, Uhrzeiten, lokale vs. UTC-Minuten."""

from datetime import date, datetime, timedelta, timezone

import pytest

from config.defaults import default_time_grid
from models.period import Period
from scheduling.time_slots import (
    NO_MATCH,
    combine_local,
    format_slot_label,
    format_time,
    parse_clock,
    parse_slot_label,
    period_matches_cell,
    resolve_period_slot_minutes,
    resolve_timestamp_minutes,
    to_24_hour,
    to_wire_timestamp,
)

UTC = timezone.utc
IST = timezone(timedelta(hours=5, minutes=30))
CET = timezone(timedelta(hours=1))
PST = timezone(timedelta(hours=-8))


def _period(start: datetime, weekday: int = 1, pid: str = "p1") -> Period:
    return Period(
        id=pid, class_section_id="sec", class_subject_id="cs",
        weekday=weekday, start_time=start, end_time=start + timedelta(hours=1),
    )


# ─── SLOT-LABELS ──────────────────────────────────────────────────────────────

class TestParseSlotLabel:
    def test_default_slots_map_to_full_hours(self):
        """Default-Slots 08:00 AM … 04:00 PM → 480 … 960 im Stundentakt."""
        labels = default_time_grid().slot_labels
        minutes = [parse_slot_label(l) for l in labels]
        assert minutes == list(range(480, 961, 60))
        assert len(set(minutes)) == len(labels)

    def test_examples(self):
        assert parse_slot_label("08:00 AM") == 480
        assert parse_slot_label("01:00 PM") == 780
        assert parse_slot_label("12:00 PM") == 720
        assert parse_slot_label("12:00 AM") == 0
        assert parse_slot_label("11:59 PM") == 1439
        assert parse_slot_label("12:30 PM") == 750

    @pytest.mark.parametrize("label", [
        "", "08:00", "8:00 AM", "08:00 am", "13:00 PM", "00:00 AM",
        "08:60 AM", "08:00AM", " 08:00 AM", "morgens",
    ])
    def test_invalid_labels_return_sentinel(self, label):
        """Ungültige Labels werfen nicht, sondern liefern NO_MATCH."""
        assert parse_slot_label(label) == NO_MATCH

    def test_non_string_returns_sentinel(self):
        assert parse_slot_label(None) == NO_MATCH  # type: ignore[arg-type]

    def test_format_slot_label_inverts_parse(self):
        for label in default_time_grid().slot_labels + ["12:00 AM", "12:30 PM"]:
            assert format_slot_label(parse_slot_label(label)) == label


class TestClock:
    def test_parse_clock(self):
        assert parse_clock("08:00") == 480
        assert parse_clock("8:05") == 485
        assert parse_clock("23:59") == 1439

    @pytest.mark.parametrize("value", ["", "24:00", "12:60", "08:00 AM", "abc"])
    def test_parse_clock_invalid(self, value):
        assert parse_clock(value) == NO_MATCH

    def test_to_24_hour(self):
        assert to_24_hour("08:00 AM") == "08:00"
        assert to_24_hour("01:00 PM") == "13:00"
        assert to_24_hour("12:00 PM") == "12:00"
        assert to_24_hour("12:00 AM") == "00:00"
        assert to_24_hour("04:30 PM") == "16:30"

    def test_to_24_hour_invalid_raises(self):
        with pytest.raises(ValueError):
            to_24_hour("25:00 PM")


# ─── ZEITSTEMPEL ──────────────────────────────────────────────────────────────

class TestResolveMinutes:
    def test_local_and_utc_differ_by_offset(self):
        """02:30Z in UTC+05:30 → lokal 08:00 (480), UTC 150."""
        p = _period(datetime(2024, 1, 1, 2, 30, tzinfo=UTC))
        resolved = resolve_period_slot_minutes(p, IST)
        assert resolved.local == 480
        assert resolved.utc == 150

    def test_utc_viewer_sees_identical_values(self):
        p = _period(datetime(2024, 1, 1, 9, 0, tzinfo=UTC))
        assert resolve_period_slot_minutes(p, UTC) == (540, 540)

    def test_iso_string_with_z(self):
        resolved = resolve_timestamp_minutes("2024-01-01T07:00:00.000Z", CET)
        assert resolved.local == 480
        assert resolved.utc == 420

    def test_naive_timestamp_is_local_wall_clock(self):
        """Zeitstempel ohne Offset gelten als lokale Uhrzeit des Betrachters."""
        resolved = resolve_timestamp_minutes(datetime(2024, 1, 1, 8, 0), CET)
        assert resolved.local == 480
        assert resolved.utc == 420

    def test_date_rollover_does_not_matter(self):
        """23:30Z in UTC+05:30 ist lokal am nächsten Tag 05:00 – nur die Uhrzeit zählt."""
        resolved = resolve_timestamp_minutes("2024-01-01T23:30:00Z", IST)
        assert resolved.local == 300
        assert resolved.utc == 1410

    def test_format_time_uses_local_interpretation(self):
        assert format_time("2024-01-01T07:00:00.000Z", CET) == "08:00"
        assert format_time(datetime(2024, 1, 1, 16, 45, tzinfo=UTC), PST) == "08:45"


class TestRoundTrip:
    @pytest.mark.parametrize("tz", [UTC, IST, CET, PST])
    def test_label_to_24_hour_to_local_minutes(self, tz):
        """to_24_hour(label) als lokale Startzeit → lokale Minuten == parse_slot_label(label)."""
        ref = default_time_grid().reference_date
        for label in default_time_grid().slot_labels:
            start = combine_local(ref, to_24_hour(label), tz)
            p = _period(start)
            assert resolve_period_slot_minutes(p, tz).local == parse_slot_label(label)

    def test_wire_timestamp_is_utc_with_millis(self):
        start = combine_local(date(2024, 1, 1), "08:00", CET)
        assert to_wire_timestamp(start) == "2024-01-01T07:00:00.000Z"

    def test_combine_local_invalid_clock_raises(self):
        with pytest.raises(ValueError):
            combine_local(date(2024, 1, 1), "8 Uhr", UTC)


# ─── MATCHING ─────────────────────────────────────────────────────────────────

class TestMatching:
    def test_weekday_is_one_based(self):
        p = _period(datetime(2024, 1, 1, 8, 0, tzinfo=UTC), weekday=2)
        assert period_matches_cell(p, 1, "08:00 AM", UTC)
        assert not period_matches_cell(p, 2, "08:00 AM", UTC)

    def test_local_or_utc_match(self):
        """07:00Z in UTC+1 passt auf 08:00 AM (lokal) UND 07:00 AM (UTC)."""
        p = _period(datetime(2024, 1, 1, 7, 0, tzinfo=UTC))
        assert period_matches_cell(p, 0, "08:00 AM", CET)
        assert period_matches_cell(p, 0, "07:00 AM", CET)
        assert not period_matches_cell(p, 0, "09:00 AM", CET)

    def test_invalid_slot_never_matches(self):
        p = _period(datetime(2024, 1, 1, 8, 0, tzinfo=UTC))
        assert not period_matches_cell(p, 0, "kaputt", UTC)

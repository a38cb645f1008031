"""Tests für Anlegen/Ändern/Löschen von Perioden und das Bearbeitungsformular."""

from datetime import datetime, timedelta, timezone

import pytest

from api.client import RemoteError
from config.schema import TimetableGridConfig
from models.period import ClassSubject, Period
from scheduling.lifecycle import (
    FailureKind,
    PeriodEditor,
    PeriodLifecycleManager,
    validate_period_input,
)

UTC = timezone.utc
CET = timezone(timedelta(hours=1))


class FakeClient:
    """In-Memory-Ersatz für ApiClient; zählt Lesezugriffe und Änderungen."""

    def __init__(self, periods=None, class_subjects=None):
        self.periods = list(periods or [])
        self.class_subjects = list(class_subjects or [])
        self.list_calls = 0
        self.payloads: list[dict] = []
        self.deleted: list[str] = []
        self.fail_with: RemoteError | None = None
        self._next_id = 100

    def list_periods(self, class_section_id):
        self.list_calls += 1
        return [p for p in self.periods if p.class_section_id == class_section_id]

    def list_class_subjects(self, class_section_id):
        return list(self.class_subjects)

    def create_period(self, payload):
        self.payloads.append(payload)
        if self.fail_with:
            raise self.fail_with
        self._next_id += 1
        period = Period.model_validate({**payload, "id": f"p{self._next_id}"})
        self.periods.append(period)
        return period

    def update_period(self, period_id, payload):
        self.payloads.append(payload)
        if self.fail_with:
            raise self.fail_with
        period = Period.model_validate({**payload, "id": period_id})
        self.periods = [period if p.id == period_id else p for p in self.periods]
        return period

    def delete_period(self, period_id):
        if self.fail_with:
            raise self.fail_with
        self.deleted.append(period_id)
        self.periods = [p for p in self.periods if p.id != period_id]


def _period(pid: str, weekday: int, hour: int, *, section="sec-1", room=None,
            class_subject_id="cs-1") -> Period:
    start = datetime(2024, 1, 1, hour, 0, tzinfo=UTC)
    return Period(
        id=pid, class_section_id=section, class_subject_id=class_subject_id,
        room_id=room, weekday=weekday, start_time=start,
        end_time=start + timedelta(hours=1),
    )


def _values(**overrides):
    values = {
        "class_subject_id": "cs-1",
        "room_id": None,
        "weekday": 1,
        "start_time": "08:00",
        "end_time": "09:00",
    }
    values.update(overrides)
    return values


def _manager(client, tz=UTC) -> PeriodLifecycleManager:
    return PeriodLifecycleManager(client, TimetableGridConfig(), tz=tz)


# ─── VALIDIERUNG ──────────────────────────────────────────────────────────────

class TestValidation:
    def test_valid_input(self):
        data, errors = validate_period_input(_values(room_id=""))
        assert errors == {}
        assert data.room_id is None
        assert data.start_minutes == 480
        assert data.end_minutes == 540

    def test_missing_fields_reported_per_field(self):
        data, errors = validate_period_input({"weekday": 1})
        assert data is None
        assert errors["class_subject_id"] == "Fach ist erforderlich"
        assert errors["start_time"] == "Startzeit ist erforderlich"
        assert errors["end_time"] == "Endzeit ist erforderlich"

    def test_end_not_after_start(self):
        _, errors = validate_period_input(_values(end_time="08:00"))
        assert errors == {"end_time": "Endzeit muss nach der Startzeit liegen"}

    def test_bad_clock_format(self):
        _, errors = validate_period_input(_values(start_time="8 Uhr"))
        assert errors["start_time"] == "Startzeit muss im Format HH:MM angegeben werden"

    @pytest.mark.parametrize("weekday", [0, 8])
    def test_weekday_range(self, weekday):
        _, errors = validate_period_input(_values(weekday=weekday))
        assert errors["weekday"] == "Wochentag muss zwischen 1 und 7 liegen"


# ─── MANAGER ──────────────────────────────────────────────────────────────────

class TestLifecycleManager:
    def test_create_sends_utc_payload(self):
        """Lokale 08:00 bei UTC+1 → 07:00Z am Referenzdatum, Raum nur wenn gesetzt."""
        client = FakeClient()
        result = _manager(client, CET).create_period("sec-1", _values())

        assert result.ok
        assert result.message == "Periode angelegt"
        assert client.payloads == [{
            "classSectionId": "sec-1",
            "classSubjectId": "cs-1",
            "weekday": 1,
            "startTime": "2024-01-01T07:00:00.000Z",
            "endTime": "2024-01-01T08:00:00.000Z",
        }]

    def test_room_included_when_set(self):
        client = FakeClient()
        _manager(client).create_period("sec-1", _values(room_id="r1"))
        assert client.payloads[0]["roomId"] == "r1"

    def test_invalid_input_never_reaches_server(self):
        client = FakeClient()
        result = _manager(client).create_period("sec-1", _values(class_subject_id=""))

        assert not result.ok
        assert result.failure is FailureKind.VALIDATION
        assert "class_subject_id" in result.field_errors
        assert client.payloads == []

    def test_cache_invalidated_after_create(self):
        """Nach einer Änderung wird die Klasse neu geladen statt gepatcht."""
        client = FakeClient([_period("p1", 1, 8)])
        manager = _manager(client)

        manager.periods("sec-1")
        manager.periods("sec-1")
        assert client.list_calls == 1

        manager.create_period("sec-1", _values(start_time="10:00", end_time="11:00"))
        grid = manager.grid("sec-1")
        assert client.list_calls == 2
        assert grid.get(0, "08:00 AM").id == "p1"
        assert grid.get(0, "10:00 AM") is not None

    def test_created_period_round_trips_into_clicked_slot(self):
        """Slot "01:00 PM" → Formular 13:00 → Periode erscheint wieder in 01:00 PM."""
        client = FakeClient()
        manager = _manager(client, CET)
        editor = PeriodEditor(manager, "sec-1")
        editor.open_for_slot(3, "01:00 PM")
        editor.submit(class_subject_id="cs-1", end_time="14:00")

        grid = manager.grid("sec-1")
        assert grid.get(2, "01:00 PM") is not None

    def test_update_and_delete(self):
        client = FakeClient([_period("p1", 1, 8)])
        manager = _manager(client)
        manager.periods("sec-1")

        result = manager.update_period("sec-1", "p1", _values(weekday=2))
        assert result.ok and result.message == "Periode geändert"
        assert manager.grid("sec-1").get(1, "08:00 AM").id == "p1"

        result = manager.delete_period("sec-1", "p1")
        assert result.ok and result.message == "Periode gelöscht"
        assert client.deleted == ["p1"]
        assert len(manager.grid("sec-1")) == 0

    def test_remote_error_uses_server_message(self):
        client = FakeClient()
        client.fail_with = RemoteError("Raum ist belegt", status_code=409)
        result = _manager(client).create_period("sec-1", _values())
        assert result.failure is FailureKind.REMOTE
        assert result.message == "Raum ist belegt"

    def test_remote_error_without_message_uses_fallback(self):
        client = FakeClient([_period("p1", 1, 8)])
        client.fail_with = RemoteError(None)
        manager = _manager(client)
        assert manager.update_period("sec-1", "p1", _values()).message == \
            "Periode konnte nicht geändert werden"
        assert manager.delete_period("sec-1", "p1").message == \
            "Periode konnte nicht gelöscht werden"

    def test_failed_mutation_keeps_cache(self):
        client = FakeClient([_period("p1", 1, 8)])
        manager = _manager(client)
        manager.periods("sec-1")
        client.fail_with = RemoteError(None)
        manager.delete_period("sec-1", "p1")
        manager.periods("sec-1")
        assert client.list_calls == 1

    def test_overlap_warning_does_not_block(self):
        teacher_cs = ClassSubject(id="cs-1", teacher_id="t1")
        client = FakeClient([_period("p1", 1, 8)], class_subjects=[teacher_cs])
        result = _manager(client).create_period("sec-1", _values(start_time="08:30",
                                                                 end_time="09:30"))
        assert result.ok
        assert {w.kind for w in result.warnings} == {"section", "teacher"}
        assert len(client.payloads) == 1

    def test_update_ignores_own_period(self):
        client = FakeClient([_period("p1", 1, 8)])
        result = _manager(client).update_period("sec-1", "p1", _values())
        assert result.warnings == []

    def test_weekday_labels(self):
        manager = _manager(FakeClient())
        assert manager.weekday_label(1) == "Montag"
        assert manager.weekday_label(7) == "Sonntag"
        assert manager.weekday_from_label("mittwoch") == 3
        with pytest.raises(ValueError):
            manager.weekday_from_label("Feiertag")
        with pytest.raises(ValueError):
            manager.weekday_label(0)


# ─── FORMULAR ─────────────────────────────────────────────────────────────────

class TestPeriodEditor:
    def _editor(self, client, section="sec-1", tz=UTC):
        notes: list[tuple[str, str]] = []
        editor = PeriodEditor(_manager(client, tz), section,
                              notify=lambda level, msg: notes.append((level, msg)))
        return editor, notes

    def test_requires_section(self):
        editor, notes = self._editor(FakeClient(), section=None)
        assert editor.open_for_slot(1, "08:00 AM") is False
        assert not editor.is_open
        assert notes == [("error", "Bitte zuerst eine Klasse auswählen")]

    def test_open_for_slot_prefills_start(self):
        editor, _ = self._editor(FakeClient())
        editor.open_for_slot(2, "01:00 PM")
        assert editor.is_open
        assert editor.editing is None
        assert editor.values["weekday"] == 2
        assert editor.values["start_time"] == "13:00"

    def test_weekday_zero_is_rejected_not_monday(self):
        """Wochentag 0 bleibt 0 und scheitert an der Validierung."""
        client = FakeClient()
        editor, notes = self._editor(client)
        editor.open_for_slot(0, "08:00 AM")
        assert editor.values["weekday"] == 0

        result = editor.submit(class_subject_id="cs-1", end_time="09:00")
        assert result.failure is FailureKind.VALIDATION
        assert editor.field_errors == {"weekday": "Wochentag muss zwischen 1 und 7 liegen"}
        assert editor.is_open
        assert client.payloads == []

    def test_open_without_slot_uses_default_start(self):
        editor, _ = self._editor(FakeClient())
        editor.open_for_slot(1)
        assert editor.values["start_time"] == "08:00"

    def test_open_for_period_uses_local_clock(self):
        """Gespeichert 07:00Z, Betrachter UTC+1 → Formular zeigt 08:00–09:00."""
        p = _period("p1", 4, 7)
        editor, _ = self._editor(FakeClient([p]), tz=CET)
        editor.open_for_period(p)
        assert editor.editing is p
        assert editor.values["start_time"] == "08:00"
        assert editor.values["end_time"] == "09:00"
        assert editor.values["weekday"] == 4

    def test_success_closes_and_notifies(self):
        editor, notes = self._editor(FakeClient())
        editor.open_for_slot(1, "08:00 AM")
        result = editor.submit(class_subject_id="cs-1", end_time="09:00")
        assert result.ok
        assert not editor.is_open
        assert notes == [("success", "Periode angelegt")]

    def test_validation_failure_keeps_form_open(self):
        client = FakeClient()
        editor, notes = self._editor(client)
        editor.open_for_slot(1, "08:00 AM")
        editor.submit(class_subject_id="cs-1")
        assert editor.is_open
        assert editor.field_errors == {"end_time": "Endzeit ist erforderlich"}
        assert notes == []
        assert client.payloads == []

    def test_remote_failure_keeps_values(self):
        client = FakeClient()
        client.fail_with = RemoteError(None)
        editor, notes = self._editor(client)
        editor.open_for_slot(1, "08:00 AM")
        editor.submit(class_subject_id="cs-1", end_time="09:00")
        assert editor.is_open
        assert editor.values["class_subject_id"] == "cs-1"
        assert editor.values["end_time"] == "09:00"
        assert notes == [("error", "Periode konnte nicht angelegt werden")]

    def test_warnings_are_notified(self):
        client = FakeClient([_period("p1", 1, 8)])
        editor, notes = self._editor(client)
        editor.open_for_slot(1, "08:00 AM")
        editor.submit(class_subject_id="cs-2", end_time="09:00")
        assert [level for level, _ in notes] == ["success", "warning"]

    def test_edit_then_delete(self):
        p = _period("p1", 1, 8)
        client = FakeClient([p])
        editor, notes = self._editor(client)
        editor.open_for_period(p)
        editor.submit(end_time="10:00")
        assert client.payloads[-1]["endTime"] == "2024-01-01T10:00:00.000Z"

        editor.open_for_period(p)
        editor.delete()
        assert client.deleted == ["p1"]
        assert notes[-1] == ("success", "Periode gelöscht")

    def test_delete_requires_existing_period(self):
        editor, _ = self._editor(FakeClient())
        editor.open_for_slot(1)
        with pytest.raises(RuntimeError):
            editor.delete()

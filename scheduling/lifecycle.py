"""Anlegen, Ändern und Löschen von Stundenplan-Perioden.

Der PeriodLifecycleManager ist der einzige Weg, Perioden zu verändern. Er
validiert Formulareingaben, rechnet lokale "HH:MM"-Uhrzeiten in Zeitstempel
um, spricht die API an und verwirft nach jeder erfolgreichen Änderung den
Cache der betroffenen Klasse (kein Patchen, immer neu laden).

Der PeriodEditor bildet das Bearbeitungsformular ab: er wird aus einem leeren
Raster-Slot oder einer bestehenden Periode geöffnet, schließt sich nur bei
Erfolg und behält bei Fehlern die Eingaben.
"""

import logging
from datetime import tzinfo
from enum import Enum
from typing import Any, Callable, Literal, Optional

from pydantic import BaseModel, ConfigDict, ValidationError, ValidationInfo, field_validator

from api.client import ApiClient, RemoteError
from config.schema import TimetableGridConfig
from models.period import ClassSubject, Period
from scheduling.grid import TimetableGrid, place_periods
from scheduling.overlap import OverlapWarning, find_overlaps
from scheduling.time_slots import (
    NO_MATCH,
    combine_local,
    format_time,
    parse_clock,
    to_24_hour,
    to_wire_timestamp,
)

logger = logging.getLogger(__name__)

NotificationLevel = Literal["success", "warning", "error"]
Notifier = Callable[[NotificationLevel, str], None]


def log_notifier(level: NotificationLevel, message: str) -> None:
    """Standard-Benachrichtigung: nur ins Log."""
    if level == "error":
        logger.error(message)
    elif level == "warning":
        logger.warning(message)
    else:
        logger.info(message)


# ─── Eingabe & Validierung ────────────────────────────────────────────────────

class PeriodInput(BaseModel):
    """Formularwerte einer Periode (lokale Uhrzeiten "HH:MM")."""

    model_config = ConfigDict(validate_default=True)

    class_subject_id: str = ""
    room_id: Optional[str] = None
    weekday: int = 1
    start_time: str = ""
    end_time: str = ""

    @field_validator("class_subject_id")
    @classmethod
    def _require_subject(cls, v: str) -> str:
        v = (v or "").strip()
        if not v:
            raise ValueError("Fach ist erforderlich")
        return v

    @field_validator("room_id")
    @classmethod
    def _empty_room_is_none(cls, v: Optional[str]) -> Optional[str]:
        return (v or "").strip() or None

    @field_validator("weekday")
    @classmethod
    def _check_weekday(cls, v: int) -> int:
        if not 1 <= v <= 7:
            raise ValueError("Wochentag muss zwischen 1 und 7 liegen")
        return v

    @field_validator("start_time")
    @classmethod
    def _check_start(cls, v: str) -> str:
        v = (v or "").strip()
        if not v:
            raise ValueError("Startzeit ist erforderlich")
        if parse_clock(v) == NO_MATCH:
            raise ValueError("Startzeit muss im Format HH:MM angegeben werden")
        return v

    @field_validator("end_time")
    @classmethod
    def _check_end(cls, v: str, info: ValidationInfo) -> str:
        v = (v or "").strip()
        if not v:
            raise ValueError("Endzeit ist erforderlich")
        end = parse_clock(v)
        if end == NO_MATCH:
            raise ValueError("Endzeit muss im Format HH:MM angegeben werden")
        start = info.data.get("start_time")
        if start is not None and end <= parse_clock(start):
            raise ValueError("Endzeit muss nach der Startzeit liegen")
        return v

    @property
    def start_minutes(self) -> int:
        return parse_clock(self.start_time)

    @property
    def end_minutes(self) -> int:
        return parse_clock(self.end_time)


def validate_period_input(values: dict[str, Any]) -> tuple[Optional[PeriodInput], dict[str, str]]:
    """Validiert Formularwerte. Gibt (Eingabe, {}) oder (None, {Feld: Meldung}) zurück."""
    try:
        return PeriodInput.model_validate(values), {}
    except ValidationError as e:
        field_errors: dict[str, str] = {}
        for err in e.errors():
            field = str(err["loc"][0]) if err["loc"] else "form"
            cause = (err.get("ctx") or {}).get("error")
            field_errors.setdefault(field, str(cause) if cause else err["msg"])
        return None, field_errors


# ─── Ergebnis ─────────────────────────────────────────────────────────────────

class FailureKind(str, Enum):
    VALIDATION = "validation"
    REMOTE = "remote"


class MutationResult(BaseModel):
    """Ergebnis einer Änderung: Erfolg oder typisierter Fehler."""

    ok: bool
    failure: Optional[FailureKind] = None
    message: str = ""
    field_errors: dict[str, str] = {}
    period: Optional[Period] = None
    warnings: list[OverlapWarning] = []

    @classmethod
    def success(cls, message: str, period: Optional[Period] = None,
                warnings: Optional[list[OverlapWarning]] = None) -> "MutationResult":
        return cls(ok=True, message=message, period=period, warnings=warnings or [])

    @classmethod
    def invalid(cls, field_errors: dict[str, str]) -> "MutationResult":
        return cls(ok=False, failure=FailureKind.VALIDATION,
                   message="Eingaben prüfen", field_errors=field_errors)

    @classmethod
    def remote(cls, message: str) -> "MutationResult":
        return cls(ok=False, failure=FailureKind.REMOTE, message=message)


# ─── Manager ──────────────────────────────────────────────────────────────────

class PeriodLifecycleManager:
    """Vermittelt alle Änderungen an Perioden und hält den Perioden-Cache."""

    def __init__(self, client: ApiClient, grid_config: Optional[TimetableGridConfig] = None,
                 tz: Optional[tzinfo] = None):
        self.client = client
        self.grid_config = grid_config or TimetableGridConfig()
        # Zeitzone des Betrachters; None = aus der Konfiguration bzw. System
        self.tz = tz if tz is not None else self.grid_config.tzinfo()
        self._cache: dict[str, list[Period]] = {}
        self._class_subjects: dict[str, dict[str, ClassSubject]] = {}

    # ─── Wochentage ───

    def weekday_label(self, weekday: int) -> str:
        """weekday 1..7 → Anzeigename."""
        if not 1 <= weekday <= 7:
            raise ValueError(f"Wochentag {weekday} außerhalb 1..7")
        return self.grid_config.weekday_labels[weekday - 1]

    def weekday_from_label(self, label: str) -> int:
        """Anzeigename → weekday 1..7 (Groß-/Kleinschreibung egal)."""
        wanted = label.strip().lower()
        for i, name in enumerate(self.grid_config.weekday_labels, start=1):
            if name.lower() == wanted:
                return i
        raise ValueError(f"Unbekannter Wochentag: {label!r}")

    # ─── Lesen & Cache ───

    def periods(self, class_section_id: str) -> list[Period]:
        """Perioden der Klasse; lädt nur, wenn nicht im Cache."""
        if class_section_id not in self._cache:
            logger.debug(f"Lade Perioden für Klasse {class_section_id}")
            self._cache[class_section_id] = self.client.list_periods(class_section_id)
        return list(self._cache[class_section_id])

    def invalidate(self, class_section_id: str) -> None:
        self._cache.pop(class_section_id, None)

    def class_subjects(self, class_section_id: str) -> dict[str, ClassSubject]:
        if class_section_id not in self._class_subjects:
            subjects = self.client.list_class_subjects(class_section_id)
            self._class_subjects[class_section_id] = {cs.id: cs for cs in subjects}
        return self._class_subjects[class_section_id]

    def grid(self, class_section_id: str) -> TimetableGrid:
        """Wochenraster der Klasse gemäß Konfiguration."""
        cfg = self.grid_config
        return place_periods(
            self.periods(class_section_id), cfg.day_names, cfg.slot_labels, self.tz,
        )

    # ─── Umrechnung ───

    def build_payload(self, class_section_id: str, data: PeriodInput) -> dict[str, Any]:
        """Formularwerte → Server-Payload.

        Start und Ende nutzen dasselbe Referenzdatum, damit die Endzeit nie auf
        einen anderen Tag rutscht als die Startzeit.
        """
        cfg = self.grid_config
        start = combine_local(cfg.reference_date, data.start_time, self.tz)
        end = combine_local(cfg.reference_date, data.end_time, self.tz)
        payload: dict[str, Any] = {
            "classSectionId": class_section_id,
            "classSubjectId": data.class_subject_id,
            "weekday": data.weekday,
            "startTime": to_wire_timestamp(start),
            "endTime": to_wire_timestamp(end),
        }
        if data.room_id:
            payload["roomId"] = data.room_id
        return payload

    def _overlaps(self, class_section_id: str, data: PeriodInput,
                  ignore_period_id: Optional[str] = None) -> list[OverlapWarning]:
        try:
            existing = self.periods(class_section_id)
            subjects = self.class_subjects(class_section_id)
        except RemoteError as e:
            logger.debug(f"Überschneidungs-Prüfung übersprungen: {e}")
            return []
        candidate = subjects.get(data.class_subject_id)
        return find_overlaps(
            weekday=data.weekday,
            start_minutes=data.start_minutes,
            end_minutes=data.end_minutes,
            class_section_id=class_section_id,
            room_id=data.room_id,
            teacher_id=candidate.teacher_key if candidate else None,
            existing=existing,
            class_subjects=subjects,
            ignore_period_id=ignore_period_id,
            tz=self.tz,
        )

    # ─── Änderungen ───

    def create_period(self, class_section_id: str, values: dict[str, Any]) -> MutationResult:
        data, errors = validate_period_input(values)
        if data is None:
            return MutationResult.invalid(errors)
        warnings = self._overlaps(class_section_id, data)
        try:
            period = self.client.create_period(self.build_payload(class_section_id, data))
        except RemoteError as e:
            return MutationResult.remote(e.user_message("Periode konnte nicht angelegt werden"))
        self.invalidate(class_section_id)
        logger.info(f"Periode {period.id} angelegt (Klasse {class_section_id})")
        return MutationResult.success("Periode angelegt", period, warnings)

    def update_period(self, class_section_id: str, period_id: str,
                      values: dict[str, Any]) -> MutationResult:
        data, errors = validate_period_input(values)
        if data is None:
            return MutationResult.invalid(errors)
        warnings = self._overlaps(class_section_id, data, ignore_period_id=period_id)
        try:
            period = self.client.update_period(
                period_id, self.build_payload(class_section_id, data))
        except RemoteError as e:
            return MutationResult.remote(e.user_message("Periode konnte nicht geändert werden"))
        self.invalidate(class_section_id)
        logger.info(f"Periode {period_id} geändert (Klasse {class_section_id})")
        return MutationResult.success("Periode geändert", period, warnings)

    def delete_period(self, class_section_id: str, period_id: str) -> MutationResult:
        try:
            self.client.delete_period(period_id)
        except RemoteError as e:
            return MutationResult.remote(e.user_message("Periode konnte nicht gelöscht werden"))
        self.invalidate(class_section_id)
        logger.info(f"Periode {period_id} gelöscht (Klasse {class_section_id})")
        return MutationResult.success("Periode gelöscht")


# ─── Formular ─────────────────────────────────────────────────────────────────

class PeriodEditor:
    """Zustand des Bearbeitungsformulars für eine Klasse."""

    def __init__(self, manager: PeriodLifecycleManager, class_section_id: Optional[str],
                 notify: Notifier = log_notifier):
        self.manager = manager
        self.class_section_id = class_section_id
        self.notify = notify
        self.is_open = False
        self.editing: Optional[Period] = None
        self.values: dict[str, Any] = {}
        self.field_errors: dict[str, str] = {}

    def _require_section(self) -> bool:
        if not self.class_section_id:
            self.notify("error", "Bitte zuerst eine Klasse auswählen")
            return False
        return True

    def open_for_slot(self, weekday: int, slot_label: Optional[str] = None) -> bool:
        """Leere Zelle angeklickt: neues Formular, Startzeit aus dem Slot-Label."""
        if not self._require_section():
            return False
        cfg = self.manager.grid_config
        self.editing = None
        self.values = {
            "class_subject_id": "",
            "room_id": None,
            "weekday": weekday,
            "start_time": to_24_hour(slot_label) if slot_label else cfg.default_start_time,
            "end_time": "",
        }
        self.field_errors = {}
        self.is_open = True
        return True

    def open_for_period(self, period: Period) -> bool:
        """Bestehende Periode angeklickt: Formular mit lokalen Uhrzeiten füllen."""
        if not self._require_section():
            return False
        tz = self.manager.tz
        self.editing = period
        self.values = {
            "class_subject_id": period.class_subject_id,
            "room_id": period.room_id or None,
            "weekday": period.weekday,
            "start_time": format_time(period.start_time, tz),
            "end_time": format_time(period.end_time, tz),
        }
        self.field_errors = {}
        self.is_open = True
        return True

    def close(self) -> None:
        self.is_open = False

    def _finish(self, result: MutationResult) -> MutationResult:
        if result.ok:
            self.field_errors = {}
            self.notify("success", result.message)
            for w in result.warnings:
                self.notify("warning", w.description)
            self.close()
        elif result.failure is FailureKind.VALIDATION:
            self.field_errors = dict(result.field_errors)
        else:
            self.notify("error", result.message)
        return result

    def submit(self, **changes: Any) -> MutationResult:
        """Übernimmt geänderte Felder und speichert (anlegen oder ändern)."""
        self.values.update(changes)
        section = self.class_section_id or ""
        if self.editing is not None:
            result = self.manager.update_period(section, self.editing.id, self.values)
        else:
            result = self.manager.create_period(section, self.values)
        return self._finish(result)

    def delete(self) -> MutationResult:
        if self.editing is None:
            raise RuntimeError("Löschen nur für eine bestehende Periode möglich")
        return self._finish(
            self.manager.delete_period(self.class_section_id or "", self.editing.id))

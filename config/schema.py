from datetime import date, tzinfo
from enum import Enum
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import BaseModel, Field, field_validator, model_validator

from scheduling.time_slots import NO_MATCH, parse_slot_label


class LogLevel(str, Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"


# ─── API ───

class ApiConfig(BaseModel):
    """Verbindung zur Schulportal-API."""
    # Basis-URL inkl. Präfix, z.B. "https://schule.example/api"
    base_url: str = Field("http://localhost:5000/api",
        description="Basis-URL der REST-API")
    # Timeout pro Anfrage in Sekunden
    timeout_seconds: float = Field(10.0, gt=0, le=120,
        description="Timeout pro Anfrage (Sekunden)")
    # Name der Umgebungsvariable mit dem Bearer-Token (Token nie in der YAML!)
    token_env: str = Field("SCHULPORTAL_TOKEN",
        description="Umgebungsvariable mit dem Bearer-Token")


# ─── WOCHENRASTER (vollständig konfigurierbar) ───

class TimetableGridConfig(BaseModel):
    """Wochenraster für die Stundenplan-Anzeige.

    Das Raster ist das Kreuzprodukt aus day_names (Spalten) und slot_labels
    (Zeilen). Spalte i zeigt Perioden mit weekday == i + 1.
    """
    # Spaltenüberschriften, beginnend mit Montag
    day_names: list[str] = Field(
        default=["Montag", "Dienstag", "Mittwoch", "Donnerstag", "Freitag", "Samstag"],
        description="Tagesspalten des Rasters (ab Montag)")
    # Zeilen des Rasters als 12-Stunden-Labels "HH:MM AM|PM"
    slot_labels: list[str] = Field(
        default=[
            "08:00 AM", "09:00 AM", "10:00 AM", "11:00 AM", "12:00 PM",
            "01:00 PM", "02:00 PM", "03:00 PM", "04:00 PM",
        ],
        description="Zeit-Slots des Rasters (12-Stunden-Format)")
    # Anzeigenamen für weekday 1..7 (Formular-Auswahl)
    weekday_labels: list[str] = Field(
        default=["Montag", "Dienstag", "Mittwoch", "Donnerstag",
                 "Freitag", "Samstag", "Sonntag"],
        description="Anzeigenamen der Wochentage 1..7")
    # Festes Referenzdatum für Start- und Endzeit (Datum selbst ohne Bedeutung)
    reference_date: date = Field(date(2024, 1, 1),
        description="Referenzdatum für Uhrzeit-Zeitstempel")
    # IANA-Zeitzone des Betrachters; None = Systemzeitzone
    timezone: Optional[str] = Field(None,
        description="Zeitzone des Betrachters (z.B. 'Europe/Berlin')")
    # Standard-Startzeit des Formulars ohne angeklickten Slot
    default_start_time: str = Field("08:00",
        description="Vorbelegte Startzeit im Formular")

    @field_validator("day_names")
    @classmethod
    def _check_day_names(cls, v: list[str]) -> list[str]:
        if not 1 <= len(v) <= 7:
            raise ValueError(f"1 bis 7 Tagesspalten erwartet, {len(v)} angegeben")
        return v

    @field_validator("weekday_labels")
    @classmethod
    def _check_weekday_labels(cls, v: list[str]) -> list[str]:
        if len(v) != 7:
            raise ValueError(f"Genau 7 Wochentags-Namen erwartet, {len(v)} angegeben")
        return v

    @field_validator("slot_labels")
    @classmethod
    def _check_slot_labels(cls, v: list[str]) -> list[str]:
        if not v:
            raise ValueError("Mindestens ein Zeit-Slot erforderlich")
        for label in v:
            if parse_slot_label(label) == NO_MATCH:
                raise ValueError(
                    f"Zeit-Slot {label!r} ungültig (erwartet 'HH:MM AM|PM')")
        if len(set(v)) != len(v):
            raise ValueError("Zeit-Slots müssen eindeutig sein")
        return v

    @field_validator("timezone")
    @classmethod
    def _check_timezone(cls, v: Optional[str]) -> Optional[str]:
        if v:
            try:
                ZoneInfo(v)
            except (ZoneInfoNotFoundError, ValueError) as e:
                raise ValueError(f"Unbekannte Zeitzone: {v!r}") from e
        return v or None

    def tzinfo(self) -> Optional[tzinfo]:
        """Zeitzone als tzinfo; None heißt Systemzeitzone."""
        return ZoneInfo(self.timezone) if self.timezone else None


# ─── NOTENSTUFEN ───

class GradeBand(BaseModel):
    """Eine Notenstufe: ab min_percentage Prozent gilt grade."""
    min_percentage: float
    grade: str


class GradingConfig(BaseModel):
    """Notenstufen-Tabelle. Tauschbar ohne die Aggregations-Mathematik anzufassen."""
    bands: list[GradeBand] = Field(
        default_factory=lambda: [
            GradeBand(min_percentage=90, grade="A+"),
            GradeBand(min_percentage=80, grade="A"),
            GradeBand(min_percentage=70, grade="B"),
            GradeBand(min_percentage=60, grade="C"),
            GradeBand(min_percentage=0, grade="D"),
        ],
        description="Notenstufen, absteigend nach Schwelle")

    @model_validator(mode='after')
    def validate_bands(self):
        """Prüfe dass die Tabelle nicht leer ist, jede Schwelle nur einmal
        vorkommt und die unterste Stufe bei 0 % (oder darunter) beginnt."""
        if not self.bands:
            raise ValueError("Mindestens eine Notenstufe erforderlich")
        thresholds = [b.min_percentage for b in self.bands]
        if len(set(thresholds)) != len(thresholds):
            raise ValueError("Notenstufen-Schwellen müssen eindeutig sein")
        if min(thresholds) > 0:
            raise ValueError(
                f"Unterste Notenstufe beginnt bei {min(thresholds)} % – "
                f"es muss eine Stufe ab 0 % geben")
        self.bands = sorted(self.bands, key=lambda b: b.min_percentage, reverse=True)
        return self


# ─── GESAMT-CONFIG ───

class AppConfig(BaseModel):
    """Gesamtkonfiguration des Schulportal-Clients."""
    # Name der Schule (Zeugnis-Kopf)
    school_name: str = Field("Muster-Schule",
        description="Name der Schule")
    # Log-Level der Konsolenausgabe
    log_level: LogLevel = Field(LogLevel.WARNING)
    # API-Verbindung
    api: ApiConfig = Field(default_factory=ApiConfig)
    # Wochenraster
    timetable: TimetableGridConfig = Field(default_factory=TimetableGridConfig)
    # Notenstufen
    grading: GradingConfig = Field(default_factory=GradingConfig)

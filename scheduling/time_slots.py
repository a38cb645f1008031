"""Zeit-Auflösung für das Wochenraster.

Umrechnung zwischen 12-Stunden-Labels ("08:00 AM"), 24-Stunden-Uhrzeiten
("08:00") und absoluten Zeitstempeln. Der Server speichert Perioden nicht
einheitlich: je nach Schreibpfad steht die Uhrzeit als lokale oder als
UTC-Wanduhrzeit im Zeitstempel. Deshalb liefert der Resolver immer BEIDE
Interpretationen; der Aufrufer prüft beide.
"""

import re
from datetime import date, datetime, time, timezone, tzinfo
from typing import NamedTuple, Optional, Union

from models.period import Period

# Sentinel für "kein Treffer"; Minutenwerte sind immer >= 0.
NO_MATCH = -1

MINUTES_PER_DAY = 24 * 60

_SLOT_LABEL_RE = re.compile(r"^(\d{2}):(\d{2}) (AM|PM)$")
_CLOCK_RE = re.compile(r"^(\d{1,2}):(\d{2})$")


class SlotMinutes(NamedTuple):
    """Minuten seit Mitternacht in lokaler und in UTC-Interpretation."""

    local: int
    utc: int


# ─── Labels & Uhrzeiten ───────────────────────────────────────────────────────

def parse_slot_label(label: str) -> int:
    """Parst ein 12-Stunden-Label "HH:MM AM|PM" in Minuten seit Mitternacht.

    Gibt NO_MATCH (-1) zurück statt zu werfen: die Slot-Liste ist statisch,
    ein Parse-Fehler ist ein Konfigurationsfehler, den Tests finden sollen.
    """
    if not isinstance(label, str):
        return NO_MATCH
    m = _SLOT_LABEL_RE.match(label)
    if not m:
        return NO_MATCH
    hours, minutes, meridiem = int(m.group(1)), int(m.group(2)), m.group(3)
    if not 1 <= hours <= 12 or minutes > 59:
        return NO_MATCH
    if meridiem == "AM" and hours == 12:
        hours = 0
    elif meridiem == "PM" and hours != 12:
        hours += 12
    return hours * 60 + minutes


def parse_clock(value: str) -> int:
    """Parst eine 24-Stunden-Uhrzeit "HH:MM" in Minuten; NO_MATCH bei Fehler."""
    if not isinstance(value, str):
        return NO_MATCH
    m = _CLOCK_RE.match(value.strip())
    if not m:
        return NO_MATCH
    hours, minutes = int(m.group(1)), int(m.group(2))
    if hours > 23 or minutes > 59:
        return NO_MATCH
    return hours * 60 + minutes


def format_clock(minutes: int) -> str:
    """Minuten seit Mitternacht → "HH:MM"."""
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def format_slot_label(minutes: int) -> str:
    """Minuten seit Mitternacht → "HH:MM AM|PM" (Umkehrung von parse_slot_label)."""
    hours, mins = divmod(minutes, 60)
    meridiem = "AM" if hours < 12 else "PM"
    hours12 = hours % 12 or 12
    return f"{hours12:02d}:{mins:02d} {meridiem}"


def to_24_hour(label: str) -> str:
    """"01:00 PM" → "13:00". Für die Vorbelegung des Formulars aus einem Raster-Slot."""
    minutes = parse_slot_label(label)
    if minutes == NO_MATCH:
        raise ValueError(f"Ungültiges Zeit-Label: {label!r} (erwartet 'HH:MM AM|PM')")
    return format_clock(minutes)


# ─── Zeitstempel ──────────────────────────────────────────────────────────────

def parse_timestamp(value: Union[str, datetime]) -> datetime:
    """ISO-8601-String (auch mit 'Z') oder datetime → datetime."""
    if isinstance(value, datetime):
        return value
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return datetime.fromisoformat(text)


def _as_aware(dt: datetime, tz: Optional[tzinfo]) -> datetime:
    # Zeitstempel ohne Offset gelten als lokale Wanduhrzeit.
    if dt.tzinfo is not None:
        return dt
    if tz is not None:
        return dt.replace(tzinfo=tz)
    return dt.astimezone()


def to_local(value: Union[str, datetime], tz: Optional[tzinfo] = None) -> datetime:
    """Zeitstempel in der Zeitzone des Betrachters (tz=None → Systemzeitzone)."""
    aware = _as_aware(parse_timestamp(value), tz)
    return aware.astimezone(tz) if tz is not None else aware.astimezone()


def _minutes_of(dt: datetime) -> int:
    return dt.hour * 60 + dt.minute


def resolve_timestamp_minutes(
    value: Union[str, datetime], tz: Optional[tzinfo] = None
) -> SlotMinutes:
    """Minuten seit Mitternacht eines Zeitstempels, lokal und als UTC."""
    aware = _as_aware(parse_timestamp(value), tz)
    return SlotMinutes(
        local=_minutes_of(to_local(aware, tz)),
        utc=_minutes_of(aware.astimezone(timezone.utc)),
    )


def resolve_period_slot_minutes(period: Period, tz: Optional[tzinfo] = None) -> SlotMinutes:
    """Beide Interpretationen der Startzeit einer Periode.

    Welche korrekt ist, entscheidet der Resolver NICHT – der Aufrufer
    vergleicht beide mit dem Slot.
    """
    return resolve_timestamp_minutes(period.start_time, tz)


def format_time(value: Union[str, datetime], tz: Optional[tzinfo] = None) -> str:
    """Zeitstempel → lokale "HH:MM" für das Bearbeitungsformular.

    Nur die lokale Interpretation: das Formular arbeitet immer in Ortszeit.
    """
    return to_local(value, tz).strftime("%H:%M")


def combine_local(reference_date: date, clock: str, tz: Optional[tzinfo] = None) -> datetime:
    """Lokale "HH:MM" + festes Referenzdatum → zeitzonenbehafteter Zeitstempel."""
    minutes = parse_clock(clock)
    if minutes == NO_MATCH:
        raise ValueError(f"Ungültige Uhrzeit: {clock!r} (erwartet 'HH:MM')")
    naive = datetime.combine(reference_date, time(minutes // 60, minutes % 60))
    return _as_aware(naive, tz)


def to_wire_timestamp(dt: datetime) -> str:
    """datetime → ISO-8601 in UTC mit Millisekunden und 'Z' (Server-Format)."""
    utc = dt.astimezone(timezone.utc)
    return utc.strftime("%Y-%m-%dT%H:%M:%S.") + f"{utc.microsecond // 1000:03d}Z"


# ─── Matching ─────────────────────────────────────────────────────────────────

def period_matches_cell(
    period: Period, day_index: int, slot_label: str, tz: Optional[tzinfo] = None
) -> bool:
    """Gehört die Periode in die Rasterzelle (day_index, slot_label)?

    day_index ist 0-basiert, period.weekday 1-basiert. Lokale ODER UTC-Minuten
    müssen dem Slot entsprechen.
    """
    if period.weekday != day_index + 1:
        return False
    slot_minutes = parse_slot_label(slot_label)
    if slot_minutes == NO_MATCH:
        return False
    resolved = resolve_period_slot_minutes(period, tz)
    return slot_minutes in (resolved.local, resolved.utc)

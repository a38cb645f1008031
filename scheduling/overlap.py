"""Clientseitige Überschneidungs-Prüfung für neue oder geänderte Perioden.

Der Server ist maßgeblich; hier werden nur Warnungen erzeugt, nie blockiert.
"""

import logging
from datetime import datetime, tzinfo
from typing import Iterable, Literal, Optional

from pydantic import BaseModel

from models.period import ClassSubject, Period
from scheduling.time_slots import resolve_timestamp_minutes

logger = logging.getLogger(__name__)

OverlapKind = Literal["section", "room", "teacher"]


class OverlapWarning(BaseModel):
    """Eine bestehende Periode, die sich zeitlich mit dem Kandidaten überschneidet."""

    kind: OverlapKind
    period_id: str
    description: str


def _local_range(start: datetime, end: datetime, tz: Optional[tzinfo]) -> tuple[int, int]:
    return (
        resolve_timestamp_minutes(start, tz).local,
        resolve_timestamp_minutes(end, tz).local,
    )


def find_overlaps(
    *,
    weekday: int,
    start_minutes: int,
    end_minutes: int,
    class_section_id: str,
    room_id: Optional[str],
    teacher_id: Optional[str],
    existing: Iterable[Period],
    class_subjects: Optional[dict[str, ClassSubject]] = None,
    ignore_period_id: Optional[str] = None,
    tz: Optional[tzinfo] = None,
) -> list[OverlapWarning]:
    """Sucht Perioden am selben Wochentag mit überlappendem Zeitraum.

    Eine Überschneidung zählt, wenn Klasse, Raum oder Lehrkraft identisch sind.
    Halboffene Intervalle: 08:00–09:00 und 09:00–10:00 überschneiden sich nicht.
    """
    class_subjects = class_subjects or {}
    warnings: list[OverlapWarning] = []

    for other in existing:
        if other.id == ignore_period_id or other.weekday != weekday:
            continue
        other_start, other_end = _local_range(other.start_time, other.end_time, tz)
        if not (start_minutes < other_end and other_start < end_minutes):
            continue

        span = f"Tag {weekday}, {other_start // 60:02d}:{other_start % 60:02d}"
        if other.class_section_id == class_section_id:
            warnings.append(OverlapWarning(
                kind="section", period_id=other.id,
                description=f"Klasse {class_section_id} hat bereits Periode {other.id} ({span})",
            ))
        if room_id and other.room_id == room_id:
            warnings.append(OverlapWarning(
                kind="room", period_id=other.id,
                description=f"Raum {room_id} ist durch Periode {other.id} belegt ({span})",
            ))
        other_cs = other.class_subject or class_subjects.get(other.class_subject_id)
        other_teacher = other_cs.teacher_key if other_cs else None
        if teacher_id and other_teacher == teacher_id:
            warnings.append(OverlapWarning(
                kind="teacher", period_id=other.id,
                description=f"Lehrkraft {teacher_id} unterrichtet bereits in Periode {other.id} ({span})",
            ))

    for w in warnings:
        logger.warning(f"Überschneidung: {w.description}")
    return warnings

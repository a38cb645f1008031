"""Gemeinsame Hilfsfunktionen für die Terminal-Anzeige."""

from models.period import Period

NO_TEACHER = "Keine Lehrkraft"
EMPTY_CELL = "—"


def period_summary(period: Period) -> str:
    """Zellentext einer Periode: Fach, Lehrkraft und (falls vorhanden) Raum."""
    cs = period.class_subject
    subject = (cs.subject_name if cs else None) or period.class_subject_id
    teacher = (cs.teacher_label if cs else None) or NO_TEACHER
    lines = [subject, teacher]
    if period.room is not None:
        lines.append(period.room.name)
    elif period.room_id:
        lines.append(period.room_id)
    return "\n".join(lines)


def format_score(value: float) -> str:
    """45.0 → "45", 45.5 → "45.5"."""
    return f"{value:g}"


def format_percentage(value: float, digits: int = 1) -> str:
    return f"{value:.{digits}f}%"

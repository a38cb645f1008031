"""Datenmodelle für Stundenplan-Perioden und ihre Relationen (Pydantic v2)."""

from datetime import datetime
from typing import Optional

from pydantic import Field

from models.base import ApiModel


class User(ApiModel):
    """Benutzerkonto einer Lehrkraft (nur die für die Anzeige nötigen Felder)."""

    id: Optional[str] = None
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None


class Teacher(ApiModel):
    id: str
    user: Optional[User] = None


class TeacherSubject(ApiModel):
    """Zuordnung Lehrkraft ↔ Fach."""

    id: Optional[str] = None
    teacher_id: Optional[str] = None
    teacher: Optional[Teacher] = None


class Subject(ApiModel):
    id: str
    name: str
    code: Optional[str] = None


class ClassSubject(ApiModel):
    """Ein Fach, wie es in einer Klasse von einer Lehrkraft unterrichtet wird."""

    id: str
    class_section_id: Optional[str] = None
    subject_id: Optional[str] = None
    teacher_id: Optional[str] = None
    weekly_periods: Optional[int] = None
    subject: Optional[Subject] = None
    teacher_subject: Optional[TeacherSubject] = None

    @property
    def subject_name(self) -> Optional[str]:
        return self.subject.name if self.subject else None

    @property
    def teacher_key(self) -> Optional[str]:
        """ID der unterrichtenden Lehrkraft, falls bekannt."""
        if self.teacher_id:
            return self.teacher_id
        ts = self.teacher_subject
        if ts is None:
            return None
        if ts.teacher_id:
            return ts.teacher_id
        return ts.teacher.id if ts.teacher else None

    @property
    def teacher_label(self) -> Optional[str]:
        """Anzeigename der Lehrkraft: E-Mail, sonst Vor- und Nachname."""
        ts = self.teacher_subject
        user = ts.teacher.user if ts and ts.teacher else None
        if user is None:
            return None
        if user.email:
            return user.email
        name = " ".join(p for p in (user.first_name, user.last_name) if p)
        return name or None


class ClassRoom(ApiModel):
    id: str
    name: str
    capacity: Optional[int] = None
    location: Optional[str] = None


class Period(ApiModel):
    """Eine wöchentlich wiederkehrende Unterrichtsstunde einer Klasse.

    Bei start_time/end_time ist nur die Uhrzeit bedeutsam; das Datum ist ein
    beliebiges Referenzdatum und darf zwischen Perioden nicht verglichen werden.
    """

    id: str
    class_section_id: str
    class_subject_id: str
    room_id: Optional[str] = None
    weekday: int = Field(ge=1, le=7)   # 1=Montag .. 7=Sonntag
    start_time: datetime
    end_time: datetime
    class_subject: Optional[ClassSubject] = None
    room: Optional[ClassRoom] = None

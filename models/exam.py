"""Datenmodelle für Prüfungen und Noten (Pydantic v2)."""

from datetime import datetime
from typing import Optional

from models.base import ApiModel
from models.period import ClassSubject, Subject


class ExamSession(ApiModel):
    """Prüfungszeitraum (z.B. "Halbjahr 1")."""

    id: str
    name: str
    academic_year_id: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None


class Exam(ApiModel):
    id: str
    exam_session_id: Optional[str] = None
    class_section_id: Optional[str] = None
    title: str
    exam_date: Optional[datetime] = None


class ExamSubject(ApiModel):
    """Prüfung eines Fachs innerhalb einer Exam mit eigener Maximalpunktzahl."""

    id: str
    exam_id: str
    class_subject_id: Optional[str] = None
    max_score: float
    weight: Optional[float] = None
    exam_date: Optional[datetime] = None
    exam: Optional[Exam] = None
    class_subject: Optional[ClassSubject] = None
    subject: Optional[Subject] = None

    @property
    def subject_key(self) -> str:
        """Gruppierungsschlüssel: Fach-ID, ersatzweise die ClassSubject-ID."""
        if self.subject is not None:
            return self.subject.id
        cs = self.class_subject
        if cs is not None:
            if cs.subject_id:
                return cs.subject_id
            if cs.subject is not None:
                return cs.subject.id
        return self.class_subject_id or self.id

    @property
    def subject_name(self) -> str:
        if self.subject is not None:
            return self.subject.name
        if self.class_subject is not None and self.class_subject.subject_name:
            return self.class_subject.subject_name
        return self.subject_key

    @property
    def exam_title(self) -> str:
        return self.exam.title if self.exam is not None else self.exam_id


class StudentMark(ApiModel):
    """Note eines Schülers für ein ExamSubject. score=None heißt: noch nicht bewertet."""

    id: Optional[str] = None
    student_id: str
    exam_subject_id: str
    score: Optional[float] = None
    is_absent: bool = False

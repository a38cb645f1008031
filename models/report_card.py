"""Abgeleitete Zeugnis-Modelle (werden nie gespeichert, Pydantic v2)."""

from pydantic import BaseModel


class ScoredMark(BaseModel):
    """Ein bewertetes (Prüfung, Punkte, Maximalpunkte)-Tupel."""

    exam_title: str
    score: float
    max_score: float


class SubjectResult(BaseModel):
    """Ergebnis eines Fachs innerhalb eines Prüfungszeitraums."""

    subject_id: str
    subject_name: str
    marks: list[ScoredMark]
    total_obtained: float
    total_max: float
    pending_exams: list[str] = []   # Prüfungen ohne Bewertung

    @property
    def percentage(self) -> float:
        if self.total_max <= 0:
            return 0.0
        return 100.0 * self.total_obtained / self.total_max

    @property
    def is_graded(self) -> bool:
        return bool(self.marks)


class ReportCard(BaseModel):
    """Zeugnis eines Schülers für einen Prüfungszeitraum."""

    student_id: str
    exam_session_id: str
    subjects: list[SubjectResult]
    overall_total_obtained: float
    overall_total_max: float
    percentage: float
    grade: str

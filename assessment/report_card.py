"""Zeugnis-Aggregation aus lückenhaften Noten.

Fehlende Noten (keine Zeile oder score=None) sind "noch nicht bewertet":
sie zählen weder zu den erreichten noch zu den maximalen Punkten und drücken
die Prozentzahl daher nicht, solange die Bewertung läuft.
"""

from collections.abc import Iterable, Mapping, Sequence
from typing import Optional

from config.schema import GradeBand
from models.exam import ExamSubject, StudentMark
from models.report_card import ReportCard, ScoredMark, SubjectResult
from assessment.grading import grade_for


def percentage_of(obtained: float, maximum: float) -> float:
    """100 · obtained / maximum; 0 bei maximum 0 (nie NaN)."""
    if maximum <= 0:
        return 0.0
    return 100.0 * obtained / maximum


def group_exam_subjects(exam_subjects: Iterable[ExamSubject]) -> dict[str, list[ExamSubject]]:
    """ExamSubjects nach Fach gruppieren; Reihenfolge des ersten Auftretens bleibt."""
    grouped: dict[str, list[ExamSubject]] = {}
    for es in exam_subjects:
        grouped.setdefault(es.subject_key, []).append(es)
    return grouped


def index_marks(marks: Iterable[StudentMark], student_id: str) -> dict[str, StudentMark]:
    """Noten eines Schülers nach exam_subject_id. Bei Dubletten gilt die erste bewertete."""
    indexed: dict[str, StudentMark] = {}
    for mark in marks:
        if mark.student_id != student_id:
            continue
        current = indexed.get(mark.exam_subject_id)
        if current is None or (current.score is None and mark.score is not None):
            indexed[mark.exam_subject_id] = mark
    return indexed


def build_subject_result(
    subject_id: str,
    exam_subjects: Sequence[ExamSubject],
    marks_by_exam_subject: Mapping[str, Optional[StudentMark]],
    student_id: Optional[str] = None,
) -> SubjectResult:
    """Summen eines Fachs über alle bewerteten Prüfungen."""
    scored: list[ScoredMark] = []
    pending: list[str] = []
    for es in exam_subjects:
        mark = marks_by_exam_subject.get(es.id)
        if mark is not None and student_id is not None and mark.student_id != student_id:
            mark = None
        if mark is None or mark.score is None:
            pending.append(es.exam_title)
            continue
        scored.append(ScoredMark(
            exam_title=es.exam_title, score=mark.score, max_score=es.max_score,
        ))

    name = exam_subjects[0].subject_name if exam_subjects else subject_id
    return SubjectResult(
        subject_id=subject_id,
        subject_name=name,
        marks=scored,
        total_obtained=sum(m.score for m in scored),
        total_max=sum(m.max_score for m in scored),
        pending_exams=pending,
    )


def build_report_card(
    student_id: str,
    exam_session_id: str,
    exam_subjects_by_subject: Mapping[str, Sequence[ExamSubject]],
    marks_by_exam_subject: Mapping[str, Optional[StudentMark]],
    grade_bands: Optional[Sequence[GradeBand]] = None,
) -> ReportCard:
    """Zeugnis eines Schülers für einen Prüfungszeitraum.

    - Jedes Fach erscheint, auch ganz ohne Bewertung (Summe 0).
    - Fachsummen nur über bewertete Prüfungen.
    - Gesamtsummen = Summe der Fachsummen; Prozent 0 bei Maximum 0.
    - Reine Funktion: gleiche Eingaben → gleiches Zeugnis.
    """
    subjects = [
        build_subject_result(subject_id, exam_subjects, marks_by_exam_subject, student_id)
        for subject_id, exam_subjects in exam_subjects_by_subject.items()
    ]
    total_obtained = sum(s.total_obtained for s in subjects)
    total_max = sum(s.total_max for s in subjects)
    percentage = percentage_of(total_obtained, total_max)
    return ReportCard(
        student_id=student_id,
        exam_session_id=exam_session_id,
        subjects=subjects,
        overall_total_obtained=total_obtained,
        overall_total_max=total_max,
        percentage=percentage,
        grade=grade_for(percentage, grade_bands),
    )

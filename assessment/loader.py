"""Lädt Prüfungen und Noten eines Prüfungszeitraums und baut das Zeugnis."""

import logging
from typing import Optional, Sequence

from api.client import ApiClient
from config.schema import GradeBand
from models.exam import ExamSubject, StudentMark
from models.report_card import ReportCard
from assessment.report_card import build_report_card, group_exam_subjects, index_marks

logger = logging.getLogger(__name__)


class ReportCardLoader:
    """Fragt Exams → ExamSubjects → Noten ab und aggregiert sie."""

    def __init__(self, client: ApiClient, grade_bands: Optional[Sequence[GradeBand]] = None):
        self.client = client
        self.grade_bands = grade_bands

    def load(
        self,
        student_id: str,
        exam_session_id: str,
        class_section_id: Optional[str] = None,
    ) -> ReportCard:
        exams = self.client.list_exams(
            exam_session_id=exam_session_id, class_section_id=class_section_id,
        )
        logger.debug(f"Zeitraum {exam_session_id}: {len(exams)} Prüfungen")

        exam_subjects: list[ExamSubject] = []
        for exam in exams:
            for es in self.client.list_exam_subjects(exam.id):
                if es.exam is None:
                    es = es.model_copy(update={"exam": exam})
                exam_subjects.append(es)

        marks: list[StudentMark] = []
        for es in exam_subjects:
            marks.extend(self.client.list_exam_subject_marks(es.id))

        return build_report_card(
            student_id,
            exam_session_id,
            group_exam_subjects(exam_subjects),
            index_marks(marks, student_id),
            self.grade_bands,
        )

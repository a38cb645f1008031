"""HTTP-Client für die Schulportal-API (requests).

Alle Antworten sind als {"success": bool, "data": ..., "message": ...}
verpackt. Der Client packt "data" aus und wirft RemoteError bei
Netzwerkfehlern, Nicht-2xx-Status oder success=false.
"""

import logging
from typing import Any, Optional

import requests

from models.exam import Exam, ExamSession, ExamSubject, StudentMark
from models.period import ClassRoom, ClassSubject, Period

logger = logging.getLogger(__name__)


class RemoteError(Exception):
    """Fehlgeschlagene Server-Anfrage. message ist die Server-Meldung, falls vorhanden."""

    def __init__(self, message: Optional[str] = None, status_code: Optional[int] = None):
        self.message = message
        self.status_code = status_code
        super().__init__(message or f"Server-Anfrage fehlgeschlagen (Status {status_code})")

    def user_message(self, fallback: str) -> str:
        """Server-Meldung für die Anzeige, sonst der übergebene Standardtext."""
        return self.message or fallback


class ApiClient:
    """Dünner Wrapper um requests.Session für die benötigten Endpunkte."""

    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        timeout: float = 10.0,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        if token:
            self.session.headers["Authorization"] = f"Bearer {token}"

    # ─── Transport ───

    def request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[dict[str, Any]] = None,
        json: Optional[dict[str, Any]] = None,
    ) -> Any:
        """Führt eine Anfrage aus und gibt das ausgepackte "data"-Feld zurück."""
        url = f"{self.base_url}{path}"
        clean_params = {k: v for k, v in (params or {}).items() if v is not None} or None
        logger.debug(f"{method} {url} params={clean_params}")
        try:
            response = self.session.request(
                method, url, params=clean_params, json=json, timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.warning(f"{method} {url}: Netzwerkfehler: {e}")
            raise RemoteError(None) from e

        try:
            body = response.json()
        except ValueError:
            body = None

        message = body.get("message") if isinstance(body, dict) else None
        if not response.ok:
            logger.warning(f"{method} {url}: Status {response.status_code} ({message})")
            raise RemoteError(message, status_code=response.status_code)
        if not isinstance(body, dict) or not body.get("success", False):
            logger.warning(f"{method} {url}: success=false ({message})")
            raise RemoteError(message, status_code=response.status_code)
        return body.get("data")

    def get(self, path: str, **params: Any) -> Any:
        return self.request("GET", path, params=params)

    # ─── Stundenplan ───

    def list_periods(self, class_section_id: str) -> list[Period]:
        data = self.get("/timetable-periods", classSectionId=class_section_id)
        return [Period.model_validate(item) for item in data or []]

    def create_period(self, payload: dict[str, Any]) -> Period:
        data = self.request("POST", "/timetable-periods", json=payload)
        return Period.model_validate(data)

    def update_period(self, period_id: str, payload: dict[str, Any]) -> Period:
        data = self.request("PUT", f"/timetable-periods/{period_id}", json=payload)
        return Period.model_validate(data)

    def delete_period(self, period_id: str) -> None:
        self.request("DELETE", f"/timetable-periods/{period_id}")

    def list_class_subjects(self, class_section_id: str) -> list[ClassSubject]:
        data = self.get("/class-subjects", classSectionId=class_section_id)
        return [ClassSubject.model_validate(item) for item in data or []]

    def list_rooms(self) -> list[ClassRoom]:
        return [ClassRoom.model_validate(item) for item in self.get("/class-rooms") or []]

    # ─── Prüfungen & Noten ───

    def get_exam_session(self, session_id: str) -> ExamSession:
        return ExamSession.model_validate(self.get(f"/exam-sessions/{session_id}"))

    def list_exams(
        self, exam_session_id: Optional[str] = None, class_section_id: Optional[str] = None
    ) -> list[Exam]:
        data = self.get(
            "/exams", examSessionId=exam_session_id, classSectionId=class_section_id,
        )
        return [Exam.model_validate(item) for item in data or []]

    def list_exam_subjects(self, exam_id: str) -> list[ExamSubject]:
        data = self.get(f"/exam-subjects/exam/{exam_id}")
        return [ExamSubject.model_validate(item) for item in data or []]

    def list_exam_subject_marks(self, exam_subject_id: str) -> list[StudentMark]:
        data = self.get(f"/student-marks/exam-subject/{exam_subject_id}")
        return [StudentMark.model_validate(item) for item in data or []]

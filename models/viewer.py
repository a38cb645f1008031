"""Betrachter-Kontext: Rolle und erlaubte Aktionen (Pydantic v2)."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel


class Role(str, Enum):
    ADMIN = "admin"
    TEACHER = "teacher"
    STUDENT = "student"
    PARENT = "parent"


class Action(str, Enum):
    VIEW_TIMETABLE = "view_timetable"
    EDIT_TIMETABLE = "edit_timetable"
    ENTER_MARKS = "enter_marks"
    VIEW_REPORT_CARD = "view_report_card"


# Rolle → erlaubte Aktionen. Einzige Stelle, an der Rechte festgelegt werden.
ROLE_PERMISSIONS: dict[Role, frozenset[Action]] = {
    Role.ADMIN: frozenset(Action),
    Role.TEACHER: frozenset({
        Action.VIEW_TIMETABLE, Action.ENTER_MARKS, Action.VIEW_REPORT_CARD,
    }),
    Role.STUDENT: frozenset({Action.VIEW_TIMETABLE, Action.VIEW_REPORT_CARD}),
    Role.PARENT: frozenset({Action.VIEW_TIMETABLE, Action.VIEW_REPORT_CARD}),
}


class Viewer(BaseModel):
    """Wer gerade auf das Raster schaut. Ersetzt verstreute isAdmin-Flags."""

    role: Role
    user_id: Optional[str] = None

    @property
    def permissions(self) -> frozenset[Action]:
        return ROLE_PERMISSIONS[self.role]

    def can(self, action: Action) -> bool:
        return action in self.permissions

from models.period import ClassRoom, ClassSubject, Period, Subject, Teacher, TeacherSubject, User
from models.exam import Exam, ExamSession, ExamSubject, StudentMark
from models.grid_cell import GridCell
from models.report_card import ReportCard, ScoredMark, SubjectResult
from models.viewer import Action, Role, Viewer

__all__ = [
    "ClassRoom",
    "ClassSubject",
    "Period",
    "Subject",
    "Teacher",
    "TeacherSubject",
    "User",
    "Exam",
    "ExamSession",
    "ExamSubject",
    "StudentMark",
    "GridCell",
    "ReportCard",
    "ScoredMark",
    "SubjectResult",
    "Action",
    "Role",
    "Viewer",
]

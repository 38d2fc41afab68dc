from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

from .assistant.generator import GeminiTextGenerator, TextGenerator
from .assistant.service import AssistantService
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import SessionService
from .auth.mysql_account_repository import MySQLAccountRepository
from .auth.repository import AccountRepository
from .auth.service import AuthService
from .auth.session_state import AuthSession
from .core.constants import DEFAULT_RECENT_SESSIONS
from .database.connection import DatabaseConnection
from .day_notes.mysql_day_note_repository import MySQLDayNoteRepository
from .day_notes.repository import DayNoteRepository
from .leads.mysql_lead_repository import MySQLLeadRepository
from .leads.repository import LeadRepository
from .students.mysql_student_repository import MySQLStudentRepository
from .students.repository import StudentRepository
from .workspace.reconciler import Workspace
from .workspace.registry import DEFAULT_IDLE_TIMEOUT, DEFAULT_MAX_AGE, WorkspaceRegistry


@dataclass(frozen=True)
class Container:
    accounts_repo: AccountRepository
    attendance_repo: AttendanceRepository
    students_repo: StudentRepository
    day_notes_repo: DayNoteRepository
    leads_repo: LeadRepository

    auth_service: AuthService
    session_service: SessionService
    assistant_service: AssistantService
    workspaces: WorkspaceRegistry


def wire(
    *,
    accounts_repo: AccountRepository,
    attendance_repo: AttendanceRepository,
    students_repo: StudentRepository,
    day_notes_repo: DayNoteRepository,
    leads_repo: LeadRepository,
    generator: Optional[TextGenerator] = None,
    chat_model: str = "gemini-3-pro-preview",
    fast_model: str = "gemini-3-flash-preview",
    departments: Optional[Sequence[str]] = None,
    recent_limit: int = DEFAULT_RECENT_SESSIONS,
    workspace_max_age: float = DEFAULT_MAX_AGE,
    workspace_idle_timeout: float = DEFAULT_IDLE_TIMEOUT,
) -> Container:
    """Assemble services around any set of repositories (MySQL or in-memory)."""

    auth_service = AuthService(accounts_repo)
    session_service = SessionService(attendance_repo)
    assistant_service = AssistantService(generator, chat_model=chat_model, fast_model=fast_model)

    def open_workspace(auth: AuthSession) -> Workspace:
        return Workspace(
            auth,
            attendance=attendance_repo,
            students=students_repo,
            day_notes=day_notes_repo,
            leads=leads_repo,
            sessions=session_service,
            assistant=assistant_service,
            departments=departments,
            recent_limit=recent_limit,
        )

    return Container(
        accounts_repo=accounts_repo,
        attendance_repo=attendance_repo,
        students_repo=students_repo,
        day_notes_repo=day_notes_repo,
        leads_repo=leads_repo,
        auth_service=auth_service,
        session_service=session_service,
        assistant_service=assistant_service,
        workspaces=WorkspaceRegistry(
            open_workspace,
            max_age=workspace_max_age,
            idle_timeout=workspace_idle_timeout,
        ),
    )


def build_container(
    *,
    db_config: dict,
    gemini_api_key: str = "",
    chat_model: str = "gemini-3-pro-preview",
    fast_model: str = "gemini-3-flash-preview",
    departments: Optional[Sequence[str]] = None,
    recent_limit: int = DEFAULT_RECENT_SESSIONS,
    workspace_max_age: float = DEFAULT_MAX_AGE,
    workspace_idle_timeout: float = DEFAULT_IDLE_TIMEOUT,
) -> Container:
    conn = DatabaseConnection.from_dict(db_config)

    return wire(
        accounts_repo=MySQLAccountRepository(conn),
        attendance_repo=MySQLAttendanceRepository(conn),
        students_repo=MySQLStudentRepository(conn),
        day_notes_repo=MySQLDayNoteRepository(conn),
        leads_repo=MySQLLeadRepository(conn),
        generator=GeminiTextGenerator(gemini_api_key) if gemini_api_key else None,
        chat_model=chat_model,
        fast_model=fast_model,
        departments=departments,
        recent_limit=recent_limit,
        workspace_max_age=workspace_max_age,
        workspace_idle_timeout=workspace_idle_timeout,
    )

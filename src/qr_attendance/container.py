from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceVerifier
from .core.constants import DEFAULT_EVENT_QUEUE_SIZE, DEFAULT_QR_TOKEN_TTL_MINUTES
from .credentials.service import CredentialIssuer
from .database.connection import DBConfig, DatabaseConnection
from .events.broadcaster import EventBroadcaster, InMemoryEventBroadcaster
from .reports.service import AttendanceReportService
from .sessions.mysql_session_repository import MySQLSessionRepository
from .sessions.repository import SessionRepository
from .sessions.service import SessionRegistry
from .users.mysql_user_repository import MySQLUserRepository
from .users.repository import UserRepository
from .users.service import AuthService


@dataclass(frozen=True)
class Container:
    users_repo: UserRepository
    sessions_repo: SessionRepository
    attendance_repo: AttendanceRepository
    events: EventBroadcaster

    auth_service: AuthService
    session_registry: SessionRegistry
    credential_issuer: CredentialIssuer
    attendance_verifier: AttendanceVerifier
    report_service: AttendanceReportService

    conn: Optional[DatabaseConnection] = None


def wire_services(
    *,
    users_repo: UserRepository,
    sessions_repo: SessionRepository,
    attendance_repo: AttendanceRepository,
    events: Optional[EventBroadcaster] = None,
    ttl_minutes: int = DEFAULT_QR_TOKEN_TTL_MINUTES,
    conn: Optional[DatabaseConnection] = None,
) -> Container:
    """Build services on top of any repository implementation (MySQL or in-memory)."""

    events = events or InMemoryEventBroadcaster()
    registry = SessionRegistry(sessions_repo)

    return Container(
        users_repo=users_repo,
        sessions_repo=sessions_repo,
        attendance_repo=attendance_repo,
        events=events,
        auth_service=AuthService(users_repo),
        session_registry=registry,
        credential_issuer=CredentialIssuer(registry, events, ttl_minutes=ttl_minutes),
        attendance_verifier=AttendanceVerifier(registry, attendance_repo, events),
        report_service=AttendanceReportService(attendance_repo),
        conn=conn,
    )


def build_container(
    *,
    db_config: dict,
    ttl_minutes: int = DEFAULT_QR_TOKEN_TTL_MINUTES,
    event_queue_size: int = DEFAULT_EVENT_QUEUE_SIZE,
) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    return wire_services(
        users_repo=MySQLUserRepository(conn),
        sessions_repo=MySQLSessionRepository(conn),
        attendance_repo=MySQLAttendanceRepository(conn),
        events=InMemoryEventBroadcaster(max_queue=event_queue_size),
        ttl_minutes=ttl_minutes,
        conn=conn,
    )

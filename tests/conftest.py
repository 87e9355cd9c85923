from __future__ import annotations

import threading
from dataclasses import dataclass, replace
from datetime import date, datetime, time
from typing import Optional

import pytest
from werkzeug.security import generate_password_hash

from qr_attendance.attendance.model import AttendanceRecord, AttendanceReportRow, NewAttendance
from qr_attendance.attendance.service import AttendanceVerifier
from qr_attendance.container import wire_services
from qr_attendance.core.enums import Role
from qr_attendance.core.exceptions import AlreadyMarkedError
from qr_attendance.credentials.service import CredentialIssuer
from qr_attendance.events.broadcaster import InMemoryEventBroadcaster
from qr_attendance.sessions.model import ClassSession
from qr_attendance.sessions.service import SessionRegistry
from qr_attendance.users.model import User

TEACHER_ID = 1
OTHER_TEACHER_ID = 2
STUDENT_1 = 10
STUDENT_2 = 11
OUTSIDER = 99


class InMemorySessions:
    def __init__(self):
        self._lock = threading.Lock()
        self._by_id: dict[int, ClassSession] = {}
        self._id = 0

    def create(self, *, teacher_id, subject, classroom, session_date, start_time, end_time, enrolled_student_ids) -> int:
        with self._lock:
            self._id += 1
            self._by_id[self._id] = ClassSession(
                session_id=self._id,
                teacher_id=teacher_id,
                subject=subject,
                classroom=classroom,
                session_date=session_date,
                start_time=start_time,
                end_time=end_time,
                enrolled_student_ids=tuple(enrolled_student_ids),
            )
            return self._id

    def get_by_id(self, session_id: int) -> Optional[ClassSession]:
        return self._by_id.get(session_id)

    def set_credential(self, *, session_id: int, token: str, expires_at: datetime) -> bool:
        with self._lock:
            s = self._by_id.get(session_id)
            if not s or not s.is_active:
                return False
            self._by_id[session_id] = replace(s, qr_token=token, qr_expires_at=expires_at)
            return True

    def increment_attendance(self, session_id: int) -> bool:
        with self._lock:
            s = self._by_id.get(session_id)
            if not s:
                return False
            self._by_id[session_id] = replace(s, attendance_count=s.attendance_count + 1)
            return True

    def deactivate(self, session_id: int) -> bool:
        with self._lock:
            s = self._by_id.get(session_id)
            if not s:
                return False
            self._by_id[session_id] = replace(s, is_active=False, qr_token=None, qr_expires_at=None)
            return True

    def list_for_teacher(self, teacher_id: int):
        items = [s for s in self._by_id.values() if s.teacher_id == teacher_id]
        items.sort(key=lambda s: (s.session_date, s.start_time), reverse=True)
        return items


class InMemoryAttendance:
    """Reject-on-conflict insert guarded by a lock, like a UNIQUE KEY."""

    def __init__(self):
        self._lock = threading.Lock()
        self._by_key: dict[tuple[int, int, date], AttendanceRecord] = {}
        self._id = 0

    @property
    def records(self) -> list[AttendanceRecord]:
        return list(self._by_key.values())

    def create_unique(self, record: NewAttendance) -> AttendanceRecord:
        key = (record.session_id, record.student_id, record.attend_date)
        with self._lock:
            if key in self._by_key:
                raise AlreadyMarkedError("Bạn đã điểm danh buổi học này hôm nay rồi")
            self._id += 1
            rec = AttendanceRecord(attendance_id=self._id, **record.__dict__)
            self._by_key[key] = rec
            return rec

    def list_for_student(self, *, student_id, start_date=None, end_date=None, subject=None):
        rows = []
        for r in self._by_key.values():
            if r.student_id != student_id:
                continue
            if start_date is not None and end_date is not None and not (start_date <= r.attend_date <= end_date):
                continue
            if subject and r.subject != subject:
                continue
            rows.append(
                AttendanceReportRow(
                    attendance_id=r.attendance_id,
                    session_id=r.session_id,
                    subject=r.subject,
                    location=r.location,
                    teacher_name=None,
                    attend_date=r.attend_date,
                    check_in_time=r.check_in_time,
                    start_time=None,
                    end_time=None,
                    status=r.status,
                    method=r.method,
                )
            )
        rows.sort(key=lambda r: r.check_in_time, reverse=True)
        return rows


@dataclass
class InMemoryUsers:
    users_by_username: dict[str, User]

    def get_by_username(self, username: str) -> Optional[User]:
        return self.users_by_username.get(username)


class StubRenderer:
    def render_data_url(self, data: str) -> str:
        return "data:image/png;base64,stub"


def make_users() -> InMemoryUsers:
    def user(user_id: int, username: str, role: Role, full_name: str) -> User:
        return User(
            user_id=user_id,
            full_name=full_name,
            username=username,
            password_hash=generate_password_hash("pw123456"),
            role=role,
        )

    users = [
        user(TEACHER_ID, "teacher", Role.TEACHER, "Giảng viên A"),
        user(OTHER_TEACHER_ID, "teacher2", Role.TEACHER, "Giảng viên B"),
        user(STUDENT_1, "student1", Role.STUDENT, "Nguyễn Văn A"),
        user(STUDENT_2, "student2", Role.STUDENT, "Trần Thị B"),
        user(OUTSIDER, "outsider", Role.STUDENT, "Lê Văn C"),
    ]
    return InMemoryUsers({u.username: u for u in users})


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2026, 2, 2, 8, 5, 0)


@pytest.fixture
def sessions_repo() -> InMemorySessions:
    return InMemorySessions()


@pytest.fixture
def attendance_repo() -> InMemoryAttendance:
    return InMemoryAttendance()


@pytest.fixture
def broadcaster() -> InMemoryEventBroadcaster:
    return InMemoryEventBroadcaster()


@pytest.fixture
def registry(sessions_repo) -> SessionRegistry:
    return SessionRegistry(sessions_repo)


@pytest.fixture
def issuer(registry, broadcaster) -> CredentialIssuer:
    return CredentialIssuer(registry, broadcaster, renderer=StubRenderer(), ttl_minutes=10)


@pytest.fixture
def verifier(registry, attendance_repo, broadcaster) -> AttendanceVerifier:
    return AttendanceVerifier(registry, attendance_repo, broadcaster)


@pytest.fixture
def class_session(registry, fixed_now) -> ClassSession:
    return registry.create_session(
        teacher_id=TEACHER_ID,
        subject="Lập trình Python",
        classroom="A1-101",
        session_date=fixed_now.date(),
        start_time=time(8, 0),
        end_time=time(10, 0),
        enrolled_student_ids=[STUDENT_1, STUDENT_2],
    )


@pytest.fixture
def users_repo() -> InMemoryUsers:
    return make_users()


@pytest.fixture
def container(users_repo, sessions_repo, attendance_repo, broadcaster):
    return wire_services(
        users_repo=users_repo,
        sessions_repo=sessions_repo,
        attendance_repo=attendance_repo,
        events=broadcaster,
    )

from __future__ import annotations

from datetime import date, datetime, time
from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, normalize_mysql_time
from .model import ClassSession
from .repository import SessionRepository

_SESSION_COLUMNS = """
    session_id, teacher_id, subject, classroom, session_date, start_time, end_time,
    qr_token, qr_expires_at, attendance_count, is_active
"""


class MySQLSessionRepository(SessionRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    @staticmethod
    def _to_session(r: dict, roster: Sequence[int]) -> ClassSession:
        return ClassSession(
            session_id=int(r["session_id"]),
            teacher_id=int(r["teacher_id"]),
            subject=r["subject"],
            classroom=r["classroom"],
            session_date=r["session_date"],
            start_time=normalize_mysql_time(r["start_time"]),
            end_time=normalize_mysql_time(r["end_time"]),
            enrolled_student_ids=tuple(int(s) for s in roster),
            qr_token=r.get("qr_token"),
            qr_expires_at=r.get("qr_expires_at"),
            attendance_count=int(r.get("attendance_count") or 0),
            is_active=bool(r.get("is_active", True)),
        )

    @staticmethod
    def _load_roster(cur, session_id: int) -> list[int]:
        cur.execute(
            """
            SELECT student_id
            FROM session_enrollments
            WHERE session_id=%s
            ORDER BY position ASC
            """,
            (session_id,),
        )
        return [int(r["student_id"]) for r in fetchall(cur)]

    def create(
        self,
        *,
        teacher_id: int,
        subject: str,
        classroom: str,
        session_date: date,
        start_time: time,
        end_time: time,
        enrolled_student_ids: Sequence[int],
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO class_sessions(teacher_id, subject, classroom, session_date, start_time, end_time)
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                (int(teacher_id), subject, classroom, session_date, start_time, end_time),
            )
            session_id = int(cur.lastrowid)

            if enrolled_student_ids:
                cur.executemany(
                    """
                    INSERT INTO session_enrollments(session_id, student_id, position)
                    VALUES(%s,%s,%s)
                    """,
                    [(session_id, int(sid), pos) for pos, sid in enumerate(enrolled_student_ids)],
                )
            return session_id

    def get_by_id(self, session_id: int) -> Optional[ClassSession]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_SESSION_COLUMNS} FROM class_sessions WHERE session_id=%s",
                (int(session_id),),
            )
            r = fetchone(cur)
            if not r:
                return None
            return self._to_session(r, self._load_roster(cur, int(session_id)))

    def set_credential(self, *, session_id: int, token: str, expires_at: datetime) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE class_sessions
                SET qr_token=%s, qr_expires_at=%s
                WHERE session_id=%s AND is_active=1
                """,
                (token, expires_at, int(session_id)),
            )
            return cur.rowcount > 0

    def increment_attendance(self, session_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE class_sessions SET attendance_count = attendance_count + 1 WHERE session_id=%s",
                (int(session_id),),
            )
            return cur.rowcount > 0

    def deactivate(self, session_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE class_sessions
                SET is_active=0, qr_token=NULL, qr_expires_at=NULL
                WHERE session_id=%s
                """,
                (int(session_id),),
            )
            return cur.rowcount > 0

    def list_for_teacher(self, teacher_id: int) -> Sequence[ClassSession]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_SESSION_COLUMNS}
                FROM class_sessions
                WHERE teacher_id=%s
                ORDER BY session_date DESC, start_time DESC
                """,
                (int(teacher_id),),
            )
            rows = fetchall(cur)
            return [self._to_session(r, self._load_roster(cur, int(r["session_id"]))) for r in rows]

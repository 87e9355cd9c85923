from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..core.enums import AttendanceStatus, VerificationMethod
from ..core.exceptions import AlreadyMarkedError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import DuplicateKeyError, db_cursor, fetchall, normalize_mysql_time
from .model import AttendanceRecord, AttendanceReportRow, NewAttendance
from .repository import AttendanceRepository


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create_unique(self, record: NewAttendance) -> AttendanceRecord:
        # UNIQUE KEY (session_id, student_id, attend_date) serializes racing inserts.
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO attendance_records(
                        session_id, student_id, teacher_id, subject, location,
                        attend_date, check_in_time, status, method, verified
                    )
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (
                        record.session_id,
                        record.student_id,
                        record.teacher_id,
                        record.subject,
                        record.location,
                        record.attend_date,
                        record.check_in_time,
                        record.status.value,
                        record.method.value,
                        1 if record.verified else 0,
                    ),
                )
                attendance_id = int(cur.lastrowid)
        except DuplicateKeyError:
            raise AlreadyMarkedError("Bạn đã điểm danh buổi học này hôm nay rồi")

        return AttendanceRecord(
            attendance_id=attendance_id,
            session_id=record.session_id,
            student_id=record.student_id,
            teacher_id=record.teacher_id,
            subject=record.subject,
            location=record.location,
            attend_date=record.attend_date,
            check_in_time=record.check_in_time,
            status=record.status,
            method=record.method,
            verified=record.verified,
        )

    def list_for_student(
        self,
        *,
        student_id: int,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        subject: Optional[str] = None,
    ) -> Sequence[AttendanceReportRow]:
        clauses = ["ar.student_id=%s"]
        params: list[object] = [int(student_id)]

        if start_date is not None and end_date is not None:
            clauses.append("ar.attend_date BETWEEN %s AND %s")
            params.extend([start_date, end_date])
        if subject:
            clauses.append("ar.subject=%s")
            params.append(subject)

        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT
                    ar.attendance_id, ar.session_id, ar.subject, ar.location,
                    u.full_name AS teacher_name,
                    ar.attend_date, ar.check_in_time, ar.status, ar.method,
                    cs.start_time, cs.end_time
                FROM attendance_records ar
                LEFT JOIN class_sessions cs ON cs.session_id = ar.session_id
                LEFT JOIN users u ON u.user_id = ar.teacher_id
                WHERE {where}
                ORDER BY ar.attend_date DESC, ar.check_in_time DESC
                """,
                tuple(params),
            )
            rows = fetchall(cur)

            out: list[AttendanceReportRow] = []
            for r in rows:
                start_t = normalize_mysql_time(r.get("start_time"))
                end_t = normalize_mysql_time(r.get("end_time"))
                out.append(
                    AttendanceReportRow(
                        attendance_id=int(r["attendance_id"]),
                        session_id=int(r["session_id"]),
                        subject=r["subject"],
                        location=r["location"],
                        teacher_name=r.get("teacher_name"),
                        attend_date=r["attend_date"],
                        check_in_time=r["check_in_time"],
                        start_time=start_t.strftime("%H:%M") if start_t else None,
                        end_time=end_t.strftime("%H:%M") if end_t else None,
                        status=AttendanceStatus(r["status"]),
                        method=VerificationMethod(r["method"]),
                    )
                )
            return out

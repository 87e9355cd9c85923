from __future__ import annotations

from datetime import date, datetime, time, timedelta

import mysql.connector
import pytest

from qr_attendance.attendance.model import NewAttendance
from qr_attendance.attendance.mysql_attendance_repository import MySQLAttendanceRepository
from qr_attendance.core.enums import AttendanceStatus, VerificationMethod
from qr_attendance.core.exceptions import AlreadyMarkedError, UnavailableError
from qr_attendance.database.mysql_base import DuplicateKeyError, db_cursor, normalize_mysql_time


class FakeCursor:
    def __init__(self, error=None):
        self._error = error
        self.closed = False
        self.executed = []
        self.lastrowid = 7

    def execute(self, sql, params=None):
        if self._error is not None:
            raise self._error
        self.executed.append((sql, params))

    def close(self):
        self.closed = True


class FakeConnection:
    def __init__(self, error=None):
        self.cursor_obj = FakeCursor(error)
        self.committed = False
        self.rolled_back = False
        self.closed = False

    def cursor(self, dictionary=True):
        return self.cursor_obj

    def commit(self):
        self.committed = True

    def rollback(self):
        self.rolled_back = True

    def close(self):
        self.closed = True


class FakeFactory:
    def __init__(self, conn):
        self._conn = conn

    def connect(self):
        return self._conn


def _run(conn):
    with db_cursor(FakeFactory(conn)) as (_, cur):
        cur.execute("INSERT INTO attendance_records VALUES (%s)", (1,))


def test_commits_and_closes_on_success():
    conn = FakeConnection()

    _run(conn)

    assert conn.committed and conn.closed and conn.cursor_obj.closed
    assert not conn.rolled_back


def test_duplicate_key_becomes_duplicate_key_error():
    conn = FakeConnection(mysql.connector.IntegrityError(msg="Duplicate entry", errno=1062))

    with pytest.raises(DuplicateKeyError):
        _run(conn)

    assert conn.rolled_back and conn.closed
    assert not conn.committed


def test_other_integrity_error_is_unavailable():
    conn = FakeConnection(mysql.connector.IntegrityError(msg="Cannot add or update a child row", errno=1452))

    with pytest.raises(UnavailableError):
        _run(conn)


def test_driver_error_becomes_unavailable():
    conn = FakeConnection(mysql.connector.Error(msg="Lost connection to MySQL server", errno=2013))

    with pytest.raises(UnavailableError):
        _run(conn)

    assert conn.rolled_back and conn.closed


def test_non_driver_errors_propagate_unchanged():
    conn = FakeConnection(KeyError("user_id"))

    with pytest.raises(KeyError):
        _run(conn)

    assert conn.rolled_back


@pytest.mark.parametrize(
    "value,expected",
    [
        (None, None),
        (time(8, 30), time(8, 30)),
        (timedelta(hours=8, minutes=30, seconds=5), time(8, 30, 5)),
        ("10:00", time(10, 0)),
        ("10:00:15", time(10, 0, 15)),
    ],
)
def test_normalize_mysql_time(value, expected):
    assert normalize_mysql_time(value) == expected


def test_normalize_mysql_time_rejects_garbage():
    with pytest.raises(ValueError):
        normalize_mysql_time("0800")
    with pytest.raises(TypeError):
        normalize_mysql_time(800)


def _new_attendance() -> NewAttendance:
    return NewAttendance(
        session_id=1,
        student_id=10,
        teacher_id=1,
        subject="Lập trình Python",
        location="A1-101",
        attend_date=date(2026, 2, 2),
        check_in_time=datetime(2026, 2, 2, 8, 6, 0),
        status=AttendanceStatus.PRESENT,
        method=VerificationMethod.QR_CODE,
        verified=True,
    )


def test_attendance_insert_returns_record_with_new_id():
    conn = FakeConnection()

    record = MySQLAttendanceRepository(FakeFactory(conn)).create_unique(_new_attendance())

    assert record.attendance_id == 7
    assert record.student_id == 10 and record.verified is True
    [(_, params)] = conn.cursor_obj.executed
    assert params[-3:] == ("present", "qr-code", 1)
    assert conn.committed


def test_attendance_duplicate_key_becomes_already_marked():
    conn = FakeConnection(mysql.connector.IntegrityError(msg="Duplicate entry '1-10-2026-02-02'", errno=1062))

    with pytest.raises(AlreadyMarkedError):
        MySQLAttendanceRepository(FakeFactory(conn)).create_unique(_new_attendance())

    assert conn.rolled_back and not conn.committed


def test_attendance_insert_outage_is_not_already_marked():
    conn = FakeConnection(mysql.connector.Error(msg="Lost connection to MySQL server", errno=2013))

    with pytest.raises(UnavailableError):
        MySQLAttendanceRepository(FakeFactory(conn)).create_unique(_new_attendance())

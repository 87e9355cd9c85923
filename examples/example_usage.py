"""Ví dụ: dùng service layer (không qua Flask).

Teacher issues a QR code, a student scans it, an observer sees both events.
Requires a database seeded with `python scripts/seed_db.py`.
"""

import importlib

from qr_attendance.container import build_container
from qr_attendance.events.broadcaster import channel_for_session
from qr_attendance.settings import get_settings_module


def main():
    settings = importlib.import_module(get_settings_module())
    container = build_container(db_config=settings.DB_CONFIG)

    teacher = container.auth_service.authenticate("teacher", "teacher123")
    student = container.auth_service.authenticate("student1", "student123")
    session = container.session_registry.list_for_teacher(teacher.user_id)[0]

    observed = []
    with container.events.subscribe(channel_for_session(session.session_id), observed.append):
        issued = container.credential_issuer.issue(session.session_id, teacher.user_id)
        result = container.attendance_verifier.verify(issued.payload, student.user_id, student_name=student.full_name)

    print(result.to_dict())
    print([e.name.value for e in observed])


if __name__ == "__main__":
    main()

"""QR Attendance package.

Organized by feature modules (sessions, credentials, attendance, events, ...)
with a thin Flask controller layer over service/repository layers.
"""

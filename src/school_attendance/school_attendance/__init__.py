"""School Attendance package.

This package is organized by feature modules (sessions, attendance, auto_attendance)
with a thin Flask controller layer and service/repository layers.
"""

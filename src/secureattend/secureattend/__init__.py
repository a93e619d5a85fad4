"""SecureAttend attendance package.

Organized by feature modules (employees, schedules, attendance, ...) with a
thin Flask controller layer on top of service/repository layers. The status
resolver in ``attendance.resolver`` is pure and never touches a store.
"""

"""Geofenced classroom attendance.

Feature modules (sessions, attendance, eligibility, ...) follow the same
shape: a thin Flask controller, a service holding the use case, and a
repository protocol with a MySQL implementation.
"""

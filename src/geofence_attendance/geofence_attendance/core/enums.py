from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Account role used for access checks."""

    ADMIN = "admin"
    TEACHER = "teacher"
    STUDENT = "student"


class Weekday(str, Enum):
    """Closed weekday vocabulary shared by schedules and the clock adapter.

    Values are the abbreviations stored in ``class_schedules.days``. Member
    order follows ``datetime.weekday()`` (Monday == 0).
    """

    MON = "Mon"
    TUE = "Tue"
    WED = "Wed"
    THU = "Thu"
    FRI = "Fri"
    SAT = "Sat"
    SUN = "Sun"

    @classmethod
    def from_index(cls, index: int) -> "Weekday":
        return list(cls)[index]


class MarkStatus(str, Enum):
    """Only PRESENT is ever written; absence is the lack of a mark."""

    PRESENT = "present"


class EligibilityFailure(str, Enum):
    """Which audience rule rejected a student."""

    DEPARTMENT = "department"
    SEMESTER = "semester"
    SECTION = "section"

from __future__ import annotations

from ..core.enums import EligibilityFailure
from ..schedules.model import ScheduledClass
from ..users.model import StudentProfile
from .base import EligibilityRule


class SemesterRule(EligibilityRule):
    """Skipped when the student has no semester on file.

    Such a student matches every semester of their department. This is
    lenient on purpose and reported as a skipped check.
    """

    failure = EligibilityFailure.SEMESTER

    def applies(self, student: StudentProfile, schedule: ScheduledClass) -> bool:
        return student.semester is not None

    def passes(self, student: StudentProfile, schedule: ScheduledClass) -> bool:
        return int(student.semester) == int(schedule.semester)

from __future__ import annotations

from ..core.enums import EligibilityFailure
from ..schedules.model import ScheduledClass
from ..users.model import StudentProfile
from .base import EligibilityRule


class DepartmentRule(EligibilityRule):
    """Always enforced; a student without a department matches nothing."""

    failure = EligibilityFailure.DEPARTMENT

    def passes(self, student: StudentProfile, schedule: ScheduledClass) -> bool:
        return student.dept_id is not None and int(student.dept_id) == int(schedule.dept_id)

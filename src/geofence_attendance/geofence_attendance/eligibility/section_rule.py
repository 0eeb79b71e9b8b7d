from __future__ import annotations

from ..core.enums import EligibilityFailure
from ..schedules.model import ScheduledClass
from ..users.model import StudentProfile
from .base import EligibilityRule


class SectionRule(EligibilityRule):
    """Opt-in: only compared when both sides carry a section."""

    failure = EligibilityFailure.SECTION

    def applies(self, student: StudentProfile, schedule: ScheduledClass) -> bool:
        return bool(student.section) and bool(schedule.section)

    def passes(self, student: StudentProfile, schedule: ScheduledClass) -> bool:
        return student.section == schedule.section

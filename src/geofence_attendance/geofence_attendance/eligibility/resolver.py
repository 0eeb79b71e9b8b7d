from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence

from ..schedules.model import ScheduledClass
from ..users.model import StudentProfile
from .base import EligibilityDecision, EligibilityRule
from .department_rule import DepartmentRule
from .section_rule import SectionRule
from .semester_rule import SemesterRule


def _default_rules() -> Sequence[EligibilityRule]:
    return (DepartmentRule(), SemesterRule(), SectionRule())


@dataclass
class EligibilityResolver:
    """Decides whether a student is in the audience of a scheduled class.

    Rules are a conjunction evaluated in order; the first failing rule is
    reported so callers can log why.
    """

    rules: Sequence[EligibilityRule] = field(default_factory=_default_rules)

    def evaluate(self, student: StudentProfile, schedule: ScheduledClass) -> EligibilityDecision:
        skipped = []
        for rule in self.rules:
            if not rule.applies(student, schedule):
                skipped.append(rule.failure)
                continue
            if not rule.passes(student, schedule):
                return EligibilityDecision(eligible=False, failure=rule.failure, skipped=tuple(skipped))
        return EligibilityDecision(eligible=True, skipped=tuple(skipped))

    def is_eligible(self, student: StudentProfile, schedule: ScheduledClass) -> bool:
        return self.evaluate(student, schedule).eligible

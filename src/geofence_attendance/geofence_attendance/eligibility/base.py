from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional, Tuple

from ..core.enums import EligibilityFailure
from ..schedules.model import ScheduledClass
from ..users.model import StudentProfile


@dataclass(frozen=True)
class EligibilityDecision:
    eligible: bool
    failure: Optional[EligibilityFailure] = None
    skipped: Tuple[EligibilityFailure, ...] = ()


class EligibilityRule(ABC):
    """Strategy Pattern: one audience constraint of a scheduled class."""

    failure: EligibilityFailure

    def applies(self, student: StudentProfile, schedule: ScheduledClass) -> bool:
        """Opt-in rules return False when the data to compare is missing."""
        return True

    @abstractmethod
    def passes(self, student: StudentProfile, schedule: ScheduledClass) -> bool:
        raise NotImplementedError
